# ==============================================================================
# REPOSITORIO DE CATÁLOGO
# ==============================================================================
# Encapsula todo el acceso a produtos.json
# El catálogo se almacena como lista en el orden de exhibición por defecto.
# ==============================================================================

import os
from typing import Any, Dict, List, Optional

from vitrine.repositories.base import ListRepository


class CatalogRepository(ListRepository):
    """
    Repositorio para el catálogo de productos.

    Formato de datos en produtos.json:
    [
        {
            "id": 1,
            "name": "Slip On (1ª linha)",
            "price": "R$ 100,00",
            "imageUrls": ["..."],
            "category": "Feminino",
            "subcategory": "Calçados",
            "description": "...",
            "reviews": [...]
        }
    ]
    """

    def __init__(self, base_path: str):
        """
        Inicializa el repositorio de catálogo.

        Args:
            base_path: Directorio de datos
        """
        file_path = os.path.join(base_path, 'produtos.json')
        super().__init__(file_path)

    def get_by_id(self, product_id: Any) -> Optional[Dict[str, Any]]:
        """
        Obtiene un producto por su ID.

        Args:
            product_id: ID del producto (int o str)

        Returns:
            Datos del producto o None si no existe
        """
        for record in self.get_all():
            if str(record.get('id')) == str(product_id):
                return record
        return None

    def get_next_id(self) -> int:
        """Siguiente ID numérico disponible."""
        ids = []
        for record in self.get_all():
            try:
                ids.append(int(record.get('id')))
            except (TypeError, ValueError):
                continue
        return max(ids, default=0) + 1

    def create(self, record: Dict[str, Any]) -> Dict[str, Any]:
        """
        Agrega un producto con un ID nuevo.

        Returns:
            Registro guardado (con id)
        """
        record = dict(record)
        record['id'] = self.get_next_id()
        self.append(record)
        return record

    def update(self, product_id: Any, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Actualiza un producto.

        Returns:
            Registro actualizado o None si no existe
        """
        data = self.get_all()
        for record in data:
            if str(record.get('id')) == str(product_id):
                # El ID nunca cambia
                record.update({k: v for k, v in updates.items() if k != 'id'})
                self.save_all(data)
                return record
        return None

    def delete(self, product_id: Any) -> Optional[Dict[str, Any]]:
        """
        Elimina un producto.

        Returns:
            Datos del producto eliminado o None si no existía
        """
        data = self.get_all()
        for index, record in enumerate(data):
            if str(record.get('id')) == str(product_id):
                removed = data.pop(index)
                self.save_all(data)
                return removed
        return None

    def replace_all(self, records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """
        Reemplaza el catálogo completo asignando IDs secuenciales.

        Returns:
            Registros guardados
        """
        saved = []
        for index, record in enumerate(records, start=1):
            record = {k: v for k, v in record.items() if k != 'id'}
            saved.append({'id': index, **record})
        self.save_all(saved)
        return saved
