# ==============================================================================
# SERVICIO DE PRODUCTOS (ADMIN)
# ==============================================================================
# Alta, edición, baja e importación/exportación JSON del catálogo.
# El precio se valida con validate_price_input (estricto): un precio fuera
# del formato "R$ 1.234,56" impide guardar. El carrito nunca pasa por aquí.
# ==============================================================================

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from vitrine.models import DEFAULT_CATEGORIES, Product
from vitrine.repositories import CatalogRepository
from vitrine.services.money import PriceValidationError, validate_price_input

logger = logging.getLogger(__name__)


class ProductService:
    """
    Servicio para gestión del catálogo desde el panel admin.

    Responsabilidades:
    - Validar datos de producto (campos obligatorios, categoría, precio)
    - CRUD sobre el repositorio
    - Importar (reemplazo completo) y exportar el catálogo en JSON
    """

    def __init__(
        self,
        catalog_repo: CatalogRepository,
        categories: Sequence[str] = DEFAULT_CATEGORIES
    ):
        """
        Inicializa el servicio de productos.

        Args:
            catalog_repo: Repositorio del catálogo
            categories: Categorías válidas
        """
        self.catalog_repo = catalog_repo
        self.categories = tuple(categories)

    # =========================================================================
    # VALIDACIÓN
    # =========================================================================

    def validate_product(self, data: Any) -> Tuple[Optional[Dict[str, Any]], Optional[str]]:
        """
        Valida y normaliza los datos de un producto.

        Args:
            data: Diccionario recibido del formulario o del JSON importado

        Returns:
            Tupla (registro_limpio, None) o (None, motivo_del_error)
        """
        if not isinstance(data, dict):
            return None, 'Produto deve ser um objeto JSON'

        name = data.get('name')
        if not isinstance(name, str) or not name.strip():
            return None, 'Nome é obrigatório'

        try:
            validate_price_input(data.get('price'))
        except PriceValidationError as e:
            return None, e.message

        category = data.get('category')
        if category not in self.categories:
            return None, f"Categoria inválida. Use: {', '.join(self.categories)}"

        subcategory = data.get('subcategory')
        if not isinstance(subcategory, str) or not subcategory.strip():
            return None, 'Subcategoria é obrigatória'

        for review in data.get('reviews') or []:
            rating = review.get('rating') if isinstance(review, dict) else None
            if not isinstance(rating, int) or isinstance(rating, bool) or not 1 <= rating <= 5:
                return None, 'Avaliação deve ter nota inteira de 1 a 5'

        record = Product.from_dict({**data, 'name': name.strip()}).to_dict()
        record.pop('id', None)
        return record, None

    # =========================================================================
    # CRUD
    # =========================================================================

    def list_products(self) -> List[Dict[str, Any]]:
        """Todos los productos como diccionarios."""
        return self.catalog_repo.get_all()

    def create_product(self, data: Any) -> Dict[str, Any]:
        """
        Crea un producto.

        Returns:
            Dict con resultado (ok, error, produto)
        """
        record, error = self.validate_product(data)
        if error:
            return {'ok': False, 'error': error}

        saved = self.catalog_repo.create(record)
        logger.info("Produto criado: %s (%s)", saved['id'], saved['name'])
        return {'ok': True, 'mensagem': 'Produto criado', 'produto': saved}

    def update_product(self, product_id: Any, updates: Any) -> Dict[str, Any]:
        """
        Actualiza un producto existente (los datos combinados se validan).

        Returns:
            Dict con resultado (ok, error, produto)
        """
        current = self.catalog_repo.get_by_id(product_id)
        if not current:
            return {'ok': False, 'error': 'Produto não encontrado'}
        if not isinstance(updates, dict):
            return {'ok': False, 'error': 'Produto deve ser um objeto JSON'}

        record, error = self.validate_product({**current, **updates})
        if error:
            return {'ok': False, 'error': error}

        saved = self.catalog_repo.update(product_id, record)
        return {'ok': True, 'mensagem': 'Produto atualizado', 'produto': saved}

    def delete_product(self, product_id: Any) -> Optional[Dict[str, Any]]:
        """
        Elimina un producto.

        Returns:
            Datos del producto eliminado o None
        """
        removed = self.catalog_repo.delete(product_id)
        if removed:
            logger.info("Produto excluído: %s", product_id)
        return removed

    # =========================================================================
    # IMPORTAR / EXPORTAR
    # =========================================================================

    def import_products(self, payload: Any) -> Dict[str, Any]:
        """
        Reemplaza el catálogo con una lista de productos.
        Los IDs recibidos se descartan y se reasignan en orden.
        Un solo producto inválido cancela toda la importación.

        Returns:
            Dict con resultado (ok, error, importados)
        """
        if not isinstance(payload, list):
            return {'ok': False, 'error': 'O arquivo JSON deve conter um array de produtos.'}

        cleaned = []
        for index, data in enumerate(payload, start=1):
            record, error = self.validate_product(data)
            if error:
                return {'ok': False, 'error': f"Produto {index}: {error}"}
            cleaned.append(record)

        saved = self.catalog_repo.replace_all(cleaned)
        logger.info("Catálogo importado: %d produtos", len(saved))
        return {
            'ok': True,
            'mensagem': f"{len(saved)} produtos importados com sucesso!",
            'importados': len(saved)
        }

    def export_products(self) -> List[Dict[str, Any]]:
        """Catálogo completo en el formato JSON de importación."""
        return [Product.from_dict(raw).to_dict() for raw in self.catalog_repo.get_all()]
