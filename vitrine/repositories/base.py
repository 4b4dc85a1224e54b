# ==============================================================================
# REPOSITORIO BASE - Funcionalidad común para acceso a archivos JSON
# ==============================================================================

import json
import os
from typing import Any, Dict, List
from abc import ABC, abstractmethod
import threading


class BaseRepository(ABC):
    """
    Clase base abstracta para los repositorios JSON.
    Lectura/escritura de un archivo con lock de proceso y reemplazo atómico.
    """

    # Lock global para evitar escrituras concurrentes a archivos
    _file_lock = threading.RLock()

    def __init__(self, file_path: str):
        """
        Inicializa el repositorio con la ruta al archivo JSON.

        Args:
            file_path: Ruta absoluta al archivo JSON de datos
        """
        self.file_path = file_path
        self._ensure_file_exists()

    def _ensure_file_exists(self) -> None:
        """Crea el archivo con datos vacíos si no existe."""
        if not os.path.exists(self.file_path):
            os.makedirs(os.path.dirname(self.file_path) or '.', exist_ok=True)
            self._write_raw(self._empty_data())

    @abstractmethod
    def _empty_data(self) -> Any:
        """
        Retorna la estructura de datos vacía para este repositorio.

        Returns:
            Estructura vacía (dict, list, etc.) según el repositorio
        """

    def _read_raw(self) -> Any:
        """
        Lee los datos crudos del archivo JSON.
        Archivo corrupto o inexistente = datos vacíos.
        """
        with self._file_lock:
            try:
                with open(self.file_path, 'r', encoding='utf-8') as f:
                    return json.load(f)
            except (json.JSONDecodeError, FileNotFoundError):
                return self._empty_data()

    def _write_raw(self, data: Any) -> None:
        """
        Escribe datos al archivo JSON.

        Raises:
            OSError: Si hay error de escritura
        """
        with self._file_lock:
            # Escribir a archivo temporal primero para atomicidad
            temp_path = self.file_path + '.tmp'
            try:
                with open(temp_path, 'w', encoding='utf-8') as f:
                    json.dump(data, f, indent=2, ensure_ascii=False)
                os.replace(temp_path, self.file_path)
            except Exception:
                if os.path.exists(temp_path):
                    os.remove(temp_path)
                raise


class ListRepository(BaseRepository):
    """
    Repositorio base para datos almacenados como lista.

    Ejemplo: produtos.json -> [{...}, {...}]
    """

    def _empty_data(self) -> List:
        """Retorna lista vacía."""
        return []

    def get_all(self) -> List[Dict[str, Any]]:
        """
        Obtiene todos los registros.

        Returns:
            Lista con todos los datos
        """
        data = self._read_raw()
        return data if isinstance(data, list) else []

    def save_all(self, data: List[Dict[str, Any]]) -> None:
        """
        Guarda todos los registros (reemplazo completo).

        Args:
            data: Lista completa de datos
        """
        self._write_raw(data)

    def append(self, record: Dict[str, Any]) -> None:
        """
        Agrega un registro al final.

        Args:
            record: Datos del nuevo registro
        """
        data = self.get_all()
        data.append(record)
        self._write_raw(data)
