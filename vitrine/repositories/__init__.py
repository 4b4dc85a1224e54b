# ==============================================================================
# CAPA DE REPOSITORIOS - Acceso a datos
# ==============================================================================
# Esta capa encapsula el acceso al catálogo (archivo JSON).
# El carrito y la vitrina nunca leen archivos: reciben productos ya cargados.
#
# ESTRUCTURA:
# ├── base.py               → Clases base para JSON (BaseRepository, ListRepository)
# └── catalog_repository.py → Acceso a produtos.json
# ==============================================================================

from .base import BaseRepository, ListRepository
from .catalog_repository import CatalogRepository

__all__ = [
    'BaseRepository',
    'ListRepository',
    'CatalogRepository',
]
