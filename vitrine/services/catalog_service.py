# ==============================================================================
# SERVICIO DE CATÁLOGO - Pipeline de filtros y orden de la vitrina
# ==============================================================================
# query() aplica las etapas en orden fijo:
#   1. categoría  2. búsqueda  3. subcategoría  4. rango de precio  5. orden
# group_by_category() reparte el resultado respetando el orden de exhibición
# de las categorías, no el orden de los datos.
# ==============================================================================

import unicodedata
from typing import Dict, Iterable, List, Optional, Sequence

from vitrine.models import DEFAULT_CATEGORIES, FilterState, Product, ProductId, SortOrder
from vitrine.performance_logger import profile_function
from vitrine.services.money import parse_money


def _name_sort_key(name: str):
    """
    Clave de orden "humana" para nombres con acentos.
    Primero sin acentos ni mayúsculas, luego acentos, luego minúsculas antes.
    """
    decomposed = unicodedata.normalize('NFKD', name or '')
    base = ''.join(c for c in decomposed if not unicodedata.combining(c))
    return (base.casefold(), decomposed.casefold(), (name or '').swapcase())


def _matches_search(product: Product, term: str) -> bool:
    needle = term.casefold()
    return needle in product.name.casefold() or needle in product.subcategory.casefold()


@profile_function(name="Filtrar vitrine")
def query(products: Iterable[Product], filters: FilterState) -> List[Product]:
    """
    Filtra y ordena el catálogo.

    Args:
        products: Catálogo completo (no se modifica)
        filters: Estado de filtros

    Returns:
        Lista filtrada y ordenada
    """
    result = list(products)

    if filters.categories:
        result = [p for p in result if p.category in filters.categories]

    if filters.search:
        result = [p for p in result if _matches_search(p, filters.search)]

    if filters.subcategories:
        result = [p for p in result if p.subcategory in filters.subcategories]

    if filters.price_range.is_set:
        result = [p for p in result if filters.price_range.contains(parse_money(p.price))]

    # sorted() es estable, también con reverse=True
    if filters.sort == SortOrder.PRICE_ASC:
        result = sorted(result, key=lambda p: parse_money(p.price))
    elif filters.sort == SortOrder.PRICE_DESC:
        result = sorted(result, key=lambda p: parse_money(p.price), reverse=True)
    elif filters.sort == SortOrder.NAME_ASC:
        result = sorted(result, key=lambda p: _name_sort_key(p.name))
    elif filters.sort == SortOrder.NAME_DESC:
        result = sorted(result, key=lambda p: _name_sort_key(p.name), reverse=True)

    return result


def group_by_category(
    products: Iterable[Product],
    category_order: Sequence[str] = DEFAULT_CATEGORIES
) -> Dict[str, List[Product]]:
    """
    Agrupa productos por categoría.

    Las categorías configuradas van primero y en su orden; las desconocidas
    después, en el orden en que aparecen. Solo se incluyen grupos con productos.
    """
    buckets: Dict[str, List[Product]] = {}
    for product in products:
        buckets.setdefault(product.category, []).append(product)

    grouped: Dict[str, List[Product]] = {}
    for category in category_order:
        if category in buckets:
            grouped[category] = buckets.pop(category)
    grouped.update(buckets)
    return grouped


def available_subcategories(
    products: Iterable[Product],
    category_order: Sequence[str] = DEFAULT_CATEGORIES
) -> Dict[str, List[str]]:
    """
    Subcategorías presentes en el catálogo, por categoría (opciones del filtro).
    Cada categoría configurada aparece, aunque no tenga productos.
    """
    found: Dict[str, set] = {category: set() for category in category_order}
    for product in products:
        if product.subcategory:
            found.setdefault(product.category, set()).add(product.subcategory)
    return {
        category: sorted(values, key=_name_sort_key)
        for category, values in found.items()
    }


class CatalogService:
    """
    Servicio de lectura del catálogo.

    Responsabilidades:
    - Convertir los registros del repositorio en Product
    - Ejecutar el pipeline de filtros y agrupar por categoría
    - Listar opciones de subcategoría para la barra de filtros
    """

    def __init__(self, catalog_repo, categories: Sequence[str] = DEFAULT_CATEGORIES):
        """
        Inicializa el servicio de catálogo.

        Args:
            catalog_repo: Repositorio del catálogo
            categories: Orden de exhibición de las categorías
        """
        self.catalog_repo = catalog_repo
        self.categories = tuple(categories)

    def list_products(self) -> List[Product]:
        """Obtiene todos los productos del catálogo."""
        return [Product.from_dict(raw) for raw in self.catalog_repo.get_all()]

    def get_product(self, product_id: ProductId) -> Optional[Product]:
        """
        Obtiene un producto por su ID.

        Returns:
            Product o None si no existe
        """
        raw = self.catalog_repo.get_by_id(product_id)
        return Product.from_dict(raw) if raw else None

    def search(self, filters: FilterState) -> Dict[str, List[Product]]:
        """Filtra, ordena y agrupa el catálogo."""
        return group_by_category(query(self.list_products(), filters), self.categories)

    def subcategory_options(self) -> Dict[str, List[str]]:
        """Opciones de subcategoría por categoría."""
        return available_subcategories(self.list_products(), self.categories)
