# ==============================================================================
# CAPA DE MODELOS - Estructuras de datos de la vitrina
# ==============================================================================
# Este módulo define todas las entidades del dominio usando dataclasses.
# Los productos son inmutables (frozen) desde el punto de vista del carrito
# y del pipeline de catálogo.
# ==============================================================================

from .entities import (
    # Catálogo
    Product,
    ProductId,
    Review,
    DEFAULT_CATEGORIES,
    SUBCATEGORIES,

    # Carrito
    CartItem,
    ShippingPolicy,
    ShippingState,

    # Filtros
    FilterState,
    PriceRange,
    SortOrder,
)

__all__ = [
    # Catálogo
    'Product',
    'ProductId',
    'Review',
    'DEFAULT_CATEGORIES',
    'SUBCATEGORIES',

    # Carrito
    'CartItem',
    'ShippingPolicy',
    'ShippingState',

    # Filtros
    'FilterState',
    'PriceRange',
    'SortOrder',
]
