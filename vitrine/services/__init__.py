# ==============================================================================
# CAPA DE SERVICIOS - Lógica de negocio
# ==============================================================================
# PRINCIPIOS:
# 1. El carrito y la vitrina son cálculo puro sobre datos recibidos
# 2. Las rutas (controllers) solo llaman a servicios
# 3. Los servicios NO conocen el tipo de almacenamiento
#
# ESTRUCTURA:
# ├── money.py           → Parser/formateador de R$ y validación estricta
# ├── cart.py            → Cart (motor puro, sin Flask)
# ├── cart_service.py    → CartService (carrito en la sesión de Flask)
# ├── catalog_service.py → Pipeline de filtros/orden y agrupación
# └── product_service.py → CRUD admin, importar/exportar JSON
# ==============================================================================

from vitrine.services.money import (
    PriceValidationError,
    format_money,
    is_valid_price_input,
    parse_money,
    validate_price_input,
)
from vitrine.services.cart import Cart, encode_uri_component, line_subtotal
from vitrine.services.cart_service import CartService
from vitrine.services.catalog_service import (
    CatalogService,
    available_subcategories,
    group_by_category,
    query,
)
from vitrine.services.product_service import ProductService

__all__ = [
    'PriceValidationError',
    'format_money',
    'is_valid_price_input',
    'parse_money',
    'validate_price_input',
    'Cart',
    'CartService',
    'encode_uri_component',
    'line_subtotal',
    'CatalogService',
    'available_subcategories',
    'group_by_category',
    'query',
    'ProductService',
]
