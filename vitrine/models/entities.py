# ==============================================================================
# ENTIDADES DEL DOMINIO - Definiciones de dataclasses
# ==============================================================================
# Cada entidad representa un concepto de la tienda (catálogo, carrito, filtros).
# Diseñadas para ser independientes del mecanismo de persistencia: el catálogo
# llega desde el repositorio JSON o desde cualquier otro colaborador externo.
# ==============================================================================

from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, FrozenSet, Mapping, Optional, Tuple, Union
from enum import Enum


ProductId = Union[int, str]


# ==============================================================================
# ENUMERACIONES - Estados y tipos válidos
# ==============================================================================

class SortOrder(str, Enum):
    """Órdenes de clasificación disponibles en la vitrina."""
    DEFAULT = "default"
    PRICE_ASC = "price-asc"
    PRICE_DESC = "price-desc"
    NAME_ASC = "name-asc"
    NAME_DESC = "name-desc"

    @classmethod
    def parse(cls, value: Optional[str]) -> 'SortOrder':
        """Convierte un string en SortOrder (valor desconocido -> DEFAULT)."""
        try:
            return cls(value)
        except ValueError:
            return cls.DEFAULT


class ShippingState(str, Enum):
    """Estados del frete de un carrito."""
    EMPTY = "EMPTY"          # Carrito vacío, no hay cálculo
    FIXED = "FIXED"          # Todos los ítems son de la subcategoría de tarifa fija
    UNKNOWN = "UNKNOWN"      # Requiere consulta por CEP
    RESOLVED = "RESOLVED"    # Tarifa variable ya informada


# Categorías por defecto (el orden es el orden de exhibición)
DEFAULT_CATEGORIES: Tuple[str, ...] = ('Feminino', 'Masculino', 'Infantil')

# Subcategorías conocidas por categoría
SUBCATEGORIES: Dict[str, Tuple[str, ...]] = {
    'Feminino': ('Blusas', 'Calças', 'Shorts', 'Vestidos', 'Calçados', 'Acessórios'),
    'Masculino': ('Blusas', 'Calças', 'Bermudas', 'Calçados', 'Acessórios'),
    'Infantil': ('Blusas', 'Calças', 'Shorts', 'Bermudas', 'Vestidos', 'Calçados', 'Acessórios'),
}


# ==============================================================================
# ENTIDADES DE CATÁLOGO
# ==============================================================================

@dataclass(frozen=True)
class Review:
    """
    Avaliação de un producto.

    Attributes:
        id: Identificador de la avaliação
        author: Nombre del autor
        rating: Nota entera de 1 a 5
        comment: Texto libre
        date: Timestamp ISO-8601 (se conserva tal cual)
    """
    id: ProductId
    author: str
    rating: int
    comment: str = ''
    date: str = ''

    def to_dict(self) -> Dict[str, Any]:
        """Convierte a diccionario para persistencia."""
        return {
            'id': self.id,
            'author': self.author,
            'rating': self.rating,
            'comment': self.comment,
            'date': self.date
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Review':
        """Crea instancia desde diccionario."""
        return cls(
            id=data.get('id', 0),
            author=data.get('author', ''),
            rating=int(data.get('rating', 0) or 0),
            comment=data.get('comment', ''),
            date=data.get('date', '')
        )


@dataclass(frozen=True)
class Product:
    """
    Producto del catálogo.
    El precio es el string localizado ("R$ 1.234,56"), nunca un número.

    Attributes:
        id: Identificador único (int o str)
        name: Nombre de exhibición
        price: Precio localizado
        category: Categoría (Feminino, Masculino, Infantil...)
        subcategory: Subcategoría (Blusas, Calçados...)
        image_urls: Localizadores de imágenes (opacos)
        description: Descripción opcional
        reviews: Avaliações opcionales
    """
    id: ProductId
    name: str
    price: str
    category: str
    subcategory: str = ''
    image_urls: Tuple[str, ...] = ()
    description: Optional[str] = None
    reviews: Optional[Tuple[Review, ...]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convierte a diccionario con el formato JSON del catálogo."""
        d = {
            'id': self.id,
            'name': self.name,
            'price': self.price,
            'imageUrls': list(self.image_urls),
            'category': self.category,
            'subcategory': self.subcategory,
        }
        if self.description is not None:
            d['description'] = self.description
        if self.reviews is not None:
            d['reviews'] = [r.to_dict() for r in self.reviews]
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Product':
        """
        Crea instancia desde diccionario.
        Acepta también los formatos legacy de imágenes (imageUrl, imageurls).
        """
        images = data.get('imageUrls')
        if images is None:
            images = data.get('imageurls')
        if images is None:
            single = data.get('imageUrl')
            images = [single] if single else []
        if isinstance(images, str):
            images = [images]

        reviews = data.get('reviews')
        if reviews is not None:
            reviews = tuple(Review.from_dict(r) for r in reviews)

        return cls(
            id=data.get('id', 0),
            name=data.get('name') or '',
            price=data.get('price') or '',
            category=data.get('category') or '',
            subcategory=data.get('subcategory') or '',
            image_urls=tuple(images),
            description=data.get('description'),
            reviews=reviews
        )


# ==============================================================================
# ENTIDADES DE CARRITO
# ==============================================================================

@dataclass
class CartItem:
    """
    Ítem en el carrito: el producto más la cantidad pedida.
    Invariante: quantity >= 1 (el carrito elimina el ítem antes de llegar a 0).
    """
    product: Product
    quantity: int = 1

    @property
    def product_id(self) -> ProductId:
        return self.product.id

    def to_dict(self) -> Dict[str, Any]:
        """Convierte a diccionario para session."""
        d = self.product.to_dict()
        d['quantity'] = self.quantity
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CartItem':
        """Crea instancia desde diccionario de session."""
        return cls(
            product=Product.from_dict(data),
            quantity=int(data.get('quantity', 1) or 1)
        )


@dataclass(frozen=True)
class ShippingPolicy:
    """
    Política de frete inyectada en el carrito.

    Attributes:
        fixed_subcategory: Subcategoría con tarifa fija (dropshipping)
        fixed_rate: Valor del frete fijo
        variable_rate_lookup: Consulta externa CEP -> tarifa (o None)
    """
    fixed_subcategory: str = 'Calçados'
    fixed_rate: float = 35.0
    variable_rate_lookup: Optional[Callable[[str], Optional[float]]] = None


# ==============================================================================
# ENTIDADES DE FILTRO
# ==============================================================================

@dataclass(frozen=True)
class PriceRange:
    """Rango de precio inclusivo en unidades enteras (None = sin límite)."""
    min: Optional[int] = None
    max: Optional[int] = None

    @property
    def is_set(self) -> bool:
        return self.min is not None or self.max is not None

    def contains(self, value: float) -> bool:
        if self.min is not None and value < self.min:
            return False
        if self.max is not None and value > self.max:
            return False
        return True


def _to_bound(raw: Any) -> Optional[int]:
    """Convierte un límite de precio: solo dígitos, cualquier otra cosa es None."""
    if raw is None:
        return None
    if isinstance(raw, int) and not isinstance(raw, bool):
        return raw if raw >= 0 else None
    text = str(raw).strip()
    if not (text.isascii() and text.isdigit()):
        return None
    return int(text)


@dataclass(frozen=True)
class FilterState:
    """
    Estado de los filtros de la vitrina.

    Attributes:
        categories: Categorías activas (OR). Vacío = sin restricción
        subcategories: Subcategorías activas (OR). Vacío = sin restricción
        search: Término de búsqueda libre
        price_range: Rango de precio inclusivo
        sort: Orden de clasificación
    """
    categories: FrozenSet[str] = frozenset()
    subcategories: FrozenSet[str] = frozenset()
    search: str = ''
    price_range: PriceRange = field(default_factory=PriceRange)
    sort: SortOrder = SortOrder.DEFAULT

    @property
    def has_active_filters(self) -> bool:
        """True si hay categoría, subcategoría o límite de precio activos."""
        return bool(self.categories or self.subcategories or self.price_range.is_set)

    def cleared(self) -> 'FilterState':
        """Limpia filtros (mantiene búsqueda y orden)."""
        return replace(
            self,
            categories=frozenset(),
            subcategories=frozenset(),
            price_range=PriceRange()
        )

    @classmethod
    def from_args(cls, args: Mapping[str, Any]) -> 'FilterState':
        """
        Crea el estado desde parámetros de query.

        Args:
            args: MultiDict de Flask o dict simple. Claves: categoria,
                  subcategoria (repetibles), busca, preco_min, preco_max, ordem
        """
        def _many(key):
            if hasattr(args, 'getlist'):
                values = args.getlist(key)
            else:
                values = args.get(key) or []
                if isinstance(values, str):
                    values = [values]
            return frozenset(v for v in values if v)

        return cls(
            categories=_many('categoria'),
            subcategories=_many('subcategoria'),
            search=args.get('busca') or '',
            price_range=PriceRange(
                min=_to_bound(args.get('preco_min')),
                max=_to_bound(args.get('preco_max'))
            ),
            sort=SortOrder.parse(args.get('ordem'))
        )
