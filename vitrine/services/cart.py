# ==============================================================================
# MOTOR DEL CARRITO
# ==============================================================================
# Cart: ítems, subtotal, frete, total y mensaje de checkout.
# No conoce Flask ni la sesión; CartService (cart_service.py) es el adaptador.
#
# Ninguna operación pública de Cart lanza excepción: los fallos se resuelven
# en valores por defecto (precio inválido = 0, id desconocido = no-op).
# ==============================================================================

import logging
import math
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from vitrine.models import CartItem, Product, ProductId, ShippingPolicy, ShippingState
from vitrine.performance_logger import profile_function
from vitrine.services.money import format_money, parse_money

logger = logging.getLogger(__name__)

CHECKOUT_HEADER = "Olá! Gostaria de fazer um pedido:"

# Caracteres que encodeURIComponent no escapa
_URI_COMPONENT_SAFE = "-_.!~*'()"


def encode_uri_component(text: str) -> str:
    """Codifica texto para un componente de query (igual que encodeURIComponent)."""
    return quote(text, safe=_URI_COMPONENT_SAFE)


def line_subtotal(item: CartItem) -> float:
    """Precio unitario x cantidad. Una cantidad fuera de rango de float vale inf."""
    try:
        return parse_money(item.product.price) * item.quantity
    except OverflowError:
        logger.warning("Subtotal fuera de rango para el produto %s", item.product_id)
        return math.inf


def _same_id(a: ProductId, b: ProductId) -> bool:
    # La sesión y los requests pueden traer el id como int o como str
    return a == b or str(a) == str(b)


class Cart:
    """
    Carrito de compras.

    Mantiene como máximo un CartItem por id de producto y nunca guarda
    cantidades <= 0. El frete depende de la composición:
      - vacío: sin frete (None)
      - todos los ítems de la subcategoría fija: tarifa fija de la política
      - en otro caso: tarifa informada externamente (por CEP), o None
    """

    def __init__(
        self,
        policy: ShippingPolicy = None,
        items: List[CartItem] = None,
        shipping_rate: Optional[float] = None
    ):
        self.policy = policy or ShippingPolicy()
        self._items: List[CartItem] = list(items or [])
        self._shipping_rate = shipping_rate

    # =========================================================================
    # CONSULTAS
    # =========================================================================

    @property
    def items(self) -> List[CartItem]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    @property
    def is_empty(self) -> bool:
        return not self._items

    @property
    def item_count(self) -> int:
        """Total de unidades (badge del carrito)."""
        return sum(item.quantity for item in self._items)

    def get_item(self, product_id: ProductId) -> Optional[CartItem]:
        for item in self._items:
            if _same_id(item.product_id, product_id):
                return item
        return None

    def _is_all_fixed_shipping(self) -> bool:
        return bool(self._items) and all(
            item.product.subcategory == self.policy.fixed_subcategory
            for item in self._items
        )

    # =========================================================================
    # MUTACIONES
    # =========================================================================

    def _after_mutation(self, was_all_fixed: bool) -> None:
        """Descarta la tarifa variable si cambió la elegibilidad de frete fijo."""
        if not self._items or self._is_all_fixed_shipping() != was_all_fixed:
            self._shipping_rate = None

    def add_item(self, product: Product, quantity: int = 1) -> CartItem:
        """
        Agrega un producto. Si ya existe, suma la cantidad.

        Args:
            product: Producto del catálogo
            quantity: Cantidad a agregar (>= 1, garantizado por el llamador)

        Returns:
            El CartItem resultante
        """
        was_all_fixed = self._is_all_fixed_shipping()
        existing = self.get_item(product.id)
        if existing:
            existing.quantity += quantity
            item = existing
        else:
            item = CartItem(product=product, quantity=quantity)
            self._items.append(item)
        self._after_mutation(was_all_fixed)
        return item

    def update_quantity(self, product_id: ProductId, new_quantity: int) -> None:
        """
        Fija la cantidad absoluta de un ítem.
        new_quantity <= 0 elimina el ítem. Id inexistente: no-op.
        """
        if new_quantity <= 0:
            self.remove_item(product_id)
            return
        item = self.get_item(product_id)
        if item:
            item.quantity = new_quantity

    def remove_item(self, product_id: ProductId) -> None:
        """Elimina el ítem si existe (no-op en caso contrario)."""
        was_all_fixed = self._is_all_fixed_shipping()
        self._items = [i for i in self._items if not _same_id(i.product_id, product_id)]
        self._after_mutation(was_all_fixed)

    def clear(self) -> None:
        """Vacía el carrito y descarta el frete informado."""
        self._items = []
        self._shipping_rate = None

    # =========================================================================
    # FRETE
    # =========================================================================

    def resolve_shipping(self, rate: Any) -> bool:
        """
        Guarda una tarifa variable ya resuelta por un colaborador externo.

        Returns:
            True si la tarifa fue aceptada. Se ignora con carrito vacío,
            con frete fijo o si el valor no es un número >= 0.
        """
        if not self._items or self._is_all_fixed_shipping():
            return False
        try:
            value = float(rate)
        except (TypeError, ValueError):
            return False
        if not math.isfinite(value) or value < 0:
            return False
        self._shipping_rate = value
        return True

    def resolve_shipping_for_postal_code(self, postal_code: str) -> Optional[float]:
        """
        Consulta la tarifa usando el lookup inyectado en la política.

        Returns:
            Frete resultante o None si no se pudo resolver
        """
        if not self._items:
            return None
        if self._is_all_fixed_shipping():
            return self.policy.fixed_rate

        lookup = self.policy.variable_rate_lookup
        if lookup is None:
            return None
        try:
            rate = lookup(postal_code)
        except Exception as e:
            logger.warning("Consulta de frete falhou para CEP %s: %s", postal_code, e)
            return None
        if rate is None or not self.resolve_shipping(rate):
            return None
        return self._shipping_rate

    @property
    def shipping_state(self) -> ShippingState:
        if not self._items:
            return ShippingState.EMPTY
        if self._is_all_fixed_shipping():
            return ShippingState.FIXED
        if self._shipping_rate is None:
            return ShippingState.UNKNOWN
        return ShippingState.RESOLVED

    def compute_shipping(self) -> Optional[float]:
        """Frete actual (None = sin resolver o carrito vacío)."""
        state = self.shipping_state
        if state == ShippingState.FIXED:
            return self.policy.fixed_rate
        if state == ShippingState.RESOLVED:
            return self._shipping_rate
        return None

    # =========================================================================
    # TOTALES
    # =========================================================================

    def compute_subtotal(self) -> float:
        return round(sum(line_subtotal(item) for item in self._items), 2)

    def compute_total(self) -> float:
        return round(self.compute_subtotal() + (self.compute_shipping() or 0), 2)

    def is_checkout_ready(self) -> bool:
        """El checkout solo procede con ítems y frete resuelto."""
        return bool(self._items) and self.compute_shipping() is not None

    # =========================================================================
    # CHECKOUT
    # =========================================================================

    def _checkout_text(self) -> str:
        lines = []
        for item in self._items:
            unit_price = parse_money(item.product.price)
            lines.append(
                f"- {item.quantity}x {item.product.name} "
                f"({format_money(unit_price)} cada) - "
                f"Subtotal: {format_money(line_subtotal(item))}"
            )

        footer = [f"Subtotal: {format_money(self.compute_subtotal())}"]
        shipping = self.compute_shipping()
        if shipping is not None:
            footer.append(f"Frete: {format_money(shipping)}")
        footer.append(f"*Total: {format_money(self.compute_total())}*")

        return "\n\n".join([CHECKOUT_HEADER, "\n".join(lines), "\n".join(footer)])

    @profile_function(name="Montar mensagem de checkout")
    def render_checkout_message(self) -> str:
        """
        Mensaje de pedido ya codificado para usar como parámetro de URL.
        No depende de is_checkout_ready(): quien lo muestra debe consultar
        ese flag por separado.
        """
        return encode_uri_component(self._checkout_text())

    def build_checkout_link(self, base_url: str) -> str:
        """Link de WhatsApp con el mensaje del pedido."""
        return f"{base_url}?text={self.render_checkout_message()}"

    # =========================================================================
    # SERIALIZACIÓN (session)
    # =========================================================================

    def to_dict(self) -> Dict[str, Any]:
        return {
            'items': [item.to_dict() for item in self._items],
            'shipping_rate': self._shipping_rate
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]], policy: ShippingPolicy = None) -> 'Cart':
        data = data or {}
        items = [
            CartItem.from_dict(raw) for raw in data.get('items', [])
            if int(raw.get('quantity', 0) or 0) > 0
        ]
        cart = cls(policy=policy, items=items)
        if data.get('shipping_rate') is not None:
            cart.resolve_shipping(data['shipping_rate'])
        return cart

