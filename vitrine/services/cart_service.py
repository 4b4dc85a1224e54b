# ==============================================================================
# SERVICIO DE CARRITO
# ==============================================================================
# Adaptador entre la sesión de Flask y el motor Cart (cart.py):
#   - carga el Cart de la sesión, aplica una operación y lo guarda
#   - resume totales para la capa de presentación
# ==============================================================================

import re
from typing import Any, Dict

from flask import session

from vitrine.models import ProductId, ShippingPolicy
from vitrine.services.cart import Cart, line_subtotal
from vitrine.services.money import format_money


class CartService:
    """
    Servicio para gestión del carrito de compras en la sesión.

    Responsabilidades:
    - Cargar/guardar un Cart por sesión (aislamiento entre clientes)
    - Resolver productos en el catálogo antes de agregarlos
    - Resumir el carrito para la capa de presentación

    El carrito se almacena en session['carrinho'].
    """

    SESSION_KEY = 'carrinho'
    MAX_QUANTITY = 999
    MAX_QUANTITY_ERROR = f'Quantidade máxima por produto é {MAX_QUANTITY}'

    def __init__(self, catalog_service, shipping_policy: ShippingPolicy, checkout_url: str):
        """
        Inicializa el servicio de carrito.

        Args:
            catalog_service: Servicio de catálogo (búsqueda de productos)
            shipping_policy: Política de frete inyectada en cada Cart
            checkout_url: URL base del canal de mensajes (WhatsApp)
        """
        self.catalog_service = catalog_service
        self.shipping_policy = shipping_policy
        self.checkout_url = checkout_url

    def _get_cart(self) -> Cart:
        """Obtiene el carrito actual de la sesión."""
        return Cart.from_dict(session.get(self.SESSION_KEY), self.shipping_policy)

    def _save_cart(self, cart: Cart) -> None:
        """Guarda el carrito en la sesión."""
        session[self.SESSION_KEY] = cart.to_dict()
        session.modified = True

    def _summary(self, cart: Cart) -> Dict[str, Any]:
        shipping = cart.compute_shipping()
        items = []
        for item in cart.items:
            items.append({
                'id': item.product_id,
                'nome': item.product.name,
                'preco': item.product.price,
                'quantidade': item.quantity,
                'subcategoria': item.product.subcategory,
                'subtotal': round(line_subtotal(item), 2),
                'subtotal_formatado': format_money(line_subtotal(item)),
            })
        return {
            'itens': items,
            'itens_count': len(cart),
            'total_itens': cart.item_count,
            'subtotal': cart.compute_subtotal(),
            'subtotal_formatado': format_money(cart.compute_subtotal()),
            'frete': shipping,
            'frete_formatado': format_money(shipping) if shipping is not None else None,
            'estado_frete': cart.shipping_state.value,
            'total': cart.compute_total(),
            'total_formatado': format_money(cart.compute_total()),
            'pronto_para_checkout': cart.is_checkout_ready(),
        }

    def get_cart(self) -> Dict[str, Any]:
        """Obtiene el carrito con totales calculados."""
        return {'ok': True, 'carrinho': self._summary(self._get_cart())}

    def add_item(self, product_id: ProductId, quantity: int = 1) -> Dict[str, Any]:
        """
        Agrega un producto del catálogo al carrito.

        Args:
            product_id: ID del producto
            quantity: Cantidad a agregar

        Returns:
            Dict con resultado (ok, error, carrinho)
        """
        if quantity is None or quantity <= 0:
            return {'ok': False, 'error': 'Quantidade deve ser maior que 0'}

        product = self.catalog_service.get_product(product_id)
        if not product:
            return {'ok': False, 'error': 'Produto não encontrado'}

        cart = self._get_cart()
        existing = cart.get_item(product.id)
        if (existing.quantity if existing else 0) + quantity > self.MAX_QUANTITY:
            return {'ok': False, 'error': self.MAX_QUANTITY_ERROR}
        cart.add_item(product, quantity)
        self._save_cart(cart)

        return {
            'ok': True,
            'mensagem': 'Produto adicionado ao carrinho',
            'carrinho': self._summary(cart)
        }

    def update_quantity(self, product_id: ProductId, new_quantity: int) -> Dict[str, Any]:
        """Fija la cantidad (<= 0 elimina el ítem)."""
        if new_quantity > self.MAX_QUANTITY:
            return {'ok': False, 'error': self.MAX_QUANTITY_ERROR}

        cart = self._get_cart()
        cart.update_quantity(product_id, new_quantity)
        self._save_cart(cart)
        return {
            'ok': True,
            'mensagem': 'Quantidade atualizada',
            'carrinho': self._summary(cart)
        }

    def remove_item(self, product_id: ProductId) -> Dict[str, Any]:
        """Elimina un ítem del carrito."""
        cart = self._get_cart()
        cart.remove_item(product_id)
        self._save_cart(cart)
        return {
            'ok': True,
            'mensagem': 'Produto removido do carrinho',
            'carrinho': self._summary(cart)
        }

    def clear_cart(self) -> Dict[str, Any]:
        """Vacía el carrito completamente."""
        cart = self._get_cart()
        cart.clear()
        self._save_cart(cart)
        return {
            'ok': True,
            'mensagem': 'Carrinho esvaziado',
            'carrinho': self._summary(cart)
        }

    def resolve_shipping(self, postal_code: str) -> Dict[str, Any]:
        """
        Calcula el frete para un CEP.

        Args:
            postal_code: CEP con o sin guion (8 dígitos)

        Returns:
            Dict con resultado (ok, error, carrinho)
        """
        digits = re.sub(r'\D', '', postal_code or '')
        if len(digits) != 8:
            return {'ok': False, 'error': 'CEP inválido'}

        cart = self._get_cart()
        if cart.is_empty:
            return {'ok': False, 'error': 'O carrinho está vazio'}

        rate = cart.resolve_shipping_for_postal_code(digits)
        if rate is None:
            return {'ok': False, 'error': 'Frete indisponível para este CEP'}

        self._save_cart(cart)
        return {
            'ok': True,
            'mensagem': 'Frete calculado',
            'carrinho': self._summary(cart)
        }

    def checkout(self) -> Dict[str, Any]:
        """
        Prepara el mensaje de pedido.
        El mensaje se arma siempre; 'pronto' indica si se puede enviar.
        """
        cart = self._get_cart()
        if cart.is_empty:
            return {'ok': False, 'error': 'O carrinho está vazio'}

        ready = cart.is_checkout_ready()
        result = {
            'ok': ready,
            'pronto': ready,
            'mensagem': cart.render_checkout_message(),
            'link': cart.build_checkout_link(self.checkout_url),
            'carrinho': self._summary(cart)
        }
        if not ready:
            result['error'] = 'Informe o CEP para calcular o frete'
        return result
