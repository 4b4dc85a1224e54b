# ==============================================================================
# CONTENEDOR DE DEPENDENCIAS - Inyección de servicios
# ==============================================================================
# Este módulo proporciona una forma centralizada de obtener instancias
# de repositorios y servicios. Facilita:
#   - Inyección de dependencias (política de frete, categorías)
#   - Testing (cada app de test crea su propio contenedor)
#   - Cambiar el origen del catálogo sin tocar el carrito ni la vitrina
# ==============================================================================

from typing import Any, Dict, Optional

from vitrine.config import build_shipping_policy, checkout_base_url, load_config
from vitrine.models import ShippingPolicy
from vitrine.repositories import CatalogRepository
from vitrine.services import CartService, CatalogService, ProductService


class AppContainer:
    """
    Contenedor de dependencias de la aplicación.

    Uso:
        container = AppContainer(settings)
        cart_service = container.cart_service
    """

    def __init__(self, settings: Optional[Dict[str, Any]] = None):
        """
        Inicializa el contenedor.

        Args:
            settings: Configuración (formato load_config / app.config)
        """
        self.settings = dict(load_config())
        if settings:
            self.settings.update(settings)

        # Inicialización perezosa
        self._catalog_repo: Optional[CatalogRepository] = None
        self._shipping_policy: Optional[ShippingPolicy] = None
        self._catalog_service: Optional[CatalogService] = None
        self._product_service: Optional[ProductService] = None
        self._cart_service: Optional[CartService] = None

    # =========================================================================
    # REPOSITORIOS
    # =========================================================================

    @property
    def catalog_repo(self) -> CatalogRepository:
        """Repositorio del catálogo (singleton)."""
        if self._catalog_repo is None:
            self._catalog_repo = CatalogRepository(self.settings['DATA_DIR'])
        return self._catalog_repo

    # =========================================================================
    # SERVICIOS
    # =========================================================================

    @property
    def shipping_policy(self) -> ShippingPolicy:
        """Política de frete construida desde la configuración."""
        if self._shipping_policy is None:
            self._shipping_policy = build_shipping_policy(self.settings)
        return self._shipping_policy

    @property
    def catalog_service(self) -> CatalogService:
        """Servicio de catálogo (singleton)."""
        if self._catalog_service is None:
            self._catalog_service = CatalogService(
                self.catalog_repo,
                self.settings['CATEGORIES']
            )
        return self._catalog_service

    @property
    def product_service(self) -> ProductService:
        """Servicio de productos admin (singleton)."""
        if self._product_service is None:
            self._product_service = ProductService(
                self.catalog_repo,
                self.settings['CATEGORIES']
            )
        return self._product_service

    @property
    def cart_service(self) -> CartService:
        """Servicio de carrito (singleton)."""
        if self._cart_service is None:
            self._cart_service = CartService(
                self.catalog_service,
                self.shipping_policy,
                checkout_base_url(self.settings['WHATSAPP_NUMBER'])
            )
        return self._cart_service

    def reset(self) -> None:
        """
        Reinicia todas las instancias.
        Útil para testing o para recargar configuración.
        """
        self._catalog_repo = None
        self._shipping_policy = None
        self._catalog_service = None
        self._product_service = None
        self._cart_service = None
