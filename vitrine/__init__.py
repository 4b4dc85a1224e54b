# ==============================================================================
# VITRINE - Carrito, checkout por WhatsApp y vitrina de productos
# ==============================================================================
# Paquete principal. Punto de entrada web: vitrine.main.create_app
# ==============================================================================

__version__ = "1.0.0"
