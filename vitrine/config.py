# ==============================================================================
# CONFIGURACIÓN - Variables de entorno de la tienda
# ==============================================================================
# Todo lo que antes vivía en el almacenamiento global del navegador (frete fijo,
# categorías, número de WhatsApp) se lee aquí y se inyecta en los servicios.
#
# Ejemplo:
#   export STORE_SECRET_KEY="clave_larga_y_aleatoria"
#   export STORE_FIXED_SHIPPING_RATE="35"
# ==============================================================================

import os
from typing import Any, Dict, Optional

from vitrine.models import DEFAULT_CATEGORIES, ShippingPolicy


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return float(raw.replace(',', '.'))
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ('1', 'true', 'yes', 'on')


_DEFAULT_SECRET = "vitrine_dev_secret_key_change_in_production"
SECRET_KEY = os.environ.get("STORE_SECRET_KEY") or _DEFAULT_SECRET

DATA_DIR = os.environ.get("STORE_DATA_DIR", os.path.join(os.getcwd(), "data"))
LOGS_DIR = os.environ.get("STORE_LOGS_DIR", os.path.join(os.getcwd(), "logs"))
ENABLE_PROFILING = _env_bool("STORE_ENABLE_PROFILING", True)

# Orden de exhibición de las categorías
CATEGORIES = tuple(
    c.strip() for c in os.environ.get("STORE_CATEGORIES", ",".join(DEFAULT_CATEGORIES)).split(",")
    if c.strip()
)

# Frete
FIXED_SHIPPING_SUBCATEGORY = os.environ.get("STORE_FIXED_SHIPPING_SUBCATEGORY", "Calçados")
FIXED_SHIPPING_RATE = _env_float("STORE_FIXED_SHIPPING_RATE", 35.0)
# Tarifa plana para CEPs (None = sin consulta configurada)
VARIABLE_SHIPPING_RATE = _env_float("STORE_VARIABLE_SHIPPING_RATE", None)

# Checkout por WhatsApp
WHATSAPP_NUMBER = os.environ.get("STORE_WHATSAPP_NUMBER", "5531991687046")


def load_config() -> Dict[str, Any]:
    """
    Devuelve la configuración actual como diccionario (formato app.config).
    """
    return {
        'SECRET_KEY': SECRET_KEY,
        'DATA_DIR': DATA_DIR,
        'LOGS_DIR': LOGS_DIR,
        'ENABLE_PROFILING': ENABLE_PROFILING,
        'CATEGORIES': CATEGORIES,
        'FIXED_SHIPPING_SUBCATEGORY': FIXED_SHIPPING_SUBCATEGORY,
        'FIXED_SHIPPING_RATE': FIXED_SHIPPING_RATE,
        'VARIABLE_SHIPPING_RATE': VARIABLE_SHIPPING_RATE,
        'WHATSAPP_NUMBER': WHATSAPP_NUMBER,
    }


def checkout_base_url(number: str) -> str:
    """URL base del chat de WhatsApp para el número configurado."""
    return f"https://wa.me/{number}"


def build_shipping_policy(settings: Dict[str, Any]) -> ShippingPolicy:
    """
    Crea la política de frete a partir de la configuración.

    Si VARIABLE_SHIPPING_RATE está definido, la consulta por CEP devuelve esa
    tarifa plana; si no, la consulta no resuelve nada.
    """
    flat_rate = settings.get('VARIABLE_SHIPPING_RATE')
    lookup = None
    if flat_rate is not None:
        def lookup(postal_code: str) -> Optional[float]:
            return float(flat_rate)

    return ShippingPolicy(
        fixed_subcategory=settings.get('FIXED_SHIPPING_SUBCATEGORY', 'Calçados'),
        fixed_rate=float(settings.get('FIXED_SHIPPING_RATE', 35.0)),
        variable_rate_lookup=lookup
    )
