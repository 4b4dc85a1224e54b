# ==============================================================================
# VALORES MONETARIOS - Parser y formateador de Real (R$)
# ==============================================================================
# Convierte entre el string localizado del catálogo ("R$ 1.234,56") y float.
#
# IMPORTANTE: parse_money NUNCA lanza excepción. Un precio mal formado vale 0.
# Esto puede subestimar totales si el catálogo tiene datos corruptos, pero el
# carrito y la vitrina dependen de no recibir excepciones al calcular precios.
# La validación estricta (admin) usa validate_price_input, no el parser.
# ==============================================================================

import logging
import math
import re
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Any

logger = logging.getLogger(__name__)

CURRENCY_SYMBOL = 'R$'

# Formato aceptado en el alta/edición de productos
PRICE_INPUT_REGEX = re.compile(r'R\$\s\d{1,3}(\.\d{3})*,\d{2}')
PRICE_INPUT_ERROR = 'Formato inválido. Use "R$ 99,90" ou "R$ 1.234,56".'

# Prefijo numérico (el resto del string se ignora, como parseFloat)
_NUMBER_PREFIX = re.compile(r'[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?')

_FORMAT_PRECISION = 400


class PriceValidationError(ValueError):
    """Precio ingresado fuera del formato R$ ddd(.ddd)*,dd."""

    def __init__(self, value: Any, message: str = PRICE_INPUT_ERROR):
        super().__init__(message)
        self.value = value
        self.message = message


def parse_money(value: Any) -> float:
    """
    Convierte un precio localizado en float.

    Quita el símbolo, los separadores de miles ('.') y cambia la coma decimal
    por punto. Cualquier falla devuelve 0.0.

    Args:
        value: String como "R$ 1.234,56"

    Returns:
        Valor numérico (0.0 si no se puede interpretar)
    """
    if not isinstance(value, str):
        logger.debug("Precio no es string: %r", value)
        return 0.0

    text = (
        value.replace(CURRENCY_SYMBOL, '', 1)
        .strip()
        .replace('.', '')
        .replace(',', '.', 1)
    )
    match = _NUMBER_PREFIX.match(text)
    if not match:
        logger.debug("Precio mal formado, usando 0: %r", value)
        return 0.0

    number = float(match.group(0))
    if not math.isfinite(number):
        return 0.0
    return number


def format_money(amount: float) -> str:
    """
    Formatea un valor como Real brasileño: "R$ 1.234,56".

    Siempre dos decimales (redondeo half-up), '.' para miles, ',' decimal.
    Negativos como "-R$ 1,00".
    """
    try:
        number = float(amount)
    except (TypeError, ValueError):
        number = 0.0
    if not math.isfinite(number):
        number = 0.0

    # Todo float finito cabe en 309 dígitos enteros
    with localcontext() as ctx:
        ctx.prec = _FORMAT_PRECISION
        value = Decimal(repr(number)).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
        sign = '-' if value < 0 else ''
        integer_part, fraction = f"{abs(value):.2f}".split('.')
    grouped = f"{int(integer_part):,}".replace(',', '.')
    return f"{sign}{CURRENCY_SYMBOL} {grouped},{fraction}"


def is_valid_price_input(value: Any) -> bool:
    """Verifica si el precio ingresado tiene el formato estricto."""
    return isinstance(value, str) and PRICE_INPUT_REGEX.fullmatch(value) is not None


def validate_price_input(value: Any) -> str:
    """
    Valida un precio ingresado en el panel admin.
    A diferencia de parse_money, rechaza el valor en vez de asumir 0.

    Args:
        value: Precio tal como fue digitado

    Returns:
        El mismo string (validado)

    Raises:
        PriceValidationError: Si no coincide con R$ ddd(.ddd)*,dd
    """
    if not is_valid_price_input(value):
        raise PriceValidationError(value)
    return value
