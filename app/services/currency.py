"""
Conversão de valores monetários em Real (BRL).

Os provedores de pagamento enviam preços formatados ("R$ 1.234,56"):
ponto separa milhares e vírgula separa os centavos.
"""

from decimal import Decimal, InvalidOperation
import re

from app.core.exceptions import ParseError

CENTS = Decimal("0.01")

# Maior valor que cabe em Numeric(10, 2)
MAX_AMOUNT = Decimal("99999999.99")

_CURRENCY_PREFIX = re.compile(r"^(R\$|BRL)\s*", re.IGNORECASE)

# 1.234.567,89 | 1234567,89 | 1234 | 0,5
_BRL_AMOUNT = re.compile(r"(\d{1,3}(\.\d{3})+|\d+)(,\d{1,2})?")


def parse_brl(raw: str) -> Decimal:
    """
    Converte um preço formatado em Decimal com duas casas.

    >>> parse_brl("R$ 1.234,56")
    Decimal('1234.56')

    Levanta ParseError se o texto não puder ser reduzido a um decimal válido
    ou se passar de MAX_AMOUNT.
    """
    if not isinstance(raw, str):
        raise ParseError(f"Valor monetário inválido: {raw!r}")

    text = raw.replace("\xa0", " ").strip()
    text = _CURRENCY_PREFIX.sub("", text).strip()

    if not text or not _BRL_AMOUNT.fullmatch(text):
        raise ParseError(f"Valor monetário inválido: {raw!r}")

    normalized = text.replace(".", "").replace(",", ".")
    try:
        value = Decimal(normalized).quantize(CENTS)
    except InvalidOperation:
        raise ParseError(f"Valor monetário inválido: {raw!r}")

    if value > MAX_AMOUNT:
        raise ParseError(f"Valor monetário acima do limite: {raw!r}")
    return value
