from __future__ import annotations

import re
from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from typing import Any


_DECIMAL_PLACES = Decimal("0.01")
_MAX_MAGNITUDE = Decimal("1e15")
_NUMBER_PREFIX = re.compile(r"^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)")


def _quantize(value: Decimal) -> Decimal:
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() + 4)
        quantized = value.quantize(_DECIMAL_PLACES, rounding=ROUND_HALF_UP)
    if quantized == 0:
        return abs(quantized)
    return quantized


def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if value is None:
        return Decimal("0")
    return Decimal(str(value))


def _german_separators(formatted: str) -> str:
    return formatted.replace(",", "X").replace(".", ",").replace("X", ".")


def parse_with_default(text: Any, default: Any) -> Decimal:
    """
    Lenient number parsing that never raises.

    Uses the leading numeric part of the text ("12abc" -> 12, " 2.5 " -> 2.5)
    and falls back to ``default`` for missing, empty or non-numeric input.
    Infinite values and magnitudes of 1e15 or more also return ``default``:
    no quote line reaches that size, and huge exponents ("1e999999") would
    otherwise blow up the currency formatting.
    """
    fallback = _to_decimal(default)
    if text is None:
        return fallback
    match = _NUMBER_PREFIX.match(str(text))
    if not match:
        return fallback
    try:
        value = Decimal(match.group(1))
    except InvalidOperation:
        return fallback
    if not value.is_finite() or abs(value) >= _MAX_MAGNITUDE:
        return fallback
    return value


def format_currency(amount: Any) -> str:
    """Format an amount the German way, e.g. 1234.5 -> "1.234,50 €"."""
    value = _quantize(_to_decimal(amount))
    return f"{_german_separators(f'{value:,.2f}')} €"


def format_number(value: Any) -> str:
    """German grouping and decimal comma with at most two fraction digits."""
    quantized = _quantize(_to_decimal(value))
    formatted = f"{quantized:,.2f}".rstrip("0").rstrip(".")
    return _german_separators(formatted)


def format_date(value: date) -> str:
    return value.strftime("%d.%m.%Y")
