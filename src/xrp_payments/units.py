"""XRP / drops unit conversion and amount parsing."""

from __future__ import annotations

from decimal import ROUND_DOWN, Decimal, InvalidOperation

from xrp_payments.constants import DECIMAL_PLACES

Numeric = str | int | Decimal


def to_decimal(value: Numeric) -> Decimal:
    """Parse a numeric value into a Decimal, returning NaN for unparseable input."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        return Decimal("NaN")
    try:
        return Decimal(str(value).strip())
    except InvalidOperation:
        return Decimal("NaN")


def format_decimal(value: Decimal) -> str:
    """Render a Decimal without exponent notation or trailing zeros."""
    if value == 0:
        return "0"
    return format(value.normalize(), "f")


def to_main_denomination_decimal(amount: Numeric) -> Decimal:
    """Drops -> XRP."""
    return to_decimal(amount).scaleb(-DECIMAL_PLACES)


def to_main_denomination_string(amount: Numeric) -> str:
    return format_decimal(to_main_denomination_decimal(amount))


def to_base_denomination_decimal(amount: Numeric) -> Decimal:
    """XRP -> drops, truncated to a whole number of drops."""
    return to_decimal(amount).scaleb(DECIMAL_PLACES).quantize(Decimal(1), rounding=ROUND_DOWN)


def to_base_denomination_string(amount: Numeric) -> str:
    return format_decimal(to_base_denomination_decimal(amount))
