"""Currency helpers.

Stripe amounts are integers in minor units (pence); order summaries carry
major-unit amounts formatted to two decimal places.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

TWO_PLACES = Decimal("0.01")


def to_decimal(value: object, default: Decimal = Decimal("0")) -> Decimal:
    """Coerce a JSON-ish value to Decimal, returning default when malformed."""
    if isinstance(value, bool) or value is None:
        return default
    try:
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return default
    return result if result.is_finite() else default


def to_minor_units(amount: object) -> int:
    """Convert a major-unit amount to minor units, rounding half up.

    Args:
        amount: Amount in pounds (int, float, Decimal or numeric string).

    Returns:
        Amount in pence.
    """
    return int((to_decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_minor_units(amount: object) -> Decimal:
    """Convert minor units to a major-unit Decimal; malformed input is zero."""
    if isinstance(amount, bool) or not isinstance(amount, (int, float, Decimal, str)):
        return Decimal("0")
    return to_decimal(amount) / 100


def round_amount(amount: Decimal) -> Decimal:
    """Round to two decimal places using half-up rounding."""
    return amount.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def format_amount(amount: object) -> str:
    """Format an amount as a two-decimal string, e.g. ``"22.00"``."""
    value = amount if isinstance(amount, Decimal) else to_decimal(amount)
    return str(round_amount(value))
