"""Currency helpers.

Prices are stored in major units (GHS). The payment gateway exchanges
amounts in the smallest currency unit (pesewas).
"""

from decimal import ROUND_HALF_UP, Decimal

PRICE_EPSILON = 0.01


def to_minor_units(amount: float) -> int:
    """Convert a major-unit amount to minor units, rounding to the nearest unit."""
    return int((Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_minor_units(amount: int) -> float:
    return amount / 100


def prices_differ(a: float, b: float) -> bool:
    return abs(a - b) > PRICE_EPSILON


def round_half_up(value: float, places: int = 1) -> float:
    """Round like a shop display does (2.25 -> 2.3), not banker's rounding."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))
