"""Numeric helpers shared by services and the store."""

from decimal import ROUND_HALF_UP, Decimal


def round_half_up(value: float, places: int = 1) -> float:
    """Round halves away from zero on the decimal value (0.25 -> 0.3, not 0.2)."""
    step = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(step, rounding=ROUND_HALF_UP))
