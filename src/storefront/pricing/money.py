"""Money arithmetic: every amount is a Decimal with two places, rounded half-up."""

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value) -> Decimal:
    """Coerce ints, floats, strings and Decimals to a 2-place Decimal."""
    if value is None:
        raise TypeError("Money amount cannot be None")
    if isinstance(value, float):
        value = repr(value)
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def optional_money(value) -> Decimal | None:
    return None if value is None else to_money(value)
