"""Money conversions between dollar amounts and stored integer cents"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Union

CENT = Decimal("0.01")

AmountLike = Union[Decimal, int, float, str]


def to_cents(value: AmountLike) -> int:
    """
    Convert a dollar amount to whole cents, rounding half up.

    Floats go through their shortest repr so 300.3 becomes 30030, not 30029.

    Examples:
        >>> to_cents("100.10")
        10010
        >>> to_cents(-500.0)
        -50000
    """
    amount = value if isinstance(value, Decimal) else Decimal(str(value))
    return int(amount.quantize(CENT, rounding=ROUND_HALF_UP) * 100)


def from_cents(cents: int) -> float:
    """Dollar amount for display and API responses"""
    return float(Decimal(int(cents)) / 100)
