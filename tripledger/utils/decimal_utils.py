"""Decimal arithmetic helpers"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

CENT = Decimal("0.01")


def round_decimal(value: Decimal, decimal_places: int = 2) -> Decimal:
    """
    Round a decimal value to specified decimal places.

    Args:
        value: Decimal value to round
        decimal_places: Number of decimal places (default 2)

    Returns:
        Rounded decimal value
    """
    quantize_value = Decimal(10) ** -decimal_places
    return value.quantize(quantize_value, rounding=ROUND_HALF_UP)


def sum_decimals(values: Iterable[Decimal]) -> Decimal:
    """
    Sum decimal values.

    Args:
        values: Decimal values

    Returns:
        Sum of all values
    """
    return sum(values, Decimal("0"))


def amounts_match(left: Decimal, right: Decimal) -> bool:
    """True when two money amounts agree within one cent."""
    return abs(left - right) <= CENT
