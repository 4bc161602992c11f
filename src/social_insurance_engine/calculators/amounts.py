"""Yen amount sanitizing and rounding.

Rounding conventions:
- Standard remuneration averages: nearest 1000 yen, half-up
- Standard bonus amount: floored to 1000 yen
- Premium shares: base x rate, floored to the yen
"""

from __future__ import annotations

from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Iterable

THOUSAND = Decimal("1000")


def to_decimal(value: Any) -> Decimal | None:
    """Convert a number-like value to Decimal, or None if it is not finite."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return None
    if not number.is_finite():
        return None
    return number


def sanitize_amount(value: Any) -> int:
    """Normalize an amount to a non-negative integer yen value.

    None, NaN, infinities, non-numbers and negatives become 0.
    """
    number = to_decimal(value)
    if number is None or number < 0:
        return 0
    return int(number.to_integral_value(rounding=ROUND_FLOOR))


def round_to_thousand(amount: int | Decimal) -> int:
    """Round to the nearest 1000 yen (half-up)."""
    scaled = (Decimal(amount) / THOUSAND).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(scaled * THOUSAND)


def floor_to_thousand(amount: int | Decimal) -> int:
    """Floor to 1000 yen."""
    scaled = (Decimal(amount) / THOUSAND).to_integral_value(rounding=ROUND_FLOOR)
    return int(scaled * THOUSAND)


def premium_share(base: int, rate: Decimal) -> int:
    """Compute floor(base x rate) in yen."""
    if base <= 0 or rate <= 0:
        return 0
    return int((Decimal(base) * rate).to_integral_value(rounding=ROUND_FLOOR))


def average(values: Iterable[int]) -> Decimal:
    """Arithmetic mean as Decimal (0 for an empty input)."""
    items = list(values)
    if not items:
        return Decimal("0")
    return Decimal(sum(items)) / Decimal(len(items))
