"""Cent-based money helpers.

Every amount inside the engine is an integer number of cents. Rounding is
half away from zero, matching how the IRS rounds to the dollar.
"""

import math

from .schemas import InvalidInputError


def round_cents(amount: float) -> int:
    """Round a fractional cent amount to whole cents (0.5 rounds away from zero)."""
    if not math.isfinite(amount):
        raise InvalidInputError("amount", f"must be finite, got {amount}")
    if amount >= 0:
        return int(math.floor(amount + 0.5))
    return -int(math.floor(-amount + 0.5))


def dollars_to_cents(dollars: float) -> int:
    """Convert dollars to cents. Example: 1234.56 -> 123456"""
    if isinstance(dollars, bool) or not isinstance(dollars, (int, float)):
        raise InvalidInputError("amount", f"must be a number, got {dollars!r}")
    return round_cents(dollars * 100)


def cents_to_dollars(cents: int) -> float:
    return cents / 100


def format_cents(cents: int, compact: bool = False) -> str:
    """Format cents as a dollar string.

    Examples:
        format_cents(123456)                -> "$1,234.56"
        format_cents(-250000000, compact=True) -> "-$2.5M"
    """
    sign = "-" if cents < 0 else ""
    dollars = abs(cents) / 100

    if not compact:
        return f"{sign}${dollars:,.2f}"

    if dollars >= 1_000_000:
        millions = f"{dollars / 1_000_000:.1f}".replace(".0", "")
        return f"{sign}${millions}M"
    if dollars >= 1_000:
        return f"{sign}${dollars / 1_000:.0f}K"
    return f"{sign}${dollars:,.0f}"
