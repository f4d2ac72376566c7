# Overview: Fixed-point money helpers. All amounts are integer cents.

"""
Money is stored and computed as an integer count of cents.

Inputs arrive as JSON numbers or decimal strings and are converted once, at the
boundary, via Decimal(str(value)) quantized to two places with ROUND_HALF_UP.
After that every operation is integer arithmetic, so totals are exact and
independent of the order lines are summed in.
"""
from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable

from .errors import ValidationError

CENT = Decimal("0.01")


def to_decimal(value, field: str = "amount") -> Decimal:
    """Parse a money input into a 2-place Decimal (half-up)."""
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field} must be a decimal amount", field=field)
    if isinstance(value, Decimal):
        d = value
    else:
        try:
            d = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise ValidationError(f"{field} must be a decimal amount", field=field)
    if not d.is_finite():
        raise ValidationError(f"{field} must be a finite amount", field=field)
    return d.quantize(CENT, rounding=ROUND_HALF_UP)


def to_cents(value, field: str = "amount") -> int:
    """Convert a decimal amount ("10.005", 2.5, 3) to integer cents."""
    return int(to_decimal(value, field) * 100)


def from_cents(cents: int) -> Decimal:
    return (Decimal(cents) / 100).quantize(CENT)


def format_cents(cents: int | None) -> str | None:
    """4000 cents -> "40.00"."""
    if cents is None:
        return None
    return str(from_cents(cents))


def add(a: int, b: int) -> int:
    return a + b


def multiply(unit_price_cents: int, quantity: int) -> int:
    """Line total for a unit price and an integer quantity."""
    return unit_price_cents * quantity


def sum_cents(values: Iterable[int]) -> int:
    total = 0
    for value in values:
        total = add(total, value)
    return total
