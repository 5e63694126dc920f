# Overview: Currency helpers; amounts are stored as integer cents and rates as basis points.

from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

CENT = Decimal("0.01")


def to_cents(value: Any) -> int:
    """
    Convert a wire amount (number or numeric string, in reais) to integer cents.

    Rounds half-up to the nearest cent. Raises ValueError for non-numeric input.
    """
    if value is None or isinstance(value, bool):
        raise ValueError("amount must be numeric")
    if isinstance(value, str):
        value = value.strip().replace(",", ".")
        if not value:
            raise ValueError("amount must be numeric")
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValueError("amount must be numeric")
    if not amount.is_finite():
        raise ValueError("amount must be numeric")
    return int((amount.quantize(CENT, rounding=ROUND_HALF_UP) * 100).to_integral_value())


def from_cents(cents: int | None) -> float | None:
    if cents is None:
        return None
    return float((Decimal(cents) / 100).quantize(CENT))


def percentage_to_bps(percentage: Any) -> int:
    """5.0 -> 500"""
    try:
        value = Decimal(str(percentage))
    except (InvalidOperation, ValueError):
        raise ValueError("percentage must be numeric")
    return int((value * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def bps_to_percentage(bps: int) -> float:
    return float(Decimal(bps) / 100)


def apply_rate_bps(amount_cents: int, rate_bps: int) -> int:
    """Rate in basis points applied to a cent amount, rounded half-up to the cent."""
    result = (Decimal(amount_cents) * Decimal(rate_bps) / Decimal(10_000))
    return int(result.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
