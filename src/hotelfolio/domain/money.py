"""Decimal money helpers.

All amounts are Decimal. Floats are converted through str so that 0.1 stays 0.1.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")
ZERO = Decimal("0")

# Tolerance the payment guards allow when comparing against balances.
PAYMENT_TOLERANCE = CENT


def to_decimal(value: Decimal | int | float | str) -> Decimal:
    """Convert a numeric input into Decimal without float artefacts."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("bool is not a monetary value")
    if isinstance(value, (int, str)):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(str(value))
    raise TypeError(f"Unsupported numeric type: {type(value).__name__}")


def to_money(value: Decimal | int | float | str) -> Decimal:
    """Quantize to 2 decimals, half-up."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)
