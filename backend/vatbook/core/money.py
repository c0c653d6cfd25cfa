"""Decimal helpers shared by the tax engine and invoice validation."""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

CENT = Decimal("0.01")
ZERO = Decimal("0")


def to_decimal(value) -> Decimal:
    """Convert an int, float, str or Decimal amount to Decimal.

    Floats go through ``str`` so ``0.1`` becomes ``Decimal("0.1")`` rather
    than its binary expansion.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise InvalidOperation(f"Not a monetary amount: {value!r}")
    return Decimal(str(value))


def round2(value) -> Decimal:
    """Round half-up to exactly two decimal places."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)
