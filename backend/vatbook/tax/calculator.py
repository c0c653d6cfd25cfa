"""VAT and deduction arithmetic.

All functions here are pure. Amounts are handled as ``Decimal`` and each
derived value is rounded half-up to two decimals exactly once, when it is
produced.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Iterable, Mapping

from vatbook.core.exceptions import InvalidAmount, InvalidDeductionType
from vatbook.core.money import ZERO, round2, to_decimal
from vatbook.tax.rates import TaxCategory, rate_for

# Share of the original total each deduction type may claim
DEDUCTION_CAPS: dict[str, Decimal] = {
    "professional": Decimal("0.3"),
    "investment": Decimal("0.2"),
}


@dataclass(frozen=True)
class VATCalculation:
    vat_amount: Decimal
    total_amount: Decimal
    applied_rate: Decimal


@dataclass(frozen=True)
class Deduction:
    type: str
    amount: Decimal


@dataclass(frozen=True)
class DeductionResult:
    final_amount: Decimal
    applied_deductions: list[Deduction] = field(default_factory=list)


def _amount(value) -> Decimal:
    try:
        amount = to_decimal(value)
        if amount.is_finite():
            # Too many digits to hold at cent precision
            round2(amount)
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidAmount(value) from None
    if not amount.is_finite():
        raise InvalidAmount(value)
    return amount


def compute_vat(base_amount, category: TaxCategory | str = TaxCategory.STANDARD) -> VATCalculation:
    """Compute the VAT and VAT-inclusive total for a base amount."""
    base = _amount(base_amount)
    if base <= 0:
        raise InvalidAmount(base_amount)

    rate = rate_for(category).rate
    try:
        vat_amount = round2(base * rate / 100)
        total = round2(base + vat_amount)
    except InvalidOperation:
        raise InvalidAmount(base_amount) from None
    return VATCalculation(vat_amount=vat_amount, total_amount=total, applied_rate=rate)


def _coerce_deduction(deduction) -> Deduction:
    if isinstance(deduction, Deduction):
        return deduction
    if isinstance(deduction, Mapping):
        return Deduction(type=deduction["type"], amount=deduction["amount"])
    return Deduction(type=deduction.type, amount=deduction.amount)


def apply_deductions(total_amount, deductions: Iterable) -> DeductionResult:
    """Apply capped deductions to a total, in order.

    Every cap is a share of ``total_amount`` as passed in, not of the
    running balance. An unknown deduction type aborts the whole call.
    """
    total = _amount(total_amount)
    if total < 0:
        raise InvalidAmount(total_amount)

    applied: list[Deduction] = []
    running = total
    for raw in deductions:
        deduction = _coerce_deduction(raw)
        cap_share = DEDUCTION_CAPS.get(deduction.type)
        if cap_share is None:
            raise InvalidDeductionType(deduction.type)

        requested = _amount(deduction.amount)
        # A negative request would raise the final amount
        requested = max(requested, ZERO)
        actual = min(requested, total * cap_share)
        running -= actual
        applied.append(Deduction(type=deduction.type, amount=round2(actual)))

    return DeductionResult(final_amount=round2(running), applied_deductions=applied)
