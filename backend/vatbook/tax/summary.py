"""Fold invoices into per-rate VAT totals."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable

from vatbook.core.money import ZERO, round2, to_decimal


@dataclass
class RateBreakdown:
    count: int = 0
    amount: Decimal = ZERO


@dataclass
class TaxSummary:
    total_revenue: Decimal = ZERO
    total_vat: Decimal = ZERO
    vat_breakdown: dict[str, RateBreakdown] = field(default_factory=dict)


def rate_key(vat_rate) -> str:
    """Breakdown key for a stored rate, e.g. ``Decimal("21.00")`` -> ``"21.00%"``."""
    return f"{vat_rate}%"


def summarize(invoices: Iterable) -> TaxSummary:
    """Sum revenue and VAT over invoices, grouped by their stored VAT rate.

    Accepts anything with ``amount``, ``vat_amount`` and ``vat_rate``
    attributes. Sums are exact; rounding happens only on the returned values.
    """
    total_revenue = ZERO
    total_vat = ZERO
    breakdown: dict[str, RateBreakdown] = {}

    for invoice in invoices:
        amount = to_decimal(invoice.amount)
        vat_amount = to_decimal(invoice.vat_amount)
        total_revenue += amount
        total_vat += vat_amount

        bucket = breakdown.setdefault(rate_key(invoice.vat_rate), RateBreakdown())
        bucket.count += 1
        bucket.amount += vat_amount

    return TaxSummary(
        total_revenue=round2(total_revenue),
        total_vat=round2(total_vat),
        vat_breakdown={
            key: RateBreakdown(count=bucket.count, amount=round2(bucket.amount))
            for key, bucket in breakdown.items()
        },
    )
