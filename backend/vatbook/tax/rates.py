"""Belgian VAT rate schedule."""

import enum
from dataclasses import dataclass
from decimal import Decimal

from vatbook.core.exceptions import UnknownCategory


class TaxCategory(str, enum.Enum):
    STANDARD = "standard"
    REDUCED = "reduced"
    ZERO = "zero"
    EXEMPT = "exempt"


@dataclass(frozen=True)
class RateEntry:
    category: TaxCategory
    rate: Decimal
    description: str


# Belgian VAT rates as of 2025. "reduced" covers two rates; lookups by
# category resolve to the first one listed.
VAT_RATES: tuple[RateEntry, ...] = (
    RateEntry(TaxCategory.STANDARD, Decimal("21"), "Standard rate"),
    RateEntry(
        TaxCategory.REDUCED,
        Decimal("12"),
        "First reduced rate - restaurants, food service",
    ),
    RateEntry(
        TaxCategory.REDUCED,
        Decimal("6"),
        "Second reduced rate - basic necessities",
    ),
    RateEntry(TaxCategory.ZERO, Decimal("0"), "Zero-rated goods and services"),
    RateEntry(TaxCategory.EXEMPT, Decimal("0"), "VAT exempt transactions"),
)


def _parse_category(category) -> TaxCategory:
    if isinstance(category, TaxCategory):
        return category
    try:
        return TaxCategory(category)
    except ValueError:
        raise UnknownCategory(str(category)) from None


def rate_for(category) -> RateEntry:
    """Return the rate entry for a category, or raise UnknownCategory."""
    parsed = _parse_category(category)
    for entry in VAT_RATES:
        if entry.category == parsed:
            return entry
    raise UnknownCategory(str(category))


def rates_for(category) -> list[RateEntry]:
    """Return every rate entry filed under a category."""
    parsed = _parse_category(category)
    return [entry for entry in VAT_RATES if entry.category == parsed]


def list_rates() -> list[RateEntry]:
    return list(VAT_RATES)
