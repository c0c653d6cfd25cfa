import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field, model_validator

from vatbook.core.money import CENT, round2
from vatbook.tax.rates import TaxCategory, rate_for

# Largest value an invoice Numeric(10, 2) column can hold
MAX_AMOUNT = Decimal("99999999.99")


class InvoiceCreate(BaseModel):
    client_name: str = Field(min_length=1, max_length=255)
    amount: Decimal = Field(gt=0, le=MAX_AMOUNT)
    vat_rate: Decimal | None = Field(None, ge=0, le=100)
    vat_amount: Decimal | None = Field(None, ge=0, le=MAX_AMOUNT)
    tax_category: TaxCategory = TaxCategory.STANDARD
    issue_date: date
    due_date: date
    status: str = Field(default="pending", min_length=1, max_length=50)

    @model_validator(mode="after")
    def check_vat_figures(self) -> "InvoiceCreate":
        self.amount = round2(self.amount)
        if self.amount <= 0:
            raise ValueError("Amount must be a positive number")

        if self.vat_rate is None:
            self.vat_rate = rate_for(self.tax_category).rate
        self.vat_rate = round2(self.vat_rate)

        expected_vat = round2(self.amount * self.vat_rate / 100)
        if self.vat_amount is None:
            self.vat_amount = expected_vat
        else:
            self.vat_amount = round2(self.vat_amount)
            if abs(self.vat_amount - expected_vat) > CENT:
                raise ValueError(
                    f"VAT amount {self.vat_amount} does not match "
                    f"{self.vat_rate}% of {self.amount} ({expected_vat})"
                )

        if self.due_date < self.issue_date:
            raise ValueError("Due date cannot be before the issue date")
        return self


class InvoiceResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    client_name: str
    amount: Decimal
    vat_rate: Decimal
    vat_amount: Decimal
    tax_category: str
    issue_date: date
    due_date: date
    status: str
    created_at: datetime

    model_config = {"from_attributes": True}


class InvoiceFilter(BaseModel):
    date_from: date | None = None
    date_to: date | None = None
