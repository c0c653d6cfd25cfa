"""Pydantic schemas for VAT calculation, summaries and reports."""

from datetime import date, datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, Field

from vatbook.tax.rates import TaxCategory

ReportState = Literal["pending", "accepted", "rejected"]


# ---------------------------------------------------------------------------
# Rates and calculation
# ---------------------------------------------------------------------------


class RateEntryResponse(BaseModel):
    category: TaxCategory
    rate: Decimal
    description: str

    model_config = {"from_attributes": True}


class VATCalculationRequest(BaseModel):
    amount: Decimal
    category: str = TaxCategory.STANDARD.value


class VATCalculationResponse(BaseModel):
    vat_amount: Decimal
    total_amount: Decimal
    applied_rate: Decimal

    model_config = {"from_attributes": True}


class DeductionItem(BaseModel):
    type: str
    amount: Decimal

    model_config = {"from_attributes": True}


class DeductionRequest(BaseModel):
    total_amount: Decimal = Field(ge=0)
    deductions: list[DeductionItem] = []


class DeductionResponse(BaseModel):
    final_amount: Decimal
    applied_deductions: list[DeductionItem]

    model_config = {"from_attributes": True}


# ---------------------------------------------------------------------------
# Summary
# ---------------------------------------------------------------------------


class RateBreakdownResponse(BaseModel):
    count: int
    amount: Decimal

    model_config = {"from_attributes": True}


class TaxSummaryResponse(BaseModel):
    total_revenue: Decimal
    total_vat: Decimal
    vat_breakdown: dict[str, RateBreakdownResponse]

    model_config = {"from_attributes": True}


# ---------------------------------------------------------------------------
# VAT number validation
# ---------------------------------------------------------------------------


class VATValidationRequest(BaseModel):
    vat_number: str = Field(min_length=1, max_length=64)


class CompanyDetailsResponse(BaseModel):
    name: Optional[str] = None
    address: Optional[str] = None

    model_config = {"from_attributes": True}


class VATValidationResponse(BaseModel):
    is_valid: bool
    details: Optional[CompanyDetailsResponse] = None
    error: Optional[str] = None

    model_config = {"from_attributes": True}


# ---------------------------------------------------------------------------
# VAT reports
# ---------------------------------------------------------------------------


class ReportPeriod(BaseModel):
    start_date: str
    end_date: str


class ReportTotals(BaseModel):
    total_amount: str
    total_vat: str


class ReportTransaction(BaseModel):
    invoice_id: str
    date: str
    amount: str
    vat_amount: str
    client_name: str


class VATReportPayload(BaseModel):
    vat_number: str
    period: ReportPeriod
    totals: ReportTotals
    transactions: list[ReportTransaction] = []


class SubmissionAck(BaseModel):
    report_id: str
    submission_date: datetime
    status: ReportState
    message: Optional[str] = None


class ReportStatus(BaseModel):
    status: ReportState
    message: Optional[str] = None


class VATReport(VATReportPayload):
    report_id: str
    submission_date: datetime
    status: ReportState
    message: Optional[str] = None


class VATReportResult(BaseModel):
    success: bool
    report_data: Optional[VATReport] = None
    error: Optional[str] = None
    # Where a failed run stopped
    failed_stage: Optional[Literal["assembly", "submission"]] = None


class VATReportRequest(BaseModel):
    start_date: date
    end_date: date
