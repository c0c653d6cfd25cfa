"""FastAPI router for VAT calculation, summaries, validation and reports."""

from datetime import date
from typing import Annotated, Optional

import httpx
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from vatbook.auth.models import User
from vatbook.config import Settings
from vatbook.core.exceptions import (
    ExternalServiceUnavailable,
    ReportGenerationFailed,
    ValidationError,
)
from vatbook.dependencies import (
    get_current_user,
    get_db,
    get_http_client,
    get_settings,
    get_tax_authority,
)
from vatbook.invoicing import service as invoice_service
from vatbook.tax import reporting
from vatbook.tax.calculator import Deduction, apply_deductions, compute_vat
from vatbook.tax.rates import list_rates
from vatbook.tax.reporting import TaxAuthority
from vatbook.tax.schemas import (
    CompanyDetailsResponse,
    DeductionItem,
    DeductionRequest,
    DeductionResponse,
    RateBreakdownResponse,
    RateEntryResponse,
    TaxSummaryResponse,
    VATCalculationRequest,
    VATCalculationResponse,
    VATReportRequest,
    VATValidationRequest,
    VATValidationResponse,
)
from vatbook.tax.summary import summarize
from vatbook.tax.vat_validator import validate_vat_number

router = APIRouter()


# ---------------------------------------------------------------------------
# Rates and calculation
# ---------------------------------------------------------------------------


@router.get("/rates")
async def get_rates(
    _: Annotated[User, Depends(get_current_user)],
) -> dict:
    """Return the VAT rate schedule."""
    return {
        "data": [
            RateEntryResponse(category=e.category, rate=e.rate, description=e.description)
            for e in list_rates()
        ]
    }


@router.post("/calculate")
async def calculate_vat(
    body: VATCalculationRequest,
    _: Annotated[User, Depends(get_current_user)],
) -> dict:
    result = compute_vat(body.amount, body.category)
    return {
        "data": VATCalculationResponse(
            vat_amount=result.vat_amount,
            total_amount=result.total_amount,
            applied_rate=result.applied_rate,
        )
    }


@router.post("/deductions")
async def calculate_deductions(
    body: DeductionRequest,
    _: Annotated[User, Depends(get_current_user)],
) -> dict:
    result = apply_deductions(
        body.total_amount,
        [Deduction(type=d.type, amount=d.amount) for d in body.deductions],
    )
    return {
        "data": DeductionResponse(
            final_amount=result.final_amount,
            applied_deductions=[
                DeductionItem(type=d.type, amount=d.amount) for d in result.applied_deductions
            ],
        )
    }


# ---------------------------------------------------------------------------
# Summary
# ---------------------------------------------------------------------------


@router.get("/summary")
async def get_tax_summary(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> dict:
    """Summarize the caller's invoices per VAT rate."""
    invoices = await invoice_service.get_invoices_by_date_range(
        db, current_user.id, date_from, date_to
    )
    summary = summarize(invoices)
    return {
        "data": TaxSummaryResponse(
            total_revenue=summary.total_revenue,
            total_vat=summary.total_vat,
            vat_breakdown={
                key: RateBreakdownResponse(count=b.count, amount=b.amount)
                for key, b in summary.vat_breakdown.items()
            },
        )
    }


# ---------------------------------------------------------------------------
# VAT number validation
# ---------------------------------------------------------------------------


@router.post("/validate-vat")
async def validate_vat(
    body: VATValidationRequest,
    _: Annotated[User, Depends(get_current_user)],
    client: Annotated[httpx.AsyncClient, Depends(get_http_client)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> dict:
    result = await validate_vat_number(body.vat_number, client=client, settings=settings)
    details = None
    if result.details is not None:
        details = CompanyDetailsResponse(
            name=result.details.name, address=result.details.address
        )
    return {
        "data": VATValidationResponse(
            is_valid=result.is_valid, details=details, error=result.error
        )
    }


# ---------------------------------------------------------------------------
# VAT reports
# ---------------------------------------------------------------------------


@router.post("/vat-reports", status_code=201)
async def create_vat_report(
    body: VATReportRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    authority: Annotated[TaxAuthority, Depends(get_tax_authority)],
) -> dict:
    """Generate and submit a VAT report for the caller's invoices in range."""
    if body.start_date > body.end_date:
        raise ValidationError("start_date must not be after end_date.")

    invoices = await invoice_service.get_invoices_by_date_range(
        db, current_user.id, body.start_date, body.end_date
    )
    result = await reporting.generate_vat_report(
        invoices,
        body.start_date,
        body.end_date,
        current_user.vat_number,
        authority,
    )
    if not result.success:
        reason = result.error or "unknown error"
        if result.failed_stage == "submission":
            raise ExternalServiceUnavailable("VAT report submission", reason)
        raise ReportGenerationFailed(reason)
    return {"data": result.report_data}


@router.get("/vat-reports/{report_id}/status")
async def get_vat_report_status(
    report_id: str,
    _: Annotated[User, Depends(get_current_user)],
    authority: Annotated[TaxAuthority, Depends(get_tax_authority)],
) -> dict:
    status = await reporting.check_report_status(report_id, authority)
    return {"data": status}
