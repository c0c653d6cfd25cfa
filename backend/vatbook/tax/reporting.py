"""Periodic VAT report assembly and submission.

Submission goes through a ``TaxAuthority`` collaborator. The only
implementation shipped is ``StubTaxAuthority``, which logs the payload and
acknowledges it as pending; a live e-Services client can replace it
without touching the aggregation below.
"""

from __future__ import annotations

import logging
import time
import uuid
from datetime import date, datetime, timezone
from typing import Iterable, Protocol

from vatbook.core.money import ZERO, round2, to_decimal
from vatbook.tax.schemas import (
    ReportPeriod,
    ReportStatus,
    ReportTotals,
    ReportTransaction,
    SubmissionAck,
    VATReport,
    VATReportPayload,
    VATReportResult,
)

logger = logging.getLogger(__name__)


class TaxAuthority(Protocol):
    async def submit(self, payload: VATReportPayload) -> SubmissionAck: ...

    async def check_status(self, report_id: str) -> ReportStatus: ...


class StubTaxAuthority:
    """Stand-in for the Belgian e-Services VAT endpoint."""

    def __init__(self, base_url: str = ""):
        self.base_url = base_url

    async def submit(self, payload: VATReportPayload) -> SubmissionAck:
        logger.info(
            "Preparing to submit VAT report: %s",
            payload.model_dump_json(),
        )
        return SubmissionAck(
            report_id=_new_report_id(),
            submission_date=datetime.now(timezone.utc),
            status="pending",
            message="Report submitted successfully",
        )

    async def check_status(self, report_id: str) -> ReportStatus:
        return ReportStatus(status="pending", message="Report is being processed")


def _new_report_id() -> str:
    return f"VAT-{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}"


def _iso_date(value) -> str:
    if isinstance(value, (date, datetime)):
        return value.isoformat()[:10]
    return date.fromisoformat(str(value)).isoformat()


def build_report_payload(
    invoices: Iterable,
    period_start,
    period_end,
    vat_number: str,
) -> VATReportPayload:
    """Assemble the report body. Invoices are not filtered by date here."""
    start = _iso_date(period_start)
    end = _iso_date(period_end)
    if start > end:
        raise ValueError(f"Report period starts after it ends ({start} > {end})")

    total_amount = ZERO
    total_vat = ZERO
    transactions = []
    for invoice in invoices:
        amount = to_decimal(invoice.amount)
        vat_amount = to_decimal(invoice.vat_amount)
        total_amount += amount
        total_vat += vat_amount
        transactions.append(
            ReportTransaction(
                invoice_id=str(invoice.id),
                date=_iso_date(invoice.issue_date),
                amount=str(round2(amount)),
                vat_amount=str(round2(vat_amount)),
                client_name=invoice.client_name,
            )
        )

    return VATReportPayload(
        vat_number=vat_number,
        period=ReportPeriod(start_date=start, end_date=end),
        totals=ReportTotals(
            total_amount=str(round2(total_amount)),
            total_vat=str(round2(total_vat)),
        ),
        transactions=transactions,
    )


async def generate_vat_report(
    invoices: Iterable,
    period_start,
    period_end,
    vat_number: str,
    authority: TaxAuthority,
) -> VATReportResult:
    """Build and submit a VAT report. Failures are returned, never raised."""
    stage = "assembly"
    try:
        payload = build_report_payload(invoices, period_start, period_end, vat_number)
        stage = "submission"
        ack = await authority.submit(payload)
        report = VATReport(
            **payload.model_dump(),
            report_id=ack.report_id,
            submission_date=ack.submission_date,
            status=ack.status,
            message=ack.message,
        )
    except Exception as exc:
        logger.exception("VAT report generation error")
        return VATReportResult(
            success=False,
            error=str(exc) or "Failed to generate VAT report",
            failed_stage=stage,
        )

    return VATReportResult(success=True, report_data=report)


async def check_report_status(report_id: str, authority: TaxAuthority) -> ReportStatus:
    return await authority.check_status(report_id)
