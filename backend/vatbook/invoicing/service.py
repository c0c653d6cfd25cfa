from __future__ import annotations

import uuid
from datetime import date
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vatbook.auth.models import User
from vatbook.invoicing.models import Invoice
from vatbook.invoicing.schemas import InvoiceCreate


async def create_invoice(db: AsyncSession, data: InvoiceCreate, user: User) -> Invoice:
    invoice = Invoice(
        user_id=user.id,
        client_name=data.client_name,
        amount=data.amount,
        vat_rate=data.vat_rate,
        vat_amount=data.vat_amount,
        tax_category=data.tax_category.value,
        issue_date=data.issue_date,
        due_date=data.due_date,
        status=data.status,
    )
    db.add(invoice)
    await db.commit()
    await db.refresh(invoice)
    return invoice


async def get_invoices(db: AsyncSession, user_id: uuid.UUID) -> list[Invoice]:
    result = await db.execute(
        select(Invoice)
        .where(Invoice.user_id == user_id)
        .order_by(Invoice.issue_date, Invoice.created_at)
    )
    return list(result.scalars().all())


async def get_invoices_by_date_range(
    db: AsyncSession,
    user_id: uuid.UUID,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> list[Invoice]:
    """Invoices issued between ``start`` and ``end``, both inclusive."""
    query = select(Invoice).where(Invoice.user_id == user_id)
    if start is not None:
        query = query.where(Invoice.issue_date >= start)
    if end is not None:
        query = query.where(Invoice.issue_date <= end)
    result = await db.execute(query.order_by(Invoice.issue_date, Invoice.created_at))
    return list(result.scalars().all())


async def get_invoice(db: AsyncSession, invoice_id: uuid.UUID) -> Optional[Invoice]:
    result = await db.execute(select(Invoice).where(Invoice.id == invoice_id))
    return result.scalar_one_or_none()
