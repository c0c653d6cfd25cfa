import uuid
from datetime import date
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from vatbook.auth.models import User
from vatbook.core.exceptions import NotFoundError, ValidationError
from vatbook.dependencies import get_current_user, get_db
from vatbook.invoicing import service
from vatbook.invoicing.schemas import InvoiceCreate, InvoiceFilter, InvoiceResponse

router = APIRouter()


@router.get("")
async def list_invoices(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
) -> dict:
    filters = InvoiceFilter(date_from=date_from, date_to=date_to)
    if filters.date_from and filters.date_to and filters.date_from > filters.date_to:
        raise ValidationError("date_from must not be after date_to.")

    if filters.date_from is None and filters.date_to is None:
        invoices = await service.get_invoices(db, current_user.id)
    else:
        invoices = await service.get_invoices_by_date_range(
            db, current_user.id, filters.date_from, filters.date_to
        )
    return {"data": [InvoiceResponse.model_validate(inv) for inv in invoices]}


@router.post("", status_code=201)
async def create_invoice(
    data: InvoiceCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    invoice = await service.create_invoice(db, data, current_user)
    return {"data": InvoiceResponse.model_validate(invoice)}


@router.get("/{invoice_id}")
async def get_invoice(
    invoice_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    invoice = await service.get_invoice(db, invoice_id)
    # Another user's invoice is reported as missing
    if invoice is None or invoice.user_id != current_user.id:
        raise NotFoundError("Invoice", str(invoice_id))
    return {"data": InvoiceResponse.model_validate(invoice)}
