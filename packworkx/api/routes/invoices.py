from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from packworkx.core.deps import get_current_active_user, require_roles
from packworkx.db.session import get_async_session
from packworkx.schemas.invoices import (
    InvoiceCreate,
    InvoicePage,
    InvoiceRead,
    InvoiceUpdate,
    PaymentCreate,
    PaymentRead,
    PaymentStatusUpdate,
)
from packworkx.services.invoices import InvoiceService

router = APIRouter(
    prefix="/invoices",
    tags=["Invoices"],
    dependencies=[Depends(require_roles("sales", "accounts"))],
)


def _service(
    user=Depends(get_current_active_user),
    session: AsyncSession = Depends(get_async_session),
) -> InvoiceService:
    return InvoiceService(session, user.company_id, user.id)


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=InvoicePage,
    summary="List invoices",
    description="Work-order invoices, newest first, with the total count for pagination.",
)
async def list_invoices(
    service: InvoiceService = Depends(_service),
    status: Optional[str] = Query(None, description="active (default) | inactive | all"),
    payment_status: Optional[str] = Query(None, description="pending | partial | paid"),
    client_id: Optional[UUID] = Query(None),
    work_order_ref: Optional[str] = Query(None),
    sale_order_ref: Optional[str] = Query(None),
    search: Optional[str] = Query(None, description="Invoice number or client name (substring)"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> InvoicePage:
    rows, total = await service.list_invoices(
        status=status,
        payment_status=payment_status,
        client_id=client_id,
        work_order_ref=work_order_ref,
        sale_order_ref=sale_order_ref,
        search=search,
        limit=limit,
        offset=offset,
    )
    return InvoicePage(
        items=[InvoiceRead.model_validate(x) for x in rows], total=total, limit=limit, offset=offset
    )


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=InvoiceRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create invoice",
    description="An initial `received_amount` is recorded as a completed payment.",
)
async def create_invoice(payload: InvoiceCreate, service: InvoiceService = Depends(_service)) -> InvoiceRead:
    return InvoiceRead.model_validate(await service.create_invoice(payload))


# PUBLIC_INTERFACE
@router.get("/{invoice_id}", response_model=InvoiceRead, summary="Get invoice")
async def get_invoice(invoice_id: UUID = Path(...), service: InvoiceService = Depends(_service)) -> InvoiceRead:
    return InvoiceRead.model_validate(await service.get_invoice(invoice_id))


# PUBLIC_INTERFACE
@router.put(
    "/{invoice_id}",
    response_model=InvoiceRead,
    summary="Update invoice",
    description="409 if the new total falls below the amount already settled.",
)
async def update_invoice(
    payload: InvoiceUpdate,
    invoice_id: UUID = Path(...),
    service: InvoiceService = Depends(_service),
) -> InvoiceRead:
    return InvoiceRead.model_validate(await service.update_invoice(invoice_id, payload))


# PUBLIC_INTERFACE
@router.delete(
    "/{invoice_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Cancel invoice",
    description="Refused with 409 once a completed payment exists.",
)
async def delete_invoice(invoice_id: UUID = Path(...), service: InvoiceService = Depends(_service)) -> None:
    await service.delete_invoice(invoice_id)


# PUBLIC_INTERFACE
@router.get("/{invoice_id}/payments", response_model=List[PaymentRead], summary="List invoice payments")
async def list_payments(
    invoice_id: UUID = Path(...),
    service: InvoiceService = Depends(_service),
) -> List[PaymentRead]:
    return [PaymentRead.model_validate(p) for p in await service.list_payments(invoice_id)]


# PUBLIC_INTERFACE
@router.post(
    "/{invoice_id}/payments",
    response_model=PaymentRead,
    status_code=status.HTTP_201_CREATED,
    summary="Record partial payment",
    description=(
        "Record an installment, optionally drawing `credit_amount` from the client's credit wallet. "
        "409 'Trying to overpay the invoice' when settled plus new amounts exceed the invoice total."
    ),
)
async def add_payment(
    payload: PaymentCreate,
    invoice_id: UUID = Path(...),
    service: InvoiceService = Depends(_service),
) -> PaymentRead:
    return PaymentRead.model_validate(await service.add_payment(invoice_id, payload))


# PUBLIC_INTERFACE
@router.patch(
    "/{invoice_id}/payments/{payment_id}",
    response_model=PaymentRead,
    summary="Change payment status",
    description="pending -> completed applies the payment; completed -> failed reverses it.",
)
async def set_payment_status(
    payload: PaymentStatusUpdate,
    invoice_id: UUID = Path(...),
    payment_id: UUID = Path(...),
    service: InvoiceService = Depends(_service),
) -> PaymentRead:
    return PaymentRead.model_validate(await service.set_payment_status(invoice_id, payment_id, payload.status))
