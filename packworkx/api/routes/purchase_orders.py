from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from packworkx.core.deps import get_current_active_user, require_roles
from packworkx.db.session import get_async_session
from packworkx.schemas.grn import GRNRead
from packworkx.schemas.procurement import (
    OpenPurchaseOrder,
    PurchaseOrderCreate,
    PurchaseOrderDecision,
    PurchaseOrderPaymentCreate,
    PurchaseOrderPaymentRead,
    PurchaseOrderRead,
    PurchaseOrderSummary,
    PurchaseOrderUpdate,
)
from packworkx.services.grn import GRNService
from packworkx.services.purchase_orders import PurchaseOrderService

router = APIRouter(prefix="/purchase-orders", tags=["Purchase Orders"])


def _service(
    user=Depends(get_current_active_user),
    session: AsyncSession = Depends(get_async_session),
) -> PurchaseOrderService:
    return PurchaseOrderService(session, user.company_id, user.id)


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[PurchaseOrderSummary],
    summary="List purchase orders",
    description="Purchase orders ordered by PO date desc.",
    dependencies=[Depends(require_roles("purchase", "store", "accounts"))],
)
async def list_purchase_orders(
    service: PurchaseOrderService = Depends(_service),
    search: Optional[str] = Query(None, description="PO number or supplier name (substring)"),
    supplier_id: Optional[UUID] = Query(None, description="Filter by supplier id"),
    decision: Optional[str] = Query(None, description="pending | approve | disapprove"),
    receipt_status: Optional[str] = Query(None, description="pending | partially_received | fully_received"),
    payment_status: Optional[str] = Query(None, description="pending | partial | paid"),
    status: Optional[str] = Query(None, description="active (default) | inactive | all"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[PurchaseOrderSummary]:
    rows = await service.list_purchase_orders(
        search=search,
        supplier_id=supplier_id,
        decision=decision,
        receipt_status=receipt_status,
        payment_status=payment_status,
        status=status,
        limit=limit,
        offset=offset,
    )
    return [PurchaseOrderSummary.model_validate(x) for x in rows]


# PUBLIC_INTERFACE
@router.get(
    "/open",
    response_model=List[OpenPurchaseOrder],
    summary="Open purchase orders",
    description="Approved, active purchase orders not yet fully received; the pick-list for new GRNs.",
    dependencies=[Depends(require_roles("purchase", "store"))],
)
async def list_open_purchase_orders(service: PurchaseOrderService = Depends(_service)) -> List[OpenPurchaseOrder]:
    return [OpenPurchaseOrder.model_validate(x) for x in await service.list_open_purchase_orders()]


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=PurchaseOrderRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create purchase order",
    description=(
        "Create a PO with lines; totals are computed server-side. With `use_wallet` the supplier's "
        "debit balance is applied as a wallet payment."
    ),
    dependencies=[Depends(require_roles("purchase"))],
)
async def create_purchase_order(
    payload: PurchaseOrderCreate,
    service: PurchaseOrderService = Depends(_service),
) -> PurchaseOrderRead:
    po = await service.create_purchase_order(payload)
    return await service.to_read(po)


# PUBLIC_INTERFACE
@router.get(
    "/{po_id}",
    response_model=PurchaseOrderRead,
    summary="Get purchase order",
    description="Header, lines with received/pending quantities, and payments.",
    dependencies=[Depends(require_roles("purchase", "store", "accounts"))],
)
async def get_purchase_order(
    po_id: UUID = Path(...),
    service: PurchaseOrderService = Depends(_service),
) -> PurchaseOrderRead:
    return await service.get_detail(po_id)


# PUBLIC_INTERFACE
@router.put(
    "/{po_id}",
    response_model=PurchaseOrderRead,
    summary="Update purchase order",
    description="Replace header and lines. Refused with 409 once an active GRN exists.",
    dependencies=[Depends(require_roles("purchase"))],
)
async def update_purchase_order(
    payload: PurchaseOrderUpdate,
    po_id: UUID = Path(...),
    service: PurchaseOrderService = Depends(_service),
) -> PurchaseOrderRead:
    po = await service.update_purchase_order(po_id, payload)
    return await service.to_read(po)


# PUBLIC_INTERFACE
@router.patch(
    "/{po_id}/decision",
    response_model=PurchaseOrderRead,
    summary="Approve or disapprove",
    dependencies=[Depends(require_roles("purchase"))],
)
async def set_decision(
    payload: PurchaseOrderDecision,
    po_id: UUID = Path(...),
    service: PurchaseOrderService = Depends(_service),
) -> PurchaseOrderRead:
    po = await service.set_decision(po_id, payload.decision)
    return await service.to_read(po)


# PUBLIC_INTERFACE
@router.delete(
    "/{po_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Cancel purchase order",
    dependencies=[Depends(require_roles("purchase"))],
)
async def delete_purchase_order(po_id: UUID = Path(...), service: PurchaseOrderService = Depends(_service)) -> None:
    await service.delete_purchase_order(po_id)


# PUBLIC_INTERFACE
@router.get(
    "/{po_id}/payments",
    response_model=List[PurchaseOrderPaymentRead],
    summary="List PO payments",
    description="Payments against the PO, newest first.",
    dependencies=[Depends(require_roles("purchase", "accounts"))],
)
async def list_payments(
    po_id: UUID = Path(...),
    service: PurchaseOrderService = Depends(_service),
) -> List[PurchaseOrderPaymentRead]:
    return await service.list_payments(po_id)


# PUBLIC_INTERFACE
@router.post(
    "/{po_id}/payments",
    response_model=PurchaseOrderPaymentRead,
    status_code=status.HTTP_201_CREATED,
    summary="Record PO payment",
    description="Record a supplier payment. 409 when the PO would be overpaid.",
    dependencies=[Depends(require_roles("purchase", "accounts"))],
)
async def add_payment(
    payload: PurchaseOrderPaymentCreate,
    po_id: UUID = Path(...),
    service: PurchaseOrderService = Depends(_service),
) -> PurchaseOrderPaymentRead:
    return PurchaseOrderPaymentRead.model_validate(await service.add_payment(po_id, payload))


# PUBLIC_INTERFACE
@router.get(
    "/{po_id}/grns",
    response_model=List[GRNRead],
    summary="GRNs for a purchase order",
    dependencies=[Depends(require_roles("purchase", "store"))],
)
async def list_purchase_order_grns(
    po_id: UUID = Path(...),
    status: Optional[str] = Query(None, description="active (default) | inactive | all"),
    user=Depends(get_current_active_user),
    session: AsyncSession = Depends(get_async_session),
) -> List[GRNRead]:
    rows = await GRNService(session, user.company_id, user.id).list_for_purchase_order(po_id, status=status)
    return [GRNRead.model_validate(x) for x in rows]
