from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from packworkx.core.deps import get_current_active_user, require_roles
from packworkx.db.session import get_async_session
from packworkx.schemas.returns import PurchaseReturnCreate, PurchaseReturnRead
from packworkx.services.returns import PurchaseReturnService

router = APIRouter(prefix="/purchase-returns", tags=["Purchase Returns"])


def _service(
    user=Depends(get_current_active_user),
    session: AsyncSession = Depends(get_async_session),
) -> PurchaseReturnService:
    return PurchaseReturnService(session, user.company_id, user.id)


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[PurchaseReturnRead],
    summary="List purchase returns",
    dependencies=[Depends(require_roles("purchase", "store"))],
)
async def list_returns(
    service: PurchaseReturnService = Depends(_service),
    search: Optional[str] = Query(None, description="Return number (substring)"),
    po_id: Optional[UUID] = Query(None, description="Filter by purchase order"),
    grn_id: Optional[UUID] = Query(None, description="Filter by GRN"),
    status: Optional[str] = Query(None, description="active (default) | inactive | all"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[PurchaseReturnRead]:
    rows = await service.list_returns(
        search=search, po_id=po_id, grn_id=grn_id, status=status, limit=limit, offset=offset
    )
    return [PurchaseReturnRead.model_validate(x) for x in rows]


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=PurchaseReturnRead,
    status_code=status.HTTP_201_CREATED,
    summary="Return goods to supplier",
    description=(
        "Send accepted goods of a GRN back to the supplier. Lines are priced at the PO rate, "
        "taken out of the GRN's stock rows and credited to the supplier's debit wallet. "
        "409 when a line would return more than was accepted or more than is in stock."
    ),
    dependencies=[Depends(require_roles("purchase", "store"))],
)
async def create_return(
    payload: PurchaseReturnCreate, service: PurchaseReturnService = Depends(_service)
) -> PurchaseReturnRead:
    return PurchaseReturnRead.model_validate(await service.create_return(payload))


# PUBLIC_INTERFACE
@router.get(
    "/{return_id}",
    response_model=PurchaseReturnRead,
    summary="Get purchase return",
    dependencies=[Depends(require_roles("purchase", "store"))],
)
async def get_return(
    return_id: UUID = Path(...), service: PurchaseReturnService = Depends(_service)
) -> PurchaseReturnRead:
    return PurchaseReturnRead.model_validate(await service.get_return(return_id))


# PUBLIC_INTERFACE
@router.delete(
    "/{return_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Cancel purchase return",
    description="Put the goods back into stock and withdraw the supplier credit. 409 if that credit was spent.",
    dependencies=[Depends(require_roles("purchase", "store"))],
)
async def delete_return(return_id: UUID = Path(...), service: PurchaseReturnService = Depends(_service)) -> None:
    await service.delete_return(return_id)
