from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from packworkx.core.deps import get_current_active_user, require_roles
from packworkx.db.session import get_async_session
from packworkx.schemas.grn import GRNCreate, GRNRead, GRNUpdate
from packworkx.services.grn import GRNService

router = APIRouter(prefix="/grns", tags=["Goods Receipt"])


def _service(
    user=Depends(get_current_active_user),
    session: AsyncSession = Depends(get_async_session),
) -> GRNService:
    return GRNService(session, user.company_id, user.id)


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[GRNRead],
    summary="List GRNs",
    dependencies=[Depends(require_roles("store", "purchase"))],
)
async def list_grns(
    service: GRNService = Depends(_service),
    search: Optional[str] = Query(None, description="GRN number or supplier invoice number (substring)"),
    po_id: Optional[UUID] = Query(None, description="Filter by purchase order"),
    status: Optional[str] = Query(None, description="active (default) | inactive | all"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[GRNRead]:
    rows = await service.list_grns(search=search, po_id=po_id, status=status, limit=limit, offset=offset)
    return [GRNRead.model_validate(x) for x in rows]


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=GRNRead,
    status_code=status.HTTP_201_CREATED,
    summary="Receive goods",
    description=(
        "Record goods received against an approved PO and post accepted quantities to inventory. "
        "409 when cumulative accepted quantity would exceed the ordered quantity."
    ),
    dependencies=[Depends(require_roles("store"))],
)
async def create_grn(payload: GRNCreate, service: GRNService = Depends(_service)) -> GRNRead:
    return GRNRead.model_validate(await service.create_grn(payload))


# PUBLIC_INTERFACE
@router.get(
    "/{grn_id}",
    response_model=GRNRead,
    summary="Get GRN",
    dependencies=[Depends(require_roles("store", "purchase"))],
)
async def get_grn(grn_id: UUID = Path(...), service: GRNService = Depends(_service)) -> GRNRead:
    return GRNRead.model_validate(await service.get_grn(grn_id))


# PUBLIC_INTERFACE
@router.put(
    "/{grn_id}",
    response_model=GRNRead,
    summary="Update GRN",
    description="Replace header and lines. 409 if stock posted by this GRN has been consumed or adjusted.",
    dependencies=[Depends(require_roles("store"))],
)
async def update_grn(
    payload: GRNUpdate,
    grn_id: UUID = Path(...),
    service: GRNService = Depends(_service),
) -> GRNRead:
    return GRNRead.model_validate(await service.update_grn(grn_id, payload))


# PUBLIC_INTERFACE
@router.delete(
    "/{grn_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Cancel GRN",
    description="Deactivate the GRN and its stock rows; the PO receipt status is recomputed.",
    dependencies=[Depends(require_roles("store"))],
)
async def delete_grn(grn_id: UUID = Path(...), service: GRNService = Depends(_service)) -> None:
    await service.delete_grn(grn_id)
