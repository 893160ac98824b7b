from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from packworkx.core.deps import get_current_active_user, require_roles
from packworkx.db.session import get_async_session
from packworkx.schemas.inventory import (
    InventoryCreate,
    InventoryRead,
    InventoryUpdate,
    StockSummaryRow,
)
from packworkx.services.inventory import InventoryService

router = APIRouter(prefix="/inventory", tags=["Inventory"])


def _service(
    user=Depends(get_current_active_user),
    session: AsyncSession = Depends(get_async_session),
) -> InventoryService:
    return InventoryService(session, user.company_id, user.id)


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[InventoryRead],
    summary="List stock rows",
    description="Inventory rows, newest first, with optional filters.",
    dependencies=[Depends(require_roles("store", "purchase", "production"))],
)
async def list_inventory(
    service: InventoryService = Depends(_service),
    item_id: Optional[UUID] = Query(None, description="Filter by item"),
    search: Optional[str] = Query(None, description="Inventory number, item code, batch or description"),
    status: Optional[str] = Query(None, description="active (default) | inactive | all"),
    limit: int = Query(100, ge=1, le=1000, description="Max records"),
    offset: int = Query(0, ge=0, description="Records to skip"),
) -> List[InventoryRead]:
    """
    Return company-scoped inventory rows.

    Returns:
        List[InventoryRead]: stock rows ordered by creation time desc.
    """
    rows = await service.list_inventory(item_id=item_id, search=search, status=status, limit=limit, offset=offset)
    return [InventoryRead.model_validate(r) for r in rows]


# PUBLIC_INTERFACE
@router.get(
    "/stock-summary",
    response_model=List[StockSummaryRow],
    summary="Stock summary",
    description="Total active quantity per item flagged against minimum and reorder levels.",
    dependencies=[Depends(require_roles("store", "purchase", "production"))],
)
async def stock_summary(service: InventoryService = Depends(_service)) -> List[StockSummaryRow]:
    return await service.stock_summary()


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=InventoryRead,
    status_code=status.HTTP_201_CREATED,
    summary="Open stock row",
    description="Record opening stock for an active item outside of goods receipt.",
    dependencies=[Depends(require_roles("store"))],
)
async def create_inventory(payload: InventoryCreate, service: InventoryService = Depends(_service)) -> InventoryRead:
    return InventoryRead.model_validate(await service.create_inventory(payload))


# PUBLIC_INTERFACE
@router.get(
    "/{inventory_id}",
    response_model=InventoryRead,
    summary="Get stock row",
    dependencies=[Depends(require_roles("store", "purchase", "production"))],
)
async def get_inventory(
    inventory_id: UUID = Path(...),
    service: InventoryService = Depends(_service),
) -> InventoryRead:
    return InventoryRead.model_validate(await service.get_inventory(inventory_id))


# PUBLIC_INTERFACE
@router.put(
    "/{inventory_id}",
    response_model=InventoryRead,
    summary="Update stock row",
    description="Descriptive fields only; quantities move through GRNs and stock adjustments.",
    dependencies=[Depends(require_roles("store"))],
)
async def update_inventory(
    payload: InventoryUpdate,
    inventory_id: UUID = Path(...),
    service: InventoryService = Depends(_service),
) -> InventoryRead:
    return InventoryRead.model_validate(await service.update_inventory(inventory_id, payload))


# PUBLIC_INTERFACE
@router.delete(
    "/{inventory_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Deactivate stock row",
    dependencies=[Depends(require_roles("store"))],
)
async def delete_inventory(inventory_id: UUID = Path(...), service: InventoryService = Depends(_service)) -> None:
    await service.delete_inventory(inventory_id)
