from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from packworkx.core.deps import get_current_active_user, require_roles
from packworkx.db.session import get_async_session
from packworkx.schemas.inventory import StockAdjustmentCreate, StockAdjustmentRead
from packworkx.services.inventory import StockAdjustmentService

router = APIRouter(
    prefix="/stock-adjustments",
    tags=["Inventory"],
    dependencies=[Depends(require_roles("store"))],
)


def _service(
    user=Depends(get_current_active_user),
    session: AsyncSession = Depends(get_async_session),
) -> StockAdjustmentService:
    return StockAdjustmentService(session, user.company_id, user.id)


# PUBLIC_INTERFACE
@router.get("", response_model=List[StockAdjustmentRead], summary="List stock adjustments")
async def list_adjustments(
    service: StockAdjustmentService = Depends(_service),
    inventory_id: Optional[UUID] = Query(None),
    item_id: Optional[UUID] = Query(None),
    status: Optional[str] = Query(None, description="active (default) | inactive | all"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[StockAdjustmentRead]:
    rows = await service.list_adjustments(
        inventory_id=inventory_id, item_id=item_id, status=status, limit=limit, offset=offset
    )
    return [StockAdjustmentRead.model_validate(r) for r in rows]


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=StockAdjustmentRead,
    status_code=status.HTTP_201_CREATED,
    summary="Adjust stock",
    description="Apply increase/decrease steps in order. 409 if any step would leave negative stock.",
)
async def create_adjustment(
    payload: StockAdjustmentCreate,
    service: StockAdjustmentService = Depends(_service),
) -> StockAdjustmentRead:
    return StockAdjustmentRead.model_validate(await service.create_adjustment(payload))


# PUBLIC_INTERFACE
@router.get("/{adjustment_id}", response_model=StockAdjustmentRead, summary="Get stock adjustment")
async def get_adjustment(
    adjustment_id: UUID = Path(...),
    service: StockAdjustmentService = Depends(_service),
) -> StockAdjustmentRead:
    return StockAdjustmentRead.model_validate(await service.get_adjustment(adjustment_id))


# PUBLIC_INTERFACE
@router.delete(
    "/{adjustment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Cancel stock adjustment",
    description="Reverse the adjustment's net effect on the stock row.",
)
async def delete_adjustment(
    adjustment_id: UUID = Path(...),
    service: StockAdjustmentService = Depends(_service),
) -> None:
    await service.delete_adjustment(adjustment_id)
