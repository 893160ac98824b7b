from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from packworkx.core.deps import get_current_active_user, require_roles
from packworkx.db.session import get_async_session
from packworkx.schemas.work_orders import WorkOrderCreate, WorkOrderRead, WorkOrderUpdate
from packworkx.services.work_orders import WorkOrderService

router = APIRouter(prefix="/work-orders", tags=["Work Orders"])


def _service(
    user=Depends(get_current_active_user),
    session: AsyncSession = Depends(get_async_session),
) -> WorkOrderService:
    return WorkOrderService(session, user.company_id, user.id)


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[WorkOrderRead],
    summary="List work orders",
    dependencies=[Depends(require_roles("sales", "production"))],
)
async def list_work_orders(
    service: WorkOrderService = Depends(_service),
    search: Optional[str] = Query(None, description="Work order number, SKU name or sale order reference"),
    client_id: Optional[UUID] = Query(None),
    stage: Optional[str] = Query(None, description="planned | in_production | completed | on_hold"),
    status: Optional[str] = Query(None, description="active (default) | inactive | all"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[WorkOrderRead]:
    rows = await service.list_work_orders(
        search=search, client_id=client_id, stage=stage, status=status, limit=limit, offset=offset
    )
    return [WorkOrderRead.model_validate(x) for x in rows]


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=WorkOrderRead,
    status_code=status.HTTP_201_CREATED,
    summary="Open work order",
    description="Outsourced orders need an outsource name; the planned window may not end before it starts.",
    dependencies=[Depends(require_roles("sales", "production"))],
)
async def create_work_order(payload: WorkOrderCreate, service: WorkOrderService = Depends(_service)) -> WorkOrderRead:
    return WorkOrderRead.model_validate(await service.create_work_order(payload))


# PUBLIC_INTERFACE
@router.get(
    "/{work_order_id}",
    response_model=WorkOrderRead,
    summary="Get work order",
    dependencies=[Depends(require_roles("sales", "production"))],
)
async def get_work_order(
    work_order_id: UUID = Path(...), service: WorkOrderService = Depends(_service)
) -> WorkOrderRead:
    return WorkOrderRead.model_validate(await service.get_work_order(work_order_id))


# PUBLIC_INTERFACE
@router.put(
    "/{work_order_id}",
    response_model=WorkOrderRead,
    summary="Update work order",
    dependencies=[Depends(require_roles("sales", "production"))],
)
async def update_work_order(
    payload: WorkOrderUpdate,
    work_order_id: UUID = Path(...),
    service: WorkOrderService = Depends(_service),
) -> WorkOrderRead:
    return WorkOrderRead.model_validate(await service.update_work_order(work_order_id, payload))


# PUBLIC_INTERFACE
@router.delete(
    "/{work_order_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Cancel work order",
    dependencies=[Depends(require_roles("sales", "production"))],
)
async def delete_work_order(work_order_id: UUID = Path(...), service: WorkOrderService = Depends(_service)) -> None:
    await service.delete_work_order(work_order_id)
