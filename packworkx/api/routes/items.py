from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from packworkx.core.deps import get_current_active_user, require_roles
from packworkx.db.session import get_async_session
from packworkx.schemas.items import ItemCreate, ItemRead, ItemUpdate
from packworkx.services.items import ItemService

router = APIRouter(prefix="/items", tags=["Items"])


def _service(
    user=Depends(get_current_active_user),
    session: AsyncSession = Depends(get_async_session),
) -> ItemService:
    return ItemService(session, user.company_id, user.id)


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[ItemRead],
    summary="List items",
    description="Item master ordered by item code.",
)
async def list_items(
    service: ItemService = Depends(_service),
    search: Optional[str] = Query(None, description="Filter by code or name (substring)"),
    item_type: Optional[str] = Query(None, description="reels | glues | pins | finished-goods | semi-finished-goods | raw-materials"),
    status: Optional[str] = Query(None, description="active (default) | inactive | all"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[ItemRead]:
    rows = await service.list_items(search=search, item_type=item_type, status=status, limit=limit, offset=offset)
    return [ItemRead.model_validate(x) for x in rows]


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=ItemRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create item",
    dependencies=[Depends(require_roles("purchase", "store"))],
)
async def create_item(payload: ItemCreate, service: ItemService = Depends(_service)) -> ItemRead:
    return ItemRead.model_validate(await service.create_item(payload))


# PUBLIC_INTERFACE
@router.get("/{item_id}", response_model=ItemRead, summary="Get item")
async def get_item(item_id: UUID = Path(...), service: ItemService = Depends(_service)) -> ItemRead:
    return ItemRead.model_validate(await service.get_item(item_id))


# PUBLIC_INTERFACE
@router.put(
    "/{item_id}",
    response_model=ItemRead,
    summary="Update item",
    dependencies=[Depends(require_roles("purchase", "store"))],
)
async def update_item(
    payload: ItemUpdate,
    item_id: UUID = Path(...),
    service: ItemService = Depends(_service),
) -> ItemRead:
    return ItemRead.model_validate(await service.update_item(item_id, payload))


# PUBLIC_INTERFACE
@router.delete(
    "/{item_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Deactivate item",
    dependencies=[Depends(require_roles("purchase", "store"))],
)
async def delete_item(item_id: UUID = Path(...), service: ItemService = Depends(_service)) -> None:
    await service.delete_item(item_id)
