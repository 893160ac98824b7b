from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from packworkx.core.deps import get_current_active_user, require_roles
from packworkx.db.session import get_async_session
from packworkx.schemas.skus import SkuCreate, SkuRead, SkuUpdate
from packworkx.services.skus import SkuService

router = APIRouter(prefix="/skus", tags=["SKUs"])


def _service(
    user=Depends(get_current_active_user),
    session: AsyncSession = Depends(get_async_session),
) -> SkuService:
    return SkuService(session, user.company_id, user.id)


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[SkuRead],
    summary="List SKUs",
    description="Box specifications ordered by name.",
    dependencies=[Depends(require_roles("sales", "production"))],
)
async def list_skus(
    service: SkuService = Depends(_service),
    search: Optional[str] = Query(None, description="Name or SKU number (substring)"),
    client_id: Optional[UUID] = Query(None, description="Filter by customer"),
    status: Optional[str] = Query(None, description="active (default) | inactive | all"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[SkuRead]:
    rows = await service.list_skus(search=search, client_id=client_id, status=status, limit=limit, offset=offset)
    return [SkuRead.model_validate(x) for x in rows]


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=SkuRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create SKU",
    description="409 when an active SKU already has this name (case-insensitive).",
    dependencies=[Depends(require_roles("sales", "production"))],
)
async def create_sku(payload: SkuCreate, service: SkuService = Depends(_service)) -> SkuRead:
    return SkuRead.model_validate(await service.create_sku(payload))


# PUBLIC_INTERFACE
@router.get(
    "/{sku_id}",
    response_model=SkuRead,
    summary="Get SKU",
    dependencies=[Depends(require_roles("sales", "production"))],
)
async def get_sku(sku_id: UUID = Path(...), service: SkuService = Depends(_service)) -> SkuRead:
    return SkuRead.model_validate(await service.get_sku(sku_id))


# PUBLIC_INTERFACE
@router.put(
    "/{sku_id}",
    response_model=SkuRead,
    summary="Update SKU",
    dependencies=[Depends(require_roles("sales", "production"))],
)
async def update_sku(
    payload: SkuUpdate,
    sku_id: UUID = Path(...),
    service: SkuService = Depends(_service),
) -> SkuRead:
    return SkuRead.model_validate(await service.update_sku(sku_id, payload))


# PUBLIC_INTERFACE
@router.delete(
    "/{sku_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Deactivate SKU",
    dependencies=[Depends(require_roles("sales", "production"))],
)
async def delete_sku(sku_id: UUID = Path(...), service: SkuService = Depends(_service)) -> None:
    await service.delete_sku(sku_id)
