from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from packworkx.core.deps import ADMIN_ROLE, get_current_company_id, require_roles
from packworkx.db.session import get_async_session
from packworkx.repositories.security import SecurityRepository
from packworkx.schemas.auth import RoleCreate, RoleRead, RoleUpdate

router = APIRouter(prefix="/admin/roles", tags=["Roles"])


async def _get_role_or_404(repo: SecurityRepository, role_id: UUID):
    role = await repo.get_role_by_id(role_id)
    if not role:
        raise HTTPException(status_code=404, detail="Role not found")
    return role


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[RoleRead],
    summary="List roles",
    dependencies=[Depends(require_roles(ADMIN_ROLE))],
)
async def list_roles(
    company_id: UUID = Depends(get_current_company_id),
    session: AsyncSession = Depends(get_async_session),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[RoleRead]:
    repo = SecurityRepository(session, company_id)
    roles = await repo.list_roles(limit=limit, offset=offset)
    return [RoleRead.model_validate(r) for r in roles]


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=RoleRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create role",
    dependencies=[Depends(require_roles(ADMIN_ROLE))],
)
async def create_role(
    payload: RoleCreate,
    company_id: UUID = Depends(get_current_company_id),
    session: AsyncSession = Depends(get_async_session),
) -> RoleRead:
    repo = SecurityRepository(session, company_id)
    if await repo.get_role_by_name(payload.name):
        raise HTTPException(status_code=409, detail="Role already exists")
    role = await repo.create_role(payload.name, payload.description)
    await repo.commit()
    return RoleRead.model_validate(role)


# PUBLIC_INTERFACE
@router.get(
    "/{role_id}",
    response_model=RoleRead,
    summary="Get role",
    dependencies=[Depends(require_roles(ADMIN_ROLE))],
)
async def get_role(
    role_id: UUID = Path(...),
    company_id: UUID = Depends(get_current_company_id),
    session: AsyncSession = Depends(get_async_session),
) -> RoleRead:
    repo = SecurityRepository(session, company_id)
    return RoleRead.model_validate(await _get_role_or_404(repo, role_id))


# PUBLIC_INTERFACE
@router.patch(
    "/{role_id}",
    response_model=RoleRead,
    summary="Update role",
    description="Rename a role or change its description. The admin role cannot be renamed.",
    dependencies=[Depends(require_roles(ADMIN_ROLE))],
)
async def update_role(
    payload: RoleUpdate,
    role_id: UUID = Path(...),
    company_id: UUID = Depends(get_current_company_id),
    session: AsyncSession = Depends(get_async_session),
) -> RoleRead:
    repo = SecurityRepository(session, company_id)
    role = await _get_role_or_404(repo, role_id)
    if payload.name is not None and payload.name != role.name:
        if role.name == ADMIN_ROLE:
            raise HTTPException(status_code=400, detail="The admin role cannot be renamed")
        if await repo.get_role_by_name(payload.name):
            raise HTTPException(status_code=409, detail="Role already exists")
        role.name = payload.name
    if payload.description is not None:
        role.description = payload.description
    await repo.flush()
    await repo.commit()
    return RoleRead.model_validate(role)


# PUBLIC_INTERFACE
@router.delete(
    "/{role_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete role",
    description="Delete a role and its user assignments. The admin role cannot be deleted.",
    dependencies=[Depends(require_roles(ADMIN_ROLE))],
)
async def delete_role(
    role_id: UUID = Path(...),
    company_id: UUID = Depends(get_current_company_id),
    session: AsyncSession = Depends(get_async_session),
) -> None:
    repo = SecurityRepository(session, company_id)
    role = await _get_role_or_404(repo, role_id)
    if role.name == ADMIN_ROLE:
        raise HTTPException(status_code=400, detail="The admin role cannot be deleted")
    await repo.delete_role(role)
    await repo.commit()
