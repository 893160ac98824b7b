from __future__ import annotations

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from packworkx.core.deps import ADMIN_ROLE, get_current_active_user, require_roles
from packworkx.core.security import get_password_hash
from packworkx.db.session import get_async_session
from packworkx.repositories.security import SecurityRepository
from packworkx.schemas.auth import UserCreate, UserRead, UserUpdate
from packworkx.services.company import user_to_read

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/users", tags=["Users"])


async def _read(repo: SecurityRepository, user) -> UserRead:
    return user_to_read(user, await repo.role_names_for_user(user.id))


async def _get_user_or_404(repo: SecurityRepository, user_id: UUID):
    user = await repo.get_user_by_id(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[UserRead],
    summary="List users",
    description="List users of the current company.",
    dependencies=[Depends(require_roles(ADMIN_ROLE))],
)
async def list_users(
    current=Depends(get_current_active_user),
    session: AsyncSession = Depends(get_async_session),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[UserRead]:
    repo = SecurityRepository(session, current.company_id)
    return [await _read(repo, u) for u in await repo.list_users(limit=limit, offset=offset)]


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create user",
    description="Create a user in the current company, optionally assigning roles by name.",
    dependencies=[Depends(require_roles(ADMIN_ROLE))],
)
async def create_user(
    payload: UserCreate,
    current=Depends(get_current_active_user),
    session: AsyncSession = Depends(get_async_session),
) -> UserRead:
    repo = SecurityRepository(session, current.company_id)
    if await repo.get_user_by_email(payload.email):
        raise HTTPException(status_code=409, detail="User with this email already exists")

    roles = []
    for name in payload.roles:
        role = await repo.get_role_by_name(name)
        if role is None:
            raise HTTPException(status_code=400, detail=f"Unknown role: {name}")
        roles.append(role)

    user = await repo.create_user(
        email=payload.email,
        full_name=payload.full_name,
        phone=payload.phone,
        hashed_password=get_password_hash(payload.password),
        is_active=payload.is_active,
    )
    for role in roles:
        await repo.assign_role_to_user(user.id, role.id)
    await repo.commit()
    logger.info("Created user %s with roles %s", user.email, [r.name for r in roles])
    return await _read(repo, user)


# PUBLIC_INTERFACE
@router.get(
    "/{user_id}",
    response_model=UserRead,
    summary="Get user",
    dependencies=[Depends(require_roles(ADMIN_ROLE))],
)
async def get_user(
    user_id: UUID = Path(...),
    current=Depends(get_current_active_user),
    session: AsyncSession = Depends(get_async_session),
) -> UserRead:
    repo = SecurityRepository(session, current.company_id)
    return await _read(repo, await _get_user_or_404(repo, user_id))


# PUBLIC_INTERFACE
@router.patch(
    "/{user_id}",
    response_model=UserRead,
    summary="Update user",
    dependencies=[Depends(require_roles(ADMIN_ROLE))],
)
async def update_user(
    payload: UserUpdate,
    user_id: UUID = Path(...),
    current=Depends(get_current_active_user),
    session: AsyncSession = Depends(get_async_session),
) -> UserRead:
    repo = SecurityRepository(session, current.company_id)
    user = await _get_user_or_404(repo, user_id)
    if payload.email and payload.email.lower() != user.email:
        existing = await repo.get_user_by_email(payload.email)
        if existing and existing.id != user.id:
            raise HTTPException(status_code=409, detail="User with this email already exists")
    await repo.update_user(
        user,
        email=payload.email,
        full_name=payload.full_name,
        phone=payload.phone,
        hashed_password=get_password_hash(payload.password) if payload.password else None,
        is_active=payload.is_active,
    )
    await repo.commit()
    return await _read(repo, user)


# PUBLIC_INTERFACE
@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete user",
    description="Delete a user of the current company. Admins cannot delete themselves.",
    dependencies=[Depends(require_roles(ADMIN_ROLE))],
)
async def delete_user(
    user_id: UUID = Path(...),
    current=Depends(get_current_active_user),
    session: AsyncSession = Depends(get_async_session),
) -> None:
    if user_id == current.id:
        raise HTTPException(status_code=400, detail="You cannot delete your own account")
    repo = SecurityRepository(session, current.company_id)
    user = await _get_user_or_404(repo, user_id)
    await repo.delete_user(user)
    await repo.commit()
    logger.info("Deleted user %s", user.email)


# PUBLIC_INTERFACE
@router.post(
    "/{user_id}/roles/{role_id}",
    response_model=UserRead,
    summary="Assign role to user",
    dependencies=[Depends(require_roles(ADMIN_ROLE))],
)
async def assign_role(
    user_id: UUID,
    role_id: UUID,
    current=Depends(get_current_active_user),
    session: AsyncSession = Depends(get_async_session),
) -> UserRead:
    repo = SecurityRepository(session, current.company_id)
    user = await repo.get_user_by_id(user_id)
    role = await repo.get_role_by_id(role_id)
    if not user or not role:
        raise HTTPException(status_code=404, detail="User or role not found")
    await repo.assign_role_to_user(user_id, role_id)
    await repo.commit()
    return await _read(repo, user)


# PUBLIC_INTERFACE
@router.delete(
    "/{user_id}/roles/{role_id}",
    response_model=UserRead,
    summary="Remove role from user",
    dependencies=[Depends(require_roles(ADMIN_ROLE))],
)
async def remove_role(
    user_id: UUID,
    role_id: UUID,
    current=Depends(get_current_active_user),
    session: AsyncSession = Depends(get_async_session),
) -> UserRead:
    repo = SecurityRepository(session, current.company_id)
    user = await _get_user_or_404(repo, user_id)
    await repo.remove_role_from_user(user_id, role_id)
    await repo.commit()
    return await _read(repo, user)
