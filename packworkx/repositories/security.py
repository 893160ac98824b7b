from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from sqlalchemy import delete, func, select

from packworkx.db.models.security import Role, User, UserRole
from .base import BaseRepository


class SecurityRepository(BaseRepository):
    """
    Repository for user/role management within a company.

    `company_id` may be omitted only for the login lookup, which resolves a user
    by globally unique email before any company is known.
    """

    def __init__(self, session, company_id: Optional[UUID] = None) -> None:
        super().__init__(session)
        self.company_id = company_id

    # Users
    async def get_user_by_email(self, email: str) -> Optional[User]:
        stmt = select(User).where(func.lower(User.email) == email.lower())
        return await self.scalar_one_or_none(stmt)

    async def get_user_by_id(self, user_id: UUID) -> Optional[User]:
        stmt = select(User).where(User.id == user_id, User.company_id == self.company_id)
        return await self.scalar_one_or_none(stmt)

    async def list_users(self, limit: int = 100, offset: int = 0) -> List[User]:
        stmt = (
            select(User)
            .where(User.company_id == self.company_id)
            .order_by(User.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await self.scalars(stmt)
        return list(result)

    async def create_user(
        self,
        *,
        email: str,
        full_name: Optional[str],
        hashed_password: str,
        phone: Optional[str] = None,
        is_active: bool = True,
        is_superadmin: bool = False,
    ) -> User:
        user = User(
            company_id=self.company_id,
            email=email.lower(),
            full_name=full_name,
            phone=phone,
            hashed_password=hashed_password,
            is_active=is_active,
            is_superadmin=is_superadmin,
        )
        await self.add(user)
        await self.flush()
        return user

    async def update_user(self, user: User, **values) -> User:
        for key, value in values.items():
            if value is not None:
                setattr(user, key, value.lower() if key == "email" else value)
        await self.flush()
        return user

    async def delete_user(self, user: User) -> None:
        await self.execute(delete(UserRole).where(UserRole.user_id == user.id))
        await self.delete(user)
        await self.flush()

    async def list_roles_for_user(self, user_id: UUID) -> List[Role]:
        stmt = (
            select(Role)
            .join(UserRole, Role.id == UserRole.role_id)
            .where(UserRole.user_id == user_id, UserRole.company_id == self.company_id)
            .order_by(Role.name)
        )
        result = await self.scalars(stmt)
        return list(result)

    async def role_names_for_user(self, user_id: UUID) -> List[str]:
        return [r.name for r in await self.list_roles_for_user(user_id)]

    # Roles
    async def list_roles(self, limit: int = 100, offset: int = 0) -> List[Role]:
        stmt = (
            select(Role)
            .where(Role.company_id == self.company_id)
            .order_by(Role.name)
            .offset(offset)
            .limit(limit)
        )
        res = await self.scalars(stmt)
        return list(res)

    async def get_role_by_id(self, role_id: UUID) -> Optional[Role]:
        stmt = select(Role).where(Role.id == role_id, Role.company_id == self.company_id)
        return await self.scalar_one_or_none(stmt)

    async def get_role_by_name(self, name: str) -> Optional[Role]:
        stmt = select(Role).where(Role.name == name, Role.company_id == self.company_id)
        return await self.scalar_one_or_none(stmt)

    async def create_role(self, name: str, description: Optional[str] = None) -> Role:
        role = Role(company_id=self.company_id, name=name, description=description)
        await self.add(role)
        await self.flush()
        return role

    async def delete_role(self, role: Role) -> None:
        await self.execute(delete(UserRole).where(UserRole.role_id == role.id))
        await self.delete(role)
        await self.flush()

    # Associations
    async def assign_role_to_user(self, user_id: UUID, role_id: UUID) -> None:
        stmt = select(UserRole).where(
            UserRole.company_id == self.company_id,
            UserRole.user_id == user_id,
            UserRole.role_id == role_id,
        )
        if await self.scalar_one_or_none(stmt):
            return
        await self.add(UserRole(company_id=self.company_id, user_id=user_id, role_id=role_id))
        await self.flush()

    async def remove_role_from_user(self, user_id: UUID, role_id: UUID) -> None:
        stmt = delete(UserRole).where(
            UserRole.company_id == self.company_id,
            UserRole.user_id == user_id,
            UserRole.role_id == role_id,
        )
        await self.execute(stmt)
        await self.flush()
