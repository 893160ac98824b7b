from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, or_, select

from packworkx.db.base import STATUS_ACTIVE
from packworkx.db.models.clients import Client, WalletHistory
from .base import CompanyScopedRepository


class ClientRepository(CompanyScopedRepository[Client]):
    """Repository for customers and suppliers."""

    model = Client

    async def list_clients(
        self,
        *,
        search: Optional[str],
        client_category: Optional[str],
        status: Optional[str],
        limit: int,
        offset: int,
    ) -> List[Client]:
        stmt = self._select()
        if search:
            like = f"%{search}%"
            stmt = stmt.where(
                or_(
                    Client.display_name.ilike(like),
                    Client.company_name.ilike(like),
                    Client.email.ilike(like),
                    Client.client_ref_id.ilike(like),
                )
            )
        if client_category:
            # "both" clients appear under either category
            stmt = stmt.where(Client.client_category.in_([client_category, "both"]))
        stmt = self._status_filter(stmt, Client.status, status)
        stmt = stmt.order_by(Client.display_name).offset(offset).limit(limit)
        return list(await self.scalars(stmt))

    async def find_active_by_email(self, email: str, *, exclude_id: Optional[UUID] = None) -> Optional[Client]:
        stmt = self._select().where(
            func.lower(Client.email) == email.lower(),
            Client.status == STATUS_ACTIVE,
        )
        if exclude_id is not None:
            stmt = stmt.where(Client.id != exclude_id)
        return await self.scalar_one_or_none(stmt.limit(1))

    async def list_wallet_history(self, client_id: UUID, *, limit: int = 100, offset: int = 0) -> List[WalletHistory]:
        stmt = (
            select(WalletHistory)
            .where(WalletHistory.company_id == self.company_id, WalletHistory.client_id == client_id)
            .order_by(WalletHistory.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(await self.scalars(stmt))
