from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, or_

from packworkx.db.base import STATUS_ACTIVE
from packworkx.db.models.items import Item
from .base import CompanyScopedRepository


class ItemRepository(CompanyScopedRepository[Item]):
    """Repository for the item master."""

    model = Item

    async def list_items(
        self,
        *,
        search: Optional[str],
        item_type: Optional[str],
        status: Optional[str],
        limit: int,
        offset: int,
    ) -> List[Item]:
        stmt = self._select()
        if search:
            like = f"%{search}%"
            stmt = stmt.where(
                or_(
                    Item.item_code.ilike(like),
                    Item.item_name.ilike(like),
                    Item.item_generate_id.ilike(like),
                )
            )
        if item_type:
            stmt = stmt.where(Item.item_type == item_type)
        stmt = self._status_filter(stmt, Item.status, status)
        stmt = stmt.order_by(Item.item_code).offset(offset).limit(limit)
        return list(await self.scalars(stmt))

    async def find_active_by_code(self, item_code: str, *, exclude_id: Optional[UUID] = None) -> Optional[Item]:
        stmt = self._select().where(
            func.lower(Item.item_code) == item_code.lower(),
            Item.status == STATUS_ACTIVE,
        )
        if exclude_id is not None:
            stmt = stmt.where(Item.id != exclude_id)
        return await self.scalar_one_or_none(stmt.limit(1))

    async def get_many(self, item_ids: List[UUID]) -> dict[UUID, Item]:
        if not item_ids:
            return {}
        stmt = self._select().where(Item.id.in_(item_ids))
        return {row.id: row for row in await self.scalars(stmt)}
