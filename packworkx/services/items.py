from __future__ import annotations

import logging
from typing import List, Optional
from uuid import UUID

from packworkx.core.errors import ConflictError, NotFoundError
from packworkx.db.base import STATUS_INACTIVE
from packworkx.db.models.items import Item
from packworkx.repositories.items import ItemRepository
from packworkx.schemas.items import ItemCreate, ItemUpdate
from packworkx.services.base import CompanyService
from packworkx.services.id_generator import generate_id

logger = logging.getLogger(__name__)


class ItemService(CompanyService):
    """Item master maintenance."""

    def __init__(self, session, company_id: UUID, user_id: Optional[UUID] = None) -> None:
        super().__init__(session, company_id, user_id)
        self.repo = ItemRepository(session, company_id)

    async def list_items(self, **filters) -> List[Item]:
        return await self.repo.list_items(**filters)

    async def get_item(self, item_id: UUID) -> Item:
        item = await self.repo.get(item_id)
        if item is None:
            raise NotFoundError("Item not found")
        return item

    async def create_item(self, payload: ItemCreate) -> Item:
        async with self._transaction():
            if await self.repo.find_active_by_code(payload.item_code):
                raise ConflictError("Item code already exists", details={"item_code": payload.item_code})
            item = Item(
                company_id=self.company_id,
                item_generate_id=await generate_id(self.session, self.company_id, "item"),
                created_by=self.user_id,
                updated_by=self.user_id,
                **payload.model_dump(),
            )
            await self.repo.add(item)
            await self.repo.flush()
        logger.info("Created item %s (%s)", item.item_generate_id, item.item_code)
        return item

    async def update_item(self, item_id: UUID, payload: ItemUpdate) -> Item:
        async with self._transaction():
            item = await self.get_item(item_id)
            values = payload.model_dump(exclude_unset=True, exclude_none=True)
            code = values.get("item_code")
            if code and await self.repo.find_active_by_code(code, exclude_id=item.id):
                raise ConflictError("Item code already exists", details={"item_code": code})
            for key, value in values.items():
                setattr(item, key, value)
            item.updated_by = self.user_id
            await self.repo.flush()
        return item

    async def delete_item(self, item_id: UUID) -> None:
        async with self._transaction():
            item = await self.get_item(item_id)
            item.status = STATUS_INACTIVE
            item.updated_by = self.user_id
            await self.repo.flush()
        logger.info("Deactivated item %s", item_id)
