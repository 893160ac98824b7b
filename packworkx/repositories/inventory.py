from __future__ import annotations

from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, or_, select

from packworkx.db.base import QTY_PLACES, STATUS_ACTIVE
from packworkx.db.models.inventory import Inventory, StockAdjustment
from packworkx.db.models.items import Item
from .base import CompanyScopedRepository


class InventoryRepository(CompanyScopedRepository[Inventory]):
    """Repository for inventory stock rows."""

    model = Inventory

    async def list_inventory(
        self,
        *,
        item_id: Optional[UUID],
        search: Optional[str],
        status: Optional[str],
        limit: int,
        offset: int,
    ) -> List[Inventory]:
        stmt = self._select()
        if item_id:
            stmt = stmt.where(Inventory.item_id == item_id)
        if search:
            like = f"%{search}%"
            stmt = stmt.where(
                or_(
                    Inventory.inventory_generate_id.ilike(like),
                    Inventory.item_code.ilike(like),
                    Inventory.batch_no.ilike(like),
                    Inventory.location.ilike(like),
                )
            )
        stmt = self._status_filter(stmt, Inventory.status, status)
        stmt = stmt.order_by(Inventory.created_at.desc()).offset(offset).limit(limit)
        return list(await self.scalars(stmt))

    async def list_for_grn(
        self, grn_id: UUID, *, for_update: bool = False, include_inactive: bool = False
    ) -> List[Inventory]:
        stmt = self._select().where(Inventory.grn_id == grn_id)
        if not include_inactive:
            stmt = stmt.where(Inventory.status == STATUS_ACTIVE)
        if for_update:
            stmt = stmt.with_for_update()
        return list(await self.scalars(stmt))

    async def get_for_grn_item(self, grn_item_id: UUID, *, for_update: bool = False) -> Optional[Inventory]:
        """The active stock row posted for one GRN line."""
        stmt = self._select().where(Inventory.grn_item_id == grn_item_id, Inventory.status == STATUS_ACTIVE)
        if for_update:
            stmt = stmt.with_for_update()
        return await self.scalar_one_or_none(stmt.limit(1))

    async def stock_summary(self) -> List[tuple]:
        """
        Active stock per active item.

        Returns:
            Rows of (Item, total quantity available) ordered by item code.
        """
        qty = (
            select(Inventory.item_id, func.sum(Inventory.quantity_available).label("qty"))
            .where(Inventory.company_id == self.company_id, Inventory.status == STATUS_ACTIVE)
            .group_by(Inventory.item_id)
            .subquery()
        )
        stmt = (
            select(Item, func.coalesce(qty.c.qty, 0))
            .outerjoin(qty, qty.c.item_id == Item.id)
            .where(Item.company_id == self.company_id, Item.status == STATUS_ACTIVE)
            .order_by(Item.item_code)
        )
        res = await self.execute(stmt)
        return [(item, Decimal(str(total)).quantize(QTY_PLACES)) for item, total in res.all()]


class StockAdjustmentRepository(CompanyScopedRepository[StockAdjustment]):
    """Repository for stock adjustments."""

    model = StockAdjustment

    async def list_adjustments(
        self,
        *,
        inventory_id: Optional[UUID],
        item_id: Optional[UUID],
        status: Optional[str],
        limit: int,
        offset: int,
    ) -> List[StockAdjustment]:
        stmt = self._select()
        if inventory_id:
            stmt = stmt.where(StockAdjustment.inventory_id == inventory_id)
        if item_id:
            stmt = stmt.where(StockAdjustment.item_id == item_id)
        stmt = self._status_filter(stmt, StockAdjustment.status, status)
        stmt = stmt.order_by(StockAdjustment.created_at.desc()).offset(offset).limit(limit)
        return list(await self.scalars(stmt))

    async def count_active_for_inventory(self, inventory_ids: List[UUID]) -> int:
        if not inventory_ids:
            return 0
        stmt = select(func.count(StockAdjustment.id)).where(
            StockAdjustment.company_id == self.company_id,
            StockAdjustment.inventory_id.in_(inventory_ids),
            StockAdjustment.status == STATUS_ACTIVE,
        )
        res = await self.execute(stmt)
        return int(res.scalar_one())
