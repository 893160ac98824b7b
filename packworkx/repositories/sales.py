from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, or_

from packworkx.db.base import STATUS_ACTIVE
from packworkx.db.models.sales import Sku, WorkOrder
from .base import CompanyScopedRepository


class SkuRepository(CompanyScopedRepository[Sku]):
    """Repository for customer SKUs."""

    model = Sku

    async def list_skus(
        self,
        *,
        search: Optional[str],
        client_id: Optional[UUID],
        status: Optional[str],
        limit: int,
        offset: int,
    ) -> List[Sku]:
        stmt = self._select()
        if search:
            like = f"%{search}%"
            stmt = stmt.where(or_(Sku.sku_name.ilike(like), Sku.sku_generate_id.ilike(like)))
        if client_id:
            stmt = stmt.where(Sku.client_id == client_id)
        stmt = self._status_filter(stmt, Sku.status, status)
        stmt = stmt.order_by(Sku.sku_name).offset(offset).limit(limit)
        return list(await self.scalars(stmt))

    async def find_active_by_name(self, sku_name: str, *, exclude_id: Optional[UUID] = None) -> Optional[Sku]:
        stmt = self._select().where(func.lower(Sku.sku_name) == sku_name.lower(), Sku.status == STATUS_ACTIVE)
        if exclude_id is not None:
            stmt = stmt.where(Sku.id != exclude_id)
        return await self.scalar_one_or_none(stmt.limit(1))

    async def active_ids(self, sku_ids: List[UUID], *, client_id: Optional[UUID] = None) -> set[UUID]:
        """Ids among `sku_ids` that are active, optionally only those of one client."""
        if not sku_ids:
            return set()
        stmt = self._select().where(Sku.id.in_(sku_ids), Sku.status == STATUS_ACTIVE)
        if client_id is not None:
            stmt = stmt.where(Sku.client_id == client_id)
        return {sku.id for sku in await self.scalars(stmt)}


class WorkOrderRepository(CompanyScopedRepository[WorkOrder]):
    """Repository for work orders."""

    model = WorkOrder

    async def list_work_orders(
        self,
        *,
        search: Optional[str],
        client_id: Optional[UUID],
        stage: Optional[str],
        status: Optional[str],
        limit: int,
        offset: int,
    ) -> List[WorkOrder]:
        stmt = self._select()
        if search:
            like = f"%{search}%"
            stmt = stmt.where(
                or_(
                    WorkOrder.work_order_generate_id.ilike(like),
                    WorkOrder.sku_name.ilike(like),
                    WorkOrder.sale_order_ref.ilike(like),
                )
            )
        if client_id:
            stmt = stmt.where(WorkOrder.client_id == client_id)
        if stage:
            stmt = stmt.where(WorkOrder.stage == stage)
        stmt = self._status_filter(stmt, WorkOrder.status, status)
        stmt = stmt.order_by(WorkOrder.created_at.desc()).offset(offset).limit(limit)
        return list(await self.scalars(stmt))

    async def find_active_by_number(self, number: str) -> Optional[WorkOrder]:
        stmt = self._select().where(
            func.lower(WorkOrder.work_order_generate_id) == number.lower(),
            WorkOrder.status == STATUS_ACTIVE,
        )
        return await self.scalar_one_or_none(stmt.limit(1))
