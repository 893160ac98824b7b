from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from packworkx.core.errors import BusinessRuleError, ConflictError, NotFoundError
from packworkx.db.base import STATUS_INACTIVE
from packworkx.db.models.inventory import Inventory, StockAdjustment, StockAdjustmentItem
from packworkx.repositories.inventory import InventoryRepository, StockAdjustmentRepository
from packworkx.repositories.items import ItemRepository
from packworkx.schemas.inventory import (
    InventoryCreate,
    InventoryUpdate,
    StockAdjustmentCreate,
    StockSummaryRow,
)
from packworkx.services.base import CompanyService, qty
from packworkx.services.id_generator import generate_id

logger = logging.getLogger(__name__)


class InventoryService(CompanyService):
    """Stock rows and the per-item stock summary."""

    def __init__(self, session, company_id: UUID, user_id: Optional[UUID] = None) -> None:
        super().__init__(session, company_id, user_id)
        self.repo = InventoryRepository(session, company_id)
        self.items = ItemRepository(session, company_id)
        self.adjustments = StockAdjustmentRepository(session, company_id)

    async def list_inventory(self, **filters) -> List[Inventory]:
        return await self.repo.list_inventory(**filters)

    async def get_inventory(self, inventory_id: UUID) -> Inventory:
        row = await self.repo.get(inventory_id)
        if row is None:
            raise NotFoundError("Inventory record not found")
        return row

    async def create_inventory(self, payload: InventoryCreate) -> Inventory:
        """Open a manual stock row (opening stock) for an active item."""
        async with self._transaction():
            item = await self.items.get_active(payload.item_id)
            if item is None:
                raise BusinessRuleError("Item not found or inactive", details={"item_id": str(payload.item_id)})
            quantity = qty(payload.quantity)
            row = Inventory(
                company_id=self.company_id,
                inventory_generate_id=await generate_id(self.session, self.company_id, "inventory"),
                item_id=item.id,
                item_code=item.item_code,
                description=payload.description or item.item_name,
                quantity_available=quantity,
                posted_quantity=quantity,
                batch_no=payload.batch_no,
                location=payload.location,
                created_by=self.user_id,
                updated_by=self.user_id,
            )
            await self.repo.add(row)
            await self.repo.flush()
        logger.info("Opened stock %s for item %s qty=%s", row.inventory_generate_id, item.item_code, quantity)
        return row

    async def update_inventory(self, inventory_id: UUID, payload: InventoryUpdate) -> Inventory:
        async with self._transaction():
            row = await self.get_inventory(inventory_id)
            for key, value in payload.model_dump(exclude_unset=True).items():
                setattr(row, key, value)
            row.updated_by = self.user_id
            await self.repo.flush()
        return row

    async def delete_inventory(self, inventory_id: UUID) -> None:
        """Deactivate a stock row that is not tied to a GRN and has no active adjustments."""
        async with self._transaction():
            row = await self.get_inventory(inventory_id)
            if row.grn_id is not None:
                logger.warning("Refusing to delete GRN-posted inventory %s", row.inventory_generate_id)
                raise ConflictError(
                    "Stock posted by a GRN is removed by editing or cancelling the GRN",
                    details={"grn_id": str(row.grn_id)},
                )
            if await self.adjustments.count_active_for_inventory([row.id]):
                raise ConflictError(
                    "Inventory has active stock adjustments",
                    details={"inventory_id": str(row.id)},
                )
            row.status = STATUS_INACTIVE
            row.updated_by = self.user_id
            await self.repo.flush()
        logger.info("Deactivated inventory %s", row.inventory_generate_id)

    async def stock_summary(self) -> List[StockSummaryRow]:
        """Total active stock per active item, flagged against min and reorder levels."""
        rows = []
        for item, total in await self.repo.stock_summary():
            min_level = qty(item.min_stock_level)
            reorder_level = qty(item.reorder_level)
            rows.append(
                StockSummaryRow(
                    item_id=item.id,
                    item_code=item.item_code,
                    item_name=item.item_name,
                    uom=item.uom,
                    quantity_available=float(total),
                    min_stock_level=float(min_level),
                    reorder_level=float(reorder_level),
                    low_stock=total <= min_level,
                    reorder=total <= reorder_level,
                )
            )
        return rows


class StockAdjustmentService(CompanyService):
    """Manual increase/decrease of one inventory row, reversible by cancelling."""

    def __init__(self, session, company_id: UUID, user_id: Optional[UUID] = None) -> None:
        super().__init__(session, company_id, user_id)
        self.repo = StockAdjustmentRepository(session, company_id)
        self.inventory = InventoryRepository(session, company_id)

    async def list_adjustments(self, **filters) -> List[StockAdjustment]:
        return await self.repo.list_adjustments(**filters)

    async def get_adjustment(self, adjustment_id: UUID) -> StockAdjustment:
        row = await self.repo.get(adjustment_id)
        if row is None:
            raise NotFoundError("Stock adjustment not found")
        return row

    # PUBLIC_INTERFACE
    async def create_adjustment(self, payload: StockAdjustmentCreate) -> StockAdjustment:
        """
        Apply increase/decrease steps in order to an inventory row.

        Parameters:
            payload: StockAdjustmentCreate request
        Returns:
            The StockAdjustment with per-step previous/new quantities.
        Raises:
            NotFoundError: inventory row missing or inactive.
            ConflictError: a decrease would take stock below zero; nothing is written.
        """
        async with self._transaction():
            stock = await self.inventory.get_active(payload.inventory_id, for_update=True)
            if stock is None:
                raise NotFoundError("Inventory record not found")
            current = qty(stock.quantity_available)
            steps = []
            for idx, step in enumerate(payload.items, start=1):
                amount = qty(step.adjustment_quantity)
                new = current + amount if step.adjustment_type == "increase" else current - amount
                if new < 0:
                    logger.warning(
                        "Rejected adjustment on %s: step %d would leave %s", stock.inventory_generate_id, idx, new
                    )
                    raise ConflictError(
                        "Adjustment would make stock negative",
                        details={"line": idx, "available": float(current), "decrease": float(amount)},
                    )
                steps.append(
                    StockAdjustmentItem(
                        company_id=self.company_id,
                        line_no=idx,
                        adjustment_type=step.adjustment_type,
                        adjustment_quantity=amount,
                        previous_quantity=current,
                        new_quantity=new,
                    )
                )
                current = new

            adjustment = StockAdjustment(
                company_id=self.company_id,
                adjustment_generate_id=await generate_id(self.session, self.company_id, "stock_adjustments"),
                inventory_id=stock.id,
                item_id=stock.item_id,
                adjustment_date=payload.adjustment_date or date.today(),
                reason=payload.reason,
                remarks=payload.remarks,
                created_by=self.user_id,
                updated_by=self.user_id,
                items=steps,
            )
            stock.quantity_available = current
            stock.updated_by = self.user_id
            await self.repo.add(adjustment)
            await self.repo.flush()
        logger.info(
            "Stock adjusted %s on %s: now %s", adjustment.adjustment_generate_id, stock.inventory_generate_id, current
        )
        return adjustment

    async def delete_adjustment(self, adjustment_id: UUID) -> None:
        """Cancel an adjustment, reversing its net effect on the inventory row."""
        async with self._transaction():
            adjustment = await self.repo.get_active(adjustment_id, for_update=True)
            if adjustment is None:
                raise NotFoundError("Stock adjustment not found")
            stock = await self.inventory.get(adjustment.inventory_id, for_update=True)
            if stock is None:
                raise NotFoundError("Inventory record not found")
            net = sum(
                (
                    qty(s.adjustment_quantity) if s.adjustment_type == "increase" else -qty(s.adjustment_quantity)
                    for s in adjustment.items
                ),
                Decimal(0),
            )
            restored = qty(stock.quantity_available) - net
            if restored < 0:
                raise ConflictError(
                    "Reversing this adjustment would make stock negative",
                    details={"available": float(stock.quantity_available), "net_change": float(net)},
                )
            stock.quantity_available = restored
            stock.updated_by = self.user_id
            adjustment.status = STATUS_INACTIVE
            adjustment.updated_by = self.user_id
            await self.repo.flush()
        logger.info("Reversed stock adjustment %s; %s now %s", adjustment.adjustment_generate_id, stock.id, restored)
