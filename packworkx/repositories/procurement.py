from __future__ import annotations

from decimal import Decimal
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy import func, or_, select

from packworkx.db.base import QTY_PLACES, STATUS_ACTIVE
from packworkx.db.models.grn import GRN, GRNItem
from packworkx.db.models.procurement import PurchaseOrder
from .base import CompanyScopedRepository


class PurchaseOrderRepository(CompanyScopedRepository[PurchaseOrder]):
    """Repository for purchase orders, their lines and payments."""

    model = PurchaseOrder

    async def list_purchase_orders(
        self,
        *,
        search: Optional[str],
        supplier_id: Optional[UUID],
        decision: Optional[str],
        receipt_status: Optional[str],
        payment_status: Optional[str],
        status: Optional[str],
        limit: int,
        offset: int,
    ) -> List[PurchaseOrder]:
        stmt = self._select()
        if search:
            like = f"%{search}%"
            stmt = stmt.where(
                or_(
                    PurchaseOrder.purchase_generate_id.ilike(like),
                    PurchaseOrder.supplier_name.ilike(like),
                    PurchaseOrder.reference.ilike(like),
                )
            )
        if supplier_id:
            stmt = stmt.where(PurchaseOrder.supplier_id == supplier_id)
        if decision:
            stmt = stmt.where(PurchaseOrder.decision == decision)
        if receipt_status:
            stmt = stmt.where(PurchaseOrder.receipt_status == receipt_status)
        if payment_status:
            stmt = stmt.where(PurchaseOrder.payment_status == payment_status)
        stmt = self._status_filter(stmt, PurchaseOrder.status, status)
        stmt = stmt.order_by(PurchaseOrder.po_date.desc(), PurchaseOrder.created_at.desc())
        stmt = stmt.offset(offset).limit(limit)
        return list(await self.scalars(stmt))

    async def list_open_purchase_orders(self) -> List[PurchaseOrder]:
        """Approved, active POs that still expect goods."""
        stmt = (
            self._select()
            .where(
                PurchaseOrder.status == STATUS_ACTIVE,
                PurchaseOrder.decision == "approve",
                PurchaseOrder.receipt_status != "fully_received",
            )
            .order_by(PurchaseOrder.po_date.desc(), PurchaseOrder.created_at.desc())
        )
        return list(await self.scalars(stmt))

    async def accepted_by_po_item(
        self, po_id: UUID, *, exclude_grn_id: Optional[UUID] = None
    ) -> Dict[UUID, Decimal]:
        """
        Sum accepted quantity per PO line across active GRNs.

        Parameters:
            po_id: purchase order id
            exclude_grn_id: GRN whose lines are left out (used while editing it)
        Returns:
            Mapping of po_item_id to accepted quantity; lines with no receipts are absent.
        """
        stmt = (
            select(GRNItem.po_item_id, func.coalesce(func.sum(GRNItem.accepted_quantity), 0))
            .join(GRN, GRN.id == GRNItem.grn_id)
            .where(
                GRN.company_id == self.company_id,
                GRN.po_id == po_id,
                GRN.status == STATUS_ACTIVE,
            )
            .group_by(GRNItem.po_item_id)
        )
        if exclude_grn_id is not None:
            stmt = stmt.where(GRN.id != exclude_grn_id)
        res = await self.execute(stmt)
        return {row[0]: Decimal(str(row[1])).quantize(QTY_PLACES) for row in res.all()}

    async def count_active_grns(self, po_id: UUID) -> int:
        stmt = select(func.count(GRN.id)).where(
            GRN.company_id == self.company_id,
            GRN.po_id == po_id,
            GRN.status == STATUS_ACTIVE,
        )
        res = await self.execute(stmt)
        return int(res.scalar_one())

    async def count_grn_lines_for_po_items(self, po_item_ids: List[UUID]) -> int:
        """GRN lines of any status pointing at the given PO lines."""
        if not po_item_ids:
            return 0
        stmt = select(func.count(GRNItem.id)).where(
            GRNItem.company_id == self.company_id,
            GRNItem.po_item_id.in_(po_item_ids),
        )
        res = await self.execute(stmt)
        return int(res.scalar_one())
