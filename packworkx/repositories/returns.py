from __future__ import annotations

from decimal import Decimal
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy import func, select

from packworkx.db.base import STATUS_ACTIVE
from packworkx.db.models.returns import PurchaseReturn, PurchaseReturnItem
from .base import CompanyScopedRepository


class PurchaseReturnRepository(CompanyScopedRepository[PurchaseReturn]):
    """Repository for purchase returns."""

    model = PurchaseReturn

    async def list_returns(
        self,
        *,
        search: Optional[str],
        po_id: Optional[UUID],
        grn_id: Optional[UUID],
        status: Optional[str],
        limit: int,
        offset: int,
    ) -> List[PurchaseReturn]:
        stmt = self._select()
        if search:
            stmt = stmt.where(PurchaseReturn.purchase_return_generate_id.ilike(f"%{search}%"))
        if po_id:
            stmt = stmt.where(PurchaseReturn.po_id == po_id)
        if grn_id:
            stmt = stmt.where(PurchaseReturn.grn_id == grn_id)
        stmt = self._status_filter(stmt, PurchaseReturn.status, status)
        stmt = stmt.order_by(PurchaseReturn.return_date.desc(), PurchaseReturn.created_at.desc())
        return list(await self.scalars(stmt.offset(offset).limit(limit)))

    async def returned_by_grn_item(self, grn_id: UUID) -> Dict[UUID, Decimal]:
        """Quantity already returned per GRN line across active returns of the GRN."""
        stmt = (
            select(PurchaseReturnItem.grn_item_id, func.sum(PurchaseReturnItem.return_qty))
            .join(PurchaseReturn, PurchaseReturn.id == PurchaseReturnItem.purchase_return_id)
            .where(
                PurchaseReturn.company_id == self.company_id,
                PurchaseReturn.grn_id == grn_id,
                PurchaseReturn.status == STATUS_ACTIVE,
            )
            .group_by(PurchaseReturnItem.grn_item_id)
        )
        res = await self.execute(stmt)
        return {grn_item_id: Decimal(str(total or 0)) for grn_item_id, total in res.all()}
