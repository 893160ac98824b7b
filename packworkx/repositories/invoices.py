from __future__ import annotations

from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func, or_, select

from packworkx.db.models.sales import PartialPayment, WorkOrderInvoice
from .base import CompanyScopedRepository


class InvoiceRepository(CompanyScopedRepository[WorkOrderInvoice]):
    """Repository for work order invoices and their partial payments."""

    model = WorkOrderInvoice

    async def list_invoices(
        self,
        *,
        status: Optional[str],
        payment_status: Optional[str],
        client_id: Optional[UUID],
        work_order_ref: Optional[str],
        sale_order_ref: Optional[str],
        search: Optional[str],
        limit: int,
        offset: int,
    ) -> Tuple[List[WorkOrderInvoice], int]:
        stmt = self._select()
        stmt = self._status_filter(stmt, WorkOrderInvoice.status, status)
        if payment_status:
            stmt = stmt.where(WorkOrderInvoice.payment_status == payment_status)
        if client_id:
            stmt = stmt.where(WorkOrderInvoice.client_id == client_id)
        if work_order_ref:
            stmt = stmt.where(WorkOrderInvoice.work_order_ref == work_order_ref)
        if sale_order_ref:
            stmt = stmt.where(WorkOrderInvoice.sale_order_ref == sale_order_ref)
        if search:
            like = f"%{search}%"
            stmt = stmt.where(
                or_(
                    WorkOrderInvoice.invoice_number.ilike(like),
                    WorkOrderInvoice.client_name.ilike(like),
                )
            )

        count_stmt = select(func.count()).select_from(stmt.subquery())
        total = int((await self.execute(count_stmt)).scalar_one())

        stmt = stmt.order_by(WorkOrderInvoice.updated_at.desc()).offset(offset).limit(limit)
        return list(await self.scalars(stmt)), total

    async def get_payment(self, invoice_id: UUID, payment_id: UUID, *, for_update: bool = False) -> Optional[PartialPayment]:
        stmt = select(PartialPayment).where(
            PartialPayment.company_id == self.company_id,
            PartialPayment.invoice_id == invoice_id,
            PartialPayment.id == payment_id,
        )
        if for_update:
            stmt = stmt.with_for_update()
        return await self.scalar_one_or_none(stmt)
