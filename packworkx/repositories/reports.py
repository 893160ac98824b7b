from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from sqlalchemy import Select, func, select

from packworkx.db.base import MONEY_PLACES, STATUS_ACTIVE
from packworkx.db.models.grn import GRN, GRNItem
from packworkx.db.models.machines import Machine
from packworkx.db.models.procurement import PurchaseOrder, PurchaseOrderItem
from packworkx.db.models.sales import WorkOrderInvoice
from packworkx.repositories.base import BaseRepository


class ReportRepository(BaseRepository):
    """Read-only row sources for exports and the dashboard, all filtered by company."""

    def __init__(self, session, company_id: UUID) -> None:
        super().__init__(session)
        self.company_id = company_id

    async def _fetch_all(self, stmt: Select) -> List[tuple]:
        result = await self.execute(stmt)
        return list(result.all())

    async def purchase_order_rows(
        self, *, date_from: Optional[date] = None, date_to: Optional[date] = None, status: Optional[str] = None
    ) -> List[tuple]:
        stmt = select(
            PurchaseOrder.purchase_generate_id,
            PurchaseOrder.po_date,
            PurchaseOrder.supplier_name,
            PurchaseOrder.expected_delivery_date,
            PurchaseOrder.sub_total,
            PurchaseOrder.tax_amount,
            PurchaseOrder.total_amount,
            PurchaseOrder.amount_paid,
            PurchaseOrder.decision,
            PurchaseOrder.receipt_status,
            PurchaseOrder.payment_status,
            PurchaseOrder.status,
        ).where(PurchaseOrder.company_id == self.company_id)
        if date_from:
            stmt = stmt.where(PurchaseOrder.po_date >= date_from)
        if date_to:
            stmt = stmt.where(PurchaseOrder.po_date <= date_to)
        if status is None:
            status = STATUS_ACTIVE
        if status != "all":
            stmt = stmt.where(PurchaseOrder.status == status)
        stmt = stmt.order_by(PurchaseOrder.po_date.desc(), PurchaseOrder.purchase_generate_id.desc())
        return await self._fetch_all(stmt)

    async def grn_receipt_rows(
        self, *, po_id: Optional[UUID] = None, date_from: Optional[date] = None, date_to: Optional[date] = None
    ) -> List[tuple]:
        stmt = (
            select(
                GRN.grn_generate_id,
                GRN.grn_date,
                PurchaseOrder.purchase_generate_id,
                PurchaseOrder.supplier_name,
                GRNItem.line_no,
                PurchaseOrderItem.item_code,
                PurchaseOrderItem.item_name,
                GRNItem.quantity_ordered,
                GRNItem.quantity_received,
                GRNItem.accepted_quantity,
                GRNItem.rejected_quantity,
                GRNItem.batch_no,
                GRN.grn_status,
            )
            .join(GRNItem, GRNItem.grn_id == GRN.id)
            .join(PurchaseOrder, PurchaseOrder.id == GRN.po_id)
            .join(PurchaseOrderItem, PurchaseOrderItem.id == GRNItem.po_item_id)
            .where(GRN.company_id == self.company_id, GRN.status == STATUS_ACTIVE)
        )
        if po_id:
            stmt = stmt.where(GRN.po_id == po_id)
        if date_from:
            stmt = stmt.where(GRN.grn_date >= date_from)
        if date_to:
            stmt = stmt.where(GRN.grn_date <= date_to)
        stmt = stmt.order_by(GRN.grn_date.desc(), GRN.grn_generate_id, GRNItem.line_no)
        return await self._fetch_all(stmt)

    async def receivable_rows(self, *, client_id: Optional[UUID] = None) -> List[tuple]:
        stmt = select(
            WorkOrderInvoice.invoice_number,
            WorkOrderInvoice.invoice_date,
            WorkOrderInvoice.due_date,
            WorkOrderInvoice.client_name,
            WorkOrderInvoice.work_order_ref,
            WorkOrderInvoice.total_amount,
            WorkOrderInvoice.received_amount,
            WorkOrderInvoice.credit_amount,
            WorkOrderInvoice.balance,
            WorkOrderInvoice.payment_status,
        ).where(
            WorkOrderInvoice.company_id == self.company_id,
            WorkOrderInvoice.status == STATUS_ACTIVE,
            WorkOrderInvoice.balance != 0,
        )
        if client_id:
            stmt = stmt.where(WorkOrderInvoice.client_id == client_id)
        stmt = stmt.order_by(WorkOrderInvoice.due_date.asc().nullslast(), WorkOrderInvoice.invoice_number)
        return await self._fetch_all(stmt)

    async def count_open_purchase_orders(self) -> int:
        stmt = select(func.count(PurchaseOrder.id)).where(
            PurchaseOrder.company_id == self.company_id,
            PurchaseOrder.status == STATUS_ACTIVE,
            PurchaseOrder.decision == "pending",
        )
        return int(await self.scalar_one_or_none(stmt) or 0)

    async def count_awaiting_receipt(self) -> int:
        stmt = select(func.count(PurchaseOrder.id)).where(
            PurchaseOrder.company_id == self.company_id,
            PurchaseOrder.status == STATUS_ACTIVE,
            PurchaseOrder.decision == "approve",
            PurchaseOrder.receipt_status != "fully_received",
        )
        return int(await self.scalar_one_or_none(stmt) or 0)

    async def receivables(self) -> tuple[Decimal, int]:
        """Outstanding balance and number of active invoices still owing."""
        stmt = select(func.coalesce(func.sum(WorkOrderInvoice.balance), 0), func.count(WorkOrderInvoice.id)).where(
            WorkOrderInvoice.company_id == self.company_id,
            WorkOrderInvoice.status == STATUS_ACTIVE,
            WorkOrderInvoice.balance > 0,
        )
        total, count = (await self.execute(stmt)).one()
        return Decimal(str(total)).quantize(MONEY_PLACES), int(count)

    async def count_active_machines(self) -> int:
        stmt = select(func.count(Machine.id)).where(
            Machine.company_id == self.company_id, Machine.status == STATUS_ACTIVE
        )
        return int(await self.scalar_one_or_none(stmt) or 0)

