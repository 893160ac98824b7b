from __future__ import annotations

from datetime import date
from typing import Optional
from uuid import UUID

import pandas as pd

from packworkx.repositories.reports import ReportRepository
from packworkx.schemas.reports import DashboardSummary
from packworkx.services.base import CompanyService
from packworkx.services.inventory import InventoryService

PO_COLUMNS = [
    "po_number",
    "po_date",
    "supplier",
    "expected_delivery_date",
    "sub_total",
    "tax_amount",
    "total_amount",
    "amount_paid",
    "amount_due",
    "decision",
    "receipt_status",
    "payment_status",
    "status",
]

GRN_COLUMNS = [
    "grn_number",
    "grn_date",
    "po_number",
    "supplier",
    "line_no",
    "item_code",
    "item_name",
    "quantity_ordered",
    "quantity_received",
    "accepted_quantity",
    "rejected_quantity",
    "batch_no",
    "grn_status",
]

STOCK_COLUMNS = [
    "item_code",
    "item_name",
    "uom",
    "quantity_available",
    "min_stock_level",
    "reorder_level",
    "low_stock",
    "reorder",
]

RECEIVABLE_COLUMNS = [
    "invoice_number",
    "invoice_date",
    "due_date",
    "client",
    "work_order_ref",
    "total_amount",
    "received_amount",
    "credit_amount",
    "balance",
    "payment_status",
    "days_overdue",
]


class ReportService(CompanyService):
    """Tabular report data for exports plus the dashboard counters."""

    def __init__(self, session, company_id: UUID, user_id: Optional[UUID] = None) -> None:
        super().__init__(session, company_id, user_id)
        self.repo = ReportRepository(session, company_id)

    async def purchase_orders_frame(
        self, *, date_from: Optional[date] = None, date_to: Optional[date] = None, status: Optional[str] = None
    ) -> pd.DataFrame:
        rows = await self.repo.purchase_order_rows(date_from=date_from, date_to=date_to, status=status)
        data = []
        for (
            number,
            po_date,
            supplier,
            expected,
            sub_total,
            tax_amount,
            total_amount,
            amount_paid,
            decision,
            receipt_status,
            payment_status,
            status_,
        ) in rows:
            total = float(total_amount or 0)
            paid = float(amount_paid or 0)
            data.append(
                {
                    "po_number": number,
                    "po_date": po_date,
                    "supplier": supplier,
                    "expected_delivery_date": expected,
                    "sub_total": float(sub_total or 0),
                    "tax_amount": float(tax_amount or 0),
                    "total_amount": total,
                    "amount_paid": paid,
                    "amount_due": round(total - paid, 2),
                    "decision": decision,
                    "receipt_status": receipt_status,
                    "payment_status": payment_status,
                    "status": status_,
                }
            )
        return pd.DataFrame(data, columns=PO_COLUMNS)

    async def grn_receipts_frame(
        self, *, po_id: Optional[UUID] = None, date_from: Optional[date] = None, date_to: Optional[date] = None
    ) -> pd.DataFrame:
        rows = await self.repo.grn_receipt_rows(po_id=po_id, date_from=date_from, date_to=date_to)
        data = [
            {
                "grn_number": grn_number,
                "grn_date": grn_date,
                "po_number": po_number,
                "supplier": supplier,
                "line_no": int(line_no),
                "item_code": item_code,
                "item_name": item_name,
                "quantity_ordered": float(ordered),
                "quantity_received": float(received),
                "accepted_quantity": float(accepted),
                "rejected_quantity": float(rejected),
                "batch_no": batch_no,
                "grn_status": grn_status,
            }
            for (
                grn_number,
                grn_date,
                po_number,
                supplier,
                line_no,
                item_code,
                item_name,
                ordered,
                received,
                accepted,
                rejected,
                batch_no,
                grn_status,
            ) in rows
        ]
        return pd.DataFrame(data, columns=GRN_COLUMNS)

    async def inventory_stock_frame(self, *, low_stock_only: bool = False) -> pd.DataFrame:
        summary = await InventoryService(self.session, self.company_id, self.user_id).stock_summary()
        if low_stock_only:
            summary = [row for row in summary if row.low_stock or row.reorder]
        data = [row.model_dump(include=set(STOCK_COLUMNS)) for row in summary]
        return pd.DataFrame(data, columns=STOCK_COLUMNS)

    async def receivables_frame(self, *, client_id: Optional[UUID] = None, as_of: Optional[date] = None) -> pd.DataFrame:
        """Active invoices with an open balance; `days_overdue` is counted from `as_of` (default today)."""
        today = as_of or date.today()
        data = []
        for (
            number,
            invoice_date,
            due_date,
            client,
            work_order_ref,
            total_amount,
            received_amount,
            credit_amount,
            balance,
            payment_status,
        ) in await self.repo.receivable_rows(client_id=client_id):
            overdue = (today - due_date).days if due_date is not None and due_date < today else 0
            data.append(
                {
                    "invoice_number": number,
                    "invoice_date": invoice_date,
                    "due_date": due_date,
                    "client": client,
                    "work_order_ref": work_order_ref,
                    "total_amount": float(total_amount or 0),
                    "received_amount": float(received_amount or 0),
                    "credit_amount": float(credit_amount or 0),
                    "balance": float(balance or 0),
                    "payment_status": payment_status,
                    "days_overdue": overdue,
                }
            )
        return pd.DataFrame(data, columns=RECEIVABLE_COLUMNS)

    # PUBLIC_INTERFACE
    async def dashboard(self) -> DashboardSummary:
        """
        Headline counters for the company dashboard.

        Returns:
            DashboardSummary with open/awaiting POs, receivables, low stock and machine counts.
        """
        outstanding, unpaid = await self.repo.receivables()
        summary = await InventoryService(self.session, self.company_id, self.user_id).stock_summary()
        return DashboardSummary(
            open_purchase_orders=await self.repo.count_open_purchase_orders(),
            awaiting_receipt=await self.repo.count_awaiting_receipt(),
            outstanding_receivables=float(outstanding),
            unpaid_invoices=unpaid,
            low_stock_items=sum(1 for row in summary if row.low_stock),
            active_machines=await self.repo.count_active_machines(),
        )
