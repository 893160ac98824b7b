from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from packworkx.core.errors import BusinessRuleError, ConflictError, NotFoundError
from packworkx.db.base import STATUS_ACTIVE, STATUS_INACTIVE
from packworkx.db.models.clients import Client
from packworkx.db.models.procurement import PurchaseOrder, PurchaseOrderItem, PurchaseOrderPayment
from packworkx.repositories.clients import ClientRepository
from packworkx.repositories.items import ItemRepository
from packworkx.repositories.procurement import PurchaseOrderRepository
from packworkx.schemas.procurement import (
    PurchaseOrderCreate,
    PurchaseOrderItemIn,
    PurchaseOrderItemRead,
    PurchaseOrderPaymentCreate,
    PurchaseOrderPaymentRead,
    PurchaseOrderRead,
    PurchaseOrderUpdate,
)
from packworkx.services.base import CompanyService, money, qty
from packworkx.services.id_generator import generate_id
from packworkx.services.wallet import DEBIT_WALLET, WalletService

logger = logging.getLogger(__name__)

RECEIPT_PENDING = "pending"
RECEIPT_PARTIAL = "partially_received"
RECEIPT_FULL = "fully_received"


def line_amounts(quantity: Decimal, unit_price: Decimal, cgst: Decimal, sgst: Decimal) -> Tuple[Decimal, Decimal, Decimal]:
    """Return (amount, tax_amount, total_amount) of a PO line."""
    amount = money(qty(quantity) * money(unit_price))
    tax = money(amount * (Decimal(cgst) + Decimal(sgst)) / Decimal(100))
    return amount, tax, amount + tax


def payment_status(paid: Decimal, total: Decimal) -> str:
    if paid <= 0:
        return "pending"
    if paid >= total:
        return "paid"
    return "partial"


def line_receipt_status(received: Decimal, ordered: Decimal) -> str:
    if received <= 0:
        return RECEIPT_PENDING
    if received >= ordered:
        return RECEIPT_FULL
    return RECEIPT_PARTIAL


def po_receipt_status(lines: List[PurchaseOrderItem], accepted: Dict[UUID, Decimal]) -> str:
    """Roll line receipt progress up to the purchase order."""
    statuses = [line_receipt_status(accepted.get(line.id, Decimal(0)), qty(line.quantity)) for line in lines]
    if statuses and all(s == RECEIPT_FULL for s in statuses):
        return RECEIPT_FULL
    if any(s != RECEIPT_PENDING for s in statuses):
        return RECEIPT_PARTIAL
    return RECEIPT_PENDING


class PurchaseOrderService(CompanyService):
    """
    Purchase orders: server-side totals, approval, supplier payments and the
    receipt progress that goods received notes feed.
    """

    def __init__(self, session, company_id: UUID, user_id: Optional[UUID] = None) -> None:
        super().__init__(session, company_id, user_id)
        self.repo = PurchaseOrderRepository(session, company_id)
        self.clients = ClientRepository(session, company_id)
        self.items = ItemRepository(session, company_id)

    async def get_purchase_order(self, po_id: UUID, *, for_update: bool = False) -> PurchaseOrder:
        po = await self.repo.get(po_id, for_update=for_update)
        if po is None:
            raise NotFoundError("Purchase order not found")
        return po

    async def _active_po(self, po_id: UUID) -> PurchaseOrder:
        po = await self.repo.get_active(po_id, for_update=True)
        if po is None:
            raise NotFoundError("Purchase order not found")
        return po

    async def _supplier(self, supplier_id: UUID, *, for_update: bool = False) -> Client:
        supplier = await self.clients.get_active(supplier_id, for_update=for_update)
        if supplier is None:
            raise BusinessRuleError("Supplier not found or inactive", details={"supplier_id": str(supplier_id)})
        return supplier

    async def _build_lines(self, lines_in: List[PurchaseOrderItemIn]) -> List[dict]:
        if not lines_in:
            raise BusinessRuleError("At least one item is required")
        catalog = await self.items.get_many([line.item_id for line in lines_in])
        built = []
        for idx, line in enumerate(lines_in, start=1):
            item = catalog.get(line.item_id)
            if item is None or item.status != STATUS_ACTIVE:
                raise BusinessRuleError(
                    "Item not found or inactive", details={"line": idx, "item_id": str(line.item_id)}
                )
            cgst = line.cgst if line.cgst is not None else item.cgst
            sgst = line.sgst if line.sgst is not None else item.sgst
            amount, tax, total = line_amounts(line.quantity, line.unit_price, cgst, sgst)
            built.append(
                dict(
                    line_no=idx,
                    item_id=item.id,
                    item_code=item.item_code,
                    item_name=item.item_name,
                    uom=item.uom,
                    quantity=qty(line.quantity),
                    unit_price=money(line.unit_price),
                    cgst=Decimal(cgst),
                    sgst=Decimal(sgst),
                    amount=amount,
                    tax_amount=tax,
                    total_amount=total,
                )
            )
        return built

    @staticmethod
    def _apply_totals(po: PurchaseOrder, lines: List[dict]) -> None:
        po.sub_total = money(sum((ln["amount"] for ln in lines), Decimal(0)))
        po.tax_amount = money(sum((ln["tax_amount"] for ln in lines), Decimal(0)))
        po.total_amount = po.sub_total + po.tax_amount

    def _refresh_payment_state(self, po: PurchaseOrder) -> None:
        paid = sum((money(p.amount) for p in po.payments if p.status == "completed"), Decimal(0))
        po.amount_paid = money(paid)
        po.payment_status = payment_status(po.amount_paid, money(po.total_amount))

    # PUBLIC_INTERFACE
    async def create_purchase_order(self, payload: PurchaseOrderCreate) -> PurchaseOrder:
        """
        Create a purchase order with computed line and header totals.

        When use_wallet is set, up to wallet_amount (capped at the PO total) is
        taken from the supplier's debit wallet and recorded as a wallet payment.

        Parameters:
            payload: PurchaseOrderCreate request
        Returns:
            The created PurchaseOrder with lines and payments.
        """
        async with self._transaction():
            supplier = await self._supplier(payload.supplier_id, for_update=payload.use_wallet)
            lines = await self._build_lines(payload.items)
            po = PurchaseOrder(
                company_id=self.company_id,
                purchase_generate_id=await generate_id(self.session, self.company_id, "purchase"),
                supplier_id=supplier.id,
                supplier_name=supplier.display_name,
                po_date=payload.po_date or date.today(),
                expected_delivery_date=payload.expected_delivery_date,
                payment_terms=payload.payment_terms,
                reference=payload.reference,
                notes=payload.notes,
                decision="pending",
                receipt_status=RECEIPT_PENDING,
                created_by=self.user_id,
                updated_by=self.user_id,
                items=[PurchaseOrderItem(company_id=self.company_id, **ln) for ln in lines],
                payments=[],
            )
            self._apply_totals(po, lines)

            if payload.use_wallet and payload.wallet_amount:
                applied = min(money(payload.wallet_amount), money(po.total_amount))
                if applied > 0:
                    await WalletService(self.session, self.company_id, self.user_id).remove(
                        supplier, DEBIT_WALLET, applied, po.purchase_generate_id
                    )
                    po.payments.append(
                        PurchaseOrderPayment(
                            company_id=self.company_id,
                            purchase_payment_generate_id=await generate_id(
                                self.session, self.company_id, "purchase_order_payment"
                            ),
                            payment_date=po.po_date,
                            amount=applied,
                            payment_mode="wallet",
                            reference_number=po.purchase_generate_id,
                            remark="Paid from supplier wallet",
                            status="completed",
                            created_by=self.user_id,
                            updated_by=self.user_id,
                        )
                    )
            self._refresh_payment_state(po)
            await self.repo.add(po)
            await self.repo.flush()
        logger.info(
            "Created purchase order %s for supplier %s total=%s paid=%s",
            po.purchase_generate_id, supplier.id, po.total_amount, po.amount_paid,
        )
        return po

    async def list_purchase_orders(self, **filters) -> List[PurchaseOrder]:
        return await self.repo.list_purchase_orders(**filters)

    async def list_open_purchase_orders(self) -> List[PurchaseOrder]:
        return await self.repo.list_open_purchase_orders()

    async def get_detail(self, po_id: UUID) -> PurchaseOrderRead:
        """Purchase order with per-line received and pending quantities."""
        po = await self.get_purchase_order(po_id)
        return await self.to_read(po)

    async def to_read(self, po: PurchaseOrder) -> PurchaseOrderRead:
        accepted = await self.repo.accepted_by_po_item(po.id)
        lines = []
        for line in po.items:
            received = accepted.get(line.id, Decimal(0))
            ordered = qty(line.quantity)
            row = PurchaseOrderItemRead.model_validate(line)
            row.received_quantity = float(received)
            row.pending_quantity = float(max(ordered - received, Decimal(0)))
            row.receipt_status = line_receipt_status(received, ordered)
            lines.append(row)
        read = PurchaseOrderRead.model_validate(po)
        read.items = lines
        return read

    async def update_purchase_order(self, po_id: UUID, payload: PurchaseOrderUpdate) -> PurchaseOrder:
        """Replace header and lines. Refused once goods have been received against the PO."""
        async with self._transaction():
            po = await self._active_po(po_id)
            if await self.repo.count_active_grns(po.id):
                raise ConflictError("Purchase order has goods received notes and cannot be edited")
            supplier = await self._supplier(payload.supplier_id)
            lines = await self._build_lines(payload.items)

            existing = list(po.items)
            surplus = existing[len(lines):]
            if surplus and await self.repo.count_grn_lines_for_po_items([ln.id for ln in surplus]):
                raise ConflictError("Removed purchase order lines are referenced by cancelled GRNs")

            # reuse line rows by position so old GRN references stay valid
            new_items = []
            for idx, values in enumerate(lines):
                row = existing[idx] if idx < len(existing) else PurchaseOrderItem(company_id=self.company_id)
                for key, value in values.items():
                    setattr(row, key, value)
                new_items.append(row)
            po.items = new_items

            po.supplier_id = supplier.id
            po.supplier_name = supplier.display_name
            po.po_date = payload.po_date
            po.expected_delivery_date = payload.expected_delivery_date
            po.payment_terms = payload.payment_terms
            po.reference = payload.reference
            po.notes = payload.notes
            self._apply_totals(po, lines)
            if money(po.amount_paid) > money(po.total_amount):
                raise ConflictError(
                    "Purchase order total cannot fall below the amount already paid",
                    details={"amount_paid": float(po.amount_paid), "total_amount": float(po.total_amount)},
                )
            self._refresh_payment_state(po)
            po.updated_by = self.user_id
            await self.repo.flush()
        logger.info("Updated purchase order %s", po.purchase_generate_id)
        return po

    async def set_decision(self, po_id: UUID, decision: str) -> PurchaseOrder:
        async with self._transaction():
            po = await self._active_po(po_id)
            if decision == "disapprove" and await self.repo.count_active_grns(po.id):
                raise ConflictError("Purchase order has goods received notes and cannot be disapproved")
            po.decision = decision
            po.updated_by = self.user_id
            await self.repo.flush()
        logger.info("Purchase order %s decision set to %s", po.purchase_generate_id, decision)
        return po

    async def delete_purchase_order(self, po_id: UUID) -> None:
        async with self._transaction():
            po = await self._active_po(po_id)
            if await self.repo.count_active_grns(po.id):
                raise ConflictError("Purchase order has goods received notes and cannot be deleted")
            po.status = STATUS_INACTIVE
            po.updated_by = self.user_id
            await self.repo.flush()
        logger.info("Deactivated purchase order %s", po.purchase_generate_id)

    # PUBLIC_INTERFACE
    async def add_payment(self, po_id: UUID, payload: PurchaseOrderPaymentCreate) -> PurchaseOrderPayment:
        """
        Record a payment to the supplier.

        Raises:
            NotFoundError: PO missing or inactive.
            ConflictError: the payment would exceed the PO total.
        """
        async with self._transaction():
            po = await self._active_po(po_id)
            amount = money(payload.amount)
            if money(po.amount_paid) + amount > money(po.total_amount):
                logger.warning(
                    "Rejected overpayment on %s: paid=%s amount=%s total=%s",
                    po.purchase_generate_id, po.amount_paid, amount, po.total_amount,
                )
                raise ConflictError(
                    "Trying to overpay the purchase order",
                    details={
                        "amount_paid": float(po.amount_paid),
                        "total_amount": float(po.total_amount),
                        "requested": float(amount),
                    },
                )
            payment = PurchaseOrderPayment(
                company_id=self.company_id,
                purchase_payment_generate_id=await generate_id(self.session, self.company_id, "purchase_order_payment"),
                payment_date=payload.payment_date or date.today(),
                amount=amount,
                payment_mode=payload.payment_mode,
                reference_number=payload.reference_number,
                remark=payload.remark,
                status="completed",
                created_by=self.user_id,
                updated_by=self.user_id,
            )
            po.payments.append(payment)
            self._refresh_payment_state(po)
            po.updated_by = self.user_id
            await self.repo.flush()
        logger.info(
            "Recorded payment %s of %s on %s (%s)",
            payment.purchase_payment_generate_id, amount, po.purchase_generate_id, po.payment_status,
        )
        return payment

    async def list_payments(self, po_id: UUID) -> List[PurchaseOrderPaymentRead]:
        po = await self.get_purchase_order(po_id)
        rows = sorted(po.payments, key=lambda p: p.created_at, reverse=True)
        return [PurchaseOrderPaymentRead.model_validate(p) for p in rows]

    async def refresh_receipt_status(self, po: PurchaseOrder) -> str:
        """Recompute receipt_status from active GRNs; the caller commits."""
        await self.repo.flush()
        accepted = await self.repo.accepted_by_po_item(po.id)
        po.receipt_status = po_receipt_status(list(po.items), accepted)
        return po.receipt_status
