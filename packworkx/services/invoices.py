from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional, Tuple
from uuid import UUID

from packworkx.core.errors import BusinessRuleError, ConflictError, NotFoundError
from packworkx.db.base import STATUS_INACTIVE
from packworkx.db.models.sales import PartialPayment, WorkOrderInvoice
from packworkx.repositories.clients import ClientRepository
from packworkx.repositories.invoices import InvoiceRepository
from packworkx.repositories.sales import SkuRepository, WorkOrderRepository
from packworkx.schemas.invoices import InvoiceCreate, InvoiceUpdate, PaymentCreate
from packworkx.services.base import CompanyService, money, qty
from packworkx.services.id_generator import generate_id
from packworkx.services.wallet import CREDIT_WALLET, WalletService

logger = logging.getLogger(__name__)

PAYMENT_PENDING = "pending"
PAYMENT_COMPLETED = "completed"
PAYMENT_FAILED = "failed"


def invoice_amounts(
    total: Decimal, discount_type: str, discount: Decimal, total_tax: Decimal
) -> Tuple[Decimal, Decimal]:
    """
    Return (discount_amount, total_amount) for an invoice.

    Raises:
        BusinessRuleError: the discount exceeds the total.
    """
    total = money(total)
    if discount_type == "percentage":
        discount_amount = money(total * money(discount) / Decimal(100))
    else:
        discount_amount = money(discount)
    if discount_amount > total:
        raise BusinessRuleError(
            "Discount cannot exceed the invoice total",
            details={"total": float(total), "discount_amount": float(discount_amount)},
        )
    return discount_amount, total - discount_amount + money(total_tax)


def settlement_status(settled: Decimal, balance: Decimal) -> str:
    if settled <= 0:
        return "pending"
    if balance <= 0:
        return "paid"
    return "partial"


class InvoiceService(CompanyService):
    """
    Work order invoices and the partial payments settling them.

    Only completed payments count: received_amount and credit_amount are the
    sums over completed payments, and balance is what remains of total_amount.
    """

    def __init__(self, session, company_id: UUID, user_id: Optional[UUID] = None) -> None:
        super().__init__(session, company_id, user_id)
        self.repo = InvoiceRepository(session, company_id)
        self.clients = ClientRepository(session, company_id)
        self.work_orders = WorkOrderRepository(session, company_id)
        self.skus = SkuRepository(session, company_id)
        self.wallet = WalletService(session, company_id, user_id)

    async def list_invoices(self, **filters) -> Tuple[List[WorkOrderInvoice], int]:
        return await self.repo.list_invoices(**filters)

    async def get_invoice(self, invoice_id: UUID) -> WorkOrderInvoice:
        invoice = await self.repo.get(invoice_id)
        if invoice is None:
            raise NotFoundError("Invoice not found")
        return invoice

    async def _active_invoice(self, invoice_id: UUID) -> WorkOrderInvoice:
        invoice = await self.repo.get_active(invoice_id, for_update=True)
        if invoice is None:
            raise NotFoundError("Invoice not found")
        return invoice

    async def _check_references(
        self, client_id: UUID, work_order_ref: Optional[str], sku_details: Optional[List[dict]]
    ) -> None:
        """Work order and SKU references on an invoice must point at the client's active records."""
        if work_order_ref:
            work_order = await self.work_orders.find_active_by_number(work_order_ref)
            if work_order is None or work_order.client_id != client_id:
                raise BusinessRuleError(
                    "Work order not found for this client", details={"work_order_ref": work_order_ref}
                )
        wanted = {}
        for idx, line in enumerate(sku_details or [], start=1):
            raw = line.get("sku_id") if isinstance(line, dict) else None
            if raw is None:
                continue
            try:
                wanted[idx] = UUID(str(raw))
            except ValueError:
                raise BusinessRuleError("Invalid SKU id", details={"line": idx, "sku_id": str(raw)}) from None
        found = await self.skus.active_ids(list(set(wanted.values())), client_id=client_id)
        missing = {idx: str(sku_id) for idx, sku_id in wanted.items() if sku_id not in found}
        if missing:
            raise BusinessRuleError("SKU not found for this client", details={"lines": missing})

    @staticmethod
    def _apply_settlement(invoice: WorkOrderInvoice) -> None:
        completed = [p for p in invoice.payments if p.status == PAYMENT_COMPLETED]
        invoice.received_amount = money(sum((money(p.amount) for p in completed), Decimal(0)))
        invoice.credit_amount = money(sum((money(p.credit_amount) for p in completed), Decimal(0)))
        settled = invoice.received_amount + invoice.credit_amount
        invoice.balance = money(invoice.total_amount) - settled
        invoice.payment_status = settlement_status(settled, invoice.balance)

    @staticmethod
    def _settled(invoice: WorkOrderInvoice) -> Decimal:
        return money(invoice.received_amount) + money(invoice.credit_amount)

    def _guard_overpay(self, invoice: WorkOrderInvoice, amount: Decimal, credit: Decimal) -> None:
        settled = self._settled(invoice)
        if settled + amount + credit > money(invoice.total_amount):
            logger.warning(
                "Rejected overpayment on %s: settled=%s amount=%s credit=%s total=%s",
                invoice.invoice_number, settled, amount, credit, invoice.total_amount,
            )
            raise ConflictError(
                "Trying to overpay the invoice",
                details={
                    "total_amount": float(invoice.total_amount),
                    "settled": float(settled),
                    "requested": float(amount + credit),
                },
            )

    # PUBLIC_INTERFACE
    async def create_invoice(self, payload: InvoiceCreate) -> WorkOrderInvoice:
        """
        Raise an invoice to an active client.

        A positive received_amount is recorded as a completed payment of type "other".

        Raises:
            BusinessRuleError: client missing or inactive, discount above total, or a
                work order or SKU reference that is not the client's active record.
            ConflictError: received_amount above total_amount.
        """
        async with self._transaction():
            client = await self.clients.get_active(payload.client_id)
            if client is None:
                raise BusinessRuleError("Client not found or inactive", details={"client_id": str(payload.client_id)})
            await self._check_references(client.id, payload.work_order_ref, payload.sku_details)

            total = payload.total
            if total is None:
                total = qty(payload.quantity) * money(payload.rate_per_qty)
            discount_amount, total_amount = invoice_amounts(
                total, payload.discount_type, payload.discount, payload.total_tax
            )
            received = money(payload.received_amount)
            if received > total_amount:
                raise ConflictError(
                    "Received amount exceeds the invoice total",
                    details={"total_amount": float(total_amount), "received_amount": float(received)},
                )

            invoice_date = payload.invoice_date or date.today()
            invoice = WorkOrderInvoice(
                company_id=self.company_id,
                invoice_number=await generate_id(self.session, self.company_id, "work_invoice"),
                client_id=client.id,
                client_name=payload.client_name or client.display_name,
                client_email=payload.client_email or client.email,
                client_phone=payload.client_phone or client.mobile or client.work_phone,
                billing_address=payload.billing_address if payload.billing_address is not None else dict(client.billing_address or {}),
                work_order_ref=payload.work_order_ref,
                sale_order_ref=payload.sale_order_ref,
                invoice_date=invoice_date,
                due_date=payload.due_date,
                sku_details=payload.sku_details,
                quantity=payload.quantity,
                rate_per_qty=payload.rate_per_qty,
                total=money(total),
                discount_type=payload.discount_type,
                discount=money(payload.discount),
                discount_amount=discount_amount,
                total_tax=money(payload.total_tax),
                total_amount=total_amount,
                created_by=self.user_id,
                updated_by=self.user_id,
                payments=[],
            )
            if received > 0:
                invoice.payments.append(
                    PartialPayment(
                        company_id=self.company_id,
                        payment_type="other",
                        amount=received,
                        credit_amount=Decimal(0),
                        remarks="Received at invoicing",
                        payment_date=invoice_date,
                        status=PAYMENT_COMPLETED,
                        created_by=self.user_id,
                        updated_by=self.user_id,
                    )
                )
            self._apply_settlement(invoice)
            await self.repo.add(invoice)
            await self.repo.flush()
        logger.info(
            "Created invoice %s for client %s total=%s balance=%s",
            invoice.invoice_number, client.id, invoice.total_amount, invoice.balance,
        )
        return invoice

    async def update_invoice(self, invoice_id: UUID, payload: InvoiceUpdate) -> WorkOrderInvoice:
        """Update references, snapshot and amounts; the total may not drop below what is settled."""
        async with self._transaction():
            invoice = await self._active_invoice(invoice_id)
            values = payload.model_dump(exclude_unset=True)
            await self._check_references(invoice.client_id, values.get("work_order_ref"), values.get("sku_details"))
            for key in ("work_order_ref", "sale_order_ref", "due_date", "client_name", "client_email", "client_phone"):
                if key in values:
                    setattr(invoice, key, values[key])
            for key in ("invoice_date", "sku_details", "billing_address", "discount_type"):
                if values.get(key) is not None:
                    setattr(invoice, key, values[key])
            for key in ("quantity", "rate_per_qty"):
                if key in values:
                    setattr(invoice, key, values[key])
            for key in ("discount", "total_tax"):
                if values.get(key) is not None:
                    setattr(invoice, key, money(values[key]))

            if values.get("total") is not None:
                invoice.total = money(values["total"])
            elif ("quantity" in values or "rate_per_qty" in values) and invoice.quantity is not None and invoice.rate_per_qty is not None:
                invoice.total = money(qty(invoice.quantity) * money(invoice.rate_per_qty))

            invoice.discount_amount, invoice.total_amount = invoice_amounts(
                invoice.total, invoice.discount_type, invoice.discount, invoice.total_tax
            )
            settled = self._settled(invoice)
            if money(invoice.total_amount) < settled:
                raise ConflictError(
                    "Invoice total cannot fall below the amount already settled",
                    details={"total_amount": float(invoice.total_amount), "settled": float(settled)},
                )
            self._apply_settlement(invoice)
            invoice.updated_by = self.user_id
            await self.repo.flush()
        logger.info("Updated invoice %s total=%s", invoice.invoice_number, invoice.total_amount)
        return invoice

    async def delete_invoice(self, invoice_id: UUID) -> None:
        async with self._transaction():
            invoice = await self._active_invoice(invoice_id)
            if any(p.status == PAYMENT_COMPLETED for p in invoice.payments):
                raise ConflictError("Invoice has completed payments and cannot be deleted")
            invoice.status = STATUS_INACTIVE
            invoice.updated_by = self.user_id
            await self.repo.flush()
        logger.info("Deactivated invoice %s", invoice.invoice_number)

    # PUBLIC_INTERFACE
    async def add_payment(self, invoice_id: UUID, payload: PaymentCreate) -> PartialPayment:
        """
        Record a partial payment, optionally drawing on the client's credit wallet.

        Parameters:
            invoice_id: target invoice
            payload: PaymentCreate request
        Returns:
            The created PartialPayment.
        Raises:
            NotFoundError: invoice missing or inactive.
            BusinessRuleError: amount and credit_amount both zero.
            ConflictError: overpayment, or credit above the client's credit balance.
        """
        async with self._transaction():
            invoice = await self._active_invoice(invoice_id)
            amount = money(payload.amount)
            credit = money(payload.credit_amount)
            if amount == 0 and credit == 0:
                raise BusinessRuleError("Payment amount or credit amount is required")
            if payload.status != PAYMENT_FAILED:
                self._guard_overpay(invoice, amount, credit)

            payment = PartialPayment(
                company_id=self.company_id,
                payment_type=payload.payment_type,
                amount=amount,
                credit_amount=credit,
                reference_number=payload.reference_number,
                remarks=payload.remarks,
                payment_date=payload.payment_date or date.today(),
                status=payload.status,
                created_by=self.user_id,
                updated_by=self.user_id,
            )
            if payload.status == PAYMENT_COMPLETED and credit > 0:
                await self._draw_credit(invoice, credit)
            invoice.payments.append(payment)
            self._apply_settlement(invoice)
            invoice.updated_by = self.user_id
            await self.repo.flush()
        logger.info(
            "Recorded %s payment on %s amount=%s credit=%s (%s)",
            payment.status, invoice.invoice_number, amount, credit, invoice.payment_status,
        )
        return payment

    async def list_payments(self, invoice_id: UUID) -> List[PartialPayment]:
        invoice = await self.get_invoice(invoice_id)
        return sorted(invoice.payments, key=lambda p: p.created_at, reverse=True)

    async def set_payment_status(self, invoice_id: UUID, payment_id: UUID, status: str) -> PartialPayment:
        """
        Move a payment between states.

        pending -> completed applies it under the overpay guard; completed -> failed
        reverses it, returning any wallet credit to the client.
        """
        async with self._transaction():
            invoice = await self._active_invoice(invoice_id)
            payment = await self.repo.get_payment(invoice.id, payment_id, for_update=True)
            if payment is None:
                raise NotFoundError("Payment not found")
            current = payment.status
            amount = money(payment.amount)
            credit = money(payment.credit_amount)

            if current == PAYMENT_PENDING and status == PAYMENT_COMPLETED:
                self._guard_overpay(invoice, amount, credit)
                if credit > 0:
                    await self._draw_credit(invoice, credit)
            elif current == PAYMENT_COMPLETED and status == PAYMENT_FAILED:
                if credit > 0:
                    client = await self.clients.get(invoice.client_id, for_update=True)
                    await self.wallet.add(client, CREDIT_WALLET, credit, invoice.invoice_number)
            else:
                raise ConflictError(
                    f"Cannot change payment status from {current} to {status}",
                    details={"from": current, "to": status},
                )
            payment.status = status
            payment.updated_by = self.user_id
            self._apply_settlement(invoice)
            invoice.updated_by = self.user_id
            await self.repo.flush()
        logger.info("Payment %s on %s moved %s -> %s", payment.id, invoice.invoice_number, current, status)
        return payment

    async def _draw_credit(self, invoice: WorkOrderInvoice, credit: Decimal) -> None:
        client = await self.clients.get(invoice.client_id, for_update=True)
        if client is None:
            raise BusinessRuleError("Client not found")
        await self.wallet.remove(client, CREDIT_WALLET, credit, invoice.invoice_number)
