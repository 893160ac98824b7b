from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from packworkx.core.errors import BusinessRuleError, ConflictError, NotFoundError
from packworkx.db.base import STATUS_INACTIVE
from packworkx.db.models.clients import Client
from packworkx.db.models.notes import CreditNote, DebitNote
from packworkx.repositories.clients import ClientRepository
from packworkx.repositories.invoices import InvoiceRepository
from packworkx.repositories.notes import CreditNoteRepository, DebitNoteRepository
from packworkx.repositories.procurement import PurchaseOrderRepository
from packworkx.schemas.notes import CreditNoteCreate, CreditNoteUpdate, DebitNoteCreate, DebitNoteUpdate
from packworkx.services.base import CompanyService, money
from packworkx.services.id_generator import generate_id
from packworkx.services.wallet import CREDIT_WALLET, DEBIT_WALLET, WalletService

logger = logging.getLogger(__name__)


def note_total(sub_total: Decimal, tax_amount: Decimal, adjustment: Decimal) -> Decimal:
    total = money(sub_total) + money(tax_amount) + money(adjustment)
    if total < 0:
        raise BusinessRuleError("Note total cannot be negative", details={"total_amount": float(total)})
    return total


class _NoteService(CompanyService):
    """Shared wallet bookkeeping for credit and debit notes."""

    wallet_name: str

    def __init__(self, session, company_id: UUID, user_id: Optional[UUID] = None) -> None:
        super().__init__(session, company_id, user_id)
        self.clients = ClientRepository(session, company_id)
        self.wallet = WalletService(session, company_id, user_id)

    async def _party(self, client_id: UUID, *, active: bool = True) -> Client:
        if active:
            client = await self.clients.get_active(client_id, for_update=True)
        else:
            client = await self.clients.get(client_id, for_update=True)
        if client is None:
            raise BusinessRuleError("Client not found or inactive", details={"client_id": str(client_id)})
        return client

    async def _apply_delta(self, client: Client, delta: Decimal, reference: str) -> None:
        if delta > 0:
            await self.wallet.add(client, self.wallet_name, delta, reference)
        elif delta < 0:
            await self.wallet.remove(client, self.wallet_name, -delta, reference)


class CreditNoteService(_NoteService):
    """Credit notes fund the customer's credit wallet."""

    wallet_name = CREDIT_WALLET

    def __init__(self, session, company_id: UUID, user_id: Optional[UUID] = None) -> None:
        super().__init__(session, company_id, user_id)
        self.repo = CreditNoteRepository(session, company_id)
        self.invoices = InvoiceRepository(session, company_id)

    async def list_notes(self, **filters) -> List[CreditNote]:
        return await self.repo.list_notes(**filters)

    async def get_note(self, note_id: UUID) -> CreditNote:
        note = await self.repo.get(note_id)
        if note is None:
            raise NotFoundError("Credit note not found")
        return note

    async def _check_invoice(self, invoice_id: Optional[UUID], client_id: UUID) -> None:
        if invoice_id is None:
            return
        invoice = await self.invoices.get_active(invoice_id)
        if invoice is None or invoice.client_id != client_id:
            raise BusinessRuleError("Invoice not found for this client", details={"invoice_id": str(invoice_id)})

    # PUBLIC_INTERFACE
    async def create_note(self, payload: CreditNoteCreate) -> CreditNote:
        """Issue a credit note and add its total to the client's credit balance."""
        async with self._transaction():
            if await self.repo.find_active_by_number(payload.credit_note_number):
                raise ConflictError(
                    "Credit note number already exists", details={"credit_note_number": payload.credit_note_number}
                )
            client = await self._party(payload.client_id)
            await self._check_invoice(payload.invoice_id, client.id)
            total = note_total(payload.sub_total, payload.tax_amount, payload.adjustment)
            note = CreditNote(
                company_id=self.company_id,
                credit_note_generate_id=await generate_id(self.session, self.company_id, "credit_note"),
                credit_note_number=payload.credit_note_number,
                credit_note_date=payload.credit_note_date or date.today(),
                client_id=client.id,
                invoice_id=payload.invoice_id,
                reason=payload.reason,
                sub_total=money(payload.sub_total),
                tax_amount=money(payload.tax_amount),
                adjustment=money(payload.adjustment),
                total_amount=total,
                created_by=self.user_id,
                updated_by=self.user_id,
            )
            await self.repo.add(note)
            await self._apply_delta(client, total, note.credit_note_number)
            await self.repo.flush()
        logger.info("Issued credit note %s to client %s for %s", note.credit_note_number, client.id, total)
        return note

    async def update_note(self, note_id: UUID, payload: CreditNoteUpdate) -> CreditNote:
        """Update a credit note; the change in total moves the client's wallet."""
        async with self._transaction():
            note = await self.repo.get_active(note_id, for_update=True)
            if note is None:
                raise NotFoundError("Credit note not found")
            values = payload.model_dump(exclude_unset=True)
            number = values.pop("credit_note_number", None)
            if number is not None and number != note.credit_note_number:
                raise BusinessRuleError("Credit note number cannot be changed")
            if "invoice_id" in values:
                await self._check_invoice(values["invoice_id"], note.client_id)
                note.invoice_id = values["invoice_id"]
            if "reason" in values:
                note.reason = values["reason"]
            if values.get("credit_note_date") is not None:
                note.credit_note_date = values["credit_note_date"]
            for key in ("sub_total", "tax_amount", "adjustment"):
                if values.get(key) is not None:
                    setattr(note, key, money(values[key]))

            old_total = money(note.total_amount)
            note.total_amount = note_total(note.sub_total, note.tax_amount, note.adjustment)
            client = await self._party(note.client_id, active=False)
            await self._apply_delta(client, note.total_amount - old_total, note.credit_note_number)
            note.updated_by = self.user_id
            await self.repo.flush()
        logger.info("Updated credit note %s total %s -> %s", note.credit_note_number, old_total, note.total_amount)
        return note

    async def delete_note(self, note_id: UUID) -> None:
        """Cancel a credit note, taking its total back out of the client's wallet."""
        async with self._transaction():
            note = await self.repo.get_active(note_id, for_update=True)
            if note is None:
                raise NotFoundError("Credit note not found")
            client = await self._party(note.client_id, active=False)
            await self._apply_delta(client, -money(note.total_amount), note.credit_note_number)
            note.status = STATUS_INACTIVE
            note.updated_by = self.user_id
            await self.repo.flush()
        logger.info("Cancelled credit note %s", note.credit_note_number)


class DebitNoteService(_NoteService):
    """Debit notes fund the supplier's debit wallet, spendable on purchase orders."""

    wallet_name = DEBIT_WALLET

    def __init__(self, session, company_id: UUID, user_id: Optional[UUID] = None) -> None:
        super().__init__(session, company_id, user_id)
        self.repo = DebitNoteRepository(session, company_id)
        self.pos = PurchaseOrderRepository(session, company_id)

    async def list_notes(self, **filters) -> List[DebitNote]:
        return await self.repo.list_notes(**filters)

    async def get_note(self, note_id: UUID) -> DebitNote:
        note = await self.repo.get(note_id)
        if note is None:
            raise NotFoundError("Debit note not found")
        return note

    async def _check_po(self, po_id: Optional[UUID], supplier_id: UUID) -> None:
        if po_id is None:
            return
        po = await self.pos.get_active(po_id)
        if po is None or po.supplier_id != supplier_id:
            raise BusinessRuleError("Purchase order not found for this supplier", details={"po_id": str(po_id)})

    async def create_note(self, payload: DebitNoteCreate) -> DebitNote:
        async with self._transaction():
            supplier = await self._party(payload.supplier_id)
            await self._check_po(payload.po_id, supplier.id)
            total = note_total(payload.sub_total, payload.tax_amount, payload.adjustment)
            note = DebitNote(
                company_id=self.company_id,
                debit_note_generate_id=await generate_id(self.session, self.company_id, "debit_note"),
                debit_note_date=payload.debit_note_date or date.today(),
                supplier_id=supplier.id,
                po_id=payload.po_id,
                reason=payload.reason,
                sub_total=money(payload.sub_total),
                tax_amount=money(payload.tax_amount),
                adjustment=money(payload.adjustment),
                total_amount=total,
                created_by=self.user_id,
                updated_by=self.user_id,
            )
            await self.repo.add(note)
            await self._apply_delta(supplier, total, note.debit_note_generate_id)
            await self.repo.flush()
        logger.info("Issued debit note %s to supplier %s for %s", note.debit_note_generate_id, supplier.id, total)
        return note

    async def update_note(self, note_id: UUID, payload: DebitNoteUpdate) -> DebitNote:
        async with self._transaction():
            note = await self.repo.get_active(note_id, for_update=True)
            if note is None:
                raise NotFoundError("Debit note not found")
            values = payload.model_dump(exclude_unset=True)
            if "po_id" in values:
                await self._check_po(values["po_id"], note.supplier_id)
                note.po_id = values["po_id"]
            if "reason" in values:
                note.reason = values["reason"]
            if values.get("debit_note_date") is not None:
                note.debit_note_date = values["debit_note_date"]
            for key in ("sub_total", "tax_amount", "adjustment"):
                if values.get(key) is not None:
                    setattr(note, key, money(values[key]))

            old_total = money(note.total_amount)
            note.total_amount = note_total(note.sub_total, note.tax_amount, note.adjustment)
            supplier = await self._party(note.supplier_id, active=False)
            await self._apply_delta(supplier, note.total_amount - old_total, note.debit_note_generate_id)
            note.updated_by = self.user_id
            await self.repo.flush()
        return note

    async def delete_note(self, note_id: UUID) -> None:
        async with self._transaction():
            note = await self.repo.get_active(note_id, for_update=True)
            if note is None:
                raise NotFoundError("Debit note not found")
            supplier = await self._party(note.supplier_id, active=False)
            await self._apply_delta(supplier, -money(note.total_amount), note.debit_note_generate_id)
            note.status = STATUS_INACTIVE
            note.updated_by = self.user_id
            await self.repo.flush()
        logger.info("Cancelled debit note %s", note.debit_note_generate_id)
