from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, or_

from packworkx.db.base import STATUS_ACTIVE
from packworkx.db.models.notes import CreditNote, DebitNote
from .base import CompanyScopedRepository


class CreditNoteRepository(CompanyScopedRepository[CreditNote]):
    """Repository for customer credit notes."""

    model = CreditNote

    async def list_notes(
        self,
        *,
        client_id: Optional[UUID],
        search: Optional[str],
        status: Optional[str],
        limit: int,
        offset: int,
    ) -> List[CreditNote]:
        stmt = self._select()
        if client_id:
            stmt = stmt.where(CreditNote.client_id == client_id)
        if search:
            like = f"%{search}%"
            stmt = stmt.where(
                or_(
                    CreditNote.credit_note_number.ilike(like),
                    CreditNote.credit_note_generate_id.ilike(like),
                )
            )
        stmt = self._status_filter(stmt, CreditNote.status, status)
        stmt = stmt.order_by(CreditNote.credit_note_date.desc(), CreditNote.created_at.desc())
        return list(await self.scalars(stmt.offset(offset).limit(limit)))

    async def find_active_by_number(self, number: str) -> Optional[CreditNote]:
        stmt = self._select().where(
            func.lower(CreditNote.credit_note_number) == number.lower(),
            CreditNote.status == STATUS_ACTIVE,
        )
        return await self.scalar_one_or_none(stmt.limit(1))


class DebitNoteRepository(CompanyScopedRepository[DebitNote]):
    """Repository for supplier debit notes."""

    model = DebitNote

    async def list_notes(
        self,
        *,
        supplier_id: Optional[UUID],
        search: Optional[str],
        status: Optional[str],
        limit: int,
        offset: int,
    ) -> List[DebitNote]:
        stmt = self._select()
        if supplier_id:
            stmt = stmt.where(DebitNote.supplier_id == supplier_id)
        if search:
            stmt = stmt.where(DebitNote.debit_note_generate_id.ilike(f"%{search}%"))
        stmt = self._status_filter(stmt, DebitNote.status, status)
        stmt = stmt.order_by(DebitNote.debit_note_date.desc(), DebitNote.created_at.desc())
        return list(await self.scalars(stmt.offset(offset).limit(limit)))
