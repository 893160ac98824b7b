from __future__ import annotations

from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import select

from packworkx.db.base import utcnow
from packworkx.db.models.company import Company, IdSequence, InvoiceSetting
from .base import BaseRepository


class CompanyRepository(BaseRepository):
    """Repository for companies, their numbering settings and sequences."""

    async def get_company(self, company_id: UUID) -> Optional[Company]:
        stmt = select(Company).where(Company.id == company_id)
        return await self.scalar_one_or_none(stmt)

    async def get_company_by_email(self, email: str) -> Optional[Company]:
        stmt = select(Company).where(Company.company_email == email)
        return await self.scalar_one_or_none(stmt)

    async def get_invoice_setting(self, company_id: UUID) -> Optional[InvoiceSetting]:
        stmt = select(InvoiceSetting).where(InvoiceSetting.company_id == company_id)
        return await self.scalar_one_or_none(stmt)

    async def get_sequence(self, company_id: UUID, key: str, *, for_update: bool = False) -> Optional[IdSequence]:
        stmt = select(IdSequence).where(IdSequence.company_id == company_id, IdSequence.key == key)
        if for_update:
            stmt = stmt.with_for_update()
        return await self.scalar_one_or_none(stmt)

    async def next_sequence_value(self, company_id: UUID, key: str) -> int:
        """
        Atomically bump and return the sequence for (company, key), creating it at 1.

        PostgreSQL and SQLite use INSERT .. ON CONFLICT DO UPDATE so the first
        number for a new key cannot race; other dialects lock the existing row.
        """
        dialect = self.session.bind.dialect.name if self.session.bind is not None else ""
        if dialect in ("postgresql", "sqlite"):
            if dialect == "postgresql":
                from sqlalchemy.dialects.postgresql import insert
            else:
                from sqlalchemy.dialects.sqlite import insert
            stmt = (
                insert(IdSequence)
                .values(id=uuid4(), company_id=company_id, key=key, last_value=1,
                        created_at=utcnow(), updated_at=utcnow())
                .on_conflict_do_update(
                    index_elements=["company_id", "key"],
                    set_={"last_value": IdSequence.last_value + 1, "updated_at": utcnow()},
                )
                .returning(IdSequence.last_value)
            )
            result = await self.session.execute(stmt)
            return int(result.scalar_one())

        seq = await self.get_sequence(company_id, key, for_update=True)
        if seq is None:
            seq = IdSequence(company_id=company_id, key=key, last_value=0)
            await self.add(seq)
        seq.last_value = int(seq.last_value or 0) + 1
        await self.flush()
        return seq.last_value
