from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from sqlalchemy import or_

from packworkx.db.models.grn import GRN
from .base import CompanyScopedRepository


class GRNRepository(CompanyScopedRepository[GRN]):
    """Repository for goods received notes."""

    model = GRN

    async def list_grns(
        self,
        *,
        search: Optional[str],
        po_id: Optional[UUID],
        status: Optional[str],
        limit: int,
        offset: int,
    ) -> List[GRN]:
        stmt = self._select()
        if search:
            like = f"%{search}%"
            stmt = stmt.where(or_(GRN.grn_generate_id.ilike(like), GRN.invoice_no.ilike(like)))
        if po_id:
            stmt = stmt.where(GRN.po_id == po_id)
        stmt = self._status_filter(stmt, GRN.status, status)
        stmt = stmt.order_by(GRN.grn_date.desc(), GRN.created_at.desc()).offset(offset).limit(limit)
        return list(await self.scalars(stmt))
