from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from decimal import ROUND_HALF_UP, Decimal
from typing import AsyncIterator, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from packworkx.core.errors import ConflictError
from packworkx.db.base import MONEY_PLACES, QTY_PLACES

logger = logging.getLogger(__name__)


def money(value) -> Decimal:
    """Round half-up to 2 places, accepting Decimal, int, float or None."""
    return Decimal(str(value if value is not None else 0)).quantize(MONEY_PLACES, rounding=ROUND_HALF_UP)


def qty(value) -> Decimal:
    """Round half-up to 3 places, accepting Decimal, int, float or None."""
    return Decimal(str(value if value is not None else 0)).quantize(QTY_PLACES, rounding=ROUND_HALF_UP)


class BaseService:
    """
    Base class for services. Holds a session for use across multiple repositories.

    Services should keep business logic and orchestration, delegating data access
    to repositories.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session


class CompanyService(BaseService):
    """
    Service bound to the caller's company and, for audit columns, the acting user.

    Services own the transaction: repositories only flush, and every public
    mutating method commits on success or rolls back on any error.
    """

    def __init__(self, session: AsyncSession, company_id: UUID, user_id: Optional[UUID] = None) -> None:
        super().__init__(session)
        self.company_id = company_id
        self.user_id = user_id

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[None]:
        """Commit the work done inside the block, or roll all of it back on any error.

        Unique index violations (a concurrent request won the race past the
        service's own duplicate check) surface as ConflictError.
        """
        try:
            yield
            await self.session.commit()
        except IntegrityError as exc:
            await self.session.rollback()
            logger.warning("Integrity violation for company %s: %s", self.company_id, exc.orig)
            raise ConflictError("Record conflicts with an existing one") from exc
        except Exception:
            await self.session.rollback()
            raise
