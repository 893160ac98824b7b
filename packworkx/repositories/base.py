from __future__ import annotations

from typing import Any, Generic, Iterable, Optional, Type, TypeVar
from uuid import UUID

from sqlalchemy import Executable, Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from packworkx.db.base import STATUS_ACTIVE

ModelT = TypeVar("ModelT")


class BaseRepository:
    """
    Base class for repositories providing common helpers.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def execute(self, statement: Executable, params: Optional[dict[str, Any]] = None):
        """Execute a SQLAlchemy statement."""
        return await self.session.execute(statement, params or {})

    async def scalars(self, statement: Executable, params: Optional[dict[str, Any]] = None):
        """Execute and return scalars."""
        result = await self.execute(statement, params)
        return result.scalars()

    async def scalar_one_or_none(self, statement: Executable, params: Optional[dict[str, Any]] = None):
        """Execute and return a single scalar or None."""
        result = await self.execute(statement, params)
        return result.scalar_one_or_none()

    async def commit(self) -> None:
        """Commit current transaction."""
        await self.session.commit()

    async def flush(self) -> None:
        """Flush pending changes so generated values and constraints apply."""
        await self.session.flush()

    async def add_all(self, entities: Iterable[Any]) -> None:
        """Add multiple entities to session."""
        self.session.add_all(list(entities))

    async def add(self, entity: Any) -> None:
        """Add a single entity to session."""
        self.session.add(entity)

    async def delete(self, entity: Any) -> None:
        """Mark an entity for deletion."""
        await self.session.delete(entity)


class CompanyScopedRepository(BaseRepository, Generic[ModelT]):
    """
    Repository bound to one company. Every query built through `_select` is
    filtered by company_id, so rows of other companies behave as missing.
    """

    model: Type[ModelT]

    def __init__(self, session: AsyncSession, company_id: UUID) -> None:
        super().__init__(session)
        self.company_id = company_id

    def _select(self) -> Select:
        return select(self.model).where(self.model.company_id == self.company_id)

    @staticmethod
    def _status_filter(stmt: Select, column: Any, status: Optional[str]) -> Select:
        """Apply the `status` query convention: default active, `all` disables filtering."""
        if status is None:
            status = STATUS_ACTIVE
        if status != "all":
            stmt = stmt.where(column == status)
        return stmt

    async def get(self, row_id: UUID, *, for_update: bool = False) -> Optional[ModelT]:
        stmt = self._select().where(self.model.id == row_id)
        if for_update:
            stmt = stmt.with_for_update()
        return await self.scalar_one_or_none(stmt)

    async def get_active(self, row_id: UUID, *, for_update: bool = False) -> Optional[ModelT]:
        row = await self.get(row_id, for_update=for_update)
        if row is None or getattr(row, "status", STATUS_ACTIVE) != STATUS_ACTIVE:
            return None
        return row
