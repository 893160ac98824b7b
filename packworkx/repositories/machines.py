from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, or_, select

from packworkx.db.base import STATUS_ACTIVE
from packworkx.db.models.machines import Machine, ProcessField, ProcessName
from .base import CompanyScopedRepository


class MachineRepository(CompanyScopedRepository[Machine]):
    """Repository for machines, their processes and dynamic process fields."""

    model = Machine

    async def list_machines(
        self,
        *,
        search: Optional[str],
        machine_type: Optional[str],
        machine_status: Optional[str],
        status: Optional[str],
        limit: int,
        offset: int,
    ) -> List[Machine]:
        stmt = self._select()
        if search:
            like = f"%{search}%"
            stmt = stmt.where(
                or_(
                    Machine.machine_name.ilike(like),
                    Machine.machine_type.ilike(like),
                    Machine.serial_number.ilike(like),
                    Machine.machine_generate_id.ilike(like),
                )
            )
        if machine_type:
            stmt = stmt.where(Machine.machine_type == machine_type)
        if machine_status:
            stmt = stmt.where(Machine.machine_status == machine_status)
        stmt = self._status_filter(stmt, Machine.status, status)
        stmt = stmt.order_by(Machine.machine_name).offset(offset).limit(limit)
        return list(await self.scalars(stmt))

    async def find_active_by_serial(self, serial_number: str, *, exclude_id: Optional[UUID] = None) -> Optional[Machine]:
        stmt = self._select().where(
            func.lower(Machine.serial_number) == serial_number.lower(),
            Machine.status == STATUS_ACTIVE,
        )
        if exclude_id is not None:
            stmt = stmt.where(Machine.id != exclude_id)
        return await self.scalar_one_or_none(stmt.limit(1))

    async def list_processes(self, machine_id: UUID) -> List[ProcessName]:
        stmt = (
            select(ProcessName)
            .where(ProcessName.company_id == self.company_id, ProcessName.machine_id == machine_id)
            .order_by(ProcessName.process_name)
        )
        return list(await self.scalars(stmt))

    async def list_fields(self, process_id: UUID, *, status: Optional[str] = STATUS_ACTIVE) -> List[ProcessField]:
        stmt = select(ProcessField).where(
            ProcessField.company_id == self.company_id,
            ProcessField.process_name_id == process_id,
        )
        stmt = self._status_filter(stmt, ProcessField.status, status)
        return list(await self.scalars(stmt.order_by(ProcessField.label)))
