from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Optional
from uuid import UUID

from packworkx.core.errors import BusinessRuleError, ConflictError, NotFoundError
from packworkx.db.base import STATUS_ACTIVE, STATUS_INACTIVE
from packworkx.db.models.machines import Machine, ProcessField, ProcessName
from packworkx.repositories.machines import MachineRepository
from packworkx.schemas.machines import (
    MachineCreate,
    MachineUpdate,
    ProcessFieldCreate,
    ProcessIn,
)
from packworkx.services.base import CompanyService
from packworkx.services.id_generator import generate_id

logger = logging.getLogger(__name__)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _type_error(field: ProcessField, value: Any) -> Optional[str]:
    """Return an error message if `value` does not match the field type."""
    kind = field.field_type
    if kind == "number":
        if isinstance(value, bool):
            return "Must be a number"
        if isinstance(value, (int, float)):
            return None
        try:
            float(str(value))
        except ValueError:
            return "Must be a number"
        return None
    if kind == "date":
        try:
            date.fromisoformat(str(value))
        except ValueError:
            return "Must be an ISO date (YYYY-MM-DD)"
        return None
    if kind == "boolean":
        return None if isinstance(value, bool) else "Must be true or false"
    if kind == "select":
        options = list(field.options or [])
        return None if value in options else f"Must be one of: {', '.join(map(str, options))}"
    return None if isinstance(value, str) else "Must be text"


# PUBLIC_INTERFACE
def validate_process_values(fields: List[ProcessField], values: Dict[str, Any]) -> None:
    """
    Check process values against the process's active field definitions.

    A process without active fields accepts any mapping.

    Raises:
        BusinessRuleError: with per-label messages in details.
    """
    active = {f.label.lower(): f for f in fields if f.status == STATUS_ACTIVE}
    if not active:
        return
    errors: Dict[str, str] = {}
    # labels match case-insensitively, as process names do
    given = {str(label).lower(): (label, value) for label, value in values.items()}
    for key, (label, _) in given.items():
        if key not in active:
            errors[label] = "Unknown field"
    for key, field in active.items():
        value = given.get(key, (field.label, None))[1]
        if _is_blank(value):
            if field.required:
                errors[field.label] = "This field is required"
            continue
        message = _type_error(field, value)
        if message:
            errors[field.label] = message
    if errors:
        raise BusinessRuleError("Invalid process values", details=errors)


class MachineService(CompanyService):
    """Machines, the processes they run and the dynamic fields constraining process values."""

    def __init__(self, session, company_id: UUID, user_id: Optional[UUID] = None) -> None:
        super().__init__(session, company_id, user_id)
        self.repo = MachineRepository(session, company_id)

    async def list_machines(self, **filters) -> List[Machine]:
        return await self.repo.list_machines(**filters)

    async def get_machine(self, machine_id: UUID) -> Machine:
        machine = await self.repo.get(machine_id)
        if machine is None:
            raise NotFoundError("Machine not found")
        return machine

    async def _active_machine(self, machine_id: UUID) -> Machine:
        machine = await self.repo.get_active(machine_id, for_update=True)
        if machine is None:
            raise NotFoundError("Machine not found")
        return machine

    async def _ensure_unique_serial(self, serial: Optional[str], exclude_id: Optional[UUID] = None) -> None:
        if serial and await self.repo.find_active_by_serial(serial, exclude_id=exclude_id):
            raise ConflictError("A machine with this serial number already exists", details={"serial_number": serial})

    def _upsert_process(self, machine: Machine, data: ProcessIn) -> ProcessName:
        """Insert or update a process by case-insensitive name within the machine."""
        name = data.process_name.strip()
        process = next((p for p in machine.processes if p.process_name.lower() == name.lower()), None)
        if process is None:
            process = ProcessName(
                company_id=self.company_id,
                process_name=name,
                process_value=dict(data.process_value),
                created_by=self.user_id,
                updated_by=self.user_id,
                fields=[],
            )
            machine.processes.append(process)
            return process
        validate_process_values(process.fields, data.process_value)
        process.process_value = dict(data.process_value)
        process.status = STATUS_ACTIVE
        process.updated_by = self.user_id
        return process

    # PUBLIC_INTERFACE
    async def create_machine(self, payload: MachineCreate) -> Machine:
        """Register a machine, optionally with its processes."""
        async with self._transaction():
            await self._ensure_unique_serial(payload.serial_number)
            machine = Machine(
                company_id=self.company_id,
                machine_generate_id=await generate_id(self.session, self.company_id, "machine"),
                created_by=self.user_id,
                updated_by=self.user_id,
                processes=[],
                **payload.model_dump(exclude={"processes"}),
            )
            for process in payload.processes:
                self._upsert_process(machine, process)
            await self.repo.add(machine)
            await self.repo.flush()
        logger.info("Registered machine %s (%s)", machine.machine_generate_id, machine.machine_name)
        return machine

    async def update_machine(self, machine_id: UUID, payload: MachineUpdate) -> Machine:
        async with self._transaction():
            machine = await self._active_machine(machine_id)
            values = payload.model_dump(exclude_unset=True, exclude={"processes"})
            if values.get("serial_number"):
                await self._ensure_unique_serial(values["serial_number"], exclude_id=machine.id)
            for key, value in values.items():
                if value is None and key in ("machine_name", "machine_status"):
                    continue
                setattr(machine, key, value)
            for process in payload.processes or []:
                self._upsert_process(machine, process)
            machine.updated_by = self.user_id
            await self.repo.flush()
        return machine

    async def set_status(self, machine_id: UUID, status: str) -> Machine:
        if status not in (STATUS_ACTIVE, STATUS_INACTIVE):
            raise BusinessRuleError("Status must be 'active' or 'inactive'", details={"status": status})
        async with self._transaction():
            machine = await self.repo.get(machine_id, for_update=True)
            if machine is None:
                raise NotFoundError("Machine not found")
            if status == STATUS_ACTIVE and machine.serial_number:
                await self._ensure_unique_serial(machine.serial_number, exclude_id=machine.id)
            machine.status = status
            machine.updated_by = self.user_id
            await self.repo.flush()
        logger.info("Machine %s status set to %s", machine.machine_generate_id, status)
        return machine

    async def delete_machine(self, machine_id: UUID) -> None:
        async with self._transaction():
            machine = await self._active_machine(machine_id)
            machine.status = STATUS_INACTIVE
            machine.updated_by = self.user_id
            await self.repo.flush()
        logger.info("Deactivated machine %s", machine.machine_generate_id)

    # Processes
    async def list_processes(self, machine_id: UUID) -> List[ProcessName]:
        machine = await self.get_machine(machine_id)
        return await self.repo.list_processes(machine.id)

    async def upsert_process(self, machine_id: UUID, payload: ProcessIn) -> ProcessName:
        async with self._transaction():
            machine = await self._active_machine(machine_id)
            process = self._upsert_process(machine, payload)
            await self.repo.flush()
        logger.info("Saved process %s on machine %s", process.process_name, machine.machine_generate_id)
        return process

    def _process(self, machine: Machine, process_id: UUID) -> ProcessName:
        process = next((p for p in machine.processes if p.id == process_id), None)
        if process is None:
            raise NotFoundError("Process not found")
        return process

    async def delete_process(self, machine_id: UUID, process_id: UUID) -> None:
        """Hard delete a process together with its field definitions."""
        async with self._transaction():
            machine = await self._active_machine(machine_id)
            process = self._process(machine, process_id)
            machine.processes.remove(process)
            await self.repo.flush()
        logger.info("Deleted process %s from machine %s", process.process_name, machine.machine_generate_id)

    # Fields
    async def list_fields(self, machine_id: UUID, process_id: UUID, *, status: Optional[str] = None) -> List[ProcessField]:
        machine = await self.get_machine(machine_id)
        process = self._process(machine, process_id)
        return await self.repo.list_fields(process.id, status=status)

    async def add_field(self, machine_id: UUID, process_id: UUID, payload: ProcessFieldCreate) -> ProcessField:
        """
        Define a field on a process. A soft-deleted field with the same label is revived.

        Existing process values are not re-validated.
        """
        if payload.field_type == "select" and not payload.options:
            raise BusinessRuleError("Select fields need at least one option", details={"label": payload.label})
        async with self._transaction():
            machine = await self._active_machine(machine_id)
            process = self._process(machine, process_id)
            field = next((f for f in process.fields if f.label.lower() == payload.label.lower()), None)
            if field is not None and field.status == STATUS_ACTIVE:
                raise ConflictError("Field label already exists on this process", details={"label": payload.label})
            if field is None:
                field = ProcessField(company_id=self.company_id, label=payload.label, created_by=self.user_id)
                process.fields.append(field)
            field.label = payload.label
            field.field_type = payload.field_type
            field.options = list(payload.options)
            field.required = payload.required
            field.status = STATUS_ACTIVE
            field.updated_by = self.user_id
            await self.repo.flush()
        logger.info("Added field %s (%s) to process %s", field.label, field.field_type, process.process_name)
        return field

    async def delete_field(self, machine_id: UUID, process_id: UUID, field_id: UUID) -> None:
        async with self._transaction():
            machine = await self._active_machine(machine_id)
            process = self._process(machine, process_id)
            field = next((f for f in process.fields if f.id == field_id), None)
            if field is None or field.status != STATUS_ACTIVE:
                raise NotFoundError("Field not found")
            field.status = STATUS_INACTIVE
            field.updated_by = self.user_id
            await self.repo.flush()
