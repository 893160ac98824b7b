from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from packworkx.core.deps import get_current_active_user, require_roles
from packworkx.db.session import get_async_session
from packworkx.schemas.machines import (
    MachineCreate,
    MachineRead,
    MachineStatusUpdate,
    MachineUpdate,
    ProcessFieldCreate,
    ProcessFieldRead,
    ProcessIn,
    ProcessRead,
)
from packworkx.services.machines import MachineService

router = APIRouter(
    prefix="/machines",
    tags=["Machines"],
    dependencies=[Depends(require_roles("production"))],
)


def _service(
    user=Depends(get_current_active_user),
    session: AsyncSession = Depends(get_async_session),
) -> MachineService:
    return MachineService(session, user.company_id, user.id)


# PUBLIC_INTERFACE
@router.get("", response_model=List[MachineRead], summary="List machines")
async def list_machines(
    service: MachineService = Depends(_service),
    search: Optional[str] = Query(None, description="Name, machine id, model or serial number (substring)"),
    machine_type: Optional[str] = Query(None),
    machine_status: Optional[str] = Query(None, description="Active | Inactive | Under Maintenance"),
    status: Optional[str] = Query(None, description="active (default) | inactive | all"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[MachineRead]:
    rows = await service.list_machines(
        search=search,
        machine_type=machine_type,
        machine_status=machine_status,
        status=status,
        limit=limit,
        offset=offset,
    )
    return [MachineRead.model_validate(x) for x in rows]


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=MachineRead,
    status_code=status.HTTP_201_CREATED,
    summary="Register machine",
    description="Create a machine, optionally with processes and their values.",
)
async def create_machine(payload: MachineCreate, service: MachineService = Depends(_service)) -> MachineRead:
    return MachineRead.model_validate(await service.create_machine(payload))


# PUBLIC_INTERFACE
@router.get("/{machine_id}", response_model=MachineRead, summary="Get machine")
async def get_machine(machine_id: UUID = Path(...), service: MachineService = Depends(_service)) -> MachineRead:
    return MachineRead.model_validate(await service.get_machine(machine_id))


# PUBLIC_INTERFACE
@router.put(
    "/{machine_id}",
    response_model=MachineRead,
    summary="Update machine",
    description="Update machine attributes; listed processes are upserted by name and validated against their fields.",
)
async def update_machine(
    payload: MachineUpdate,
    machine_id: UUID = Path(...),
    service: MachineService = Depends(_service),
) -> MachineRead:
    return MachineRead.model_validate(await service.update_machine(machine_id, payload))


# PUBLIC_INTERFACE
@router.patch("/{machine_id}/status", response_model=MachineRead, summary="Activate or deactivate machine")
async def set_machine_status(
    payload: MachineStatusUpdate,
    machine_id: UUID = Path(...),
    service: MachineService = Depends(_service),
) -> MachineRead:
    return MachineRead.model_validate(await service.set_status(machine_id, payload.status))


# PUBLIC_INTERFACE
@router.delete("/{machine_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Deactivate machine")
async def delete_machine(machine_id: UUID = Path(...), service: MachineService = Depends(_service)) -> None:
    await service.delete_machine(machine_id)


# PUBLIC_INTERFACE
@router.get("/{machine_id}/processes", response_model=List[ProcessRead], summary="List machine processes")
async def list_processes(
    machine_id: UUID = Path(...),
    service: MachineService = Depends(_service),
) -> List[ProcessRead]:
    return [ProcessRead.model_validate(p) for p in await service.list_processes(machine_id)]


# PUBLIC_INTERFACE
@router.post(
    "/{machine_id}/processes",
    response_model=ProcessRead,
    summary="Save process",
    description="Insert or update a process by name. Values are validated against the process's active fields.",
)
async def upsert_process(
    payload: ProcessIn,
    machine_id: UUID = Path(...),
    service: MachineService = Depends(_service),
) -> ProcessRead:
    return ProcessRead.model_validate(await service.upsert_process(machine_id, payload))


# PUBLIC_INTERFACE
@router.delete(
    "/{machine_id}/processes/{process_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete process",
    description="Permanently remove a process and its field definitions.",
)
async def delete_process(
    machine_id: UUID = Path(...),
    process_id: UUID = Path(...),
    service: MachineService = Depends(_service),
) -> None:
    await service.delete_process(machine_id, process_id)


# PUBLIC_INTERFACE
@router.get(
    "/{machine_id}/processes/{process_id}/fields",
    response_model=List[ProcessFieldRead],
    summary="List process fields",
)
async def list_fields(
    machine_id: UUID = Path(...),
    process_id: UUID = Path(...),
    status: Optional[str] = Query(None, description="active (default) | inactive | all"),
    service: MachineService = Depends(_service),
) -> List[ProcessFieldRead]:
    rows = await service.list_fields(machine_id, process_id, status=status)
    return [ProcessFieldRead.model_validate(f) for f in rows]


# PUBLIC_INTERFACE
@router.post(
    "/{machine_id}/processes/{process_id}/fields",
    response_model=ProcessFieldRead,
    status_code=status.HTTP_201_CREATED,
    summary="Add process field",
    description="Define a field constraining the process values. Existing values are not re-validated.",
)
async def add_field(
    payload: ProcessFieldCreate,
    machine_id: UUID = Path(...),
    process_id: UUID = Path(...),
    service: MachineService = Depends(_service),
) -> ProcessFieldRead:
    return ProcessFieldRead.model_validate(await service.add_field(machine_id, process_id, payload))


# PUBLIC_INTERFACE
@router.delete(
    "/{machine_id}/processes/{process_id}/fields/{field_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove process field",
)
async def delete_field(
    machine_id: UUID = Path(...),
    process_id: UUID = Path(...),
    field_id: UUID = Path(...),
    service: MachineService = Depends(_service),
) -> None:
    await service.delete_field(machine_id, process_id, field_id)
