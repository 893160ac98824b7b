from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field

MachineStatus = Literal["Active", "Inactive", "Under Maintenance"]
FieldType = Literal["text", "number", "date", "boolean", "select"]


class ProcessIn(BaseModel):
    """Process values keyed by field label."""
    process_name: str = Field(..., min_length=1, max_length=128)
    process_value: Dict[str, Any] = Field(default_factory=dict)


class ProcessFieldCreate(BaseModel):
    """Dynamic field definition."""
    label: str = Field(..., min_length=1, max_length=128)
    field_type: FieldType = Field("text")
    options: List[str] = Field(default_factory=list, description="Choices for select fields")
    required: bool = Field(False)


class ProcessFieldRead(BaseModel):
    id: UUID
    process_name_id: UUID
    label: str
    field_type: str
    options: List[str] = Field(default_factory=list)
    required: bool
    status: str

    class Config:
        from_attributes = True


class ProcessRead(BaseModel):
    """Machine process read model."""
    id: UUID
    machine_id: UUID
    process_name: str
    process_value: Dict[str, Any] = Field(default_factory=dict)
    status: str
    fields: List[ProcessFieldRead] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class MachineBase(BaseModel):
    machine_name: str = Field(..., min_length=1)
    machine_type: Optional[str] = None
    model_number: Optional[str] = None
    serial_number: Optional[str] = None
    manufacturer: Optional[str] = None
    purchase_date: Optional[date] = None
    installation_date: Optional[date] = None
    last_maintenance_date: Optional[date] = None
    next_maintenance_date: Optional[date] = None
    capacity: Optional[str] = None
    machine_status: MachineStatus = "Active"
    location: Optional[str] = None
    description: Optional[str] = None


class MachineCreate(MachineBase):
    """Create machine payload with optional nested processes."""
    processes: List[ProcessIn] = Field(default_factory=list)


class MachineUpdate(BaseModel):
    """Update machine payload. Listed processes are upserted by name."""
    machine_name: Optional[str] = Field(None, min_length=1)
    machine_type: Optional[str] = None
    model_number: Optional[str] = None
    serial_number: Optional[str] = None
    manufacturer: Optional[str] = None
    purchase_date: Optional[date] = None
    installation_date: Optional[date] = None
    last_maintenance_date: Optional[date] = None
    next_maintenance_date: Optional[date] = None
    capacity: Optional[str] = None
    machine_status: Optional[MachineStatus] = None
    location: Optional[str] = None
    description: Optional[str] = None
    processes: Optional[List[ProcessIn]] = None


class MachineStatusUpdate(BaseModel):
    """Soft-delete toggle. Validated in the service so bad values give 400."""
    status: str


class MachineRead(BaseModel):
    """Machine read model."""
    id: UUID
    machine_generate_id: str
    machine_name: str
    machine_type: Optional[str] = None
    model_number: Optional[str] = None
    serial_number: Optional[str] = None
    manufacturer: Optional[str] = None
    purchase_date: Optional[date] = None
    installation_date: Optional[date] = None
    last_maintenance_date: Optional[date] = None
    next_maintenance_date: Optional[date] = None
    capacity: Optional[str] = None
    machine_status: str
    location: Optional[str] = None
    description: Optional[str] = None
    status: str
    processes: List[ProcessRead] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
