from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field

Manufacture = Literal["inhouse", "outsource", "purchase"]
Stage = Literal["planned", "in_production", "completed", "on_hold"]


class WorkOrderCreate(BaseModel):
    """Create work order payload."""
    client_id: UUID = Field(..., description="Customer the order is produced for")
    sku_id: Optional[UUID] = Field(None, description="Active SKU of the same customer")
    sku_name: Optional[str] = Field(None, max_length=128, description="Defaults to the SKU's name")
    sale_order_ref: Optional[str] = Field(None, max_length=64, description="Customer's order reference")
    manufacture: Manufacture = "inhouse"
    outsource_name: Optional[str] = Field(None, description="Required when manufacture is outsource")
    quantity: Decimal = Field(..., gt=0)
    acceptable_excess_units: int = Field(0, ge=0)
    edd: Optional[date] = Field(None, description="Expected delivery date")
    planned_start_date: Optional[date] = None
    planned_end_date: Optional[date] = None
    description: Optional[str] = None


class WorkOrderUpdate(BaseModel):
    """Update work order payload; the client cannot change."""
    sku_id: Optional[UUID] = None
    sku_name: Optional[str] = Field(None, max_length=128)
    sale_order_ref: Optional[str] = Field(None, max_length=64)
    manufacture: Optional[Manufacture] = None
    outsource_name: Optional[str] = None
    quantity: Optional[Decimal] = Field(None, gt=0)
    acceptable_excess_units: Optional[int] = Field(None, ge=0)
    edd: Optional[date] = None
    planned_start_date: Optional[date] = None
    planned_end_date: Optional[date] = None
    description: Optional[str] = None
    stage: Optional[Stage] = None


class WorkOrderRead(BaseModel):
    """Work order read model."""
    id: UUID
    work_order_generate_id: str
    client_id: UUID
    sku_id: Optional[UUID] = None
    sku_name: Optional[str] = None
    sale_order_ref: Optional[str] = None
    manufacture: str
    outsource_name: Optional[str] = None
    quantity: float
    acceptable_excess_units: int
    edd: Optional[date] = None
    planned_start_date: Optional[date] = None
    planned_end_date: Optional[date] = None
    description: Optional[str] = None
    stage: str
    status: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
