from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class InventoryRead(BaseModel):
    """Inventory stock row."""
    id: UUID = Field(..., description="Inventory ID")
    inventory_generate_id: str = Field(..., description="Inventory number")
    item_id: UUID
    item_code: Optional[str] = None
    grn_id: Optional[UUID] = None
    grn_item_id: Optional[UUID] = None
    po_id: Optional[UUID] = None
    description: Optional[str] = None
    quantity_available: float
    posted_quantity: float
    batch_no: Optional[str] = None
    location: Optional[str] = None
    status: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class InventoryCreate(BaseModel):
    """Open a manual stock row (opening stock)."""
    item_id: UUID = Field(...)
    quantity: Decimal = Field(..., ge=0)
    description: Optional[str] = Field(None)
    batch_no: Optional[str] = Field(None)
    location: Optional[str] = Field(None)


class InventoryUpdate(BaseModel):
    """Descriptive fields only; quantities move through GRNs and adjustments."""
    description: Optional[str] = Field(None)
    batch_no: Optional[str] = Field(None)
    location: Optional[str] = Field(None)


class StockSummaryRow(BaseModel):
    """Total active stock of one item against its thresholds."""
    item_id: UUID
    item_code: str
    item_name: str
    uom: Optional[str] = None
    quantity_available: float
    min_stock_level: float
    reorder_level: float
    low_stock: bool
    reorder: bool


class StockAdjustmentItemIn(BaseModel):
    """One increase/decrease step."""
    adjustment_type: Literal["increase", "decrease"]
    adjustment_quantity: Decimal = Field(..., gt=0)


class StockAdjustmentCreate(BaseModel):
    """Create stock adjustment payload."""
    inventory_id: UUID = Field(..., description="Inventory row to adjust")
    reason: str = Field(..., min_length=1)
    remarks: str = Field(..., min_length=1)
    adjustment_date: Optional[date] = Field(None, description="Defaults to today")
    items: List[StockAdjustmentItemIn] = Field(..., min_length=1)


class StockAdjustmentItemRead(BaseModel):
    id: UUID
    line_no: int
    adjustment_type: str
    adjustment_quantity: float
    previous_quantity: float
    new_quantity: float

    class Config:
        from_attributes = True


class StockAdjustmentRead(BaseModel):
    """Stock adjustment read model."""
    id: UUID
    adjustment_generate_id: str
    inventory_id: UUID
    item_id: UUID
    adjustment_date: date
    reason: str
    remarks: str
    status: str
    items: List[StockAdjustmentItemRead] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
