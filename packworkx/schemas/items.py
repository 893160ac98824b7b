from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field

ItemType = Literal[
    "reels",
    "glues",
    "pins",
    "finished-goods",
    "semi-finished-goods",
    "raw-materials",
]


class ItemCreate(BaseModel):
    """Create item payload."""
    item_code: str = Field(..., min_length=1, max_length=64)
    item_name: str = Field(..., min_length=1)
    description: Optional[str] = None
    hsn_code: Optional[str] = None
    uom: Optional[str] = Field(None, description="Unit of measure, e.g. KG, NOS, ROLL")
    category: Optional[str] = None
    item_type: ItemType = "raw-materials"
    min_stock_level: Decimal = Field(Decimal("0"), ge=0)
    reorder_level: Decimal = Field(Decimal("0"), ge=0)
    cgst: Decimal = Field(Decimal("0"), ge=0, le=100)
    sgst: Decimal = Field(Decimal("0"), ge=0, le=100)
    standard_cost: Optional[Decimal] = Field(None, ge=0)


class ItemUpdate(BaseModel):
    """Update item payload."""
    item_code: Optional[str] = Field(None, min_length=1, max_length=64)
    item_name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    hsn_code: Optional[str] = None
    uom: Optional[str] = None
    category: Optional[str] = None
    item_type: Optional[ItemType] = None
    min_stock_level: Optional[Decimal] = Field(None, ge=0)
    reorder_level: Optional[Decimal] = Field(None, ge=0)
    cgst: Optional[Decimal] = Field(None, ge=0, le=100)
    sgst: Optional[Decimal] = Field(None, ge=0, le=100)
    standard_cost: Optional[Decimal] = Field(None, ge=0)


class ItemRead(BaseModel):
    """Item read model."""
    id: UUID
    item_generate_id: str
    item_code: str
    item_name: str
    description: Optional[str] = None
    hsn_code: Optional[str] = None
    uom: Optional[str] = None
    category: Optional[str] = None
    item_type: str
    min_stock_level: float
    reorder_level: float
    cgst: float
    sgst: float
    standard_cost: Optional[float] = None
    status: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
