from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field

SkuUnit = Literal["mm", "cm", "inch"]


class SkuCreate(BaseModel):
    """Create SKU payload. Dimensions are in `unit`."""
    sku_name: str = Field(..., min_length=1, max_length=128)
    client_id: UUID = Field(..., description="Customer the box is made for")
    sku_type: Optional[str] = Field(None, max_length=32, description="e.g. RSC, die-cut, tray")
    ply: Optional[int] = Field(None, ge=1, le=15)
    length: Optional[Decimal] = Field(None, gt=0)
    width: Optional[Decimal] = Field(None, gt=0)
    height: Optional[Decimal] = Field(None, ge=0)
    unit: SkuUnit = "mm"
    joints: Optional[int] = Field(None, ge=0)
    ups: Optional[int] = Field(None, ge=1)
    flap_width: Optional[Decimal] = Field(None, ge=0)
    deckle_size: Optional[Decimal] = Field(None, ge=0)
    board_size_cm2: Optional[Decimal] = Field(None, ge=0)
    customer_reference: Optional[str] = None
    minimum_order_level: Decimal = Field(Decimal("0"), ge=0)
    sku_values: Dict[str, Any] = Field(default_factory=dict, description="Board and print specification")


class SkuUpdate(BaseModel):
    """Update SKU payload; the owning client cannot change."""
    sku_name: Optional[str] = Field(None, min_length=1, max_length=128)
    sku_type: Optional[str] = Field(None, max_length=32)
    ply: Optional[int] = Field(None, ge=1, le=15)
    length: Optional[Decimal] = Field(None, gt=0)
    width: Optional[Decimal] = Field(None, gt=0)
    height: Optional[Decimal] = Field(None, ge=0)
    unit: Optional[SkuUnit] = None
    joints: Optional[int] = Field(None, ge=0)
    ups: Optional[int] = Field(None, ge=1)
    flap_width: Optional[Decimal] = Field(None, ge=0)
    deckle_size: Optional[Decimal] = Field(None, ge=0)
    board_size_cm2: Optional[Decimal] = Field(None, ge=0)
    customer_reference: Optional[str] = None
    minimum_order_level: Optional[Decimal] = Field(None, ge=0)
    sku_values: Optional[Dict[str, Any]] = None


class SkuRead(BaseModel):
    """SKU read model."""
    id: UUID
    sku_generate_id: str
    sku_name: str
    client_id: UUID
    sku_type: Optional[str] = None
    ply: Optional[int] = None
    length: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None
    unit: str
    joints: Optional[int] = None
    ups: Optional[int] = None
    flap_width: Optional[float] = None
    deckle_size: Optional[float] = None
    board_size_cm2: Optional[float] = None
    customer_reference: Optional[str] = None
    minimum_order_level: float
    sku_values: Dict[str, Any] = Field(default_factory=dict)
    status: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
