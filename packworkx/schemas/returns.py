from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class PurchaseReturnItemIn(BaseModel):
    """Quantity of one GRN line going back to the supplier."""
    grn_item_id: UUID = Field(..., description="GRN line the goods were accepted on")
    return_qty: Decimal = Field(..., gt=0)
    reason: Optional[str] = Field(None)
    notes: Optional[str] = Field(None)


class PurchaseReturnCreate(BaseModel):
    """Create purchase return payload. Prices come from the purchase order lines."""
    grn_id: UUID = Field(..., description="Active GRN the goods were received on")
    return_date: Optional[date] = Field(None, description="Defaults to today")
    reason: Optional[str] = Field(None)
    notes: Optional[str] = Field(None)
    items: List[PurchaseReturnItemIn] = Field(..., min_length=1)


class PurchaseReturnItemRead(BaseModel):
    id: UUID
    line_no: int
    grn_item_id: UUID
    po_item_id: UUID
    item_id: UUID
    inventory_id: Optional[UUID] = None
    return_qty: float
    unit_price: float
    cgst: float
    sgst: float
    cgst_amount: float
    sgst_amount: float
    amount: float
    tax_amount: float
    total_amount: float
    reason: Optional[str] = None
    notes: Optional[str] = None

    class Config:
        from_attributes = True


class PurchaseReturnRead(BaseModel):
    """Purchase return read model."""
    id: UUID
    purchase_return_generate_id: str
    grn_id: UUID
    po_id: UUID
    supplier_id: UUID
    return_date: date
    reason: Optional[str] = None
    notes: Optional[str] = None
    total_qty: float
    amount: float
    cgst_amount: float
    sgst_amount: float
    tax_amount: float
    total_amount: float
    status: str
    items: List[PurchaseReturnItemRead] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
