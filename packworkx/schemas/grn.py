from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class GRNItemIn(BaseModel):
    """Received quantity for one PO line."""
    po_item_id: UUID = Field(..., description="Purchase order line id")
    quantity_received: Decimal = Field(..., ge=0)
    accepted_quantity: Decimal = Field(..., ge=0)
    rejected_quantity: Optional[Decimal] = Field(None, ge=0, description="Defaults to received - accepted")
    batch_no: Optional[str] = Field(None)
    location: Optional[str] = Field(None)
    notes: Optional[str] = Field(None)


class GRNCreate(BaseModel):
    """Create GRN payload."""
    po_id: UUID = Field(..., description="Approved purchase order")
    grn_date: Optional[date] = Field(None, description="Defaults to today")
    invoice_no: Optional[str] = Field(None, description="Supplier invoice number")
    invoice_date: Optional[date] = Field(None)
    received_by: Optional[str] = Field(None)
    remarks: Optional[str] = Field(None)
    items: List[GRNItemIn] = Field(..., min_length=1)


class GRNUpdate(BaseModel):
    """Replace GRN header and lines. The PO cannot change."""
    grn_date: date = Field(...)
    invoice_no: Optional[str] = Field(None)
    invoice_date: Optional[date] = Field(None)
    received_by: Optional[str] = Field(None)
    remarks: Optional[str] = Field(None)
    items: List[GRNItemIn] = Field(..., min_length=1)


class GRNItemRead(BaseModel):
    """GRN line read model."""
    id: UUID
    line_no: int
    po_item_id: UUID
    item_id: UUID
    quantity_ordered: float
    quantity_received: float
    accepted_quantity: float
    rejected_quantity: float
    batch_no: Optional[str] = None
    location: Optional[str] = None
    notes: Optional[str] = None

    class Config:
        from_attributes = True


class GRNRead(BaseModel):
    """GRN read model."""
    id: UUID
    grn_generate_id: str
    po_id: UUID
    supplier_id: UUID
    grn_date: date
    invoice_no: Optional[str] = None
    invoice_date: Optional[date] = None
    received_by: Optional[str] = None
    remarks: Optional[str] = None
    grn_status: str
    status: str
    items: List[GRNItemRead] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
