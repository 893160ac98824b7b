from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field

PaymentMode = Literal["cash", "bank", "upi", "cheque", "wallet"]
Decision = Literal["approve", "disapprove"]


class PurchaseOrderItemIn(BaseModel):
    """PO line payload. Amounts are computed server-side."""
    item_id: UUID = Field(..., description="Item id")
    quantity: Decimal = Field(..., gt=0, description="Ordered quantity")
    unit_price: Decimal = Field(..., ge=0, description="Price per unit")
    cgst: Optional[Decimal] = Field(None, ge=0, le=100, description="CGST percent; defaults to the item's")
    sgst: Optional[Decimal] = Field(None, ge=0, le=100, description="SGST percent; defaults to the item's")


class PurchaseOrderCreate(BaseModel):
    """Create PO payload."""
    supplier_id: UUID = Field(..., description="Supplier (client) id")
    po_date: Optional[date] = Field(None, description="Defaults to today")
    expected_delivery_date: Optional[date] = Field(None)
    payment_terms: Optional[str] = Field(None)
    reference: Optional[str] = Field(None)
    notes: Optional[str] = Field(None)
    items: List[PurchaseOrderItemIn] = Field(..., min_length=1)
    use_wallet: bool = Field(False, description="Settle part of the PO from the supplier debit wallet")
    wallet_amount: Optional[Decimal] = Field(None, gt=0, description="Wallet amount to apply")


class PurchaseOrderUpdate(BaseModel):
    """Replace PO header and lines."""
    supplier_id: UUID = Field(...)
    po_date: date = Field(...)
    expected_delivery_date: Optional[date] = Field(None)
    payment_terms: Optional[str] = Field(None)
    reference: Optional[str] = Field(None)
    notes: Optional[str] = Field(None)
    items: List[PurchaseOrderItemIn] = Field(..., min_length=1)


class PurchaseOrderDecision(BaseModel):
    """Approval decision payload."""
    decision: Decision


class PurchaseOrderItemRead(BaseModel):
    """PO line read model with receipt progress."""
    id: UUID
    line_no: int
    item_id: UUID
    item_code: Optional[str] = None
    item_name: Optional[str] = None
    uom: Optional[str] = None
    quantity: float
    unit_price: float
    cgst: float
    sgst: float
    amount: float
    tax_amount: float
    total_amount: float
    received_quantity: float = Field(0, description="Accepted over active GRNs")
    pending_quantity: float = Field(0)
    receipt_status: str = Field("pending")

    class Config:
        from_attributes = True


class PurchaseOrderPaymentCreate(BaseModel):
    """Record a supplier payment."""
    amount: Decimal = Field(..., gt=0)
    payment_date: Optional[date] = Field(None, description="Defaults to today")
    payment_mode: PaymentMode = Field("cash")
    reference_number: Optional[str] = Field(None)
    remark: Optional[str] = Field(None)


class PurchaseOrderPaymentRead(BaseModel):
    """Supplier payment read model."""
    id: UUID
    po_id: UUID
    purchase_payment_generate_id: str
    payment_date: date
    amount: float
    payment_mode: str
    reference_number: Optional[str] = None
    remark: Optional[str] = None
    status: str
    created_at: datetime

    class Config:
        from_attributes = True


class PurchaseOrderRead(BaseModel):
    """PO read model."""
    id: UUID = Field(..., description="PO ID")
    purchase_generate_id: str = Field(..., description="PO number")
    supplier_id: UUID
    supplier_name: Optional[str] = None
    po_date: date
    expected_delivery_date: Optional[date] = None
    payment_terms: Optional[str] = None
    reference: Optional[str] = None
    notes: Optional[str] = None
    sub_total: float
    tax_amount: float
    total_amount: float
    amount_paid: float
    decision: str
    receipt_status: str
    payment_status: str
    status: str
    items: List[PurchaseOrderItemRead] = Field(default_factory=list)
    payments: List[PurchaseOrderPaymentRead] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PurchaseOrderSummary(BaseModel):
    """PO list row."""
    id: UUID
    purchase_generate_id: str
    supplier_id: UUID
    supplier_name: Optional[str] = None
    po_date: date
    total_amount: float
    amount_paid: float
    decision: str
    receipt_status: str
    payment_status: str
    status: str
    created_at: datetime

    class Config:
        from_attributes = True


class OpenPurchaseOrder(BaseModel):
    """GRN pick-list entry."""
    id: UUID
    purchase_generate_id: str
    supplier_id: UUID
    supplier_name: Optional[str] = None
    po_date: date
    receipt_status: str

    class Config:
        from_attributes = True
