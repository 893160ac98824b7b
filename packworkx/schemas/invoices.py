from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field

DiscountType = Literal["percentage", "flat"]
PaymentType = Literal["cash", "bank", "upi", "cheque", "card", "other"]
PaymentState = Literal["pending", "completed", "failed"]


class InvoiceCreate(BaseModel):
    """Create work order invoice payload."""
    client_id: UUID = Field(..., description="Billed client")
    work_order_ref: Optional[str] = Field(None)
    sale_order_ref: Optional[str] = Field(None)
    invoice_date: Optional[date] = Field(None, description="Defaults to today")
    due_date: Optional[date] = Field(None)
    sku_details: List[dict] = Field(default_factory=list, description="Line descriptions")
    quantity: Optional[Decimal] = Field(None, ge=0)
    rate_per_qty: Optional[Decimal] = Field(None, ge=0)
    total: Optional[Decimal] = Field(None, ge=0, description="Defaults to quantity x rate_per_qty")
    discount_type: DiscountType = Field("flat")
    discount: Decimal = Field(Decimal("0"), ge=0)
    total_tax: Decimal = Field(Decimal("0"), ge=0)
    received_amount: Decimal = Field(Decimal("0"), ge=0, description="Amount received at creation")
    client_name: Optional[str] = Field(None, description="Defaults to the client's display name")
    client_email: Optional[str] = Field(None)
    client_phone: Optional[str] = Field(None)
    billing_address: Optional[dict] = Field(None)


class InvoiceUpdate(BaseModel):
    """Update invoice payload; omitted fields stay unchanged."""
    work_order_ref: Optional[str] = None
    sale_order_ref: Optional[str] = None
    invoice_date: Optional[date] = None
    due_date: Optional[date] = None
    sku_details: Optional[List[dict]] = None
    quantity: Optional[Decimal] = Field(None, ge=0)
    rate_per_qty: Optional[Decimal] = Field(None, ge=0)
    total: Optional[Decimal] = Field(None, ge=0)
    discount_type: Optional[DiscountType] = None
    discount: Optional[Decimal] = Field(None, ge=0)
    total_tax: Optional[Decimal] = Field(None, ge=0)
    client_name: Optional[str] = None
    client_email: Optional[str] = None
    client_phone: Optional[str] = None
    billing_address: Optional[dict] = None


class PaymentCreate(BaseModel):
    """Record an installment against an invoice."""
    payment_type: PaymentType = Field("cash")
    amount: Decimal = Field(Decimal("0"), ge=0)
    credit_amount: Decimal = Field(Decimal("0"), ge=0, description="Taken from the client's credit wallet")
    reference_number: Optional[str] = Field(None)
    remarks: Optional[str] = Field(None)
    payment_date: Optional[date] = Field(None, description="Defaults to today")
    status: PaymentState = Field("completed")


class PaymentStatusUpdate(BaseModel):
    status: PaymentState


class PaymentRead(BaseModel):
    """Partial payment read model."""
    id: UUID
    invoice_id: UUID
    payment_type: str
    amount: float
    credit_amount: float
    reference_number: Optional[str] = None
    remarks: Optional[str] = None
    payment_date: date
    status: str
    created_at: datetime

    class Config:
        from_attributes = True


class InvoiceRead(BaseModel):
    """Work order invoice read model."""
    id: UUID
    invoice_number: str
    client_id: UUID
    client_name: Optional[str] = None
    client_email: Optional[str] = None
    client_phone: Optional[str] = None
    billing_address: dict = Field(default_factory=dict)
    work_order_ref: Optional[str] = None
    sale_order_ref: Optional[str] = None
    invoice_date: date
    due_date: Optional[date] = None
    sku_details: List[dict] = Field(default_factory=list)
    quantity: Optional[float] = None
    rate_per_qty: Optional[float] = None
    total: float
    discount_type: str
    discount: float
    discount_amount: float
    total_tax: float
    total_amount: float
    received_amount: float
    credit_amount: float
    balance: float
    payment_status: str
    status: str
    payments: List[PaymentRead] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class InvoicePage(BaseModel):
    """Paginated invoice list."""
    items: List[InvoiceRead]
    total: int
    limit: int
    offset: int
