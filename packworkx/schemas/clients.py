from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

CustomerType = Literal["Business", "Individual"]
ClientCategory = Literal["customer", "supplier", "both"]


class ClientBase(BaseModel):
    customer_type: CustomerType = Field("Business")
    client_category: ClientCategory = Field("customer")
    salutation: Optional[str] = Field(None)
    first_name: Optional[str] = Field(None)
    last_name: Optional[str] = Field(None)
    display_name: str = Field(..., min_length=1)
    company_name: Optional[str] = Field(None)
    email: Optional[EmailStr] = Field(None)
    work_phone: Optional[str] = Field(None)
    mobile: Optional[str] = Field(None)
    gst_number: Optional[str] = Field(None)
    pan_number: Optional[str] = Field(None)
    currency: str = Field("INR")
    opening_balance: Decimal = Field(Decimal("0"))
    payment_terms: Optional[str] = Field(None)
    billing_address: dict = Field(default_factory=dict)
    shipping_address: dict = Field(default_factory=dict)


class ClientCreate(ClientBase):
    """Create client payload."""


class ClientUpdate(BaseModel):
    """Update client payload; omitted fields stay unchanged. Wallet balances are not editable."""
    customer_type: Optional[CustomerType] = None
    client_category: Optional[ClientCategory] = None
    salutation: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    display_name: Optional[str] = Field(None, min_length=1)
    company_name: Optional[str] = None
    email: Optional[EmailStr] = None
    work_phone: Optional[str] = None
    mobile: Optional[str] = None
    gst_number: Optional[str] = None
    pan_number: Optional[str] = None
    currency: Optional[str] = None
    opening_balance: Optional[Decimal] = None
    payment_terms: Optional[str] = None
    billing_address: Optional[dict] = None
    shipping_address: Optional[dict] = None


class ClientRead(BaseModel):
    """Client read model."""
    id: UUID
    client_ref_id: str
    customer_type: str
    client_category: str
    salutation: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    display_name: str
    company_name: Optional[str] = None
    email: Optional[str] = None
    work_phone: Optional[str] = None
    mobile: Optional[str] = None
    gst_number: Optional[str] = None
    pan_number: Optional[str] = None
    currency: str
    opening_balance: float
    payment_terms: Optional[str] = None
    billing_address: dict = Field(default_factory=dict)
    shipping_address: dict = Field(default_factory=dict)
    credit_balance: float
    debit_balance: float
    status: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class WalletHistoryRead(BaseModel):
    """Wallet journal entry."""
    id: UUID
    client_id: UUID
    wallet: str = Field(..., description="credit | debit")
    type: str = Field(..., description="credit adds to the wallet, debit removes")
    amount: float
    balance_after: float
    reference_number: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class WalletRead(BaseModel):
    """Client wallet balances with history, newest first."""
    client_id: UUID
    credit_balance: float
    debit_balance: float
    history: List[WalletHistoryRead]
