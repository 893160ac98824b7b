from __future__ import annotations

from datetime import datetime
from typing import Dict, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from .auth import TokenPair, UserRead


class CompanyRead(BaseModel):
    """Company read model."""
    id: UUID = Field(..., description="Company ID")
    company_name: str = Field(..., description="Registered company name")
    company_email: EmailStr = Field(..., description="Company email")
    phone: Optional[str] = Field(None)
    address: Optional[str] = Field(None)
    website: Optional[str] = Field(None)
    gst_number: Optional[str] = Field(None)
    timezone: str = Field(..., description="IANA timezone")
    currency: str = Field(..., description="ISO currency code")
    status: str = Field(..., description="active | inactive")
    created_at: datetime = Field(...)
    updated_at: datetime = Field(...)

    class Config:
        from_attributes = True


class CompanyRegister(BaseModel):
    """Public sign-up payload creating a company and its first admin user."""
    company_name: str = Field(..., min_length=1, description="Company name")
    company_email: EmailStr = Field(..., description="Company email (unique)")
    phone: Optional[str] = Field(None)
    address: Optional[str] = Field(None)
    website: Optional[str] = Field(None)
    gst_number: Optional[str] = Field(None)
    timezone: str = Field("Asia/Kolkata")
    currency: str = Field("INR", min_length=3, max_length=8)
    admin_email: EmailStr = Field(..., description="Login email for the admin user")
    admin_password: str = Field(..., min_length=6, description="Admin password")
    admin_full_name: Optional[str] = Field(None)


class CompanyUpdate(BaseModel):
    """Update company profile payload."""
    company_name: Optional[str] = Field(None, min_length=1)
    phone: Optional[str] = Field(None)
    address: Optional[str] = Field(None)
    website: Optional[str] = Field(None)
    gst_number: Optional[str] = Field(None)
    timezone: Optional[str] = Field(None)
    currency: Optional[str] = Field(None, min_length=3, max_length=8)


class RegistrationResult(BaseModel):
    """Outcome of a company registration."""
    company: CompanyRead
    user: UserRead
    tokens: TokenPair


class NumberFormat(BaseModel):
    """Document number format: prefix + separator + zero-padded counter."""
    prefix: str = Field(..., max_length=16)
    separator: str = Field("-", max_length=3)
    digits: int = Field(5, ge=1, le=12)


class NumberFormatUpdate(BaseModel):
    """Partial override for one document key."""
    prefix: Optional[str] = Field(None, max_length=16)
    separator: Optional[str] = Field(None, max_length=3)
    digits: Optional[int] = Field(None, ge=1, le=12)


class InvoiceSettingsRead(BaseModel):
    """Effective numbering formats per document key."""
    number_formats: Dict[str, NumberFormat]


class InvoiceSettingsUpdate(BaseModel):
    """Per-key overrides merged into the stored formats."""
    number_formats: Dict[str, NumberFormatUpdate]
