from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class NoteAmounts(BaseModel):
    sub_total: Decimal = Field(Decimal("0"), ge=0)
    tax_amount: Decimal = Field(Decimal("0"), ge=0)
    adjustment: Decimal = Field(Decimal("0"), description="May be negative; the total must stay >= 0")


class CreditNoteCreate(NoteAmounts):
    """Create credit note payload."""
    credit_note_number: str = Field(..., min_length=1, max_length=64)
    credit_note_date: Optional[date] = Field(None, description="Defaults to today")
    client_id: UUID = Field(...)
    invoice_id: Optional[UUID] = Field(None)
    reason: Optional[str] = Field(None)


class CreditNoteUpdate(BaseModel):
    """Update credit note payload. The number is fixed once issued."""
    credit_note_number: Optional[str] = None
    credit_note_date: Optional[date] = None
    invoice_id: Optional[UUID] = None
    reason: Optional[str] = None
    sub_total: Optional[Decimal] = Field(None, ge=0)
    tax_amount: Optional[Decimal] = Field(None, ge=0)
    adjustment: Optional[Decimal] = None


class CreditNoteRead(BaseModel):
    """Credit note read model."""
    id: UUID
    credit_note_generate_id: str
    credit_note_number: str
    credit_note_date: date
    client_id: UUID
    invoice_id: Optional[UUID] = None
    reason: Optional[str] = None
    sub_total: float
    tax_amount: float
    adjustment: float
    total_amount: float
    status: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class DebitNoteCreate(NoteAmounts):
    """Create debit note payload."""
    debit_note_date: Optional[date] = Field(None, description="Defaults to today")
    supplier_id: UUID = Field(...)
    po_id: Optional[UUID] = Field(None)
    reason: Optional[str] = Field(None)


class DebitNoteUpdate(BaseModel):
    """Update debit note payload."""
    debit_note_date: Optional[date] = None
    po_id: Optional[UUID] = None
    reason: Optional[str] = None
    sub_total: Optional[Decimal] = Field(None, ge=0)
    tax_amount: Optional[Decimal] = Field(None, ge=0)
    adjustment: Optional[Decimal] = None


class DebitNoteRead(BaseModel):
    """Debit note read model."""
    id: UUID
    debit_note_generate_id: str
    debit_note_date: date
    supplier_id: UUID
    po_id: Optional[UUID] = None
    reason: Optional[str] = None
    sub_total: float
    tax_amount: float
    adjustment: float
    total_amount: float
    status: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
