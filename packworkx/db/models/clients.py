from __future__ import annotations

import uuid
from decimal import Decimal
from typing import Optional

from sqlalchemy import ForeignKey, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from packworkx.db.base import (
    AuditMixin,
    Base,
    CompanyMixin,
    JSONType,
    StatusMixin,
    TimestampMixin,
    UUIDPkMixin,
    active_unique_index,
)


class Client(UUIDPkMixin, CompanyMixin, AuditMixin, StatusMixin, TimestampMixin, Base):
    """Customer and/or supplier with two running wallet balances."""
    __tablename__ = "clients"

    client_ref_id: Mapped[str] = mapped_column(String(64), nullable=False)
    customer_type: Mapped[str] = mapped_column(String(16), nullable=False, default="Business")
    client_category: Mapped[str] = mapped_column(String(16), nullable=False, default="customer")
    salutation: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)
    first_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    last_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    display_name: Mapped[str] = mapped_column(Text, nullable=False)
    company_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    work_phone: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    mobile: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    gst_number: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    pan_number: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)
    currency: Mapped[str] = mapped_column(String(8), nullable=False, default="INR")
    opening_balance: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False, default=Decimal("0"))
    payment_terms: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    billing_address: Mapped[dict] = mapped_column(JSONType, nullable=False, default=dict)
    shipping_address: Mapped[dict] = mapped_column(JSONType, nullable=False, default=dict)
    credit_balance: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False, default=Decimal("0"))
    debit_balance: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False, default=Decimal("0"))


active_unique_index("uq_clients_company_email_active", Client.company_id, Client.email)


class WalletHistory(UUIDPkMixin, CompanyMixin, AuditMixin, TimestampMixin, Base):
    """Journal entry for every change to a client's credit or debit balance."""
    __tablename__ = "wallet_history"

    client_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True
    )
    wallet: Mapped[str] = mapped_column(String(8), nullable=False)  # credit | debit
    type: Mapped[str] = mapped_column(String(8), nullable=False)  # credit adds, debit removes
    amount: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    balance_after: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    reference_number: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
