from __future__ import annotations

from typing import Optional

from sqlalchemy import BigInteger, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from packworkx.db.base import (
    Base,
    CompanyMixin,
    JSONType,
    StatusMixin,
    TimestampMixin,
    UUIDPkMixin,
)


class Company(UUIDPkMixin, StatusMixin, TimestampMixin, Base):
    """A manufacturer account; every business record belongs to exactly one company."""
    __tablename__ = "companies"

    company_name: Mapped[str] = mapped_column(Text, nullable=False)
    company_email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    phone: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    website: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    gst_number: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    timezone: Mapped[str] = mapped_column(String(64), nullable=False, default="Asia/Kolkata")
    currency: Mapped[str] = mapped_column(String(8), nullable=False, default="INR")


class InvoiceSetting(UUIDPkMixin, CompanyMixin, TimestampMixin, Base):
    """Per-company document numbering formats keyed by document type."""
    __tablename__ = "invoice_settings"
    __table_args__ = (
        UniqueConstraint("company_id", name="uq_invoice_settings_company_id"),
    )

    number_formats: Mapped[dict] = mapped_column(JSONType, nullable=False, default=dict)


class IdSequence(UUIDPkMixin, CompanyMixin, TimestampMixin, Base):
    """Last issued number per (company, document key)."""
    __tablename__ = "id_sequences"
    __table_args__ = (
        UniqueConstraint("company_id", "key", name="uq_id_sequences_company_key"),
    )

    key: Mapped[str] = mapped_column(String(64), nullable=False)
    last_value: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
