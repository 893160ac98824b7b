from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import Date, ForeignKey, Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from packworkx.db.base import (
    AuditMixin,
    Base,
    CompanyMixin,
    StatusMixin,
    TimestampMixin,
    UUIDPkMixin,
)


class GRN(UUIDPkMixin, CompanyMixin, AuditMixin, StatusMixin, TimestampMixin, Base):
    """Goods received note posted against an approved purchase order."""
    __tablename__ = "grns"

    grn_generate_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    po_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("purchase_orders.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    supplier_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("clients.id", ondelete="RESTRICT"), nullable=False
    )
    grn_date: Mapped[date] = mapped_column(Date, nullable=False)
    invoice_no: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    invoice_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    received_by: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    remarks: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    grn_status: Mapped[str] = mapped_column(String(24), nullable=False, default="partially_received")

    items: Mapped[list["GRNItem"]] = relationship(
        "GRNItem",
        cascade="all, delete-orphan",
        order_by="GRNItem.line_no",
        lazy="selectin",
    )


class GRNItem(UUIDPkMixin, CompanyMixin, TimestampMixin, Base):
    """Received quantity of one purchase order line, split into accepted and rejected."""
    __tablename__ = "grn_items"

    grn_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("grns.id", ondelete="CASCADE"), nullable=False, index=True
    )
    line_no: Mapped[int] = mapped_column(Integer, nullable=False)
    po_item_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("purchase_order_items.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    item_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("items.id", ondelete="RESTRICT"), nullable=False
    )
    quantity_ordered: Mapped[Decimal] = mapped_column(Numeric(15, 3), nullable=False)
    quantity_received: Mapped[Decimal] = mapped_column(Numeric(15, 3), nullable=False)
    accepted_quantity: Mapped[Decimal] = mapped_column(Numeric(15, 3), nullable=False)
    rejected_quantity: Mapped[Decimal] = mapped_column(Numeric(15, 3), nullable=False, default=Decimal("0"))
    batch_no: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    location: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
