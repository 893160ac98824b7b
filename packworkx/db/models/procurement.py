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


class PurchaseOrder(UUIDPkMixin, CompanyMixin, AuditMixin, StatusMixin, TimestampMixin, Base):
    """Purchase order header with receipt and payment progress."""
    __tablename__ = "purchase_orders"

    purchase_generate_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    supplier_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("clients.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    supplier_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    po_date: Mapped[date] = mapped_column(Date, nullable=False)
    expected_delivery_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    payment_terms: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    reference: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    sub_total: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False, default=Decimal("0"))
    tax_amount: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False, default=Decimal("0"))
    total_amount: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False, default=Decimal("0"))
    amount_paid: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False, default=Decimal("0"))
    decision: Mapped[str] = mapped_column(String(16), nullable=False, default="pending")
    receipt_status: Mapped[str] = mapped_column(String(24), nullable=False, default="pending")
    payment_status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending")

    items: Mapped[list["PurchaseOrderItem"]] = relationship(
        "PurchaseOrderItem",
        cascade="all, delete-orphan",
        order_by="PurchaseOrderItem.line_no",
        lazy="selectin",
    )
    payments: Mapped[list["PurchaseOrderPayment"]] = relationship(
        "PurchaseOrderPayment",
        cascade="all, delete-orphan",
        order_by="PurchaseOrderPayment.created_at.desc()",
        lazy="selectin",
    )


class PurchaseOrderItem(UUIDPkMixin, CompanyMixin, TimestampMixin, Base):
    """Purchase order line."""
    __tablename__ = "purchase_order_items"

    po_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("purchase_orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    line_no: Mapped[int] = mapped_column(Integer, nullable=False)
    item_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("items.id", ondelete="RESTRICT"), nullable=False
    )
    item_code: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    item_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    uom: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)
    quantity: Mapped[Decimal] = mapped_column(Numeric(15, 3), nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    cgst: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False, default=Decimal("0"))
    sgst: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False, default=Decimal("0"))
    amount: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    tax_amount: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)


class PurchaseOrderPayment(UUIDPkMixin, CompanyMixin, AuditMixin, TimestampMixin, Base):
    """Payment made to the supplier against a purchase order."""
    __tablename__ = "purchase_order_payments"

    po_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("purchase_orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    purchase_payment_generate_id: Mapped[str] = mapped_column(String(64), nullable=False)
    payment_date: Mapped[date] = mapped_column(Date, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    payment_mode: Mapped[str] = mapped_column(String(16), nullable=False, default="cash")
    reference_number: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    remark: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="completed")
