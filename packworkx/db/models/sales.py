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
    JSONType,
    StatusMixin,
    TimestampMixin,
    UUIDPkMixin,
    active_unique_index,
)


class WorkOrderInvoice(UUIDPkMixin, CompanyMixin, AuditMixin, StatusMixin, TimestampMixin, Base):
    """Invoice raised to a client for a work order / sale order."""
    __tablename__ = "work_order_invoices"

    invoice_number: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    client_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("clients.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    client_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    client_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    client_phone: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    billing_address: Mapped[dict] = mapped_column(JSONType, nullable=False, default=dict)
    work_order_ref: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    sale_order_ref: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    invoice_date: Mapped[date] = mapped_column(Date, nullable=False)
    due_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    sku_details: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)
    quantity: Mapped[Optional[Decimal]] = mapped_column(Numeric(15, 3), nullable=True)
    rate_per_qty: Mapped[Optional[Decimal]] = mapped_column(Numeric(15, 2), nullable=True)
    total: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False, default=Decimal("0"))
    discount_type: Mapped[str] = mapped_column(String(16), nullable=False, default="flat")
    discount: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False, default=Decimal("0"))
    discount_amount: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False, default=Decimal("0"))
    total_tax: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False, default=Decimal("0"))
    total_amount: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False, default=Decimal("0"))
    received_amount: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False, default=Decimal("0"))
    credit_amount: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False, default=Decimal("0"))
    balance: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False, default=Decimal("0"))
    payment_status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending", index=True)

    payments: Mapped[list["PartialPayment"]] = relationship(
        "PartialPayment",
        cascade="all, delete-orphan",
        order_by="PartialPayment.created_at.desc()",
        lazy="selectin",
    )


class PartialPayment(UUIDPkMixin, CompanyMixin, AuditMixin, TimestampMixin, Base):
    """Installment received against a work order invoice."""
    __tablename__ = "partial_payments"

    invoice_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("work_order_invoices.id", ondelete="CASCADE"), nullable=False, index=True
    )
    payment_type: Mapped[str] = mapped_column(String(16), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False, default=Decimal("0"))
    credit_amount: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False, default=Decimal("0"))
    reference_number: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    remarks: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    payment_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="completed")


MANUFACTURE_MODES = ("inhouse", "outsource", "purchase")
WORK_ORDER_STAGES = ("planned", "in_production", "completed", "on_hold")


class Sku(UUIDPkMixin, CompanyMixin, AuditMixin, StatusMixin, TimestampMixin, Base):
    """A customer's box specification: ply, dimensions and free-form board values."""
    __tablename__ = "skus"

    sku_generate_id: Mapped[str] = mapped_column(String(64), nullable=False)
    sku_name: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    client_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("clients.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    sku_type: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    ply: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    length: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    width: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    height: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    unit: Mapped[str] = mapped_column(String(8), nullable=False, default="mm")
    joints: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    ups: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    flap_width: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    deckle_size: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    board_size_cm2: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    customer_reference: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    minimum_order_level: Mapped[Decimal] = mapped_column(Numeric(15, 3), nullable=False, default=Decimal("0"))
    sku_values: Mapped[dict] = mapped_column(JSONType, nullable=False, default=dict)


active_unique_index("uq_skus_company_sku_name_active", Sku.company_id, Sku.sku_name)


class WorkOrder(UUIDPkMixin, CompanyMixin, AuditMixin, StatusMixin, TimestampMixin, Base):
    """Production order for a client, made in house, outsourced or bought in."""
    __tablename__ = "work_orders"

    work_order_generate_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    client_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("clients.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    sku_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("skus.id", ondelete="RESTRICT"), nullable=True
    )
    sku_name: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    sale_order_ref: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    manufacture: Mapped[str] = mapped_column(String(16), nullable=False, default="inhouse")
    outsource_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    quantity: Mapped[Decimal] = mapped_column(Numeric(15, 3), nullable=False)
    acceptable_excess_units: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    edd: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    planned_start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    planned_end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    stage: Mapped[str] = mapped_column(String(24), nullable=False, default="planned")
