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


class Inventory(UUIDPkMixin, CompanyMixin, AuditMixin, StatusMixin, TimestampMixin, Base):
    """Stock row for an item, posted by a GRN line or opened manually."""
    __tablename__ = "inventory"

    inventory_generate_id: Mapped[str] = mapped_column(String(64), nullable=False)
    item_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("items.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    item_code: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    grn_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("grns.id", ondelete="SET NULL"), nullable=True, index=True
    )
    grn_item_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("grn_items.id", ondelete="SET NULL"), nullable=True
    )
    po_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("purchase_orders.id", ondelete="SET NULL"), nullable=True
    )
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    quantity_available: Mapped[Decimal] = mapped_column(Numeric(15, 3), nullable=False, default=Decimal("0"))
    # Quantity at posting time; differs from quantity_available once stock moves.
    posted_quantity: Mapped[Decimal] = mapped_column(Numeric(15, 3), nullable=False, default=Decimal("0"))
    batch_no: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    location: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class StockAdjustment(UUIDPkMixin, CompanyMixin, AuditMixin, StatusMixin, TimestampMixin, Base):
    """Manual correction of one inventory row with a reason trail."""
    __tablename__ = "stock_adjustments"

    adjustment_generate_id: Mapped[str] = mapped_column(String(64), nullable=False)
    inventory_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("inventory.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    item_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("items.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    adjustment_date: Mapped[date] = mapped_column(Date, nullable=False)
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    remarks: Mapped[str] = mapped_column(Text, nullable=False)

    items: Mapped[list["StockAdjustmentItem"]] = relationship(
        "StockAdjustmentItem",
        cascade="all, delete-orphan",
        order_by="StockAdjustmentItem.line_no",
        lazy="selectin",
    )


class StockAdjustmentItem(UUIDPkMixin, CompanyMixin, TimestampMixin, Base):
    """Single increase/decrease step of a stock adjustment."""
    __tablename__ = "stock_adjustment_items"

    adjustment_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("stock_adjustments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    line_no: Mapped[int] = mapped_column(Integer, nullable=False)
    adjustment_type: Mapped[str] = mapped_column(String(16), nullable=False)
    adjustment_quantity: Mapped[Decimal] = mapped_column(Numeric(15, 3), nullable=False)
    previous_quantity: Mapped[Decimal] = mapped_column(Numeric(15, 3), nullable=False)
    new_quantity: Mapped[Decimal] = mapped_column(Numeric(15, 3), nullable=False)
