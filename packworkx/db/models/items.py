from __future__ import annotations

from decimal import Decimal
from typing import Optional

from sqlalchemy import Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from packworkx.db.base import (
    AuditMixin,
    Base,
    CompanyMixin,
    StatusMixin,
    TimestampMixin,
    UUIDPkMixin,
    active_unique_index,
)

ITEM_TYPES = (
    "reels",
    "glues",
    "pins",
    "finished-goods",
    "semi-finished-goods",
    "raw-materials",
)


class Item(UUIDPkMixin, CompanyMixin, AuditMixin, StatusMixin, TimestampMixin, Base):
    """Item master row: raw materials, consumables and finished boxes."""
    __tablename__ = "items"

    item_generate_id: Mapped[str] = mapped_column(String(64), nullable=False)
    item_code: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    item_name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    hsn_code: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)
    uom: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)
    category: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    item_type: Mapped[str] = mapped_column(String(32), nullable=False, default="raw-materials")
    min_stock_level: Mapped[Decimal] = mapped_column(Numeric(15, 3), nullable=False, default=Decimal("0"))
    reorder_level: Mapped[Decimal] = mapped_column(Numeric(15, 3), nullable=False, default=Decimal("0"))
    cgst: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False, default=Decimal("0"))
    sgst: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False, default=Decimal("0"))
    standard_cost: Mapped[Optional[Decimal]] = mapped_column(Numeric(15, 2), nullable=True)


active_unique_index("uq_items_company_item_code_active", Item.company_id, Item.item_code)
