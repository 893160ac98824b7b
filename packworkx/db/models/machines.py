from __future__ import annotations

import uuid
from datetime import date
from typing import Optional

from sqlalchemy import Boolean, Date, ForeignKey, String, Text, UniqueConstraint, Uuid, false
from sqlalchemy.orm import Mapped, mapped_column, relationship

from packworkx.db.base import (
    AuditMixin,
    Base,
    CompanyMixin,
    JSONType,
    StatusMixin,
    TimestampMixin,
    UUIDPkMixin,
)

MACHINE_STATUSES = ("Active", "Inactive", "Under Maintenance")
FIELD_TYPES = ("text", "number", "date", "boolean", "select")


class Machine(UUIDPkMixin, CompanyMixin, AuditMixin, StatusMixin, TimestampMixin, Base):
    """Shop-floor machine (corrugator, printer, die-cutter, stitcher...)."""
    __tablename__ = "machines"

    machine_generate_id: Mapped[str] = mapped_column(String(64), nullable=False)
    machine_name: Mapped[str] = mapped_column(Text, nullable=False)
    machine_type: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    model_number: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    serial_number: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    manufacturer: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    purchase_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    installation_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    last_maintenance_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    next_maintenance_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    capacity: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    machine_status: Mapped[str] = mapped_column(String(24), nullable=False, default="Active")
    location: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    processes: Mapped[list["ProcessName"]] = relationship(
        "ProcessName",
        cascade="all, delete-orphan",
        order_by="ProcessName.process_name",
        lazy="selectin",
    )


class ProcessName(UUIDPkMixin, CompanyMixin, AuditMixin, StatusMixin, TimestampMixin, Base):
    """Process a machine can run, with its current parameter values."""
    __tablename__ = "process_names"
    __table_args__ = (
        UniqueConstraint("machine_id", "process_name", name="uq_process_names_machine_process"),
    )

    machine_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("machines.id", ondelete="CASCADE"), nullable=False, index=True
    )
    process_name: Mapped[str] = mapped_column(String(128), nullable=False)
    process_value: Mapped[dict] = mapped_column(JSONType, nullable=False, default=dict)

    fields: Mapped[list["ProcessField"]] = relationship(
        "ProcessField",
        cascade="all, delete-orphan",
        order_by="ProcessField.label",
        lazy="selectin",
    )


class ProcessField(UUIDPkMixin, CompanyMixin, AuditMixin, StatusMixin, TimestampMixin, Base):
    """Dynamic field definition constraining a process's values."""
    __tablename__ = "process_fields"
    __table_args__ = (
        UniqueConstraint("process_name_id", "label", name="uq_process_fields_process_label"),
    )

    process_name_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("process_names.id", ondelete="CASCADE"), nullable=False, index=True
    )
    label: Mapped[str] = mapped_column(String(128), nullable=False)
    field_type: Mapped[str] = mapped_column(String(16), nullable=False, default="text")
    options: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)
    required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())
