from __future__ import annotations

from pydantic import BaseModel, Field


class DashboardSummary(BaseModel):
    """Headline counts for the company dashboard."""
    open_purchase_orders: int = Field(..., description="Active POs not yet approved or disapproved")
    awaiting_receipt: int = Field(..., description="Approved POs not fully received")
    outstanding_receivables: float = Field(..., description="Sum of active invoice balances")
    unpaid_invoices: int = Field(...)
    low_stock_items: int = Field(...)
    active_machines: int = Field(...)
