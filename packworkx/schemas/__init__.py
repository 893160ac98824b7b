"""
Public Pydantic schemas used by FastAPI routes, services, and tests.

Schemas are grouped by domain module (clients, procurement, grn, invoices, etc.)
and also include common reusable models such as the error envelope.
"""

from .common import ErrorResponse, MessageResponse  # noqa: F401
