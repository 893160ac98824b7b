"""
Domain exceptions raised by services and translated to the standard error
envelope by the handlers registered in packworkx.api.main.
"""

from __future__ import annotations

from typing import Any, Optional


class PackWorkXError(Exception):
    """Base exception for business errors."""

    status_code = 400
    default_code = "packworkx_error"
    default_message = "An error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[str] = None,
        details: Any = None,
    ) -> None:
        self.message = message or self.default_message
        self.code = code or self.default_code
        self.details = details
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict:
        """Convert the exception to a dictionary."""
        data = {"type": self.code, "message": self.message}
        if self.details is not None:
            data["details"] = self.details
        return data


class NotFoundError(PackWorkXError):
    """Raised when a company-scoped record does not exist."""

    status_code = 404
    default_code = "not_found"
    default_message = "Record not found"


class ConflictError(PackWorkXError):
    """Raised when an operation would break a stock, payment or uniqueness invariant."""

    status_code = 409
    default_code = "conflict"
    default_message = "Operation conflicts with current state"


class BusinessRuleError(PackWorkXError):
    """Raised for invalid references, inactive records and malformed business input."""

    status_code = 400
    default_code = "business_rule"
    default_message = "Request violates a business rule"
