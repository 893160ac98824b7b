from __future__ import annotations

import logging
from typing import Dict, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from packworkx.repositories.company import CompanyRepository

logger = logging.getLogger(__name__)

DEFAULT_SEPARATOR = "-"
DEFAULT_DIGITS = 5

DEFAULT_PREFIXES: Dict[str, str] = {
    "client": "CL",
    "item": "ITM",
    "purchase": "PO",
    "purchase_order_payment": "PP",
    "grn": "GRN",
    "inventory": "INV",
    "stock_adjustments": "SA",
    "work_invoice": "WI",
    "credit_note": "CN",
    "debit_note": "DN",
    "machine": "MC",
    "purchase_return": "PR",
    "sku": "SKU",
    "work_order": "WO",
}


def default_number_formats() -> Dict[str, dict]:
    """Built-in numbering formats seeded into every new company."""
    return {
        key: {"prefix": prefix, "separator": DEFAULT_SEPARATOR, "digits": DEFAULT_DIGITS}
        for key, prefix in DEFAULT_PREFIXES.items()
    }


def resolve_format(key: str, stored: Optional[dict]) -> dict:
    """Merge a stored per-key format over the built-in default for that key."""
    fmt = {
        "prefix": DEFAULT_PREFIXES.get(key, key.upper()[:4]),
        "separator": DEFAULT_SEPARATOR,
        "digits": DEFAULT_DIGITS,
    }
    for part, value in (stored or {}).items():
        if part in fmt and value is not None:
            fmt[part] = value
    return fmt


def format_number(fmt: dict, value: int) -> str:
    return f"{fmt['prefix']}{fmt['separator']}{str(value).zfill(int(fmt['digits']))}"


# PUBLIC_INTERFACE
async def generate_id(session: AsyncSession, company_id: UUID, key: str) -> str:
    """
    Issue the next document number for (company, key).

    The increment is a single upsert, so concurrent requests (including the
    first ever request for a key) never receive the same number and never trip
    the unique sequence constraint. If the caller rolls back, the increment
    rolls back with it.

    Parameters:
        session: active session; the caller owns commit/rollback
        company_id: company the number belongs to
        key: document key such as "purchase" or "grn"
    Returns:
        Formatted number, e.g. "PO-00001".
    """
    repo = CompanyRepository(session)
    setting = await repo.get_invoice_setting(company_id)
    stored = (setting.number_formats or {}).get(key) if setting else None
    fmt = resolve_format(key, stored)

    value = await repo.next_sequence_value(company_id, key)

    number = format_number(fmt, value)
    logger.debug("Issued %s number %s", key, number)
    return number
