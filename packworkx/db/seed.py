"""
Database seeding for a demo company.

Seeds:
- Demo company (PackWorkX Demo Boards) with default number formats and roles
- Admin user admin@packworkx-demo.com / ChangeMe123
- Sample items (kraft reel, starch glue, stitching pins, 3-ply carton)
- One supplier and one customer

Re-running is safe: existing records are found by email or item code and left unchanged.

Usage:
  python -m packworkx.db.run_migrations upgrade head
  python -m packworkx.db.seed
"""

from __future__ import annotations

import asyncio
import logging
from decimal import Decimal
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from packworkx.db.session import get_session_maker
from packworkx.repositories.clients import ClientRepository
from packworkx.repositories.company import CompanyRepository
from packworkx.repositories.items import ItemRepository
from packworkx.schemas.clients import ClientCreate
from packworkx.schemas.company import CompanyRegister
from packworkx.schemas.items import ItemCreate
from packworkx.services.clients import ClientService
from packworkx.services.company import RegistrationService
from packworkx.services.items import ItemService

logger = logging.getLogger(__name__)

DEMO_COMPANY_EMAIL = "office@packworkx-demo.com"
DEMO_ADMIN_EMAIL = "admin@packworkx-demo.com"
DEMO_ADMIN_PASSWORD = "ChangeMe123"

DEMO_ITEMS = [
    ItemCreate(
        item_code="RM-KRAFT-120",
        item_name="Kraft paper reel 120 GSM",
        uom="KG",
        item_type="reels",
        hsn_code="4804",
        min_stock_level=Decimal("500"),
        reorder_level=Decimal("1000"),
        cgst=Decimal("6"),
        sgst=Decimal("6"),
        standard_cost=Decimal("38.50"),
    ),
    ItemCreate(
        item_code="RM-GLUE-STARCH",
        item_name="Corrugation starch glue",
        uom="KG",
        item_type="glues",
        min_stock_level=Decimal("50"),
        reorder_level=Decimal("100"),
        cgst=Decimal("9"),
        sgst=Decimal("9"),
        standard_cost=Decimal("42.00"),
    ),
    ItemCreate(
        item_code="RM-PIN-STITCH",
        item_name="Box stitching pins",
        uom="BOX",
        item_type="pins",
        cgst=Decimal("9"),
        sgst=Decimal("9"),
        standard_cost=Decimal("120.00"),
    ),
    ItemCreate(
        item_code="FG-CTN-3PLY",
        item_name="3-ply corrugated carton 12x10x8",
        uom="NOS",
        item_type="finished-goods",
        cgst=Decimal("6"),
        sgst=Decimal("6"),
    ),
]

DEMO_CLIENTS = [
    ClientCreate(
        display_name="Shree Paper Mills",
        company_name="Shree Paper Mills Pvt Ltd",
        client_category="supplier",
        email="sales@shreepapermills.com",
        gst_number="24AAACS1234F1Z5",
    ),
    ClientCreate(
        display_name="FreshFoods Packaging Desk",
        company_name="FreshFoods India Ltd",
        client_category="customer",
        email="procurement@freshfoods-india.com",
    ),
]


# PUBLIC_INTERFACE
async def seed_all() -> None:
    """
    Seed the demo company.

    This function:
      - Registers the demo company and its admin unless the company email exists
      - Creates the sample items and clients that are missing
    """
    async with get_session_maker()() as session:
        company_id, user_id = await _ensure_company(session)
        await _seed_items(session, company_id, user_id)
        await _seed_clients(session, company_id, user_id)


async def _ensure_company(session: AsyncSession) -> tuple[UUID, UUID | None]:
    company = await CompanyRepository(session).get_company_by_email(DEMO_COMPANY_EMAIL)
    if company is not None:
        logger.info("Demo company already present (%s)", company.id)
        return company.id, None

    result = await RegistrationService(session).register(
        CompanyRegister(
            company_name="PackWorkX Demo Boards",
            company_email=DEMO_COMPANY_EMAIL,
            phone="+91 79 4000 1234",
            address="Plot 14, GIDC Phase II, Ahmedabad",
            admin_email=DEMO_ADMIN_EMAIL,
            admin_password=DEMO_ADMIN_PASSWORD,
            admin_full_name="Demo Admin",
        )
    )
    return result.company.id, result.user.id


async def _seed_items(session: AsyncSession, company_id: UUID, user_id: UUID | None) -> None:
    repo = ItemRepository(session, company_id)
    service = ItemService(session, company_id, user_id)
    for payload in DEMO_ITEMS:
        if await repo.find_active_by_code(payload.item_code):
            continue
        await service.create_item(payload)


async def _seed_clients(session: AsyncSession, company_id: UUID, user_id: UUID | None) -> None:
    repo = ClientRepository(session, company_id)
    service = ClientService(session, company_id, user_id)
    for payload in DEMO_CLIENTS:
        if payload.email and await repo.find_active_by_email(payload.email):
            continue
        await service.create_client(payload)


# PUBLIC_INTERFACE
def main() -> None:
    """Entrypoint to run the asynchronous seeding."""
    asyncio.run(seed_all())


if __name__ == "__main__":
    main()
