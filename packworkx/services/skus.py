from __future__ import annotations

import logging
from typing import List, Optional
from uuid import UUID

from packworkx.core.errors import BusinessRuleError, ConflictError, NotFoundError
from packworkx.db.base import STATUS_INACTIVE
from packworkx.db.models.clients import Client
from packworkx.db.models.sales import Sku
from packworkx.repositories.clients import ClientRepository
from packworkx.repositories.sales import SkuRepository
from packworkx.schemas.skus import SkuCreate, SkuUpdate
from packworkx.services.base import CompanyService, qty
from packworkx.services.id_generator import generate_id

logger = logging.getLogger(__name__)


class SkuService(CompanyService):
    """Box specifications kept per customer. Names are unique among active SKUs."""

    def __init__(self, session, company_id: UUID, user_id: Optional[UUID] = None) -> None:
        super().__init__(session, company_id, user_id)
        self.repo = SkuRepository(session, company_id)
        self.clients = ClientRepository(session, company_id)

    async def list_skus(self, **filters) -> List[Sku]:
        return await self.repo.list_skus(**filters)

    async def get_sku(self, sku_id: UUID) -> Sku:
        sku = await self.repo.get(sku_id)
        if sku is None:
            raise NotFoundError("SKU not found")
        return sku

    async def _customer(self, client_id: UUID) -> Client:
        client = await self.clients.get_active(client_id)
        if client is None or client.client_category == "supplier":
            raise BusinessRuleError("Customer not found or inactive", details={"client_id": str(client_id)})
        return client

    # PUBLIC_INTERFACE
    async def create_sku(self, payload: SkuCreate) -> Sku:
        """Register a box specification for an active customer."""
        async with self._transaction():
            if await self.repo.find_active_by_name(payload.sku_name):
                raise ConflictError("SKU name already exists", details={"sku_name": payload.sku_name})
            customer = await self._customer(payload.client_id)
            data = payload.model_dump()
            data["minimum_order_level"] = qty(data["minimum_order_level"])
            sku = Sku(
                company_id=self.company_id,
                sku_generate_id=await generate_id(self.session, self.company_id, "sku"),
                created_by=self.user_id,
                updated_by=self.user_id,
                **data,
            )
            await self.repo.add(sku)
            await self.repo.flush()
        logger.info("Created SKU %s (%s) for client %s", sku.sku_generate_id, sku.sku_name, customer.id)
        return sku

    async def update_sku(self, sku_id: UUID, payload: SkuUpdate) -> Sku:
        async with self._transaction():
            sku = await self.repo.get_active(sku_id, for_update=True)
            if sku is None:
                raise NotFoundError("SKU not found")
            values = payload.model_dump(exclude_unset=True)
            name = values.get("sku_name")
            if name and await self.repo.find_active_by_name(name, exclude_id=sku.id):
                raise ConflictError("SKU name already exists", details={"sku_name": name})
            for key, value in values.items():
                if value is None and key in ("sku_name", "unit", "minimum_order_level", "sku_values"):
                    continue
                setattr(sku, key, value)
            sku.updated_by = self.user_id
            await self.repo.flush()
        return sku

    async def delete_sku(self, sku_id: UUID) -> None:
        async with self._transaction():
            sku = await self.repo.get_active(sku_id, for_update=True)
            if sku is None:
                raise NotFoundError("SKU not found")
            sku.status = STATUS_INACTIVE
            sku.updated_by = self.user_id
            await self.repo.flush()
        logger.info("Deactivated SKU %s", sku.sku_generate_id)
