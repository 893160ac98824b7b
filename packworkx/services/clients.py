from __future__ import annotations

import logging
from typing import List, Optional
from uuid import UUID

from packworkx.core.errors import ConflictError, NotFoundError
from packworkx.db.base import STATUS_INACTIVE
from packworkx.db.models.clients import Client
from packworkx.repositories.clients import ClientRepository
from packworkx.schemas.clients import ClientCreate, ClientUpdate, WalletHistoryRead, WalletRead
from packworkx.services.base import CompanyService, money
from packworkx.services.id_generator import generate_id

logger = logging.getLogger(__name__)

_REQUIRED_FIELDS = {
    "customer_type",
    "client_category",
    "display_name",
    "currency",
    "opening_balance",
    "billing_address",
    "shipping_address",
}


class ClientService(CompanyService):
    """Customers and suppliers of the company, and their wallets."""

    def __init__(self, session, company_id: UUID, user_id: Optional[UUID] = None) -> None:
        super().__init__(session, company_id, user_id)
        self.repo = ClientRepository(session, company_id)

    async def list_clients(self, **filters) -> List[Client]:
        return await self.repo.list_clients(**filters)

    async def get_client(self, client_id: UUID) -> Client:
        client = await self.repo.get(client_id)
        if client is None:
            raise NotFoundError("Client not found")
        return client

    async def _ensure_unique_email(self, email: Optional[str], exclude_id: Optional[UUID] = None) -> None:
        if email and await self.repo.find_active_by_email(email, exclude_id=exclude_id):
            raise ConflictError("A client with this email already exists", details={"email": email})

    # PUBLIC_INTERFACE
    async def create_client(self, payload: ClientCreate) -> Client:
        """Create a client with a generated reference id. Wallets start at zero."""
        async with self._transaction():
            await self._ensure_unique_email(payload.email)
            data = payload.model_dump()
            data["opening_balance"] = money(data["opening_balance"])
            client = Client(
                company_id=self.company_id,
                client_ref_id=await generate_id(self.session, self.company_id, "client"),
                created_by=self.user_id,
                updated_by=self.user_id,
                **data,
            )
            await self.repo.add(client)
            await self.repo.flush()
        logger.info("Created client %s (%s)", client.client_ref_id, client.display_name)
        return client

    async def update_client(self, client_id: UUID, payload: ClientUpdate) -> Client:
        async with self._transaction():
            client = await self.get_client(client_id)
            values = payload.model_dump(exclude_unset=True)
            if values.get("email"):
                await self._ensure_unique_email(values["email"], exclude_id=client.id)
            for key, value in values.items():
                if value is None and key in _REQUIRED_FIELDS:
                    continue
                setattr(client, key, money(value) if key == "opening_balance" else value)
            client.updated_by = self.user_id
            await self.repo.flush()
        return client

    async def delete_client(self, client_id: UUID) -> None:
        async with self._transaction():
            client = await self.get_client(client_id)
            client.status = STATUS_INACTIVE
            client.updated_by = self.user_id
            await self.repo.flush()
        logger.info("Deactivated client %s", client_id)

    async def get_wallet(self, client_id: UUID, *, limit: int = 100, offset: int = 0) -> WalletRead:
        client = await self.get_client(client_id)
        history = await self.repo.list_wallet_history(client.id, limit=limit, offset=offset)
        return WalletRead(
            client_id=client.id,
            credit_balance=float(client.credit_balance),
            debit_balance=float(client.debit_balance),
            history=[WalletHistoryRead.model_validate(h) for h in history],
        )
