from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from packworkx.core.deps import get_current_active_user, require_roles
from packworkx.db.session import get_async_session
from packworkx.schemas.clients import ClientCreate, ClientRead, ClientUpdate, WalletRead
from packworkx.services.clients import ClientService

router = APIRouter(prefix="/clients", tags=["Clients"])

# Clients serve as customers (sales) and suppliers (purchase)
_VIEW = ("sales", "purchase", "accounts", "store")
_MANAGE = ("sales", "purchase")


def _service(
    user=Depends(get_current_active_user),
    session: AsyncSession = Depends(get_async_session),
) -> ClientService:
    return ClientService(session, user.company_id, user.id)


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[ClientRead],
    summary="List clients",
    description="Customers and suppliers ordered by display name. `client_category` also matches clients marked 'both'.",
    dependencies=[Depends(require_roles(*_VIEW))],
)
async def list_clients(
    service: ClientService = Depends(_service),
    search: Optional[str] = Query(None, description="Display name, company name, email or reference id"),
    client_category: Optional[str] = Query(None, description="customer | supplier | both"),
    status: Optional[str] = Query(None, description="active (default) | inactive | all"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[ClientRead]:
    rows = await service.list_clients(
        search=search, client_category=client_category, status=status, limit=limit, offset=offset
    )
    return [ClientRead.model_validate(x) for x in rows]


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=ClientRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create client",
    dependencies=[Depends(require_roles(*_MANAGE))],
)
async def create_client(payload: ClientCreate, service: ClientService = Depends(_service)) -> ClientRead:
    return ClientRead.model_validate(await service.create_client(payload))


# PUBLIC_INTERFACE
@router.get(
    "/{client_id}",
    response_model=ClientRead,
    summary="Get client",
    dependencies=[Depends(require_roles(*_VIEW))],
)
async def get_client(client_id: UUID = Path(...), service: ClientService = Depends(_service)) -> ClientRead:
    return ClientRead.model_validate(await service.get_client(client_id))


# PUBLIC_INTERFACE
@router.put(
    "/{client_id}",
    response_model=ClientRead,
    summary="Update client",
    dependencies=[Depends(require_roles(*_MANAGE))],
)
async def update_client(
    payload: ClientUpdate,
    client_id: UUID = Path(...),
    service: ClientService = Depends(_service),
) -> ClientRead:
    return ClientRead.model_validate(await service.update_client(client_id, payload))


# PUBLIC_INTERFACE
@router.delete(
    "/{client_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Deactivate client",
    dependencies=[Depends(require_roles(*_MANAGE))],
)
async def delete_client(client_id: UUID = Path(...), service: ClientService = Depends(_service)) -> None:
    await service.delete_client(client_id)


# PUBLIC_INTERFACE
@router.get(
    "/{client_id}/wallet",
    response_model=WalletRead,
    summary="Client wallet",
    description="Credit and debit balances with the wallet history, newest first.",
    dependencies=[Depends(require_roles(*_VIEW))],
)
async def get_wallet(
    client_id: UUID = Path(...),
    service: ClientService = Depends(_service),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> WalletRead:
    return await service.get_wallet(client_id, limit=limit, offset=offset)
