from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from packworkx.core.deps import get_current_active_user, require_roles
from packworkx.db.session import get_async_session
from packworkx.schemas.notes import (
    CreditNoteCreate,
    CreditNoteRead,
    CreditNoteUpdate,
    DebitNoteCreate,
    DebitNoteRead,
    DebitNoteUpdate,
)
from packworkx.services.notes import CreditNoteService, DebitNoteService

credit_router = APIRouter(
    prefix="/credit-notes",
    tags=["Credit Notes"],
    dependencies=[Depends(require_roles("accounts", "sales"))],
)
debit_router = APIRouter(
    prefix="/debit-notes",
    tags=["Debit Notes"],
    dependencies=[Depends(require_roles("accounts", "purchase"))],
)


def _credit_service(
    user=Depends(get_current_active_user),
    session: AsyncSession = Depends(get_async_session),
) -> CreditNoteService:
    return CreditNoteService(session, user.company_id, user.id)


def _debit_service(
    user=Depends(get_current_active_user),
    session: AsyncSession = Depends(get_async_session),
) -> DebitNoteService:
    return DebitNoteService(session, user.company_id, user.id)


# PUBLIC_INTERFACE
@credit_router.get("", response_model=List[CreditNoteRead], summary="List credit notes")
async def list_credit_notes(
    service: CreditNoteService = Depends(_credit_service),
    client_id: Optional[UUID] = Query(None),
    search: Optional[str] = Query(None, description="Note number (substring)"),
    status: Optional[str] = Query(None, description="active (default) | inactive | all"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[CreditNoteRead]:
    rows = await service.list_notes(client_id=client_id, search=search, status=status, limit=limit, offset=offset)
    return [CreditNoteRead.model_validate(x) for x in rows]


# PUBLIC_INTERFACE
@credit_router.post(
    "",
    response_model=CreditNoteRead,
    status_code=status.HTTP_201_CREATED,
    summary="Issue credit note",
    description="Adds the note total to the client's credit balance.",
)
async def create_credit_note(
    payload: CreditNoteCreate,
    service: CreditNoteService = Depends(_credit_service),
) -> CreditNoteRead:
    return CreditNoteRead.model_validate(await service.create_note(payload))


# PUBLIC_INTERFACE
@credit_router.get("/{note_id}", response_model=CreditNoteRead, summary="Get credit note")
async def get_credit_note(
    note_id: UUID = Path(...),
    service: CreditNoteService = Depends(_credit_service),
) -> CreditNoteRead:
    return CreditNoteRead.model_validate(await service.get_note(note_id))


# PUBLIC_INTERFACE
@credit_router.put(
    "/{note_id}",
    response_model=CreditNoteRead,
    summary="Update credit note",
    description="The change in total is applied to the client's credit balance.",
)
async def update_credit_note(
    payload: CreditNoteUpdate,
    note_id: UUID = Path(...),
    service: CreditNoteService = Depends(_credit_service),
) -> CreditNoteRead:
    return CreditNoteRead.model_validate(await service.update_note(note_id, payload))


# PUBLIC_INTERFACE
@credit_router.delete("/{note_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Cancel credit note")
async def delete_credit_note(
    note_id: UUID = Path(...),
    service: CreditNoteService = Depends(_credit_service),
) -> None:
    await service.delete_note(note_id)


# PUBLIC_INTERFACE
@debit_router.get("", response_model=List[DebitNoteRead], summary="List debit notes")
async def list_debit_notes(
    service: DebitNoteService = Depends(_debit_service),
    supplier_id: Optional[UUID] = Query(None),
    search: Optional[str] = Query(None, description="Note number (substring)"),
    status: Optional[str] = Query(None, description="active (default) | inactive | all"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[DebitNoteRead]:
    rows = await service.list_notes(supplier_id=supplier_id, search=search, status=status, limit=limit, offset=offset)
    return [DebitNoteRead.model_validate(x) for x in rows]


# PUBLIC_INTERFACE
@debit_router.post(
    "",
    response_model=DebitNoteRead,
    status_code=status.HTTP_201_CREATED,
    summary="Issue debit note",
    description="Adds the note total to the supplier's debit balance, spendable on purchase orders.",
)
async def create_debit_note(
    payload: DebitNoteCreate,
    service: DebitNoteService = Depends(_debit_service),
) -> DebitNoteRead:
    return DebitNoteRead.model_validate(await service.create_note(payload))


# PUBLIC_INTERFACE
@debit_router.get("/{note_id}", response_model=DebitNoteRead, summary="Get debit note")
async def get_debit_note(
    note_id: UUID = Path(...),
    service: DebitNoteService = Depends(_debit_service),
) -> DebitNoteRead:
    return DebitNoteRead.model_validate(await service.get_note(note_id))


# PUBLIC_INTERFACE
@debit_router.put("/{note_id}", response_model=DebitNoteRead, summary="Update debit note")
async def update_debit_note(
    payload: DebitNoteUpdate,
    note_id: UUID = Path(...),
    service: DebitNoteService = Depends(_debit_service),
) -> DebitNoteRead:
    return DebitNoteRead.model_validate(await service.update_note(note_id, payload))


# PUBLIC_INTERFACE
@debit_router.delete("/{note_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Cancel debit note")
async def delete_debit_note(
    note_id: UUID = Path(...),
    service: DebitNoteService = Depends(_debit_service),
) -> None:
    await service.delete_note(note_id)
