from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from packworkx.core.deps import ADMIN_ROLE, get_current_active_user, require_roles
from packworkx.db.session import get_async_session
from packworkx.schemas.company import (
    CompanyRead,
    CompanyRegister,
    CompanyUpdate,
    InvoiceSettingsRead,
    InvoiceSettingsUpdate,
    RegistrationResult,
)
from packworkx.services.company import CompanyProfileService, RegistrationService

router = APIRouter(prefix="/companies", tags=["Companies"])


def _profile_service(
    user=Depends(get_current_active_user),
    session: AsyncSession = Depends(get_async_session),
) -> CompanyProfileService:
    return CompanyProfileService(session, user.company_id, user.id)


# PUBLIC_INTERFACE
@router.post(
    "/register",
    response_model=RegistrationResult,
    status_code=status.HTTP_201_CREATED,
    summary="Register company",
    description=(
        "Public sign-up. Creates the company, default numbering settings and roles, and an admin user. "
        "Returns the created records and a token pair for the admin."
    ),
)
async def register_company(
    payload: CompanyRegister,
    session: AsyncSession = Depends(get_async_session),
) -> RegistrationResult:
    return await RegistrationService(session).register(payload)


# PUBLIC_INTERFACE
@router.get("/me", response_model=CompanyRead, summary="Get my company")
async def get_my_company(service: CompanyProfileService = Depends(_profile_service)) -> CompanyRead:
    return CompanyRead.model_validate(await service.get_company())


# PUBLIC_INTERFACE
@router.put(
    "/me",
    response_model=CompanyRead,
    summary="Update my company",
    dependencies=[Depends(require_roles(ADMIN_ROLE))],
)
async def update_my_company(
    payload: CompanyUpdate,
    service: CompanyProfileService = Depends(_profile_service),
) -> CompanyRead:
    return CompanyRead.model_validate(await service.update_company(payload))


# PUBLIC_INTERFACE
@router.get(
    "/me/invoice-settings",
    response_model=InvoiceSettingsRead,
    summary="Get document number formats",
    description="Effective prefix/separator/digits per document key, with defaults filled in.",
)
async def get_invoice_settings(service: CompanyProfileService = Depends(_profile_service)) -> InvoiceSettingsRead:
    return await service.get_invoice_settings()


# PUBLIC_INTERFACE
@router.put(
    "/me/invoice-settings",
    response_model=InvoiceSettingsRead,
    summary="Update document number formats",
    description="Merge per-key overrides into the stored number formats.",
    dependencies=[Depends(require_roles(ADMIN_ROLE))],
)
async def update_invoice_settings(
    payload: InvoiceSettingsUpdate,
    service: CompanyProfileService = Depends(_profile_service),
) -> InvoiceSettingsRead:
    return await service.update_invoice_settings(payload)
