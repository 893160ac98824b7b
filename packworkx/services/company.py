from __future__ import annotations

import logging

from packworkx.core.errors import ConflictError, NotFoundError
from packworkx.core.security import create_access_token, create_refresh_token, get_password_hash
from packworkx.db.models.company import Company, InvoiceSetting
from packworkx.repositories.company import CompanyRepository
from packworkx.repositories.security import SecurityRepository
from packworkx.schemas.auth import TokenPair, UserRead
from packworkx.schemas.company import (
    CompanyRead,
    CompanyRegister,
    CompanyUpdate,
    InvoiceSettingsRead,
    InvoiceSettingsUpdate,
    NumberFormat,
    RegistrationResult,
)
from packworkx.services.base import BaseService, CompanyService
from packworkx.services.id_generator import DEFAULT_PREFIXES, default_number_formats, resolve_format

logger = logging.getLogger(__name__)

DEFAULT_ROLES = {
    "admin": "Company administrator",
    "purchase": "Purchase orders, supplier payments and purchase returns",
    "store": "Goods receipt, inventory and stock adjustments",
    "sales": "Clients, SKUs, work orders and invoices",
    "production": "Machines and processes",
    "accounts": "Payments, credit and debit notes",
}


def user_to_read(user, roles) -> UserRead:
    return UserRead(
        id=user.id,
        company_id=user.company_id,
        email=user.email,
        full_name=user.full_name,
        phone=user.phone,
        is_active=user.is_active,
        is_superadmin=user.is_superadmin,
        created_at=user.created_at,
        updated_at=user.updated_at,
        roles=list(roles),
    )


def issue_tokens(user, roles) -> TokenPair:
    access = create_access_token(subject=str(user.id), company_id=str(user.company_id), roles=list(roles))
    refresh = create_refresh_token(subject=str(user.id), company_id=str(user.company_id))
    return TokenPair(access_token=access, refresh_token=refresh)


class RegistrationService(BaseService):
    """Public sign-up flow creating a company with its first administrator."""

    # PUBLIC_INTERFACE
    async def register(self, payload: CompanyRegister) -> RegistrationResult:
        """
        Create a company, its default numbering settings and roles, and an admin user.

        Parameters:
            payload: CompanyRegister request
        Returns:
            RegistrationResult with company, admin user and a token pair.
        Raises:
            ConflictError: company email or admin email already registered.
        """
        company_repo = CompanyRepository(self.session)
        if await company_repo.get_company_by_email(payload.company_email.lower()):
            raise ConflictError("A company with this email is already registered")
        if await SecurityRepository(self.session).get_user_by_email(payload.admin_email):
            raise ConflictError("A user with this email already exists")

        try:
            company = Company(
                company_name=payload.company_name,
                company_email=payload.company_email.lower(),
                phone=payload.phone,
                address=payload.address,
                website=payload.website,
                gst_number=payload.gst_number,
                timezone=payload.timezone,
                currency=payload.currency,
            )
            await company_repo.add(company)
            await company_repo.flush()
            await company_repo.add(InvoiceSetting(company_id=company.id, number_formats=default_number_formats()))

            repo = SecurityRepository(self.session, company.id)
            roles = {}
            for name, description in DEFAULT_ROLES.items():
                roles[name] = await repo.create_role(name, description)
            user = await repo.create_user(
                email=payload.admin_email,
                full_name=payload.admin_full_name,
                hashed_password=get_password_hash(payload.admin_password),
            )
            await repo.assign_role_to_user(user.id, roles["admin"].id)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info("Registered company %s (%s) with admin %s", company.id, company.company_name, user.email)
        role_names = ["admin"]
        return RegistrationResult(
            company=CompanyRead.model_validate(company),
            user=user_to_read(user, role_names),
            tokens=issue_tokens(user, role_names),
        )


class CompanyProfileService(CompanyService):
    """Profile and document numbering settings of the caller's company."""

    async def get_company(self) -> Company:
        company = await CompanyRepository(self.session).get_company(self.company_id)
        if company is None:
            raise NotFoundError("Company not found")
        return company

    async def update_company(self, payload: CompanyUpdate) -> Company:
        async with self._transaction():
            company = await self.get_company()
            for key, value in payload.model_dump(exclude_unset=True).items():
                if value is not None:
                    setattr(company, key, value)
            await self.session.flush()
        logger.info("Updated company profile %s", company.id)
        return company

    async def get_invoice_settings(self) -> InvoiceSettingsRead:
        setting = await CompanyRepository(self.session).get_invoice_setting(self.company_id)
        return self._settings_read(setting.number_formats if setting else {})

    async def update_invoice_settings(self, payload: InvoiceSettingsUpdate) -> InvoiceSettingsRead:
        """Merge per-key overrides into the stored formats; unspecified parts keep their value."""
        repo = CompanyRepository(self.session)
        async with self._transaction():
            setting = await repo.get_invoice_setting(self.company_id)
            if setting is None:
                setting = InvoiceSetting(company_id=self.company_id, number_formats=default_number_formats())
                await repo.add(setting)
            merged = {k: dict(v) for k, v in (setting.number_formats or {}).items()}
            for key, override in payload.number_formats.items():
                current = resolve_format(key, merged.get(key))
                current.update(override.model_dump(exclude_none=True))
                merged[key] = current
            # reassign so the JSON column is marked dirty
            setting.number_formats = merged
            await repo.flush()
        logger.info("Updated number formats for keys %s", sorted(payload.number_formats))
        return self._settings_read(merged)

    @staticmethod
    def _settings_read(stored: dict) -> InvoiceSettingsRead:
        keys = set(DEFAULT_PREFIXES) | set(stored or {})
        return InvoiceSettingsRead(
            number_formats={k: NumberFormat(**resolve_format(k, (stored or {}).get(k))) for k in sorted(keys)}
        )
