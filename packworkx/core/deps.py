from __future__ import annotations

import logging
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from packworkx.core.logging import company_id_var
from packworkx.core.security import decode_token
from packworkx.db.base import STATUS_ACTIVE
from packworkx.db.session import get_async_session
from packworkx.repositories.company import CompanyRepository
from packworkx.repositories.security import SecurityRepository

logger = logging.getLogger(__name__)

# OAuth2 bearer (used by docs); login endpoint path referenced here
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")

ADMIN_ROLE = "admin"


def _parse_uuid(value) -> UUID:
    try:
        return UUID(str(value))
    except (TypeError, ValueError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")


# PUBLIC_INTERFACE
async def get_current_user(
    token: str = Depends(oauth2_scheme),
    session: AsyncSession = Depends(get_async_session),
):
    """
    Resolve and return the current user from the Authorization bearer token.

    The token's company_id claim scopes the lookup, so a token can only ever
    resolve a user of its own company. The company must be active.
    """
    try:
        payload = decode_token(token)
    except JWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    if payload.get("type") != "access":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token type")

    user_id = payload.get("sub")
    company_claim = payload.get("company_id")
    if not user_id or not company_claim:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    company_id = _parse_uuid(company_claim)

    repo = SecurityRepository(session, company_id)
    user = await repo.get_user_by_id(_parse_uuid(user_id))
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")

    company = await CompanyRepository(session).get_company(company_id)
    if company is None or company.status != STATUS_ACTIVE:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Company is inactive")

    company_id_var.set(str(company_id))
    return user


# PUBLIC_INTERFACE
async def get_current_active_user(user=Depends(get_current_user)):
    """Ensure user is active."""
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Inactive user")
    return user


# PUBLIC_INTERFACE
async def get_current_company_id(user=Depends(get_current_active_user)) -> UUID:
    """Company id of the authenticated user; every repository is scoped by it."""
    return user.company_id


# PUBLIC_INTERFACE
def require_roles(*required: str):
    """
    Create a dependency that requires the current user to hold one of the
    specified roles. Holders of the admin role pass every check.
    """

    async def _dep(
        user=Depends(get_current_active_user),
        session: AsyncSession = Depends(get_async_session),
    ):
        repo = SecurityRepository(session, user.company_id)
        role_set = set(await repo.role_names_for_user(user.id))
        if ADMIN_ROLE in role_set or user.is_superadmin:
            return True
        if role_set.isdisjoint(set(required)):
            logger.warning("Role check failed for user %s; required one of %s", user.id, sorted(required))
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient role")
        return True

    return _dep
