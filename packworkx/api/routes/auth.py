from __future__ import annotations

import logging
from typing import Any, Dict
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from packworkx.core.deps import get_current_active_user
from packworkx.core.security import decode_token, verify_password
from packworkx.db.base import STATUS_ACTIVE
from packworkx.db.session import get_async_session
from packworkx.repositories.company import CompanyRepository
from packworkx.repositories.security import SecurityRepository
from packworkx.schemas.auth import Message, RefreshRequest, TokenPair, UserRead
from packworkx.services.company import issue_tokens, user_to_read

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


# PUBLIC_INTERFACE
@router.post(
    "/login",
    response_model=TokenPair,
    summary="Login",
    description="Authenticate using the OAuth2 password form (username is the email) and receive access/refresh tokens.",
)
async def login_for_tokens(
    form_data: OAuth2PasswordRequestForm = Depends(),
    session: AsyncSession = Depends(get_async_session),
) -> TokenPair:
    """Authenticate user and issue tokens carrying the user's company."""
    user = await SecurityRepository(session).get_user_by_email(form_data.username)
    if not user or not verify_password(form_data.password, user.hashed_password):
        logger.warning("Failed login for %s", form_data.username)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    if not user.is_active:
        raise HTTPException(status_code=400, detail="User is inactive")
    company = await CompanyRepository(session).get_company(user.company_id)
    if company is None or company.status != STATUS_ACTIVE:
        raise HTTPException(status_code=400, detail="Company is inactive")

    roles = await SecurityRepository(session, user.company_id).role_names_for_user(user.id)
    return issue_tokens(user, roles)


# PUBLIC_INTERFACE
@router.post(
    "/refresh",
    response_model=TokenPair,
    summary="Refresh access token",
    description="Issue a new token pair from a valid refresh token.",
)
async def refresh_token(
    payload: RefreshRequest,
    session: AsyncSession = Depends(get_async_session),
) -> TokenPair:
    """Validate refresh token and issue a new access token pair."""
    try:
        claims: Dict[str, Any] = decode_token(payload.refresh_token)
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid refresh token")

    if claims.get("type") != "refresh":
        raise HTTPException(status_code=401, detail="Invalid token type")
    try:
        user_id = UUID(str(claims.get("sub")))
        company_id = UUID(str(claims.get("company_id")))
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid refresh token")

    repo = SecurityRepository(session, company_id)
    user = await repo.get_user_by_id(user_id)
    if not user or not user.is_active:
        raise HTTPException(status_code=401, detail="User not found or inactive")

    return issue_tokens(user, await repo.role_names_for_user(user.id))


# PUBLIC_INTERFACE
@router.post(
    "/logout",
    response_model=Message,
    summary="Logout",
    description="Stateless logout. Clients should discard tokens. No server state maintained.",
)
async def logout() -> Message:
    """Acknowledge logout in stateless JWT systems."""
    return Message(message="Logged out")


# PUBLIC_INTERFACE
@router.get(
    "/me",
    response_model=UserRead,
    summary="Read current user",
    description="Return the current authenticated user and their roles.",
)
async def read_current_user(
    user=Depends(get_current_active_user),
    session: AsyncSession = Depends(get_async_session),
) -> UserRead:
    roles = await SecurityRepository(session, user.company_id).role_names_for_user(user.id)
    return user_to_read(user, roles)
