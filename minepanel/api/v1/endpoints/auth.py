"""
Auth endpoints: login, token refresh and logout.

Tokens are stateless: logout only tells the client to discard them.
"""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from minepanel.api.v1.deps import get_db, get_token_issuer, require_viewer
from minepanel.core.config import settings
from minepanel.core.exceptions import InvalidToken, Unauthenticated
from minepanel.core.limiter import limiter
from minepanel.core.security import TokenIssuer, verify_password
from minepanel.models.user import User
from minepanel.schemas.base import OkResponse
from minepanel.schemas.token import (Identity, LoginRequest, LoginResponse,
                                     RefreshRequest, Token)
from minepanel.services.audit import record_audit

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


def _identity_of(user: User) -> Identity:
    return Identity(id=user.id, username=user.username, role=user.role)


@router.post("/login", response_model=LoginResponse)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> LoginResponse:
    """Authenticate with username/password and receive a token pair."""
    result = await db.execute(select(User).where(User.username == body.username))
    user = result.scalar_one_or_none()

    if user is None or not verify_password(body.password, user.hashed_password):
        logger.warning("Failed login for %r", body.username)
        await record_audit(db, request, "LOGIN_FAILED", body.username)
        raise Unauthenticated("Invalid credentials")

    identity = _identity_of(user)
    pair = issuer.issue(identity)

    await record_audit(db, request, "LOGIN", user.username, actor=identity)
    logger.info("User %s logged in", user.username)

    return LoginResponse(
        access_token=pair.access_token,
        refresh_token=pair.refresh_token,
        user=identity,
    )


@router.post("/refresh", response_model=Token)
async def refresh(
    body: RefreshRequest,
    db: AsyncSession = Depends(get_db),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> Token:
    """Exchange a refresh token for a new pair built from the current user record."""
    claims = issuer.verify_refresh(body.refresh_token)
    if claims is None:
        raise InvalidToken("Invalid refresh token")

    # Role or account may have changed since the refresh token was minted
    user = await db.get(User, claims.id)
    if user is None:
        raise InvalidToken("User no longer exists")

    pair = issuer.issue(_identity_of(user))
    return Token(access_token=pair.access_token, refresh_token=pair.refresh_token)


@router.post("/logout", response_model=OkResponse)
async def logout() -> OkResponse:
    return OkResponse(message="Logged out. Discard your tokens.")


@router.get("/me", response_model=Identity)
async def read_current_identity(
    identity: Identity = Depends(require_viewer),
) -> Identity:
    """Return the identity carried by the access token."""
    return identity
