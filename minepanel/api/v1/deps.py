"""
FastAPI dependencies for auth guards, the token issuer, the plugin client and DB sessions.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from minepanel.core.exceptions import Forbidden, InvalidToken, Unauthenticated
from minepanel.core.roles import Role, meets_min_role
from minepanel.core.security import TokenIssuer
from minepanel.db.session import async_session_factory
from minepanel.schemas.token import Identity
from minepanel.services.plugin_proxy import PluginClient

# auto_error=False so a missing header maps to our own Unauthenticated error
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


# ── Database session ────────────────────────────────────────────────
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


# ── Collaborators wired in create_app() ─────────────────────────────
def get_token_issuer(request: Request) -> TokenIssuer:
    return request.app.state.token_issuer


def get_plugin_client(request: Request) -> PluginClient:
    return request.app.state.plugin_client


# ── Auth dependencies ───────────────────────────────────────────────
async def authenticate(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> Identity:
    """Verify the bearer access token and bind its identity to the request."""
    if not token:
        raise Unauthenticated("Missing or invalid Authorization header")

    identity = issuer.verify_access(token)
    if identity is None:
        raise InvalidToken("Invalid or expired token")

    request.state.identity = identity
    return identity


class RequireRole:
    """Dependency that admits only identities holding at least ``min_role``."""

    def __init__(self, min_role: Role) -> None:
        self.min_role = min_role

    async def __call__(
        self,
        request: Request,
        _identity: Identity = Depends(authenticate),
    ) -> Identity:
        identity: Identity | None = getattr(request.state, "identity", None)
        if identity is None:
            raise Unauthenticated("Not authenticated")
        if not meets_min_role(identity.role, self.min_role):
            raise Forbidden("Insufficient permissions")
        return identity


require_viewer = RequireRole(Role.VIEWER)
require_mod = RequireRole(Role.MOD)
require_admin = RequireRole(Role.ADMIN)
