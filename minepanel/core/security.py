"""
JWT token issuance / verification and password hashing (bcrypt).

Access and refresh tokens are signed with separate secrets and carry a
``type`` claim, so neither kind is accepted where the other is expected.
Tokens are stateless: nothing is stored server-side.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import ValidationError

from minepanel.core.config import Settings
from minepanel.schemas.token import Identity

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


# ── Passwords ───────────────────────────────────────────────────────
def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def get_password_hash(plain: str) -> str:
    return pwd_context.hash(plain)


# ── JWT tokens ──────────────────────────────────────────────────────
@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


class TokenIssuer:
    """Signs and verifies the access / refresh token pair."""

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        algorithm: str = "HS256",
        access_ttl: timedelta = timedelta(minutes=15),
        refresh_ttl: timedelta = timedelta(days=7),
    ) -> None:
        if access_secret == refresh_secret:
            raise ValueError("Access and refresh secrets must differ")
        self._access_secret = access_secret
        self._refresh_secret = refresh_secret
        self._algorithm = algorithm
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenIssuer":
        return cls(
            access_secret=settings.JWT_SECRET,
            refresh_secret=settings.REFRESH_SECRET,
            algorithm=settings.ALGORITHM,
            access_ttl=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
            refresh_ttl=timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
        )

    def _encode(self, identity: Identity, token_type: str, secret: str, ttl: timedelta) -> str:
        expire = datetime.now(timezone.utc) + ttl
        claims: dict[str, Any] = {
            "sub": str(identity.id),
            "username": identity.username,
            "role": identity.role.value,
            "type": token_type,
            "exp": expire,
        }
        return jwt.encode(claims, secret, algorithm=self._algorithm)

    def _decode(self, token: str, token_type: str, secret: str) -> Identity | None:
        try:
            payload = jwt.decode(token, secret, algorithms=[self._algorithm])
        except JWTError:
            return None
        if payload.get("type") != token_type:
            return None
        try:
            return Identity(
                id=int(payload["sub"]),
                username=payload["username"],
                role=payload["role"],
            )
        except (KeyError, TypeError, ValueError, ValidationError):
            return None

    def create_access_token(self, identity: Identity) -> str:
        return self._encode(identity, ACCESS_TOKEN_TYPE, self._access_secret, self.access_ttl)

    def create_refresh_token(self, identity: Identity) -> str:
        return self._encode(identity, REFRESH_TOKEN_TYPE, self._refresh_secret, self.refresh_ttl)

    def issue(self, identity: Identity) -> TokenPair:
        """Mint a fresh access + refresh pair for *identity*."""
        return TokenPair(
            access_token=self.create_access_token(identity),
            refresh_token=self.create_refresh_token(identity),
        )

    def verify_access(self, token: str) -> Identity | None:
        """Return the identity if *access* token is valid, else ``None``."""
        return self._decode(token, ACCESS_TOKEN_TYPE, self._access_secret)

    def verify_refresh(self, token: str) -> Identity | None:
        """Return the identity snapshot if *refresh* token is valid, else ``None``.

        The snapshot is not authoritative; callers re-read the user record
        before issuing a new pair.
        """
        return self._decode(token, REFRESH_TOKEN_TYPE, self._refresh_secret)
