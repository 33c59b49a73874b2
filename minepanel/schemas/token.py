"""Pydantic schemas for login, JWT tokens and the authenticated identity."""

from __future__ import annotations

from pydantic import Field

from minepanel.core.roles import Role
from minepanel.schemas.base import CamelModel


class Identity(CamelModel):
    """Snapshot of a user carried inside a token."""

    id: int
    username: str
    role: Role


class LoginRequest(CamelModel):
    username: str = Field(min_length=1, max_length=50)
    password: str = Field(min_length=1, max_length=200)


class RefreshRequest(CamelModel):
    refresh_token: str = Field(min_length=1)


class Token(CamelModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class LoginResponse(Token):
    user: Identity
