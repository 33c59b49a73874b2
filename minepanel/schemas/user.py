"""Pydantic schemas for User CRUD."""

from __future__ import annotations

import re
from datetime import datetime

from pydantic import field_validator

from minepanel.core.roles import Role
from minepanel.schemas.base import CamelModel

_USERNAME_RE = re.compile(r"[A-Za-z0-9_]{3,30}")


def _check_password(v: str) -> str:
    if not 6 <= len(v) <= 200:
        raise ValueError("Password must be 6-200 characters")
    return v


class UserCreate(CamelModel):
    username: str
    password: str
    role: Role

    @field_validator("username")
    @classmethod
    def _username(cls, v: str) -> str:
        if not _USERNAME_RE.fullmatch(v):
            raise ValueError("Username must be 3-30 letters, digits or underscores")
        return v

    @field_validator("password")
    @classmethod
    def _password(cls, v: str) -> str:
        return _check_password(v)


class UserUpdate(CamelModel):
    role: Role | None = None
    password: str | None = None

    @field_validator("password")
    @classmethod
    def _password(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return _check_password(v)


class UserRead(CamelModel):
    id: int
    username: str
    role: Role
    created_at: datetime | None
