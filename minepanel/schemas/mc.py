"""Pydantic schemas for requests proxied to the game-server plugin."""

from __future__ import annotations

import re

from pydantic import Field, field_validator

from minepanel.schemas.base import CamelModel

_PLAYER_NAME_RE = re.compile(r"[A-Za-z0-9_]{3,16}")


class WhitelistRequest(CamelModel):
    name: str

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        if not _PLAYER_NAME_RE.fullmatch(v):
            raise ValueError("Player name must be 3-16 letters, digits or underscores")
        return v


class CommandRequest(CamelModel):
    command: str = Field(min_length=1, max_length=50)
    args: list[str] = Field(default_factory=list)

    @field_validator("args")
    @classmethod
    def _args(cls, v: list[str]) -> list[str]:
        if any(len(a) > 500 for a in v):
            raise ValueError("Each argument must not exceed 500 characters")
        return v
