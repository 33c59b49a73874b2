"""Pydantic schemas for the audit trail."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from minepanel.schemas.base import CamelModel


class AuditLogRead(CamelModel):
    id: int
    actor_username: str
    actor_role: str
    ip: str
    action: str
    target: str | None = None
    details_json: dict[str, Any] | None = None
    created_at: datetime | None


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int


class AuditPage(CamelModel):
    data: list[AuditLogRead]
    pagination: Pagination
