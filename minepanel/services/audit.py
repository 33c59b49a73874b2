"""
Audit recorder for the append-only trail of sensitive actions.

Writes are best-effort: a failed insert is rolled back, logged and
swallowed so the primary operation is never failed by the audit trail.
"""

from __future__ import annotations

import logging
import math
from typing import Any

from fastapi import Request
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from minepanel.models.audit_log import AuditLog
from minepanel.schemas.token import Identity

logger = logging.getLogger(__name__)

ANONYMOUS_ACTOR = "anonymous"
UNKNOWN_ROLE = "UNKNOWN"

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100
# Keeps (page - 1) * limit well inside a 64-bit OFFSET.
MAX_PAGE = 1_000_000


def get_client_ip(request: Request) -> str:
    """Client address, preferring the first X-Forwarded-For hop set by the reverse proxy."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


async def record_audit(
    db: AsyncSession,
    request: Request,
    action: str,
    target: str | None = None,
    details: dict[str, Any] | None = None,
    actor: Identity | None = None,
) -> None:
    """Append one audit record for *action*.

    The actor defaults to the identity bound on the request by the auth
    dependency; without one the record is attributed to ``anonymous``.
    """
    if actor is None:
        actor = getattr(request.state, "identity", None)
    entry = AuditLog(
        actor_username=actor.username if actor else ANONYMOUS_ACTOR,
        actor_role=actor.role.value if actor else UNKNOWN_ROLE,
        ip=get_client_ip(request),
        action=action,
        target=target,
        details_json=details,
    )
    try:
        db.add(entry)
        await db.commit()
    except Exception:
        logger.exception("Failed to write audit log entry (action=%s)", action)
        await db.rollback()


def clamp_pagination(page: int | None, limit: int | None) -> tuple[int, int]:
    """Clamp page to 1..MAX_PAGE and limit to 1..100 instead of rejecting."""
    page = min(MAX_PAGE, max(1, page or 1))
    limit = min(MAX_PAGE_SIZE, max(1, limit if limit is not None else DEFAULT_PAGE_SIZE))
    return page, limit


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit)


async def list_audit_logs(
    db: AsyncSession, page: int | None, limit: int | None
) -> tuple[list[AuditLog], int, int, int]:
    """Return ``(records, total, page, limit)`` newest first, after clamping."""
    page, limit = clamp_pagination(page, limit)
    result = await db.execute(
        select(AuditLog)
        .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    total = await db.scalar(select(func.count()).select_from(AuditLog))
    return list(result.scalars().all()), int(total or 0), page, limit
