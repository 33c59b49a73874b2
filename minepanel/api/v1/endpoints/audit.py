"""
Audit trail viewer (admin only).

Pagination is lenient: bad or out-of-range ``page`` / ``limit`` values are
clamped rather than rejected.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from minepanel.api.v1.deps import get_db, require_admin
from minepanel.schemas.audit import AuditLogRead, AuditPage, Pagination
from minepanel.schemas.token import Identity
from minepanel.services.audit import list_audit_logs, total_pages

router = APIRouter(prefix="/audit", tags=["audit"])


def _parse_int(value: str | None) -> int | None:
    try:
        return int(value) if value is not None else None
    except ValueError:
        return None


@router.get("", response_model=AuditPage)
async def get_audit_logs(
    page: str | None = None,
    limit: str | None = None,
    db: AsyncSession = Depends(get_db),
    _admin: Identity = Depends(require_admin),
) -> AuditPage:
    records, total, page_no, page_size = await list_audit_logs(
        db, _parse_int(page), _parse_int(limit)
    )
    return AuditPage(
        data=[AuditLogRead.model_validate(r) for r in records],
        pagination=Pagination(
            page=page_no,
            limit=page_size,
            total=total,
            total_pages=total_pages(total, page_size),
        ),
    )
