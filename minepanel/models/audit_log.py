"""
AuditLog model: append-only trail of sensitive panel actions.

Rows are inserted once and never updated or deleted. Actor fields are
denormalised so the record survives deletion of the acting account.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, Column, DateTime, Integer, String

from minepanel.db.base import Base


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    actor_username: str = Column(String(50), nullable=False)  # type: ignore[assignment]
    actor_role: str = Column(String(10), nullable=False)  # type: ignore[assignment]
    ip: str = Column(String(64), nullable=False)  # type: ignore[assignment]
    action: str = Column(String(40), nullable=False, index=True)  # type: ignore[assignment]
    target: str | None = Column(String(200), nullable=True)  # type: ignore[assignment]
    details_json: dict[str, Any] | None = Column(JSON, nullable=True)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )
