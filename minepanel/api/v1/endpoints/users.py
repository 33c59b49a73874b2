"""
User management endpoints (admin only).

Every action is written to the audit trail.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from minepanel.api.v1.deps import get_db, require_admin
from minepanel.core.exceptions import Conflict, NotFound, ValidationFailed
from minepanel.core.security import get_password_hash
from minepanel.models.user import User
from minepanel.schemas.base import OkResponse
from minepanel.schemas.token import Identity
from minepanel.schemas.user import UserCreate, UserRead, UserUpdate
from minepanel.services.audit import record_audit

router = APIRouter(prefix="/users", tags=["users"])
logger = logging.getLogger(__name__)


async def _get_user_or_404(db: AsyncSession, user_id: int) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise NotFound("User not found")
    return user


@router.get("", response_model=list[UserRead])
async def list_users(
    request: Request,
    db: AsyncSession = Depends(get_db),
    _admin: Identity = Depends(require_admin),
) -> list[UserRead]:
    """List all panel accounts, newest first."""
    result = await db.execute(select(User).order_by(User.created_at.desc(), User.id.desc()))
    users = [UserRead.model_validate(u) for u in result.scalars().all()]
    await record_audit(db, request, "LIST_USERS")
    return users


@router.post("", response_model=UserRead, status_code=201)
async def create_user(
    request: Request,
    body: UserCreate,
    db: AsyncSession = Depends(get_db),
    _admin: Identity = Depends(require_admin),
) -> UserRead:
    """Create a new panel account."""
    existing = await db.execute(select(User).where(User.username == body.username))
    if existing.scalar_one_or_none():
        raise Conflict("Username already exists")

    user = User(
        username=body.username,
        hashed_password=get_password_hash(body.password),
        role=body.role.value,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    created = UserRead.model_validate(user)

    await record_audit(db, request, "CREATE_USER", created.username, {"role": created.role.value})
    logger.info("User %s created with role %s", created.username, created.role.value)
    return created


@router.patch("/{user_id}", response_model=UserRead)
async def update_user(
    request: Request,
    user_id: int,
    body: UserUpdate,
    db: AsyncSession = Depends(get_db),
    _admin: Identity = Depends(require_admin),
) -> UserRead:
    """Change a user's role and/or password."""
    changes = body.model_dump(exclude_none=True)
    if not changes:
        raise ValidationFailed("No fields to update")

    user = await _get_user_or_404(db, user_id)
    if body.role is not None:
        user.role = body.role.value
    if body.password is not None:
        user.hashed_password = get_password_hash(body.password)
    await db.commit()
    await db.refresh(user)
    updated = UserRead.model_validate(user)

    await record_audit(db, request, "UPDATE_USER", updated.username, {"fields": sorted(changes)})
    return updated


@router.delete("/{user_id}", response_model=OkResponse)
async def delete_user(
    request: Request,
    user_id: int,
    db: AsyncSession = Depends(get_db),
    admin: Identity = Depends(require_admin),
) -> OkResponse:
    """Delete a user. Admins cannot delete their own account."""
    if admin.id == user_id:
        raise ValidationFailed("Cannot delete yourself")

    user = await _get_user_or_404(db, user_id)
    username = user.username
    await db.delete(user)
    await db.commit()

    await record_audit(db, request, "DELETE_USER", username)
    logger.info("User %s deleted", username)
    return OkResponse(message=f"User {username} deleted")
