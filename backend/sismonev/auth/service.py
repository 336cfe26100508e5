"""Auth service: login, refresh, profile and password changes."""

import logging
from datetime import datetime

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from sismonev.auth.permissions import ensure_canonical_permissions
from sismonev.auth.schemas import ProfileUpdate
from sismonev.core.config import get_settings
from sismonev.core.errors import Conflict, ValidationError
from sismonev.core.models import User
from sismonev.core.security import (
    REFRESH,
    create_access_token,
    create_refresh_token,
    decode_token,
    get_password_hash,
    verify_password,
)

logger = logging.getLogger(__name__)
settings = get_settings()


async def authenticate_user(db: AsyncSession, identifier: str, password: str) -> User | None:
    """Authenticate by email or username. Returns None on any failure.

    On success ``last_login`` is touched and legacy permissions are normalized;
    the caller commits.
    """
    ident = identifier.strip()
    result = await db.execute(
        select(User).where(
            or_(func.lower(User.email) == ident.lower(), User.username == ident)
        )
    )
    user = result.scalars().first()
    if not user or not verify_password(password, user.hashed_password):
        logger.info("Failed login for identifier=%s", ident)
        return None
    if not user.is_active:
        logger.info("Login rejected for inactive user id=%s", user.id)
        return None
    ensure_canonical_permissions(user)
    user.last_login = datetime.utcnow()
    await db.flush()
    logger.info("User id=%s logged in", user.id)
    return user


def create_tokens_for_user(user: User) -> tuple[str, str, int]:
    """Create access and refresh tokens; return (access, refresh, expires_in_seconds)."""
    extra = {
        "role": user.role.value,
        "organization_id": user.organization_id,
    }
    access = create_access_token(user.id, extra=extra)
    refresh = create_refresh_token(user.id)
    expires_in = settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60
    return access, refresh, expires_in


async def get_user_by_id(db: AsyncSession, user_id: int) -> User | None:
    """Fetch user by id."""
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def refresh_tokens(db: AsyncSession, refresh_token: str) -> tuple[str, str, int] | None:
    """Validate refresh token and return new access, refresh, expires_in or None."""
    payload = decode_token(refresh_token, REFRESH)
    user_id = payload.get("sub") if payload else None
    if not user_id:
        return None
    user = await get_user_by_id(db, int(user_id))
    if not user or not user.is_active:
        return None
    return create_tokens_for_user(user)


async def ensure_identity_available(
    db: AsyncSession,
    username: str | None = None,
    email: str | None = None,
    exclude_user_id: int | None = None,
) -> None:
    """Raise Conflict if username or email is already taken by another user."""
    if username:
        q = select(User.id).where(User.username == username)
        if exclude_user_id is not None:
            q = q.where(User.id != exclude_user_id)
        if (await db.execute(q)).first():
            raise Conflict("Username is already in use")
    if email:
        q = select(User.id).where(func.lower(User.email) == email.lower())
        if exclude_user_id is not None:
            q = q.where(User.id != exclude_user_id)
        if (await db.execute(q)).first():
            raise Conflict("Email is already in use")


async def update_profile(db: AsyncSession, user: User, data: ProfileUpdate) -> User:
    """Update own name, username and email."""
    await ensure_identity_available(
        db, username=data.username, email=data.email, exclude_user_id=user.id
    )
    if data.full_name is not None:
        user.full_name = data.full_name.strip()
    if data.username is not None:
        user.username = data.username.strip()
    if data.email is not None:
        user.email = data.email.strip().lower()
    await db.flush()
    return user


async def change_password(db: AsyncSession, user: User, current: str, new: str) -> None:
    """Replace the password after verifying the current one."""
    if not verify_password(current, user.hashed_password):
        raise ValidationError("Current password is incorrect")
    user.hashed_password = get_password_hash(new)
    await db.flush()
    logger.info("Password changed for user id=%s", user.id)
