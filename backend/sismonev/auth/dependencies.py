"""Auth dependencies: current user, role gates and permission gates."""

import logging
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sismonev.auth.permissions import (
    Action,
    Module,
    authorize_permission,
    authorize_roles,
    ensure_canonical_permissions,
)
from sismonev.core.database import get_db
from sismonev.core.errors import InvalidToken, Unauthenticated
from sismonev.core.models import ELEVATED_ROLES, User, UserRole
from sismonev.core.security import ACCESS, decode_token

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


async def _load_active_user(db: AsyncSession, user_id: str | None) -> User | None:
    try:
        uid = int(user_id) if user_id is not None else None
    except (TypeError, ValueError):
        return None
    if uid is None:
        return None
    result = await db.execute(select(User).where(User.id == uid))
    user = result.scalar_one_or_none()
    if not user or not user.is_active:
        return None
    ensure_canonical_permissions(user)
    return user


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """Resolve current user from JWT. Raises 401 if missing, invalid or inactive."""
    if not credentials or not credentials.credentials:
        raise Unauthenticated("Access token not found")
    payload = decode_token(credentials.credentials, ACCESS)
    if not payload:
        raise InvalidToken("Invalid or expired token")
    user = await _load_active_user(db, payload.get("sub"))
    if not user:
        raise Unauthenticated("User not found or inactive")
    return user


async def get_current_user_optional(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User | None:
    """Optional current user (for routes that work with or without auth)."""
    if not credentials or not credentials.credentials:
        return None
    payload = decode_token(credentials.credentials, ACCESS)
    if not payload:
        return None
    return await _load_active_user(db, payload.get("sub"))


def require_roles(*allowed_roles: UserRole):
    """Dependency factory: require current user to have one of the given roles."""

    async def _require(current_user: Annotated[User, Depends(get_current_user)]) -> User:
        return authorize_roles(current_user, allowed_roles)

    return _require


def require_permission(module: Module, action: Action):
    """Dependency factory: require a module/action grant (SUPER_ADMIN always passes)."""

    async def _require(current_user: Annotated[User, Depends(get_current_user)]) -> User:
        return authorize_permission(current_user, module, action)

    return _require


require_elevated = require_roles(*ELEVATED_ROLES)


def require_super_admin(current_user: Annotated[User, Depends(get_current_user)]) -> User:
    """Require SUPER_ADMIN role."""
    return authorize_roles(current_user, (UserRole.SUPER_ADMIN,))
