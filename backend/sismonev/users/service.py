"""User management: CRUD, role and permission guards."""

import logging

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from sismonev.auth.permissions import default_permissions, normalize_permissions
from sismonev.auth.service import ensure_identity_available
from sismonev.core.errors import Forbidden, NotFound, ValidationError
from sismonev.core.models import User, UserRole
from sismonev.core.pagination import page_offset
from sismonev.core.security import get_password_hash
from sismonev.organizations.service import resolve_organization
from sismonev.users.schemas import UserCreate, UserUpdate

logger = logging.getLogger(__name__)


def _resolve_affiliation(
    role: UserRole, org_id: str | None, org_name: str | None
) -> tuple[str | None, str | None]:
    """ORG_ADMIN must belong to a catalog organization; elevated roles may."""
    if not org_id:
        if role == UserRole.ORG_ADMIN:
            raise ValidationError("Organization is required for an organization admin")
        return None, None
    return resolve_organization(org_id, org_name)


def _guard_privileges(actor: User, role: UserRole | None, permissions) -> None:
    if actor.role == UserRole.SUPER_ADMIN:
        return
    if role == UserRole.SUPER_ADMIN:
        raise Forbidden("Only a super admin can assign the super admin role")
    if permissions is not None:
        raise Forbidden("Only a super admin can change permissions")


async def list_users(
    db: AsyncSession,
    search: str | None = None,
    role: UserRole | None = None,
    is_active: bool | None = None,
    page: int = 1,
    limit: int = 10,
) -> tuple[list[User], int]:
    q = select(User)
    if search:
        pattern = f"%{search}%"
        q = q.where(
            or_(
                User.username.ilike(pattern),
                User.email.ilike(pattern),
                User.full_name.ilike(pattern),
            )
        )
    if role is not None:
        q = q.where(User.role == role)
    if is_active is not None:
        q = q.where(User.is_active == is_active)
    total = (await db.execute(select(func.count()).select_from(q.subquery()))).scalar_one()
    result = await db.execute(
        q.order_by(User.created_at.desc(), User.id.desc())
        .offset(page_offset(page, limit))
        .limit(limit)
    )
    return list(result.scalars().all()), total


async def get_user(db: AsyncSession, user_id: int) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise NotFound("User not found")
    return user


async def create_user(db: AsyncSession, actor: User, data: UserCreate) -> User:
    """Create user with a fully populated permission map."""
    _guard_privileges(actor, data.role, data.permissions)
    email = data.email.strip().lower()
    await ensure_identity_available(db, username=data.username, email=email)
    org_id, org_name = _resolve_affiliation(
        data.role, data.organization_id, data.organization_name
    )
    if data.permissions is not None:
        permissions = normalize_permissions(data.permissions, data.role)
    else:
        permissions = default_permissions(data.role)
    user = User(
        username=data.username.strip(),
        email=email,
        hashed_password=get_password_hash(data.password),
        full_name=data.full_name.strip(),
        role=data.role,
        organization_id=org_id,
        organization_name=org_name,
        permissions=permissions,
        is_active=data.is_active,
    )
    db.add(user)
    await db.flush()
    logger.info(
        "User id=%s (%s, org=%s) created by user id=%s",
        user.id, user.role.value, org_id, actor.id,
    )
    return user


async def update_user(db: AsyncSession, actor: User, user: User, data: UserUpdate) -> User:
    if user.role == UserRole.SUPER_ADMIN and actor.role != UserRole.SUPER_ADMIN:
        raise Forbidden("Only a super admin can modify a super admin")
    _guard_privileges(actor, data.role, data.permissions)
    if user.id == actor.id and data.is_active is False:
        raise ValidationError("You cannot deactivate your own account")
    email = data.email.strip().lower() if data.email else None
    await ensure_identity_available(
        db, username=data.username, email=email, exclude_user_id=user.id
    )

    role = data.role or user.role
    role_changed = role != user.role
    fields = data.model_fields_set
    if "organization_id" in fields or role_changed:
        org_id = data.organization_id if "organization_id" in fields else user.organization_id
        org_name = data.organization_name if "organization_id" in fields else user.organization_name
        user.organization_id, user.organization_name = _resolve_affiliation(role, org_id, org_name)
    if role_changed:
        logger.info("User id=%s role %s -> %s by user id=%s", user.id, user.role.value, role.value, actor.id)
        user.role = role
    if data.username is not None:
        user.username = data.username.strip()
    if email is not None:
        user.email = email
    if data.full_name is not None:
        user.full_name = data.full_name.strip()
    if data.password:
        user.hashed_password = get_password_hash(data.password)
    if data.is_active is not None:
        user.is_active = data.is_active
    if data.permissions is not None:
        user.permissions = normalize_permissions(data.permissions, user.role)
        logger.info("Permissions of user id=%s changed by user id=%s", user.id, actor.id)
    elif role_changed:
        # grants of the previous role do not carry over
        user.permissions = default_permissions(role)
    else:
        user.permissions = normalize_permissions(user.permissions, user.role)
    await db.flush()
    return user


async def delete_user(db: AsyncSession, actor: User, user: User) -> None:
    if user.id == actor.id:
        raise ValidationError("You cannot delete your own account")
    if user.role == UserRole.SUPER_ADMIN and actor.role != UserRole.SUPER_ADMIN:
        raise Forbidden("Only a super admin can delete a super admin")
    user_id = user.id
    await db.delete(user)
    await db.flush()
    logger.info("User id=%s deleted by user id=%s", user_id, actor.id)


async def toggle_status(db: AsyncSession, actor: User, user: User) -> User:
    if user.id == actor.id:
        raise ValidationError("You cannot deactivate your own account")
    if user.role == UserRole.SUPER_ADMIN and actor.role != UserRole.SUPER_ADMIN:
        raise Forbidden("Only a super admin can modify a super admin")
    user.is_active = not user.is_active
    await db.flush()
    logger.info(
        "User id=%s %s by user id=%s",
        user.id, "activated" if user.is_active else "deactivated", actor.id,
    )
    return user
