"""User management API routes (admin and super admin)."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from sismonev.auth.dependencies import require_elevated
from sismonev.core.database import get_db
from sismonev.core.errors import ValidationError
from sismonev.core.models import User, UserRole
from sismonev.core.pagination import clamp_limit, page_count
from sismonev.users.schemas import (
    ToggleStatusResponse,
    UserCreate,
    UserList,
    UserResponse,
    UserUpdate,
)
from sismonev.users.service import (
    create_user,
    delete_user,
    get_user,
    list_users,
    toggle_status,
    update_user,
)

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=UserList)
async def list_all(
    search: str | None = Query(None),
    role: str | None = Query(None),
    status_filter: str | None = Query(None, alias="status", description="active, inactive or all"),
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_elevated),
):
    """List users with search, role and active filters."""
    role_filter = None
    if role and role != "all":
        try:
            role_filter = UserRole.parse(role)
        except ValueError:
            raise ValidationError(f"Invalid role: {role}") from None
    is_active = None
    if status_filter and status_filter != "all":
        is_active = status_filter == "active"
    limit = clamp_limit(limit)
    items, total = await list_users(db, search, role_filter, is_active, page, limit)
    return UserList(
        items=[UserResponse.model_validate(u) for u in items],
        total=total,
        page=page,
        limit=limit,
        pages=page_count(total, limit),
    )


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create(
    body: UserCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_elevated),
):
    user = await create_user(db, current_user, body)
    await db.commit()
    await db.refresh(user)
    return user


@router.get("/{user_id}", response_model=UserResponse)
async def get_one(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_elevated),
):
    return await get_user(db, user_id)


@router.put("/{user_id}", response_model=UserResponse)
async def update(
    user_id: int,
    body: UserUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_elevated),
):
    user = await update_user(db, current_user, await get_user(db, user_id), body)
    await db.commit()
    await db.refresh(user)
    return user


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_elevated),
):
    await delete_user(db, current_user, await get_user(db, user_id))
    await db.commit()


@router.patch("/{user_id}/toggle-status", response_model=ToggleStatusResponse)
async def toggle(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_elevated),
):
    user = await toggle_status(db, current_user, await get_user(db, user_id))
    await db.commit()
    return ToggleStatusResponse(id=user.id, is_active=user.is_active)
