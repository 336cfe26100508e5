"""Pydantic schemas for user management."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from sismonev.auth.schemas import UserInResponse
from sismonev.core.models import UserRole


def _parse_role(v):
    if v is None or isinstance(v, UserRole):
        return v
    try:
        return UserRole.parse(v)
    except ValueError:
        raise ValueError(f"invalid role: {v}") from None


class UserCreate(BaseModel):
    """Create user. ``permissions`` may be the canonical map or the legacy list."""

    username: str = Field(..., min_length=3, max_length=100)
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=6)
    full_name: str = Field(..., min_length=1, max_length=255)
    role: UserRole = UserRole.ORG_ADMIN
    organization_id: str | None = None
    organization_name: str | None = None
    permissions: dict[str, Any] | list[Any] | None = None
    is_active: bool = True

    @field_validator("role", mode="before")
    @classmethod
    def role_alias(cls, v):
        return _parse_role(v)


class UserUpdate(BaseModel):
    """Partial update; an empty password leaves the current one unchanged."""

    username: str | None = Field(None, min_length=3, max_length=100)
    email: str | None = Field(None, min_length=3, max_length=255)
    password: str | None = None
    full_name: str | None = Field(None, min_length=1, max_length=255)
    role: UserRole | None = None
    organization_id: str | None = None
    organization_name: str | None = None
    permissions: dict[str, Any] | list[Any] | None = None
    is_active: bool | None = None

    @field_validator("role", mode="before")
    @classmethod
    def role_alias(cls, v):
        return _parse_role(v)

    @field_validator("password")
    @classmethod
    def password_length(cls, v: str | None) -> str | None:
        if v and len(v) < 6:
            raise ValueError("password must be at least 6 characters")
        return v


class UserResponse(UserInResponse):
    created_at: datetime | None = None
    updated_at: datetime | None = None


class UserList(BaseModel):
    items: list[UserResponse]
    total: int
    page: int
    limit: int
    pages: int


class ToggleStatusResponse(BaseModel):
    id: int
    is_active: bool
