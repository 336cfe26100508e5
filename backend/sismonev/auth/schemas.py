"""Pydantic schemas for auth."""

from datetime import datetime

from pydantic import BaseModel, Field

from sismonev.core.models import UserRole


class LoginRequest(BaseModel):
    """Login request body; identifier is an email or a username."""

    identifier: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class RefreshRequest(BaseModel):
    """Refresh token request."""

    refresh_token: str


class UserInResponse(BaseModel):
    """User summary in API responses."""

    id: int
    username: str
    email: str
    full_name: str
    role: UserRole
    organization_id: str | None
    organization_name: str | None
    permissions: dict[str, dict[str, bool]] | None
    is_active: bool
    last_login: datetime | None = None

    class Config:
        from_attributes = True


class TokenResponse(BaseModel):
    """JWT token response."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds
    user: UserInResponse | None = None


class ProfileUpdate(BaseModel):
    """Self-service profile update."""

    full_name: str | None = Field(None, min_length=1, max_length=255)
    username: str | None = Field(None, min_length=3, max_length=100)
    email: str | None = Field(None, min_length=3, max_length=255)


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6)


class MessageResponse(BaseModel):
    message: str
