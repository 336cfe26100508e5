"""Auth API routes."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from sismonev.auth.dependencies import get_current_user
from sismonev.auth.schemas import (
    ChangePasswordRequest,
    LoginRequest,
    MessageResponse,
    ProfileUpdate,
    RefreshRequest,
    TokenResponse,
    UserInResponse,
)
from sismonev.auth.service import (
    authenticate_user,
    change_password,
    create_tokens_for_user,
    refresh_tokens,
    update_profile,
)
from sismonev.core.database import get_db
from sismonev.core.errors import InvalidToken, Unauthenticated
from sismonev.core.models import User

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    """Login with email or username and password; returns JWT tokens and the profile."""
    user = await authenticate_user(db, body.identifier, body.password)
    if not user:
        raise Unauthenticated("Invalid email/username or password")
    await db.commit()
    await db.refresh(user)
    access, refresh, expires_in = create_tokens_for_user(user)
    return TokenResponse(
        access_token=access,
        refresh_token=refresh,
        expires_in=expires_in,
        user=UserInResponse.model_validate(user),
    )


@router.post("/refresh", response_model=TokenResponse)
async def refresh(
    body: RefreshRequest,
    db: AsyncSession = Depends(get_db),
):
    """Issue new access and refresh tokens using a valid refresh token."""
    result = await refresh_tokens(db, body.refresh_token)
    if not result:
        raise InvalidToken("Invalid or expired refresh token")
    access, refresh, expires_in = result
    return TokenResponse(
        access_token=access,
        refresh_token=refresh,
        expires_in=expires_in,
    )


@router.get("/me", response_model=UserInResponse)
async def me(current_user: User = Depends(get_current_user)):
    """Return current authenticated user."""
    return current_user


@router.put("/profile", response_model=UserInResponse)
async def put_profile(
    body: ProfileUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Update own profile."""
    user = await update_profile(db, current_user, body)
    await db.commit()
    await db.refresh(user)
    return user


@router.post("/change-password", response_model=MessageResponse)
async def post_change_password(
    body: ChangePasswordRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    await change_password(db, current_user, body.current_password, body.new_password)
    await db.commit()
    return MessageResponse(message="Password changed")


@router.post("/logout", response_model=MessageResponse)
async def logout(current_user: User = Depends(get_current_user)):
    """Tokens are stateless; the client discards them."""
    return MessageResponse(message="Logged out")
