"""Password hashing and JWT utilities.

Tokens are HS256 JWTs carrying the user id in ``sub`` and a ``type`` claim
(``access`` or ``refresh``). A token of one type is never accepted where the
other is expected.
"""

from datetime import datetime, timedelta
from typing import Any

import bcrypt
from jose import JWTError, jwt
from sismonev.core.config import get_settings

settings = get_settings()

ACCESS = "access"
REFRESH = "refresh"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # stored value is not a bcrypt hash
        return False


def get_password_hash(password: str) -> str:
    """Hash a password with a fresh bcrypt salt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def _encode(subject: str | int, token_type: str, lifetime: timedelta, claims: dict[str, Any] | None) -> str:
    payload: dict[str, Any] = dict(claims or {})
    payload.update(sub=str(subject), type=token_type, exp=datetime.utcnow() + lifetime)
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def create_access_token(subject: str | int, extra: dict[str, Any] | None = None) -> str:
    """Short-lived token sent as ``Authorization: Bearer``; ``extra`` adds role/organization claims."""
    return _encode(subject, ACCESS, timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES), extra)


def create_refresh_token(subject: str | int) -> str:
    return _encode(subject, REFRESH, timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS), None)


def decode_token(token: str, expected_type: str | None = None) -> dict[str, Any] | None:
    """Return the payload of a valid token, or None.

    None covers a bad signature, expiry, a malformed token, and a ``type``
    claim other than ``expected_type`` when one is given.
    """
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None
    if expected_type is not None and payload.get("type") != expected_type:
        return None
    return payload
