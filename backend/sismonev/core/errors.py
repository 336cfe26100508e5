"""Application error taxonomy.

Every error carries a stable ``kind`` that the exception handlers in
``main.py`` render next to the human-readable detail.
"""

from datetime import datetime

from fastapi import HTTPException, status
from pydantic import BaseModel


class AppError(HTTPException):
    """Base class for errors with a stable kind."""

    kind = "InternalError"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "An unexpected error occurred"

    def __init__(self, detail: str | None = None, headers: dict[str, str] | None = None):
        super().__init__(
            status_code=self.status_code,
            detail=detail or self.default_detail,
            headers=headers,
        )


class Unauthenticated(AppError):
    kind = "Unauthenticated"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Not authenticated"

    def __init__(self, detail: str | None = None):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class InvalidToken(AppError):
    kind = "InvalidToken"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Invalid or expired token"

    def __init__(self, detail: str | None = None):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class Forbidden(AppError):
    kind = "Forbidden"
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Access denied"


class MissingOrganization(AppError):
    kind = "MissingOrganization"
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "No organization assigned to this user"


class NotFound(AppError):
    kind = "NotFound"
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Data not found"


class InvalidTransition(AppError):
    kind = "InvalidTransition"
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Status transition not allowed"


class ValidationError(AppError):
    kind = "ValidationError"
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid data"


class Conflict(AppError):
    kind = "Conflict"
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Duplicate data"


class InternalError(AppError):
    pass


class ErrorResponse(BaseModel):
    """Body of every error response."""

    error: str
    detail: str
    timestamp: datetime


_KIND_BY_STATUS = {
    status.HTTP_400_BAD_REQUEST: ValidationError.kind,
    status.HTTP_401_UNAUTHORIZED: Unauthenticated.kind,
    status.HTTP_403_FORBIDDEN: Forbidden.kind,
    status.HTTP_404_NOT_FOUND: NotFound.kind,
    status.HTTP_409_CONFLICT: Conflict.kind,
    status.HTTP_422_UNPROCESSABLE_ENTITY: ValidationError.kind,
}


def kind_for_status(status_code: int) -> str:
    """Error kind for an HTTPException raised outside the application taxonomy."""
    return _KIND_BY_STATUS.get(status_code, f"HTTP {status_code}")
