# backend/trackcoach/exceptions.py

"""
Application errors.

Each class fixes an HTTP status and an ``error_code``; ``main.py`` renders
them as ``{"detail": ..., "error_code": ...}``.
"""
from typing import Dict, Optional

from fastapi import HTTPException, status


class APIException(HTTPException):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: str = "ERROR"
    default_detail: str = "Request failed"
    headers: Optional[Dict[str, str]] = None

    def __init__(self, detail: Optional[str] = None, error_code: Optional[str] = None):
        super().__init__(
            status_code=type(self).status_code,
            detail=detail or self.default_detail,
            headers=type(self).headers,
        )
        if error_code:
            self.error_code = error_code


class NotFoundError(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "NOT_FOUND"

    def __init__(self, resource: str, identifier):
        super().__init__(f"{resource} not found: {identifier}")


class ValidationError(APIException):
    """Bad input or an illegal lifecycle step. ``field`` is folded into the code."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    error_code = "VALIDATION_ERROR"

    def __init__(self, detail: str, field: Optional[str] = None):
        super().__init__(detail, f"VALIDATION_ERROR_{field.upper()}" if field else None)


class UnauthorizedError(APIException):
    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = "UNAUTHORIZED"
    default_detail = "Could not validate credentials"
    headers = {"WWW-Authenticate": "Bearer"}


class ForbiddenError(APIException):
    status_code = status.HTTP_403_FORBIDDEN
    error_code = "FORBIDDEN"
    default_detail = "Access denied"


class ConflictError(APIException):
    status_code = status.HTTP_409_CONFLICT
    error_code = "CONFLICT"


class InviteUnavailableError(ConflictError):
    """Unknown, expired or already claimed invite code."""

    error_code = "INVITE_UNAVAILABLE"
    default_detail = "Invalid, expired, or already used invite code"
