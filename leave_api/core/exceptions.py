"""
Typed business-rule errors.

Services raise these; the API boundary (core.errors.app_error_handler)
translates them into HTTP responses.
"""
from typing import Any, Optional

from fastapi import status


class AppError(Exception):
    """Base class for errors raised by the leave services."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str, payload: Optional[Any] = None):
        super().__init__(detail)
        self.detail = detail
        self.payload = payload


class ValidationError(AppError):
    """Missing or malformed input the caller can correct."""

    status_code = status.HTTP_400_BAD_REQUEST


class AuthorizationError(AppError):
    """Role mismatch or acting on someone who is not your report."""

    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(AppError):
    """State does not allow the operation (e.g. leave already reviewed)."""

    status_code = status.HTTP_409_CONFLICT


class InternalError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
