"""
Application exceptions for the Wanderlust API.

Services raise these; the handlers registered in ``wanderlust.main`` turn them
into the ``{"success": false, "error": {...}}`` response envelope.

Usage:
    from wanderlust.core.errors import NotFoundError

    raise NotFoundError("Trip not found")
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel


class ErrorCode(str, Enum):
    BAD_REQUEST = "BAD_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class FieldError(BaseModel):
    """A single field-scoped validation failure."""

    path: str
    message: str


class WanderlustError(Exception):
    """Base exception for all Wanderlust errors."""

    status_code: int = 500
    code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str = "An unexpected error occurred", details: Any = None):
        self.message = message
        self.details = details
        super().__init__(message)

    def to_dict(self) -> dict:
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
        }


class BadRequestError(WanderlustError):
    status_code = 400
    code = ErrorCode.BAD_REQUEST


class UnauthorizedError(WanderlustError):
    status_code = 401
    code = ErrorCode.UNAUTHORIZED


class ForbiddenError(WanderlustError):
    status_code = 403
    code = ErrorCode.FORBIDDEN


class NotFoundError(WanderlustError):
    status_code = 404
    code = ErrorCode.NOT_FOUND


class ValidationError(WanderlustError):
    """Input failed one or more validation rules."""

    status_code = 422
    code = ErrorCode.VALIDATION_ERROR

    def __init__(self, errors: list[FieldError], message: str = "Validation failed"):
        self.errors = list(errors)
        super().__init__(message, details=[e.model_dump() for e in self.errors])


class SplitValidationError(ValidationError):
    """An expense split does not reconcile with its total."""

    def __init__(self, errors: list[FieldError]):
        super().__init__(errors, message="Invalid expense split")


class ConflictError(WanderlustError):
    """A write was based on a stale ``updated_at``."""

    status_code = 409
    code = ErrorCode.CONFLICT

    def __init__(
        self,
        server_updated_at: datetime | None,
        client_updated_at: datetime,
        message: str = "This item was modified by another user",
    ):
        self.server_updated_at = server_updated_at
        self.client_updated_at = client_updated_at
        super().__init__(
            message,
            details={
                "serverUpdatedAt": server_updated_at.isoformat() if server_updated_at else None,
                "clientUpdatedAt": client_updated_at.isoformat(),
            },
        )
