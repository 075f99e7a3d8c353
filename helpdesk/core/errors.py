# helpdesk/core/errors.py
"""Domain errors raised by the location and ticket managers.

Every error carries a code and a user-safe message. The HTTP layer maps
them to status codes in helpdesk/main.py.
"""

from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    NOT_FOUND = "NOT_FOUND"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    CONFLICT = "CONFLICT"


class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode = ErrorCode.VALIDATION_FAILED

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class NotFoundError(DomainError):
    """Raised when a referenced id does not exist or is soft-deleted."""

    code = ErrorCode.NOT_FOUND

    def __init__(self, resource: str, resource_id: int | None = None) -> None:
        super().__init__(f"{resource} not found")
        self.resource = resource
        self.resource_id = resource_id


class ValidationError(DomainError):
    """Raised when input breaks a structural or lifecycle rule."""

    code = ErrorCode.VALIDATION_FAILED


class ConflictError(DomainError):
    """Raised when valid input is refused because of existing relationships."""

    code = ErrorCode.CONFLICT


__all__ = ["ErrorCode", "DomainError", "NotFoundError", "ValidationError", "ConflictError"]
