"""Application-level exception types.

Domain errors raised by services and adapters. Each subclass carries the HTTP
status it maps to so the exception handlers stay a single lookup.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients."""

    hint: str
    field: str
    limit: int
    actual_value: int
    retry_after: int
    file_type: str
    resource: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    status_code: ClassVar[int] = 400

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when input/config validation fails."""


class AuthenticationAppError(AppError):
    """Raised when the caller cannot be resolved to a tenant."""

    status_code = 401


class PermissionAppError(AppError):
    """Raised when the tenant is not entitled to the action (plan, settings)."""

    status_code = 403


class NotFoundAppError(AppError):
    """Raised when a tenant-scoped row does not exist."""

    status_code = 404


@dataclass
class RateLimitedAppError(AppError):
    """Raised when an action is attempted inside its cooldown window."""

    retry_after: int = 0

    status_code: ClassVar[int] = 429


class StorageAppError(AppError):
    """Raised when the persistence or blob layer fails."""

    status_code = 500
