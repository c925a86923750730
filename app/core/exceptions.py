"""
Base exception classes for application-wide error handling.

This module provides the exception hierarchy raised by the service layer:
- Machine-readable error codes for client handling
- Field-level details for validation failures
- A stable dict representation for API and WebSocket responses

Exception Hierarchy:
    BaseApplicationError (base)
    ├── ValidationError - Input validation failures (400)
    ├── NotFoundError - Resource not found (404)
    ├── PermissionDeniedError - Authorization failures (403)
    └── PersistenceError - Datastore unavailable or write failed (503)

Usage:
    from core.exceptions import ValidationError, PersistenceError

    # Raise with field details
    raise ValidationError(
        "Message content cannot be empty",
        error_code="EMPTY_CONTENT",
        details={"content": ["This field may not be blank."]},
    )

    # Wrap a database failure
    try:
        Message.objects.create(...)
    except DatabaseError as e:
        raise PersistenceError("Failed to store message") from e

Note:
    HTTP mapping lives in core.exception_handlers (DRF EXCEPTION_HANDLER).
    The WebSocket consumer sends the same message, error_code and details
    in an error frame.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional error context (field errors, identifiers, etc.)
        status_code: HTTP status the API layer responds with
    """

    default_error_code: str = "APPLICATION_ERROR"
    status_code: int = 400

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        """
        Initialize the exception.

        Args:
            message: Human-readable error description
            error_code: Machine-readable error code (defaults to class default)
            details: Additional error context
        """
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for API response.

        Example:
            {
                "error": "Message content cannot be empty",
                "error_code": "EMPTY_CONTENT",
                "details": {"content": ["This field may not be blank."]}
            }
        """
        result: dict[str, Any] = {
            "error": self.message,
            "error_code": self.error_code,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        """Return string representation with error code."""
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        """Return detailed representation for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class ValidationError(BaseApplicationError):
    """
    Raised when input validation fails.

    Use for:
    - Missing or blank fields
    - Malformed identifiers
    - Business rule violations (e.g. messaging yourself)

    Never retried by callers.
    """

    default_error_code: str = "VALIDATION_ERROR"
    status_code: int = 400


class NotFoundError(BaseApplicationError):
    """Raised when a requested resource does not exist."""

    default_error_code: str = "NOT_FOUND"
    status_code: int = 404


class PermissionDeniedError(BaseApplicationError):
    """
    Raised when the user lacks permission for an operation.

    For authentication failures (missing/invalid token), DRF's
    NotAuthenticated/AuthenticationFailed are used instead.
    """

    default_error_code: str = "PERMISSION_DENIED"
    status_code: int = 403


class PersistenceError(BaseApplicationError):
    """
    Raised when the datastore is unavailable or a write cannot complete.

    Services log the underlying DatabaseError and raise this in its place,
    chaining the original with ``raise ... from``. There is no automatic
    retry; clients may resubmit.
    """

    default_error_code: str = "PERSISTENCE_ERROR"
    status_code: int = 503
