"""
Base exception classes for application-wide error handling.

This module provides a standardized exception hierarchy that enables:
- Consistent error responses across the application
- Machine-readable error codes for client handling
- Detailed error information for debugging

Exception Hierarchy:
    BaseApplicationError (base)
    ├── ValidationError - Input validation failures
    ├── NotFoundError - Resource not found
    ├── PermissionDeniedError - Authorization failures
    └── ServiceUnavailableError - Store or transport unreachable (retryable)

The DRF exception handler at the bottom of this module turns these, and
Django's database connectivity errors, into the JSON error envelope used by
every endpoint:

    {"error": "...", "error_code": "...", "details": {...}, "retryable": bool}

Usage:
    from core.exceptions import NotFoundError

    raise NotFoundError(
        "Conversation not found",
        error_code="CONVERSATION_NOT_FOUND",
        details={"conversation_id": conversation_id},
    )

Note:
    These exceptions are for domain/business logic errors.
    DRF handles API-layer exceptions (serialization, authentication, etc.).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.db import InterfaceError, OperationalError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

if TYPE_CHECKING:
    from typing import Any

logger = logging.getLogger(__name__)


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional error context (field errors, metadata, etc.)
    """

    default_error_code: str = "APPLICATION_ERROR"
    status_code: int = status.HTTP_400_BAD_REQUEST
    retryable: bool = False

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for API response.

        Example:
            {
                "error": "Conversation not found",
                "error_code": "CONVERSATION_NOT_FOUND",
                "details": {"conversation_id": 123}
            }
        """
        result: dict[str, Any] = {
            "error": self.message,
            "error_code": self.error_code,
        }
        if self.details:
            result["details"] = self.details
        if self.retryable:
            result["retryable"] = True
        return result

    def __str__(self) -> str:
        """Return string representation with error code."""
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class ValidationError(BaseApplicationError):
    """
    Raised when input validation fails.

    Use for service-layer validation that cannot be expressed as a
    serializer rule (empty message body, missing listing).
    """

    default_error_code: str = "VALIDATION_ERROR"


class NotFoundError(BaseApplicationError):
    """Raised when a requested resource is not found."""

    default_error_code: str = "NOT_FOUND"
    status_code: int = status.HTTP_404_NOT_FOUND


class PermissionDeniedError(BaseApplicationError):
    """
    Raised when user lacks permission for an operation.

    For authentication failures (missing/invalid token), use DRF's
    AuthenticationFailed. Use this for authorization failures such as
    reading a conversation one is not a member of.
    """

    default_error_code: str = "PERMISSION_DENIED"
    status_code: int = status.HTTP_403_FORBIDDEN


class ServiceUnavailableError(BaseApplicationError):
    """
    Raised when the store or the real-time transport cannot be reached.

    Callers may retry; nothing is retried automatically.
    """

    default_error_code: str = "SERVICE_UNAVAILABLE"
    status_code: int = status.HTTP_503_SERVICE_UNAVAILABLE
    retryable: bool = True


def api_exception_handler(exc, context):
    """
    DRF exception handler producing the application error envelope.

    Order of resolution:
        1. BaseApplicationError subclasses use their own status_code
        2. Database connectivity errors become a retryable 503
        3. Everything else falls through to DRF's default handler

    Registered via REST_FRAMEWORK["EXCEPTION_HANDLER"].
    """
    if isinstance(exc, BaseApplicationError):
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(f"Application error: {exc}")
        return Response(exc.to_dict(), status=exc.status_code)

    if isinstance(exc, (OperationalError, InterfaceError)):
        logger.error(f"Store unavailable: {exc}", exc_info=True)
        unavailable = ServiceUnavailableError(
            "The message store is temporarily unavailable. Please retry.",
            error_code="STORE_UNAVAILABLE",
        )
        return Response(unavailable.to_dict(), status=unavailable.status_code)

    return exception_handler(exc, context)
