"""
Custom Exception Classes for the Application
Provides a unified error handling system with proper HTTP status codes and messages.

Every exception carries a `payload` of endpoint-specific safe defaults (for example
``{"is_banned": False}``) that the error handlers merge into the JSON body next to
the ``error`` message.
"""

from typing import Any, Dict, Optional
from fastapi import HTTPException, status


class AppException(HTTPException):
    """
    Base exception class for all application exceptions.
    Provides consistent error response format.
    """

    def __init__(
        self,
        status_code: int,
        error_code: str,
        message: str,
        payload: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.error_code = error_code
        self.message = message
        self.payload = dict(payload or {})
        super().__init__(
            status_code=status_code,
            detail={"error_code": error_code, "message": message},
            headers=headers,
        )

    def with_defaults(self, defaults: Optional[Dict[str, Any]]) -> "AppException":
        """Merge safe defaults underneath any payload already set on the exception."""
        if defaults:
            self.payload = {**defaults, **self.payload}
        return self


# ==================== Validation Exceptions ====================


class InvalidRequestException(AppException):
    """Raised when the request body is missing, malformed or fails validation."""

    def __init__(self, message: str, field: Optional[str] = None, payload=None):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="invalid_request",
            message=message,
            payload=payload,
        )
        self.field = field


# ==================== Authorization Exceptions ====================


class PermissionDeniedException(AppException):
    """Raised when the caller doesn't have permission to perform an action."""

    def __init__(
        self,
        message: str = "Unauthorized - insufficient permissions",
        payload: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            error_code="permission_denied",
            message=message,
            payload=payload,
        )


class InvalidCSRFTokenException(PermissionDeniedException):
    """Raised when a protected request carries no CSRF token or the wrong one."""

    def __init__(self):
        super().__init__(message="Invalid CSRF token")
        self.error_code = "invalid_csrf_token"


# ==================== Resource Exceptions ====================


class ResourceNotFoundException(AppException):
    """Raised when a requested resource is not found."""

    def __init__(
        self,
        resource: str,
        identifier: Optional[Any] = None,
        payload: Optional[Dict[str, Any]] = None,
    ):
        self.identifier = identifier
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="resource_not_found",
            message=f"{resource} not found",
            payload=payload,
        )


# ==================== Business Logic Exceptions ====================


class BusinessLogicException(AppException):
    """Raised when a request is well-formed but conflicts with the current state."""

    def __init__(
        self,
        error_code: str,
        message: str,
        payload: Optional[Dict[str, Any]] = None,
        status_code: int = status.HTTP_400_BAD_REQUEST,
    ):
        super().__init__(
            status_code=status_code,
            error_code=error_code,
            message=message,
            payload=payload,
        )


class UserNotBannedException(BusinessLogicException):
    def __init__(self):
        super().__init__(error_code="user_not_banned", message="User is not banned")


class UserAlreadyBannedException(BusinessLogicException):
    def __init__(self):
        super().__init__(
            error_code="user_already_banned", message="User is already banned"
        )


# ==================== External Service Exceptions ====================


class BackendFailureException(AppException):
    """Raised when the managed backend (auth or data store) fails."""

    def __init__(
        self,
        message: str = "Internal server error",
        payload: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code="backend_error",
            message=message,
            payload=payload,
        )


# ==================== Helper Functions ====================


def raise_not_found(resource: str, identifier: Optional[Any] = None, payload=None):
    """Helper function to raise ResourceNotFoundException."""
    raise ResourceNotFoundException(resource, identifier, payload=payload)
