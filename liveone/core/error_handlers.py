"""
Global Exception Handlers for the Application
Provides unified error response format and logging.

Every failure is rendered as ``{"error": <message>, **payload}`` where the payload
holds the endpoint's safe defaults (``is_banned: false``, ``ban_info: null``, ...).
"""

import logging
from functools import wraps
from typing import Any, Awaitable, Callable, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from liveone.backends.base import BackendError
from liveone.core.exceptions import AppException, BackendFailureException

logger = logging.getLogger(__name__)


def create_error_response(
    status_code: int,
    message: str,
    payload: Optional[dict] = None,
    headers: Optional[dict] = None,
) -> JSONResponse:
    """
    Create a standardized error response.

    Args:
        status_code: HTTP status code
        message: Human-readable error message
        payload: Safe default fields returned alongside the error
        headers: Extra response headers

    Returns:
        JSONResponse with standardized error format
    """
    content = {"error": message}
    if payload:
        content.update(payload)

    return JSONResponse(status_code=status_code, content=content, headers=headers)


def handle_exceptions(
    failure_message: str = "Internal server error", **defaults: Any
) -> Callable[[Callable[..., Awaitable[Any]]], Callable[..., Awaitable[Any]]]:
    """Decorator that attaches an endpoint's safe defaults to every failure it raises.

    Application exceptions keep their status and message; backend failures and any
    other unexpected error are logged and turned into a 500 carrying ``failure_message``.
    """

    def decorator(func: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[Any]]:
        @wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except AppException as exc:
                raise exc.with_defaults(defaults)
            except BackendError as exc:
                logger.error("Backend failure in %s: %s", func.__name__, exc)
                raise BackendFailureException(failure_message, payload=defaults) from exc
            except Exception as exc:
                logger.exception("Unhandled exception in endpoint: %s", func.__name__)
                raise BackendFailureException(failure_message, payload=defaults) from exc

        return wrapper

    return decorator


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register all exception handlers for the application.

    Args:
        app: FastAPI application instance
    """

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException):
        """Handle custom application exceptions."""
        log = logger.error if exc.status_code >= 500 else logger.info
        log(
            f"AppException: {exc.error_code} - {exc.message}",
            extra={
                "path": request.url.path,
                "method": request.method,
                "error_code": exc.error_code,
            },
        )

        return create_error_response(
            status_code=exc.status_code,
            message=exc.message,
            payload=exc.payload,
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ):
        """Handle request validation errors raised by FastAPI itself."""
        fields = [
            ".".join(str(loc) for loc in error["loc"] if loc != "body")
            for error in exc.errors()
        ]
        logger.warning(
            f"Validation error on {request.url.path}",
            extra={"path": request.url.path, "method": request.method},
        )

        return create_error_response(
            status_code=status.HTTP_400_BAD_REQUEST,
            message=f"Invalid request: {', '.join(f for f in fields if f) or 'body'}",
        )

    @app.exception_handler(BackendError)
    async def backend_exception_handler(request: Request, exc: BackendError):
        """Handle backend errors that escaped an endpoint without a decorator."""
        logger.error(
            f"Backend error: {exc}",
            extra={"path": request.url.path, "method": request.method},
        )

        return create_error_response(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            message="Internal server error",
        )
