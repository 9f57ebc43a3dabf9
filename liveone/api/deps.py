"""Shared request dependencies.

- `json_body(model, **defaults)` parses and validates the JSON body, reporting the first
  offending field as ``Missing <field> parameter`` / ``Invalid <field> parameter``.
- `get_backend` / `get_csrf_store` hand out the application-scoped objects created in
  the app factory; tests override `get_backend` to inject fakes.
- `verify_csrf_token` guards mutating endpoints when CSRF protection is enabled. The
  token may arrive in the CSRF header or as the `csrf_token` field of the JSON body.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Type, TypeVar

import orjson
from fastapi import Request
from pydantic import BaseModel, ValidationError

from liveone.backends.base import ModerationBackend
from liveone.core.exceptions import InvalidCSRFTokenException, InvalidRequestException
from liveone.modules.security.csrf import CSRF_FIELD_NAME, CSRFTokenStore

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

_MISSING_ERROR_TYPES = {"missing", "string_too_short"}


def _describe_validation_error(exc: ValidationError) -> tuple[str, Optional[str]]:
    error = exc.errors()[0]
    field = ".".join(str(part) for part in error.get("loc", ())) or None
    if error.get("type") in _MISSING_ERROR_TYPES:
        return f"Missing {field} parameter", field
    return f"Invalid {field} parameter", field


def json_body(
    model: Type[ModelT], **defaults: Any
) -> Callable[[Request], Any]:
    """Build a dependency that returns the request body parsed into `model`."""

    async def dependency(request: Request) -> ModelT:
        raw = await request.body()
        if raw.strip():
            try:
                data = orjson.loads(raw)
            except orjson.JSONDecodeError:
                raise InvalidRequestException("Invalid JSON body", payload=defaults)
        else:
            data = {}
        if not isinstance(data, dict):
            raise InvalidRequestException("Invalid JSON body", payload=defaults)

        try:
            return model.model_validate(data)
        except ValidationError as exc:
            message, field = _describe_validation_error(exc)
            raise InvalidRequestException(message, field=field, payload=defaults)

    return dependency


def get_settings_from_app(request: Request):
    return request.app.state.settings


def get_backend(request: Request) -> ModerationBackend:
    return request.app.state.backend


def get_csrf_store(request: Request) -> CSRFTokenStore:
    return request.app.state.csrf_store


def get_session_id(request: Request) -> Optional[str]:
    return request.cookies.get(request.app.state.settings.session_cookie_name)


async def _body_csrf_token(request: Request) -> Optional[str]:
    """Read the hidden form field `SecureForm` adds to submitted data."""
    raw = await request.body()
    if not raw.strip():
        return None
    try:
        data = orjson.loads(raw)
    except orjson.JSONDecodeError:
        return None
    token = data.get(CSRF_FIELD_NAME) if isinstance(data, dict) else None
    return token if isinstance(token, str) else None


async def verify_csrf_token(request: Request) -> None:
    """Accept the token from the CSRF header or the `csrf_token` body field."""
    settings = request.app.state.settings
    if not settings.csrf_protection:
        return
    store: CSRFTokenStore = request.app.state.csrf_store
    token = request.headers.get(settings.csrf_header_name) or await _body_csrf_token(
        request
    )
    if not store.validate(get_session_id(request), token):
        logger.warning("CSRF validation failed for %s", request.url.path)
        raise InvalidCSRFTokenException()


__all__ = [
    "get_backend",
    "get_csrf_store",
    "get_session_id",
    "get_settings_from_app",
    "json_body",
    "verify_csrf_token",
]
