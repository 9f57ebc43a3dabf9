"""CSRF token lifecycle.

`CSRFTokenStore` is created once per application (see the app factory) and injected
wherever tokens are issued or checked. Tokens live per session for a bounded TTL and
are dropped on logout. Validation compares the token value, never just its presence.

`SecureForm` is the form-side helper: it makes sure a token exists when the form is
mounted, renders it as a hidden field, and refuses to submit without one.
"""

from __future__ import annotations

import logging
import secrets
import threading
from typing import Any, Callable, Dict, Optional, TypeVar

from cachetools import TTLCache

from liveone.modules.security.content import escape_text

logger = logging.getLogger(__name__)

CSRF_FIELD_NAME = "csrf_token"
TOKEN_BYTES = 32

T = TypeVar("T")


def generate_csrf_token() -> str:
    """Return a fresh URL-safe anti-forgery token."""
    return secrets.token_urlsafe(TOKEN_BYTES)


class CSRFTokenMissingError(RuntimeError):
    """Raised by `SecureForm.submit` when no token is available."""

    def __init__(self, message: str = "Security error: missing CSRF token"):
        super().__init__(message)


class CSRFTokenStore:
    """Session-keyed token storage with TTL expiry."""

    def __init__(self, ttl_seconds: int = 24 * 3600, max_sessions: int = 10000):
        self._tokens: TTLCache = TTLCache(maxsize=max_sessions, ttl=ttl_seconds)
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._tokens)

    def get(self, session_id: str) -> Optional[str]:
        if not session_id:
            return None
        with self._lock:
            return self._tokens.get(session_id)

    def store(self, session_id: str, token: str) -> None:
        with self._lock:
            self._tokens[session_id] = token

    def issue(self, session_id: str) -> str:
        """Return the session's token, generating one only if none exists."""
        if not session_id:
            raise ValueError("session_id is required to issue a CSRF token")
        with self._lock:
            token = self._tokens.get(session_id)
            if token is None:
                token = generate_csrf_token()
                self._tokens[session_id] = token
                logger.debug("Issued CSRF token for session %s", session_id[:8])
            return token

    def validate(self, session_id: Optional[str], token: Optional[str]) -> bool:
        if not session_id or not token:
            return False
        expected = self.get(session_id)
        if expected is None:
            return False
        return secrets.compare_digest(expected.encode(), token.encode())

    def clear(self, session_id: str) -> None:
        with self._lock:
            self._tokens.pop(session_id, None)

    def clear_all(self) -> None:
        with self._lock:
            self._tokens.clear()


class SecureForm:
    """Form helper that always submits with the session's CSRF token attached."""

    def __init__(
        self,
        store: CSRFTokenStore,
        session_id: str,
        field_name: str = CSRF_FIELD_NAME,
    ):
        self._store = store
        self.session_id = session_id
        self.field_name = field_name
        self.token: Optional[str] = None

    def mount(self) -> str:
        self.token = self._store.issue(self.session_id)
        return self.token

    def hidden_field(self) -> str:
        return (
            f'<input type="hidden" name="{escape_text(self.field_name)}" '
            f'value="{escape_text(self.token or "")}">'
        )

    def submit(self, handler: Callable[[Dict[str, Any]], T], data: Dict[str, Any]) -> T:
        if not self.token:
            raise CSRFTokenMissingError()
        return handler({**data, self.field_name: self.token})


__all__ = [
    "CSRF_FIELD_NAME",
    "CSRFTokenMissingError",
    "CSRFTokenStore",
    "SecureForm",
    "generate_csrf_token",
]
