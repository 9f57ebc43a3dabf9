"""Security helpers: CSRF token lifecycle and XSS-safe content rendering."""

from .content import escape_text, render_user_content, sanitize_html, strip_tags
from .csrf import (
    CSRFTokenMissingError,
    CSRFTokenStore,
    SecureForm,
    generate_csrf_token,
)

__all__ = [
    "CSRFTokenMissingError",
    "CSRFTokenStore",
    "SecureForm",
    "generate_csrf_token",
    "escape_text",
    "render_user_content",
    "sanitize_html",
    "strip_tags",
]
