"""XSS-safe rendering helpers for user-supplied content.

HTML is cleaned against an allow-list of tags and attributes; everything else is
rendered as escaped text so no markup is interpreted.
"""

from __future__ import annotations

import html
from typing import Iterable, Mapping, Optional

import bleach

ALLOWED_TAGS = frozenset(
    {
        "a",
        "b",
        "blockquote",
        "br",
        "code",
        "em",
        "i",
        "li",
        "ol",
        "p",
        "pre",
        "strong",
        "u",
        "ul",
    }
)
ALLOWED_ATTRIBUTES: Mapping[str, list[str]] = {"a": ["href", "title", "rel"]}
ALLOWED_PROTOCOLS = frozenset({"http", "https", "mailto"})


def sanitize_html(
    content: Optional[str],
    allowed_tags: Optional[Iterable[str]] = None,
    allowed_attributes: Optional[Mapping[str, list[str]]] = None,
) -> str:
    """Return `content` with every tag and attribute outside the allow-list stripped."""
    tags = ALLOWED_TAGS if allowed_tags is None else frozenset(allowed_tags)
    attributes = ALLOWED_ATTRIBUTES if allowed_attributes is None else allowed_attributes
    return bleach.clean(
        content or "",
        tags=tags,
        attributes=attributes,
        protocols=ALLOWED_PROTOCOLS,
        strip=True,
        strip_comments=True,
    )


def escape_text(text: Optional[str]) -> str:
    """Escape all markup so the text renders literally."""
    return html.escape(text or "", quote=True)


def strip_tags(text: Optional[str]) -> str:
    """Remove all markup and return plain text."""
    stripped = bleach.clean(text or "", tags=set(), attributes={}, strip=True)
    return html.unescape(stripped)


def render_user_content(content: Optional[str], *, allow_html: bool = False) -> str:
    """Render user content for injection into a page; plain text unless HTML is allowed."""
    if allow_html:
        return sanitize_html(content)
    return escape_text(content)


__all__ = [
    "ALLOWED_TAGS",
    "ALLOWED_ATTRIBUTES",
    "sanitize_html",
    "escape_text",
    "strip_tags",
    "render_user_content",
]
