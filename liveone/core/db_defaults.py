"""Database-aware helpers for SQL column defaults."""

import uuid

from sqlalchemy.sql import text


def timestamp_default():
    """Return a server-side timestamp default portable across dialects."""
    return text("CURRENT_TIMESTAMP")


def uuid_default() -> str:
    """Return a new string UUID for text primary keys (matches managed auth ids)."""
    return str(uuid.uuid4())


__all__ = ["timestamp_default", "uuid_default"]
