"""SQLAlchemy models for the moderation domain."""

from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text

from liveone.core.db_defaults import timestamp_default
from liveone.models.base import Base
from liveone.models.tables import AUTH_USERS_TABLE, BANNED_USERS_TABLE


class BannedUser(Base):
    """Ban record; the identity's `banned_until` is the authoritative expiry."""

    __tablename__ = BANNED_USERS_TABLE

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        String(36),
        ForeignKey(f"{AUTH_USERS_TABLE}.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    admin_id = Column(
        String(36),
        ForeignKey(f"{AUTH_USERS_TABLE}.id", ondelete="SET NULL"),
        nullable=True,
    )
    reason = Column(Text, nullable=True)
    banned_at = Column(
        DateTime(timezone=True), nullable=False, server_default=timestamp_default()
    )
