"""SQLAlchemy models for the notifications domain."""

from __future__ import annotations

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, String, Text

from liveone.core.db_defaults import timestamp_default, uuid_default
from liveone.models.base import Base
from liveone.models.tables import AUTH_USERS_TABLE, NOTIFICATIONS_TABLE


class Notification(Base):
    __tablename__ = NOTIFICATIONS_TABLE

    id = Column(String(36), primary_key=True, default=uuid_default)
    user_id = Column(
        String(36),
        ForeignKey(f"{AUTH_USERS_TABLE}.id", ondelete="CASCADE"),
        nullable=False,
    )
    message = Column(Text, nullable=False)
    action_type = Column(String, nullable=True)
    action_id = Column(String, nullable=True)
    sender_id = Column(String(36), nullable=True)
    sender_username = Column(String, nullable=True)
    sender_avatar_url = Column(String, nullable=True)
    read = Column(Boolean, nullable=False, default=False)
    created_at = Column(
        DateTime(timezone=True), nullable=False, server_default=timestamp_default()
    )

    __table_args__ = (Index("ix_notifications_user_read", "user_id", "read"),)
