"""SQLAlchemy models and enums for the users domain.

`AuthUser` mirrors the managed auth store's identity record; `Profile` is the
display record keyed by the same id.
"""

from __future__ import annotations

import enum

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, String

from liveone.core.db_defaults import timestamp_default, uuid_default
from liveone.models.base import Base
from liveone.models.tables import AUTH_USERS_TABLE, PROFILES_TABLE


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    MODERATOR = "moderator"
    USER = "user"


STAFF_ROLES = frozenset({UserRole.ADMIN.value, UserRole.MODERATOR.value})


class AuthUser(Base):
    __tablename__ = AUTH_USERS_TABLE

    id = Column(String(36), primary_key=True, default=uuid_default)
    email = Column(String, unique=True, index=True, nullable=True)
    role = Column(String, nullable=False, default="authenticated")
    is_online = Column(Boolean, nullable=False, default=False)
    banned_until = Column(DateTime(timezone=True), nullable=True)
    user_metadata = Column(JSON, nullable=True)
    created_at = Column(
        DateTime(timezone=True), nullable=False, server_default=timestamp_default()
    )


class Profile(Base):
    __tablename__ = PROFILES_TABLE

    id = Column(
        String(36),
        ForeignKey(f"{AUTH_USERS_TABLE}.id", ondelete="CASCADE"),
        primary_key=True,
    )
    email = Column(String, index=True, nullable=True)
    username = Column(String, nullable=True)
    avatar_url = Column(String, nullable=True)
    role = Column(String, nullable=False, default=UserRole.USER.value, index=True)
    created_at = Column(
        DateTime(timezone=True), nullable=False, server_default=timestamp_default()
    )
