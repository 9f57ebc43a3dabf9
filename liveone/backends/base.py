"""Query interface over the managed auth store and relational data store.

Services only talk to a `ModerationBackend`; the concrete implementation decides
whether identities and tables live in a SQL database reached through SQLAlchemy or in
a managed Supabase project. Every method is synchronous and safe to call from a
worker thread. Failures are raised as `BackendError`.
"""

from __future__ import annotations

import abc
from datetime import datetime
from typing import List, Optional

from liveone.modules.moderation.schemas import BanRecord
from liveone.modules.users.schemas import ProfileRecord, UserIdentity


class BackendError(Exception):
    """The auth store or data store could not complete an operation."""


class ConflictError(BackendError):
    """A write collided with an existing row (unique constraint)."""


class ModerationBackend(abc.ABC):
    # ---------------------------------------------------------- identities
    @abc.abstractmethod
    def get_identity(self, user_id: str) -> Optional[UserIdentity]:
        """Return the identity for `user_id`, or None when it does not exist."""

    @abc.abstractmethod
    def list_identities(self) -> List[UserIdentity]:
        """Return every identity in the auth store."""

    # ------------------------------------------------------------ profiles
    @abc.abstractmethod
    def get_profile(self, user_id: str) -> Optional[ProfileRecord]: ...

    @abc.abstractmethod
    def find_profile_by_email(self, email: str) -> Optional[ProfileRecord]: ...

    @abc.abstractmethod
    def create_profile(self, profile: ProfileRecord) -> ProfileRecord: ...

    @abc.abstractmethod
    def update_profile_role(self, user_id: str, role: str) -> None: ...

    @abc.abstractmethod
    def get_earliest_admin(self) -> Optional[ProfileRecord]:
        """Return the admin profile with the oldest `created_at`."""

    # ---------------------------------------------------------------- bans
    @abc.abstractmethod
    def get_ban_record(self, user_id: str) -> Optional[BanRecord]: ...

    @abc.abstractmethod
    def apply_ban(self, record: BanRecord, banned_until: datetime) -> BanRecord:
        """Store the ban record and set the identity's `banned_until` together."""

    @abc.abstractmethod
    def clear_ban(self, user_id: str) -> None:
        """Delete the ban record and clear the identity's `banned_until` together.

        Must leave no partially-unbanned state behind and be safe to retry.
        """

    # -------------------------------------------------------- notifications
    @abc.abstractmethod
    def mark_notification_read(self, notification_id: str) -> bool:
        """Set `read` on the notification; return False when no record matched."""

    # --------------------------------------------------------------- health
    @abc.abstractmethod
    def ping(self) -> None:
        """Raise `BackendError` when the backend is unreachable."""


__all__ = ["BackendError", "ModerationBackend"]
