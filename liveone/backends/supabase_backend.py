"""Supabase backend: auth admin API for identities, PostgREST tables for everything else.

Supabase offers no transaction spanning the auth store and the tables, so the two-step
ban mutations use a compensating action: when the second step fails the first one is
reverted before the error propagates. Both steps are idempotent, so a retried request
converges on the intended state.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from supabase import Client, create_client

from liveone.backends.base import BackendError, ConflictError, ModerationBackend
from liveone.models.tables import (
    BAN_RECORD_COLUMNS,
    BANNED_USERS_TABLE,
    NOTIFICATIONS_TABLE,
    PROFILE_COLUMNS,
    PROFILES_TABLE,
)
from liveone.modules.moderation.schemas import BanRecord
from liveone.modules.moderation.service import is_banned
from liveone.modules.users.models import UserRole
from liveone.modules.users.schemas import ProfileRecord, UserIdentity

logger = logging.getLogger(__name__)

LIST_USERS_PAGE_SIZE = 1000
UNBAN_DURATION = "none"
# Postgres SQLSTATE reported by PostgREST for duplicate keys
UNIQUE_VIOLATION = "23505"


def _ban_duration(banned_until: datetime) -> str:
    """Translate an absolute ban end into the auth API's relative duration string."""
    if banned_until.tzinfo is None:
        banned_until = banned_until.replace(tzinfo=timezone.utc)
    hours = (banned_until - datetime.now(timezone.utc)).total_seconds() / 3600
    return f"{max(int(hours), 1)}h"


def _is_not_found(exc: Exception) -> bool:
    return getattr(exc, "status", None) == 404 or getattr(exc, "code", None) in (
        404,
        "user_not_found",
    )


def _as_dict(obj: Any) -> Dict[str, Any]:
    if obj is None:
        return {}
    if isinstance(obj, dict):
        return obj
    if hasattr(obj, "model_dump"):
        return obj.model_dump()
    return dict(vars(obj))


def _to_identity(user: Any) -> UserIdentity:
    data = _as_dict(user)
    metadata = data.get("user_metadata") or {}
    return UserIdentity(
        id=str(data["id"]),
        email=data.get("email"),
        role=data.get("role"),
        is_online=bool(metadata.get("is_online", False)),
        banned_until=data.get("banned_until"),
        user_metadata=metadata,
        created_at=data.get("created_at"),
    )


class SupabaseBackend(ModerationBackend):
    """Adapter over a service-role Supabase client."""

    def __init__(self, client: Client):
        self.client = client

    @classmethod
    def from_settings(cls, settings) -> "SupabaseBackend":
        if not (settings.supabase_url and settings.supabase_service_role_key):
            raise BackendError(
                "SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY are required for the supabase backend"
            )
        return cls(
            create_client(settings.supabase_url, settings.supabase_service_role_key)
        )

    def _table(self, name: str):
        return self.client.table(name)

    def _single(self, query) -> Optional[Dict[str, Any]]:
        # maybe_single() yields None instead of a response when no row matches
        response = query.maybe_single().execute()
        if response is None:
            return None
        return response.data or None

    # ---------------------------------------------------------- identities
    def get_identity(self, user_id: str) -> Optional[UserIdentity]:
        try:
            response = self.client.auth.admin.get_user_by_id(user_id)
        except Exception as exc:
            if _is_not_found(exc):
                return None
            raise BackendError(f"Failed to fetch user {user_id}: {exc}") from exc
        user = getattr(response, "user", None)
        return _to_identity(user) if user else None

    def list_identities(self) -> List[UserIdentity]:
        identities: List[UserIdentity] = []
        page = 1
        try:
            while True:
                users = self.client.auth.admin.list_users(
                    page=page, per_page=LIST_USERS_PAGE_SIZE
                )
                identities.extend(_to_identity(user) for user in users)
                if len(users) < LIST_USERS_PAGE_SIZE:
                    break
                page += 1
        except Exception as exc:
            raise BackendError(f"Failed to list users: {exc}") from exc
        return identities

    # ------------------------------------------------------------ profiles
    def get_profile(self, user_id: str) -> Optional[ProfileRecord]:
        try:
            row = self._single(
                self._table(PROFILES_TABLE).select(PROFILE_COLUMNS).eq("id", user_id)
            )
        except Exception as exc:
            raise BackendError(f"Failed to fetch profile {user_id}: {exc}") from exc
        return ProfileRecord.model_validate(row) if row else None

    def find_profile_by_email(self, email: str) -> Optional[ProfileRecord]:
        try:
            response = (
                self._table(PROFILES_TABLE)
                .select(PROFILE_COLUMNS)
                .eq("email", email)
                .limit(1)
                .execute()
            )
        except Exception as exc:
            raise BackendError(f"Failed to look up profile {email}: {exc}") from exc
        rows = response.data or []
        return ProfileRecord.model_validate(rows[0]) if rows else None

    def create_profile(self, profile: ProfileRecord) -> ProfileRecord:
        payload = profile.model_dump(exclude={"created_at"}, exclude_none=True)
        try:
            response = self._table(PROFILES_TABLE).insert(payload).execute()
        except Exception as exc:
            raise BackendError(f"Failed to create profile {profile.id}: {exc}") from exc
        rows = response.data or []
        return ProfileRecord.model_validate(rows[0]) if rows else profile

    def update_profile_role(self, user_id: str, role: str) -> None:
        try:
            self._table(PROFILES_TABLE).update({"role": role}).eq("id", user_id).execute()
        except Exception as exc:
            raise BackendError(f"Failed to update role for {user_id}: {exc}") from exc

    def get_earliest_admin(self) -> Optional[ProfileRecord]:
        try:
            response = (
                self._table(PROFILES_TABLE)
                .select(PROFILE_COLUMNS)
                .eq("role", UserRole.ADMIN.value)
                .order("created_at")
                .limit(1)
                .execute()
            )
        except Exception as exc:
            raise BackendError(f"Failed to look up admins: {exc}") from exc
        rows = response.data or []
        return ProfileRecord.model_validate(rows[0]) if rows else None

    # ---------------------------------------------------------------- bans
    def get_ban_record(self, user_id: str) -> Optional[BanRecord]:
        try:
            row = self._single(
                self._table(BANNED_USERS_TABLE)
                .select(BAN_RECORD_COLUMNS)
                .eq("user_id", user_id)
            )
        except Exception as exc:
            raise BackendError(f"Failed to fetch ban record {user_id}: {exc}") from exc
        return BanRecord.model_validate(row) if row else None

    def _set_ban_duration(self, user_id: str, duration: str) -> None:
        self.client.auth.admin.update_user_by_id(user_id, {"ban_duration": duration})

    def apply_ban(self, record: BanRecord, banned_until: datetime) -> BanRecord:
        payload = record.model_dump(exclude={"id"}, exclude_none=True, mode="json")
        try:
            response = self._table(BANNED_USERS_TABLE).insert(payload).execute()
        except Exception as exc:
            if getattr(exc, "code", None) == UNIQUE_VIOLATION:
                raise ConflictError(
                    f"Ban record already exists for {record.user_id}"
                ) from exc
            raise BackendError(f"Failed to record ban for {record.user_id}: {exc}") from exc

        rows = response.data or []
        stored = BanRecord.model_validate(rows[0]) if rows else record
        try:
            self._set_ban_duration(record.user_id, _ban_duration(banned_until))
        except Exception as exc:
            logger.error(
                "Ban of %s failed in auth store; removing ban record: %s",
                record.user_id,
                exc,
            )
            self._table(BANNED_USERS_TABLE).delete().eq(
                "user_id", record.user_id
            ).execute()
            raise BackendError(f"Failed to ban user {record.user_id}: {exc}") from exc
        return stored

    def clear_ban(self, user_id: str) -> None:
        identity = self.get_identity(user_id)
        previous = identity.banned_until if identity else None
        try:
            self._set_ban_duration(user_id, UNBAN_DURATION)
        except Exception as exc:
            raise BackendError(f"Failed to unban user {user_id}: {exc}") from exc

        try:
            self._table(BANNED_USERS_TABLE).delete().eq("user_id", user_id).execute()
        except Exception as exc:
            logger.error("Deleting ban record for %s failed: %s", user_id, exc)
            if is_banned(previous):
                self._restore_ban(user_id, previous, exc)
            raise BackendError(
                f"Failed to delete ban record for {user_id}: {exc}"
            ) from exc

    def _restore_ban(
        self, user_id: str, banned_until: datetime, cause: Exception
    ) -> None:
        try:
            self._set_ban_duration(user_id, _ban_duration(banned_until))
        except Exception as exc:
            logger.critical(
                "Could not restore ban for %s after failed unban: %s", user_id, exc
            )
            raise BackendError(
                f"Failed to delete ban record for {user_id}: {cause}; "
                f"restoring the ban also failed: {exc}"
            ) from exc
        logger.info("Restored ban for %s until %s", user_id, banned_until)

    # -------------------------------------------------------- notifications
    def mark_notification_read(self, notification_id: str) -> bool:
        try:
            response = (
                self._table(NOTIFICATIONS_TABLE)
                .update({"read": True})
                .eq("id", notification_id)
                .execute()
            )
        except Exception as exc:
            raise BackendError(
                f"Failed to mark notification {notification_id} as read: {exc}"
            ) from exc
        return bool(response.data)

    # --------------------------------------------------------------- health
    def ping(self) -> None:
        try:
            self._table(PROFILES_TABLE).select("id").limit(1).execute()
        except Exception as exc:
            raise BackendError(f"Supabase unreachable: {exc}") from exc


__all__ = ["SupabaseBackend"]
