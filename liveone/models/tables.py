"""Table names shared by the ORM models and the Supabase adapter."""

AUTH_USERS_TABLE = "auth_users"
PROFILES_TABLE = "profiles"
BANNED_USERS_TABLE = "banned_users"
NOTIFICATIONS_TABLE = "notifications"

PROFILE_COLUMNS = "id, email, username, avatar_url, role, created_at"
BAN_RECORD_COLUMNS = "id, user_id, admin_id, reason, banned_at"

__all__ = [
    "AUTH_USERS_TABLE",
    "PROFILES_TABLE",
    "BANNED_USERS_TABLE",
    "NOTIFICATIONS_TABLE",
    "PROFILE_COLUMNS",
    "BAN_RECORD_COLUMNS",
]
