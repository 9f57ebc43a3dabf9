"""Application settings loaded from environment with safe fallbacks.

Environment precedence:
- Loads `.env` from the repo root before reading process env vars.
- Most values are pulled straight from env; booleans go through `_env_flag` so `"0"/"false"` work.
- List values (`MODERATOR_EMAILS`) are comma-separated strings normalized once in `__init__`.

Key expectations (defaults in parentheses):
- `APP_ENV` controls settings class selection (`production` default).
- Database: `DATABASE_URL`, with `TEST_DATABASE_URL` (or a `_test` derivation) used in tests.
- Backend: `MODERATION_BACKEND` picks `sqlalchemy` (default) or `supabase`; the latter needs
  `SUPABASE_URL` and `SUPABASE_SERVICE_ROLE_KEY`.
- CSRF: `CSRF_PROTECTION` (off) guards mutating endpoints with the server-side token check.
"""

import logging
import os
from pathlib import Path
from typing import ClassVar, Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

# Base directory of the project; used for resolving relative paths reliably.
# (__file__ is liveone/core/config/settings.py, so we need to traverse three levels up)
BASE_DIR = Path(__file__).resolve().parents[3]


load_dotenv(BASE_DIR / ".env")

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

SUPPORTED_BACKENDS = {"sqlalchemy", "supabase"}


def _env_flag(name: str, *, default: Optional[bool] = False) -> Optional[bool]:
    """
    Helper to parse boolean-like environment variables.
    """
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "yes", "on"}


def _split_csv(raw: Optional[str]) -> list[str]:
    return [item.strip() for item in (raw or "").split(",") if item.strip()]


class Settings(BaseSettings):
    """Application configuration loaded from environment variables.

    Behavior highlights:
    - Loads `.env` at repo root, then lets process env override.
    - Prefers `DATABASE_URL`; tests get a dedicated `_test` database or local SQLite.
    - Feature toggles parsed via `_env_flag` to accept common truthy/falsey strings.
    - Supabase credentials are only required when the Supabase backend is selected.
    """

    model_config: ClassVar[SettingsConfigDict] = SettingsConfigDict(
        env_file=str(BASE_DIR / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = os.getenv("APP_NAME", "liveone")
    environment: str = os.getenv("APP_ENV", "production")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_dir: Optional[str] = os.getenv("LOG_DIR", "logs")
    use_json_logs: bool = _env_flag("USE_JSON_LOGS", default=True)

    database_url: Optional[str] = os.getenv("DATABASE_URL")
    test_database_url: Optional[str] = os.getenv("TEST_DATABASE_URL")

    moderation_backend: str = os.getenv("MODERATION_BACKEND", "sqlalchemy")
    supabase_url: Optional[str] = os.getenv("SUPABASE_URL")
    supabase_service_role_key: Optional[str] = os.getenv("SUPABASE_SERVICE_ROLE_KEY")

    api_prefix: str = os.getenv("API_PREFIX", "/functions/v1")
    cors_allow_origin: str = os.getenv("CORS_ALLOW_ORIGIN", "*")
    cors_allow_headers: list[str] = [
        "authorization",
        "x-client-info",
        "apikey",
        "content-type",
    ]

    # Accept raw string from env to avoid JSON parse errors; we normalize to list in __init__
    moderator_emails: Optional[str] = os.getenv("MODERATOR_EMAILS")
    ban_duration_years: int = int(os.getenv("BAN_DURATION_YEARS", 80))

    csrf_protection: bool = bool(_env_flag("CSRF_PROTECTION", default=False))
    csrf_token_ttl_seconds: int = int(os.getenv("CSRF_TOKEN_TTL_SECONDS", 24 * 3600))
    csrf_max_sessions: int = int(os.getenv("CSRF_MAX_SESSIONS", 10000))
    csrf_header_name: str = os.getenv("CSRF_HEADER_NAME", "X-CSRF-Token")
    session_cookie_name: str = os.getenv("SESSION_COOKIE_NAME", "session_id")

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        env_override = os.getenv("APP_ENV")
        if env_override:
            object.__setattr__(self, "environment", env_override)

        emails = self.moderator_emails
        if isinstance(emails, str):
            object.__setattr__(self, "moderator_emails", _split_csv(emails))
        elif emails is None:
            object.__setattr__(self, "moderator_emails", [])

        backend = (self.moderation_backend or "sqlalchemy").strip().lower()
        if backend not in SUPPORTED_BACKENDS:
            raise ValueError(
                f"Unsupported MODERATION_BACKEND {backend!r}; expected one of "
                f"{sorted(SUPPORTED_BACKENDS)}"
            )
        object.__setattr__(self, "moderation_backend", backend)
        if backend == "supabase" and not (
            self.supabase_url and self.supabase_service_role_key
        ):
            logger.warning(
                "Supabase backend selected but SUPABASE_URL/SUPABASE_SERVICE_ROLE_KEY are not set."
            )

    def get_database_url(self, *, use_test: bool = False) -> str:
        """Resolve the SQLAlchemy database URL for runtime or tests.

        Priority: `TEST_DATABASE_URL` (tests only), explicit `DATABASE_URL`, then a local
        SQLite file. Enforces dedicated test DB names to avoid destructive writes to prod data.
        """
        if use_test:
            test_url = self._resolve_test_database_url()
            if test_url.startswith("sqlite"):
                return test_url
            if "_test" not in test_url:
                raise ValueError(
                    "Test database URL must point to a dedicated test database (contains '_test')."
                )
            return test_url

        if self.database_url:
            return self.database_url

        # Fail open to local SQLite so the app can start (health checks) when env vars are missing.
        return "sqlite:///./liveone.db"

    def _resolve_test_database_url(self) -> str:
        """
        Build a test database URL.
        Priority:
        1) Explicit TEST_DATABASE_URL env.
        2) Derive from DATABASE_URL with a *_test suffix (or reuse sqlite).
        3) Fallback to sqlite for ad-hoc local runs.
        """
        if self.test_database_url:
            return self.test_database_url

        if self.database_url:
            from sqlalchemy.engine import make_url

            url = make_url(self.database_url)
            if url.drivername.startswith("sqlite"):
                return str(url)
            db_name = url.database or ""
            suffix_name = db_name if db_name.endswith("_test") else f"{db_name}_test"
            return url.set(database=suffix_name).render_as_string(hide_password=False)

        return "sqlite:///./test.db"
