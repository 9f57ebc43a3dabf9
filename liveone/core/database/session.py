"""Database engine and session management utilities.

- Builds per-backend engine kwargs (SQLite vs Postgres) with safe pooling defaults.
- Derives the URL from settings, using the test database automatically when APP_ENV=test.
- Exposes `SessionLocal` and the session factory builder shared with the moderation backend.
"""

from __future__ import annotations

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool

from liveone.core.config import settings


def _engine_kwargs(database_url: str) -> dict:
    """Return engine keyword arguments tuned per backend (SQLite vs pooled Postgres)."""
    url = make_url(database_url)
    if url.drivername.startswith("sqlite"):
        return {
            "pool_pre_ping": True,
            "connect_args": {"check_same_thread": False},
            "poolclass": NullPool,
        }
    return {
        "pool_pre_ping": True,
        "pool_size": 20,
        "max_overflow": 10,
        "pool_recycle": 300,
        "connect_args": {
            "options": "-c timezone=utc",
            "application_name": settings.app_name,
            "connect_timeout": 10,
        },
    }


def build_engine(database_url: str | None = None) -> Engine:
    """Create a SQLAlchemy engine using application settings by default.

    Respects APP_ENV=test by choosing the test DSN to protect production data.
    """
    if database_url is None:
        use_test_url = settings.environment.lower() == "test"
        database_url = settings.get_database_url(use_test=use_test_url)
    return create_engine(database_url, **_engine_kwargs(database_url))


def build_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(
        autocommit=False, autoflush=False, expire_on_commit=False, bind=bind
    )


engine: Engine = build_engine()

SessionLocal = build_session_factory(engine)

