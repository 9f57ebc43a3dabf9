# ruff: noqa: E402
import os
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import pytest
from sqlalchemy.engine import make_url

# Set testing environment flags before importing the app or settings
os.environ["APP_ENV"] = "test"
os.environ.setdefault("TEST_DATABASE_URL", "sqlite:///./tests/test.db")
os.environ["MODERATION_BACKEND"] = "sqlalchemy"
os.environ["CSRF_PROTECTION"] = "0"
os.environ["MODERATOR_EMAILS"] = ""

from liveone.backends.sqlalchemy_backend import SqlAlchemyBackend
from liveone.core.app_factory import create_app
from liveone.core.config import settings
from liveone.core.database import Base, build_engine, build_session_factory
from liveone.modules.moderation.models import BannedUser
from liveone.modules.notifications.models import Notification
from liveone.modules.users.models import AuthUser, Profile
from tests.testclient import TestClient


class AttrDict(dict):
    """Dict with attribute-style access for fixtures."""

    def __getattr__(self, item: str) -> Any:
        try:
            return self[item]
        except KeyError as exc:
            raise AttributeError(item) from exc


test_db_url = settings.get_database_url(use_test=True)

# Safety: never run tests against a non-test Postgres database.
parsed_url = make_url(test_db_url)
if parsed_url.drivername.startswith("postgresql") and not (
    parsed_url.database or ""
).endswith("_test"):
    raise RuntimeError(
        f"Refusing to run tests against non-test database '{parsed_url.database}'. "
        "Set TEST_DATABASE_URL to a dedicated *_test database."
    )

engine = build_engine(test_db_url)
TestingSessionLocal = build_session_factory(engine)
Base.metadata.drop_all(bind=engine)
Base.metadata.create_all(bind=engine)


# Autouse cleanup to keep DB isolated across all tests.
@pytest.fixture(autouse=True, scope="function")
def _clean_db_between_tests():
    with engine.begin() as connection:
        for table in reversed(Base.metadata.sorted_tables):
            connection.execute(table.delete())
    yield


@pytest.fixture(scope="function")
def session():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="function")
def backend():
    return SqlAlchemyBackend(TestingSessionLocal)


@pytest.fixture(scope="function")
def app(backend):
    return create_app(app_settings=settings, backend=backend)


@pytest.fixture(scope="function")
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture(scope="function")
def api_url():
    def _url(name: str) -> str:
        return f"{settings.api_prefix}/{name}"

    return _url


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@pytest.fixture(scope="function")
def make_user(session):
    """Create an identity, and by default its profile, in the test database."""
    counter = {"n": 0}

    def _make_user(
        role: str = "user",
        *,
        banned_until: Optional[datetime] = None,
        username: Optional[str] = None,
        email: Optional[str] = None,
        with_profile: bool = True,
        created_at: Optional[datetime] = None,
        user_metadata: Optional[dict] = None,
    ) -> AttrDict:
        counter["n"] += 1
        n = counter["n"]
        email = email or f"{role}{n}@liveone.test"
        created_at = created_at or (_utcnow() - timedelta(days=365) + timedelta(minutes=n))
        identity = AuthUser(
            email=email,
            banned_until=banned_until,
            user_metadata=user_metadata or {},
            created_at=created_at,
        )
        session.add(identity)
        session.flush()
        if with_profile:
            session.add(
                Profile(
                    id=identity.id,
                    email=email,
                    username=username if username is not None else f"{role}_{n}",
                    avatar_url=f"https://cdn.liveone.test/avatars/{n}.png",
                    role=role,
                    created_at=created_at,
                )
            )
        session.commit()
        return AttrDict(id=identity.id, email=email, role=role)

    return _make_user


@pytest.fixture(scope="function")
def ban(session):
    """Mark an existing user as banned with a ban record."""

    def _ban(user_id: str, admin_id: Optional[str] = None, *, days: int = 30):
        banned_until = _utcnow() + timedelta(days=days)
        session.query(AuthUser).filter(AuthUser.id == user_id).update(
            {"banned_until": banned_until}
        )
        session.add(BannedUser(user_id=user_id, admin_id=admin_id, reason="spam"))
        session.commit()
        return banned_until

    return _ban


@pytest.fixture(scope="function")
def admin(make_user):
    return make_user("admin")


@pytest.fixture(scope="function")
def moderator(make_user):
    return make_user("moderator")


@pytest.fixture(scope="function")
def regular_user(make_user):
    return make_user("user")


@pytest.fixture(scope="function")
def banned_user(make_user, ban, admin):
    user = make_user("user", username="troll")
    user["banned_until"] = ban(user.id, admin.id)
    return user


@pytest.fixture(scope="function")
def notification(session, regular_user):
    record = Notification(
        user_id=regular_user.id,
        message="Someone liked your post",
        action_type="like",
        action_id="post-1",
    )
    session.add(record)
    session.commit()
    return AttrDict(id=record.id, user_id=regular_user.id)
