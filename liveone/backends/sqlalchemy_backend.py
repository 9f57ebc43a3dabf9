"""Relational backend: identities, profiles, bans and notifications in one SQL database."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, List, Optional

from sqlalchemy import select, text, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from liveone.backends.base import BackendError, ConflictError, ModerationBackend
from liveone.modules.moderation.models import BannedUser
from liveone.modules.moderation.schemas import BanRecord
from liveone.modules.notifications.models import Notification
from liveone.modules.users.models import AuthUser, Profile, UserRole
from liveone.modules.users.schemas import ProfileRecord, UserIdentity

logger = logging.getLogger(__name__)


class SqlAlchemyBackend(ModerationBackend):
    """Each call opens its own short-lived session from `session_factory`."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    @contextmanager
    def _session(self) -> Iterator[Session]:
        try:
            with self._session_factory() as db:
                yield db
        except SQLAlchemyError as exc:
            raise BackendError(str(exc)) from exc

    @contextmanager
    def _transaction(self) -> Iterator[Session]:
        try:
            with self._session_factory.begin() as db:
                yield db
        except IntegrityError as exc:
            raise ConflictError(str(exc)) from exc
        except SQLAlchemyError as exc:
            raise BackendError(str(exc)) from exc

    # ---------------------------------------------------------- identities
    def get_identity(self, user_id: str) -> Optional[UserIdentity]:
        with self._session() as db:
            user = db.get(AuthUser, user_id)
            return UserIdentity.model_validate(user) if user else None

    def list_identities(self) -> List[UserIdentity]:
        with self._session() as db:
            users = db.scalars(select(AuthUser).order_by(AuthUser.created_at)).all()
            return [UserIdentity.model_validate(user) for user in users]

    # ------------------------------------------------------------ profiles
    def get_profile(self, user_id: str) -> Optional[ProfileRecord]:
        with self._session() as db:
            profile = db.get(Profile, user_id)
            return ProfileRecord.model_validate(profile) if profile else None

    def find_profile_by_email(self, email: str) -> Optional[ProfileRecord]:
        with self._session() as db:
            profile = db.scalars(
                select(Profile).where(Profile.email == email).limit(1)
            ).first()
            return ProfileRecord.model_validate(profile) if profile else None

    def create_profile(self, profile: ProfileRecord) -> ProfileRecord:
        with self._transaction() as db:
            row = Profile(
                id=profile.id,
                email=profile.email,
                username=profile.username,
                avatar_url=profile.avatar_url,
                role=profile.role,
            )
            db.add(row)
            db.flush()
            db.refresh(row)
            return ProfileRecord.model_validate(row)

    def update_profile_role(self, user_id: str, role: str) -> None:
        with self._transaction() as db:
            db.execute(update(Profile).where(Profile.id == user_id).values(role=role))

    def get_earliest_admin(self) -> Optional[ProfileRecord]:
        with self._session() as db:
            admin = db.scalars(
                select(Profile)
                .where(Profile.role == UserRole.ADMIN.value)
                .order_by(Profile.created_at.asc())
                .limit(1)
            ).first()
            return ProfileRecord.model_validate(admin) if admin else None

    # ---------------------------------------------------------------- bans
    def get_ban_record(self, user_id: str) -> Optional[BanRecord]:
        with self._session() as db:
            record = db.scalars(
                select(BannedUser).where(BannedUser.user_id == user_id)
            ).first()
            return BanRecord.model_validate(record) if record else None

    def apply_ban(self, record: BanRecord, banned_until: datetime) -> BanRecord:
        with self._transaction() as db:
            row = BannedUser(
                user_id=record.user_id,
                admin_id=record.admin_id,
                reason=record.reason,
            )
            if record.banned_at is not None:
                row.banned_at = record.banned_at
            db.add(row)
            db.execute(
                update(AuthUser)
                .where(AuthUser.id == record.user_id)
                .values(banned_until=banned_until)
            )
            db.flush()
            db.refresh(row)
            return BanRecord.model_validate(row)

    def clear_ban(self, user_id: str) -> None:
        with self._transaction() as db:
            deleted = db.query(BannedUser).filter(BannedUser.user_id == user_id).delete(
                synchronize_session=False
            )
            db.execute(
                update(AuthUser).where(AuthUser.id == user_id).values(banned_until=None)
            )
        logger.info("Cleared ban for user %s (%d record(s) removed)", user_id, deleted)

    # -------------------------------------------------------- notifications
    def mark_notification_read(self, notification_id: str) -> bool:
        with self._transaction() as db:
            result = db.execute(
                update(Notification)
                .where(Notification.id == notification_id)
                .values(read=True)
            )
            return result.rowcount > 0

    # --------------------------------------------------------------- health
    def ping(self) -> None:
        with self._session() as db:
            db.execute(text("SELECT 1"))


__all__ = ["SqlAlchemyBackend"]
