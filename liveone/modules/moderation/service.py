"""Business logic for moderation workflows (ban status, ban details, bans, moderators)."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional

from starlette.concurrency import run_in_threadpool

from liveone.backends.base import ConflictError, ModerationBackend
from liveone.core.exceptions import (
    PermissionDeniedException,
    UserAlreadyBannedException,
    UserNotBannedException,
    raise_not_found,
)
from liveone.modules.moderation import schemas
from liveone.modules.users.models import STAFF_ROLES, UserRole
from liveone.modules.users.schemas import ProfileRecord, UserIdentity

logger = logging.getLogger(__name__)

BAN_REASON = "User account has been banned"
SYSTEM_ISSUER = "System"
UNKNOWN_USERNAME = "Unknown User"
DAYS_PER_YEAR = 365


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def is_banned(banned_until: Optional[datetime], now: Optional[datetime] = None) -> bool:
    """A user is banned while `banned_until` is set and strictly in the future."""
    if banned_until is None:
        return False
    if banned_until.tzinfo is None:
        banned_until = banned_until.replace(tzinfo=timezone.utc)
    return banned_until > (now or _utcnow())


def ban_expiry(years: int, now: Optional[datetime] = None) -> datetime:
    return (now or _utcnow()) + timedelta(days=DAYS_PER_YEAR * years)


def _is_staff(profile: Optional[ProfileRecord]) -> bool:
    return profile is not None and profile.role in STAFF_ROLES


async def _require_staff(backend: ModerationBackend, admin_id: str) -> ProfileRecord:
    caller = await run_in_threadpool(backend.get_profile, admin_id)
    if not _is_staff(caller):
        logger.info("Rejected moderation request from %s", admin_id)
        raise PermissionDeniedException()
    return caller


async def _require_identity(backend: ModerationBackend, user_id: str) -> UserIdentity:
    identity = await run_in_threadpool(backend.get_identity, user_id)
    if identity is None:
        raise_not_found("User", user_id)
    return identity


async def _require_profile(backend: ModerationBackend, user_id: str) -> ProfileRecord:
    profile = await run_in_threadpool(backend.get_profile, user_id)
    if profile is None:
        raise_not_found("User", user_id)
    return profile


# ---------------------------------------------------------------- queries


async def check_ban_status(
    backend: ModerationBackend, user_id: str
) -> schemas.CheckBanStatusResponse:
    identity = await _require_identity(backend, user_id)
    return schemas.CheckBanStatusResponse(is_banned=is_banned(identity.banned_until))


async def _resolve_issuer(
    backend: ModerationBackend, user_id: str
) -> schemas.BannedBy:
    """Best-effort attribution: recorded admin, then the earliest admin, then System."""
    try:
        record = await run_in_threadpool(backend.get_ban_record, user_id)
        if record and record.admin_id:
            issuer = await run_in_threadpool(backend.get_profile, record.admin_id)
            if issuer:
                return schemas.BannedBy(
                    id=issuer.id, username=issuer.username or SYSTEM_ISSUER
                )
        admin = await run_in_threadpool(backend.get_earliest_admin)
        if admin:
            return schemas.BannedBy(id=admin.id, username=admin.username or SYSTEM_ISSUER)
    except Exception as exc:
        logger.warning("Could not resolve ban issuer for %s: %s", user_id, exc)
    return schemas.BannedBy(username=SYSTEM_ISSUER)


async def get_ban_info(
    backend: ModerationBackend, user_id: str
) -> schemas.BanInfoResponse:
    identity = await _require_identity(backend, user_id)
    if not is_banned(identity.banned_until):
        return schemas.BanInfoResponse(ban_info=None)

    banned_by = await _resolve_issuer(backend, user_id)
    return schemas.BanInfoResponse(
        ban_info=schemas.BanInfo(
            user_id=identity.id,
            banned_until=identity.banned_until,
            reason=BAN_REASON,
            banned_by=banned_by,
        )
    )


def _banned_entry(
    identity: UserIdentity, profile: Optional[ProfileRecord]
) -> schemas.BannedUserOut:
    return schemas.BannedUserOut(
        id=identity.id,
        email=identity.email,
        username=(profile.username if profile else None) or UNKNOWN_USERNAME,
        avatar_url=profile.avatar_url if profile else None,
        banned_until=identity.banned_until,
    )


async def list_banned_users(backend: ModerationBackend) -> schemas.BannedUsersResponse:
    identities = await run_in_threadpool(backend.list_identities)
    now = _utcnow()
    banned = [identity for identity in identities if is_banned(identity.banned_until, now)]

    profiles = await asyncio.gather(
        *(run_in_threadpool(backend.get_profile, identity.id) for identity in banned),
        return_exceptions=True,
    )

    entries: List[schemas.BannedUserOut] = []
    for identity, profile in zip(banned, profiles):
        if isinstance(profile, Exception):
            logger.warning("Profile lookup failed for %s: %s", identity.id, profile)
            profile = None
        entries.append(_banned_entry(identity, profile))
    return schemas.BannedUsersResponse(banned_users=entries)


# -------------------------------------------------------------- mutations


async def ban_user(
    backend: ModerationBackend,
    admin_id: str,
    user_id: str,
    reason: Optional[str] = None,
    *,
    duration_years: int = 80,
) -> schemas.BanUserResponse:
    await _require_staff(backend, admin_id)
    target = await _require_profile(backend, user_id)
    if target.role in STAFF_ROLES:
        raise PermissionDeniedException("Cannot ban administrators or moderators")

    existing = await run_in_threadpool(backend.get_ban_record, user_id)
    if existing is not None:
        raise UserAlreadyBannedException()

    now = _utcnow()
    banned_until = ban_expiry(duration_years, now)
    record = schemas.BanRecord(
        user_id=user_id, admin_id=admin_id, reason=reason, banned_at=now
    )
    try:
        stored = await run_in_threadpool(backend.apply_ban, record, banned_until)
    except ConflictError:
        logger.info("Concurrent ban of %s already recorded", user_id)
        raise UserAlreadyBannedException()
    logger.info("User %s banned by %s until %s", user_id, admin_id, banned_until)

    return schemas.BanUserResponse(
        message="User has been banned",
        ban=schemas.BanOut(**stored.model_dump(), banned_until=banned_until),
    )


async def unban_user(
    backend: ModerationBackend, admin_id: str, user_id: str
) -> schemas.ActionResponse:
    await _require_staff(backend, admin_id)
    await _require_profile(backend, user_id)

    record = await run_in_threadpool(backend.get_ban_record, user_id)
    if record is None:
        raise UserNotBannedException()

    await run_in_threadpool(backend.clear_ban, user_id)
    logger.info("User %s unbanned by %s", user_id, admin_id)
    return schemas.ActionResponse(message="User has been unbanned")


def _default_username(identity: UserIdentity) -> str:
    return identity.user_metadata.get("username") or f"user_{identity.id[:8]}"


def _grant_moderator(
    backend: ModerationBackend, email: str, identities: List[UserIdentity]
) -> schemas.ModeratorGrantResult:
    profile = backend.find_profile_by_email(email)
    if profile is None:
        identity = next(
            (item for item in identities if (item.email or "").lower() == email.lower()),
            None,
        )
        if identity is None:
            return schemas.ModeratorGrantResult(
                email=email, success=False, error="User not found"
            )
        backend.create_profile(
            ProfileRecord(
                id=identity.id,
                email=identity.email,
                username=_default_username(identity),
                role=UserRole.MODERATOR.value,
            )
        )
        return schemas.ModeratorGrantResult(
            email=email, success=True, action="Created profile with moderator role"
        )

    if profile.role in STAFF_ROLES:
        return schemas.ModeratorGrantResult(
            email=email, success=True, action="Already has sufficient privileges"
        )

    backend.update_profile_role(profile.id, UserRole.MODERATOR.value)
    return schemas.ModeratorGrantResult(
        email=email, success=True, action="Updated role to moderator"
    )


async def grant_moderator_roles(
    backend: ModerationBackend, admin_id: str, emails: Iterable[str]
) -> schemas.AddModeratorsResponse:
    caller = await run_in_threadpool(backend.get_profile, admin_id)
    if caller is None or caller.role != UserRole.ADMIN.value:
        raise PermissionDeniedException()

    emails = list(emails)
    identities: List[UserIdentity] = []
    results: List[schemas.ModeratorGrantResult] = []
    for email in emails:
        try:
            if not identities:
                identities = await run_in_threadpool(backend.list_identities)
            result = await run_in_threadpool(_grant_moderator, backend, email, identities)
        except Exception as exc:
            logger.error("Granting moderator role to %s failed: %s", email, exc)
            result = schemas.ModeratorGrantResult(email=email, success=False, error=str(exc))
        results.append(result)
    return schemas.AddModeratorsResponse(results=results)


__all__ = [
    "BAN_REASON",
    "SYSTEM_ISSUER",
    "UNKNOWN_USERNAME",
    "ban_expiry",
    "ban_user",
    "check_ban_status",
    "get_ban_info",
    "grant_moderator_roles",
    "is_banned",
    "list_banned_users",
    "unban_user",
]
