"""Centralized API router registration.

Groups:
- Ban queries: check_ban_status, get_ban_info, get_banned_users.
- Ban mutations and roles: ban_user, unban_user, add_moderators.
- Notifications and security: mark_notification_as_read, csrf.
"""

from fastapi import APIRouter

from liveone.routers import (
    ban_info,
    ban_status,
    ban_user,
    banned_users,
    csrf,
    moderators,
    notifications,
    unban_user,
)

api_router = APIRouter()

api_router.include_router(ban_status.router)
api_router.include_router(ban_info.router)
api_router.include_router(banned_users.router)

api_router.include_router(ban_user.router)
api_router.include_router(unban_user.router)
api_router.include_router(moderators.router)

api_router.include_router(notifications.router)
api_router.include_router(csrf.router)
