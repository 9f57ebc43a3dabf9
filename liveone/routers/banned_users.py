"""Listing of every currently banned user with display data."""

from fastapi import APIRouter, Depends

from liveone.api.deps import get_backend
from liveone.backends.base import ModerationBackend
from liveone.core.error_handlers import handle_exceptions
from liveone.modules.moderation import service
from liveone.modules.moderation.schemas import BannedUsersResponse

router = APIRouter(tags=["Moderation"])


@router.post("/get_banned_users", response_model=BannedUsersResponse)
@handle_exceptions(failure_message="Failed to retrieve users", banned_users=[])
async def get_banned_users(backend: ModerationBackend = Depends(get_backend)):
    return await service.list_banned_users(backend)
