"""Lift a ban on behalf of an administrator or moderator."""

from fastapi import APIRouter, Depends

from liveone.api.deps import get_backend, json_body, verify_csrf_token
from liveone.backends.base import ModerationBackend
from liveone.core.error_handlers import handle_exceptions
from liveone.modules.moderation import service
from liveone.modules.moderation.schemas import ActionResponse, UnbanUserRequest

router = APIRouter(tags=["Moderation"])


@router.post(
    "/unban_user",
    response_model=ActionResponse,
    dependencies=[Depends(verify_csrf_token)],
)
@handle_exceptions()
async def unban_user(
    payload: UnbanUserRequest = Depends(json_body(UnbanUserRequest)),
    backend: ModerationBackend = Depends(get_backend),
):
    """
    Unban a user.

    The caller (`admin_id`) must hold the admin or moderator role, the target must
    have a profile, and a ban record must exist. The record and the identity's ban
    timestamp are cleared together.
    """
    return await service.unban_user(backend, payload.admin_id, payload.user_id)
