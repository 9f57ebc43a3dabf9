"""Ban a user on behalf of an administrator or moderator."""

from fastapi import APIRouter, Depends

from liveone.api.deps import (
    get_backend,
    get_settings_from_app,
    json_body,
    verify_csrf_token,
)
from liveone.backends.base import ModerationBackend
from liveone.core.error_handlers import handle_exceptions
from liveone.modules.moderation import service
from liveone.modules.moderation.schemas import BanUserRequest, BanUserResponse

router = APIRouter(tags=["Moderation"])


@router.post(
    "/ban_user",
    response_model=BanUserResponse,
    dependencies=[Depends(verify_csrf_token)],
)
@handle_exceptions()
async def ban_user(
    payload: BanUserRequest = Depends(json_body(BanUserRequest)),
    backend: ModerationBackend = Depends(get_backend),
    settings=Depends(get_settings_from_app),
):
    return await service.ban_user(
        backend,
        payload.admin_id,
        payload.user_id,
        payload.reason,
        duration_years=settings.ban_duration_years,
    )
