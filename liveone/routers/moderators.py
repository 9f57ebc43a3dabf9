"""Grant the moderator role to the configured moderator e-mail addresses."""

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
from liveone.modules.moderation.schemas import (
    AddModeratorsRequest,
    AddModeratorsResponse,
)

router = APIRouter(tags=["Moderators"])


@router.post(
    "/add_moderators",
    response_model=AddModeratorsResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(verify_csrf_token)],
)
@handle_exceptions()
async def add_moderators(
    payload: AddModeratorsRequest = Depends(json_body(AddModeratorsRequest)),
    backend: ModerationBackend = Depends(get_backend),
    settings=Depends(get_settings_from_app),
):
    return await service.grant_moderator_roles(
        backend, payload.admin_id, settings.moderator_emails
    )
