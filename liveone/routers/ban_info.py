"""Ban details (reason and issuing administrator) for banned users."""

from fastapi import APIRouter, Depends

from liveone.api.deps import get_backend, json_body
from liveone.backends.base import ModerationBackend
from liveone.core.error_handlers import handle_exceptions
from liveone.modules.moderation import service
from liveone.modules.moderation.schemas import BanInfoRequest, BanInfoResponse

router = APIRouter(tags=["Moderation"])

SAFE_DEFAULTS = {"ban_info": None}


@router.post("/get_ban_info", response_model=BanInfoResponse)
@handle_exceptions(**SAFE_DEFAULTS)
async def get_ban_info(
    payload: BanInfoRequest = Depends(json_body(BanInfoRequest, **SAFE_DEFAULTS)),
    backend: ModerationBackend = Depends(get_backend),
):
    """Return `ban_info: null` unless the user is banned right now."""
    return await service.get_ban_info(backend, payload.user_id)
