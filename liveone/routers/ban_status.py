"""Ban status lookup: is this user currently banned?"""

from fastapi import APIRouter, Depends

from liveone.api.deps import get_backend, json_body
from liveone.backends.base import ModerationBackend
from liveone.core.error_handlers import handle_exceptions
from liveone.modules.moderation import service
from liveone.modules.moderation.schemas import (
    CheckBanStatusRequest,
    CheckBanStatusResponse,
)

router = APIRouter(tags=["Moderation"])

SAFE_DEFAULTS = {"is_banned": False}


@router.post("/check_ban_status", response_model=CheckBanStatusResponse)
@handle_exceptions(**SAFE_DEFAULTS)
async def check_ban_status(
    payload: CheckBanStatusRequest = Depends(
        json_body(CheckBanStatusRequest, **SAFE_DEFAULTS)
    ),
    backend: ModerationBackend = Depends(get_backend),
):
    return await service.check_ban_status(backend, payload.user_id)
