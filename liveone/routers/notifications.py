"""Notification read-marker endpoint."""

from fastapi import APIRouter, Depends

from liveone.api.deps import get_backend, json_body, verify_csrf_token
from liveone.backends.base import ModerationBackend
from liveone.core.error_handlers import handle_exceptions
from liveone.modules.notifications.schemas import (
    MarkNotificationReadRequest,
    MarkNotificationReadResponse,
)
from liveone.modules.notifications.service import mark_notification_as_read

router = APIRouter(tags=["Notifications"])


@router.post(
    "/mark_notification_as_read",
    response_model=MarkNotificationReadResponse,
    dependencies=[Depends(verify_csrf_token)],
)
@handle_exceptions()
async def mark_as_read(
    payload: MarkNotificationReadRequest = Depends(
        json_body(MarkNotificationReadRequest)
    ),
    backend: ModerationBackend = Depends(get_backend),
):
    return await mark_notification_as_read(backend, payload.notification_id)
