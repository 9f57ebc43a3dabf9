"""Notification read-marker."""

import logging

from starlette.concurrency import run_in_threadpool

from liveone.backends.base import ModerationBackend
from liveone.modules.notifications.schemas import MarkNotificationReadResponse

logger = logging.getLogger(__name__)


async def mark_notification_as_read(
    backend: ModerationBackend, notification_id: str
) -> MarkNotificationReadResponse:
    """Set `read` on one notification. Unknown ids are a successful no-op."""
    matched = await run_in_threadpool(backend.mark_notification_read, notification_id)
    if not matched:
        logger.info("Notification %s not found; nothing marked as read", notification_id)
    return MarkNotificationReadResponse()
