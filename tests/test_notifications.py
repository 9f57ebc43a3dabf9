import pytest

from liveone.modules.notifications.models import Notification
from liveone.modules.notifications.service import mark_notification_as_read
from tests.fakes import FakeBackend


def _read_flag(session, notification_id):
    session.expire_all()
    return session.get(Notification, notification_id).read


def test_mark_notification_as_read(client, api_url, session, notification):
    assert _read_flag(session, notification.id) is False

    res = client.post(
        api_url("mark_notification_as_read"),
        json={"notification_id": notification.id},
    )

    assert res.status_code == 200
    assert res.json() == {"success": True}
    assert _read_flag(session, notification.id) is True


def test_mark_notification_as_read_is_idempotent(client, api_url, session, notification):
    for _ in range(2):
        res = client.post(
            api_url("mark_notification_as_read"),
            json={"notification_id": notification.id},
        )
        assert res.json() == {"success": True}
    assert _read_flag(session, notification.id) is True


def test_mark_unknown_notification_is_noop(client, api_url):
    res = client.post(
        api_url("mark_notification_as_read"), json={"notification_id": "missing"}
    )
    assert res.status_code == 200
    assert res.json() == {"success": True}


def test_mark_notification_requires_identifier(client, api_url):
    res = client.post(api_url("mark_notification_as_read"), json={})
    assert res.status_code == 400
    assert res.json() == {"error": "Missing notification_id parameter"}


def test_mark_notification_backend_failure(app, client, api_url):
    from liveone.api.deps import get_backend

    broken = FakeBackend()
    broken.failing.add("mark_notification_read")
    app.dependency_overrides[get_backend] = lambda: broken
    try:
        res = client.post(
            api_url("mark_notification_as_read"), json={"notification_id": "n1"}
        )
    finally:
        app.dependency_overrides.clear()

    assert res.status_code == 500
    assert res.json() == {"error": "Internal server error"}


@pytest.mark.asyncio
async def test_service_marks_known_notification():
    backend = FakeBackend()
    backend.notifications.add("n1")

    result = await mark_notification_as_read(backend, "n1")

    assert result.success is True
    assert backend.read_notifications == {"n1"}
