from datetime import datetime, timedelta, timezone

import pytest

from liveone.api.deps import get_backend
from liveone.modules.moderation.models import BannedUser
from liveone.modules.users.models import AuthUser, Profile
from tests.fakes import FakeBackend


@pytest.fixture
def failing_client(app, client):
    broken = FakeBackend()
    broken.failing.update(
        {"get_identity", "list_identities", "get_profile", "mark_notification_read"}
    )
    app.dependency_overrides[get_backend] = lambda: broken
    try:
        yield client
    finally:
        app.dependency_overrides.clear()


# ------------------------------------------------------------ check_ban_status


def test_check_ban_status_for_active_user(client, api_url, regular_user):
    res = client.post(api_url("check_ban_status"), json={"user_id": regular_user.id})
    assert res.status_code == 200
    assert res.json() == {"is_banned": False}


def test_check_ban_status_for_banned_user(client, api_url, banned_user):
    res = client.post(api_url("check_ban_status"), json={"user_id": banned_user.id})
    assert res.status_code == 200
    assert res.json() == {"is_banned": True}


def test_check_ban_status_expired_ban(client, api_url, make_user):
    user = make_user(banned_until=datetime.now(timezone.utc) - timedelta(minutes=1))
    res = client.post(api_url("check_ban_status"), json={"user_id": user.id})
    assert res.json() == {"is_banned": False}


@pytest.mark.parametrize(
    "body",
    [{}, {"user_id": ""}, {"user_id": "   "}, {"user": "x"}],
)
def test_check_ban_status_rejects_missing_identifier(client, api_url, body):
    res = client.post(api_url("check_ban_status"), json=body)
    assert res.status_code == 400
    assert res.json() == {"error": "Missing user_id parameter", "is_banned": False}


def test_check_ban_status_rejects_non_string_identifier(client, api_url):
    res = client.post(api_url("check_ban_status"), json={"user_id": ["a"]})
    assert res.status_code == 400
    assert res.json() == {"error": "Invalid user_id parameter", "is_banned": False}


def test_check_ban_status_rejects_malformed_json(client, api_url):
    res = client.post(
        api_url("check_ban_status"),
        content=b"{not json",
        headers={"content-type": "application/json"},
    )
    assert res.status_code == 400
    assert res.json() == {"error": "Invalid JSON body", "is_banned": False}


def test_check_ban_status_unknown_user(client, api_url):
    res = client.post(api_url("check_ban_status"), json={"user_id": "ghost"})
    assert res.status_code == 404
    assert res.json() == {"error": "User not found", "is_banned": False}


def test_check_ban_status_backend_failure(failing_client, api_url):
    res = failing_client.post(api_url("check_ban_status"), json={"user_id": "u"})
    assert res.status_code == 500
    assert res.json() == {"error": "Internal server error", "is_banned": False}


# ---------------------------------------------------------------- get_ban_info


def test_get_ban_info_for_active_user(client, api_url, regular_user):
    res = client.post(api_url("get_ban_info"), json={"user_id": regular_user.id})
    assert res.status_code == 200
    assert res.json() == {"ban_info": None}


def test_get_ban_info_for_banned_user(client, api_url, banned_user, admin):
    res = client.post(api_url("get_ban_info"), json={"user_id": banned_user.id})

    assert res.status_code == 200
    info = res.json()["ban_info"]
    assert info["user_id"] == banned_user.id
    assert info["reason"] == "User account has been banned"
    assert info["banned_by"]["id"] == admin.id
    assert info["banned_by"]["username"] == "admin_1"
    assert info["banned_until"]


def test_get_ban_info_without_any_admin(client, api_url, make_user):
    user = make_user(banned_until=datetime.now(timezone.utc) + timedelta(days=1))
    res = client.post(api_url("get_ban_info"), json={"user_id": user.id})
    assert res.json()["ban_info"]["banned_by"] == {"username": "System"}


def test_get_ban_info_unknown_user(client, api_url):
    res = client.post(api_url("get_ban_info"), json={"user_id": "ghost"})
    assert res.status_code == 404
    assert res.json() == {"error": "User not found", "ban_info": None}


def test_get_ban_info_backend_failure(failing_client, api_url):
    res = failing_client.post(api_url("get_ban_info"), json={"user_id": "u"})
    assert res.status_code == 500
    assert res.json() == {"error": "Internal server error", "ban_info": None}


# ----------------------------------------------------------- get_banned_users


def test_get_banned_users_lists_exactly_banned(
    client, api_url, banned_user, regular_user, make_user
):
    make_user(banned_until=datetime.now(timezone.utc) - timedelta(days=1))
    no_profile = make_user(
        banned_until=datetime.now(timezone.utc) + timedelta(days=1), with_profile=False
    )

    res = client.post(api_url("get_banned_users"), json={})

    assert res.status_code == 200
    entries = {entry["id"]: entry for entry in res.json()["banned_users"]}
    assert set(entries) == {banned_user.id, no_profile.id}
    assert entries[banned_user.id]["username"] == "troll"
    assert entries[banned_user.id]["email"] == banned_user.email
    assert entries[banned_user.id]["avatar_url"].startswith("https://")
    assert entries[no_profile.id]["username"] == "Unknown User"


def test_get_banned_users_accepts_empty_body(client, api_url):
    res = client.post(api_url("get_banned_users"))
    assert res.status_code == 200
    assert res.json() == {"banned_users": []}


def test_get_banned_users_backend_failure(failing_client, api_url):
    res = failing_client.post(api_url("get_banned_users"), json={})
    assert res.status_code == 500
    assert res.json() == {"error": "Failed to retrieve users", "banned_users": []}


# ------------------------------------------------------------------ unban_user


def test_unban_user_by_admin(client, api_url, session, admin, banned_user):
    res = client.post(
        api_url("unban_user"), json={"admin_id": admin.id, "user_id": banned_user.id}
    )

    assert res.status_code == 200
    assert res.json() == {"success": True, "message": "User has been unbanned"}
    session.expire_all()
    assert session.get(AuthUser, banned_user.id).banned_until is None
    assert session.query(BannedUser).count() == 0


def test_unban_user_by_moderator(client, api_url, moderator, banned_user):
    res = client.post(
        api_url("unban_user"),
        json={"admin_id": moderator.id, "user_id": banned_user.id},
    )
    assert res.status_code == 200


def test_unban_user_requires_staff(client, api_url, session, regular_user, banned_user):
    res = client.post(
        api_url("unban_user"),
        json={"admin_id": regular_user.id, "user_id": banned_user.id},
    )

    assert res.status_code == 403
    assert res.json() == {"error": "Unauthorized - insufficient permissions"}
    assert session.query(BannedUser).count() == 1


def test_unban_user_unknown_target(client, api_url, admin):
    res = client.post(
        api_url("unban_user"), json={"admin_id": admin.id, "user_id": "ghost"}
    )
    assert res.status_code == 404
    assert res.json() == {"error": "User not found"}


def test_unban_user_not_banned(client, api_url, admin, regular_user):
    res = client.post(
        api_url("unban_user"), json={"admin_id": admin.id, "user_id": regular_user.id}
    )
    assert res.status_code == 400
    assert res.json() == {"error": "User is not banned"}


def test_unban_user_missing_admin_id(client, api_url, banned_user):
    res = client.post(api_url("unban_user"), json={"user_id": banned_user.id})
    assert res.status_code == 400
    assert res.json() == {"error": "Missing admin_id parameter"}


# -------------------------------------------------------------------- ban_user


def test_ban_user_by_moderator(client, api_url, session, moderator, regular_user):
    res = client.post(
        api_url("ban_user"),
        json={
            "admin_id": moderator.id,
            "user_id": regular_user.id,
            "reason": "  <b>spam</b> links ",
        },
    )

    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    assert body["message"] == "User has been banned"
    assert body["ban"]["reason"] == "spam links"
    assert body["ban"]["admin_id"] == moderator.id
    record = session.query(BannedUser).filter_by(user_id=regular_user.id).one()
    assert record.reason == "spam links"


def test_ban_user_cannot_target_admin(client, api_url, moderator, admin):
    res = client.post(
        api_url("ban_user"), json={"admin_id": moderator.id, "user_id": admin.id}
    )
    assert res.status_code == 403
    assert res.json() == {"error": "Cannot ban administrators or moderators"}


def test_ban_user_twice(client, api_url, admin, banned_user):
    res = client.post(
        api_url("ban_user"), json={"admin_id": admin.id, "user_id": banned_user.id}
    )
    assert res.status_code == 400
    assert res.json() == {"error": "User is already banned"}


def test_ban_user_reason_too_long(client, api_url, admin, regular_user):
    res = client.post(
        api_url("ban_user"),
        json={"admin_id": admin.id, "user_id": regular_user.id, "reason": "x" * 501},
    )
    assert res.status_code == 400
    assert res.json() == {"error": "Invalid reason parameter"}


# -------------------------------------------------------------- add_moderators


def test_add_moderators_grants_role(app, client, api_url, session, admin, make_user):
    target = make_user("user", email="helper@liveone.test")
    object.__setattr__(
        app.state.settings,
        "moderator_emails",
        ["helper@liveone.test", admin.email, "nobody@liveone.test"],
    )
    try:
        res = client.post(api_url("add_moderators"), json={"admin_id": admin.id})
    finally:
        object.__setattr__(app.state.settings, "moderator_emails", [])

    assert res.status_code == 200
    results = res.json()["results"]
    assert results[0] == {
        "email": "helper@liveone.test",
        "success": True,
        "action": "Updated role to moderator",
    }
    assert results[1]["action"] == "Already has sufficient privileges"
    assert results[2] == {
        "email": "nobody@liveone.test",
        "success": False,
        "error": "User not found",
    }
    session.expire_all()
    assert session.get(Profile, target.id).role == "moderator"


def test_add_moderators_requires_admin(client, api_url, moderator):
    res = client.post(api_url("add_moderators"), json={"admin_id": moderator.id})
    assert res.status_code == 403


# ------------------------------------------------------------------------ CORS


def test_preflight_is_answered_with_ok(client, api_url):
    res = client.options(api_url("unban_user"))
    assert res.status_code == 200
    assert res.text == "ok"
    assert res.headers["access-control-allow-origin"] == "*"
    assert (
        res.headers["access-control-allow-headers"]
        == "authorization, x-client-info, apikey, content-type"
    )


def test_cors_headers_on_errors(client, api_url):
    res = client.post(api_url("check_ban_status"), json={})
    assert res.status_code == 400
    assert res.headers["access-control-allow-origin"] == "*"
