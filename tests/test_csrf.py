import time

import pytest

from liveone.core.app_factory import create_app
from liveone.core.config import settings
from liveone.modules.security.csrf import (
    CSRFTokenMissingError,
    CSRFTokenStore,
    SecureForm,
    generate_csrf_token,
)
from tests.testclient import TestClient


def test_generate_csrf_token_is_random_and_url_safe():
    first, second = generate_csrf_token(), generate_csrf_token()
    assert first != second
    assert len(first) >= 32
    assert all(ch.isalnum() or ch in "-_" for ch in first)


def test_store_issues_one_token_per_session():
    store = CSRFTokenStore()
    token = store.issue("session-a")
    assert store.issue("session-a") == token
    assert store.issue("session-b") != token
    assert len(store) == 2


def test_store_validates_by_value():
    store = CSRFTokenStore()
    token = store.issue("session-a")
    assert store.validate("session-a", token) is True
    assert store.validate("session-a", "forged") is False
    assert store.validate("session-b", token) is False
    assert store.validate("session-a", None) is False
    assert store.validate(None, token) is False


def test_store_clear_on_logout():
    store = CSRFTokenStore()
    token = store.issue("session-a")
    store.issue("session-b")
    store.clear("session-a")
    assert store.get("session-a") is None
    assert store.validate("session-a", token) is False
    store.clear_all()
    assert len(store) == 0


def test_store_tokens_expire():
    store = CSRFTokenStore(ttl_seconds=0.05)
    store.issue("session-a")
    time.sleep(0.1)
    assert store.get("session-a") is None


def test_store_requires_session_id():
    with pytest.raises(ValueError):
        CSRFTokenStore().issue("")


def test_secure_form_refuses_submit_without_token():
    form = SecureForm(CSRFTokenStore(), "session-a")
    with pytest.raises(CSRFTokenMissingError) as exc:
        form.submit(lambda data: data, {"body": "hello"})
    assert str(exc.value) == "Security error: missing CSRF token"


def test_secure_form_attaches_token():
    store = CSRFTokenStore()
    form = SecureForm(store, "session-a")
    token = form.mount()

    submitted = form.submit(lambda data: data, {"body": "hello"})

    assert submitted == {"body": "hello", "csrf_token": token}
    assert store.validate("session-a", token)
    assert form.hidden_field() == (
        f'<input type="hidden" name="csrf_token" value="{token}">'
    )


@pytest.fixture
def protected_client(backend):
    protected = settings.model_copy(update={"csrf_protection": True})
    app = create_app(app_settings=protected, backend=backend)
    with TestClient(app) as client:
        yield client


def test_token_endpoint_sets_session_cookie(client, api_url):
    res = client.post(api_url("csrf/token"))
    assert res.status_code == 200
    token = res.json()["csrf_token"]
    assert client.cookies.get(settings.session_cookie_name)

    again = client.post(api_url("csrf/token"))
    assert again.json()["csrf_token"] == token


def test_logout_clears_token(app, client, api_url):
    token = client.post(api_url("csrf/token")).json()["csrf_token"]
    session_id = client.cookies.get(settings.session_cookie_name)

    res = client.post(api_url("csrf/logout"))

    assert res.json() == {"success": True}
    assert app.state.csrf_store.validate(session_id, token) is False


def test_protected_endpoint_rejects_missing_token(
    protected_client, api_url, admin, banned_user
):
    res = protected_client.post(
        api_url("unban_user"), json={"admin_id": admin.id, "user_id": banned_user.id}
    )
    assert res.status_code == 403
    assert res.json() == {"error": "Invalid CSRF token"}


def test_protected_endpoint_rejects_wrong_token(
    protected_client, api_url, admin, banned_user
):
    protected_client.post(api_url("csrf/token"))
    res = protected_client.post(
        api_url("unban_user"),
        json={"admin_id": admin.id, "user_id": banned_user.id},
        headers={"X-CSRF-Token": "forged"},
    )
    assert res.status_code == 403


def test_protected_endpoint_accepts_valid_token(
    protected_client, api_url, admin, banned_user
):
    token = protected_client.post(api_url("csrf/token")).json()["csrf_token"]
    res = protected_client.post(
        api_url("unban_user"),
        json={"admin_id": admin.id, "user_id": banned_user.id},
        headers={"X-CSRF-Token": token},
    )
    assert res.status_code == 200


def test_read_only_endpoints_skip_csrf(protected_client, api_url, regular_user):
    res = protected_client.post(
        api_url("check_ban_status"), json={"user_id": regular_user.id}
    )
    assert res.status_code == 200


def test_secure_form_submission_passes_protected_endpoint(
    protected_client, api_url, admin, banned_user
):
    protected_client.post(api_url("csrf/token"))
    session_id = protected_client.cookies.get(settings.session_cookie_name)
    form = SecureForm(protected_client.app.state.csrf_store, session_id)
    form.mount()

    res = form.submit(
        lambda data: protected_client.post(api_url("unban_user"), json=data),
        {"admin_id": admin.id, "user_id": banned_user.id},
    )

    assert res.status_code == 200
    assert res.json() == {"success": True, "message": "User has been unbanned"}


def test_body_token_must_match_session(protected_client, api_url, admin, banned_user):
    protected_client.post(api_url("csrf/token"))
    res = protected_client.post(
        api_url("unban_user"),
        json={
            "admin_id": admin.id,
            "user_id": banned_user.id,
            "csrf_token": "forged",
        },
    )
    assert res.status_code == 403


def test_preflight_allows_csrf_header_when_protected(protected_client, api_url):
    res = protected_client.options(api_url("unban_user"))
    allowed = res.headers["access-control-allow-headers"].split(", ")
    assert "x-csrf-token" in allowed
    assert "content-type" in allowed
