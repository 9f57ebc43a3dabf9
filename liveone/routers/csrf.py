"""CSRF token issuance and logout for cookie-identified sessions."""

import secrets

from fastapi import APIRouter, Depends, Request, Response

from liveone.api.deps import get_csrf_store, get_session_id, get_settings_from_app
from liveone.modules.security.csrf import CSRFTokenStore

router = APIRouter(prefix="/csrf", tags=["Security"])


@router.post("/token")
async def issue_token(
    request: Request,
    response: Response,
    store: CSRFTokenStore = Depends(get_csrf_store),
    settings=Depends(get_settings_from_app),
):
    """Return the session's CSRF token, starting a session if the caller has none."""
    session_id = get_session_id(request)
    if not session_id:
        session_id = secrets.token_urlsafe(32)
        response.set_cookie(
            settings.session_cookie_name,
            session_id,
            httponly=True,
            samesite="strict",
            secure=settings.environment == "production",
            max_age=settings.csrf_token_ttl_seconds,
        )
    return {"csrf_token": store.issue(session_id)}


@router.post("/logout")
async def logout(
    request: Request,
    response: Response,
    store: CSRFTokenStore = Depends(get_csrf_store),
    settings=Depends(get_settings_from_app),
):
    session_id = get_session_id(request)
    if session_id:
        store.clear(session_id)
    response.delete_cookie(settings.session_cookie_name)
    return {"success": True}
