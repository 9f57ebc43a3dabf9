"""Response header middleware.

Every response carries the permissive CORS headers the browser client expects, and
any ``OPTIONS`` request is answered directly with ``200 ok`` so preflights never reach
the POST-only routes.
"""

from typing import Optional

from fastapi import Request
from fastapi.responses import PlainTextResponse

from liveone.core.config import Settings, settings as default_settings


def cors_headers(settings: Optional[Settings] = None) -> dict[str, str]:
    settings = settings or default_settings
    allow_headers = list(settings.cors_allow_headers)
    if settings.csrf_protection:
        csrf_header = settings.csrf_header_name.lower()
        if csrf_header not in allow_headers:
            allow_headers.append(csrf_header)
    return {
        "Access-Control-Allow-Origin": settings.cors_allow_origin,
        "Access-Control-Allow-Headers": ", ".join(allow_headers),
    }


async def cors_middleware(request: Request, call_next):
    """Answer preflights and add the CORS headers to every response."""
    headers = cors_headers(getattr(request.app.state, "settings", None))
    if request.method == "OPTIONS":
        return PlainTextResponse("ok", headers=headers)
    response = await call_next(request)
    response.headers.update(headers)
    return response
