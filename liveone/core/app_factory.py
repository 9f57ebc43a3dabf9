"""Application factory helpers to keep liveone/main.py lightweight."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import ORJSONResponse
from starlette.concurrency import run_in_threadpool

from liveone.api.router import api_router
from liveone.backends import BackendError, ModerationBackend, build_backend
from liveone.core.config import Settings, settings as default_settings
from liveone.core.error_handlers import register_exception_handlers
from liveone.core.logging_config import setup_logging
from liveone.core.middleware import LoggingMiddleware, cors_middleware
from liveone.modules.security.csrf import CSRFTokenStore

logger = logging.getLogger(__name__)


def _configure_app(app: FastAPI, settings: Settings) -> None:
    # Logs all requests and responses with timing
    app.add_middleware(LoggingMiddleware)

    # Added last so it wraps everything, including error responses.
    app.middleware("http")(cors_middleware)

    app.include_router(api_router, prefix=settings.api_prefix)


def _register_routes(app: FastAPI) -> None:
    # Liveness Check (Is the app process running?)
    @app.get("/livez", tags=["Health"])
    async def livez():
        return {"status": "ok"}

    # Readiness Check (Is the moderation backend reachable?)
    @app.get("/readyz", tags=["Health"])
    async def readyz(request: Request):
        backend: ModerationBackend = request.app.state.backend
        try:
            await run_in_threadpool(backend.ping)
        except BackendError as e:
            logger.error(f"Readiness check failed (Backend): {e}")
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail={"backend": "disconnected"},
            )
        return {"status": "ready", "details": {"backend": "connected"}}


def create_app(
    app_settings: Optional[Settings] = None,
    backend: Optional[ModerationBackend] = None,
) -> FastAPI:
    """Build the FastAPI application.

    `backend` defaults to the implementation selected by `MODERATION_BACKEND`; tests
    pass their own to avoid touching the configured store.
    """
    settings = app_settings or default_settings

    setup_logging(
        log_level=settings.log_level,
        log_dir=settings.log_dir,
        app_name=settings.app_name,
        use_json=settings.use_json_logs,
        use_colors=settings.environment != "production",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "Starting %s (%s backend, env=%s)",
            settings.app_name,
            settings.moderation_backend,
            settings.environment,
        )
        yield
        app.state.csrf_store.clear_all()
        logger.info("Shutdown complete")

    app = FastAPI(
        title="LiveOne Moderation API",
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )

    # Application-scoped objects; shared through dependencies, never module globals.
    app.state.settings = settings
    app.state.backend = backend or build_backend(settings)
    app.state.csrf_store = CSRFTokenStore(
        ttl_seconds=settings.csrf_token_ttl_seconds,
        max_sessions=settings.csrf_max_sessions,
    )

    _configure_app(app, settings)
    _register_routes(app)
    register_exception_handlers(app)
    return app
