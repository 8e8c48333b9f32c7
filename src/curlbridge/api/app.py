"""FastAPI application factory for curlbridge."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from curlbridge import __version__
from curlbridge.api.deps import init_session_manager, reset_session_manager
from curlbridge.api.middleware import RequestBodyLimitMiddleware, RequestTimingMiddleware
from curlbridge.api.routers import commands, reference, sessions, variables
from curlbridge.api.schemas import HealthResponse
from curlbridge.service.session_manager import SessionManager
from curlbridge.settings import Settings


def build_session_manager(settings: Settings) -> SessionManager:
    return SessionManager(
        ttl_seconds=settings.session_ttl_seconds,
        cleanup_interval=settings.session_cleanup_interval,
        debounce_ms=settings.validation_debounce_ms,
        line_width=settings.generator_line_width,
        max_distance=settings.suggestion_max_distance,
        completion_limit=settings.completion_limit,
        secret_mask=settings.secret_mask,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Start/stop the SessionManager alongside the application."""
    settings: Settings = app.state.settings
    mgr = build_session_manager(settings)
    mgr.start()
    init_session_manager(mgr, disable_session_list=settings.disable_session_list)
    try:
        yield
    finally:
        mgr.stop()
        reset_session_manager()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    if settings is None:
        settings = Settings()

    app = FastAPI(
        title="curlbridge",
        description=(
            "Parses, validates, completes and generates cURL commands, "
            "with {{variable}} resolution against environments."
        ),
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Middleware
    app.add_middleware(RequestTimingMiddleware)
    app.add_middleware(RequestBodyLimitMiddleware)

    # Stateless endpoints
    app.include_router(commands.router, prefix="/commands", tags=["commands"])
    app.include_router(variables.router, prefix="/variables", tags=["variables"])
    app.include_router(reference.router, prefix="/reference", tags=["reference"])

    # Session-scoped endpoints
    app.include_router(sessions.router, prefix="/sessions", tags=["sessions"])

    @app.get("/health", response_model=HealthResponse, tags=["health"])
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", version=__version__)

    return app


def main() -> None:
    """Run the REST API server using settings from environment / .env file."""
    settings = Settings()

    logging.basicConfig(level=settings.log_level.upper())
    logger = logging.getLogger("curlbridge.api")
    logger.info(
        "curlbridge API Server v%s starting (host=%s, port=%d)",
        __version__, settings.api_server_host, settings.effective_port,
    )

    uvicorn.run(
        "curlbridge.api.app:create_app",
        factory=True,
        host=settings.api_server_host,
        port=settings.effective_port,
        log_level=settings.log_level.lower(),
    )
