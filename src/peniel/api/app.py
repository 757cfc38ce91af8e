"""Peniel API: FastAPI application factory.

The app factory creates a FastAPI instance with:
- CORS middleware (configurable origins)
- Lifespan handler that closes the AI client on shutdown
- Health endpoint at GET /api/health
- Router registration for every endpoint module
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from peniel.api.deps import get_registry, get_text_generator
from peniel.api.middleware import register_error_handlers
from peniel.api.routers.auth import router as auth_router
from peniel.api.routers.birthdays import router as birthdays_router
from peniel.api.routers.calendar import router as calendar_router
from peniel.api.routers.dashboard import router as dashboard_router
from peniel.api.routers.events import router as events_router
from peniel.api.routers.members import router as members_router
from peniel.api.routers.sectors import router as sectors_router
from peniel.api.routers.sessions import router as sessions_router
from peniel.config import PenielConfig
from peniel.core.sessions import SessionRegistry
from peniel.core.store import AppStore
from peniel.genai import TextGenerator

logger = logging.getLogger(__name__)


def store_factory(config: PenielConfig) -> Callable[[], AppStore]:
    """Return a factory building one session's store from *config*."""
    tz = config.calendar.tzinfo

    def _build() -> AppStore:
        if config.seed_mock_data:
            return AppStore.seeded(tz=tz)
        return AppStore(tz=tz)

    return _build


def create_app(
    config: PenielConfig | None = None,
    *,
    registry: SessionRegistry | None = None,
    generator: TextGenerator | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Parameters
    ----------
    config:
        Loaded configuration. Defaults to ``PenielConfig()``.
    registry:
        Session registry; built from *config* when omitted.
    generator:
        AI text generator; built from ``config.genai`` when omitted and
        closed on shutdown. A caller-supplied generator is left open.
    """
    if config is None:
        config = PenielConfig()
    if registry is None:
        registry = SessionRegistry(
            store_factory(config),
            max_sessions=config.sessions.max_sessions,
            idle_timeout_s=config.sessions.idle_timeout_s,
        )
    owns_generator = generator is None
    if generator is None:
        generator = TextGenerator(config.genai)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("%s API starting", config.name)
        yield
        if owns_generator:
            await generator.shutdown()
        logger.info("%s API stopped (%d open session(s))", config.name, len(registry))

    app = FastAPI(
        title=f"{config.name} API",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.router.redirect_slashes = False

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    app.dependency_overrides[get_registry] = lambda: registry
    app.dependency_overrides[get_text_generator] = lambda: generator

    app.include_router(sessions_router)
    app.include_router(sectors_router)
    app.include_router(auth_router)
    app.include_router(events_router)
    app.include_router(members_router)
    app.include_router(birthdays_router)
    app.include_router(dashboard_router)
    app.include_router(calendar_router)

    @app.get("/api/health")
    async def health():
        return {"status": "ok"}

    return app
