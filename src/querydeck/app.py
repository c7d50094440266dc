from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from querydeck.api.routes_history import router as history_router
from querydeck.api.routes_session import router as session_router
from querydeck.config.settings import Settings
from querydeck.gateway.interface import ExecutionGateway
from querydeck.gateway.registry import get_gateway
from querydeck.session.manager import Notifier, SessionManager, SessionState


def build_manager(
    settings: Settings,
    *,
    gateway: ExecutionGateway | None = None,
    notifier: Notifier | None = None,
) -> SessionManager:
    """Create a session manager seeded from settings.

    Setting toggles made during the session do not write back into ``settings``.
    """
    state = SessionState(
        connection=settings.connection,
        formatting=settings.formatting.model_copy(),
        execution=settings.execution.model_copy(),
    )
    return SessionManager(
        gateway or get_gateway(settings.gateway), state=state, notifier=notifier
    )


def create_app(
    *, settings: Settings | None = None, gateway: ExecutionGateway | None = None
) -> FastAPI:
    app = FastAPI(title="querydeck")

    app.state.settings = settings or Settings()
    app.state.manager = build_manager(app.state.settings, gateway=gateway)
    logger = logging.getLogger("querydeck")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app.state.settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    logger.info("CORS allowed origins: %s", app.state.settings.cors_allow_origins)

    app.include_router(session_router)
    app.include_router(history_router)

    return app
