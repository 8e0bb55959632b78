"""FastAPI application factory for the chirpy backend.

Run with ``uvicorn chirpy.app:create_app --factory``.
"""
from __future__ import annotations

import logging
from datetime import timedelta

from fastapi import FastAPI

from chirpy.core.config import Settings, get_settings
from chirpy.core.log import configure_logging
from chirpy.repositories.json_storage import JsonStore
from chirpy.routers import auth as auth_router
from chirpy.routers import chirps as chirps_router
from chirpy.services.auth_service import AuthService
from chirpy.services.chirp_service import ChirpService
from chirpy.services.session_service import SessionManager

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, *, store: JsonStore | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    if not settings.jwt_secret:
        raise RuntimeError("JWT_SECRET must be configured to start the API.")

    if store is None:
        store = JsonStore.open(
            settings.db_path,
            banned_words=settings.banned_words,
            max_chirp_length=settings.chirp_max_length,
        )
    sessions = SessionManager(
        store,
        settings.jwt_secret,
        issuer=settings.jwt_issuer,
        access_ttl=timedelta(seconds=settings.access_token_ttl_seconds),
        refresh_ttl=timedelta(days=settings.refresh_token_ttl_days),
    )

    app = FastAPI(title="Chirpy API")
    app.state.settings = settings
    app.state.store = store
    app.state.sessions = sessions
    app.state.auth_service = AuthService(store=store, sessions=sessions)
    app.state.chirp_service = ChirpService(store=store)

    app.include_router(auth_router.router)
    app.include_router(chirps_router.router)
    logger.info("Chirpy API ready (env=%s, db=%s)", settings.app_env, store.path)
    return app
