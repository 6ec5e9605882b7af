"""
FastAPI application factory.
create_app() is the single entry point for building the app.

Layout:
    /health         ungated liveness check
    /api/...        gated sub-application wrapped in TurnstileMiddleware
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import AppSettings
from errors import register_error_handlers
from infrastructure.captcha.protocol import TokenVerifier
from infrastructure.captcha.turnstile import TurnstileVerifier
from infrastructure.http_client import HttpClient
from middleware.request_logging import RequestLoggingMiddleware
from middleware.turnstile import TurnstileMiddleware
from routes.health_routes import router as health_router
from routes.protected_routes import router as protected_router
from shared.logging import setup_logging


def create_app(
    settings: Optional[AppSettings] = None,
    verifier: Optional[TokenVerifier] = None,
) -> FastAPI:
    """Create and return a fully configured FastAPI application.

    ``verifier`` replaces the Cloudflare verifier, e.g. with a fake in tests.
    """
    if settings is None:
        settings = AppSettings()

    setup_logging(settings.logging.log_level, settings.logging.log_format)

    # Initialise Sentry before anything else so it captures startup errors
    if settings.sentry.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry.sentry_dsn,
            send_default_pii=settings.sentry.sentry_send_pii,
            traces_sample_rate=settings.sentry.sentry_traces_sample_rate,
            profiles_sample_rate=settings.sentry.sentry_profile_sample_rate,
        )

    http_client = HttpClient(timeout=settings.turnstile.turnstile_timeout_seconds)
    if verifier is None:
        verifier = TurnstileVerifier(http_client)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.settings = settings
        app.state.http_client = http_client

        yield

        await http_client.aclose()

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        docs_url=settings.docs_url,
        redoc_url=None,
        lifespan=lifespan,
    )

    # The token header must be allowed cross-origin for browser clients
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    register_error_handlers(app)
    app.include_router(health_router)

    api = FastAPI(docs_url=None, redoc_url=None, openapi_url=None)
    api.add_middleware(
        TurnstileMiddleware,
        config=settings.turnstile_config(),
        verifier=verifier,
    )
    register_error_handlers(api)
    api.include_router(protected_router)
    app.mount("/api", api)

    return app
