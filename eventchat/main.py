"""FastAPI application factory: routers, middleware and error rendering."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from eventchat.adapters.identity import NoopIdentityVerifier
from eventchat.config import Settings, get_settings
from eventchat.core.app_state import AppState
from eventchat.core.errors import GatewayError, InvalidRequest
from eventchat.infra.logging_config import LoggingConfig, get_logger
from eventchat.routers import (
    bot_router,
    events_router,
    messages_router,
    system,
    token_router,
    webhooks,
)
from eventchat.services.history_store import InMemoryHistoryStore
from eventchat.utils.rate_limit import check_rate_limit

logger = get_logger("main")

SHARED_SECRET_HEADER = "X-Token-Server-Secret"
# Health probes and the chat backend's webhook cannot send the shared secret
SKIP_AUTH_PATHS = {"/health", "/healthz", "/webhook/message"}


def _error_body(settings: Settings, error: str, detail: Optional[str]) -> dict[str, Any]:
    body: dict[str, Any] = {"error": error}
    if detail and not settings.is_production:
        body["detail"] = detail
    return body


def _testing_state(settings: Settings) -> AppState:
    return AppState(
        settings=settings,
        chat=None,
        identity_verifier=NoopIdentityVerifier(),
        history_store=InMemoryHistoryStore(),
        llm=None,
    )


def create_app(
    testing: bool = False,
    state: Optional[AppState] = None,
) -> FastAPI:
    """
    Build the application. Pass `state` to inject collaborators (tests);
    otherwise they are built from settings at startup. testing=True without a
    state starts with no external clients.
    """
    settings = state.settings if state is not None else get_settings()
    if not testing:
        LoggingConfig()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "gateway", None) is None:
            app.state.gateway = AppState.from_settings(settings)
        logger.info(
            "%s starting (env=%s, firebase=%s, bot=%s)",
            settings.app_name,
            settings.environment,
            app.state.gateway.firebase_enabled,
            app.state.gateway.llm is not None,
        )
        yield
        await app.state.gateway.aclose()

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    if state is not None:
        app.state.gateway = state
    elif testing:
        app.state.gateway = _testing_state(settings)
    else:
        app.state.gateway = None

    @app.exception_handler(GatewayError)
    async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(settings, exc.error, exc.detail),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=InvalidRequest.status_code,
            content=_error_body(settings, InvalidRequest.error, str(exc.errors())),
        )

    @app.middleware("http")
    async def shared_secret(request: Request, call_next):
        expected = settings.token_server_secret
        if expected and request.url.path not in SKIP_AUTH_PATHS:
            if request.headers.get(SHARED_SECRET_HEADER) != expected:
                return JSONResponse(status_code=401, content={"error": "Unauthorized"})
        return await call_next(request)

    @app.middleware("http")
    async def rate_limit(request: Request, call_next):
        gateway: Optional[AppState] = request.app.state.gateway
        if gateway is not None and gateway.redis_client is not None:
            client_key = request.client.host if request.client else "unknown"
            allowed = await run_in_threadpool(
                check_rate_limit,
                client_key,
                gateway.redis_client,
                settings.rate_limit_per_minute,
            )
            if not allowed:
                return JSONResponse(
                    status_code=429, content={"error": "Too many requests"}
                )
        return await call_next(request)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(system.router)
    app.include_router(token_router.router)
    app.include_router(events_router.router)
    app.include_router(bot_router.router)
    app.include_router(messages_router.router)
    app.include_router(webhooks.router)
    return app


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    settings = get_settings()
    uvicorn.run(
        "eventchat.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=settings.port,
        log_config=None,
    )
