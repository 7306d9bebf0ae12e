from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import redis.asyncio as aioredis
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from messaging_hub.api.deps import open_uow
from messaging_hub.api.middleware.correlation_id import CorrelationIdMiddleware
from messaging_hub.api.v1.routers import conversations, health, messages, ws
from messaging_hub.application.dto.events import CaseEvent
from messaging_hub.application.exceptions import (
    AccessDeniedError,
    AppError,
    AuthenticationError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from messaging_hub.config import settings
from messaging_hub.infrastructure.bus.redis_pubsub import OnEventCallback, RedisPubSubSubscriber
from messaging_hub.infrastructure.ws.manager import ConnectionManager
from messaging_hub.logging_config import configure_logging
from messaging_hub.services import case_event_service

logger = logging.getLogger(__name__)


def _case_event_callback(hub: ConnectionManager) -> OnEventCallback:
    async def _on_case_event(event: CaseEvent) -> None:
        try:
            async with open_uow() as uow:
                effects = await case_event_service.handle_case_event(event, uow)
        except AppError as exc:
            logger.warning("Case event %s rejected: %s", event.event_type, exc.detail)
            return
        await hub.apply(effects)

    return _on_case_event


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle."""
    hub = ConnectionManager()
    app.state.hub = hub
    app.state.redis = None
    subscriber: RedisPubSubSubscriber | None = None

    if settings.CASE_EVENTS_ENABLED:
        app.state.redis = aioredis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
        )
        logger.info("Redis connection pool created")
        subscriber = RedisPubSubSubscriber(
            app.state.redis,
            settings.CASE_EVENTS_CHANNEL,
            _case_event_callback(hub),
        )
        await subscriber.start()

    yield

    if subscriber is not None:
        await subscriber.stop()
    if app.state.redis is not None:
        await app.state.redis.aclose()
        logger.info("Redis connection pool closed")
    await hub.clear()


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(
        title="Case Messaging Hub",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(CorrelationIdMiddleware)

    _register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(conversations.router)
    app.include_router(messages.router)
    app.include_router(ws.router)

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(NotFoundError)
    async def _not_found(_req: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": exc.detail})

    @app.exception_handler(AccessDeniedError)
    async def _forbidden(_req: Request, exc: AccessDeniedError) -> JSONResponse:
        return JSONResponse(status_code=403, content={"detail": exc.detail})

    @app.exception_handler(ValidationError)
    async def _validation(_req: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": exc.detail})

    @app.exception_handler(AuthenticationError)
    async def _unauthenticated(_req: Request, exc: AuthenticationError) -> JSONResponse:
        return JSONResponse(
            status_code=401,
            content={"detail": exc.detail},
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(PersistenceError)
    async def _persistence(_req: Request, exc: PersistenceError) -> JSONResponse:
        return JSONResponse(status_code=500, content={"detail": exc.detail})

