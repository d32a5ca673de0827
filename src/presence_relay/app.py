from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import redis.asyncio as aioredis
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from presence_relay.api.v1.routers import health, presence, ws
from presence_relay.application.exceptions import ValidationError
from presence_relay.application.ports.clock import Clock
from presence_relay.application.ports.push import PushSender
from presence_relay.config import Settings, settings as default_settings
from presence_relay.container import build_container

logger = logging.getLogger(__name__)


def _make_lifespan(
    app_settings: Settings,
    push_sender: PushSender | None,
    clock: Clock | None,
):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Startup / shutdown lifecycle."""
        redis: aioredis.Redis | None = None
        if app_settings.uses_redis:
            redis = aioredis.from_url(app_settings.REDIS_URL, decode_responses=True)
            logger.info("Redis connection pool created")
        app.state.redis = redis

        container = build_container(
            app_settings, redis=redis, push_sender=push_sender, clock=clock,
        )
        app.state.relay = container

        yield

        await container.tasks.drain()
        if redis is not None:
            await redis.aclose()
            logger.info("Redis connection pool closed")

    return lifespan


def create_app(
    app_settings: Settings | None = None,
    *,
    push_sender: PushSender | None = None,
    clock: Clock | None = None,
) -> FastAPI:
    app_settings = app_settings or default_settings
    app = FastAPI(
        title="Presence Relay",
        version="0.1.0",
        lifespan=_make_lifespan(app_settings, push_sender, clock),
    )
    app.state.settings = app_settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    _register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(presence.router)
    app.include_router(ws.router)

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def _validation(_req: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": exc.detail})
