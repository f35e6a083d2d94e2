from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from case_messaging.api.middleware.correlation_id import CorrelationIdMiddleware
from case_messaging.api.v1.routers import health, messages, notifications, trash
from case_messaging.application.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    RoutingError,
    ValidationError,
)
from case_messaging.config import settings
from case_messaging.infrastructure.sms.http_gateway import HttpSmsGateway

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle."""
    gateway = HttpSmsGateway(
        base_url=settings.SMS_API_BASE_URL,
        account_sid=settings.SMS_ACCOUNT_SID,
        auth_token=settings.SMS_AUTH_TOKEN,
        sender=settings.SMS_SENDER,
        timeout_seconds=settings.SMS_TIMEOUT_SECONDS,
        default_country_code=settings.SMS_DEFAULT_COUNTRY_CODE,
    )
    await gateway.start()
    app.state.sms = gateway

    yield

    await gateway.stop()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Case Messaging Service",
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
    app.include_router(messages.router)
    app.include_router(notifications.router)
    app.include_router(trash.router)

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RoutingError)
    async def _routing(_req: Request, exc: RoutingError) -> JSONResponse:
        logger.info("Message routing refused: %s (%s)", exc.code, exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail, "code": exc.code},
        )

    @app.exception_handler(NotFoundError)
    async def _not_found(_req: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": exc.detail})

    @app.exception_handler(ForbiddenError)
    async def _forbidden(_req: Request, exc: ForbiddenError) -> JSONResponse:
        return JSONResponse(status_code=403, content={"detail": exc.detail})

    @app.exception_handler(ConflictError)
    async def _conflict(_req: Request, exc: ConflictError) -> JSONResponse:
        return JSONResponse(status_code=409, content={"detail": exc.detail})

    @app.exception_handler(ValidationError)
    async def _validation(_req: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": exc.detail})
