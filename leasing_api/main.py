"""FastAPI application for the leasing assistant API."""
from __future__ import annotations

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

os.environ.setdefault("GRPC_VERBOSITY", "ERROR")
os.environ.setdefault("GRPC_TRACE", "")

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from .core.config import Settings, get_settings
from .core.container import AppServices, build_services, new_request_id
from .core.logging import configure_logging
from .data.seed import create_schema, seed_demo_data
from .routers import bookings, chat
from .services.domain import StorageUnavailableError, format_timestamp, utcnow

logger = logging.getLogger(__name__)

SERVICE_NAME = "leasing-assistant-api"


def create_app(settings: Settings | None = None, services: AppServices | None = None) -> FastAPI:
    """Build the application. Pre-built ``services`` skip engine and oracle setup."""

    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging(settings.log_level)
        if getattr(app.state, "services", None) is None:
            app.state.services = build_services(settings)

        current: AppServices = app.state.services
        if settings.seed_on_startup and current.engine is not None:
            await create_schema(current.engine)
            await seed_demo_data(current.session_factory)

        logger.info("Leasing assistant API started (env=%s)", settings.app_env)
        try:
            yield
        finally:
            if current.engine is not None:
                await current.engine.dispose()

    app = FastAPI(title="Leasing Assistant API", version="0.1.0", lifespan=lifespan)
    if services is not None:
        app.state.services = services

    if settings.cors_allow_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_allow_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
        logger.info("Rejected %s %s: %s", request.method, request.url.path, message)
        return JSONResponse(status_code=400, content={"error": message, "request_id": new_request_id()})

    @app.exception_handler(StorageUnavailableError)
    async def storage_unavailable(request: Request, exc: StorageUnavailableError) -> JSONResponse:
        request_id = new_request_id()
        logger.error("Request %s to %s hit a storage failure: %s", request_id, request.url.path, exc)
        return JSONResponse(
            status_code=503,
            content={"error": "Service temporarily unavailable", "request_id": request_id},
        )

    @app.get("/api/health", tags=["meta"])
    async def health() -> dict[str, str]:
        """Simple liveness probe."""

        return {"status": "ok", "timestamp": format_timestamp(utcnow()), "service": SERVICE_NAME}

    @app.head("/api/health", tags=["meta"])
    async def health_head() -> Response:
        """Allow HEAD for uptime monitors that only need the status code."""

        return Response(status_code=200)

    app.include_router(chat.router, prefix="/api", tags=["chat"])
    app.include_router(bookings.router, prefix="/api", tags=["bookings"])
    return app


app = create_app()
