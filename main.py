"""
Main FastAPI application entry point.

This module creates and configures the FastAPI application with its
middleware, exception handlers, static upload mount and route registration.
"""

import logging
import traceback
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from fastapi.staticfiles import StaticFiles
from pydantic import ValidationError as PydanticValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from bmvt.api.routes import (
    auth,
    chambres,
    chat,
    health,
    medicales,
    offres,
    paiements,
    pelerins,
    pelerins_paiement,
    users,
    versements,
    vols,
    voyages,
)
from bmvt.core.config import settings
from bmvt.core.dependencies import require_auth
from bmvt.core.errors import ApplicationError
from bmvt.core.logging_config import setup_logging
from bmvt.core.middleware import LoggingMiddleware, SecurityHeadersMiddleware
from bmvt.core.responses import error_response
from bmvt.core.validation import first_error_message
from bmvt.db.models import Base
from bmvt.db.session import engine
from bmvt.services.chat_broadcaster import broadcaster

# Configure logging
setup_logging()
logger = logging.getLogger("bmvt.main")

API_PREFIX = "/api"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """
    FastAPI lifespan context manager.

    Creates tables outside production and runs the chat heartbeat.
    """
    logger.info("Starting up application...")

    if not settings.is_production:
        try:
            Base.metadata.create_all(bind=engine)
            logger.info("Database tables created successfully")
        except Exception as e:
            logger.warning(f"Database initialization failed: {e}")
            logger.info("Database-dependent endpoints will return appropriate errors")

    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Database: {str(settings.get_database_url()).split('@')[-1]}")

    broadcaster.start_heartbeat(settings.chat_heartbeat_seconds)

    yield

    logger.info("Shutting down application...")
    await broadcaster.stop_heartbeat()


def create_application() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    app = FastAPI(
        title="BMVT API",
        version=settings.app_version,
        description="Back-office API for HAJJ and OUMRAH pilgrimage management.",
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
        openapi_url="/openapi.json" if not settings.is_production else None,
        lifespan=lifespan,
    )

    setup_middleware(app)
    setup_exception_handlers(app)
    register_routes(app)
    mount_uploads(app)

    return app


def setup_middleware(app: FastAPI) -> None:
    """Configure application middleware."""

    # Custom middleware (order matters - added first, executed last)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(LoggingMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_origin_regex=settings.allowed_origin_regex,
        allow_credentials=True,
        allow_methods=settings.allowed_methods,
        allow_headers=settings.allowed_headers,
        max_age=3600,
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Configure application exception handlers."""

    @app.exception_handler(ApplicationError)
    async def application_error_handler(request: Request, exc: ApplicationError):
        if exc.status_code >= 500:
            logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
        else:
            logger.info(
                f"HTTP {exc.status_code} on {request.method} {request.url.path}: {exc.message}"
            )
        return error_response(exc.status_code, exc.message, exc.detail)

    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.info(f"Request validation error on {request.method} {request.url.path}: {exc}")
        return error_response(400, first_error_message(exc))

    @app.exception_handler(PydanticValidationError)
    async def payload_validation_exception_handler(request: Request, exc: PydanticValidationError):
        logger.info(f"Payload validation error on {request.method} {request.url.path}: {exc}")
        return error_response(400, first_error_message(exc))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            if request.url.path.startswith(API_PREFIX):
                return error_response(404, "Route introuvable")
            return PlainTextResponse("Not found", status_code=404)
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Log unexpected errors; expose the traceback outside production."""
        logger.error(
            f"Unexpected error on {request.method} {request.url.path}: {exc}",
            exc_info=True,
        )
        detail = None if settings.is_production else "".join(traceback.format_exception(exc))
        return error_response(500, "Erreur serveur", detail)


def register_routes(app: FastAPI) -> None:
    """Register application routes."""

    # Account management requires a valid token; /auth/me guards itself
    app.include_router(users.router, prefix=API_PREFIX, dependencies=[Depends(require_auth)])

    # Back-office resources are open, as is the chat stream
    for module in (
        health,
        auth,
        pelerins,
        medicales,
        vols,
        chambres,
        paiements,
        versements,
        offres,
        voyages,
        pelerins_paiement,
        chat,
    ):
        app.include_router(module.router, prefix=API_PREFIX)

    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "environment": settings.environment,
            "status": "running",
        }


def mount_uploads(app: FastAPI) -> None:
    """Serve stored files under ``/uploads``."""
    directory = Path(settings.upload_directory)
    directory.mkdir(parents=True, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=directory), name="uploads")


# Create the application instance
app = create_application()


# Development server entry point
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=not settings.is_production,
        log_level="info" if settings.is_production else "debug",
    )
