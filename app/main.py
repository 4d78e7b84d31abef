# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the Interview Arena API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   poetry run start-server
#   poetry run uvicorn app.main:create_app --factory --reload
#
# Startup order: settings -> store connection -> app -> listener. A failure
# at any step before the listener exits the process with status 1.
# =============================================================================

import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from starlette.concurrency import run_in_threadpool

from app.auth import ClerkSessionVerifier, SessionVerifier
from app.config import ConfigurationError, Settings, get_settings
from app.exceptions import (
    ArenaException,
    arena_exception_handler,
    unexpected_exception_handler,
)
from app.middleware import build_pipeline, install_pipeline
from app.routers import books, chat, health, jobs
from app.static import install_frontend
from lib.database import Database, DatabaseConnectionError, connect
from lib.stream_client import StreamClient
from workers.registry import JobRegistry, default_registry

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(settings: Settings | None = None) -> None:
    """Configure root logging; DEBUG when settings.DEBUG is on."""
    debug = settings.DEBUG if settings else False
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format=LOG_FORMAT,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    - Startup: connect the store if no handle was injected
    - Shutdown: close the store handle and the vendor HTTP clients
    """
    settings: Settings = app.state.settings
    logger.info(f"Starting Interview Arena API in {settings.NODE_ENV} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")

    if app.state.database is None:
        app.state.database = await run_in_threadpool(connect, settings)

    yield

    logger.info("Shutting down Interview Arena API")
    app.state.database.close()
    app.state.stream.close()
    app.state.verifier.close()


def create_app(
    settings: Settings | None = None,
    *,
    database: Database | None = None,
    verifier: SessionVerifier | None = None,
    stream: StreamClient | None = None,
    job_registry: JobRegistry | None = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Immutable settings; loaded from the environment if omitted
        database: Ready store handle; connected during startup if omitted
        verifier: Session token verifier; Clerk's by default
        stream: Chat vendor client
        job_registry: Job functions served by the job bridge

    Returns:
        FastAPI: The configured application

    Raises:
        ConfigurationError: Missing settings, or a production build without
            its frontend bundle
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Interview Arena API",
        description="Backend for the Interview Arena coding-interview practice platform.",
        version="1.0.0",
        lifespan=lifespan,
        openapi_tags=[
            {"name": "Health", "description": "API health and readiness checks"},
            {"name": "Books", "description": "Books check"},
            {"name": "Chat", "description": "Chat connection for signed-in users"},
            {"name": "Jobs", "description": "Background job bridge"},
        ],
    )

    app.state.settings = settings
    app.state.database = database
    app.state.stream = stream or StreamClient(settings.STREAM_API_KEY, settings.STREAM_API_SECRET)
    app.state.job_registry = job_registry or default_registry(settings.REDIS_URL)

    # =========================================================================
    # Middleware: json_body -> cors -> auth -> dispatch
    # =========================================================================

    verifier = verifier or ClerkSessionVerifier.from_settings(settings)
    app.state.verifier = verifier
    install_pipeline(app, build_pipeline(settings, verifier))

    # =========================================================================
    # Exception Handlers
    # =========================================================================

    @app.exception_handler(ArenaException)
    async def handle_arena_exception(request: Request, exc: ArenaException):
        """Handle custom Interview Arena exceptions."""
        return await arena_exception_handler(request, exc)

    @app.exception_handler(Exception)
    async def handle_general_exception(request: Request, exc: Exception):
        """Handle unexpected exceptions."""
        return await unexpected_exception_handler(request, exc)

    # =========================================================================
    # Routers
    # =========================================================================

    app.include_router(health.router, tags=["Health"])

    app.include_router(books.router, tags=["Books"])

    app.include_router(
        jobs.router,
        prefix="/api/inngest",
        tags=["Jobs"]
    )

    app.include_router(
        chat.router,
        prefix="/api/chat",
        tags=["Chat"]
    )

    # Catch-all: must come after every API route
    if settings.is_production:
        install_frontend(app, settings.frontend_dist_path)

    return app


def run() -> None:
    """
    Process entry point: validate config, connect the store, then listen.

    Exits with status 1, without binding a port, if settings are incomplete
    or the store is unreachable.
    """
    import uvicorn

    try:
        settings = get_settings()
    except ConfigurationError as e:
        configure_logging()
        logger.critical(e.message)
        sys.exit(1)

    configure_logging(settings)

    try:
        database = connect(settings)
    except DatabaseConnectionError as e:
        logger.critical(f"Error starting the server: {e}")
        sys.exit(1)

    try:
        app = create_app(settings, database=database)
    except ConfigurationError as e:
        logger.critical(e.message)
        database.close()
        sys.exit(1)

    logger.info(f"Starting server on port: {settings.PORT}")
    uvicorn.run(
        app,
        host=settings.API_HOST,
        port=settings.PORT,
        log_level="debug" if settings.DEBUG else "info",
    )


if __name__ == "__main__":
    run()
