"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures middleware, exception handlers, and lifespan events.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from psycopg_pool import ConnectionPool

from src.adapters.mail.resend import ResendEmailSender
from src.adapters.repository.postgres import run_migrations
from src.api.dependencies import build_email_sender, build_postgres_intake_controller
from src.api.errors import install_exception_handlers
from src.api.v1 import router as v1_router
from src.config.settings import get_settings

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "v1",
        "description": "Application Intake API v1 - Submit professional immigration applications",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Creates database connection pool on startup
    - Runs migrations on startup
    - Builds the intake controller once and stores it in app state
    - Closes the mail client and connection pool on shutdown
    """
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    logger.info("Starting application...")
    logger.info("Connecting to database...")

    # Bounded checkout and per-statement timeouts so a hung database can't hold a request
    pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=settings.pool_min_size,
        max_size=settings.pool_max_size,
        timeout=settings.pool_timeout_seconds,
        kwargs={"options": f"-c statement_timeout={settings.statement_timeout_ms}"},
    )

    logger.info("Running database migrations...")
    run_migrations(pool)

    email_sender = build_email_sender(settings)
    logger.info("Email transport: %s", type(email_sender).__name__)

    app.state.pool = pool
    app.state.intake_controller = build_postgres_intake_controller(settings, pool, email_sender)

    logger.info("Application startup complete")

    yield

    logger.info("Shutting down application...")
    if isinstance(email_sender, ResendEmailSender):
        email_sender.close()
    pool.close()
    logger.info("Database connection pool closed")


def create_app() -> FastAPI:
    """Build the FastAPI application with middleware, handlers and routes."""
    application = FastAPI(
        title="provisa-intake",
        description="Application Intake API - Validates, rate-limits and stores "
        "public application submissions",
        version="0.1.0",
        openapi_tags=tags_metadata,
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["POST", "OPTIONS"],
        allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
    )
    install_exception_handlers(application)

    application.include_router(v1_router, prefix="/v1")

    @application.get("/health")
    async def health_check(request: Request) -> dict[str, str]:
        """
        Health check endpoint with database validation.

        Returns 200 OK if application and database are healthy.
        Raises exception if database connection fails.
        """
        pool = request.app.state.pool
        with pool.connection() as conn:
            conn.execute("SELECT 1")

        return {"status": "healthy"}

    return application


app = create_app()
