"""FastAPI application setup and configuration."""

from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.middleware.error_handler import setup_exception_handlers
from src.api.middleware.logging import RequestLoggingMiddleware, setup_logging
from src.shared.config import get_settings
from src.shared.database import shutdown, startup

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Handles startup and shutdown of the store connections.
    """
    await startup()
    yield
    await shutdown()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    settings = get_settings()
    setup_logging()

    application = FastAPI(
        title="Adaptive Learning Analytics API",
        description="""
        Learning analytics engine API for:
        - Recording per-interaction learning events
        - Learner profiles and detected behavioral patterns
        - Ranked adaptive recommendations
        - Progress rollups and system statistics
        """,
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # In production, set CORS_ORIGINS env variable with actual frontend domains
    cors_origins = settings.cors_origins_list
    if settings.is_production and not cors_origins:
        logger.warning(
            "No CORS_ORIGINS configured in production. "
            "API will not be accessible from browsers. "
            "Set CORS_ORIGINS env variable to allow frontend access."
        )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=[
            "Content-Type",
            "Accept",
            "Origin",
            "X-Requested-With",
            "X-Request-ID",
        ],
        max_age=600,  # 10 minutes
    )

    setup_exception_handlers(application)
    application.add_middleware(RequestLoggingMiddleware)

    from src.api.routers import analytics_router, health_router

    application.include_router(
        health_router,
        prefix="/health",
        tags=["Health"],
    )
    application.include_router(
        analytics_router,
        prefix="/analytics",
        tags=["Analytics"],
    )

    return application


# Create app instance
app = create_app()
