"""API routers package."""

from src.api.routers.analytics import router as analytics_router
from src.api.routers.health import router as health_router

__all__ = [
    "analytics_router",
    "health_router",
]
