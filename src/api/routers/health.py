"""Health check API routes."""

from fastapi import APIRouter
from pydantic import BaseModel, Field

from src.shared.database import get_health_status
from src.shared.feature_flags import get_feature_flags
from src.shared.service_registry import get_service_registry

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(
        ...,
        description="Overall health status",
    )
    version: str = Field(
        default="1.0.0",
        description="API version",
    )


class ReadinessResponse(BaseModel):
    """Readiness check response."""

    status: str = Field(
        ...,
        description="Overall readiness status",
    )
    store: str = Field(
        ...,
        description="Analytics store backend (memory or redis)",
    )
    store_status: str = Field(
        ...,
        description="Analytics store status",
    )
    feature_flags: dict[str, bool] = Field(
        default_factory=dict,
        description="Current feature flag states",
    )
    services: dict[str, str] = Field(
        default_factory=dict,
        description="Instantiated service implementations",
    )


class LivenessResponse(BaseModel):
    """Liveness check response."""

    status: str = Field(
        default="alive",
        description="Liveness status",
    )


@router.get(
    "",
    response_model=HealthResponse,
    summary="Basic health check",
    description="Simple health check endpoint.",
)
async def health_check() -> HealthResponse:
    """Basic health check.

    Returns:
        Health status
    """
    return HealthResponse(
        status="healthy",
        version="1.0.0",
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness check",
    description="Check if the service is ready to accept traffic.",
)
async def readiness_check() -> ReadinessResponse:
    """Readiness check with store verification.

    Returns:
        Readiness status with component details
    """
    health = await get_health_status()
    store = health["store"]

    return ReadinessResponse(
        status="ready" if health["overall"] else "not_ready",
        store=store["type"],
        store_status="healthy" if store["healthy"] else "unhealthy",
        feature_flags=get_feature_flags().get_all_states(),
        services=get_service_registry().get_service_info(),
    )


@router.get(
    "/live",
    response_model=LivenessResponse,
    summary="Liveness check",
    description="Check if the service is alive.",
)
async def liveness_check() -> LivenessResponse:
    """Liveness check.

    Always returns alive if the endpoint is reachable.

    Returns:
        Liveness status
    """
    return LivenessResponse(status="alive")
