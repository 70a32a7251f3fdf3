"""
Health Check Endpoints - Application health and status monitoring.
"""

from fastapi import APIRouter, Depends
from datetime import datetime

from agent_router.core.config import get_settings, Settings
from agent_router.core.dependencies import RouterRegistry, get_router_registry
from agent_router.models.responses import HealthResponse


router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health Check",
    description="Check if the API is running and healthy"
)
async def health_check(
    settings: Settings = Depends(get_settings)
) -> HealthResponse:
    """
    Basic health check endpoint.

    Returns:
        HealthResponse with status and version info
    """
    return HealthResponse(
        status="healthy",
        version=settings.app_version,
        environment=settings.environment,
        timestamp=datetime.utcnow()
    )


@router.get(
    "/ready",
    summary="Readiness Check",
    description="Check if the API is ready to accept requests"
)
async def readiness_check(
    settings: Settings = Depends(get_settings),
    registry: RouterRegistry = Depends(get_router_registry)
) -> dict:
    """
    Readiness check for container orchestration.

    Ready once at least one router is registered.
    """
    checks = {
        "api": True,
        "config_loaded": settings is not None,
        "routers_registered": bool(registry.names()),
    }

    return {
        "ready": all(checks.values()),
        "checks": checks,
        "routers": registry.names(),
        "timestamp": datetime.utcnow().isoformat()
    }


@router.get(
    "/live",
    summary="Liveness Check",
    description="Simple liveness probe"
)
async def liveness_check() -> dict:
    """Returns OK if the server is running."""
    return {"status": "alive"}
