"""
API Routes - FastAPI route modules.
"""

from agent_router.api.routes.health import router as health_router
from agent_router.api.routes.routers import router as routers_router

__all__ = [
    "health_router",
    "routers_router",
]
