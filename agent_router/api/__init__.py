"""
API Layer - FastAPI routes and middleware.
"""

from agent_router.api.routes import health_router, routers_router

__all__ = [
    "health_router",
    "routers_router",
]
