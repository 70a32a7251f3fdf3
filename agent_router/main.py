"""
Agent Router - FastAPI Application Entry Point

The hosting application builds its routers and hands them to
``create_app``; they are then served under ``{api_prefix}/routers``.

Usage:
    uvicorn agent_router.main:app --reload

Or:
    python -m agent_router.main
"""

import logging
from contextlib import asynccontextmanager
from typing import Iterable, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from agent_router.core.config import get_settings
from agent_router.core.dependencies import get_router_registry
from agent_router.core.exceptions import AppException
from agent_router.api.routes import health_router, routers_router
from agent_router.api.middleware.error_handler import (
    app_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    generic_exception_handler,
)
from agent_router.routing.router import Router

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Logs startup and the routers being served.
    """
    settings = get_settings()
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Serving routers: {get_router_registry().names()}")

    yield  # Application runs here

    logger.info("Shutting down application...")


def create_app(routers: Optional[Iterable[Router]] = None) -> FastAPI:
    """
    Application factory function.

    Args:
        routers: Routers to register with the process-wide router registry

    Returns:
        Configured FastAPI application
    """
    settings = get_settings()
    configure_logging(settings.log_level)

    registry = get_router_registry()
    for router in routers or []:
        registry.register(router)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="""
## Agent Router API

Route requests to the most appropriate agent and get tool execution advice.

### Features
- **Routing strategies**: first match, best match, custom rules, semantic similarity
- **Route metadata**: capabilities, tags and performance metrics per route
- **Tool strategy advice**: parallel, sequential, conditional or adaptive plans
        """,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register exception handlers
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    # Register routers
    app.include_router(health_router, prefix=settings.api_prefix)
    app.include_router(routers_router, prefix=settings.api_prefix)

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint with API information."""
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "docs": "/docs",
            "health": f"{settings.api_prefix}/health"
        }

    return app


# Create the app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "agent_router.main:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.debug,
        log_level="debug" if settings.debug else "info"
    )
