"""
Core Module - Configuration, errors and dependency injection.
"""

from agent_router.core.config import Settings, get_settings, settings
from agent_router.core.dependencies import (
    RouterRegistry,
    get_embedding_service,
    get_router_registry,
)

__all__ = [
    "Settings",
    "get_settings",
    "settings",
    "RouterRegistry",
    "get_embedding_service",
    "get_router_registry",
]
