"""
Dependencies - Dependency injection for services and components.

Provides singleton instances of the embedding service and the registry
of routers served over HTTP.
"""

from dataclasses import replace
from typing import TYPE_CHECKING, Dict, List, Optional
from functools import lru_cache

from agent_router.core.config import get_settings
from agent_router.core.exceptions import RouterNotFoundError
from agent_router.services.embedding_service import EmbeddingService, EmbeddingConfig

if TYPE_CHECKING:
    from agent_router.routing.router import Router


class RouterRegistry:
    """
    Named routers exposed by the API.

    The hosting application registers its routers at startup; the API
    looks them up by name.
    """

    def __init__(self):
        self._routers: Dict[str, "Router"] = {}

    def register(self, router: "Router") -> None:
        """Register a router under its configured name, replacing any previous one."""
        self._routers[router.name] = router

    def get(self, name: str) -> "Router":
        """Get router by name."""
        router = self._routers.get(name)
        if router is None:
            raise RouterNotFoundError(name)
        return router

    def find(self, name: str) -> Optional["Router"]:
        return self._routers.get(name)

    def names(self) -> List[str]:
        return list(self._routers)

    def unregister(self, name: str) -> bool:
        """Remove a router."""
        return self._routers.pop(name, None) is not None

    def clear(self) -> None:
        self._routers.clear()


# Singleton instances
_router_registry = None


def embedding_config_from_settings(**overrides) -> EmbeddingConfig:
    """Embedding configuration from settings, with per-router overrides."""
    settings = get_settings()
    config = EmbeddingConfig(
        provider=settings.embedding_provider,
        model=settings.embedding_model,
        dimension=settings.embedding_dimension,
        cache_enabled=settings.embedding_cache_enabled,
        cache_size=settings.embedding_cache_size,
        device=settings.embedding_device
    )
    return replace(config, **overrides)


@lru_cache()
def get_embedding_service() -> EmbeddingService:
    """Get the shared embedding service configured from settings."""
    return EmbeddingService(config=embedding_config_from_settings())


def get_router_registry() -> RouterRegistry:
    """Get router registry instance."""
    global _router_registry
    if _router_registry is None:
        _router_registry = RouterRegistry()
    return _router_registry

