"""
Route Registry - Per-route agents, capabilities, tags and metrics.

Every registered route name has an entry in all four maps. Registration
and removal touch the four maps together, so a lookup never observes a
half-registered route.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from agent_router.core.exceptions import RouteNotFoundError
from agent_router.routing.types import AgentMetrics

logger = logging.getLogger(__name__)


class RouteRegistry:
    """
    In-memory store of routes and their metadata.

    A route may be registered without an agent (an unresolved reference);
    dispatching to it fails with AgentNotFoundError.
    """

    def __init__(self):
        self._route_names: List[str] = []
        self._agents: Dict[str, Any] = {}
        self._capabilities: Dict[str, List[str]] = {}
        self._tags: Dict[str, List[str]] = {}
        self._metrics: Dict[str, AgentMetrics] = {}

    def add(self, route: str, agent: Optional[Any]) -> None:
        """
        Register a route. Re-registering an existing name rebinds its agent
        and keeps its metadata.
        """
        if route in self._agents:
            self._agents[route] = agent
            logger.info(f"Route '{route}' rebound to a new agent")
            return

        self._agents[route] = agent
        self._capabilities[route] = []
        self._tags[route] = []
        self._metrics[route] = AgentMetrics()
        self._route_names.append(route)

    def remove(self, route: str) -> bool:
        """Remove a route from every map. Returns False if it was unknown."""
        if route not in self._agents:
            return False
        del self._agents[route]
        del self._capabilities[route]
        del self._tags[route]
        del self._metrics[route]
        self._route_names.remove(route)
        return True

    def __contains__(self, route: str) -> bool:
        return route in self._agents

    def __len__(self) -> int:
        return len(self._route_names)

    @property
    def route_names(self) -> List[str]:
        """Registered route names in registration order (a copy)."""
        return list(self._route_names)

    def get_agent(self, route: str) -> Optional[Any]:
        return self._agents.get(route)

    def get_capabilities(self, route: str) -> List[str]:
        return self._capabilities.get(route, [])

    def get_tags(self, route: str) -> List[str]:
        return self._tags.get(route, [])

    def get_metrics(self, route: str) -> Optional[AgentMetrics]:
        return self._metrics.get(route)

    def set_capabilities(self, route: str, capabilities: Iterable[str]) -> None:
        self._require(route)
        self._capabilities[route] = list(capabilities)

    def set_tags(self, route: str, tags: Iterable[str]) -> None:
        self._require(route)
        self._tags[route] = list(tags)

    def update_metrics(self, route: str, **updates: Any) -> AgentMetrics:
        """Shallow-merge metric fields. Omitted fields keep their values."""
        self._require(route)
        merged = self._metrics[route].merge(**updates)
        self._metrics[route] = merged
        return merged

    def describe(self, route: str) -> Dict[str, Any]:
        """Snapshot of one route's metadata."""
        self._require(route)
        agent = self._agents[route]
        return {
            "name": route,
            "agent": getattr(agent, "name", None) if agent is not None else None,
            "capabilities": list(self._capabilities[route]),
            "tags": list(self._tags[route]),
            "metrics": self._metrics[route].to_dict(),
        }

    def _require(self, route: str) -> None:
        if route not in self._agents:
            raise RouteNotFoundError(route)
