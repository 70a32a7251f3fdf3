"""
Router Configuration - Per-router settings and lifecycle callbacks.

Process-wide defaults live in ``agent_router.core.config.Settings``;
everything specific to one router instance lives in ``RouterConfig``.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Optional, Union

from agent_router.core.config import get_settings
from agent_router.routing.presets import get_builtin_router
from agent_router.routing.tool_strategy import ToolExecutionConstraints, ToolExecutionRule
from agent_router.routing.types import RoutingStrategy, SelectionCriteria

# (input, eligible_routes, router) -> route name, sync or async
CustomRule = Callable[[Any, List[str], Any], Any]
# (input, eligible_routes) -> route name
RouteLogic = Callable[[Any, List[str]], str]


@dataclass
class SemanticSimilarityConfig:
    enabled: bool = False
    threshold: float = 0.5
    model: Optional[str] = None
    cache_embeddings: bool = True


@dataclass
class RouterCallbacks:
    """
    Optional observers of the routing lifecycle.

    Each hook may be a plain function or a coroutine function. Hooks only
    observe: an exception raised by one is logged and ignored.
    """
    on_route_start: Optional[Callable[[Any, SelectionCriteria], Any]] = None
    on_route_selected: Optional[Callable[[str, str], Any]] = None
    on_agent_execution_start: Optional[Callable[[str, str], Any]] = None
    on_agent_execution_complete: Optional[Callable[[str, Any, float], Any]] = None
    on_route_complete: Optional[Callable[[Any], Any]] = None
    on_route_error: Optional[Callable[[Exception, Any], Any]] = None


@dataclass
class RouterConfig:
    """
    Configuration of a single router.

    ``routes`` maps route names to agents. A string value names an agent
    in the agent registry handed to the Router; it is resolved at
    construction and the route is left unbound when the name is unknown.
    ``fallback`` is either an agent or a route name.
    """
    name: str
    routes: Dict[str, Any]
    description: Optional[str] = None
    intent_schema: Any = None
    fallback: Optional[Union[Any, str]] = None
    routing_strategy: Union[RoutingStrategy, str] = RoutingStrategy.FIRST_MATCH
    confidence_threshold: Optional[float] = None
    default_criteria: Optional[SelectionCriteria] = None
    custom_rules: List[CustomRule] = field(default_factory=list)
    route_logic: Optional[RouteLogic] = None
    semantic_similarity: SemanticSimilarityConfig = field(default_factory=SemanticSimilarityConfig)
    callbacks: Optional[RouterCallbacks] = None
    tool_execution_strategy: Optional[str] = None
    tool_execution_constraints: ToolExecutionConstraints = field(default_factory=ToolExecutionConstraints)
    enable_adaptive_tool_strategy: bool = False
    tool_execution_rules: List[ToolExecutionRule] = field(default_factory=list)

    @classmethod
    def from_settings(cls, name: str, routes: Dict[str, Any], **overrides: Any) -> "RouterConfig":
        """Build a config seeded from the process-wide settings."""
        settings = get_settings()
        config = cls(
            name=name,
            routes=routes,
            routing_strategy=settings.default_routing_strategy,
            semantic_similarity=SemanticSimilarityConfig(
                threshold=settings.semantic_threshold,
                model=settings.embedding_model,
                cache_embeddings=settings.embedding_cache_enabled,
            ),
            tool_execution_constraints=ToolExecutionConstraints(
                max_concurrency=settings.tool_max_concurrency,
                default_timeout=settings.tool_default_timeout_ms,
            ),
        )
        return replace(config, **overrides)

    @classmethod
    def from_preset(cls, preset_name: str, name: str, routes: Dict[str, Any], **overrides: Any) -> "RouterConfig":
        """
        Build a config from a built-in preset.

        Raises:
            ValueError: If ``preset_name`` is not a built-in preset
        """
        preset = get_builtin_router(preset_name)
        if preset is None:
            raise ValueError(f"Unknown built-in router: {preset_name}")

        config = cls(
            name=name,
            routes=routes,
            description=preset.description,
            routing_strategy=preset.strategy,
            confidence_threshold=preset.confidence_threshold,
            semantic_similarity=SemanticSimilarityConfig(
                enabled=preset.strategy == RoutingStrategy.SEMANTIC_SIMILARITY,
                cache_embeddings=preset.cache,
            ),
            tool_execution_strategy=preset.tool_strategy,
            tool_execution_constraints=ToolExecutionConstraints(
                max_concurrency=preset.max_concurrency,
                default_timeout=preset.timeout,
            ),
        )
        return replace(config, **overrides)
