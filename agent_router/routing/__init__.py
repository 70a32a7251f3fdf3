"""
Routing Engine - Route selection, execution dispatch and tool strategy.

Components:
- registry: Per-route agents, capabilities, tags and metrics
- criteria: Criteria merge and eligibility filter
- selector: The five route selection strategies
- dispatcher: Validation, agent execution and fallback
- tool_strategy: Tool execution strategy advisor and rules
- router: Facade plus agent/tool adapters
"""

from agent_router.routing.config import RouterCallbacks, RouterConfig, SemanticSimilarityConfig
from agent_router.routing.events import (
    ROUTER_ERROR,
    ROUTER_START,
    ROUTER_SUCCESS,
    EventSink,
    LoggingEventSink,
    RecordingEventSink,
)
from agent_router.routing.presets import (
    BUILTIN_ROUTERS,
    RouterPreset,
    get_builtin_router,
    is_builtin_router,
    list_builtin_routers,
    recommend_router,
    recommend_tool_strategy,
)
from agent_router.routing.router import (
    Router,
    RouterAgent,
    RouterTool,
    create_router,
    router_as_agent,
    router_as_tool,
)
from agent_router.routing.tool_strategy import (
    ResourceLimits,
    StrategyConstraints,
    ToolExecutionConstraints,
    ToolExecutionRule,
    ToolRunResult,
)
from agent_router.routing.types import (
    AgentMetrics,
    RoutingMetadata,
    RoutingResult,
    RoutingStrategy,
    SelectionCriteria,
    ToolExecutionStrategy,
)

__all__ = [
    "Router",
    "RouterAgent",
    "RouterTool",
    "create_router",
    "router_as_agent",
    "router_as_tool",
    "RouterConfig",
    "RouterCallbacks",
    "SemanticSimilarityConfig",
    "EventSink",
    "LoggingEventSink",
    "RecordingEventSink",
    "ROUTER_START",
    "ROUTER_SUCCESS",
    "ROUTER_ERROR",
    "BUILTIN_ROUTERS",
    "RouterPreset",
    "get_builtin_router",
    "is_builtin_router",
    "list_builtin_routers",
    "recommend_router",
    "recommend_tool_strategy",
    "ResourceLimits",
    "StrategyConstraints",
    "ToolExecutionConstraints",
    "ToolExecutionRule",
    "ToolRunResult",
    "AgentMetrics",
    "RoutingMetadata",
    "RoutingResult",
    "RoutingStrategy",
    "SelectionCriteria",
    "ToolExecutionStrategy",
]
