"""
Data Models for Agent Router
============================

Organized into three categories:
- schemas: Pydantic views of routing domain objects
- requests: API request validation models
- responses: API response models
"""

from agent_router.models.schemas import (
    SelectionCriteriaModel,
    AgentMetricsModel,
    RouteInfo,
    RoutingMetadataModel,
    ToolRuleModel,
    ExecutionPhaseModel,
    ExecutionPlanModel,
    ExecutionHintModel,
)

from agent_router.models.requests import (
    RouteRequest,
    CapabilitiesRequest,
    TagsRequest,
    MetricsUpdateRequest,
    ToolRuleRequest,
    ToolStrategyRequest,
    ToolRunResultModel,
    ToolResultsRequest,
)

from agent_router.models.responses import (
    HealthResponse,
    RouterSummary,
    RouterListResponse,
    RoutesResponse,
    RouteResponse,
    ToolRulesResponse,
    ToolStrategyResponse,
    MessageResponse,
    ErrorResponse,
)

__all__ = [
    # Schemas
    "SelectionCriteriaModel",
    "AgentMetricsModel",
    "RouteInfo",
    "RoutingMetadataModel",
    "ToolRuleModel",
    "ExecutionPhaseModel",
    "ExecutionPlanModel",
    "ExecutionHintModel",
    # Requests
    "RouteRequest",
    "CapabilitiesRequest",
    "TagsRequest",
    "MetricsUpdateRequest",
    "ToolRuleRequest",
    "ToolStrategyRequest",
    "ToolRunResultModel",
    "ToolResultsRequest",
    # Responses
    "HealthResponse",
    "RouterSummary",
    "RouterListResponse",
    "RoutesResponse",
    "RouteResponse",
    "ToolRulesResponse",
    "ToolStrategyResponse",
    "MessageResponse",
    "ErrorResponse",
]
