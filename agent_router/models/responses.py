"""
API Response Models - Pydantic models for API responses.
"""

from typing import Optional, List, Dict, Any
from pydantic import BaseModel, Field
from datetime import datetime

from agent_router.models.schemas import (
    ExecutionHintModel,
    ExecutionPlanModel,
    RouteInfo,
    RoutingMetadataModel,
    ToolRuleModel,
)


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "healthy"
    version: str
    environment: str
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class RouterSummary(BaseModel):
    name: str
    description: Optional[str] = None
    routing_strategy: str
    routes: List[str]
    tool_execution_strategy: Optional[str] = None
    tool_rule_count: int = 0
    confidence_threshold: Optional[float] = None


class RouterListResponse(BaseModel):
    routers: List[RouterSummary]
    count: int


class RoutesResponse(BaseModel):
    router: str
    routes: List[RouteInfo]


class RouteResponse(BaseModel):
    """
    Outcome of a routing call.

    Example:
        {
            "success": true,
            "selected_route": "BugFinder",
            "confidence": 0.9,
            "reasoning": "Null check missing in parser",
            "result": {"issues": 1},
            "metadata": {...}
        }
    """
    success: bool = True
    selected_route: str
    confidence: float
    reasoning: str
    result: Any = None
    metadata: RoutingMetadataModel


class ToolRulesResponse(BaseModel):
    router: str
    rules: List[ToolRuleModel]
    count: int


class ToolStrategyResponse(BaseModel):
    """Tool execution recommendation with its plan."""
    recommended_strategy: str
    confidence: float
    reasoning: str
    constraints: Dict[str, Any] = Field(default_factory=dict)
    execution_hints: List[ExecutionHintModel] = Field(default_factory=list)
    execution_plan: ExecutionPlanModel


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str
    error_code: str
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    details: Optional[Dict[str, Any]] = None
