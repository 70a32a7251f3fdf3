"""
API Request Models - Pydantic models for request validation.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from agent_router.models.schemas import SelectionCriteriaModel
from agent_router.routing.types import canonical_strategy


def _validate_strategy(value: str) -> str:
    try:
        canonical_strategy(value)
    except ValueError:
        raise ValueError(f"Unknown tool execution strategy: {value}")
    return value


class RouteRequest(BaseModel):
    """
    Request to route an input to one of a router's agents.

    Example:
        {
            "input": {"target": "bugFinder", "diff": "..."},
            "context": {"tenant_id": "acme"},
            "criteria": {"required_capabilities": ["security"]}
        }
    """
    input: Any = Field(..., description="Payload handed to the selected agent")
    context: Dict[str, Any] = Field(
        default_factory=dict,
        description="Optional correlation_id, tenant_id, available_tools and state"
    )
    criteria: Optional[SelectionCriteriaModel] = None


class CapabilitiesRequest(BaseModel):
    """Replace the capabilities of a route."""
    capabilities: List[str] = Field(..., examples=[["security", "lint"]])


class TagsRequest(BaseModel):
    """Replace the tags of a route."""
    tags: List[str] = Field(..., examples=[["fast", "stable"]])


class MetricsUpdateRequest(BaseModel):
    """
    Partial metrics update. Omitted fields keep their current values.

    Example:
        {"current_load": 35, "success_rate": 0.92}
    """
    current_load: Optional[float] = Field(default=None, ge=0)
    average_response_time: Optional[float] = Field(default=None, ge=0)
    success_rate: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    availability: Optional[bool] = None
    last_used: Optional[float] = Field(default=None, ge=0)
    total_tasks: Optional[int] = Field(default=None, ge=0)
    total_errors: Optional[int] = Field(default=None, ge=0)


class ToolRuleRequest(BaseModel):
    """
    Request to add a tool execution rule.

    Example:
        {
            "id": "batch-writes",
            "name": "Batch writes",
            "condition": "tool_count > 3 && tool_name_contains(\\"save\\")",
            "strategy": "sequential",
            "priority": 85
        }
    """
    id: str = Field(..., min_length=1, max_length=100)
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default="", max_length=1000)
    condition: str = Field(..., min_length=1, max_length=500)
    strategy: str
    priority: int = Field(default=50, ge=0, le=100)
    enabled: bool = True
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("strategy")
    @classmethod
    def validate_strategy(cls, v: str) -> str:
        """Accept canonical strategies and their known aliases."""
        return _validate_strategy(v)


class ToolStrategyRequest(BaseModel):
    """
    Request a tool execution recommendation.

    Example:
        {
            "tools": ["fetchUser", "processUser", "saveUser"],
            "context": {"priority": "high"},
            "agent_route": "BugFinder"
        }
    """
    tools: List[str] = Field(..., min_length=1)
    context: Dict[str, Any] = Field(default_factory=dict)
    agent_route: Optional[str] = None


class ToolRunResultModel(BaseModel):
    success: bool
    duration: float = Field(..., ge=0, description="Milliseconds")
    error: Optional[str] = None


class ToolResultsRequest(BaseModel):
    """Observed results of running tools with a strategy."""
    tools: List[str] = Field(..., min_length=1)
    strategy: str
    results: List[ToolRunResultModel]
    agent_route: Optional[str] = None

    @field_validator("strategy")
    @classmethod
    def validate_strategy(cls, v: str) -> str:
        return _validate_strategy(v)
