"""
Core Schemas - Pydantic views of the routing domain objects.

These mirror the dataclasses in ``agent_router.routing`` for the HTTP
surface. Conversion goes through ``from_domain`` helpers so the engine
itself stays free of pydantic models.
"""

from dataclasses import asdict
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from agent_router.routing.types import AgentMetrics, SelectionCriteria


class SelectionCriteriaModel(BaseModel):
    """
    Selection criteria for one routing call.

    Example:
        {
            "required_capabilities": ["security"],
            "excluded_agents": ["Legacy"],
            "preferred_tags": ["fast"]
        }
    """
    required_capabilities: List[str] = Field(default_factory=list)
    required_tags: List[str] = Field(default_factory=list)
    excluded_agents: List[str] = Field(default_factory=list)
    preferred_capabilities: List[str] = Field(default_factory=list)
    preferred_tags: List[str] = Field(default_factory=list)
    max_agents: Optional[int] = Field(default=None, ge=1)
    min_score: Optional[float] = Field(default=None, ge=0.0, le=1.0)

    def to_domain(self) -> SelectionCriteria:
        return SelectionCriteria(**self.model_dump())

    @classmethod
    def from_domain(cls, criteria: Optional[SelectionCriteria]) -> Optional["SelectionCriteriaModel"]:
        if criteria is None:
            return None
        return cls(**criteria.to_dict())


class AgentMetricsModel(BaseModel):
    current_load: float = 0
    average_response_time: float = 0
    success_rate: float = 1.0
    availability: bool = True
    last_used: float = 0
    total_tasks: int = 0
    total_errors: int = 0

    @classmethod
    def from_domain(cls, metrics: AgentMetrics) -> "AgentMetricsModel":
        return cls(**metrics.to_dict())


class RouteInfo(BaseModel):
    """A registered route and its metadata."""
    name: str
    agent: Optional[str] = None
    capabilities: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    metrics: AgentMetricsModel


class RoutingMetadataModel(BaseModel):
    router_id: str
    execution_id: str
    duration: float = Field(..., description="Milliseconds")
    input_validation: bool
    selection_criteria: Optional[SelectionCriteriaModel] = None
    available_agents: List[str] = Field(default_factory=list)
    excluded_agents: List[str] = Field(default_factory=list)


class ToolRuleModel(BaseModel):
    """A tool execution rule as stored by a router."""
    id: str
    name: str
    description: str = ""
    condition: str
    strategy: str
    priority: int
    enabled: bool = True
    metadata: Dict[str, Any] = Field(default_factory=dict)


class ExecutionPhaseModel(BaseModel):
    tools: List[str]
    strategy: str
    estimated_time: int = Field(..., description="Milliseconds")


class ExecutionPlanModel(BaseModel):
    phases: List[ExecutionPhaseModel]
    total_estimated_time: int
    risk_level: str

    @classmethod
    def from_domain(cls, plan: Any) -> "ExecutionPlanModel":
        return cls(**asdict(plan))


class ExecutionHintModel(BaseModel):
    strategy: str
    confidence: float
    reasoning: str
