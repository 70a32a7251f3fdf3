"""
Routing domain types shared across the engine.
"""

from dataclasses import asdict, dataclass, field, fields, replace
from enum import Enum
from typing import Any, Dict, List, Optional


class RoutingStrategy(str, Enum):
    """Route selection algorithms."""
    FIRST_MATCH = "first_match"
    BEST_MATCH = "best_match"
    LLM_DECISION = "llm_decision"
    CUSTOM_RULES = "custom_rules"
    SEMANTIC_SIMILARITY = "semantic_similarity"


class ToolExecutionStrategy(str, Enum):
    """Canonical shapes of tool execution."""
    PARALLEL = "parallel"
    SEQUENTIAL = "sequential"
    CONDITIONAL = "conditional"
    ADAPTIVE = "adaptive"


# Non-canonical strategy names and the canonical strategy they execute as
STRATEGY_ALIASES: Dict[str, ToolExecutionStrategy] = {
    "dependencyBased": ToolExecutionStrategy.SEQUENTIAL,
    "priorityBased": ToolExecutionStrategy.SEQUENTIAL,
    "resourceAware": ToolExecutionStrategy.ADAPTIVE,
    "auto": ToolExecutionStrategy.ADAPTIVE,
}


def canonical_strategy(name: Any) -> ToolExecutionStrategy:
    """
    Map a strategy name onto one of the four canonical strategies.

    Raises:
        ValueError: If the name is neither canonical nor a known alias
    """
    if isinstance(name, ToolExecutionStrategy):
        return name
    if name in STRATEGY_ALIASES:
        return STRATEGY_ALIASES[name]
    return ToolExecutionStrategy(name)


@dataclass
class AgentMetrics:
    """Performance metrics tracked per route."""
    current_load: float = 0
    average_response_time: float = 0  # milliseconds
    success_rate: float = 1.0
    availability: bool = True
    last_used: float = 0  # epoch milliseconds
    total_tasks: int = 0
    total_errors: int = 0

    def merge(self, **updates: Any) -> "AgentMetrics":
        """Return a copy with the given fields overwritten."""
        known = {f.name for f in fields(self)}
        unknown = set(updates) - known
        if unknown:
            raise ValueError(f"Unknown metric fields: {sorted(unknown)}")
        return replace(self, **updates)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class SelectionCriteria:
    """
    Query narrowing and ranking the candidate routes.

    Required capabilities/tags and exclusions decide eligibility (all must
    hold). Preferred capabilities/tags only contribute to scoring.
    """
    required_capabilities: List[str] = field(default_factory=list)
    required_tags: List[str] = field(default_factory=list)
    excluded_agents: List[str] = field(default_factory=list)
    preferred_capabilities: List[str] = field(default_factory=list)
    preferred_tags: List[str] = field(default_factory=list)
    max_agents: Optional[int] = None
    min_score: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class RoutingMetadata:
    """Bookkeeping attached to every routing result."""
    router_id: str
    execution_id: str
    duration: float  # milliseconds
    input_validation: bool
    selection_criteria: Optional[SelectionCriteria] = None
    available_agents: List[str] = field(default_factory=list)
    excluded_agents: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class RoutingResult:
    """Outcome of one ``route()`` call."""
    selected_route: str
    confidence: float
    reasoning: str
    result: Any
    metadata: RoutingMetadata

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
