"""
Built-in Routers - Ready-made routing and tool-strategy bundles.

A preset picks a routing strategy, a default tool execution strategy and
the concurrency/timeout constraints that suit a use case, so a router can
be configured with ``RouterConfig.from_preset("semantic", ...)``.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from agent_router.routing.types import RoutingStrategy


@dataclass(frozen=True)
class RouterPreset:
    strategy: RoutingStrategy
    tool_strategy: str
    max_concurrency: int
    timeout: int  # milliseconds
    description: str
    use_case: str
    confidence_threshold: Optional[float] = None
    # Strategy the preset is meant to degrade to; informational
    fallback_strategy: Optional[RoutingStrategy] = None
    cache: bool = True
    metrics: bool = True


BUILTIN_ROUTERS: Dict[str, RouterPreset] = {
    "smart": RouterPreset(
        strategy=RoutingStrategy.BEST_MATCH,
        fallback_strategy=RoutingStrategy.FIRST_MATCH,
        confidence_threshold=0.8,
        tool_strategy="auto",
        max_concurrency=5,
        timeout=60000,
        description="Intelligent routing with auto-optimization and fallback",
        use_case="General purpose agents needing smart routing decisions",
    ),
    "simple": RouterPreset(
        strategy=RoutingStrategy.FIRST_MATCH,
        cache=False,
        metrics=False,
        tool_strategy="sequential",
        max_concurrency=1,
        timeout=60000,
        description="Direct mapping without overhead for simple routing",
        use_case="Simple agents with deterministic routing needs",
    ),
    "semantic": RouterPreset(
        strategy=RoutingStrategy.SEMANTIC_SIMILARITY,
        fallback_strategy=RoutingStrategy.BEST_MATCH,
        confidence_threshold=0.7,
        tool_strategy="adaptive",
        max_concurrency=3,
        timeout=60000,
        description="Semantic similarity-based routing for natural language",
        use_case="NLP agents, conversational systems, content analysis",
    ),
    "performance": RouterPreset(
        strategy=RoutingStrategy.FIRST_MATCH,
        metrics=False,
        tool_strategy="parallel",
        max_concurrency=10,
        timeout=60000,
        description="Optimized for high-performance production environments",
        use_case="Production agents requiring maximum throughput",
    ),
    "reliable": RouterPreset(
        strategy=RoutingStrategy.BEST_MATCH,
        fallback_strategy=RoutingStrategy.FIRST_MATCH,
        confidence_threshold=0.9,
        tool_strategy="sequential",
        max_concurrency=2,
        timeout=60000,
        description="Maximum reliability with comprehensive fallbacks",
        use_case="Mission-critical agents that cannot fail",
    ),
    "experimental": RouterPreset(
        strategy=RoutingStrategy.CUSTOM_RULES,
        fallback_strategy=RoutingStrategy.BEST_MATCH,
        cache=False,
        confidence_threshold=0.5,
        tool_strategy="conditional",
        max_concurrency=3,
        timeout=60000,
        description="For testing and experimental features",
        use_case="Development, testing, feature experimentation",
    ),
    "llm_decision": RouterPreset(
        strategy=RoutingStrategy.LLM_DECISION,
        fallback_strategy=RoutingStrategy.BEST_MATCH,
        confidence_threshold=0.8,
        tool_strategy="adaptive",
        max_concurrency=3,
        timeout=60000,
        description="Uses LLM for intelligent routing decisions",
        use_case="Complex routing scenarios requiring reasoning",
    ),
    "hybrid": RouterPreset(
        strategy=RoutingStrategy.BEST_MATCH,
        fallback_strategy=RoutingStrategy.LLM_DECISION,
        confidence_threshold=0.8,
        tool_strategy="auto",
        max_concurrency=4,
        timeout=60000,
        description="Combines traditional matching with LLM intelligence",
        use_case="Advanced agents needing both structured and intelligent routing",
    ),
}

DEFAULT_ROUTER = "smart"
DEFAULT_TOOL_STRATEGY = "auto"

_USE_CASES = {"simple", "semantic", "performance", "reliable", "smart"}

_TOOL_STRATEGY_BY_SCENARIO = {
    "speed": "parallel",
    "reliability": "sequential",
    "balanced": "auto",
    "adaptive": "adaptive",
}


def get_builtin_router(name: str) -> Optional[RouterPreset]:
    return BUILTIN_ROUTERS.get(name)


def list_builtin_routers() -> List[Dict[str, object]]:
    return [{"name": name, "config": preset} for name, preset in BUILTIN_ROUTERS.items()]


def is_builtin_router(name: str) -> bool:
    return name in BUILTIN_ROUTERS


def recommend_router(use_case: str) -> str:
    """Preset name for a use case; ``smart`` when the use case is unknown."""
    return use_case if use_case in _USE_CASES else DEFAULT_ROUTER


def recommend_tool_strategy(scenario: str) -> str:
    """Tool execution strategy for a scenario; ``auto`` when unknown."""
    return _TOOL_STRATEGY_BY_SCENARIO.get(scenario, DEFAULT_TOOL_STRATEGY)
