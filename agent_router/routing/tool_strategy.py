"""
Tool Execution Strategy Advisor - Recommends how a set of tools should run.

RESPONSIBILITY:
Given tool names and a context, recommend one of four execution shapes
(parallel, sequential, conditional, adaptive) together with an execution
plan. Route selection is not involved; route metrics are read only to
adjust a recommendation for a specific agent.

FLOW:
1. Pattern analysis classifies tool names into read / process / write
   buckets and derives dependency, conditional-logic and complexity signals
2. The rule engine evaluates enabled rules in priority order; every
   matching rule proposes a strategy with a confidence
3. The most confident rule replaces the pattern-analysis result only if
   it is strictly more confident
4. Agent metrics may force sequential -> parallel (slow agent) and then
   parallel -> sequential (unreliable agent)
5. The final strategy is turned into phases with time estimates
"""

import logging
import re
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

from agent_router.core.exceptions import InvalidRuleError
from agent_router.core.ids import IdGenerator
from agent_router.routing.conditions import Condition, ToolExecutionContext, parse_condition
from agent_router.routing.registry import RouteRegistry
from agent_router.routing.types import ToolExecutionStrategy, canonical_strategy

logger = logging.getLogger(__name__)

_READ_RE = re.compile(r"^(get|fetch|load|read)")
_PROCESS_RE = re.compile(r"^(process|transform|analyze)")
_WRITE_RE = re.compile(r"^(save|write|store|update)")
_GROUP_PROCESS_RE = re.compile(r"^(process|transform|analyze|calculate)")
_GROUP_WRITE_RE = re.compile(r"^(save|write|store|update|send)")
_CPU_RE = re.compile(r"^(process|transform|analyze|calculate|generate)")
_MEMORY_RE = re.compile(r"^(load|cache|store|buffer)")
_NETWORK_RE = re.compile(r"^(fetch|get|send|post|upload|download)")

SLOW_AGENT_RESPONSE_MS = 5000
UNRELIABLE_AGENT_SUCCESS_RATE = 0.8

ConditionSpec = Union[str, Callable[[ToolExecutionContext], bool]]


@dataclass
class ToolExecutionRule:
    """
    Prioritized policy proposing a tool execution strategy.

    ``condition`` is either a condition string (see ``conditions``) or a
    predicate over a ToolExecutionContext. String conditions are parsed
    once, at construction.
    """
    id: str
    name: str
    description: str
    condition: ConditionSpec
    strategy: str
    priority: int = 50
    enabled: bool = True
    metadata: Dict[str, Any] = field(default_factory=dict)
    parsed_condition: Optional[Condition] = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self):
        if isinstance(self.strategy, ToolExecutionStrategy):
            self.strategy = self.strategy.value
        try:
            canonical_strategy(self.strategy)
        except ValueError:
            raise InvalidRuleError(f"Unknown tool execution strategy: {self.strategy}", self.id)

        if isinstance(self.condition, str):
            self.parsed_condition = parse_condition(self.condition)
        elif not callable(self.condition):
            raise InvalidRuleError("Rule condition must be a string or a callable", self.id)

        if self.metadata.get("confidence") is not None:
            try:
                self.metadata["confidence"] = float(self.metadata["confidence"])
            except (TypeError, ValueError):
                raise InvalidRuleError(
                    f"Rule confidence must be a number: {self.metadata['confidence']!r}", self.id
                )

    @property
    def condition_complexity(self) -> float:
        """0.1 per clause of a string condition, 0.2 for predicates."""
        if self.parsed_condition is not None:
            return self.parsed_condition.clause_count / 10
        return 0.2

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "condition": self.condition if isinstance(self.condition, str) else "<predicate>",
            "strategy": self.strategy,
            "priority": self.priority,
            "enabled": self.enabled,
            "metadata": dict(self.metadata),
        }


def default_tool_execution_rules() -> List[ToolExecutionRule]:
    """The rule set installed when adaptive tool strategy is enabled."""
    return [
        ToolExecutionRule(
            id="parallel-independent-tools",
            name="Parallel Independent Tools",
            description="Execute multiple independent tools in parallel",
            condition="tool_count > 1",
            strategy="parallel",
            priority=70,
            metadata={"confidence": 0.8},
        ),
        ToolExecutionRule(
            id="sequential-dependent-tools",
            name="Sequential Dependent Tools",
            description="Execute tools sequentially when dependencies exist",
            condition='tool_name_contains("fetch") && tool_name_contains("process")',
            strategy="sequential",
            priority=80,
            metadata={"confidence": 0.9},
        ),
        ToolExecutionRule(
            id="conditional-logic-tools",
            name="Conditional Logic Tools",
            description="Use conditional execution when conditional logic is present",
            condition="conditional",
            strategy="conditional",
            priority=75,
            metadata={"confidence": 0.85},
        ),
        ToolExecutionRule(
            id="adaptive-complex-tools",
            name="Adaptive Complex Tools",
            description="Use adaptive strategy for complex tool combinations",
            condition="tool_count > 5",
            strategy="adaptive",
            priority=60,
            metadata={"confidence": 0.7},
        ),
    ]


@dataclass
class ResourceLimits:
    cpu: Optional[float] = None
    memory: Optional[float] = None
    network: Optional[float] = None


@dataclass
class ToolExecutionConstraints:
    """Router-level limits applied to tool execution recommendations."""
    max_concurrency: Optional[int] = None
    default_timeout: Optional[int] = None  # milliseconds
    resource_limits: ResourceLimits = field(default_factory=ResourceLimits)
    quality_threshold: Optional[float] = None
    fail_fast: Optional[bool] = None


@dataclass
class StrategyConstraints:
    """Per-call constraints for ``determine_strategy``."""
    time_limit: Optional[float] = None  # milliseconds
    resource_limit: Optional[float] = None  # 0..1
    quality_threshold: Optional[float] = None  # 0..1


@dataclass
class ToolPatternAnalysis:
    has_strict_dependencies: bool
    has_conditional_logic: bool
    complexity_score: float
    parallelizable_groups: List[List[str]]
    sequential_chains: List[List[str]]
    resource_requirements: Dict[str, str]


@dataclass
class ExecutionPhase:
    tools: List[str]
    strategy: str  # "parallel" or "sequential"
    estimated_time: int  # milliseconds


@dataclass
class ExecutionPlan:
    phases: List[ExecutionPhase]
    total_estimated_time: int
    risk_level: str  # "low", "medium" or "high"


@dataclass
class ToolStrategyDecision:
    strategy: ToolExecutionStrategy
    confidence: float
    reasoning: str
    execution_plan: ExecutionPlan


@dataclass
class AppliedRule:
    rule_id: str
    rule_name: str
    strategy: str
    confidence: float
    reasoning: str
    priority: int = 0


@dataclass
class RuleEvaluation:
    applied_rules: List[AppliedRule]
    recommended_strategy: str
    fallback_strategy: str = ToolExecutionStrategy.ADAPTIVE.value
    conflict_resolution: Optional[str] = None


@dataclass
class ExecutionHint:
    strategy: str
    confidence: float
    reasoning: str


@dataclass
class ToolExecutionRecommendation:
    recommended_strategy: ToolExecutionStrategy
    confidence: float
    reasoning: str
    constraints: Dict[str, Any]
    execution_hints: List[ExecutionHint]
    execution_plan: ExecutionPlan


@dataclass
class ToolRunResult:
    """Outcome of one tool run, fed back through ``record_results``."""
    success: bool
    duration: float  # milliseconds
    error: Optional[str] = None


# =============================================================================
# PATTERN ANALYSIS
# =============================================================================


def group_parallelizable_tools(tools: List[str]) -> List[List[str]]:
    """Read, process and write buckets with more than one member."""
    groups = []
    read_tools = [t for t in tools if _READ_RE.match(t)]
    process_tools = [t for t in tools if _GROUP_PROCESS_RE.match(t)]
    write_tools = [t for t in tools if _GROUP_WRITE_RE.match(t)]

    for bucket in (read_tools, process_tools, write_tools):
        if len(bucket) > 1:
            groups.append(bucket)

    if not groups and len(tools) > 1:
        groups.append(list(tools))

    return groups


def identify_sequential_chains(tools: List[str]) -> List[List[str]]:
    """A read -> process -> write chain when all three buckets are present."""
    read_tools = [t for t in tools if _READ_RE.match(t)]
    process_tools = [t for t in tools if _PROCESS_RE.match(t)]
    write_tools = [t for t in tools if _WRITE_RE.match(t)]

    if read_tools and process_tools and write_tools:
        return [read_tools + process_tools + write_tools]
    return []


def estimate_resource_requirements(tools: List[str]) -> Dict[str, str]:
    tool_count = len(tools)

    processing = sum(1 for t in tools if _CPU_RE.match(t))
    cpu = "high" if processing > 3 else "medium" if processing > 1 else "low"

    data = sum(1 for t in tools if _MEMORY_RE.match(t) or "large" in t or "bulk" in t)
    if data > 2 or tool_count > 8:
        memory = "high"
    elif data > 0 or tool_count > 4:
        memory = "medium"
    else:
        memory = "low"

    network_tools = sum(1 for t in tools if _NETWORK_RE.match(t) or "api" in t or "http" in t)
    network = "high" if network_tools > 3 else "medium" if network_tools > 1 else "low"

    return {"cpu": cpu, "memory": memory, "network": network}


def analyze_tool_patterns(tools: List[str], context: Mapping[str, Any]) -> ToolPatternAnalysis:
    """Static analysis of tool names and context keys."""
    dependency_tools = [
        t for t in tools
        if _READ_RE.match(t) or _PROCESS_RE.match(t) or _WRITE_RE.match(t)
    ]
    has_strict_dependencies = len(dependency_tools) > 1

    has_conditional_logic = any(
        "if" in t or "when" in t or "condition" in t for t in tools
    ) or any(
        "condition" in key or "rule" in key or "criteria" in key for key in map(str, context)
    )

    complexity_score = min(
        1.0,
        len(tools) / 10
        + (0.3 if has_strict_dependencies else 0)
        + (0.2 if has_conditional_logic else 0),
    )

    return ToolPatternAnalysis(
        has_strict_dependencies=has_strict_dependencies,
        has_conditional_logic=has_conditional_logic,
        complexity_score=complexity_score,
        parallelizable_groups=group_parallelizable_tools(tools),
        sequential_chains=identify_sequential_chains(tools),
        resource_requirements=estimate_resource_requirements(tools),
    )


def build_execution_plan(
    tools: List[str],
    strategy: ToolExecutionStrategy,
    analysis: ToolPatternAnalysis
) -> ExecutionPlan:
    """
    Translate a strategy into phases.

    Time estimates are fixed per-tool heuristics, not measurements.
    """
    phases: List[ExecutionPhase] = []

    if strategy == ToolExecutionStrategy.PARALLEL:
        phases.append(ExecutionPhase(list(tools), "parallel", max(500, len(tools) * 200)))

    elif strategy == ToolExecutionStrategy.SEQUENTIAL:
        phases.append(ExecutionPhase(list(tools), "sequential", len(tools) * 1000))

    elif strategy == ToolExecutionStrategy.CONDITIONAL:
        groups = analysis.parallelizable_groups or [list(tools)]
        for group in groups:
            phases.append(ExecutionPhase(group, "parallel", max(500, len(group) * 300)))

    elif strategy == ToolExecutionStrategy.ADAPTIVE:
        for chain in analysis.sequential_chains:
            phases.append(ExecutionPhase(chain, "sequential", len(chain) * 800))
        for group in analysis.parallelizable_groups:
            phases.append(ExecutionPhase(group, "parallel", max(500, len(group) * 250)))
        if not phases:
            phases.append(ExecutionPhase(list(tools), "parallel", max(500, len(tools) * 300)))

    if analysis.complexity_score > 0.7:
        risk_level = "high"
    elif analysis.complexity_score > 0.4:
        risk_level = "medium"
    else:
        risk_level = "low"

    return ExecutionPlan(
        phases=phases,
        total_estimated_time=sum(phase.estimated_time for phase in phases),
        risk_level=risk_level,
    )


# =============================================================================
# ADVISOR
# =============================================================================


class ToolStrategyAdvisor:
    """
    Rule store plus the two-layer recommendation engine.

    Args:
        router_id: Name of the owning router, used in logs
        registry: Route registry consulted for agent-specific adjustments
        constraints: Router-level tool execution constraints
        id_generator: Source of ids for predicate evaluation contexts
    """

    def __init__(
        self,
        router_id: str,
        registry: RouteRegistry,
        constraints: Optional[ToolExecutionConstraints] = None,
        id_generator: Optional[IdGenerator] = None
    ):
        self.router_id = router_id
        self.registry = registry
        self.constraints = constraints or ToolExecutionConstraints()
        self.ids = id_generator or IdGenerator()
        self._rules: Dict[str, ToolExecutionRule] = {}

    # ── rule store ───────────────────────────────────────────────────────────

    def add_rule(self, rule: ToolExecutionRule) -> None:
        self._rules[rule.id] = rule
        logger.info(
            f"[{self.router_id}] Tool execution rule added: {rule.id} "
            f"(strategy={rule.strategy}, priority={rule.priority})"
        )

    def remove_rule(self, rule_id: str) -> bool:
        removed = self._rules.pop(rule_id, None) is not None
        if removed:
            logger.info(f"[{self.router_id}] Tool execution rule removed: {rule_id}")
        return removed

    def get_rules(self) -> List[ToolExecutionRule]:
        """Enabled rules, highest priority first."""
        enabled = [rule for rule in self._rules.values() if rule.enabled]
        return sorted(enabled, key=lambda rule: -rule.priority)

    def install_default_rules(self) -> None:
        for rule in default_tool_execution_rules():
            self.add_rule(rule)
        logger.info(f"[{self.router_id}] Default tool execution rules created ({len(self._rules)} rules)")

    # ── pattern analysis layer ───────────────────────────────────────────────

    def determine_strategy(
        self,
        tools: List[str],
        context: Mapping[str, Any],
        constraints: Optional[StrategyConstraints] = None
    ) -> ToolStrategyDecision:
        analysis = analyze_tool_patterns(tools, context)
        constraints = constraints or StrategyConstraints()

        time_constrained = bool(constraints.time_limit) and constraints.time_limit < 30000
        resource_constrained = bool(constraints.resource_limit) and constraints.resource_limit < 0.5
        quality_required = bool(constraints.quality_threshold) and constraints.quality_threshold > 0.8

        strategy = ToolExecutionStrategy.PARALLEL
        confidence = 0.7
        reasoning = "Default parallel execution selected"

        if analysis.has_strict_dependencies:
            strategy = ToolExecutionStrategy.SEQUENTIAL
            confidence = 0.9
            reasoning = "Sequential execution required due to strict dependencies"
        elif analysis.has_conditional_logic:
            strategy = ToolExecutionStrategy.CONDITIONAL
            confidence = 0.8
            reasoning = "Conditional execution detected based on tool patterns"
        elif analysis.complexity_score > 0.7 or quality_required:
            strategy = ToolExecutionStrategy.ADAPTIVE
            confidence = 0.85
            reasoning = "Adaptive strategy for complex execution patterns"
        elif time_constrained or resource_constrained:
            strategy = ToolExecutionStrategy.PARALLEL
            confidence = 0.9
            reasoning = "Parallel execution optimized for time/resource constraints"

        return ToolStrategyDecision(
            strategy=strategy,
            confidence=confidence,
            reasoning=reasoning,
            execution_plan=build_execution_plan(tools, strategy, analysis),
        )

    # ── rule engine layer ────────────────────────────────────────────────────

    def _rule_matches(self, rule: ToolExecutionRule, tools: List[str], context: Mapping[str, Any]) -> bool:
        if rule.parsed_condition is not None:
            return rule.parsed_condition.evaluate(tools, context)

        tool_context = ToolExecutionContext(
            tool_name=tools[0] if tools else "unknown",
            tools=list(tools),
            call_id=f"rule-eval-{self.ids.invocation_id()}",
            execution_id=self.ids.execution_id(),
            correlation_id=self.ids.correlation_id(),
            metadata=dict(context),
            parameters=dict(context),
        )
        return bool(rule.condition(tool_context))

    def rule_confidence(self, rule: ToolExecutionRule, tools: List[str], context: Mapping[str, Any]) -> float:
        """
        Confidence of a matching rule, clamped to [0, 1].

        Base 0.5, plus priority/100 * 0.3, plus condition complexity (at
        most 0.2). A ``confidence`` in the rule metadata acts as a floor.
        Context priority "high" and a strategy suited to the tool count
        each add 0.1.
        """
        confidence = 0.5
        confidence += (rule.priority / 100) * 0.3
        confidence += min(0.2, rule.condition_complexity)

        if rule.metadata.get("confidence"):
            confidence = max(confidence, float(rule.metadata["confidence"]))

        if context.get("priority") == "high":
            confidence += 0.1
        if len(tools) > 1 and rule.strategy == ToolExecutionStrategy.PARALLEL.value:
            confidence += 0.1
        if len(tools) == 1 and rule.strategy == ToolExecutionStrategy.SEQUENTIAL.value:
            confidence += 0.1

        return min(1.0, max(0.0, confidence))

    @staticmethod
    def resolve_conflicts(applied: List[AppliedRule]) -> Tuple[Optional[AppliedRule], Optional[str]]:
        """
        Pick the winning rule: highest confidence, then highest priority,
        then lowest rule id.
        """
        if not applied:
            return None, None

        winner = sorted(applied, key=lambda r: (-r.confidence, -r.priority, r.rule_id))[0]
        if len(applied) == 1:
            return winner, None

        note = (
            f"Resolved {len(applied)} rule conflicts. "
            f"Selected {winner.strategy} with confidence {winner.confidence:.2f}"
        )
        return winner, note

    def evaluate_rules(self, tools: List[str], context: Mapping[str, Any]) -> RuleEvaluation:
        applied: List[AppliedRule] = []

        for rule in self.get_rules():
            try:
                if not self._rule_matches(rule, tools, context):
                    continue
                confidence = self.rule_confidence(rule, tools, context)
            except Exception as e:
                logger.warning(f"[{self.router_id}] Error evaluating tool execution rule {rule.id}: {e}")
                continue

            applied.append(AppliedRule(
                rule_id=rule.id,
                rule_name=rule.name,
                strategy=rule.strategy,
                confidence=confidence,
                reasoning=f'Rule "{rule.name}" applied: {rule.description}',
                priority=rule.priority,
            ))

        winner, note = self.resolve_conflicts(applied)
        return RuleEvaluation(
            applied_rules=applied,
            recommended_strategy=winner.strategy if winner else ToolExecutionStrategy.ADAPTIVE.value,
            conflict_resolution=note,
        )

    # ── combined recommendation ──────────────────────────────────────────────

    def recommend(
        self,
        tools: List[str],
        context: Mapping[str, Any],
        agent_route: Optional[str] = None
    ) -> ToolExecutionRecommendation:
        constraints = self.constraints
        base = self.determine_strategy(
            tools,
            context,
            StrategyConstraints(
                time_limit=constraints.default_timeout,
                resource_limit=constraints.resource_limits.cpu,
                quality_threshold=constraints.quality_threshold,
            ),
        )
        evaluation = self.evaluate_rules(tools, context)

        final_strategy = base.strategy
        confidence = base.confidence
        reasoning = base.reasoning

        winner, _ = self.resolve_conflicts(evaluation.applied_rules)
        if winner is not None and winner.confidence > confidence:
            final_strategy = canonical_strategy(winner.strategy)
            confidence = winner.confidence
            reasoning = winner.reasoning
            if evaluation.conflict_resolution:
                reasoning = f"{reasoning}. {evaluation.conflict_resolution}"

        metrics = self.registry.get_metrics(agent_route) if agent_route else None
        if metrics is not None:
            # Order matters: a slow agent is switched to parallel first,
            # then an unreliable one back to sequential.
            if (
                metrics.average_response_time > SLOW_AGENT_RESPONSE_MS
                and final_strategy == ToolExecutionStrategy.SEQUENTIAL
            ):
                final_strategy = ToolExecutionStrategy.PARALLEL
                confidence *= 0.9
                reasoning += " (Adjusted to parallel due to agent response time)"

            if (
                metrics.success_rate < UNRELIABLE_AGENT_SUCCESS_RATE
                and final_strategy == ToolExecutionStrategy.PARALLEL
            ):
                final_strategy = ToolExecutionStrategy.SEQUENTIAL
                confidence *= 0.95
                reasoning += " (Adjusted to sequential due to agent reliability)"

        hints = [ExecutionHint(
            strategy=base.strategy.value,
            confidence=base.confidence,
            reasoning=f"Base analysis: {base.reasoning}",
        )]
        hints.extend(
            ExecutionHint(strategy=rule.strategy, confidence=rule.confidence, reasoning=rule.reasoning)
            for rule in evaluation.applied_rules
        )

        analysis = analyze_tool_patterns(tools, context)
        return ToolExecutionRecommendation(
            recommended_strategy=final_strategy,
            confidence=confidence,
            reasoning=reasoning,
            constraints={
                "max_concurrency": constraints.max_concurrency,
                "timeout": constraints.default_timeout,
                "quality_threshold": constraints.quality_threshold,
                "fail_fast": constraints.fail_fast,
            },
            execution_hints=hints,
            execution_plan=build_execution_plan(tools, final_strategy, analysis),
        )

    # ── feedback ─────────────────────────────────────────────────────────────

    def record_results(
        self,
        tools: List[str],
        strategy: Any,
        results: List[Any],
        agent_route: Optional[str] = None
    ) -> None:
        """
        Fold observed tool runs into the route's metrics and log them.

        Each result is a ToolRunResult or a mapping with ``success`` and
        ``duration``.
        """
        runs = [_as_run_result(result) for result in results]
        if not runs:
            logger.warning(f"[{self.router_id}] No tool results to record for strategy {strategy}")
            return

        total_duration = sum(run.duration for run in runs)
        success_count = sum(1 for run in runs if run.success)
        success_rate = success_count / len(runs)

        current = self.registry.get_metrics(agent_route) if agent_route else None
        if current is not None:
            self.registry.update_metrics(
                agent_route,
                average_response_time=(current.average_response_time + total_duration) / 2,
                success_rate=(current.success_rate + success_rate) / 2,
                total_tasks=current.total_tasks + 1,
                total_errors=current.total_errors + (len(runs) - success_count),
                last_used=time.time() * 1000,
            )

        strategy_name = strategy.value if isinstance(strategy, ToolExecutionStrategy) else strategy
        logger.info(
            f"[{self.router_id}] Tool execution strategy performance: "
            f"route={agent_route} strategy={strategy_name} tools={len(tools)} "
            f"total_duration={total_duration} success_rate={success_rate:.2f} "
            f"average_duration={total_duration / len(runs):.1f}"
        )


def _as_run_result(value: Any) -> ToolRunResult:
    if isinstance(value, ToolRunResult):
        return value
    if isinstance(value, Mapping):
        return ToolRunResult(
            success=bool(value.get("success")),
            duration=float(value.get("duration", 0)),
            error=value.get("error"),
        )
    return ToolRunResult(
        success=bool(getattr(value, "success")),
        duration=float(getattr(value, "duration", 0)),
        error=getattr(value, "error", None),
    )
