"""
Router - Facade over route registration, selection and tool strategy.

Usage:
    router = create_router(RouterConfig(
        name="review",
        routes={"BugFinder": bug_finder, "SecurityScan": security_scan},
        routing_strategy="best_match",
    ))
    result = await router.route("find the security bug")

A router can itself be registered as an agent of another router
(``router_as_agent``) or handed to an agent as a tool (``router_as_tool``).
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from agent_router.agents.base import (
    FINAL_ANSWER,
    AgentAction,
    AgentContext,
    AgentIdentity,
    AgentThought,
    BaseAgent,
    BaseTool,
)
from agent_router.core.ids import IdGenerator
from agent_router.core.dependencies import embedding_config_from_settings, get_embedding_service
from agent_router.routing.config import RouterConfig, SemanticSimilarityConfig
from agent_router.routing.dispatcher import ExecutionDispatcher
from agent_router.routing.events import EventSink, LoggingEventSink
from agent_router.routing.registry import RouteRegistry
from agent_router.routing.selector import RouteSelector, parse_strategy
from agent_router.routing.tool_strategy import (
    RuleEvaluation,
    StrategyConstraints,
    ToolExecutionRecommendation,
    ToolExecutionRule,
    ToolStrategyAdvisor,
    ToolStrategyDecision,
)
from agent_router.routing.types import AgentMetrics, RoutingResult, SelectionCriteria
from agent_router.services.embedding_service import EmbeddingService
from agent_router.services.similarity import TextSimilarity

logger = logging.getLogger(__name__)


def _context_dict(context: Any) -> Dict[str, Any]:
    if context is None:
        return {}
    if isinstance(context, AgentContext):
        return {
            "correlation_id": context.correlation_id,
            "tenant_id": context.tenant_id,
            "available_tools": context.available_tools,
            "state": context.state,
            "signal": context.signal,
        }
    if isinstance(context, Mapping):
        return dict(context)
    raise TypeError(f"Unsupported routing context: {type(context).__name__}")


class Router:
    """
    Agent router.

    Args:
        config: Router configuration
        agent_registry: Agents addressable by name from ``config.routes``
        event_sink: Observer of routing lifecycle events, a LoggingEventSink
            when omitted
        embedding_service: Embeddings for semantic_similarity, the shared
            settings-driven service when omitted
        id_generator: Source of execution/correlation ids

    Raises:
        UnknownStrategyError: If ``config.routing_strategy`` is not recognized
    """

    def __init__(
        self,
        config: RouterConfig,
        agent_registry: Optional[Mapping[str, Any]] = None,
        event_sink: Optional[EventSink] = None,
        embedding_service: Optional[Any] = None,
        id_generator: Optional[IdGenerator] = None
    ):
        parse_strategy(config.routing_strategy)

        self.config = config
        self.registry = RouteRegistry()
        self.ids = id_generator or IdGenerator()

        agent_registry = agent_registry or {}
        for route, agent in config.routes.items():
            if isinstance(agent, str):
                resolved = agent_registry.get(agent)
                if resolved is None:
                    logger.warning(f"[{config.name}] Agent not found in registry: {agent} (route {route})")
                agent = resolved
            self.registry.add(route, agent)

        if embedding_service is None:
            embedding_service = self._default_embedding_service(config.semantic_similarity)
        self.embedding_service = embedding_service

        self.selector = RouteSelector(config, self.registry, TextSimilarity(embedding_service), router=self)
        self.dispatcher = ExecutionDispatcher(
            config, self.registry, self.selector, event_sink or LoggingEventSink(), self.ids
        )
        self.tool_advisor = ToolStrategyAdvisor(
            config.name, self.registry, config.tool_execution_constraints, self.ids
        )

        for rule in config.tool_execution_rules:
            self.tool_advisor.add_rule(rule)
        if config.enable_adaptive_tool_strategy:
            self.tool_advisor.install_default_rules()

        logger.info(
            f"Router created: {config.name} (routes={self.registry.route_names}, "
            f"strategy={parse_strategy(config.routing_strategy).value}, "
            f"tool_rules={len(self.tool_advisor.get_rules())})"
        )

    @staticmethod
    def _default_embedding_service(semantic: SemanticSimilarityConfig) -> EmbeddingService:
        """The shared service, or a dedicated one for another model or cache setting."""
        shared = get_embedding_service()
        model = semantic.model or shared.config.model
        if model == shared.config.model and semantic.cache_embeddings == shared.config.cache_enabled:
            return shared
        return EmbeddingService(embedding_config_from_settings(
            model=model,
            cache_enabled=semantic.cache_embeddings,
        ))

    @property
    def name(self) -> str:
        return self.config.name

    # ── routing ──────────────────────────────────────────────────────────────

    async def route(
        self,
        input: Any,
        context: Any = None,
        criteria: Optional[SelectionCriteria] = None
    ) -> RoutingResult:
        """
        Route ``input`` to one agent and return its answer.

        Args:
            input: Payload validated against ``config.intent_schema``
            context: Mapping (or AgentContext) with optional correlation_id,
                tenant_id, available_tools, state and signal
            criteria: Call-site criteria, merged with the router defaults

        Raises:
            RoutingError: When routing fails and no fallback is configured
        """
        return await self.dispatcher.route(input, _context_dict(context), criteria)

    # ── route lifecycle ──────────────────────────────────────────────────────

    def add_route(self, route: str, agent: Any) -> None:
        self.registry.add(route, agent)
        logger.info(f"[{self.name}] Route added: {route}")

    def remove_route(self, route: str) -> bool:
        removed = self.registry.remove(route)
        if removed:
            logger.info(f"[{self.name}] Route removed: {route}")
        return removed

    def get_routes(self) -> List[str]:
        return self.registry.route_names

    def set_agent_capabilities(self, route: str, capabilities: List[str]) -> None:
        self.registry.set_capabilities(route, capabilities)
        logger.debug(f"[{self.name}] Agent capabilities set: {route} -> {capabilities}")

    def set_agent_tags(self, route: str, tags: List[str]) -> None:
        self.registry.set_tags(route, tags)
        logger.debug(f"[{self.name}] Agent tags set: {route} -> {tags}")

    def update_agent_metrics(self, route: str, **metrics: Any) -> AgentMetrics:
        merged = self.registry.update_metrics(route, **metrics)
        logger.debug(f"[{self.name}] Agent metrics updated: {route} -> {metrics}")
        return merged

    def describe(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.config.description,
            "routing_strategy": parse_strategy(self.config.routing_strategy).value,
            "routes": self.registry.route_names,
            "tool_execution_strategy": self.config.tool_execution_strategy,
            "tool_rule_count": len(self.tool_advisor.get_rules()),
            "confidence_threshold": self.config.confidence_threshold,
        }

    # ── tool execution strategy ──────────────────────────────────────────────

    def add_tool_execution_rule(self, rule: ToolExecutionRule) -> None:
        self.tool_advisor.add_rule(rule)

    def remove_tool_execution_rule(self, rule_id: str) -> bool:
        return self.tool_advisor.remove_rule(rule_id)

    def get_tool_execution_rules(self) -> List[ToolExecutionRule]:
        return self.tool_advisor.get_rules()

    def determine_tool_execution_strategy(
        self,
        tools: List[str],
        context: Optional[Mapping[str, Any]] = None,
        constraints: Optional[StrategyConstraints] = None
    ) -> ToolStrategyDecision:
        return self.tool_advisor.determine_strategy(tools, context or {}, constraints)

    def evaluate_tool_execution_rules(
        self,
        tools: List[str],
        context: Optional[Mapping[str, Any]] = None
    ) -> RuleEvaluation:
        return self.tool_advisor.evaluate_rules(tools, context or {})

    def get_tool_execution_recommendation(
        self,
        tools: List[str],
        context: Optional[Mapping[str, Any]] = None,
        agent_route: Optional[str] = None
    ) -> ToolExecutionRecommendation:
        return self.tool_advisor.recommend(tools, context or {}, agent_route)

    def update_strategy_from_results(
        self,
        tools: List[str],
        strategy: Any,
        results: List[Any],
        agent_route: Optional[str] = None
    ) -> None:
        self.tool_advisor.record_results(tools, strategy, results, agent_route)


def create_router(config: RouterConfig, agent_registry: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> Router:
    return Router(config, agent_registry, **kwargs)


class RouterAgent(BaseAgent):
    """Exposes a router behind the agent ``think`` contract."""

    def __init__(self, router: Router, name: Optional[str] = None):
        self.router = router
        self.name = name or f"router-{router.name}"
        self.identity = AgentIdentity(
            role="Router",
            description=f"Router: {router.config.description or router.name}",
            goal="Route requests to the most appropriate agent based on input analysis",
        )

    async def think(self, input: Any, context: Any = None) -> AgentThought:
        result = await self.router.route(input, context)
        return AgentThought(
            reasoning=f"Routed to: {result.selected_route}. {result.reasoning}",
            action=AgentAction(type=FINAL_ANSWER, content=result.result),
        )


class RouterTool(BaseTool):
    """Exposes a router behind the tool ``execute`` contract."""

    def __init__(self, router: Router, name: Optional[str] = None, description: Optional[str] = None):
        self.router = router
        self.name = name or f"{router.name}-router"
        self.description = description or f"Router tool for {router.name}"
        self.schema = router.config.intent_schema

    async def execute(self, input: Any, context: Any = None) -> RoutingResult:
        return await self.router.route(input, context)


def router_as_agent(router: Router, name: Optional[str] = None) -> RouterAgent:
    return RouterAgent(router, name)


def router_as_tool(router: Router, name: Optional[str] = None, description: Optional[str] = None) -> RouterTool:
    return RouterTool(router, name, description)
