"""
Execution Dispatcher - Runs one routing call end to end.

FLOW:
1. Validate the input against the router's intent schema
2. Filter routes by the merged selection criteria
3. Select a route with the configured strategy
4. Invoke the bound agent's ``think`` and require a final answer
5. Package a RoutingResult

Any failure after strategy validation triggers exactly one attempt on the
configured fallback, with the original unvalidated input. Failures of the
fallback itself propagate.
"""

import inspect
import logging
import time
from typing import Any, Callable, Dict, Mapping, Optional

from pydantic import BaseModel, TypeAdapter, ValidationError

from agent_router.agents.base import AgentContext, AgentThought
from agent_router.core.exceptions import (
    AgentNotFoundError,
    InputValidationError,
    NoFinalAnswerError,
    NoRoutesAvailableError,
    UnknownStrategyError,
)
from agent_router.core.ids import IdGenerator
from agent_router.routing.config import RouterConfig
from agent_router.routing.criteria import filter_routes, merge_criteria
from agent_router.routing.events import ROUTER_ERROR, ROUTER_START, ROUTER_SUCCESS, EventSink
from agent_router.routing.registry import RouteRegistry
from agent_router.routing.selector import RouteSelector, parse_strategy
from agent_router.routing.types import RoutingMetadata, RoutingResult, SelectionCriteria

logger = logging.getLogger(__name__)

FALLBACK_ROUTE = "fallback"
FALLBACK_CONFIDENCE = 0.1


def build_validator(schema: Any) -> Callable[[Any], Any]:
    """
    Turn an intent schema into a validating callable.

    ``None`` accepts anything. A pydantic model validates through
    ``model_validate``; any other type or annotation through a TypeAdapter.
    """
    if schema is None:
        return lambda value: value

    if isinstance(schema, type) and issubclass(schema, BaseModel):
        validate = schema.model_validate
    elif isinstance(schema, TypeAdapter):
        validate = schema.validate_python
    else:
        validate = TypeAdapter(schema).validate_python

    def validator(value: Any) -> Any:
        try:
            return validate(value)
        except ValidationError as e:
            errors = e.errors(include_url=False, include_context=False, include_input=False)
            raise InputValidationError(f"Input validation failed: {e.error_count()} error(s)", errors)

    return validator


def calculate_confidence(thought: AgentThought) -> float:
    return 0.9 if thought.action.is_final else 0.6


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


class ExecutionDispatcher:
    """
    Orchestrates validation, selection and agent execution for a router.

    Args:
        config: Router configuration
        registry: Route registry shared with the router
        selector: Strategy dispatch
        event_sink: Optional observer of lifecycle events
        id_generator: Source of execution and correlation ids
    """

    def __init__(
        self,
        config: RouterConfig,
        registry: RouteRegistry,
        selector: RouteSelector,
        event_sink: Optional[EventSink] = None,
        id_generator: Optional[IdGenerator] = None
    ):
        self.config = config
        self.registry = registry
        self.selector = selector
        self.event_sink = event_sink
        self.ids = id_generator or IdGenerator()
        self.validate_input = build_validator(config.intent_schema)

    @property
    def router_id(self) -> str:
        return self.config.name

    async def route(
        self,
        input: Any,
        context: Optional[Mapping[str, Any]] = None,
        criteria: Optional[SelectionCriteria] = None
    ) -> RoutingResult:
        context = context or {}
        started = time.perf_counter()
        execution_id = self.ids.execution_id()
        final_criteria = merge_criteria(self.config.default_criteria, criteria)

        # Configuration errors are raised before any agent work and never fall back
        strategy = parse_strategy(self.config.routing_strategy)

        self._emit(ROUTER_START, {
            "router_id": self.router_id,
            "execution_id": execution_id,
            "criteria": final_criteria.to_dict(),
        })
        await self._notify("on_route_start", input, final_criteria)
        logger.info(f"[{self.router_id}] Routing started: {execution_id} (strategy={strategy.value})")

        try:
            validated = self.validate_input(input)

            eligible = filter_routes(self.registry.route_names, final_criteria, self.registry)
            if not eligible:
                raise NoRoutesAvailableError()

            selected = await self.selector.select(strategy, validated, eligible)
            await self._notify("on_route_selected", selected, strategy.value)

            agent = self.registry.get_agent(selected)
            if agent is None:
                raise AgentNotFoundError(selected)

            agent_context = self._agent_context(
                context, execution_id, selected, agent_name=selected,
                routing_metadata={
                    "input_validation": True,
                    "available_routes": self.registry.route_names,
                    "selection_criteria": final_criteria.to_dict(),
                },
            )

            agent_started = time.perf_counter()
            await self._notify("on_agent_execution_start", selected, getattr(agent, "name", selected))
            thought = AgentThought.coerce(await agent.think(validated, agent_context))

            if not thought.action.is_final:
                raise NoFinalAnswerError(getattr(agent, "name", selected), thought.action.type)

            result = thought.action.content
            await self._notify("on_agent_execution_complete", selected, result, _elapsed_ms(agent_started))

            duration = _elapsed_ms(started)
            confidence = calculate_confidence(thought)

            self._emit(ROUTER_SUCCESS, {
                "router_id": self.router_id,
                "execution_id": execution_id,
                "selected_route": selected,
                "duration": duration,
                "criteria": final_criteria.to_dict(),
                "confidence": confidence,
            })
            logger.info(
                f"[{self.router_id}] Routing completed: {execution_id} -> {selected} "
                f"({duration:.1f}ms)"
            )

            routing_result = RoutingResult(
                selected_route=selected,
                confidence=confidence,
                reasoning=thought.reasoning,
                result=result,
                metadata=RoutingMetadata(
                    router_id=self.router_id,
                    execution_id=execution_id,
                    duration=duration,
                    input_validation=True,
                    selection_criteria=final_criteria,
                    available_agents=eligible,
                    excluded_agents=list(final_criteria.excluded_agents),
                ),
            )
            await self._notify("on_route_complete", routing_result)
            return routing_result

        except Exception as e:
            duration = _elapsed_ms(started)
            self._emit(ROUTER_ERROR, {
                "router_id": self.router_id,
                "execution_id": execution_id,
                "duration": duration,
                "criteria": final_criteria.to_dict(),
                "error": str(e),
            })
            logger.error(f"[{self.router_id}] Routing failed: {execution_id}: {e}")
            await self._notify("on_route_error", e, input)

            if self.config.fallback is not None and not isinstance(e, UnknownStrategyError):
                return await self._execute_fallback(input, context, execution_id, final_criteria)
            raise

    async def _execute_fallback(
        self,
        input: Any,
        context: Mapping[str, Any],
        execution_id: str,
        criteria: SelectionCriteria
    ) -> RoutingResult:
        started = time.perf_counter()
        fallback = self.config.fallback
        logger.info(f"[{self.router_id}] Executing fallback route for {execution_id}")

        agent = self.registry.get_agent(fallback) if isinstance(fallback, str) else fallback
        if agent is None:
            raise AgentNotFoundError(str(fallback))

        agent_context = self._agent_context(
            context, execution_id, FALLBACK_ROUTE, agent_name=FALLBACK_ROUTE,
            routing_metadata={
                "input_validation": False,
                "available_routes": self.registry.route_names,
                "fallback_used": True,
                "selection_criteria": criteria.to_dict(),
            },
        )
        thought = AgentThought.coerce(await agent.think(input, agent_context))

        return RoutingResult(
            selected_route=FALLBACK_ROUTE,
            confidence=FALLBACK_CONFIDENCE,
            reasoning=f"Fallback execution: {thought.reasoning}",
            result=thought.action.content if thought.action.is_final else thought,
            metadata=RoutingMetadata(
                router_id=self.router_id,
                execution_id=execution_id,
                duration=_elapsed_ms(started),
                input_validation=False,
                selection_criteria=criteria,
                available_agents=[],
                excluded_agents=list(criteria.excluded_agents),
            ),
        )

    def _agent_context(
        self,
        context: Mapping[str, Any],
        execution_id: str,
        selected_route: str,
        agent_name: str,
        routing_metadata: Dict[str, Any]
    ) -> AgentContext:
        return AgentContext(
            execution_id=execution_id,
            correlation_id=context.get("correlation_id") or self.ids.correlation_id(),
            invocation_id=self.ids.invocation_id(),
            agent_name=agent_name,
            router_id=self.router_id,
            selected_route=selected_route,
            tenant_id=context.get("tenant_id") or "default",
            available_tools=list(context.get("available_tools") or []),
            state=dict(context.get("state") or {}),
            routing_metadata=routing_metadata,
            signal=context.get("signal"),
        )

    def _emit(self, event: str, payload: Dict[str, Any]) -> None:
        if self.event_sink is None:
            return
        try:
            self.event_sink.emit(event, payload)
        except Exception as e:
            logger.warning(f"[{self.router_id}] Event sink failed on {event}: {e}")

    async def _notify(self, hook: str, *args: Any) -> None:
        callbacks = self.config.callbacks
        callback = getattr(callbacks, hook, None) if callbacks is not None else None
        if callback is None:
            return
        try:
            outcome = callback(*args)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception as e:
            logger.warning(f"[{self.router_id}] Callback {hook} failed: {e}")
