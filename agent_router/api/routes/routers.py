"""
Router Endpoints - HTTP surface over the registered routers.

Provides:
- Listing routers and their routes
- Editing route capabilities, tags and metrics
- Routing an input
- Managing tool execution rules and asking for tool strategies
"""

from fastapi import APIRouter, Depends, status
import logging
from typing import List

from agent_router.core.dependencies import RouterRegistry, get_router_registry
from agent_router.core.exceptions import RouteNotFoundError, RuleNotFoundError
from agent_router.models.requests import (
    CapabilitiesRequest,
    MetricsUpdateRequest,
    RouteRequest,
    TagsRequest,
    ToolResultsRequest,
    ToolRuleRequest,
    ToolStrategyRequest,
)
from agent_router.models.responses import (
    ErrorResponse,
    MessageResponse,
    RouteResponse,
    RouterListResponse,
    RouterSummary,
    RoutesResponse,
    ToolRulesResponse,
    ToolStrategyResponse,
)
from agent_router.models.schemas import (
    AgentMetricsModel,
    ExecutionHintModel,
    ExecutionPlanModel,
    RouteInfo,
    RoutingMetadataModel,
    SelectionCriteriaModel,
    ToolRuleModel,
)
from agent_router.routing.router import Router
from agent_router.routing.tool_strategy import ToolExecutionRule, ToolRunResult

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/routers", tags=["Routers"])

_NOT_FOUND = {404: {"model": ErrorResponse, "description": "Router or route not found"}}


def _route_info(target: Router, route: str) -> RouteInfo:
    described = target.registry.describe(route)
    return RouteInfo(
        name=described["name"],
        agent=described["agent"],
        capabilities=described["capabilities"],
        tags=described["tags"],
        metrics=AgentMetricsModel(**described["metrics"]),
    )


def _require_route(target: Router, route: str) -> None:
    if route not in target.registry:
        raise RouteNotFoundError(route)


@router.get(
    "",
    response_model=RouterListResponse,
    summary="List Routers"
)
async def list_routers(
    registry: RouterRegistry = Depends(get_router_registry)
) -> RouterListResponse:
    summaries = [RouterSummary(**registry.get(name).describe()) for name in registry.names()]
    return RouterListResponse(routers=summaries, count=len(summaries))


@router.get(
    "/{name}/routes",
    response_model=RoutesResponse,
    summary="List Routes",
    responses=_NOT_FOUND
)
async def list_routes(
    name: str,
    registry: RouterRegistry = Depends(get_router_registry)
) -> RoutesResponse:
    target = registry.get(name)
    return RoutesResponse(
        router=name,
        routes=[_route_info(target, route) for route in target.get_routes()]
    )


@router.put(
    "/{name}/routes/{route}/capabilities",
    response_model=RouteInfo,
    summary="Set Route Capabilities",
    responses=_NOT_FOUND
)
async def set_capabilities(
    name: str,
    route: str,
    request: CapabilitiesRequest,
    registry: RouterRegistry = Depends(get_router_registry)
) -> RouteInfo:
    target = registry.get(name)
    target.set_agent_capabilities(route, request.capabilities)
    return _route_info(target, route)


@router.put(
    "/{name}/routes/{route}/tags",
    response_model=RouteInfo,
    summary="Set Route Tags",
    responses=_NOT_FOUND
)
async def set_tags(
    name: str,
    route: str,
    request: TagsRequest,
    registry: RouterRegistry = Depends(get_router_registry)
) -> RouteInfo:
    target = registry.get(name)
    target.set_agent_tags(route, request.tags)
    return _route_info(target, route)


@router.patch(
    "/{name}/routes/{route}/metrics",
    response_model=RouteInfo,
    summary="Update Route Metrics",
    description="Shallow-merge metrics; omitted fields keep their values",
    responses=_NOT_FOUND
)
async def update_metrics(
    name: str,
    route: str,
    request: MetricsUpdateRequest,
    registry: RouterRegistry = Depends(get_router_registry)
) -> RouteInfo:
    target = registry.get(name)
    target.update_agent_metrics(route, **request.model_dump(exclude_none=True))
    return _route_info(target, route)


@router.post(
    "/{name}/route",
    response_model=RouteResponse,
    summary="Route Input",
    description="Select an agent for the input and return its final answer",
    responses={
        404: {"model": ErrorResponse, "description": "Router not found"},
        409: {"model": ErrorResponse, "description": "No eligible routes"},
        422: {"model": ErrorResponse, "description": "Input failed validation"},
        502: {"model": ErrorResponse, "description": "Agent gave no final answer"}
    }
)
async def route_input(
    name: str,
    request: RouteRequest,
    registry: RouterRegistry = Depends(get_router_registry)
) -> RouteResponse:
    """
    Route an input through the named router.

    Routing errors surface with their own status codes unless the router
    has a fallback, in which case the fallback's answer is returned with
    confidence 0.1.
    """
    target = registry.get(name)
    criteria = request.criteria.to_domain() if request.criteria else None

    result = await target.route(request.input, request.context, criteria)

    metadata = result.metadata
    return RouteResponse(
        selected_route=result.selected_route,
        confidence=result.confidence,
        reasoning=result.reasoning,
        result=result.result,
        metadata=RoutingMetadataModel(
            router_id=metadata.router_id,
            execution_id=metadata.execution_id,
            duration=metadata.duration,
            input_validation=metadata.input_validation,
            selection_criteria=SelectionCriteriaModel.from_domain(metadata.selection_criteria),
            available_agents=metadata.available_agents,
            excluded_agents=metadata.excluded_agents,
        )
    )


@router.get(
    "/{name}/tool-rules",
    response_model=ToolRulesResponse,
    summary="List Tool Execution Rules",
    description="Enabled rules, highest priority first",
    responses=_NOT_FOUND
)
async def list_tool_rules(
    name: str,
    registry: RouterRegistry = Depends(get_router_registry)
) -> ToolRulesResponse:
    rules: List[ToolRuleModel] = [
        ToolRuleModel(**rule.to_dict()) for rule in registry.get(name).get_tool_execution_rules()
    ]
    return ToolRulesResponse(router=name, rules=rules, count=len(rules))


@router.post(
    "/{name}/tool-rules",
    response_model=ToolRuleModel,
    status_code=status.HTTP_201_CREATED,
    summary="Add Tool Execution Rule",
    responses=_NOT_FOUND
)
async def add_tool_rule(
    name: str,
    request: ToolRuleRequest,
    registry: RouterRegistry = Depends(get_router_registry)
) -> ToolRuleModel:
    target = registry.get(name)
    rule = ToolExecutionRule(**request.model_dump())
    target.add_tool_execution_rule(rule)
    return ToolRuleModel(**rule.to_dict())


@router.delete(
    "/{name}/tool-rules/{rule_id}",
    response_model=MessageResponse,
    summary="Remove Tool Execution Rule",
    responses=_NOT_FOUND
)
async def remove_tool_rule(
    name: str,
    rule_id: str,
    registry: RouterRegistry = Depends(get_router_registry)
) -> MessageResponse:
    if not registry.get(name).remove_tool_execution_rule(rule_id):
        raise RuleNotFoundError(rule_id)
    return MessageResponse(message=f"Rule {rule_id} removed")


@router.post(
    "/{name}/tool-strategy",
    response_model=ToolStrategyResponse,
    summary="Recommend Tool Execution Strategy",
    responses=_NOT_FOUND
)
async def recommend_tool_strategy(
    name: str,
    request: ToolStrategyRequest,
    registry: RouterRegistry = Depends(get_router_registry)
) -> ToolStrategyResponse:
    target = registry.get(name)
    if request.agent_route:
        _require_route(target, request.agent_route)

    recommendation = target.get_tool_execution_recommendation(
        request.tools, request.context, request.agent_route
    )
    return ToolStrategyResponse(
        recommended_strategy=recommendation.recommended_strategy.value,
        confidence=recommendation.confidence,
        reasoning=recommendation.reasoning,
        constraints=recommendation.constraints,
        execution_hints=[
            ExecutionHintModel(strategy=h.strategy, confidence=h.confidence, reasoning=h.reasoning)
            for h in recommendation.execution_hints
        ],
        execution_plan=ExecutionPlanModel.from_domain(recommendation.execution_plan)
    )


@router.post(
    "/{name}/tool-strategy/results",
    response_model=MessageResponse,
    summary="Report Tool Execution Results",
    description="Fold observed tool results into the route's metrics",
    responses=_NOT_FOUND
)
async def report_tool_results(
    name: str,
    request: ToolResultsRequest,
    registry: RouterRegistry = Depends(get_router_registry)
) -> MessageResponse:
    target = registry.get(name)
    if request.agent_route:
        _require_route(target, request.agent_route)

    results = [
        ToolRunResult(success=r.success, duration=r.duration, error=r.error)
        for r in request.results
    ]
    target.update_strategy_from_results(request.tools, request.strategy, results, request.agent_route)
    return MessageResponse(message=f"Recorded {len(results)} tool results")
