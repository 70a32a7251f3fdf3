"""
Route Selector - Picks one eligible route per routing strategy.

Five strategies share one entry point, ``select``:

- first_match: ``target`` alias, then ``route_logic``, then first eligible
- best_match: weighted score over preferences, input match and metrics
- llm_decision: delegates to best_match
- custom_rules: configured rule chain, best_match when no rule answers
- semantic_similarity: text similarity against route documents, gated by
  a threshold, best_match below it or on failure

Strategies read route metadata but never write it.
"""

import dataclasses
import inspect
import json
import logging
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel

from agent_router.agents.base import agent_summary
from agent_router.core.exceptions import NoRoutesAvailableError, UnknownStrategyError
from agent_router.routing.config import RouterConfig
from agent_router.routing.registry import RouteRegistry
from agent_router.routing.types import RoutingStrategy
from agent_router.services.similarity import TextSimilarity

logger = logging.getLogger(__name__)

# ``target`` values that differ from the route they address
TARGET_ALIASES: Dict[str, str] = {
    "bugFinder": "BugFinder",
    "securityScan": "SecurityScan",
    "docsSync": "DocsSync",
}

WEIGHT_PREFERRED_CAPABILITIES = 0.30
WEIGHT_PREFERRED_TAGS = 0.20
WEIGHT_INPUT_MATCH = 0.25
WEIGHT_SUCCESS_RATE = 0.15
WEIGHT_LOAD = 0.10

DEFAULT_SEMANTIC_THRESHOLD = 0.5


def parse_strategy(strategy: Any) -> RoutingStrategy:
    """Raises UnknownStrategyError for anything but the five strategies."""
    try:
        return RoutingStrategy(strategy)
    except ValueError:
        raise UnknownStrategyError(strategy)


def _plain(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    return value


def to_json_text(value: Any) -> str:
    """Compact JSON form of an input, as used for matching."""
    return json.dumps(_plain(value), default=str, separators=(",", ":"), ensure_ascii=False)


def _is_structured(value: Any) -> bool:
    return isinstance(value, (Mapping, list, tuple, BaseModel)) or (
        dataclasses.is_dataclass(value) and not isinstance(value, type)
    )


def input_match_score(input: Any, route: str, capabilities: List[str], tags: List[str]) -> float:
    """
    Heuristic match between an input and a route, capped at 1.0.

    Text input: +0.8 when it mentions the route name, +0.3 per mentioned
    capability, +0.2 per mentioned tag. Structured input is matched on
    its lower-cased JSON form with +0.6 / +0.2 / +0.15. Other inputs
    score 0.
    """
    if isinstance(input, str):
        haystack = input.lower()
        route_weight, capability_weight, tag_weight = 0.8, 0.3, 0.2
    elif _is_structured(input):
        haystack = to_json_text(input).lower()
        route_weight, capability_weight, tag_weight = 0.6, 0.2, 0.15
    else:
        return 0.0

    score = 0.0
    if route.lower() in haystack:
        score += route_weight
    for capability in capabilities:
        if capability.lower() in haystack:
            score += capability_weight
    for tag in tags:
        if tag.lower() in haystack:
            score += tag_weight

    return min(score, 1.0)


class RouteSelector:
    """
    Strategy dispatch for a single router.

    Args:
        config: Owning router's configuration
        registry: Route metadata
        similarity: Text similarity used by semantic_similarity
        router: Handle passed to custom rules
    """

    def __init__(
        self,
        config: RouterConfig,
        registry: RouteRegistry,
        similarity: TextSimilarity,
        router: Any = None
    ):
        self.config = config
        self.registry = registry
        self.similarity = similarity
        self.router = router

    @property
    def router_id(self) -> str:
        return self.config.name

    async def select(self, strategy: Any, input: Any, eligible: List[str]) -> str:
        strategy = parse_strategy(strategy)

        if strategy == RoutingStrategy.FIRST_MATCH:
            return self.first_match(input, eligible)
        if strategy == RoutingStrategy.BEST_MATCH:
            return await self.best_match(input, eligible)
        if strategy == RoutingStrategy.LLM_DECISION:
            return await self.llm_decision(input, eligible)
        if strategy == RoutingStrategy.CUSTOM_RULES:
            return await self.custom_rules(input, eligible)
        return await self.semantic_similarity(input, eligible)

    # ── first_match ──────────────────────────────────────────────────────────

    def first_match(self, input: Any, eligible: List[str]) -> str:
        if not eligible:
            raise NoRoutesAvailableError("No routes available")

        if isinstance(input, Mapping) and "target" in input:
            target = input["target"]
            mapped = TARGET_ALIASES.get(target, target) if isinstance(target, str) else target
            if mapped in eligible:
                return mapped

        if self.config.route_logic is not None:
            chosen = self.config.route_logic(input, list(eligible))
            if isinstance(chosen, str) and chosen in eligible:
                return chosen

        return eligible[0]

    # ── best_match ───────────────────────────────────────────────────────────

    def score_route(self, input: Any, route: str) -> float:
        """Weighted best_match score of one route. Pure in registry state and input."""
        capabilities = self.registry.get_capabilities(route)
        tags = self.registry.get_tags(route)
        metrics = self.registry.get_metrics(route)
        defaults = self.config.default_criteria

        score = 0.0
        if defaults is not None and defaults.preferred_capabilities:
            matched = sum(1 for cap in defaults.preferred_capabilities if cap in capabilities)
            score += matched / len(defaults.preferred_capabilities) * WEIGHT_PREFERRED_CAPABILITIES
        if defaults is not None and defaults.preferred_tags:
            matched = sum(1 for tag in defaults.preferred_tags if tag in tags)
            score += matched / len(defaults.preferred_tags) * WEIGHT_PREFERRED_TAGS

        score += input_match_score(input, route, capabilities, tags) * WEIGHT_INPUT_MATCH

        if metrics is not None:
            score += metrics.success_rate * WEIGHT_SUCCESS_RATE
            score += (1 - metrics.current_load / 100) * WEIGHT_LOAD

        return score

    async def best_match(self, input: Any, eligible: List[str]) -> str:
        if not eligible:
            raise NoRoutesAvailableError("No routes available")

        scored = [(route, self.score_route(input, route)) for route in eligible]
        # sorted() is stable: equal scores keep registration order
        scored = sorted(scored, key=lambda item: item[1], reverse=True)
        logger.debug(f"[{self.router_id}] best_match scores: {scored}")
        return scored[0][0]

    # ── llm_decision ─────────────────────────────────────────────────────────

    async def llm_decision(self, input: Any, eligible: List[str]) -> str:
        logger.info(f"[{self.router_id}] LLM routing not available, falling back to best_match")
        return await self.best_match(input, eligible)

    # ── custom_rules ─────────────────────────────────────────────────────────

    async def custom_rules(self, input: Any, eligible: List[str]) -> str:
        rules = self.config.custom_rules
        if not rules:
            logger.warning(f"[{self.router_id}] Custom rules strategy selected but no rules provided")
            return await self.best_match(input, eligible)

        logger.info(f"[{self.router_id}] Executing {len(rules)} custom rules over {eligible}")

        for rule in rules:
            rule_name = getattr(rule, "__name__", "anonymous")
            try:
                chosen = rule(input, list(eligible), self.router)
                if inspect.isawaitable(chosen):
                    chosen = await chosen
            except Exception as e:
                logger.error(f"[{self.router_id}] Custom rule execution failed: {rule_name}: {e}")
                continue

            if chosen in eligible:
                logger.info(f"[{self.router_id}] Custom rule {rule_name} selected route: {chosen}")
                return chosen

            logger.warning(
                f"[{self.router_id}] Custom rule {rule_name} returned invalid route: "
                f"{chosen!r} (eligible: {eligible})"
            )

        logger.info(f"[{self.router_id}] All custom rules failed, falling back to best_match")
        return await self.best_match(input, eligible)

    # ── semantic_similarity ──────────────────────────────────────────────────

    def route_document(self, route: str) -> Optional[str]:
        """``"{route} {agent summary}"``, or None for a route without an agent."""
        agent = self.registry.get_agent(route)
        if agent is None:
            return None
        return f"{route} {agent_summary(getattr(agent, 'identity', None))}"

    async def semantic_similarity(self, input: Any, eligible: List[str]) -> str:
        semantic = self.config.semantic_similarity
        if semantic is None or not semantic.enabled:
            logger.warning(f"[{self.router_id}] Semantic similarity not enabled")
            return await self.best_match(input, eligible)

        threshold = semantic.threshold or DEFAULT_SEMANTIC_THRESHOLD
        logger.info(
            f"[{self.router_id}] Executing semantic similarity routing "
            f"(threshold={threshold}, routes={eligible})"
        )

        try:
            input_text = input if isinstance(input, str) else to_json_text(input)
            documents: Dict[str, str] = {}
            for route in eligible:
                document = self.route_document(route)
                if document is not None:
                    documents[route] = document

            values = await self.similarity.similarities(input_text, list(documents.values()))
            scores: Dict[str, float] = dict(zip(documents, values))

            best_route = eligible[0] if eligible else ""
            best_score = scores.get(best_route, 0.0)
            for route, score in scores.items():
                if score > best_score:
                    best_route, best_score = route, score

        except Exception as e:
            logger.error(f"[{self.router_id}] Semantic similarity routing failed: {e}")
            return await self.best_match(input, eligible)

        if best_score >= threshold:
            logger.info(
                f"[{self.router_id}] Semantic similarity selected route: {best_route} "
                f"(score={best_score:.3f})"
            )
            return best_route

        logger.warning(
            f"[{self.router_id}] No route meets similarity threshold "
            f"(best={best_score:.3f}, threshold={threshold})"
        )
        return await self.best_match(input, eligible)
