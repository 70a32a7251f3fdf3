"""Tests for agent_router.routing.router and the execution dispatcher."""

import pytest
from pydantic import BaseModel

from agent_router.agents.base import AgentContext, AgentThought, BaseAgent
from agent_router.core.exceptions import (
    AgentNotFoundError,
    InputValidationError,
    NoFinalAnswerError,
    NoRoutesAvailableError,
    RoutingError,
    UnknownStrategyError,
)
from agent_router.routing.config import RouterCallbacks, RouterConfig
from agent_router.routing.router import Router, create_router, router_as_agent, router_as_tool
from agent_router.routing.tool_strategy import ToolExecutionRule
from agent_router.routing.types import RoutingResult, SelectionCriteria


class ReviewIntent(BaseModel):
    task: str
    target: str = "repo"


class DictAgent(BaseAgent):
    """Answers with the plain-dict form of a thought."""

    name = "dict-agent"

    async def think(self, input, context):
        return {"reasoning": "from a dict", "action": {"type": "final_answer", "content": 5}}


# ── successful routing ───────────────────────────────────────────────────────


class TestRouteSuccess:
    @pytest.mark.asyncio
    async def test_result_shape(self, make_agent):
        router = create_router(RouterConfig(
            name="review",
            routes={"A": make_agent("a"), "B": make_agent("b")},
        ))

        result = await router.route("hello")

        assert isinstance(result, RoutingResult)
        assert result.selected_route == "A"
        assert result.confidence == 0.9
        assert result.reasoning == "a handled it"
        assert result.result == "a answer"
        assert result.metadata.router_id == "review"
        assert result.metadata.execution_id.startswith("exec_")
        assert result.metadata.input_validation is True
        assert result.metadata.available_agents == ["A", "B"]
        assert result.metadata.duration >= 0

    @pytest.mark.asyncio
    async def test_events_in_order(self, make_agent, recording_sink):
        router = Router(RouterConfig(name="r", routes={"A": make_agent("a")}), event_sink=recording_sink)

        await router.route("hello")

        assert recording_sink.names() == ["router.start", "router.success"]
        payload = recording_sink.events[1][1]
        assert payload["selected_route"] == "A"
        assert payload["confidence"] == 0.9

    @pytest.mark.asyncio
    async def test_callbacks_in_order(self, make_agent):
        calls = []

        async def on_complete(result):
            calls.append(("complete", result.selected_route))

        callbacks = RouterCallbacks(
            on_route_start=lambda input, criteria: calls.append(("start", input)),
            on_route_selected=lambda route, strategy: calls.append(("selected", route, strategy)),
            on_agent_execution_start=lambda route, agent: calls.append(("agent_start", route, agent)),
            on_agent_execution_complete=lambda route, result, ms: calls.append(("agent_done", route, result)),
            on_route_complete=on_complete,
        )
        router = Router(RouterConfig(name="r", routes={"A": make_agent("a")}, callbacks=callbacks))

        await router.route("hello")

        assert calls == [
            ("start", "hello"),
            ("selected", "A", "first_match"),
            ("agent_start", "A", "a"),
            ("agent_done", "A", "a answer"),
            ("complete", "A"),
        ]

    @pytest.mark.asyncio
    async def test_agent_context(self, make_agent):
        agent = make_agent("a")
        router = Router(RouterConfig(name="review", routes={"A": agent}))

        await router.route("hello", {"tenant_id": "acme", "correlation_id": "c-1", "state": {"k": 1}})

        context = agent.calls[0]["context"]
        assert isinstance(context, AgentContext)
        assert context.tenant_id == "acme"
        assert context.correlation_id == "c-1"
        assert context.router_id == "review"
        assert context.selected_route == "A"
        assert context.agent_name == "A"
        assert context.state == {"k": 1}
        assert context.routing_metadata["available_routes"] == ["A"]

    @pytest.mark.asyncio
    async def test_default_context_values(self, make_agent):
        agent = make_agent("a")
        router = Router(RouterConfig(name="review", routes={"A": agent}))

        await router.route("hello")

        context = agent.calls[0]["context"]
        assert context.tenant_id == "default"
        assert context.correlation_id.startswith("corr_")

    @pytest.mark.asyncio
    async def test_validated_input_reaches_agent(self, make_agent):
        agent = make_agent("a")
        router = Router(RouterConfig(name="r", routes={"A": agent}, intent_schema=ReviewIntent))

        await router.route({"task": "lint"})

        assert agent.calls[0]["input"] == ReviewIntent(task="lint", target="repo")

    @pytest.mark.asyncio
    async def test_dict_thought_is_accepted(self):
        router = Router(RouterConfig(name="r", routes={"D": DictAgent()}))
        result = await router.route("x")
        assert result.result == 5
        assert result.reasoning == "from a dict"

    @pytest.mark.asyncio
    async def test_default_exclusions_apply(self, make_agent):
        router = Router(RouterConfig(
            name="r",
            routes={"A": make_agent("a"), "B": make_agent("b")},
            default_criteria=SelectionCriteria(excluded_agents=["A"]),
        ))

        result = await router.route("hello")

        assert result.selected_route == "B"
        assert result.metadata.excluded_agents == ["A"]
        assert result.metadata.available_agents == ["B"]

    @pytest.mark.asyncio
    async def test_call_criteria(self, make_agent):
        router = Router(RouterConfig(name="r", routes={"A": make_agent("a"), "B": make_agent("b")}))
        router.set_agent_capabilities("B", ["security"])

        result = await router.route("scan", criteria=SelectionCriteria(required_capabilities=["security"]))

        assert result.selected_route == "B"

    @pytest.mark.asyncio
    async def test_string_routes_resolve_against_agent_registry(self, make_agent):
        agent = make_agent("alpha")
        router = Router(RouterConfig(name="r", routes={"A": "alpha"}), agent_registry={"alpha": agent})

        result = await router.route("x")

        assert result.result == "alpha answer"


# ── failures ─────────────────────────────────────────────────────────────────


class TestRouteFailures:
    @pytest.mark.asyncio
    async def test_invalid_input(self, make_agent, recording_sink):
        agent = make_agent("a")
        router = Router(
            RouterConfig(name="r", routes={"A": agent}, intent_schema=ReviewIntent),
            event_sink=recording_sink,
        )

        with pytest.raises(InputValidationError) as exc_info:
            await router.route({"nope": 1})

        assert exc_info.value.details["errors"]
        assert agent.calls == []
        assert recording_sink.names() == ["router.start", "router.error"]

    @pytest.mark.asyncio
    async def test_type_schema(self, make_agent):
        router = Router(RouterConfig(name="r", routes={"A": make_agent("a")}, intent_schema=int))

        with pytest.raises(InputValidationError):
            await router.route("not a number")

        assert (await router.route("7")).selected_route == "A"

    @pytest.mark.asyncio
    async def test_no_routes_available(self, make_agent):
        router = Router(RouterConfig(name="r", routes={"A": make_agent("a")}))

        with pytest.raises(NoRoutesAvailableError):
            await router.route("x", criteria=SelectionCriteria(required_capabilities=["deploy"]))

    @pytest.mark.asyncio
    async def test_unbound_route(self):
        router = Router(RouterConfig(name="r", routes={"Ghost": "missing-agent"}))

        with pytest.raises(AgentNotFoundError) as exc_info:
            await router.route("x")

        assert exc_info.value.details["route"] == "Ghost"

    @pytest.mark.asyncio
    async def test_no_final_answer(self, make_agent):
        router = Router(RouterConfig(name="r", routes={"A": make_agent("a", action_type="tool_call")}))

        with pytest.raises(NoFinalAnswerError):
            await router.route("x")

    @pytest.mark.asyncio
    async def test_agent_error_propagates(self, make_agent):
        router = Router(RouterConfig(name="r", routes={"A": make_agent("a", error=RuntimeError("down"))}))

        with pytest.raises(RuntimeError, match="down"):
            await router.route("x")

    @pytest.mark.asyncio
    async def test_routing_errors_share_a_base(self, make_agent):
        router = Router(RouterConfig(name="r", routes={"A": make_agent("a", action_type="tool_call")}))

        with pytest.raises(RoutingError):
            await router.route("x")

    @pytest.mark.asyncio
    async def test_error_callback(self, make_agent):
        errors = []
        router = Router(RouterConfig(
            name="r",
            routes={"A": make_agent("a", action_type="tool_call")},
            callbacks=RouterCallbacks(on_route_error=lambda error, input: errors.append((type(error), input))),
        ))

        with pytest.raises(NoFinalAnswerError):
            await router.route("x")

        assert errors == [(NoFinalAnswerError, "x")]

    @pytest.mark.asyncio
    async def test_unknown_strategy_at_route_time_skips_fallback(self, make_agent):
        fallback = make_agent("fallback")
        router = Router(RouterConfig(name="r", routes={"A": make_agent("a")}, fallback=fallback))
        router.config.routing_strategy = "round_robin"

        with pytest.raises(UnknownStrategyError):
            await router.route("x")

        assert fallback.calls == []

    @pytest.mark.asyncio
    async def test_unsupported_context(self, make_agent):
        router = Router(RouterConfig(name="r", routes={"A": make_agent("a")}))
        with pytest.raises(TypeError):
            await router.route("x", 42)


# ── observers ────────────────────────────────────────────────────────────────


class TestObservers:
    @pytest.mark.asyncio
    async def test_failing_sink_is_ignored(self, make_agent):
        class BrokenSink:
            def emit(self, event, payload):
                raise RuntimeError("sink down")

        router = Router(RouterConfig(name="r", routes={"A": make_agent("a")}), event_sink=BrokenSink())

        assert (await router.route("x")).selected_route == "A"

    @pytest.mark.asyncio
    async def test_failing_callback_is_ignored(self, make_agent):
        def explode(*args):
            raise RuntimeError("callback down")

        router = Router(RouterConfig(
            name="r",
            routes={"A": make_agent("a")},
            callbacks=RouterCallbacks(on_route_start=explode, on_route_complete=explode),
        ))

        assert (await router.route("x")).result == "a answer"


# ── fallback ─────────────────────────────────────────────────────────────────


class TestFallback:
    @pytest.mark.asyncio
    async def test_fallback_gets_original_input(self, make_agent):
        fallback = make_agent("fallback")
        router = Router(RouterConfig(
            name="r",
            routes={"A": make_agent("a")},
            intent_schema=ReviewIntent,
            fallback=fallback,
        ))

        result = await router.route({"nope": 1})

        assert result.selected_route == "fallback"
        assert result.confidence == 0.1
        assert result.reasoning == "Fallback execution: fallback handled it"
        assert result.result == "fallback answer"
        assert result.metadata.input_validation is False
        assert result.metadata.available_agents == []

        call = fallback.calls[0]
        assert call["input"] == {"nope": 1}
        assert call["context"].selected_route == "fallback"
        assert call["context"].routing_metadata["fallback_used"] is True

    @pytest.mark.asyncio
    async def test_fallback_by_route_name(self, make_agent):
        backup = make_agent("backup")
        router = Router(RouterConfig(
            name="r",
            routes={"A": make_agent("a", error=RuntimeError("down")), "Backup": backup},
            fallback="Backup",
        ))

        result = await router.route("x")

        assert result.selected_route == "fallback"
        assert result.result == "backup answer"
        assert len(backup.calls) == 1

    @pytest.mark.asyncio
    async def test_fallback_for_unbound_route(self, make_agent):
        router = Router(RouterConfig(
            name="r",
            routes={"Ghost": "missing-agent"},
            fallback=make_agent("fallback"),
        ))

        assert (await router.route("x")).result == "fallback answer"

    @pytest.mark.asyncio
    async def test_non_final_fallback_returns_thought(self, make_agent):
        router = Router(RouterConfig(
            name="r",
            routes={"A": make_agent("a", action_type="tool_call")},
            fallback=make_agent("fallback", action_type="tool_call"),
        ))

        result = await router.route("x")

        assert isinstance(result.result, AgentThought)
        assert result.result.action.type == "tool_call"

    @pytest.mark.asyncio
    async def test_failing_fallback_propagates(self, make_agent):
        router = Router(RouterConfig(
            name="r",
            routes={"A": make_agent("a", action_type="tool_call")},
            fallback=make_agent("fallback", error=RuntimeError("fallback down")),
        ))

        with pytest.raises(RuntimeError, match="fallback down"):
            await router.route("x")

    @pytest.mark.asyncio
    async def test_missing_fallback_route(self, make_agent):
        router = Router(RouterConfig(
            name="r",
            routes={"A": make_agent("a", action_type="tool_call")},
            fallback="Nowhere",
        ))

        with pytest.raises(AgentNotFoundError):
            await router.route("x")


# ── route lifecycle ──────────────────────────────────────────────────────────


class TestRouteLifecycle:
    @pytest.mark.asyncio
    async def test_add_and_remove(self, make_agent):
        router = Router(RouterConfig(name="r", routes={"A": make_agent("a")}))
        router.add_route("B", make_agent("b"))

        assert router.get_routes() == ["A", "B"]
        assert router.remove_route("A") is True
        assert router.remove_route("A") is False
        assert router.get_routes() == ["B"]
        assert (await router.route("x")).selected_route == "B"

    @pytest.mark.asyncio
    async def test_removed_route_is_never_selected(self, make_agent):
        router = Router(RouterConfig(
            name="r",
            routes={"A": make_agent("a"), "B": make_agent("b")},
            routing_strategy="best_match",
        ))
        router.set_agent_tags("A", ["review"])
        router.remove_route("A")

        assert (await router.route("review")).selected_route == "B"

    def test_describe(self, make_agent):
        router = Router(RouterConfig(
            name="r",
            description="Review router",
            routes={"A": make_agent("a")},
            enable_adaptive_tool_strategy=True,
        ))

        described = router.describe()

        assert described["name"] == "r"
        assert described["routing_strategy"] == "first_match"
        assert described["routes"] == ["A"]
        assert described["tool_rule_count"] == 4
        assert described["confidence_threshold"] is None

    def test_configured_rules_installed(self, make_agent):
        rule = ToolExecutionRule(
            id="mine", name="Mine", description="d", condition="tool_count > 0", strategy="parallel"
        )
        router = Router(RouterConfig(name="r", routes={"A": make_agent("a")}, tool_execution_rules=[rule]))

        assert [r.id for r in router.get_tool_execution_rules()] == ["mine"]


# ── composition ──────────────────────────────────────────────────────────────


class TestComposition:
    @pytest.mark.asyncio
    async def test_router_as_agent(self, make_agent):
        leaf = make_agent("leaf")
        inner = Router(RouterConfig(name="inner", description="Inner routes", routes={"Leaf": leaf}))
        agent = router_as_agent(inner)
        outer = Router(RouterConfig(name="outer", routes={"Inner": agent}))

        result = await outer.route("x", {"correlation_id": "corr-1"})

        assert agent.name == "router-inner"
        assert agent.identity.role == "Router"
        assert agent.identity.description == "Router: Inner routes"
        assert result.selected_route == "Inner"
        assert result.result == "leaf answer"
        assert result.reasoning == "Routed to: Leaf. leaf handled it"
        assert leaf.calls[0]["context"].correlation_id == "corr-1"

    @pytest.mark.asyncio
    async def test_router_as_tool(self, make_agent):
        router = Router(RouterConfig(name="review", routes={"A": make_agent("a")}, intent_schema=ReviewIntent))
        tool = router_as_tool(router)

        assert tool.name == "review-router"
        assert tool.description == "Router tool for review"
        assert tool.schema is ReviewIntent

        result = await tool.execute({"task": "lint"})
        assert isinstance(result, RoutingResult)
        assert result.selected_route == "A"

    def test_custom_names(self, make_agent):
        router = Router(RouterConfig(name="review", routes={"A": make_agent("a")}))
        assert router_as_agent(router, name="reviewer").name == "reviewer"
        assert router_as_tool(router, description="Pick a reviewer").description == "Pick a reviewer"


# ── config construction ──────────────────────────────────────────────────────


class TestConfigConstruction:
    def test_from_preset(self, make_agent):
        config = RouterConfig.from_preset("semantic", name="nlp", routes={"A": make_agent("a")})

        assert config.routing_strategy == "semantic_similarity"
        assert config.semantic_similarity.enabled is True
        assert config.tool_execution_strategy == "adaptive"
        assert config.tool_execution_constraints.max_concurrency == 3
        assert Router(config).describe()["confidence_threshold"] == 0.7

    def test_from_preset_overrides(self):
        config = RouterConfig.from_preset("simple", name="s", routes={}, description="Mine")
        assert config.description == "Mine"
        assert config.semantic_similarity.enabled is False

    def test_unknown_preset(self):
        with pytest.raises(ValueError):
            RouterConfig.from_preset("turbo", name="t", routes={})

    def test_from_settings(self):
        config = RouterConfig.from_settings("s", {}, fallback="A")

        assert config.routing_strategy == "first_match"
        assert config.tool_execution_constraints.default_timeout == 60000
        assert config.fallback == "A"
