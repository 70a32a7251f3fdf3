"""Tests for agent_router.routing.selector - the five routing strategies."""

import pytest

from agent_router.agents.base import AgentIdentity
from agent_router.core.exceptions import NoRoutesAvailableError, UnknownStrategyError
from agent_router.routing.config import RouterConfig, SemanticSimilarityConfig
from agent_router.routing.router import Router
from agent_router.routing.selector import input_match_score, parse_strategy
from agent_router.routing.types import RoutingStrategy, SelectionCriteria


def _router(routes, embedding_service=None, **config):
    return Router(RouterConfig(name="test", routes=routes, **config), embedding_service=embedding_service)


@pytest.fixture
def two_routes(make_agent):
    return {"Alpha": make_agent("alpha"), "Beta": make_agent("beta")}


# ── input_match_score ────────────────────────────────────────────────────────


class TestInputMatchScore:
    def test_text_mentions_route(self):
        assert input_match_score("send to linter please", "Linter", [], []) == pytest.approx(0.8)

    def test_text_capabilities_and_tags(self):
        score = input_match_score("security and speed", "Scanner", ["security"], ["speed"])
        assert score == pytest.approx(0.5)

    def test_structured_input_weights(self):
        score = input_match_score({"task": "linter", "mode": "fast"}, "Linter", ["lint"], ["fast"])
        # route 0.6 + capability "lint" 0.2 + tag 0.15
        assert score == pytest.approx(0.95)

    def test_capped_at_one(self):
        score = input_match_score("linter lint fast", "Linter", ["lint", "fast"], ["fast"])
        assert score == 1.0

    def test_numbers_do_not_match(self):
        assert input_match_score(42, "42", ["42"], []) == 0.0

    def test_case_insensitive(self):
        assert input_match_score("LINTER", "linter", [], []) == pytest.approx(0.8)


# ── strategy parsing ─────────────────────────────────────────────────────────


class TestParseStrategy:
    def test_known(self):
        assert parse_strategy("best_match") is RoutingStrategy.BEST_MATCH

    def test_unknown(self):
        with pytest.raises(UnknownStrategyError):
            parse_strategy("round_robin")

    def test_router_rejects_unknown_strategy(self, two_routes):
        with pytest.raises(UnknownStrategyError):
            _router(two_routes, routing_strategy="round_robin")


# ── first_match ──────────────────────────────────────────────────────────────


class TestFirstMatch:
    def test_alias_to_unregistered_route_falls_through(self, make_agent):
        router = _router({"A": make_agent("a"), "B": make_agent("b")})
        assert router.selector.first_match({"target": "bugFinder"}, ["A", "B"]) == "A"

    def test_alias_hit(self, make_agent):
        router = _router({"A": make_agent("a"), "BugFinder": make_agent("bf")})
        assert router.selector.first_match({"target": "bugFinder"}, ["A", "BugFinder"]) == "BugFinder"

    def test_unmapped_target_used_verbatim(self, make_agent):
        router = _router({"A": make_agent("a"), "B": make_agent("b")})
        assert router.selector.first_match({"target": "B"}, ["A", "B"]) == "B"

    def test_target_must_be_eligible(self, make_agent):
        router = _router({"A": make_agent("a"), "B": make_agent("b")})
        assert router.selector.first_match({"target": "B"}, ["A"]) == "A"

    def test_route_logic_valid_result(self, two_routes):
        router = _router(two_routes, route_logic=lambda input, routes: routes[-1])
        assert router.selector.first_match("anything", ["Alpha", "Beta"]) == "Beta"

    def test_route_logic_invalid_result_ignored(self, two_routes):
        router = _router(two_routes, route_logic=lambda input, routes: "Zeta")
        assert router.selector.first_match("anything", ["Alpha", "Beta"]) == "Alpha"

    def test_empty_eligible(self, two_routes):
        router = _router(two_routes)
        with pytest.raises(NoRoutesAvailableError):
            router.selector.first_match("x", [])


# ── best_match ───────────────────────────────────────────────────────────────


class TestBestMatch:
    @pytest.mark.asyncio
    async def test_equal_scores_keep_registration_order(self, make_agent):
        router = _router({"Alpha": make_agent("a"), "Beta": make_agent("b")})
        assert await router.selector.best_match(42, ["Alpha", "Beta"]) == "Alpha"

        reversed_router = _router({"Beta": make_agent("b"), "Alpha": make_agent("a")})
        assert await reversed_router.selector.best_match(42, ["Beta", "Alpha"]) == "Beta"

    @pytest.mark.asyncio
    async def test_load_lowers_score(self, two_routes):
        router = _router(two_routes)
        router.update_agent_metrics("Alpha", current_load=100)

        assert router.selector.score_route(42, "Alpha") == pytest.approx(0.15)
        assert router.selector.score_route(42, "Beta") == pytest.approx(0.25)
        assert await router.selector.best_match(42, ["Alpha", "Beta"]) == "Beta"

    @pytest.mark.asyncio
    async def test_preferred_capabilities_from_router_defaults(self, two_routes):
        router = _router(
            two_routes,
            default_criteria=SelectionCriteria(preferred_capabilities=["lint", "format"]),
        )
        router.set_agent_capabilities("Beta", ["lint"])

        # half the preferred capabilities: 0.5 * 0.3 on top of the 0.25 baseline
        assert router.selector.score_route(42, "Beta") == pytest.approx(0.40)
        assert await router.selector.best_match(42, ["Alpha", "Beta"]) == "Beta"

    @pytest.mark.asyncio
    async def test_input_mentions_capability(self, make_agent):
        router = _router({"Linter": make_agent("l"), "Scanner": make_agent("s")})
        router.set_agent_capabilities("Scanner", ["security"])
        choice = await router.selector.best_match("check this diff for security issues", ["Linter", "Scanner"])
        assert choice == "Scanner"

    def test_empty_preference_lists_are_ignored(self, two_routes):
        router = _router(
            two_routes,
            default_criteria=SelectionCriteria(preferred_capabilities=[], preferred_tags=[]),
        )
        assert router.selector.score_route(42, "Alpha") == pytest.approx(0.25)

    @pytest.mark.asyncio
    async def test_deterministic(self, make_agent):
        router = _router({"Alpha": make_agent("a"), "Beta": make_agent("b"), "Gamma": make_agent("g")})
        router.set_agent_tags("Gamma", ["review"])
        picks = set()
        for _ in range(5):
            picks.add(await router.selector.best_match("please review", ["Alpha", "Beta", "Gamma"]))
        assert picks == {"Gamma"}

    @pytest.mark.asyncio
    async def test_llm_decision_delegates(self, two_routes):
        router = _router(two_routes)
        router.update_agent_metrics("Alpha", success_rate=0.0)
        assert await router.selector.select("llm_decision", 42, ["Alpha", "Beta"]) == "Beta"


# ── custom_rules ─────────────────────────────────────────────────────────────


class TestCustomRules:
    @pytest.mark.asyncio
    async def test_first_valid_rule_wins(self, two_routes, caplog):
        def pick_missing(input, routes, router):
            return "Nowhere"

        async def pick_beta(input, routes, router):
            return "Beta"

        router = _router(
            two_routes,
            routing_strategy="custom_rules",
            custom_rules=[pick_missing, pick_beta],
        )

        assert await router.selector.select("custom_rules", "x", ["Alpha", "Beta"]) == "Beta"
        assert "pick_missing returned invalid route" in caplog.text

    @pytest.mark.asyncio
    async def test_failing_rule_is_skipped(self, two_routes):
        def explode(input, routes, router):
            raise RuntimeError("boom")

        def pick_beta(input, routes, router):
            return "Beta"

        router = _router(two_routes, custom_rules=[explode, pick_beta])
        assert await router.selector.custom_rules("x", ["Alpha", "Beta"]) == "Beta"

    @pytest.mark.asyncio
    async def test_rules_receive_router_handle(self, two_routes):
        seen = []

        def capture(input, routes, router):
            seen.append((input, routes, router))
            return routes[0]

        router = _router(two_routes, custom_rules=[capture])
        await router.selector.custom_rules("x", ["Alpha"])
        assert seen == [("x", ["Alpha"], router)]

    @pytest.mark.asyncio
    async def test_no_valid_rule_falls_back_to_best_match(self, two_routes):
        router = _router(two_routes, custom_rules=[lambda input, routes, router: None])
        router.update_agent_metrics("Alpha", current_load=100)
        assert await router.selector.custom_rules(42, ["Alpha", "Beta"]) == "Beta"

    @pytest.mark.asyncio
    async def test_no_rules_configured(self, two_routes):
        router = _router(two_routes)
        assert await router.selector.custom_rules(42, ["Alpha", "Beta"]) == "Alpha"


# ── semantic_similarity ──────────────────────────────────────────────────────


class TestSemanticSimilarity:
    @staticmethod
    def _semantic_router(routes, embeddings, threshold=0.5, enabled=True):
        return _router(
            routes,
            embedding_service=embeddings,
            routing_strategy="semantic_similarity",
            semantic_similarity=SemanticSimilarityConfig(enabled=enabled, threshold=threshold),
        )

    @pytest.mark.asyncio
    async def test_selects_most_similar_route(self, two_routes, make_embeddings):
        router = self._semantic_router(two_routes, make_embeddings({
            "find bugs": [0.0, 1.0],
            "Alpha AI Assistant": [1.0, 0.0],
            "Beta AI Assistant": [0.0, 1.0],
        }))
        assert await router.selector.semantic_similarity("find bugs", ["Alpha", "Beta"]) == "Beta"

    @pytest.mark.asyncio
    async def test_route_documents_embedded_together(self, two_routes, make_embeddings):
        embeddings = make_embeddings({
            "find bugs": [0.0, 1.0],
            "Alpha AI Assistant": [1.0, 0.0],
            "Beta AI Assistant": [0.0, 1.0],
        })
        batches = []

        async def embed_many(texts):
            batches.append(list(texts))
            return [embeddings.vectors[text] for text in texts]

        embeddings.embed_many = embed_many
        router = self._semantic_router(two_routes, embeddings)

        assert await router.selector.semantic_similarity("find bugs", ["Alpha", "Beta"]) == "Beta"
        assert batches == [["Alpha AI Assistant", "Beta AI Assistant"]]

    @pytest.mark.asyncio
    async def test_below_threshold_defers_to_best_match(self, two_routes, make_embeddings):
        router = self._semantic_router(two_routes, make_embeddings({
            "find bugs": [0.0, 0.0, 1.0],
            "Alpha AI Assistant": [1.0, 0.0, 0.0],
            "Beta AI Assistant": [0.0, 1.0, 0.0],
        }))
        router.update_agent_metrics("Alpha", current_load=100)
        assert await router.selector.semantic_similarity("find bugs", ["Alpha", "Beta"]) == "Beta"

    @pytest.mark.asyncio
    async def test_threshold_is_inclusive(self, make_agent, make_embeddings):
        router = self._semantic_router(
            {"Alpha": make_agent("alpha")},
            make_embeddings({"q": [1.0, 0.0], "Alpha AI Assistant": [1.0, 1.0]}),
            threshold=0.7,
        )
        # cos([1, 0], [1, 1]) = 0.707 >= 0.7
        assert await router.selector.semantic_similarity("q", ["Alpha"]) == "Alpha"

    @pytest.mark.asyncio
    async def test_disabled_uses_best_match(self, two_routes, make_embeddings):
        embeddings = make_embeddings({}, default=[1.0])
        router = self._semantic_router(two_routes, embeddings, enabled=False)
        router.update_agent_metrics("Alpha", current_load=100)

        assert await router.selector.select("semantic_similarity", "q", ["Alpha", "Beta"]) == "Beta"
        assert embeddings.requests == []

    @pytest.mark.asyncio
    async def test_jaccard_when_embedding_fails(self, make_agent, make_embeddings):
        router = self._semantic_router(
            {"Beta": make_agent("b"), "Alpha": make_agent("a")},
            make_embeddings({}),
        )
        # Jaccard: Beta document 0.5, Alpha document 1.0
        assert await router.selector.semantic_similarity("alpha ai assistant", ["Beta", "Alpha"]) == "Alpha"

    @pytest.mark.asyncio
    async def test_routes_without_agent_are_skipped(self, make_agent, make_embeddings):
        router = self._semantic_router(
            {"Ghost": "missing-agent", "Alpha": make_agent("a")},
            make_embeddings({"q": [1.0, 0.0], "Alpha AI Assistant": [1.0, 0.0]}),
        )
        assert router.selector.route_document("Ghost") is None
        assert await router.selector.semantic_similarity("q", ["Ghost", "Alpha"]) == "Alpha"

    def test_route_document_uses_identity(self, make_agent):
        agent = make_agent("rev", identity=AgentIdentity(role="Reviewer", expertise=["python", "go"]))
        router = _router({"Review": agent})
        assert router.selector.route_document("Review") == "Review Reviewer | Expertise: python, go"

    @pytest.mark.asyncio
    async def test_structured_input_is_serialized(self, make_agent, make_embeddings):
        embeddings = make_embeddings({}, default=[1.0, 0.0])
        router = self._semantic_router({"Alpha": make_agent("a")}, embeddings)
        await router.selector.semantic_similarity({"task": "scan"}, ["Alpha"])
        assert embeddings.requests[0] == '{"task":"scan"}'
