"""Tests for agent_router.routing.conditions - rule condition parsing."""

import pytest

from agent_router.routing.conditions import (
    AllOf,
    AnyOf,
    Condition,
    ContextFieldCondition,
    TextMatchCondition,
    ToolCountCondition,
    ToolNameContains,
    parse_condition,
)


class TestParsing:
    def test_tool_count(self):
        assert parse_condition("tool_count > 5") == ToolCountCondition(op=">", value=5)

    def test_tool_name_contains_lowercases_pattern(self):
        assert parse_condition('tool_name_contains("Fetch")') == ToolNameContains(pattern="fetch")

    def test_context_field_strips_quotes(self):
        parsed = parse_condition("context.priority == 'high'")
        assert parsed == ContextFieldCondition(field_name="priority", op="==", value="high")

    def test_free_text(self):
        assert parse_condition("Conditional") == TextMatchCondition(text="conditional")

    def test_and_binds_tighter_than_or(self):
        parsed = parse_condition("tool_count > 1 && tool_name_contains('a') || conditional")
        assert isinstance(parsed, AnyOf)
        assert isinstance(parsed.clauses[0], AllOf)
        assert isinstance(parsed.clauses[1], TextMatchCondition)
        assert parsed.clause_count == 3

    def test_single_clause_is_unwrapped(self):
        assert parse_condition("tool_count >= 2").clause_count == 1


class TestEvaluation:
    @pytest.mark.parametrize("expression,tools,expected", [
        ("tool_count > 1", ["a", "b"], True),
        ("tool_count > 1", ["a"], False),
        ("tool_count >= 1", ["a"], True),
        ("tool_count == 2", ["a", "b"], True),
        ("tool_count != 2", ["a", "b"], False),
        ("tool_count < 3", ["a", "b", "c"], False),
    ])
    def test_tool_count(self, expression, tools, expected):
        assert parse_condition(expression).evaluate(tools, {}) is expected

    def test_tool_name_is_case_insensitive(self):
        condition = parse_condition('tool_name_contains("fetch")')
        assert condition.evaluate(["FetchUser"], {}) is True
        assert condition.evaluate(["saveUser"], {}) is False

    def test_conjunction(self):
        condition = parse_condition('tool_name_contains("fetch") && tool_name_contains("process")')
        assert condition.evaluate(["fetchUser", "processUser"], {}) is True
        assert condition.evaluate(["fetchUser", "saveUser"], {}) is False

    def test_disjunction(self):
        condition = parse_condition("tool_count > 5 || tool_name_contains('save')")
        assert condition.evaluate(["saveUser"], {}) is True
        assert condition.evaluate(["loadUser"], {}) is False

    def test_context_equality_ignores_case(self):
        condition = parse_condition("context.priority == 'high'")
        assert condition.evaluate([], {"priority": "HIGH"}) is True
        assert condition.evaluate([], {"priority": "low"}) is False

    def test_context_missing_field(self):
        assert parse_condition("context.mode == 'fast'").evaluate([], {}) is False
        assert parse_condition("context.mode != 'fast'").evaluate([], {}) is True

    def test_context_numeric(self):
        condition = parse_condition("context.retries >= 3")
        assert condition.evaluate([], {"retries": 3}) is True
        assert condition.evaluate([], {"retries": "2"}) is False
        assert condition.evaluate([], {"retries": "many"}) is False

    def test_text_matches_tools_or_context(self):
        condition = parse_condition("billing")
        assert condition.evaluate(["chargeBilling"], {}) is True
        assert condition.evaluate([], {"area": "billing"}) is True
        assert condition.evaluate(["other"], {}) is False

    def test_conditional_keyword_hint(self):
        condition = parse_condition("conditional")
        assert condition.evaluate(["checkCondition"], {}) is True
        assert condition.evaluate([], {"conditions": ["x"]}) is True
        assert condition.evaluate(["fetchUser"], {}) is False

    def test_parallel_keyword_hint(self):
        condition = parse_condition("run in parallel")
        assert condition.evaluate([], {"mode": "parallel"}) is True
        assert condition.evaluate(["a"], {}) is False


class TestConditionBase:
    def test_base_node_is_abstract(self):
        with pytest.raises(TypeError):
            Condition()

    def test_every_node_is_a_condition(self):
        parsed = parse_condition("tool_count > 1 && context.mode == 'fast' || billing")
        assert isinstance(parsed, Condition)
        assert all(isinstance(clause, Condition) for clause in parsed.clauses)
