"""
Rule Conditions - A tiny expression language for tool execution rules.

Grammar (case-insensitive keywords, parsed once when a rule is added):

    expr    := and_expr ("||" and_expr)*
    and_expr:= clause ("&&" clause)*
    clause  := "tool_count" OP INT
             | "tool_name_contains(" QUOTED ")"
             | "context." NAME OP VALUE
             | any other text (substring match)
    OP      := ">=" | "<=" | "==" | "!=" | ">" | "<" | "="

Substring clauses match when the text occurs in the space-joined tool
names or in the JSON form of the context. A clause mentioning
``parallel``, ``sequential`` or ``conditional`` also matches when that
keyword (``condition`` for the last) appears there.
"""

import json
import logging
import operator
import re
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional

logger = logging.getLogger(__name__)

_OPS: Dict[str, Callable[[Any, Any], bool]] = {
    ">": operator.gt,
    "<": operator.lt,
    ">=": operator.ge,
    "<=": operator.le,
    "==": operator.eq,
    "=": operator.eq,
    "!=": operator.ne,
}
_OP_PATTERN = r"(>=|<=|==|!=|>|<|=)"

_TOOL_COUNT_RE = re.compile(r"tool_count\s*" + _OP_PATTERN + r"\s*(\d+)", re.IGNORECASE)
_TOOL_NAME_RE = re.compile(r"tool_name_contains\s*\(\s*[\"']([^\"']+)[\"']\s*\)", re.IGNORECASE)
_CONTEXT_RE = re.compile(r"context\.(\w+)\s*" + _OP_PATTERN + r"\s*(.+)", re.IGNORECASE)

# keyword in condition -> token that must appear in tools or context
_KEYWORD_HINTS = (
    ("parallel", "parallel"),
    ("sequential", "sequential"),
    ("conditional", "condition"),
)


def _tools_text(tools: List[str]) -> str:
    return " ".join(tools).lower()


def _context_text(context: Mapping[str, Any]) -> str:
    return json.dumps(context, default=str, separators=(",", ":")).lower()


class Condition(ABC):
    """Base node of a parsed condition."""

    @abstractmethod
    def evaluate(self, tools: List[str], context: Mapping[str, Any]) -> bool:
        pass

    @property
    def clause_count(self) -> int:
        return 1


@dataclass(frozen=True)
class ToolCountCondition(Condition):
    op: str
    value: int

    def evaluate(self, tools, context):
        return _OPS[self.op](len(tools), self.value)


@dataclass(frozen=True)
class ToolNameContains(Condition):
    pattern: str

    def evaluate(self, tools, context):
        return any(self.pattern in tool.lower() for tool in tools)


@dataclass(frozen=True)
class ContextFieldCondition(Condition):
    field_name: str
    op: str
    value: str

    def evaluate(self, tools, context):
        found, actual = _lookup(context, self.field_name)
        if not found:
            return self.op == "!="

        if self.op in ("==", "=", "!="):
            equal = str(actual).lower() == self.value.lower()
            return equal if self.op != "!=" else not equal

        try:
            return _OPS[self.op](float(actual), float(self.value))
        except (TypeError, ValueError):
            logger.debug(
                f"Non-numeric comparison context.{self.field_name} {self.op} {self.value}"
            )
            return False


@dataclass(frozen=True)
class TextMatchCondition(Condition):
    text: str

    def evaluate(self, tools, context):
        tools_str = _tools_text(tools)
        context_str = _context_text(context)

        for keyword, token in _KEYWORD_HINTS:
            if keyword in self.text and (token in tools_str or token in context_str):
                return True

        return self.text in tools_str or self.text in context_str


@dataclass(frozen=True)
class AllOf(Condition):
    clauses: tuple

    def evaluate(self, tools, context):
        return all(clause.evaluate(tools, context) for clause in self.clauses)

    @property
    def clause_count(self) -> int:
        return sum(clause.clause_count for clause in self.clauses)


@dataclass(frozen=True)
class AnyOf(Condition):
    clauses: tuple

    def evaluate(self, tools, context):
        return any(clause.evaluate(tools, context) for clause in self.clauses)

    @property
    def clause_count(self) -> int:
        return sum(clause.clause_count for clause in self.clauses)


def _lookup(context: Mapping[str, Any], name: str):
    if name in context:
        return True, context[name]
    lowered = name.lower()
    for key, value in context.items():
        if str(key).lower() == lowered:
            return True, value
    return False, None


def _strip_quotes(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def _parse_clause(text: str) -> Condition:
    text = text.strip()

    match = _TOOL_COUNT_RE.search(text)
    if match:
        return ToolCountCondition(op=match.group(1), value=int(match.group(2)))

    match = _TOOL_NAME_RE.search(text)
    if match:
        return ToolNameContains(pattern=match.group(1).lower())

    match = _CONTEXT_RE.search(text)
    if match:
        return ContextFieldCondition(
            field_name=match.group(1),
            op=match.group(2),
            value=_strip_quotes(match.group(3)),
        )

    return TextMatchCondition(text=text.lower())


def parse_condition(expression: str) -> Condition:
    """
    Parse a condition string into a Condition tree.

    ``&&`` binds tighter than ``||``. Single clauses are returned unwrapped.
    """
    alternatives = []
    for branch in re.split(r"\|\|", expression):
        clauses = [_parse_clause(part) for part in re.split(r"&&", branch) if part.strip()]
        if not clauses:
            continue
        alternatives.append(clauses[0] if len(clauses) == 1 else AllOf(tuple(clauses)))

    if not alternatives:
        return TextMatchCondition(text=expression.strip().lower())
    if len(alternatives) == 1:
        return alternatives[0]
    return AnyOf(tuple(alternatives))


@dataclass
class ToolExecutionContext:
    """Context handed to predicate conditions during rule evaluation."""
    tool_name: str
    tools: List[str]
    call_id: str
    execution_id: str
    correlation_id: str
    tenant_id: str = "default"
    start_time: float = field(default_factory=lambda: time.time() * 1000)
    status: str = "PENDING"
    metadata: Dict[str, Any] = field(default_factory=dict)
    parameters: Dict[str, Any] = field(default_factory=dict)
    parent_id: Optional[str] = None
