"""
Base classes for the agent architecture.

The router never calls an LLM itself. It talks to agents through the
``think`` contract defined here and exposes itself through the same
contracts, so a router can stand wherever an agent or a tool is expected.
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional


FINAL_ANSWER = "final_answer"


@dataclass
class AgentIdentity:
    """Descriptive identity of an agent, used to build route documents."""
    role: Optional[str] = None
    goal: Optional[str] = None
    description: Optional[str] = None
    expertise: List[str] = field(default_factory=list)


def agent_summary(identity: Optional[AgentIdentity]) -> str:
    """
    Summarize an identity as a single line.

    Role, goal and up to three expertise items are joined with `` | ``.
    The description is used only when none of those are present.
    """
    if identity is None:
        return "AI Assistant"

    parts = []
    if identity.role:
        parts.append(identity.role)
    if identity.goal:
        parts.append(f"Goal: {identity.goal}")
    if identity.expertise:
        parts.append(f"Expertise: {', '.join(identity.expertise[:3])}")

    if not parts and identity.description:
        return identity.description

    return " | ".join(parts) or "AI Assistant"


@dataclass
class AgentAction:
    """Action proposed by an agent. Only ``final_answer`` is terminal."""
    type: str
    content: Any = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_final(self) -> bool:
        return self.type == FINAL_ANSWER


@dataclass
class AgentThought:
    """Result of a single ``think`` call."""
    reasoning: str
    action: AgentAction

    @classmethod
    def coerce(cls, value: Any) -> "AgentThought":
        """Accept either an AgentThought or its plain-dict form."""
        if isinstance(value, AgentThought):
            return value
        if isinstance(value, Mapping):
            raw_action = value.get("action") or {}
            if isinstance(raw_action, AgentAction):
                action = raw_action
            else:
                extra = {
                    k: v for k, v in raw_action.items()
                    if k not in ("type", "content")
                }
                action = AgentAction(
                    type=str(raw_action.get("type", "")),
                    content=raw_action.get("content"),
                    extra=extra,
                )
            return cls(reasoning=str(value.get("reasoning", "")), action=action)
        raise TypeError(f"Agent returned unsupported thought: {type(value).__name__}")


@dataclass
class AgentContext:
    """
    Execution context handed to an agent for one routed call.

    Carries the identifiers of the routing execution plus the routing
    metadata the router gathered on the way to the agent.
    """
    execution_id: str
    correlation_id: str
    invocation_id: str
    agent_name: str
    router_id: str
    selected_route: str
    tenant_id: str = "default"
    available_tools: List[Any] = field(default_factory=list)
    state: Dict[str, Any] = field(default_factory=dict)
    routing_metadata: Dict[str, Any] = field(default_factory=dict)
    start_time: float = field(default_factory=lambda: time.time() * 1000)
    status: str = "RUNNING"
    # Passed through untouched; the router does not observe cancellation.
    signal: Any = None


class BaseAgent(ABC):
    """
    Base class for all agents.

    Any object with an async ``think(input, context)`` is accepted by the
    router; subclassing is a convenience, not a requirement.
    """

    name: str = "agent"
    identity: Optional[AgentIdentity] = None

    @abstractmethod
    async def think(self, input: Any, context: AgentContext) -> AgentThought:
        """
        Decide what to do with an input.

        Args:
            input: Validated input routed to this agent
            context: Execution context built by the router

        Returns:
            AgentThought with reasoning and the proposed action
        """
        pass


class BaseTool(ABC):
    """
    Base class for tools.

    A tool is described by a name, a description and an input schema, and
    performs its action through ``execute``.
    """

    name: str = "base_tool"
    description: str = "Base tool description"
    schema: Any = None

    @abstractmethod
    async def execute(self, input: Any, context: Optional[Any] = None) -> Any:
        """
        Execute the tool's action.

        Args:
            input: Tool input, validated against ``schema`` by the tool
            context: Optional caller context

        Returns:
            Tool-specific result
        """
        pass
