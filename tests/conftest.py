"""Shared test fixtures for the agent router test suite."""

from typing import Any, Dict, List, Optional

import pytest

from agent_router.agents.base import AgentAction, AgentIdentity, AgentThought, BaseAgent
from agent_router.core.dependencies import get_router_registry
from agent_router.routing.events import RecordingEventSink


class StubAgent(BaseAgent):
    """Agent answering with a fixed action and remembering its calls."""

    def __init__(
        self,
        name: str,
        content: Any = None,
        action_type: str = "final_answer",
        reasoning: Optional[str] = None,
        error: Optional[Exception] = None,
        identity: Optional[AgentIdentity] = None
    ):
        self.name = name
        self.content = content if content is not None else f"{name} answer"
        self.action_type = action_type
        self.reasoning = reasoning or f"{name} handled it"
        self.error = error
        self.identity = identity
        self.calls: List[Dict[str, Any]] = []

    async def think(self, input, context):
        self.calls.append({"input": input, "context": context})
        if self.error is not None:
            raise self.error
        return AgentThought(
            reasoning=self.reasoning,
            action=AgentAction(type=self.action_type, content=self.content),
        )


class StubEmbeddingService:
    """
    Embeddings from a lookup table.

    Texts missing from the table get ``default``; with no default the
    lookup raises, which exercises the Jaccard fallback.
    """

    def __init__(self, vectors: Dict[str, List[float]], default: Optional[List[float]] = None):
        self.vectors = vectors
        self.default = default
        self.requests: List[str] = []

    async def embed(self, text: str) -> List[float]:
        self.requests.append(text)
        if text in self.vectors:
            return self.vectors[text]
        if self.default is not None:
            return self.default
        raise RuntimeError(f"no embedding for {text!r}")


@pytest.fixture
def make_agent():
    return StubAgent


@pytest.fixture
def make_embeddings():
    return StubEmbeddingService


@pytest.fixture
def recording_sink():
    return RecordingEventSink()


@pytest.fixture
def router_registry():
    """Process-wide router registry, emptied around each test."""
    registry = get_router_registry()
    registry.clear()
    yield registry
    registry.clear()
