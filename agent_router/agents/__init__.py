"""
Agent contracts consumed and exposed by the router.

FLOW OVERVIEW:
--------------
1. A caller submits (input, context, criteria) to a Router
2. The Router picks a route and builds an AgentContext
3. The route's agent runs ``think`` and answers with an AgentThought
4. Only an AgentAction of type ``final_answer`` ends the call

USAGE:
------
    from agent_router.agents import BaseAgent, AgentThought, AgentAction

    class Echo(BaseAgent):
        name = "echo"

        async def think(self, input, context):
            return AgentThought(
                reasoning="echoing input",
                action=AgentAction(type="final_answer", content=input),
            )
"""

from agent_router.agents.base import (
    FINAL_ANSWER,
    AgentAction,
    AgentContext,
    AgentIdentity,
    AgentThought,
    BaseAgent,
    BaseTool,
    agent_summary,
)

__all__ = [
    "FINAL_ANSWER",
    "AgentAction",
    "AgentContext",
    "AgentIdentity",
    "AgentThought",
    "BaseAgent",
    "BaseTool",
    "agent_summary",
]
