"""
Agent Router
============

Routes a request to the most appropriate of several candidate agents and
advises how a set of tools should be executed.

Components:
- routing: Route registry, criteria filter, selection strategies,
  execution dispatcher, tool-execution strategy advisor, Router facade
- agents: Agent and tool contracts consumed by the router
- services: Embeddings and text similarity
- api: FastAPI endpoints
- models: Pydantic API models
- core: Configuration, exceptions and dependencies
"""

__version__ = "1.0.0"
