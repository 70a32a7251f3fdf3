"""
Criteria Filter - Narrows the candidate routes before any scoring.
"""

from typing import List, Optional

from agent_router.routing.registry import RouteRegistry
from agent_router.routing.types import SelectionCriteria


def merge_criteria(
    defaults: Optional[SelectionCriteria],
    criteria: Optional[SelectionCriteria]
) -> SelectionCriteria:
    """
    Combine router-level defaults with call-site criteria.

    List fields are concatenated (defaults first), so a call can never drop
    a default requirement or exclusion. Duplicates are kept. Scalar fields
    from the call override the defaults when set.
    """
    defaults = defaults or SelectionCriteria()
    criteria = criteria or SelectionCriteria()

    return SelectionCriteria(
        required_capabilities=[*defaults.required_capabilities, *criteria.required_capabilities],
        required_tags=[*defaults.required_tags, *criteria.required_tags],
        excluded_agents=[*defaults.excluded_agents, *criteria.excluded_agents],
        preferred_capabilities=[*defaults.preferred_capabilities, *criteria.preferred_capabilities],
        preferred_tags=[*defaults.preferred_tags, *criteria.preferred_tags],
        max_agents=criteria.max_agents if criteria.max_agents is not None else defaults.max_agents,
        min_score=criteria.min_score if criteria.min_score is not None else defaults.min_score,
    )


def filter_routes(
    routes: List[str],
    criteria: SelectionCriteria,
    registry: RouteRegistry
) -> List[str]:
    """
    Return the routes eligible under ``criteria``, preserving order.

    Passes run in order: exclusions, required capabilities, required tags.
    Every entry of a requirement list must be present (AND semantics).
    An empty requirement list does not filter.
    """
    eligible = list(routes)

    if criteria.excluded_agents:
        excluded = set(criteria.excluded_agents)
        eligible = [route for route in eligible if route not in excluded]

    if criteria.required_capabilities:
        eligible = [
            route for route in eligible
            if all(cap in registry.get_capabilities(route) for cap in criteria.required_capabilities)
        ]

    if criteria.required_tags:
        eligible = [
            route for route in eligible
            if all(tag in registry.get_tags(route) for tag in criteria.required_tags)
        ]

    return eligible
