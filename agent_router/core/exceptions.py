"""
Exceptions - Application and routing error taxonomy.

Every error carries a stable ``error_code`` and the HTTP status the API
layer answers with. Routing failures derive from ``RoutingError`` so
callers can catch the whole family at once.
"""

from typing import Any, Dict, List, Optional


class AppException(Exception):
    """Base exception for application errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "INTERNAL_ERROR",
        status_code: int = 500,
        details: dict = None
    ):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class RoutingError(AppException):
    """Base class for failures inside the routing pipeline."""


class InputValidationError(RoutingError):
    """Raised when routed input does not satisfy the router's intent schema."""

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            status_code=422,
            details={"errors": errors or []}
        )


class NoRoutesAvailableError(RoutingError):
    """Raised when criteria filtering leaves no eligible route."""

    def __init__(self, message: str = "No routes available that meet the selection criteria"):
        super().__init__(
            message=message,
            error_code="NO_ROUTES_AVAILABLE",
            status_code=409
        )


class AgentNotFoundError(RoutingError):
    """Raised when a selected route (or the fallback) has no bound agent."""

    def __init__(self, route: str):
        super().__init__(
            message=f"No agent found for route: {route}",
            error_code="AGENT_NOT_FOUND",
            status_code=500,
            details={"route": route}
        )


class NoFinalAnswerError(RoutingError):
    """Raised when an agent responds without a terminal final answer."""

    def __init__(self, agent_name: str, action_type: str):
        super().__init__(
            message=f"Agent {agent_name} did not provide final answer",
            error_code="NO_FINAL_ANSWER",
            status_code=502,
            details={"agent": agent_name, "action_type": action_type}
        )


class UnknownStrategyError(RoutingError):
    """Raised for an unrecognized routing strategy. Never triggers the fallback."""

    def __init__(self, strategy: Any):
        super().__init__(
            message=f"Unknown routing strategy: {strategy}",
            error_code="UNKNOWN_STRATEGY",
            status_code=500,
            details={"strategy": str(strategy)}
        )


class RouteNotFoundError(AppException):
    """Raised when route metadata is addressed for an unregistered route."""

    def __init__(self, route: str):
        super().__init__(
            message=f"Route not found: {route}",
            error_code="ROUTE_NOT_FOUND",
            status_code=404,
            details={"route": route}
        )


class RouterNotFoundError(AppException):
    """Raised when no router is registered under the requested name."""

    def __init__(self, name: str):
        super().__init__(
            message=f"Router not found: {name}",
            error_code="ROUTER_NOT_FOUND",
            status_code=404,
            details={"router": name}
        )


class RuleNotFoundError(AppException):
    """Raised when a tool execution rule id is unknown."""

    def __init__(self, rule_id: str):
        super().__init__(
            message=f"Tool execution rule not found: {rule_id}",
            error_code="RULE_NOT_FOUND",
            status_code=404,
            details={"rule_id": rule_id}
        )


class InvalidRuleError(AppException):
    """Raised when a tool execution rule definition is malformed."""

    def __init__(self, message: str, rule_id: Optional[str] = None):
        super().__init__(
            message=message,
            error_code="INVALID_RULE",
            status_code=422,
            details={"rule_id": rule_id} if rule_id else {}
        )
