"""
Routing Events - Observational lifecycle notifications.

The dispatcher emits ``router.start``, ``router.success`` and
``router.error``. Sinks are injected at construction; emitting never
changes the outcome of a routing call.
"""

import logging
from typing import Any, Dict, List, Protocol, Tuple

logger = logging.getLogger(__name__)

ROUTER_START = "router.start"
ROUTER_SUCCESS = "router.success"
ROUTER_ERROR = "router.error"


class EventSink(Protocol):
    def emit(self, event: str, payload: Dict[str, Any]) -> None:
        ...


class LoggingEventSink:
    """Writes every event to the log at debug level."""

    def emit(self, event: str, payload: Dict[str, Any]) -> None:
        logger.debug(f"{event}: {payload}")


class RecordingEventSink:
    """Keeps emitted events in memory, in order."""

    def __init__(self):
        self.events: List[Tuple[str, Dict[str, Any]]] = []

    def emit(self, event: str, payload: Dict[str, Any]) -> None:
        self.events.append((event, payload))

    def names(self) -> List[str]:
        return [name for name, _ in self.events]

    def clear(self) -> None:
        self.events.clear()
