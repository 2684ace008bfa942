"""
Simulation events.

The simulation publishes discrete events (collision, clears, level ups,
new high score) so that sound, particles and HUD code can react without
the core knowing about them.
"""

from __future__ import annotations
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum, auto
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping
import logging

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Events emitted by the simulation."""
    COLLISION = auto()       # data: x, y (player center)
    CLEARED = auto()         # data: x, y (obstacle center x, near the bottom)
    NEW_HIGH_SCORE = auto()  # data: value
    LEVEL_CHANGED = auto()   # data: level
    RESET = auto()           # data: high_score


@dataclass(frozen=True)
class Event:
    """
    Event data container.

    Attributes:
        type: Event type
        data: Event payload, read-only
        tick: Simulation tick the event was emitted on
    """
    type: EventType
    data: Mapping[str, Any] = field(default_factory=dict)
    tick: int = 0

    def __post_init__(self) -> None:
        # handlers share one payload
        object.__setattr__(self, "data", MappingProxyType(dict(self.data)))


Handler = Callable[[Event], None]


class EventBus:
    """Synchronous pub/sub dispatch. Handler failures are logged, never raised."""

    def __init__(self) -> None:
        self._handlers: Dict[EventType, List[Handler]] = defaultdict(list)
        self._global_handlers: List[Handler] = []

    def subscribe(self, event_type: EventType, handler: Handler) -> Callable[[], None]:
        """
        Subscribe to an event type.

        Returns:
            Unsubscribe function
        """
        self._handlers[event_type].append(handler)
        logger.debug(f"Handler subscribed to {event_type}")

        def unsubscribe() -> None:
            if handler in self._handlers[event_type]:
                self._handlers[event_type].remove(handler)
                logger.debug(f"Handler unsubscribed from {event_type}")

        return unsubscribe

    def subscribe_all(self, handler: Handler) -> Callable[[], None]:
        """Subscribe to every event type."""
        self._global_handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._global_handlers:
                self._global_handlers.remove(handler)

        return unsubscribe

    def emit(self, event: Event) -> None:
        handlers = self._handlers.get(event.type, []) + self._global_handlers
        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Error in event handler for {event.type}: {e}")


# Convenience constructors
def collision_event(x: float, y: float, tick: int = 0) -> Event:
    return Event(EventType.COLLISION, data={"x": x, "y": y}, tick=tick)


def cleared_event(x: float, y: float, tick: int = 0) -> Event:
    return Event(EventType.CLEARED, data={"x": x, "y": y}, tick=tick)


def new_high_score_event(value: int, tick: int = 0) -> Event:
    return Event(EventType.NEW_HIGH_SCORE, data={"value": value}, tick=tick)


def level_changed_event(level: int, tick: int = 0) -> Event:
    return Event(EventType.LEVEL_CHANGED, data={"level": level}, tick=tick)
