"""
Protocol Events

Observable state transitions of the protocol (position created/executed/
cancelled, stop-loss configured/triggered/deactivated, option params updated).

Key patterns:
- EventType enum names every transition
- Event dataclass carries the emitting component, timestamp and payload
- EventLog keeps events in memory, fans them out to subscribers and logs them
- Events are part of atomic snapshots: a failed operation leaves no events behind

Example:
    >>> log = EventLog()
    >>> log.subscribe(lambda event: print(event.event_type.value))
    >>> log.emit(EventType.POSITION_CREATED, "ProtectedOptionManager", 0, maker="0xabc")
    position_created
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from loguru import logger

logger = logger.bind(component="EventLog")


class EventType(str, Enum):
    """Protocol event types."""

    # Valuation engine
    OPTION_PARAMS_UPDATED = "option_params_updated"
    OPTION_DEACTIVATED = "option_deactivated"

    # Stop-loss engine
    STOP_LOSS_CONFIGURED = "stop_loss_configured"
    STOP_LOSS_TRIGGERED = "stop_loss_triggered"
    STOP_LOSS_DEACTIVATED = "stop_loss_deactivated"

    # Orchestrator
    POSITION_CREATED = "position_created"
    POSITION_EXECUTED = "position_executed"
    POSITION_CANCELLED = "position_cancelled"
    EMERGENCY_RECOVERY = "emergency_recovery"

    # Access control
    AUTHORIZATION_CHANGED = "authorization_changed"
    OWNERSHIP_TRANSFERRED = "ownership_transferred"


@dataclass(slots=True, frozen=True)
class Event:
    """
    A single emitted event.

    Attributes:
        event_type: Which transition occurred
        component: Name of the emitting component
        timestamp: Clock time of emission
        data: Event-specific fields (identifiers, amounts, reason)
    """

    event_type: EventType
    component: str
    timestamp: int
    data: dict[str, Any] = field(default_factory=dict)

    def __getitem__(self, key: str) -> Any:
        return self.data[key]


class EventLog:
    """
    In-memory event sink shared by all protocol components.

    Attributes:
        events: Emitted events in order
    """

    def __init__(self):
        self.events: list[Event] = []
        self._subscribers: list[Callable[[Event], None]] = []

    def emit(
        self, event_type: EventType, component: str, timestamp: int, **data: Any
    ) -> Event:
        event = Event(
            event_type=event_type,
            component=component,
            timestamp=timestamp,
            data=dict(data),
        )
        self.events.append(event)

        logger.debug(f"{component} emitted {event_type.value}: {data}")

        for callback in self._subscribers:
            callback(event)

        return event

    def subscribe(self, callback: Callable[[Event], None]) -> None:
        self._subscribers.append(callback)

    def filter(self, event_type: EventType) -> list[Event]:
        """Return all events of one type, oldest first."""
        return [e for e in self.events if e.event_type == event_type]

    def last(self, event_type: EventType | None = None) -> Event | None:
        for event in reversed(self.events):
            if event_type is None or event.event_type == event_type:
                return event
        return None

    def snapshot(self) -> int:
        return len(self.events)

    def restore(self, state: int) -> None:
        del self.events[state:]

    def __len__(self) -> int:
        return len(self.events)

    def __repr__(self) -> str:
        return f"EventLog(events={len(self.events)})"
