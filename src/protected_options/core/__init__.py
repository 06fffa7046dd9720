"""
Core Building Blocks

Clock, identifiers, access control, events, guards and the error taxonomy
shared by every protocol component.
"""

from protected_options.core.access import AccessControl
from protected_options.core.clock import Clock, ManualClock, SystemClock
from protected_options.core.events import Event, EventLog, EventType
from protected_options.core.guards import ReentrancyGuard, atomic
from protected_options.core.identifiers import (
    ZERO_ADDRESS,
    ZERO_ID,
    derive_id,
    is_null,
    label_id,
)

__all__ = [
    "AccessControl",
    "Clock",
    "ManualClock",
    "SystemClock",
    "Event",
    "EventLog",
    "EventType",
    "ReentrancyGuard",
    "atomic",
    "ZERO_ADDRESS",
    "ZERO_ID",
    "derive_id",
    "is_null",
    "label_id",
]
