"""
Execution Clock

Every component reads "now" from a shared Clock, which stands in for the
block timestamp of the surrounding execution environment. Expiry and
staleness are evaluated lazily against it; nothing runs on a schedule.

Usage:
    >>> clock = ManualClock(start=1_700_000_000)
    >>> clock.advance(3600)
    >>> clock.now()
    1700003600
"""

import time
from typing import Protocol


class Clock(Protocol):
    """Source of the current unix timestamp in whole seconds."""

    def now(self) -> int: ...


class SystemClock:
    """Wall-clock time."""

    def now(self) -> int:
        return int(time.time())

    def __repr__(self) -> str:
        return "SystemClock()"


class ManualClock:
    """
    Settable clock for tests and simulations.

    Attributes:
        current: Current timestamp in seconds
    """

    def __init__(self, start: int | None = None):
        self.current = int(time.time()) if start is None else int(start)

    def now(self) -> int:
        return self.current

    def advance(self, seconds: int) -> int:
        """Move time forward and return the new timestamp."""
        if seconds < 0:
            raise ValueError(f"seconds must be non-negative, got {seconds}")
        self.current += int(seconds)
        return self.current

    def set(self, timestamp: int) -> None:
        self.current = int(timestamp)

    def __repr__(self) -> str:
        return f"ManualClock(now={self.current})"
