"""
Transaction Guards

Two guards protect every state-mutating entry point:

- ReentrancyGuard: rejects re-invocation of a guarded entry point while one is
  still running (asset transfers may call back into the protocol).
- atomic(): all-or-nothing execution. Participants are snapshotted on entry
  and restored if the body raises, so a failure after an escrow pull can never
  leave assets stuck or bookkeeping half-updated.

Usage:
    >>> guard = ReentrancyGuard("ProtectedOptionManager")
    >>> with guard, atomic(ledger, manager, events):
    ...     ...  # transfers and state updates
"""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Protocol

from loguru import logger

from protected_options.core.errors import ReentrantCallError

logger = logger.bind(component="Guards")


class Snapshottable(Protocol):
    """Component whose mutable state can be captured and put back."""

    def snapshot(self) -> Any: ...

    def restore(self, state: Any) -> None: ...


class ReentrancyGuard:
    """
    Non-reentrant lock for a component's mutating entry points.

    Attributes:
        name: Component name (for error messages)
        entered: Whether a guarded call is in progress
    """

    def __init__(self, name: str):
        self.name = name
        self.entered = False

    def __enter__(self) -> "ReentrancyGuard":
        if self.entered:
            raise ReentrantCallError(f"{self.name}: reentrant call rejected")
        self.entered = True
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.entered = False


@contextmanager
def atomic(*participants: Snapshottable) -> Iterator[None]:
    """
    Run the body as a single all-or-nothing operation.

    Raises:
        Whatever the body raised, after every participant has been restored
    """
    states = [(p, p.snapshot()) for p in participants]
    try:
        yield
    except Exception as e:
        for participant, state in reversed(states):
            participant.restore(state)
        logger.debug(f"Rolled back {len(states)} participants after {type(e).__name__}: {e}")
        raise
