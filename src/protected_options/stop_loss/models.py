"""
Stop-Loss Models

Key patterns:
- dataclass(slots=True) for internal state
- Bound direction decides which side of the threshold is unsafe
"""

from dataclasses import dataclass
from typing import Any, NamedTuple

BASIS_POINTS = 10_000


@dataclass(slots=True)
class StopLossConfig:
    """
    Per-position stop-loss parameters.

    Attributes:
        stop_loss_price: Threshold, 8-decimal fixed point
        max_loss: Maximum loss in basis points (1..9000)
        time_window: Protection window in seconds (>= 60)
        oracle: Price feed reference
        is_active: Soft-delete flag
        is_lower_bound: True = triggered when price falls to/below threshold
            (protects calls); False = triggered when price rises to/above it (puts)
        created_at: When the config was (re)written
    """

    stop_loss_price: int
    max_loss: int
    time_window: int
    oracle: Any
    is_active: bool
    is_lower_bound: bool
    created_at: int

    def is_breached(self, price: int) -> bool:
        """Monitoring form: threshold itself counts as triggered."""
        if self.is_lower_bound:
            return price <= self.stop_loss_price
        return price >= self.stop_loss_price

    def allows(self, price: int) -> bool:
        """Execution-gating form: price must be strictly on the safe side."""
        if self.is_lower_bound:
            return price > self.stop_loss_price
        return price < self.stop_loss_price

    def __repr__(self) -> str:
        side = "LOWER" if self.is_lower_bound else "UPPER"
        status = "ACTIVE" if self.is_active else "INACTIVE"
        return (
            f"StopLossConfig({side} threshold={self.stop_loss_price}, "
            f"max_loss={self.max_loss}bps, status={status})"
        )


class StopLossCheck(NamedTuple):
    """Result of a strict stop-loss check."""

    is_triggered: bool
    current_price: int
    threshold: int
