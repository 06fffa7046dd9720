"""
Adapter Models

Key patterns:
- Pydantic for the external engine's order struct (data from outside)
- Frozen dataclass result type for evaluations that must never raise
"""

from dataclasses import dataclass
from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, Field


class LimitOrder(BaseModel):
    """
    Order struct supplied by the external limit-order engine.

    The adapter receives it as context only; matching the callback's amounts
    against these terms is the engine's job.
    """

    model_config = ConfigDict(frozen=True)

    salt: int = Field(ge=0)
    maker: str
    receiver: str
    maker_asset: str
    taker_asset: str
    making_amount: int = Field(ge=0)
    taking_amount: int = Field(ge=0)
    maker_traits: int = Field(default=0, ge=0)


@dataclass(frozen=True, slots=True)
class EvaluationResult:
    """Outcome of a guarded predicate evaluation."""

    ok: bool
    value: bool = False
    error: str | None = None

    @classmethod
    def success(cls, value: bool) -> "EvaluationResult":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: Exception) -> "EvaluationResult":
        return cls(ok=False, value=False, error=f"{type(error).__name__}: {error}")

    def __bool__(self) -> bool:
        return self.ok and self.value


class AdapterStatus(NamedTuple):
    """Live view of an option/stop-loss pair. Expiry is not considered."""

    can_execute: bool
    current_price: int
    intrinsic_value: int
    stop_loss_ok: bool
