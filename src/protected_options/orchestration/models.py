"""
Protected Option Position Models

Key patterns:
- dataclass(slots=True) for position state (internal, validated on entry)
- str Enums for reasons so callers can compare against plain strings
"""

from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple


class ExecutionReason(str, Enum):
    """
    Outcome of the pre-execution check.

    Checks run in this order and stop at the first failure.
    """

    NOT_ACTIVE = "Option not active"
    EXPIRED = "Option expired"
    ALREADY_EXECUTED = "Option already executed"
    STOP_LOSS_TRIGGERED = "Stop-loss triggered"
    OUT_OF_THE_MONEY = "Option out of the money"
    CAN_EXECUTE = "Can execute"

    def __str__(self) -> str:
        return self.value


class CancelReason(str, Enum):
    """Why a position was cancelled (expiry wins over stop-loss)."""

    EXPIRED = "expired"
    STOP_LOSS = "stop-loss"
    CANCELLED = "cancelled"

    def __str__(self) -> str:
        return self.value


@dataclass(slots=True)
class ProtectedOption:
    """
    A protected option position.

    Attributes:
        option_id: Linked valuation config
        stop_loss_id: Linked stop-loss config
        maker: Account that escrowed the collateral
        maker_asset: Escrowed collateral asset
        taker_asset: Expected payment asset
        making_amount: Escrowed collateral quantity
        min_taking_amount: Minimum payment the maker accepts
        created_at: Creation timestamp
        expires_at: Expiration timestamp
        is_active: False once executed or cancelled
        is_call: Payoff direction (copy of the option config's flag)
    """

    option_id: str
    stop_loss_id: str
    maker: str
    maker_asset: str
    taker_asset: str
    making_amount: int
    min_taking_amount: int
    created_at: int
    expires_at: int
    is_active: bool
    is_call: bool

    def is_expired(self, now: int) -> bool:
        return now >= self.expires_at

    def __repr__(self) -> str:
        kind = "CALL" if self.is_call else "PUT"
        status = "ACTIVE" if self.is_active else "INACTIVE"
        return (
            f"ProtectedOption({kind} maker={self.maker}, "
            f"{self.making_amount} {self.maker_asset} for >= {self.min_taking_amount} "
            f"{self.taker_asset}, expires_at={self.expires_at}, status={status})"
        )


class PositionStatus(NamedTuple):
    """Live view of a position; all fields zero/False when inactive."""

    in_the_money: bool
    current_price: int
    intrinsic_value: int
    stop_loss_ok: bool
