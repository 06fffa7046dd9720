"""
Option Valuation Models

Key patterns:
- dataclass(slots=True) for internal state (validated by the engine on entry)
- Fixed-point integers throughout: prices at 8 decimals, premium at 18 decimals
"""

from dataclasses import dataclass
from typing import Any

PRICE_UNIT = 10**8
PREMIUM_UNIT = 10**18


@dataclass(slots=True)
class OptionConfig:
    """
    Per-option valuation parameters.

    Attributes:
        is_call: Payoff direction (True = call, False = put)
        strike_price: Strike, 8-decimal USD fixed point
        premium: Out-of-the-money fallback rate, 18-decimal fixed point
        expiration: Unix timestamp after which the option is unusable
        oracle: Price feed reference
        multiplier: Position-size scaling factor in [1, 100]
        is_active: Soft-delete flag
    """

    is_call: bool
    strike_price: int
    premium: int
    expiration: int
    oracle: Any
    multiplier: int
    is_active: bool = True

    def is_expired(self, now: int) -> bool:
        return now >= self.expiration

    def intrinsic_value(self, price: int) -> int:
        """Payoff at price in 8-decimal units, floored at zero."""
        if self.is_call:
            return max(price - self.strike_price, 0)
        return max(self.strike_price - price, 0)

    def __repr__(self) -> str:
        kind = "CALL" if self.is_call else "PUT"
        status = "ACTIVE" if self.is_active else "INACTIVE"
        return (
            f"OptionConfig({kind} strike={self.strike_price / PRICE_UNIT:.2f}, "
            f"x{self.multiplier}, expiration={self.expiration}, status={status})"
        )
