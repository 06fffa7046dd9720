"""
Pydantic Models for Oracle Data Validation

Price rounds come from an external feed, so they are validated with Pydantic
(not dataclasses) before any engine consumes them.

Decision tree:
    Does this data come from outside my process?
    ├─ Yes → Use Pydantic (validation critical) ← WE ARE HERE
    └─ No → Use dataclass (performance matters)
"""

from pydantic import BaseModel, ConfigDict, Field


class PriceRound(BaseModel):
    """
    Latest answer of a price feed.

    Price sign is not constrained here: a non-positive answer is a market-data
    condition the consumer reports (InvalidPriceError), not malformed data.

    Attributes:
        price: Signed fixed-point price
        decimals: Fractional digits of price (8 for USD feeds)
        updated_at: Unix timestamp of the last update
    """

    model_config = ConfigDict(frozen=True, strict=True)

    price: int
    decimals: int = Field(ge=0, le=36)
    updated_at: int = Field(ge=0)

    def age(self, now: int) -> int:
        """Seconds since the last update, never negative."""
        return max(now - self.updated_at, 0)
