"""
Price Feed Interface and Fetch Contract

Both engines read prices through fetch_price(), differing only in the maximum
age they tolerate (3600s for valuation, 300s for stop-loss). The oracle itself
never judges staleness; that is the consumer's job.

MockPriceOracle is the test double used by the test suite and simulations.

Usage:
    >>> oracle = MockPriceOracle(clock, price=2000 * 10**8)
    >>> fetch_price(oracle, clock.now(), max_age=300)
    200000000000
"""

from typing import Protocol

from loguru import logger

from protected_options.core.clock import Clock
from protected_options.core.errors import InvalidPriceError, StalePriceError
from protected_options.oracle.models import PriceRound

logger = logger.bind(component="PriceFeed")

PRICE_DECIMALS = 8


class PriceOracle(Protocol):
    """Read-only price feed for one asset pair."""

    def latest_price(self) -> PriceRound: ...

    def decimals(self) -> int: ...


def fetch_price(oracle: PriceOracle, now: int, max_age: int) -> int:
    """
    Read a usable price from an oracle.

    Args:
        oracle: Price feed to read
        now: Current timestamp
        max_age: Maximum tolerated age in seconds

    Returns:
        Positive price in the oracle's fixed-point unit

    Raises:
        StalePriceError: If the price is older than max_age
        InvalidPriceError: If the price is zero or negative
    """
    latest = oracle.latest_price()
    age = latest.age(now)

    if age > max_age:
        logger.warning(f"Stale price: age={age}s > max_age={max_age}s")
        raise StalePriceError(
            f"Price is stale: {age}s old (max {max_age}s)", age=age, max_age=max_age
        )

    if latest.price <= 0:
        logger.warning(f"Invalid price: {latest.price}")
        raise InvalidPriceError(f"Oracle price must be positive, got {latest.price}")

    return latest.price


def read_price_info(oracle: PriceOracle, now: int) -> tuple[int, int]:
    """Return (price, age_seconds) without enforcing any policy."""
    latest = oracle.latest_price()
    return latest.price, latest.age(now)


class MockPriceOracle:
    """
    Settable price feed.

    Attributes:
        clock: Clock used to stamp updates
        price: Current answer
        updated_at: Timestamp of the current answer
    """

    def __init__(self, clock: Clock, price: int, decimals: int = PRICE_DECIMALS):
        self.clock = clock
        self.price = price
        self._decimals = decimals
        self.updated_at = clock.now()
        self.round_id = 1

    def latest_price(self) -> PriceRound:
        return PriceRound(price=self.price, decimals=self._decimals, updated_at=self.updated_at)

    def decimals(self) -> int:
        return self._decimals

    def latest_round_data(self) -> tuple[int, int, int, int, int]:
        """Chainlink-shaped (round_id, answer, started_at, updated_at, answered_in_round)."""
        return self.round_id, self.price, self.updated_at, self.updated_at, self.round_id

    def set_latest_price(self, price: int) -> None:
        self.price = price
        self.updated_at = self.clock.now()
        self.round_id += 1

    def set_stale_price(self, age: int = 7200) -> None:
        """Backdate the current answer by age seconds."""
        self.updated_at = max(self.clock.now() - age, 0)

    def set_updated_at(self, timestamp: int) -> None:
        self.updated_at = timestamp

    def __repr__(self) -> str:
        return f"MockPriceOracle(price={self.price}, updated_at={self.updated_at})"
