"""
Price Oracle Package

External price-feed interface, the shared staleness-checked fetch and a mock
feed for tests.
"""

from protected_options.oracle.feed import (
    PRICE_DECIMALS,
    MockPriceOracle,
    PriceOracle,
    fetch_price,
    read_price_info,
)
from protected_options.oracle.models import PriceRound

__all__ = [
    "PRICE_DECIMALS",
    "MockPriceOracle",
    "PriceOracle",
    "PriceRound",
    "fetch_price",
    "read_price_info",
]
