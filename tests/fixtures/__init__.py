"""Test fixtures for protected options protocol tests.

This package provides reusable test fixtures for:
- Clock, oracle and settings
- A deployed, wired protocol with funded accounts
- Standard call and put positions

Fixtures are auto-discovered by pytest through conftest.py.
"""

from tests.fixtures.protocol_fixtures import (
    call_position,
    clock,
    funded_protocol,
    oracle,
    protocol,
    put_position,
    settings,
    stop_loss_engine,
    valuation_engine,
)

__all__ = [
    "clock",
    "oracle",
    "settings",
    "protocol",
    "funded_protocol",
    "call_position",
    "put_position",
    "valuation_engine",
    "stop_loss_engine",
]
