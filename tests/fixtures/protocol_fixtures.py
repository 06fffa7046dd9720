"""
Protocol fixtures for testing protected option positions.

Provides a manual clock, a settable price feed, a deployed protocol with funded
and approved accounts, and standard call/put positions.

Market setup mirrors a WETH/DAI pair: ETH at $2000, call strike $2100, stop-loss
at $1950 with a 10% max loss.

Usage:
    def test_execute(funded_protocol, call_position, oracle):
        oracle.set_latest_price(2200 * E8)
        funded_protocol.manager.execute(USER2, call_position, 2200 * E18)
"""

import pytest

from protected_options import build_protocol
from protected_options.config import ProtocolSettings
from protected_options.core import AccessControl, ManualClock
from protected_options.oracle import MockPriceOracle
from protected_options.stop_loss import StopLossEngine
from protected_options.valuation import OptionValuationEngine

E8 = 10**8
E18 = 10**18

DEPLOYER = "0x" + "d0" * 20
USER1 = "0x" + "11" * 20
USER2 = "0x" + "22" * 20
STRANGER = "0x" + "33" * 20

TOKEN1 = "0x" + "a1" * 20  # collateral (WETH)
TOKEN2 = "0x" + "a2" * 20  # payment (DAI)

START_TIME = 1_700_000_000
ONE_DAY = 24 * 3600

INITIAL_PRICE = 2000 * E8
STRIKE_PRICE = 2100 * E8
PREMIUM = 50 * E18
STOP_LOSS_PRICE = 1950 * E8
MAX_LOSS = 1000

MAKING_AMOUNT = 10 * E18
MIN_TAKING_AMOUNT = 2000 * E18

USER1_TOKEN1 = 1000 * E18
USER2_TOKEN2 = 10000 * E18


@pytest.fixture
def clock():
    """Manual clock starting at a fixed timestamp."""
    return ManualClock(START_TIME)


@pytest.fixture
def oracle(clock):
    """Fresh price feed reporting $2000."""
    return MockPriceOracle(clock, INITIAL_PRICE)


@pytest.fixture
def settings():
    """Default protocol settings."""
    return ProtocolSettings()


@pytest.fixture
def valuation_engine(clock, settings):
    """Stand-alone valuation engine owned by DEPLOYER."""
    return OptionValuationEngine(AccessControl(DEPLOYER), clock, settings=settings)


@pytest.fixture
def stop_loss_engine(clock, settings):
    """Stand-alone stop-loss engine owned by DEPLOYER."""
    return StopLossEngine(AccessControl(DEPLOYER), clock, settings=settings)


@pytest.fixture
def protocol(clock, settings):
    """
    Deployed protocol with manager and adapter authorized on both engines.

    Returns:
        ProtocolDeployment with an empty ledger
    """
    return build_protocol(DEPLOYER, clock=clock, settings=settings)


@pytest.fixture
def funded_protocol(protocol):
    """
    Protocol with USER1 holding collateral and USER2 holding payment tokens.

    Both users have approved the manager for their full balances.
    """
    ledger = protocol.ledger
    manager = protocol.manager

    ledger.mint(TOKEN1, USER1, USER1_TOKEN1)
    ledger.mint(TOKEN2, USER2, USER2_TOKEN2)
    ledger.approve(TOKEN1, USER1, manager.address, USER1_TOKEN1)
    ledger.approve(TOKEN2, USER2, manager.address, USER2_TOKEN2)

    return protocol


def create_position(protocol, feed, *, maker=USER1, is_call=True, **overrides):
    """Create a position with the standard parameters, overriding any of them."""
    params = dict(
        is_call=is_call,
        strike_price=STRIKE_PRICE,
        premium=PREMIUM,
        duration=ONE_DAY,
        maker_asset=TOKEN1,
        taker_asset=TOKEN2,
        making_amount=MAKING_AMOUNT,
        min_taking_amount=MIN_TAKING_AMOUNT,
        stop_loss_price=STOP_LOSS_PRICE,
        max_loss=MAX_LOSS,
        oracle=feed,
    )
    params.update(overrides)
    return protocol.manager.create(maker, **params)


@pytest.fixture
def call_position(funded_protocol, oracle):
    """Out-of-the-money call (strike $2100, price $2000) with a $1950 stop-loss."""
    return create_position(funded_protocol, oracle)


@pytest.fixture
def put_position(funded_protocol, oracle):
    """In-the-money put (strike $2100, price $2000) with a $2050 upper stop-loss."""
    return create_position(
        funded_protocol, oracle, is_call=False, stop_loss_price=2050 * E8
    )
