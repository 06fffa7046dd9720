"""
Integration Tests for Protected Option Lifecycle

Tests the complete flow across all components:
1. Deployment and permission wiring
2. Create → monitor → execute
3. Create → stop-loss breach → third-party cancel
4. Create → expiry → cleanup
"""

import pytest

from protected_options import build_protocol
from protected_options.config import ProtocolSettings
from protected_options.core import ManualClock
from protected_options.core.errors import StalePriceError
from protected_options.core.events import EventType
from protected_options.oracle import MockPriceOracle
from tests.fixtures.protocol_fixtures import (
    DEPLOYER,
    E8,
    E18,
    MAKING_AMOUNT,
    ONE_DAY,
    START_TIME,
    STRANGER,
    TOKEN1,
    TOKEN2,
    USER1,
    USER1_TOKEN1,
    USER2,
    create_position,
)


class TestDeployment:
    """Tests for build_protocol wiring."""

    def test_permissions(self, protocol):
        for engine in (protocol.valuation, protocol.stop_loss):
            assert engine.is_authorized(protocol.manager.address)
            assert engine.is_authorized(protocol.adapter.address)
            assert engine.access.owner == DEPLOYER
            assert not engine.is_authorized(STRANGER)

        assert protocol.manager.owner == DEPLOYER

    def test_component_addresses(self, protocol):
        assert protocol.manager.address != protocol.adapter.address
        assert len(protocol.manager.address) == 42
        assert protocol.escrow.holder == protocol.manager.address

    def test_engines_have_separate_allow_lists(self, protocol):
        protocol.valuation.set_authorized_caller(DEPLOYER, STRANGER, True)

        assert protocol.valuation.is_authorized(STRANGER)
        assert not protocol.stop_loss.is_authorized(STRANGER)

    def test_permission_events(self, protocol):
        assert len(protocol.events.filter(EventType.AUTHORIZATION_CHANGED)) == 4

    def test_components_share_event_log(self, protocol):
        assert protocol.valuation.events is protocol.events
        assert protocol.stop_loss.events is protocol.events
        assert protocol.manager.events is protocol.events
        for engine in (protocol.valuation, protocol.stop_loss, protocol.manager):
            assert engine.access.events is protocol.events

    def test_position_events_reach_deployment_log(self, funded_protocol, oracle):
        position_id = create_position(funded_protocol, oracle)

        event = funded_protocol.events.last(EventType.POSITION_CREATED)
        assert event["position_id"] == position_id
        assert funded_protocol.events.filter(EventType.OPTION_PARAMS_UPDATED)
        assert funded_protocol.events.filter(EventType.STOP_LOSS_CONFIGURED)

    def test_custom_settings_propagate(self):
        clock = ManualClock(START_TIME)
        settings = ProtocolSettings(stop_loss_max_price_age=60)
        protocol = build_protocol(DEPLOYER, clock=clock, settings=settings)
        oracle = MockPriceOracle(clock, 2000 * E8)
        protocol.ledger.mint(TOKEN1, USER1, MAKING_AMOUNT)
        protocol.ledger.approve(TOKEN1, USER1, protocol.manager.address, MAKING_AMOUNT)
        position_id = create_position(protocol, oracle)

        clock.advance(61)

        with pytest.raises(StalePriceError):
            protocol.manager.can_execute(position_id)


class TestCallLifecycle:
    """Create → price rises → taker checks adapter → executes."""

    def test_full_flow(self, funded_protocol, oracle, clock):
        manager = funded_protocol.manager
        adapter = funded_protocol.adapter
        ledger = funded_protocol.ledger

        position_id = create_position(funded_protocol, oracle)
        position = manager.get_position(position_id)
        payload = adapter.encode_payload(position.option_id, position.stop_loss_id, 0, True)

        # Out of the money at creation
        assert not adapter.protected_option_predicate(payload)
        assert manager.can_execute(position_id)[0] is False

        clock.advance(3600)
        oracle.set_latest_price(2200 * E8)

        assert adapter.protected_option_predicate(payload)
        assert manager.can_execute(position_id) == (True, "Can execute")
        assert manager.status(position_id).in_the_money

        payout = manager.execute(USER2, position_id, 2200 * E18)

        assert ledger.balance_of(TOKEN2, USER1) == 2200 * E18
        assert ledger.balance_of(TOKEN1, USER2) == payout
        assert not adapter.protected_option_predicate(payload)

        event_types = [e.event_type for e in funded_protocol.events.events]
        created = event_types.index(EventType.POSITION_CREATED)
        assert event_types[created - 2 : created] == [
            EventType.OPTION_PARAMS_UPDATED,
            EventType.STOP_LOSS_CONFIGURED,
        ]
        assert event_types[-3:] == [
            EventType.OPTION_DEACTIVATED,
            EventType.STOP_LOSS_DEACTIVATED,
            EventType.POSITION_EXECUTED,
        ]


class TestStopLossLifecycle:
    """Create → price crashes → keeper cancels on the maker's behalf."""

    def test_keeper_cancel(self, funded_protocol, oracle):
        manager = funded_protocol.manager
        position_id = create_position(funded_protocol, oracle)
        position = manager.get_position(position_id)
        triggered = []
        funded_protocol.events.subscribe(
            lambda e: triggered.append(e) if e.event_type == EventType.STOP_LOSS_TRIGGERED else None
        )

        oracle.set_latest_price(1900 * E8)
        check = funded_protocol.stop_loss.check_stop_loss(DEPLOYER, position.stop_loss_id)

        assert check.is_triggered
        assert len(triggered) == 1
        assert manager.can_execute(position_id) == (False, "Stop-loss triggered")

        assert manager.cancel(STRANGER, position_id) == "stop-loss"
        assert funded_protocol.ledger.balance_of(TOKEN1, USER1) == USER1_TOKEN1
        assert funded_protocol.escrow.held(TOKEN1) == 0


class TestExpiryLifecycle:
    """Positions are never swept; expiry is only observed lazily."""

    def test_expired_position_holds_escrow_until_cancelled(self, funded_protocol, oracle, clock):
        manager = funded_protocol.manager
        first = create_position(funded_protocol, oracle)
        second = create_position(funded_protocol, oracle, duration=2 * ONE_DAY)

        clock.advance(ONE_DAY)

        assert manager.get_position(first).is_active
        assert funded_protocol.escrow.held(TOKEN1) == 2 * MAKING_AMOUNT
        assert manager.can_execute(first) == (False, "Option expired")

        assert manager.cancel(USER2, first) == "expired"

        assert funded_protocol.escrow.held(TOKEN1) == MAKING_AMOUNT
        assert manager.get_position(second).is_active
        assert manager.get_user_positions(USER1) == [first, second]
