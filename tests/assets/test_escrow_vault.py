"""
Tests for the escrow vault.
"""

import pytest

from protected_options.assets import EscrowVault, TokenLedger
from protected_options.core.errors import InsufficientAllowanceError, ReentrantCallError
from tests.fixtures.protocol_fixtures import E18, TOKEN1, USER1, USER2

HOLDER = "0x" + "ee" * 20


@pytest.fixture
def ledger():
    ledger = TokenLedger()
    ledger.mint(TOKEN1, USER1, 100 * E18)
    return ledger


@pytest.fixture
def vault(ledger):
    return EscrowVault(ledger, HOLDER)


class TestDepositRelease:
    """Tests for moving collateral in and out of escrow."""

    def test_deposit_requires_approval_of_holder(self, vault):
        with pytest.raises(InsufficientAllowanceError, match="approve"):
            vault.deposit(TOKEN1, USER1, 10 * E18)

        assert vault.held(TOKEN1) == 0

    def test_deposit_and_release(self, vault, ledger):
        ledger.approve(TOKEN1, USER1, HOLDER, 10 * E18)

        vault.deposit(TOKEN1, USER1, 10 * E18)
        assert vault.held(TOKEN1) == 10 * E18
        assert ledger.balance_of(TOKEN1, USER1) == 90 * E18

        vault.release(TOKEN1, USER2, 4 * E18)
        assert vault.held(TOKEN1) == 6 * E18
        assert ledger.balance_of(TOKEN1, USER2) == 4 * E18


class TestHold:
    """Tests for the per-position settlement marker."""

    def test_same_position_cannot_be_held_twice(self, vault):
        with vault.hold("0xposition"):
            with pytest.raises(ReentrantCallError, match="already being settled"):
                with vault.hold("0xposition"):
                    pass

    def test_different_positions_are_independent(self, vault):
        with vault.hold("0xfirst"):
            with vault.hold("0xsecond"):
                assert vault.locked == {"0xfirst", "0xsecond"}

        assert vault.locked == set()

    def test_released_after_exception(self, vault):
        with pytest.raises(RuntimeError):
            with vault.hold("0xposition"):
                raise RuntimeError("settlement failed")

        assert "0xposition" not in vault.locked
