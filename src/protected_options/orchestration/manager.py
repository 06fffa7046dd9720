"""
Protected Option Manager

State machine and escrow custodian for protected option positions.

Lifecycle:
    create  → position ACTIVE, collateral escrowed, option + stop-loss configured
    execute → counterparty pays the maker, receives collateral (terminal)
    cancel  → collateral back to the maker (terminal); allowed for the maker,
              for anyone once expired, or for anyone once the stop-loss fires

Expiry is evaluated lazily whenever execute/cancel/can_execute run; nothing
sweeps expired positions.

Every mutating entry point is non-reentrant and atomic: if anything fails
after collateral has moved, all ledger, engine and position state is restored.

Usage:
    >>> position_id = manager.create(
    ...     alice, is_call=True, strike_price=2100 * 10**8, premium=50 * 10**18,
    ...     duration=3600, maker_asset="WETH", taker_asset="DAI",
    ...     making_amount=10**18, min_taking_amount=2000 * 10**18,
    ...     stop_loss_price=1950 * 10**8, max_loss=500, oracle=oracle)
    >>> manager.can_execute(position_id)
    (False, <ExecutionReason.OUT_OF_THE_MONEY: 'Option out of the money'>)
"""

from dataclasses import astuple
from typing import Any

from loguru import logger

from protected_options.assets.escrow import EscrowVault
from protected_options.assets.ledger import TokenLedger
from protected_options.config.settings import ProtocolSettings
from protected_options.core.access import AccessControl
from protected_options.core.clock import Clock
from protected_options.core.errors import (
    InsufficientAmountError,
    InsufficientBalanceError,
    InvalidConfigurationError,
    InvalidOptionDurationError,
    OptionAlreadyExecutedError,
    OptionExpiredError,
    OptionNotActiveError,
    OptionOutOfMoneyError,
    StopLossTriggeredError,
    UnauthorizedAccessError,
)
from protected_options.core.events import EventLog, EventType
from protected_options.core.guards import ReentrancyGuard, atomic
from protected_options.core.identifiers import OPTION_TAG, STOP_LOSS_TAG, derive_id, is_null
from protected_options.orchestration.models import (
    CancelReason,
    ExecutionReason,
    PositionStatus,
    ProtectedOption,
)
from protected_options.stop_loss.engine import StopLossEngine
from protected_options.valuation.engine import OptionValuationEngine

logger = logger.bind(component="ProtectedOptionManager")

COMPONENT = "ProtectedOptionManager"


class ProtectedOptionManager:
    """
    Orchestrates protected option positions.

    Attributes:
        address: This component's account (escrow holder, engine caller identity)
        valuation: Option valuation engine (must authorize address)
        stop_loss: Stop-loss engine (must authorize address)
        ledger: Token ledger
        vault: Escrow vault holding maker collateral
        access: Owner gate for emergency recovery
        positions: position_id -> ProtectedOption
        user_positions: maker -> position ids in creation order
        executed: Ids of executed positions
    """

    def __init__(
        self,
        address: str,
        valuation: OptionValuationEngine,
        stop_loss: StopLossEngine,
        ledger: TokenLedger,
        access: AccessControl,
        clock: Clock,
        events: EventLog | None = None,
        settings: ProtocolSettings | None = None,
    ):
        if is_null(address):
            raise InvalidConfigurationError("Manager address must be non-null")

        self.address = address
        self.valuation = valuation
        self.stop_loss = stop_loss
        self.ledger = ledger
        self.vault = EscrowVault(ledger, address)
        self.access = access
        self.clock = clock
        self.events = events if events is not None else EventLog()
        self.settings = settings or ProtocolSettings()

        self.positions: dict[str, ProtectedOption] = {}
        self.user_positions: dict[str, list[str]] = {}
        self.executed: set[str] = set()
        self._nonce = 0
        self._guard = ReentrancyGuard(COMPONENT)

    @property
    def owner(self) -> str:
        return self.access.owner

    def create(
        self,
        caller: str,
        *,
        is_call: bool,
        strike_price: int,
        premium: int,
        duration: int,
        maker_asset: str,
        taker_asset: str,
        making_amount: int,
        min_taking_amount: int,
        stop_loss_price: int,
        max_loss: int,
        oracle: Any,
    ) -> str:
        """
        Open a position and escrow the maker's collateral.

        Calls get a lower-bound stop-loss, puts an upper-bound one.

        Returns:
            New position id

        Raises:
            InvalidOptionDurationError: If duration is outside [1h, 30d]
            InvalidConfigurationError: If an amount is zero or an asset is null
            InvalidOptionConfigError / InvalidMaxLossError: From the engines
            InsufficientAllowanceError: If the maker has not approved the collateral
        """
        with self._guard, self._transaction():
            if not self.settings.min_option_duration <= duration <= self.settings.max_option_duration:
                raise InvalidOptionDurationError(
                    f"Duration must be in [{self.settings.min_option_duration}, "
                    f"{self.settings.max_option_duration}]s, got {duration}"
                )
            if making_amount <= 0 or min_taking_amount <= 0:
                raise InvalidConfigurationError(
                    f"Amounts must be positive: making={making_amount}, "
                    f"min_taking={min_taking_amount}"
                )
            if is_null(maker_asset) or is_null(taker_asset):
                raise InvalidConfigurationError("Maker and taker assets must be non-null")

            now = self.clock.now()
            position_id = derive_id(caller, now, self._nonce)
            self._nonce += 1
            option_id = derive_id(position_id, OPTION_TAG)
            stop_loss_id = derive_id(position_id, STOP_LOSS_TAG)
            expires_at = now + duration

            self.valuation.set_config(
                self.address,
                option_id,
                is_call=is_call,
                strike_price=strike_price,
                premium=premium,
                expiration=expires_at,
                oracle=oracle,
                multiplier=self.settings.default_multiplier,
            )
            self.stop_loss.configure(
                self.address,
                stop_loss_id,
                stop_loss_price=stop_loss_price,
                max_loss=max_loss,
                time_window=duration,
                oracle=oracle,
                is_lower_bound=is_call,
            )

            self.vault.deposit(maker_asset, caller, making_amount)

            position = ProtectedOption(
                option_id=option_id,
                stop_loss_id=stop_loss_id,
                maker=caller,
                maker_asset=maker_asset,
                taker_asset=taker_asset,
                making_amount=making_amount,
                min_taking_amount=min_taking_amount,
                created_at=now,
                expires_at=expires_at,
                is_active=True,
                is_call=is_call,
            )
            self.positions[position_id] = position
            self.user_positions.setdefault(caller, []).append(position_id)

            logger.info(f"Position {position_id[:10]}... created: {position}")
            self.events.emit(
                EventType.POSITION_CREATED,
                COMPONENT,
                now,
                position_id=position_id,
                option_id=option_id,
                stop_loss_id=stop_loss_id,
                maker=caller,
                is_call=is_call,
                strike_price=strike_price,
            )
            return position_id

    def execute(self, caller: str, position_id: str, taking_amount: int) -> int:
        """
        Settle a position against the caller.

        The caller pays taking_amount of the taker asset to the maker and
        receives the valuation engine's making amount, capped at the escrow.

        Returns:
            Collateral paid out to the caller

        Raises:
            OptionNotActiveError: If inactive (OptionAlreadyExecutedError if executed)
            OptionExpiredError: If past expiry
            InsufficientAmountError: If taking_amount < min_taking_amount
            StopLossTriggeredError: If the stop-loss predicate fails
            OptionOutOfMoneyError: If the option is not in the money
        """
        with self._guard, self.vault.hold(position_id), self._transaction():
            position = self.positions.get(position_id)
            if position_id in self.executed:
                raise OptionAlreadyExecutedError(
                    f"Position {position_id[:10]}... was already executed"
                )
            if position is None or not position.is_active:
                raise OptionNotActiveError(f"Position {position_id[:10]}... is not active")

            now = self.clock.now()
            if position.is_expired(now):
                raise OptionExpiredError(
                    f"Position {position_id[:10]}... expired at {position.expires_at}"
                )
            if taking_amount < position.min_taking_amount:
                raise InsufficientAmountError(
                    f"Taking amount {taking_amount} below minimum {position.min_taking_amount}"
                )
            if not self.stop_loss.predicate(position.stop_loss_id):
                raise StopLossTriggeredError(
                    f"Stop-loss triggered for position {position_id[:10]}..."
                )
            if not self.valuation.is_in_the_money(position.option_id):
                raise OptionOutOfMoneyError(
                    f"Position {position_id[:10]}... is out of the money"
                )

            payout = self.valuation.making_amount_for(
                self.address, position.option_id, taking_amount
            )
            payout = min(payout, position.making_amount)

            position.is_active = False
            self.executed.add(position_id)
            self.valuation.deactivate(self.address, position.option_id)
            self.stop_loss.deactivate(self.address, position.stop_loss_id)

            self.ledger.transfer_from(
                position.taker_asset, self.address, caller, position.maker, taking_amount
            )
            self.vault.release(position.maker_asset, caller, payout)

            logger.info(
                f"Position {position_id[:10]}... executed by {caller}: "
                f"paid {taking_amount} {position.taker_asset}, "
                f"received {payout} {position.maker_asset}"
            )
            self.events.emit(
                EventType.POSITION_EXECUTED,
                COMPONENT,
                now,
                position_id=position_id,
                executor=caller,
                taking_amount=taking_amount,
                payoff=payout,
            )
            return payout

    def cancel(self, caller: str, position_id: str) -> CancelReason:
        """
        Return escrowed collateral to the maker.

        Allowed when the caller is the maker, the position has expired, or the
        stop-loss predicate currently fails. Expiry is checked first, so an
        expired position never reaches the oracle.

        Returns:
            The reason recorded on the cancellation event

        Raises:
            OptionNotActiveError: If the position is not active
            UnauthorizedAccessError: If none of the three conditions holds
        """
        with self._guard, self.vault.hold(position_id), self._transaction():
            position = self.positions.get(position_id)
            if position is None or not position.is_active:
                raise OptionNotActiveError(f"Position {position_id[:10]}... is not active")

            now = self.clock.now()
            if position.is_expired(now):
                reason = CancelReason.EXPIRED
            elif not self.stop_loss.predicate(position.stop_loss_id):
                reason = CancelReason.STOP_LOSS
            elif caller == position.maker:
                reason = CancelReason.CANCELLED
            else:
                raise UnauthorizedAccessError(
                    f"{caller} may not cancel position {position_id[:10]}..."
                )

            position.is_active = False
            self.valuation.deactivate(self.address, position.option_id)
            self.stop_loss.deactivate(self.address, position.stop_loss_id)

            self.vault.release(position.maker_asset, position.maker, position.making_amount)

            logger.info(f"Position {position_id[:10]}... cancelled ({reason.value}) by {caller}")
            self.events.emit(
                EventType.POSITION_CANCELLED,
                COMPONENT,
                now,
                position_id=position_id,
                reason=reason.value,
            )
            return reason

    def can_execute(self, position_id: str) -> tuple[bool, ExecutionReason]:
        """
        Pre-compute execute()'s checks without changing state.

        Order: not active → expired → already executed → stop-loss → out of the money.
        """
        position = self.positions.get(position_id)
        if position is None or not position.is_active:
            return False, ExecutionReason.NOT_ACTIVE
        if position.is_expired(self.clock.now()):
            return False, ExecutionReason.EXPIRED
        if position_id in self.executed:
            return False, ExecutionReason.ALREADY_EXECUTED
        if not self.stop_loss.predicate(position.stop_loss_id):
            return False, ExecutionReason.STOP_LOSS_TRIGGERED
        if not self.valuation.is_in_the_money(position.option_id):
            return False, ExecutionReason.OUT_OF_THE_MONEY
        return True, ExecutionReason.CAN_EXECUTE

    def status(self, position_id: str) -> PositionStatus:
        position = self.positions.get(position_id)
        if position is None or not position.is_active:
            return PositionStatus(
                in_the_money=False, current_price=0, intrinsic_value=0, stop_loss_ok=False
            )

        intrinsic, price = self.valuation.current_intrinsic_value(position.option_id)
        return PositionStatus(
            in_the_money=intrinsic > self.valuation.settings.min_intrinsic_value,
            current_price=price,
            intrinsic_value=intrinsic,
            stop_loss_ok=self.stop_loss.predicate(position.stop_loss_id),
        )

    def get_position(self, position_id: str) -> ProtectedOption | None:
        return self.positions.get(position_id)

    def get_user_positions(self, account: str) -> list[str]:
        return list(self.user_positions.get(account, []))

    def is_executed(self, position_id: str) -> bool:
        return position_id in self.executed

    def committed(self, asset: str) -> int:
        """Collateral of `asset` still backing active positions."""
        return sum(
            position.making_amount
            for position in self.positions.values()
            if position.is_active and position.maker_asset == asset
        )

    def emergency_recover(self, caller: str, asset: str, amount: int) -> None:
        """
        Owner-only withdrawal of tokens stuck in the manager's account.

        Only the surplus over collateral committed to active positions can be
        recovered, so every active position stays cancellable.

        Raises:
            UnauthorizedCallerError: Caller is not the owner
            InsufficientBalanceError: Amount exceeds the uncommitted balance
        """
        self.access.require_owner(caller)

        with self._guard, self._transaction():
            recoverable = self.vault.held(asset) - self.committed(asset)
            if amount > recoverable:
                raise InsufficientBalanceError(
                    f"Cannot recover {amount} {asset}: only {max(recoverable, 0)} "
                    f"is not committed to active positions"
                )

            self.vault.release(asset, self.owner, amount)

            logger.warning(f"Emergency recovery: {amount} {asset} to {self.owner}")
            self.events.emit(
                EventType.EMERGENCY_RECOVERY,
                COMPONENT,
                self.clock.now(),
                asset=asset,
                amount=amount,
                recipient=self.owner,
            )

    def _transaction(self):
        return atomic(self.ledger, self.valuation, self.stop_loss, self, self.events)

    def snapshot(self) -> tuple:
        return (
            {pid: astuple(p) for pid, p in self.positions.items()},
            {account: list(ids) for account, ids in self.user_positions.items()},
            set(self.executed),
            self._nonce,
        )

    def restore(self, state: tuple) -> None:
        positions, user_positions, executed, nonce = state
        self.positions = {pid: ProtectedOption(*values) for pid, values in positions.items()}
        self.user_positions = {account: list(ids) for account, ids in user_positions.items()}
        self.executed = set(executed)
        self._nonce = nonce

    def __repr__(self) -> str:
        active = sum(1 for p in self.positions.values() if p.is_active)
        return f"ProtectedOptionManager(positions={len(self.positions)}, active={active})"
