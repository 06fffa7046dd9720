"""
Option Valuation Engine

Stores per-option configuration and values options against a live price feed:
intrinsic value, in-the-money status and the two amount conversions used when
an option is settled (collateral <-> payment).

Conversion formulas (integer math, multiply before dividing):
    in the money:      making = taking * intrinsic * multiplier / (strike * 100)
                       taking = making * strike * 100 / (intrinsic * multiplier)
    out of the money:  making = taking * premium / 1e18
                       taking = making * 1e18 / premium

Usage:
    >>> engine = OptionValuationEngine(AccessControl(owner), clock)
    >>> engine.set_config(owner, option_id, is_call=True, strike_price=2100 * 10**8,
    ...                   premium=50 * 10**18, expiration=clock.now() + 3600,
    ...                   oracle=oracle, multiplier=1)
    >>> engine.is_in_the_money(option_id)
    False
"""

from typing import Any

from loguru import logger

from protected_options.config.settings import ProtocolSettings
from protected_options.core.access import AccessControl
from protected_options.core.clock import Clock
from protected_options.core.errors import (
    InvalidOptionConfigError,
    OptionExpiredError,
    OptionNotActiveError,
)
from protected_options.core.events import EventLog, EventType
from protected_options.core.identifiers import is_null
from protected_options.oracle.feed import fetch_price
from protected_options.valuation.models import PREMIUM_UNIT, OptionConfig

logger = logger.bind(component="OptionValuationEngine")

COMPONENT = "OptionValuationEngine"


class OptionValuationEngine:
    """
    Valuation of configured options against their oracles.

    Attributes:
        access: Owner/authorized-caller allow-list gating mutations and conversions
        clock: Shared execution clock
        events: Event sink
        settings: Protocol settings (staleness, in-the-money floor, multiplier bounds)
        configs: option_id -> OptionConfig
    """

    def __init__(
        self,
        access: AccessControl,
        clock: Clock,
        events: EventLog | None = None,
        settings: ProtocolSettings | None = None,
    ):
        self.access = access
        self.clock = clock
        self.events = events if events is not None else EventLog()
        self.settings = settings or ProtocolSettings()
        self.configs: dict[str, OptionConfig] = {}

    # Administration

    def set_authorized_caller(self, caller: str, account: str, allowed: bool) -> None:
        self.access.set_authorized_caller(caller, account, allowed)

    def is_authorized(self, account: str) -> bool:
        return self.access.is_authorized(account)

    def set_config(
        self,
        caller: str,
        option_id: str,
        *,
        is_call: bool,
        strike_price: int,
        premium: int,
        expiration: int,
        oracle: Any,
        multiplier: int,
    ) -> OptionConfig:
        """
        Create or overwrite an option configuration (authorized only).

        Raises:
            UnauthorizedCallerError: If caller is not authorized
            InvalidOptionConfigError: If strike, multiplier, expiration or oracle is invalid
        """
        self.access.require_authorized(caller)

        now = self.clock.now()
        if strike_price <= 0:
            raise InvalidOptionConfigError(f"Strike price must be positive, got {strike_price}")
        if premium < 0:
            raise InvalidOptionConfigError(f"Premium must be non-negative, got {premium}")
        if not 1 <= multiplier <= self.settings.max_multiplier:
            raise InvalidOptionConfigError(
                f"Multiplier must be in [1, {self.settings.max_multiplier}], got {multiplier}"
            )
        if expiration <= now:
            raise InvalidOptionConfigError(
                f"Expiration must be in the future: {expiration} <= {now}"
            )
        if oracle is None or is_null(oracle):
            raise InvalidOptionConfigError("Oracle reference is null")

        config = OptionConfig(
            is_call=is_call,
            strike_price=strike_price,
            premium=premium,
            expiration=expiration,
            oracle=oracle,
            multiplier=multiplier,
            is_active=True,
        )
        self.configs[option_id] = config

        logger.info(f"Option {option_id[:10]}... configured: {config}")
        self.events.emit(
            EventType.OPTION_PARAMS_UPDATED,
            COMPONENT,
            now,
            option_id=option_id,
            is_call=is_call,
            strike_price=strike_price,
            premium=premium,
            expiration=expiration,
            multiplier=multiplier,
        )
        return config

    def deactivate(self, caller: str, option_id: str) -> None:
        """Soft-delete an option (authorized only, idempotent)."""
        self.access.require_authorized(caller)

        config = self.configs.get(option_id)
        if config is None or not config.is_active:
            return

        config.is_active = False
        logger.info(f"Option {option_id[:10]}... deactivated")
        self.events.emit(
            EventType.OPTION_DEACTIVATED, COMPONENT, self.clock.now(), option_id=option_id
        )

    def get_config(self, option_id: str) -> OptionConfig | None:
        return self.configs.get(option_id)

    # Valuation

    def current_intrinsic_value(self, option_id: str) -> tuple[int, int]:
        """
        Intrinsic value at the current oracle price.

        Returns:
            Tuple of (intrinsic_value, current_price), both 8-decimal

        Raises:
            OptionNotActiveError: If the option is unknown or inactive
            StalePriceError: If the price is older than the valuation tolerance
            InvalidPriceError: If the price is not positive
        """
        config = self._active_config(option_id)
        price = fetch_price(config.oracle, self.clock.now(), self.settings.valuation_max_price_age)
        return config.intrinsic_value(price), price

    def is_in_the_money(self, option_id: str) -> bool:
        """True iff intrinsic value strictly exceeds the minimum-value floor."""
        intrinsic, _ = self.current_intrinsic_value(option_id)
        return intrinsic > self.settings.min_intrinsic_value

    def making_amount_for(self, caller: str, option_id: str, taking_amount: int) -> int:
        """
        Collateral paid out for a given payment (authorized only).

        Raises:
            UnauthorizedCallerError: If caller is not authorized
            OptionNotActiveError: If the option is inactive
            OptionExpiredError: If the option has expired
        """
        self.access.require_authorized(caller)
        config = self._usable_config(option_id)

        intrinsic, _ = self.current_intrinsic_value(option_id)
        if intrinsic > self.settings.min_intrinsic_value:
            return (taking_amount * intrinsic * config.multiplier) // (config.strike_price * 100)

        return (taking_amount * config.premium) // PREMIUM_UNIT

    def taking_amount_for(self, caller: str, option_id: str, making_amount: int) -> int:
        """
        Payment required for a given collateral amount (authorized only).

        Inverse of making_amount_for, with the same truncating division.
        """
        self.access.require_authorized(caller)
        config = self._usable_config(option_id)

        intrinsic, _ = self.current_intrinsic_value(option_id)
        if intrinsic > self.settings.min_intrinsic_value:
            return (making_amount * config.strike_price * 100) // (intrinsic * config.multiplier)

        if config.premium == 0:
            raise InvalidOptionConfigError(
                f"Option {option_id[:10]}... has zero premium; out-of-the-money "
                f"taking amount is undefined"
            )
        return (making_amount * PREMIUM_UNIT) // config.premium

    # Internals

    def _active_config(self, option_id: str) -> OptionConfig:
        config = self.configs.get(option_id)
        if config is None or not config.is_active:
            raise OptionNotActiveError(f"Option {option_id[:10]}... is not active")
        return config

    def _usable_config(self, option_id: str) -> OptionConfig:
        config = self._active_config(option_id)
        if config.is_expired(self.clock.now()):
            raise OptionExpiredError(
                f"Option {option_id[:10]}... expired at {config.expiration}"
            )
        return config

    def snapshot(self) -> dict[str, tuple]:
        return {
            option_id: (
                c.is_call,
                c.strike_price,
                c.premium,
                c.expiration,
                c.oracle,
                c.multiplier,
                c.is_active,
            )
            for option_id, c in self.configs.items()
        }

    def restore(self, state: dict[str, tuple]) -> None:
        self.configs = {option_id: OptionConfig(*values) for option_id, values in state.items()}

    def __repr__(self) -> str:
        active = sum(1 for c in self.configs.values() if c.is_active)
        return f"OptionValuationEngine(options={len(self.configs)}, active={active})"
