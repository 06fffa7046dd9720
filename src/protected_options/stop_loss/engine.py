"""
Stop-Loss Evaluation Engine

Evaluates whether a position's stop-loss condition holds against a live price.

Two deliberately different forms exist and must not be interchanged:

- check_stop_loss() / is_triggered(): strict monitoring form, authorized only.
  Inactive configs raise; the threshold itself counts as triggered.
- predicate(): permissive execution gate, public. Inactive configs always pass
  (no oracle read at all); active configs pass only when the price is strictly
  on the safe side of the threshold.

Both read prices with the stop-loss staleness tolerance (300s by default) and
propagate oracle failures.

Usage:
    >>> engine = StopLossEngine(AccessControl(owner), clock)
    >>> engine.configure(owner, stop_loss_id, stop_loss_price=1950 * 10**8,
    ...                  max_loss=1000, time_window=3600, oracle=oracle,
    ...                  is_lower_bound=True)
    >>> engine.predicate(stop_loss_id)
    True
"""

from collections.abc import Iterable
from typing import Any

from loguru import logger

from protected_options.config.settings import ProtocolSettings
from protected_options.core.access import AccessControl
from protected_options.core.clock import Clock
from protected_options.core.errors import (
    InvalidConfigurationError,
    InvalidMaxLossError,
    InvalidTimeWindowError,
    OptionNotActiveError,
)
from protected_options.core.events import EventLog, EventType
from protected_options.core.identifiers import is_null
from protected_options.oracle.feed import fetch_price, read_price_info
from protected_options.stop_loss.models import BASIS_POINTS, StopLossCheck, StopLossConfig

logger = logger.bind(component="StopLossEngine")

COMPONENT = "StopLossEngine"


class StopLossEngine:
    """
    Stop-loss configuration store and trigger evaluation.

    Attributes:
        access: Owner/authorized-caller allow-list
        clock: Shared execution clock
        events: Event sink
        settings: Protocol settings (staleness, max loss bound, min time window)
        configs: stop_loss_id -> StopLossConfig
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
        self.configs: dict[str, StopLossConfig] = {}

    def set_authorized_caller(self, caller: str, account: str, allowed: bool) -> None:
        self.access.set_authorized_caller(caller, account, allowed)

    def is_authorized(self, account: str) -> bool:
        return self.access.is_authorized(account)

    def configure(
        self,
        caller: str,
        stop_loss_id: str,
        *,
        stop_loss_price: int,
        max_loss: int,
        time_window: int,
        oracle: Any,
        is_lower_bound: bool,
    ) -> StopLossConfig:
        """
        Create or overwrite a stop-loss configuration (authorized only).

        Raises:
            UnauthorizedCallerError: If caller is not authorized
            InvalidConfigurationError: If price is not positive or oracle is null
            InvalidMaxLossError: If max_loss is outside 1..9000 basis points
            InvalidTimeWindowError: If time_window is below the minimum
        """
        self.access.require_authorized(caller)

        if stop_loss_price <= 0:
            raise InvalidConfigurationError(
                f"Stop-loss price must be positive, got {stop_loss_price}"
            )
        if not 0 < max_loss <= self.settings.max_loss_bps_limit:
            raise InvalidMaxLossError(
                f"Max loss must be in (0, {self.settings.max_loss_bps_limit}] bps, got {max_loss}"
            )
        if time_window < self.settings.min_time_window:
            raise InvalidTimeWindowError(
                f"Time window must be >= {self.settings.min_time_window}s, got {time_window}"
            )
        if oracle is None or is_null(oracle):
            raise InvalidConfigurationError("Oracle reference is null")

        now = self.clock.now()
        config = StopLossConfig(
            stop_loss_price=stop_loss_price,
            max_loss=max_loss,
            time_window=time_window,
            oracle=oracle,
            is_active=True,
            is_lower_bound=is_lower_bound,
            created_at=now,
        )
        self.configs[stop_loss_id] = config

        logger.info(f"Stop-loss {stop_loss_id[:10]}... configured: {config}")
        self.events.emit(
            EventType.STOP_LOSS_CONFIGURED,
            COMPONENT,
            now,
            stop_loss_id=stop_loss_id,
            stop_loss_price=stop_loss_price,
            max_loss=max_loss,
            is_lower_bound=is_lower_bound,
        )
        return config

    def deactivate(self, caller: str, stop_loss_id: str) -> None:
        """Soft-delete a stop-loss (authorized only, idempotent)."""
        self.access.require_authorized(caller)

        config = self.configs.get(stop_loss_id)
        if config is None or not config.is_active:
            return

        config.is_active = False
        logger.info(f"Stop-loss {stop_loss_id[:10]}... deactivated")
        self.events.emit(
            EventType.STOP_LOSS_DEACTIVATED,
            COMPONENT,
            self.clock.now(),
            stop_loss_id=stop_loss_id,
        )

    def get_config(self, stop_loss_id: str) -> StopLossConfig | None:
        return self.configs.get(stop_loss_id)

    # Strict monitoring form

    def check_stop_loss(self, caller: str, stop_loss_id: str) -> StopLossCheck:
        """
        Strict trigger check (authorized only).

        Returns:
            StopLossCheck(is_triggered, current_price, threshold)

        Raises:
            OptionNotActiveError: If the config is unknown or inactive
            StalePriceError: If the price is older than the stop-loss tolerance
            InvalidPriceError: If the price is not positive
        """
        self.access.require_authorized(caller)
        config = self._active_config(stop_loss_id)

        now = self.clock.now()
        price = fetch_price(config.oracle, now, self.settings.stop_loss_max_price_age)
        triggered = config.is_breached(price)

        if triggered:
            logger.warning(
                f"Stop-loss TRIGGERED for {stop_loss_id[:10]}...: "
                f"price={price}, threshold={config.stop_loss_price}"
            )
            self.events.emit(
                EventType.STOP_LOSS_TRIGGERED,
                COMPONENT,
                now,
                stop_loss_id=stop_loss_id,
                current_price=price,
                threshold=config.stop_loss_price,
            )

        return StopLossCheck(
            is_triggered=triggered, current_price=price, threshold=config.stop_loss_price
        )

    def is_triggered(self, caller: str, stop_loss_id: str) -> bool:
        return self.check_stop_loss(caller, stop_loss_id).is_triggered

    # Permissive execution gate

    def predicate(self, stop_loss_id: str) -> bool:
        """
        Is it currently safe to proceed?

        Inactive (or unknown) configs impose no restriction and return True
        without touching the oracle.
        """
        config = self.configs.get(stop_loss_id)
        if config is None or not config.is_active:
            return True

        price = fetch_price(config.oracle, self.clock.now(), self.settings.stop_loss_max_price_age)
        return config.allows(price)

    def multi_predicate(self, stop_loss_ids: Iterable[str], require_all: bool) -> bool:
        """
        Combine predicates with short-circuit AND (require_all) or OR.

        An empty list passes.
        """
        ids = list(stop_loss_ids)
        if not ids:
            return True

        if require_all:
            return all(self.predicate(stop_loss_id) for stop_loss_id in ids)
        return any(self.predicate(stop_loss_id) for stop_loss_id in ids)

    # Derived values

    def dynamic_threshold(self, caller: str, stop_loss_id: str, entry_price: int) -> int:
        """
        Threshold implied by an entry price and the configured max loss.

        Lower bound: entry - entry * max_loss / 10000
        Upper bound: entry + entry * max_loss / 10000
        """
        self.access.require_authorized(caller)
        config = self._active_config(stop_loss_id)

        delta = (entry_price * config.max_loss) // BASIS_POINTS
        if config.is_lower_bound:
            return entry_price - delta
        return entry_price + delta

    def price_info(self, caller: str, stop_loss_id: str) -> tuple[int, int]:
        """
        Raw (price, age_seconds) for diagnostics; never enforces staleness.

        Raises:
            OptionNotActiveError: If no config exists for stop_loss_id
        """
        self.access.require_authorized(caller)
        config = self.configs.get(stop_loss_id)
        if config is None:
            raise OptionNotActiveError(f"Stop-loss {stop_loss_id[:10]}... is not configured")
        return read_price_info(config.oracle, self.clock.now())

    def _active_config(self, stop_loss_id: str) -> StopLossConfig:
        config = self.configs.get(stop_loss_id)
        if config is None or not config.is_active:
            raise OptionNotActiveError(f"Stop-loss {stop_loss_id[:10]}... is not active")
        return config

    def snapshot(self) -> dict[str, tuple]:
        return {
            stop_loss_id: (
                c.stop_loss_price,
                c.max_loss,
                c.time_window,
                c.oracle,
                c.is_active,
                c.is_lower_bound,
                c.created_at,
            )
            for stop_loss_id, c in self.configs.items()
        }

    def restore(self, state: dict[str, tuple]) -> None:
        self.configs = {
            stop_loss_id: StopLossConfig(*values) for stop_loss_id, values in state.items()
        }

    def __repr__(self) -> str:
        active = sum(1 for c in self.configs.values() if c.is_active)
        return f"StopLossEngine(configs={len(self.configs)}, active={active})"
