"""
Limit-Order Adapter

Stateless translation layer exposing valuation and stop-loss logic through the
external limit-order engine's plugin contract:

- get_making_amount / get_taking_amount: amount-getter callbacks
- protected_option_predicate, time_based_predicate, combined_predicate:
  boolean predicate callbacks

The adapter calls both engines under its own address, so it must be an
authorized caller on each (build_protocol() grants this).

The two amount getters are intentionally not symmetric: only the making side
applies the min-payoff floor and the remaining-amount cap.

Usage:
    >>> payload = adapter.encode_payload(option_id, stop_loss_id, 0, True)
    >>> adapter.protected_option_predicate(payload)
    False
"""

from loguru import logger

from protected_options.adapter.models import AdapterStatus, EvaluationResult, LimitOrder
from protected_options.adapter.payload import (
    ProtectedOptionData,
    decode_payload,
    encode_payload,
)
from protected_options.core.clock import Clock
from protected_options.core.errors import InsufficientPayoffError, StopLossTriggeredError
from protected_options.stop_loss.engine import StopLossEngine
from protected_options.valuation.engine import OptionValuationEngine

logger = logger.bind(component="LimitOrderAdapter")


class LimitOrderAdapter:
    """
    Plugin callbacks for an external limit-order engine.

    Attributes:
        address: Identity used when calling the engines
        valuation: Option valuation engine
        stop_loss: Stop-loss engine
        clock: Shared execution clock
    """

    def __init__(
        self,
        address: str,
        valuation: OptionValuationEngine,
        stop_loss: StopLossEngine,
        clock: Clock,
    ):
        self.address = address
        self.valuation = valuation
        self.stop_loss = stop_loss
        self.clock = clock

    # Amount getters

    def get_making_amount(
        self,
        order: LimitOrder,
        extension: bytes,
        order_hash: str,
        taker: str,
        taking_amount: int,
        remaining_making_amount: int,
        extra_data: bytes,
    ) -> int:
        """
        Collateral the maker gives for taking_amount.

        Raises:
            InvalidExtraDataError: If extra_data cannot be decoded
            StopLossTriggeredError: If the payload enforces a failing stop-loss
            InsufficientPayoffError: If the result is below the payload's min payoff
        """
        data = decode_payload(extra_data)
        self._enforce_stop_loss(data)

        making_amount = self.valuation.making_amount_for(
            self.address, data.option_id, taking_amount
        )
        if making_amount < data.min_payoff:
            raise InsufficientPayoffError(
                f"Payoff {making_amount} below minimum {data.min_payoff}"
            )

        making_amount = min(making_amount, remaining_making_amount)
        logger.debug(
            f"Making amount for order {order_hash[:10]}... (taker {taker}): "
            f"{taking_amount} -> {making_amount}"
        )
        return making_amount

    def get_taking_amount(
        self,
        order: LimitOrder,
        extension: bytes,
        order_hash: str,
        taker: str,
        making_amount: int,
        remaining_making_amount: int,
        extra_data: bytes,
    ) -> int:
        """
        Payment the taker gives for making_amount.

        No min-payoff floor and no remaining-amount cap on this side.
        """
        data = decode_payload(extra_data)
        self._enforce_stop_loss(data)

        taking_amount = self.valuation.taking_amount_for(
            self.address, data.option_id, making_amount
        )
        logger.debug(
            f"Taking amount for order {order_hash[:10]}... (taker {taker}): "
            f"{making_amount} -> {taking_amount}"
        )
        return taking_amount

    # Predicates

    def protected_option_predicate(self, extra_data: bytes) -> bool:
        """
        Can the referenced option be filled right now?

        Never raises: any failure while evaluating (bad payload, stale or
        invalid price, inactive config) yields False.
        """
        result = self._evaluate(extra_data)
        if not result.ok:
            logger.debug(f"Predicate evaluated to False after failure: {result.error}")
        return bool(result)

    def time_based_predicate(self, expiry: int) -> bool:
        return self.clock.now() < expiry

    def combined_predicate(self, option_id: str, stop_loss_id: str, expiry: int) -> bool:
        """Time, then in-the-money, then stop-loss; failures propagate."""
        return (
            self.time_based_predicate(expiry)
            and self.valuation.is_in_the_money(option_id)
            and self.stop_loss.predicate(stop_loss_id)
        )

    # Payload helpers

    def encode_payload(
        self, option_id: str, stop_loss_id: str, min_payoff: int, enforce_stop_loss: bool
    ) -> bytes:
        return encode_payload(option_id, stop_loss_id, min_payoff, enforce_stop_loss)

    def decode_payload(self, extra_data: bytes) -> ProtectedOptionData:
        return decode_payload(extra_data)

    def get_protected_option_status(self, option_id: str, stop_loss_id: str) -> AdapterStatus:
        """
        Live status of an option/stop-loss pair.

        can_execute = in the money AND stop-loss ok. Unlike the manager's
        can_execute(), expiry is not checked.
        """
        intrinsic, price = self.valuation.current_intrinsic_value(option_id)
        in_the_money = intrinsic > self.valuation.settings.min_intrinsic_value
        stop_loss_ok = self.stop_loss.predicate(stop_loss_id)
        return AdapterStatus(
            can_execute=in_the_money and stop_loss_ok,
            current_price=price,
            intrinsic_value=intrinsic,
            stop_loss_ok=stop_loss_ok,
        )

    # Internals

    def _enforce_stop_loss(self, data: ProtectedOptionData) -> None:
        if data.enforce_stop_loss and not self.stop_loss.predicate(data.stop_loss_id):
            raise StopLossTriggeredError(
                f"Stop-loss triggered for {data.stop_loss_id[:10]}..."
            )

    def _evaluate(self, extra_data: bytes) -> EvaluationResult:
        try:
            data = decode_payload(extra_data)
            if not self.valuation.is_in_the_money(data.option_id):
                return EvaluationResult.success(False)
            if data.enforce_stop_loss:
                return EvaluationResult.success(self.stop_loss.predicate(data.stop_loss_id))
            return EvaluationResult.success(True)
        except Exception as e:
            return EvaluationResult.failure(e)

    def __repr__(self) -> str:
        return f"LimitOrderAdapter(address={self.address})"
