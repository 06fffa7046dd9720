"""
Protected Options Protocol

Option-like payoffs (calls/puts) with an automated stop-loss, settled through a
limit-order engine's extension callbacks.

Components, leaf-first:
- oracle: price feed interface and staleness contract
- valuation: option configs, intrinsic value and amount conversions
- stop_loss: stop-loss configs and trigger predicates
- orchestration: position lifecycle and collateral escrow
- adapter: amount-getter and predicate callbacks for the order engine

Usage:
    >>> protocol = build_protocol(owner="0xdeployer", clock=ManualClock())
    >>> position_id = protocol.manager.create("0xmaker", ...)
"""

from dataclasses import dataclass

from loguru import logger

from protected_options.adapter import LimitOrderAdapter
from protected_options.assets import EscrowVault, TokenLedger
from protected_options.config import ProtocolSettings
from protected_options.core import AccessControl, Clock, EventLog, SystemClock, derive_id
from protected_options.orchestration import ProtectedOptionManager
from protected_options.stop_loss import StopLossEngine
from protected_options.valuation import OptionValuationEngine

__version__ = "0.1.0"

logger = logger.bind(component="Protocol")


@dataclass(slots=True)
class ProtocolDeployment:
    """The four deployed components plus their shared infrastructure."""

    owner: str
    clock: Clock
    settings: ProtocolSettings
    events: EventLog
    ledger: TokenLedger
    valuation: OptionValuationEngine
    stop_loss: StopLossEngine
    manager: ProtectedOptionManager
    adapter: LimitOrderAdapter

    @property
    def escrow(self) -> EscrowVault:
        return self.manager.vault


def build_protocol(
    owner: str,
    clock: Clock | None = None,
    settings: ProtocolSettings | None = None,
    ledger: TokenLedger | None = None,
) -> ProtocolDeployment:
    """
    Deploy and wire the protocol.

    Each engine gets its own owner-held allow-list; the manager and adapter
    are then authorized on both.

    Args:
        owner: Deploying account (owner of both engines and the manager)
        clock: Execution clock (SystemClock if omitted)
        settings: Protocol settings (defaults if omitted)
        ledger: Existing token ledger to settle against (new one if omitted)
    """
    clock = clock or SystemClock()
    settings = settings or ProtocolSettings()
    ledger = ledger if ledger is not None else TokenLedger()
    events = EventLog()

    valuation = OptionValuationEngine(
        AccessControl(owner, events, clock, name="OptionValuationEngine"),
        clock,
        events,
        settings,
    )
    stop_loss = StopLossEngine(
        AccessControl(owner, events, clock, name="StopLossEngine"),
        clock,
        events,
        settings,
    )

    manager_address = derive_id(owner, "ProtectedOptionManager")[:42]
    adapter_address = derive_id(owner, "LimitOrderAdapter")[:42]

    manager = ProtectedOptionManager(
        manager_address,
        valuation,
        stop_loss,
        ledger,
        AccessControl(owner, events, clock, name="ProtectedOptionManager"),
        clock,
        events,
        settings,
    )
    adapter = LimitOrderAdapter(adapter_address, valuation, stop_loss, clock)

    for engine in (valuation, stop_loss):
        engine.set_authorized_caller(owner, manager.address, True)
        engine.set_authorized_caller(owner, adapter.address, True)

    logger.info(f"Protocol deployed: manager={manager.address}, adapter={adapter.address}")
    return ProtocolDeployment(
        owner=owner,
        clock=clock,
        settings=settings,
        events=events,
        ledger=ledger,
        valuation=valuation,
        stop_loss=stop_loss,
        manager=manager,
        adapter=adapter,
    )


__all__ = ["ProtocolDeployment", "build_protocol", "__version__"]
