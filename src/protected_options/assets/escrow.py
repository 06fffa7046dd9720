"""
Escrow Vault

Collateral custody for the position orchestrator. The vault's balances live in
the ledger under the holder's account; deposit() and release() are the only
operations that move them. hold() marks a position as mid-settlement so a
reentrant call cannot spend the same escrow twice.
"""

from collections.abc import Iterator
from contextlib import contextmanager

from loguru import logger

from protected_options.assets.ledger import TokenLedger, Transfer
from protected_options.core.errors import ReentrantCallError

logger = logger.bind(component="EscrowVault")


class EscrowVault:
    """
    Ledger-backed escrow owned by a single holder.

    Attributes:
        ledger: Token ledger holding the balances
        holder: Account that owns escrowed funds (the orchestrator)
        locked: Positions currently being settled
    """

    def __init__(self, ledger: TokenLedger, holder: str):
        self.ledger = ledger
        self.holder = holder
        self.locked: set[str] = set()

    def deposit(self, asset: str, depositor: str, amount: int) -> Transfer:
        """Pull amount of asset from depositor into escrow (needs prior approval)."""
        moved = self.ledger.transfer_from(asset, self.holder, depositor, self.holder, amount)
        logger.info(f"Escrowed {amount} {asset} from {depositor}")
        return moved

    def release(self, asset: str, recipient: str, amount: int) -> Transfer:
        """Push amount of asset out of escrow."""
        moved = self.ledger.transfer(asset, self.holder, recipient, amount)
        logger.info(f"Released {amount} {asset} to {recipient}")
        return moved

    def held(self, asset: str) -> int:
        return self.ledger.balance_of(asset, self.holder)

    @contextmanager
    def hold(self, position_id: str) -> Iterator[None]:
        """Per-position mutual exclusion marker."""
        if position_id in self.locked:
            raise ReentrantCallError(f"Position {position_id[:10]}... is already being settled")
        self.locked.add(position_id)
        try:
            yield
        finally:
            self.locked.discard(position_id)

    def __repr__(self) -> str:
        return f"EscrowVault(holder={self.holder}, locked={len(self.locked)})"
