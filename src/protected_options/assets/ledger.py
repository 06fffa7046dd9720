"""
Token Ledger

Multi-asset balance and allowance book with ERC-20 semantics: holders approve
spenders, spenders pull with transfer_from, and every movement is checked
against balance and allowance before anything changes.

Transfer hooks run after each successful movement. They model token callbacks
and are the path by which a transfer can re-enter the protocol.

Usage:
    >>> ledger = TokenLedger()
    >>> ledger.mint("WETH", "0xalice", 10 * 10**18)
    >>> ledger.approve("WETH", "0xalice", "0xmanager", 10 * 10**18)
    >>> ledger.transfer_from("WETH", "0xmanager", "0xalice", "0xmanager", 10**18)
"""

from collections.abc import Callable
from dataclasses import dataclass

from loguru import logger

from protected_options.core.errors import (
    InsufficientAllowanceError,
    InsufficientBalanceError,
    InvalidTransferError,
)
from protected_options.core.identifiers import is_null

logger = logger.bind(component="TokenLedger")


@dataclass(slots=True, frozen=True)
class Transfer:
    """A completed ledger movement."""

    asset: str
    sender: str
    recipient: str
    amount: int


TransferHook = Callable[[Transfer], None]


class TokenLedger:
    """
    Balances and allowances for every asset.

    Attributes:
        balances: (asset, account) -> amount
        allowances: (asset, owner, spender) -> amount
    """

    def __init__(self):
        self.balances: dict[tuple[str, str], int] = {}
        self.allowances: dict[tuple[str, str, str], int] = {}
        self.supply: dict[str, int] = {}
        self._hooks: list[TransferHook] = []

    def balance_of(self, asset: str, account: str) -> int:
        return self.balances.get((asset, account), 0)

    def allowance(self, asset: str, owner: str, spender: str) -> int:
        return self.allowances.get((asset, owner, spender), 0)

    def total_supply(self, asset: str) -> int:
        return self.supply.get(asset, 0)

    def mint(self, asset: str, to: str, amount: int) -> None:
        if is_null(asset) or is_null(to):
            raise InvalidTransferError("Cannot mint a null asset or to a null account")
        if amount <= 0:
            raise InvalidTransferError(f"Mint amount must be positive, got {amount}")

        self.balances[(asset, to)] = self.balance_of(asset, to) + amount
        self.supply[asset] = self.total_supply(asset) + amount
        logger.debug(f"Minted {amount} {asset} to {to}")

    def approve(self, asset: str, owner: str, spender: str, amount: int) -> None:
        if is_null(spender):
            raise InvalidTransferError("Cannot approve a null spender")
        if amount < 0:
            raise InvalidTransferError(f"Allowance must be non-negative, got {amount}")
        self.allowances[(asset, owner, spender)] = amount

    def transfer(self, asset: str, sender: str, recipient: str, amount: int) -> Transfer:
        """Move amount of asset from sender to recipient."""
        self._check_parties(asset, sender, recipient, amount)

        balance = self.balance_of(asset, sender)
        if balance < amount:
            raise InsufficientBalanceError(
                f"{sender} holds {balance} {asset}, needs {amount}"
            )

        self.balances[(asset, sender)] = balance - amount
        self.balances[(asset, recipient)] = self.balance_of(asset, recipient) + amount

        moved = Transfer(asset=asset, sender=sender, recipient=recipient, amount=amount)
        logger.debug(f"Transfer {amount} {asset}: {sender} -> {recipient}")

        for hook in self._hooks:
            hook(moved)

        return moved

    def transfer_from(
        self, asset: str, spender: str, owner: str, recipient: str, amount: int
    ) -> Transfer:
        """Spender moves owner's asset to recipient, consuming allowance."""
        self._check_parties(asset, owner, recipient, amount)

        allowed = self.allowance(asset, owner, spender)
        if allowed < amount:
            raise InsufficientAllowanceError(
                f"{spender} may move {allowed} {asset} of {owner}, needs {amount}; "
                f"approve {asset} first"
            )

        balance = self.balance_of(asset, owner)
        if balance < amount:
            raise InsufficientBalanceError(
                f"{owner} holds {balance} {asset}, needs {amount}"
            )

        self.allowances[(asset, owner, spender)] = allowed - amount
        return self.transfer(asset, owner, recipient, amount)

    def add_transfer_hook(self, hook: TransferHook) -> None:
        self._hooks.append(hook)

    def remove_transfer_hook(self, hook: TransferHook) -> None:
        self._hooks.remove(hook)

    def _check_parties(self, asset: str, sender: str, recipient: str, amount: int) -> None:
        if is_null(asset):
            raise InvalidTransferError("Asset reference is null")
        if is_null(sender) or is_null(recipient):
            raise InvalidTransferError("Transfer party is null")
        if amount < 0:
            raise InvalidTransferError(f"Transfer amount must be non-negative, got {amount}")

    def snapshot(self) -> tuple[dict, dict, dict]:
        return dict(self.balances), dict(self.allowances), dict(self.supply)

    def restore(self, state: tuple[dict, dict, dict]) -> None:
        balances, allowances, supply = state
        self.balances = dict(balances)
        self.allowances = dict(allowances)
        self.supply = dict(supply)

    def __repr__(self) -> str:
        return f"TokenLedger(assets={len(self.supply)}, accounts={len(self.balances)})"
