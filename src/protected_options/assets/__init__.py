"""
Assets Package

Token ledger and the orchestrator's escrow vault.
"""

from protected_options.assets.escrow import EscrowVault
from protected_options.assets.ledger import TokenLedger, Transfer

__all__ = ["EscrowVault", "TokenLedger", "Transfer"]
