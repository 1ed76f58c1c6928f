"""
State management for the bonding vault
"""

from .balances import Amount, HolderId, ShareBalances
from .ledger import VaultLedger

__all__ = [
    "Amount",
    "HolderId",
    "ShareBalances",
    "VaultLedger",
]
