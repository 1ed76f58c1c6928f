"""
Reserve asset collaborator.

The vault never holds reserve balances itself; it asks a `ReserveAsset` to
move units in and out of its custody address. Any host token (an on-chain
ERC-20 adapter, a bank ledger, a test double) can implement the protocol.
"""

from __future__ import annotations

import threading
from typing import Dict, Protocol, runtime_checkable

from ..state.balances import Amount, HolderId


@runtime_checkable
class ReserveAsset(Protocol):
    """Fungible asset the vault custodies. Transfers report success as bool."""

    def transfer_in(self, sender: HolderId, amount: Amount) -> bool:
        """Move `amount` from `sender` into vault custody."""
        ...

    def transfer_out(self, recipient: HolderId, amount: Amount) -> bool:
        """Move `amount` from vault custody to `recipient`."""
        ...

    def balance_of(self, holder: HolderId) -> Amount:
        ...


class InMemoryReserveAsset:
    """
    Reference reserve asset backed by a dict.

    `custody` is the account the vault's transfers settle against. `transfer`
    moves units between arbitrary accounts, which is how a donation straight to
    the vault is modelled.
    """

    def __init__(self, custody: HolderId = "vault", *, name: str = "Reserve", symbol: str = "RSV"):
        self.custody = custody
        self.name = name
        self.symbol = symbol
        self._balances: Dict[HolderId, Amount] = {}
        self._lock = threading.Lock()

    def balance_of(self, holder: HolderId) -> Amount:
        with self._lock:
            return self._balances.get(holder, 0)

    def total_supply(self) -> Amount:
        with self._lock:
            return sum(self._balances.values())

    def mint(self, holder: HolderId, amount: Amount) -> None:
        if amount < 0:
            raise ValueError(f"amount must be non-negative: {amount}")
        with self._lock:
            self._balances[holder] = self._balances.get(holder, 0) + amount

    def transfer(self, sender: HolderId, recipient: HolderId, amount: Amount) -> bool:
        if amount < 0:
            raise ValueError(f"amount must be non-negative: {amount}")
        with self._lock:
            available = self._balances.get(sender, 0)
            if amount > available:
                return False
            self._balances[sender] = available - amount
            self._balances[recipient] = self._balances.get(recipient, 0) + amount
            return True

    def transfer_in(self, sender: HolderId, amount: Amount) -> bool:
        return self.transfer(sender, self.custody, amount)

    def transfer_out(self, recipient: HolderId, amount: Amount) -> bool:
        return self.transfer(self.custody, recipient, amount)

    def __repr__(self) -> str:
        return f"InMemoryReserveAsset(custody={self.custody!r}, accounts={len(self._balances)})"
