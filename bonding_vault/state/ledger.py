"""
Vault ledger: share supply, per-holder share balances and recorded reserve.

The ledger is the only writer of vault totals. It performs O(1) bookkeeping per
call and does not rescan balances; the sum-of-balances invariant is checked by
`core.invariants.check_all` when a caller asks for it.
"""

from typing import Dict

from ..core.errors import InsufficientBalanceError
from .balances import Amount, HolderId, ShareBalances


def _require_amount(name: str, value: Amount) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    if value < 0:
        raise ValueError(f"{name} must be non-negative: {value}")


class VaultLedger:
    """Totals and holder balances of one vault."""

    def __init__(self, total_assets: Amount = 0):
        _require_amount("total_assets", total_assets)
        self._balances = ShareBalances()
        self._total_shares: Amount = 0
        self._total_assets: Amount = total_assets

    @property
    def total_shares(self) -> Amount:
        return self._total_shares

    @property
    def total_assets(self) -> Amount:
        return self._total_assets

    def balance_of(self, holder: HolderId) -> Amount:
        return self._balances.get(holder)

    def balances(self) -> Dict[HolderId, Amount]:
        """Snapshot of all non-zero holder balances."""
        return self._balances.as_dict()

    def mint(self, holder: HolderId, shares: Amount) -> None:
        _require_amount("shares", shares)
        self._balances.add(holder, shares)
        self._total_shares += shares

    def burn(self, holder: HolderId, shares: Amount) -> None:
        """
        Burn `shares` from `holder`.

        Raises:
            InsufficientBalanceError: If the holder owns fewer than `shares`
        """
        _require_amount("shares", shares)
        available = self._balances.get(holder)
        if shares > available:
            raise InsufficientBalanceError(holder, shares, available)
        self._balances.subtract(holder, shares)
        self._total_shares -= shares

    def record_assets_in(self, amount: Amount) -> None:
        _require_amount("amount", amount)
        self._total_assets += amount

    def record_assets_out(self, amount: Amount) -> None:
        _require_amount("amount", amount)
        if amount > self._total_assets:
            raise ValueError(
                f"cannot record {amount} assets out of {self._total_assets} held"
            )
        self._total_assets -= amount

    def copy(self) -> "VaultLedger":
        """Independent copy for staging changes that commit all-or-nothing."""
        out = VaultLedger(self._total_assets)
        out._balances = self._balances.copy()
        out._total_shares = self._total_shares
        return out

    def __repr__(self) -> str:
        return (
            f"VaultLedger(total_shares={self._total_shares}, "
            f"total_assets={self._total_assets}, holders={len(self._balances)})"
        )
