"""
Share balance tracking for a single vault share token.

Implements ShareBalances[HolderId] -> Amount
"""

from typing import Dict


# Type aliases
HolderId = str  # Opaque account identifier supplied by the host
Amount = int  # Non-negative integer (arbitrary precision)


class ShareBalances:
    """
    Sparse table mapping holder -> share amount.

    Zero balances are removed so the table only lists current holders. Callers
    that need a stable order (snapshots, reports) sort keys themselves.
    """

    def __init__(self):
        self._balances: Dict[HolderId, Amount] = {}

    def get(self, holder: HolderId) -> Amount:
        """Get the balance of `holder`. Returns 0 if not found."""
        return self._balances.get(holder, 0)

    def set(self, holder: HolderId, amount: Amount) -> None:
        """
        Set the balance of `holder`.

        Raises:
            ValueError: If amount is negative
        """
        if amount < 0:
            raise ValueError(f"Balance cannot be negative: {amount}")
        if amount == 0:
            self._balances.pop(holder, None)
        else:
            self._balances[holder] = amount

    def add(self, holder: HolderId, delta: Amount) -> None:
        """
        Add delta to a balance (negative delta subtracts).

        Raises:
            ValueError: If resulting balance would be negative
        """
        current = self.get(holder)
        new_balance = current + delta
        if new_balance < 0:
            raise ValueError(
                f"Insufficient balance: {current} + {delta} = {new_balance} < 0"
            )
        self.set(holder, new_balance)

    def subtract(self, holder: HolderId, delta: Amount) -> None:
        if delta < 0:
            raise ValueError(f"Delta must be non-negative: {delta}")
        self.add(holder, -delta)

    def as_dict(self) -> Dict[HolderId, Amount]:
        return dict(self._balances)

    def total(self) -> Amount:
        """Sum of all balances (linear scan; used by checks, not hot paths)."""
        return sum(self._balances.values())

    def copy(self) -> "ShareBalances":
        out = ShareBalances()
        out._balances = dict(self._balances)
        return out

    def verify_non_negative(self) -> bool:
        return all(amount >= 0 for amount in self._balances.values())

    def __len__(self) -> int:
        return len(self._balances)

    def __repr__(self) -> str:
        return f"ShareBalances({len(self._balances)} holders)"
