"""Invariant checkers for vault state.

Each function returns True when the invariant holds, and `check_all()` returns
the list of violated invariant IDs (empty = all pass).

The state-only invariants always run. The ledger invariants need data the
pure state does not carry (holder balances, reserve custody) and run only when
the caller supplies it.
"""

from __future__ import annotations

from typing import Callable, Mapping

from .curve_math import MAX_UINT256
from .fees import FEE_DENOMINATOR
from .types import MAX_TOTAL_ASSETS, VaultState


def inv_totals_non_negative(s: VaultState) -> bool:
    return s.total_shares >= 0 and s.total_assets >= 0


def inv_shares_backed(s: VaultState) -> bool:
    if s.total_shares == 0:
        return True
    return s.total_assets > 0


def inv_totals_in_range(s: VaultState) -> bool:
    return s.total_shares <= MAX_UINT256 and s.total_assets <= MAX_TOTAL_ASSETS


def inv_entry_fee_capped(s: VaultState) -> bool:
    return 0 <= s.fees.entry_fee_bps and s.fees.entry_fee_bps * 2 <= FEE_DENOMINATOR


def inv_exit_fee_capped(s: VaultState) -> bool:
    return 0 <= s.fees.exit_fee_bps and s.fees.exit_fee_bps * 2 <= FEE_DENOMINATOR


def inv_supply_matches_balances(s: VaultState, balances: Mapping[str, int]) -> bool:
    return sum(balances.values()) == s.total_shares


def inv_balances_positive(s: VaultState, balances: Mapping[str, int]) -> bool:
    # Zeroed holders are removed from the table.
    return all(v > 0 for v in balances.values())


def inv_custody_matches_assets(s: VaultState, custody: int) -> bool:
    return custody == s.total_assets


STATE_INVARIANTS: dict[str, Callable[[VaultState], bool]] = {
    "totals_non_negative": inv_totals_non_negative,
    "shares_backed": inv_shares_backed,
    "totals_in_range": inv_totals_in_range,
    "entry_fee_capped": inv_entry_fee_capped,
    "exit_fee_capped": inv_exit_fee_capped,
}

BALANCE_INVARIANTS: dict[str, Callable[[VaultState, Mapping[str, int]], bool]] = {
    "supply_matches_balances": inv_supply_matches_balances,
    "balances_positive": inv_balances_positive,
}

CUSTODY_INVARIANTS: dict[str, Callable[[VaultState, int], bool]] = {
    "custody_matches_assets": inv_custody_matches_assets,
}


def check_all(
    s: VaultState,
    *,
    balances: Mapping[str, int] | None = None,
    custody: int | None = None,
) -> list[str]:
    """Return the IDs of violated invariants, in registry order."""
    violations = [name for name, fn in STATE_INVARIANTS.items() if not fn(s)]
    if balances is not None:
        violations.extend(name for name, fn in BALANCE_INVARIANTS.items() if not fn(s, balances))
    if custody is not None:
        violations.extend(name for name, fn in CUSTODY_INVARIANTS.items() if not fn(s, custody))
    return violations
