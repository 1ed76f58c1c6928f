"""
Linear pricing curve: reserve function R(s) = s.

Every share is worth the same fraction of the reserve, so both conversions
are a single floor-rounded proportion:

    shares = floor(a * S / A)
    assets = floor(s * A / S)

Both round toward the vault, so A / S never decreases across operations.
"""

from __future__ import annotations

from ..state.balances import Amount
from .curve_math import MAX_UINT256, check_curve_state, require_non_negative
from .errors import AmountTooLargeError


LINEAR_MAX_AMOUNT: int = MAX_UINT256


def _check_amount(name: str, amount: Amount) -> None:
    require_non_negative(name, amount)
    if amount > LINEAR_MAX_AMOUNT:
        raise AmountTooLargeError(f"{name} {amount} exceeds linear curve maximum {LINEAR_MAX_AMOUNT}")


def shares_for_deposit(total_shares: Amount, total_assets: Amount, amount: Amount) -> Amount:
    check_curve_state(total_shares, total_assets)
    _check_amount("amount", amount)
    if total_shares == 0:
        return amount
    return (amount * total_shares) // total_assets


def assets_for_redeem(total_shares: Amount, total_assets: Amount, shares: Amount) -> Amount:
    check_curve_state(total_shares, total_assets)
    _check_amount("shares", shares)
    if shares > total_shares:
        raise ValueError(f"cannot redeem {shares} shares from supply {total_shares}")
    if shares == 0:
        return 0
    return (shares * total_assets) // total_shares


def deposit_headroom(total_shares: Amount, total_assets: Amount) -> Amount:
    """The linear curve has no state-dependent ceiling of its own."""
    check_curve_state(total_shares, total_assets)
    return MAX_UINT256
