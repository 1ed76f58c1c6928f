"""
Quadratic pricing curve: marginal price proportional to s^2, R(s) = s^3.

A vault holding (S, A) prices against k = A / S^3. Conversions keep integer
math exact (no fractional exponents) and round so that k never decreases:

- deposit of `a` mints x - S where x = floor(cbrt(S^3 * (A + a) / A)),
  the largest supply with x^3 * A <= S^3 * (A + a);
- redeem of `s` pays A - ceil(A * (S - s)^3 / S^3).

Flooring the radicand before the cube root does not change the result, since
floor(cbrt(floor(q))) == floor(cbrt(q)) for q >= 0.
"""

from __future__ import annotations

from ..state.balances import Amount
from .curve_math import MAX_UINT256, ceil_div, check_curve_state, icbrt, require_non_negative
from .errors import AmountTooLargeError, CurveOverflowError


QUADRATIC_MAX_AMOUNT: int = 10**38
QUADRATIC_MAX_RADICAND: int = 2**512


def _check_amount(name: str, amount: Amount) -> None:
    require_non_negative(name, amount)
    if amount > QUADRATIC_MAX_AMOUNT:
        raise AmountTooLargeError(
            f"{name} {amount} exceeds quadratic curve maximum {QUADRATIC_MAX_AMOUNT}"
        )


def reserve_weight(supply: Amount) -> int:
    require_non_negative("supply", supply)
    return supply * supply * supply


def shares_for_deposit(total_shares: Amount, total_assets: Amount, amount: Amount) -> Amount:
    """
    Shares minted for a net deposit of `amount`.

    Raises:
        AmountTooLargeError: amount above QUADRATIC_MAX_AMOUNT
        CurveOverflowError: S^3 * (A + a) above QUADRATIC_MAX_RADICAND
    """
    check_curve_state(total_shares, total_assets)
    _check_amount("amount", amount)
    if total_shares == 0:
        return amount
    if amount == 0:
        return 0

    radicand = reserve_weight(total_shares) * (total_assets + amount)
    if radicand > QUADRATIC_MAX_RADICAND:
        raise CurveOverflowError(
            f"quadratic radicand {radicand} exceeds {QUADRATIC_MAX_RADICAND}"
        )
    new_supply = icbrt(radicand // total_assets)
    if new_supply < total_shares:
        raise AssertionError("internal error: quadratic deposit decreased supply")
    return new_supply - total_shares


def assets_for_redeem(total_shares: Amount, total_assets: Amount, shares: Amount) -> Amount:
    check_curve_state(total_shares, total_assets)
    _check_amount("shares", shares)
    if shares > total_shares:
        raise ValueError(f"cannot redeem {shares} shares from supply {total_shares}")
    if shares == 0:
        return 0
    if shares == total_shares:
        return total_assets

    kept = ceil_div(
        total_assets * reserve_weight(total_shares - shares),
        reserve_weight(total_shares),
    )
    return total_assets - kept


def deposit_headroom(total_shares: Amount, total_assets: Amount) -> Amount:
    """Largest deposit whose radicand stays within QUADRATIC_MAX_RADICAND."""
    check_curve_state(total_shares, total_assets)
    if total_shares == 0:
        return MAX_UINT256
    return max(0, QUADRATIC_MAX_RADICAND // reserve_weight(total_shares) - total_assets)
