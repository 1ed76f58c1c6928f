"""
Logarithmic pricing curve: R(s) = s * log2(1 + s / U).

The marginal price grows with the logarithm of cumulative shares; `U`
(`log_scale`) sets the supply at which the log term reaches one bit. Exact
logarithms are not integer-representable, so R is evaluated through the
fixed-point `log2_fixed` with a lower and an upper bound:

    R_lo(s) = s * max(0, L(s) - LOG2_ERROR_ULPS)
    R_hi(s) = s * (L(s) + LOG2_ERROR_ULPS)

Both bounds are monotone in s. Deposits compare R_hi of the candidate supply
against R_lo of the current supply, redeems do the opposite, so every
approximation error lands on the vault's side.

Precision scales with the reserve magnitude (`log2_precision_bits`), which
keeps the relative error of the log term below LOG_MAX_RELATIVE_ERROR and the
rounding loss of a single conversion below one asset unit.
"""

from __future__ import annotations

from fractions import Fraction

from ..state.balances import Amount
from .curve_math import (
    MAX_UINT256,
    ceil_div,
    check_curve_state,
    log2_fixed_bounds,
    log2_precision_bits,
    require_int,
    require_non_negative,
)
from .errors import AmountTooLargeError, CurveOverflowError


LOGARITHMIC_MAX_AMOUNT: int = 10**40
LOG_MAX_SUPPLY: int = MAX_UINT256
LOG_MAX_RELATIVE_ERROR: Fraction = Fraction(1, 10**17)

DEFAULT_LOG_SCALE: int = 10**18
MIN_LOG_SCALE: int = 1
MAX_LOG_SCALE: int = 2**64


def validate_log_scale(log_scale: int) -> int:
    require_int("log_scale", log_scale)
    if not MIN_LOG_SCALE <= log_scale <= MAX_LOG_SCALE:
        raise ValueError(f"log_scale must be in [{MIN_LOG_SCALE}, {MAX_LOG_SCALE}]: {log_scale}")
    return log_scale


def _check_amount(name: str, amount: Amount) -> None:
    require_non_negative(name, amount)
    if amount > LOGARITHMIC_MAX_AMOUNT:
        raise AmountTooLargeError(
            f"{name} {amount} exceeds logarithmic curve maximum {LOGARITHMIC_MAX_AMOUNT}"
        )


def reserve_bounds(supply: Amount, log_scale: int, precision_bits: int) -> tuple[int, int]:
    """(R_lo, R_hi) of `supply`, scaled by 2**precision_bits."""
    require_non_negative("supply", supply)
    if supply == 0:
        return 0, 0
    l_lo, l_hi = log2_fixed_bounds(log_scale + supply, log_scale, precision_bits)
    return supply * l_lo, supply * l_hi


def shares_for_deposit(
    total_shares: Amount,
    total_assets: Amount,
    amount: Amount,
    *,
    log_scale: int = DEFAULT_LOG_SCALE,
) -> Amount:
    """
    Shares minted for a net deposit of `amount`.

    Bisects for the largest x in [S, floor(S * (A + a) / A)] with
    R_hi(x) * A <= R_lo(S) * (A + a). R(x) / R(S) >= x / S because the log
    term is increasing, which bounds the search from above.

    Raises:
        AmountTooLargeError: amount above LOGARITHMIC_MAX_AMOUNT
        CurveOverflowError: resulting supply above LOG_MAX_SUPPLY
    """
    check_curve_state(total_shares, total_assets)
    _check_amount("amount", amount)
    validate_log_scale(log_scale)
    if total_shares == 0:
        return amount
    if amount == 0:
        return 0

    p = log2_precision_bits(total_assets + amount)
    r_lo_current, _ = reserve_bounds(total_shares, log_scale, p)
    target = r_lo_current * (total_assets + amount)

    lo = total_shares
    hi = (total_shares * (total_assets + amount)) // total_assets + 1
    while hi - lo > 1:
        mid = (lo + hi) // 2
        _, r_hi_mid = reserve_bounds(mid, log_scale, p)
        if r_hi_mid * total_assets <= target:
            lo = mid
        else:
            hi = mid

    if lo > LOG_MAX_SUPPLY:
        raise CurveOverflowError(f"logarithmic supply {lo} exceeds {LOG_MAX_SUPPLY}")
    return lo - total_shares


def assets_for_redeem(
    total_shares: Amount,
    total_assets: Amount,
    shares: Amount,
    *,
    log_scale: int = DEFAULT_LOG_SCALE,
) -> Amount:
    check_curve_state(total_shares, total_assets)
    _check_amount("shares", shares)
    validate_log_scale(log_scale)
    if shares > total_shares:
        raise ValueError(f"cannot redeem {shares} shares from supply {total_shares}")
    if shares == 0:
        return 0
    if shares == total_shares:
        return total_assets

    p = log2_precision_bits(total_assets)
    _, r_hi_remaining = reserve_bounds(total_shares - shares, log_scale, p)
    r_lo_current, _ = reserve_bounds(total_shares, log_scale, p)
    kept = ceil_div(total_assets * r_hi_remaining, r_lo_current)
    return max(0, total_assets - kept)


def deposit_headroom(total_shares: Amount, total_assets: Amount) -> Amount:
    """Largest deposit whose search range stays within LOG_MAX_SUPPLY."""
    check_curve_state(total_shares, total_assets)
    if total_shares == 0:
        return LOG_MAX_SUPPLY
    return max(0, (LOG_MAX_SUPPLY * total_assets) // total_shares - total_assets)
