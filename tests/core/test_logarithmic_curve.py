from __future__ import annotations

from fractions import Fraction

import pytest
from hypothesis import given, settings
import hypothesis.strategies as st

from bonding_vault.core.curve_math import LOG2_MIN_PRECISION_BITS, log2_fixed_bounds, log2_precision_bits
from bonding_vault.core.errors import AmountTooLargeError, CurveOverflowError
from bonding_vault.core.logarithmic_curve import (
    DEFAULT_LOG_SCALE,
    LOG_MAX_RELATIVE_ERROR,
    LOG_MAX_SUPPLY,
    LOGARITHMIC_MAX_AMOUNT,
    MAX_LOG_SCALE,
    assets_for_redeem,
    deposit_headroom,
    reserve_bounds,
    shares_for_deposit,
    validate_log_scale,
)


def test_bootstrap_is_one_to_one() -> None:
    assert shares_for_deposit(0, 0, 1000) == 1000
    assert shares_for_deposit(0, 999, 1000) == 1000


# With U = 1: R(1) = 1, R(2) = 2 log2(3) ~ 3.17, R(3) = 6, R(4) = 4 log2(5) ~ 9.29, R(5) ~ 12.9


@pytest.mark.parametrize(
    "amount,expected",
    [(1, 0), (2, 0), (3, 1), (8, 2), (9, 3)],
)
def test_small_scale_deposit_table(amount: int, expected: int) -> None:
    # Vault (S=1, A=1) mints the largest x with R(1 + x) <= 1 + amount.
    assert shares_for_deposit(1, 1, amount, log_scale=1) == expected


@pytest.mark.parametrize(
    "shares,expected",
    [(1, 3), (3, 8), (4, 10), (0, 0)],
)
def test_small_scale_redeem_table(shares: int, expected: int) -> None:
    # Vault (S=4, A=10): pays 10 - ceil(10 * R(4 - s) / R(4)).
    assert assets_for_redeem(4, 10, shares, log_scale=1) == expected


def test_log_scale_validation() -> None:
    assert validate_log_scale(1) == 1
    assert validate_log_scale(MAX_LOG_SCALE) == MAX_LOG_SCALE
    with pytest.raises(ValueError):
        validate_log_scale(0)
    with pytest.raises(ValueError):
        validate_log_scale(MAX_LOG_SCALE + 1)
    with pytest.raises(TypeError):
        validate_log_scale(1.0)  # type: ignore[arg-type]
    with pytest.raises(ValueError):
        shares_for_deposit(1, 1, 1, log_scale=0)


def test_reserve_bounds_are_ordered_and_zero_at_zero() -> None:
    assert reserve_bounds(0, DEFAULT_LOG_SCALE, 128) == (0, 0)
    lo, hi = reserve_bounds(10**18, DEFAULT_LOG_SCALE, 128)
    # s = U gives log2(2) = 1 exactly, so the bounds straddle s * 2**128.
    assert lo < 10**18 << 128 < hi


@pytest.mark.parametrize("scale", [1, 10**18, MAX_LOG_SCALE])
@pytest.mark.parametrize("supply", [1, 10, 10**9, 10**30])
def test_documented_relative_error(scale: int, supply: int) -> None:
    l_lo, l_hi = log2_fixed_bounds(scale + supply, scale, LOG2_MIN_PRECISION_BITS)
    assert l_lo > 0
    assert Fraction(l_hi - l_lo, l_lo) <= 2 * LOG_MAX_RELATIVE_ERROR


def test_ceiling_is_amount_too_large() -> None:
    with pytest.raises(AmountTooLargeError):
        shares_for_deposit(10, 10, LOGARITHMIC_MAX_AMOUNT + 1)
    with pytest.raises(AmountTooLargeError):
        assets_for_redeem(10**41, 10, LOGARITHMIC_MAX_AMOUNT + 1)


def test_supply_overflow() -> None:
    with pytest.raises(CurveOverflowError):
        shares_for_deposit(2**255, 1, 2)


def test_headroom() -> None:
    assert deposit_headroom(0, 0) == LOG_MAX_SUPPLY
    assert deposit_headroom(2**255, 1) == 0
    assert deposit_headroom(10, 10) == LOG_MAX_SUPPLY - 10


def test_redeem_rejects_more_than_supply() -> None:
    with pytest.raises(ValueError):
        assets_for_redeem(5, 5, 6)


state = st.tuples(
    st.integers(min_value=1, max_value=10**6),
    st.integers(min_value=1, max_value=10**9),
)


@given(state=state, a=st.integers(min_value=1, max_value=10**9))
@settings(max_examples=40, deadline=None)
def test_deposit_is_largest_supply_within_bounds(state: tuple[int, int], a: int) -> None:
    s, assets = state
    x = shares_for_deposit(s, assets, a)
    p = log2_precision_bits(assets + a)
    r_lo_s, _ = reserve_bounds(s, DEFAULT_LOG_SCALE, p)
    _, r_hi_new = reserve_bounds(s + x, DEFAULT_LOG_SCALE, p)
    _, r_hi_next = reserve_bounds(s + x + 1, DEFAULT_LOG_SCALE, p)
    target = r_lo_s * (assets + a)
    assert r_hi_new * assets <= target or x == 0
    assert r_hi_next * assets > target


@given(state=state, a=st.integers(min_value=0, max_value=10**9), b=st.integers(min_value=0, max_value=10**9))
@settings(max_examples=30, deadline=None)
def test_monotone_in_amount(state: tuple[int, int], a: int, b: int) -> None:
    s, assets = state
    lo, hi = sorted((a, b))
    assert shares_for_deposit(s, assets, lo) <= shares_for_deposit(s, assets, hi)
    lo_sh, hi_sh = min(lo, s), min(hi, s)
    assert assets_for_redeem(s, assets, lo_sh) <= assets_for_redeem(s, assets, hi_sh)


@given(state=state, a=st.integers(min_value=1, max_value=10**9))
@settings(max_examples=30, deadline=None)
def test_round_trip_never_profits(state: tuple[int, int], a: int) -> None:
    s, assets = state
    x = shares_for_deposit(s, assets, a)
    out = assets_for_redeem(s + x, assets + a, x)
    assert out <= a
    # Marginal price is at most 2A/S; the slack covers the log error bounds.
    assert a - out <= 4 * (assets + a) // (s + x) + 3
