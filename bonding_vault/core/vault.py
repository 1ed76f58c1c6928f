"""
Deposit/redeem kernel for a curve-priced vault.

This is a pure state machine intended for the functional core:
- Inputs are integers; malformed inputs (negative, non-int) raise TypeError/ValueError.
- `deposit_step` / `redeem_step` return a StepResult (accepted or rejected).
- `deposit_or_raise` / `redeem_or_raise` raise the matching VaultError instead.

Ordering per operation: validate, fee, curve (against the pre-operation
totals), post-state, invariants. The shell in `integration/vault_engine.py`
moves the reserve asset and the holder balances.
"""

from __future__ import annotations

from dataclasses import replace

from ..state.balances import Amount
from .curve_dispatch import PricingCurve
from .curve_math import MAX_UINT256, require_non_negative
from .errors import (
    AmountTooLargeError,
    CurveOverflowError,
    ExceedsMaxDepositError,
    InsufficientSharesError,
    VaultInvariantError,
    ZeroAmountError,
)
from .fees import FeeSchedule, apply_fee
from .invariants import check_all
from .types import (
    MAX_TOTAL_ASSETS,
    DepositQuote,
    Operation,
    RedeemQuote,
    Rejection,
    StepResult,
    VaultState,
)


def init_vault_state(*, entry_fee_bps: int = 0, exit_fee_bps: int = 0) -> VaultState:
    return VaultState(fees=FeeSchedule(entry_fee_bps=entry_fee_bps, exit_fee_bps=exit_fee_bps))


# -- Limits ------------------------------------------------------------------

def max_deposit(state: VaultState, curve: PricingCurve) -> Amount:
    """Largest asset amount `deposit_step` accepts from `state`."""
    room = min(
        MAX_TOTAL_ASSETS - state.total_assets,
        curve.deposit_headroom(state.total_shares, state.total_assets),
    )
    return max(0, min(curve.max_amount, room))


def max_redeem(state: VaultState, curve: PricingCurve, balance: Amount) -> Amount:
    require_non_negative("balance", balance)
    return min(balance, curve.max_amount)


# -- Conversions (no fees) ---------------------------------------------------

def convert_to_shares(state: VaultState, curve: PricingCurve, assets: Amount) -> Amount:
    return curve.shares_for_deposit(state.total_shares, state.total_assets, assets)


def convert_to_assets(state: VaultState, curve: PricingCurve, shares: Amount) -> Amount:
    return curve.assets_for_redeem(state.total_shares, state.total_assets, shares)


def price_per_share(state: VaultState, curve: PricingCurve, unit: Amount = 10**18) -> Amount:
    """Assets per share sampled at `unit` assets: unit // (shares_for(unit) + 1)."""
    require_non_negative("unit", unit)
    return unit // (convert_to_shares(state, curve, unit) + 1)


# -- Previews (fees applied) -------------------------------------------------

def preview_deposit(state: VaultState, curve: PricingCurve, assets: Amount) -> Amount:
    split = apply_fee(assets, state.fees.entry_fee_bps)
    return convert_to_shares(state, curve, split.net_amount)


def preview_redeem(state: VaultState, curve: PricingCurve, shares: Amount) -> Amount:
    gross = convert_to_assets(state, curve, shares)
    return apply_fee(gross, state.fees.exit_fee_bps).net_amount


# -- Steps -------------------------------------------------------------------

def _reject(
    op: Operation,
    rejection: Rejection,
    detail: str = "",
    *,
    requested: int | None = None,
    limit: int | None = None,
) -> StepResult:
    return StepResult(
        accepted=False, operation=op, rejection=rejection,
        detail=detail, requested=requested, limit=limit,
    )


def _finish(op: Operation, new_state: VaultState, quote: DepositQuote | RedeemQuote) -> StepResult:
    violations = check_all(new_state)
    if violations:
        return _reject(op, Rejection.INVARIANT, detail=",".join(violations))
    return StepResult(accepted=True, operation=op, state=new_state, quote=quote)


def deposit_step(state: VaultState, curve: PricingCurve, assets: Amount) -> StepResult:
    """Price a deposit of `assets` (gross, before the entry fee) against `state`."""
    op = Operation.DEPOSIT
    require_non_negative("assets", assets)
    if assets == 0:
        return _reject(op, Rejection.ZERO_AMOUNT, detail="deposit amount is zero")
    if assets > curve.max_amount:
        return _reject(
            op, Rejection.AMOUNT_TOO_LARGE,
            detail=f"deposit {assets} exceeds {curve.kind.value} curve maximum {curve.max_amount}",
            requested=assets, limit=curve.max_amount,
        )
    limit = max_deposit(state, curve)
    if assets > limit:
        return _reject(
            op, Rejection.EXCEEDS_MAX_DEPOSIT,
            detail=f"deposit {assets} exceeds max deposit {limit}",
            requested=assets, limit=limit,
        )

    split = apply_fee(assets, state.fees.entry_fee_bps)
    try:
        shares = curve.shares_for_deposit(state.total_shares, state.total_assets, split.net_amount)
    except CurveOverflowError as exc:
        return _reject(op, Rejection.CURVE_OVERFLOW, detail=str(exc))
    if state.total_shares + shares > MAX_UINT256:
        return _reject(op, Rejection.CURVE_OVERFLOW, detail="total shares would exceed uint256 range")

    quote = DepositQuote(assets=assets, fee=split.fee_amount, net_assets=split.net_amount, shares=shares)
    new_state = replace(
        state,
        total_shares=state.total_shares + shares,
        total_assets=state.total_assets + assets,
    )
    return _finish(op, new_state, quote)


def redeem_step(state: VaultState, curve: PricingCurve, shares: Amount, balance: Amount) -> StepResult:
    """
    Price a redemption of `shares` held by an owner with `balance` shares.

    The exit fee stays in the vault: totalAssets drops by the net payout only.
    """
    op = Operation.REDEEM
    require_non_negative("shares", shares)
    require_non_negative("balance", balance)
    if balance > state.total_shares:
        raise ValueError(f"balance {balance} exceeds total shares {state.total_shares}")
    if shares == 0:
        return _reject(op, Rejection.ZERO_AMOUNT, detail="redeem amount is zero")
    if shares > balance:
        return _reject(
            op, Rejection.INSUFFICIENT_SHARES,
            detail=f"redeem {shares} exceeds balance {balance}",
            requested=shares, limit=balance,
        )
    if shares > curve.max_amount:
        return _reject(
            op, Rejection.AMOUNT_TOO_LARGE,
            detail=f"redeem {shares} exceeds {curve.kind.value} curve maximum {curve.max_amount}",
            requested=shares, limit=curve.max_amount,
        )

    gross = curve.assets_for_redeem(state.total_shares, state.total_assets, shares)
    split = apply_fee(gross, state.fees.exit_fee_bps)
    quote = RedeemQuote(shares=shares, gross_assets=gross, fee=split.fee_amount, net_assets=split.net_amount)
    new_state = replace(
        state,
        total_shares=state.total_shares - shares,
        total_assets=state.total_assets - split.net_amount,
    )
    return _finish(op, new_state, quote)


def raise_for_rejection(result: StepResult, *, owner: str = "") -> None:
    """Raise the VaultError matching a rejected StepResult (no-op when accepted)."""
    if result.accepted:
        return
    reason = result.rejection
    if reason is Rejection.ZERO_AMOUNT:
        raise ZeroAmountError(result.detail)
    if reason is Rejection.AMOUNT_TOO_LARGE:
        raise AmountTooLargeError(result.detail)
    if reason is Rejection.CURVE_OVERFLOW:
        raise CurveOverflowError(result.detail)
    if reason is Rejection.EXCEEDS_MAX_DEPOSIT:
        raise ExceedsMaxDepositError(result.requested or 0, result.limit or 0)
    if reason is Rejection.INSUFFICIENT_SHARES:
        raise InsufficientSharesError(owner, result.requested or 0, result.limit or 0)
    if reason is Rejection.INVARIANT:
        raise VaultInvariantError(result.detail.split(","))
    raise ValueError(f"unknown rejection: {reason!r}")


def deposit_or_raise(state: VaultState, curve: PricingCurve, assets: Amount) -> StepResult:
    """Like ``deposit_step()`` but raises on rejection instead of returning a result."""
    result = deposit_step(state, curve, assets)
    raise_for_rejection(result)
    return result


def redeem_or_raise(
    state: VaultState, curve: PricingCurve, shares: Amount, balance: Amount, *, owner: str = ""
) -> StepResult:
    """Like ``redeem_step()`` but raises on rejection instead of returning a result."""
    result = redeem_step(state, curve, shares, balance)
    raise_for_rejection(result, owner=owner)
    return result
