"""
Curve dispatch for vault conversions.

A vault selects its pricing curve once, at creation, as a `PricingCurve`
(curve kind + parameters). Every conversion goes through the dispatch table
below, with the vault totals threaded in by the caller; no curve keeps state.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique
from typing import Callable, NamedTuple

from ..state.balances import Amount
from . import linear_curve
from . import logarithmic_curve
from . import quadratic_curve


@unique
class CurveKind(Enum):
    LINEAR = "linear"
    QUADRATIC = "quadratic"
    LOGARITHMIC = "logarithmic"

    @classmethod
    def parse(cls, value: "CurveKind | str") -> "CurveKind":
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise TypeError("curve kind must be a CurveKind or str")
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(f"unsupported curve kind: {value!r}") from None


@dataclass(frozen=True)
class CurveParams:
    """Per-variant parameters. Only the logarithmic curve reads `log_scale`."""

    log_scale: int = logarithmic_curve.DEFAULT_LOG_SCALE

    def __post_init__(self) -> None:
        logarithmic_curve.validate_log_scale(self.log_scale)


ConvertFn = Callable[[Amount, Amount, Amount, CurveParams], Amount]
HeadroomFn = Callable[[Amount, Amount], Amount]


class _CurveOps(NamedTuple):
    shares_for_deposit: ConvertFn
    assets_for_redeem: ConvertFn
    deposit_headroom: HeadroomFn
    max_amount: int


def _linear_shares(s: Amount, a: Amount, amount: Amount, params: CurveParams) -> Amount:
    return linear_curve.shares_for_deposit(s, a, amount)


def _linear_assets(s: Amount, a: Amount, shares: Amount, params: CurveParams) -> Amount:
    return linear_curve.assets_for_redeem(s, a, shares)


def _quadratic_shares(s: Amount, a: Amount, amount: Amount, params: CurveParams) -> Amount:
    return quadratic_curve.shares_for_deposit(s, a, amount)


def _quadratic_assets(s: Amount, a: Amount, shares: Amount, params: CurveParams) -> Amount:
    return quadratic_curve.assets_for_redeem(s, a, shares)


def _log_shares(s: Amount, a: Amount, amount: Amount, params: CurveParams) -> Amount:
    return logarithmic_curve.shares_for_deposit(s, a, amount, log_scale=params.log_scale)


def _log_assets(s: Amount, a: Amount, shares: Amount, params: CurveParams) -> Amount:
    return logarithmic_curve.assets_for_redeem(s, a, shares, log_scale=params.log_scale)


_DISPATCH: dict[CurveKind, _CurveOps] = {
    CurveKind.LINEAR: _CurveOps(
        _linear_shares, _linear_assets,
        linear_curve.deposit_headroom, linear_curve.LINEAR_MAX_AMOUNT,
    ),
    CurveKind.QUADRATIC: _CurveOps(
        _quadratic_shares, _quadratic_assets,
        quadratic_curve.deposit_headroom, quadratic_curve.QUADRATIC_MAX_AMOUNT,
    ),
    CurveKind.LOGARITHMIC: _CurveOps(
        _log_shares, _log_assets,
        logarithmic_curve.deposit_headroom, logarithmic_curve.LOGARITHMIC_MAX_AMOUNT,
    ),
}


def _ops(kind: CurveKind) -> _CurveOps:
    entry = _DISPATCH.get(kind)
    if entry is None:
        raise ValueError(f"unsupported curve kind: {kind!r}")
    return entry


@dataclass(frozen=True)
class PricingCurve:
    """Tagged curve selection: one kind, its parameters, one shared interface."""

    kind: CurveKind = CurveKind.LINEAR
    params: CurveParams = CurveParams()

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", CurveKind.parse(self.kind))
        if not isinstance(self.params, CurveParams):
            raise TypeError("params must be a CurveParams")

    @property
    def max_amount(self) -> Amount:
        """Single-operation ceiling; larger amounts fail with AmountTooLargeError."""
        return _ops(self.kind).max_amount

    def shares_for_deposit(self, total_shares: Amount, total_assets: Amount, amount: Amount) -> Amount:
        return _ops(self.kind).shares_for_deposit(total_shares, total_assets, amount, self.params)

    def assets_for_redeem(self, total_shares: Amount, total_assets: Amount, shares: Amount) -> Amount:
        return _ops(self.kind).assets_for_redeem(total_shares, total_assets, shares, self.params)

    def deposit_headroom(self, total_shares: Amount, total_assets: Amount) -> Amount:
        """Largest deposit the curve can price from (S, A) without CurveOverflowError."""
        return _ops(self.kind).deposit_headroom(total_shares, total_assets)


def curve_for(kind: CurveKind | str, *, log_scale: int | None = None) -> PricingCurve:
    params = CurveParams() if log_scale is None else CurveParams(log_scale=log_scale)
    return PricingCurve(kind=CurveKind.parse(kind), params=params)
