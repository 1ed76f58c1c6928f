"""
Entry/exit fee kernels (deterministic, integer-only).

Fees are basis points of a single fixed denominator. The fee portion is never
escrowed separately: whatever is not paid out stays in the vault and accrues
to remaining share holders.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from .errors import FeeExceedsMaximumError


FEE_DENOMINATOR = 10_000
MAX_FEE_BPS = FEE_DENOMINATOR // 2


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


def validate_fee_bps(fee_bps: int) -> int:
    """
    Check that `fee_bps` is a usable fee and return it.

    Raises FeeExceedsMaximumError when `fee_bps * 2 > FEE_DENOMINATOR` (fees are capped at 50%).
    """
    _require_int("fee_bps", fee_bps)
    if fee_bps < 0:
        raise ValueError(f"fee_bps must be non-negative: {fee_bps}")
    if fee_bps * 2 > FEE_DENOMINATOR:
        raise FeeExceedsMaximumError(fee_bps, MAX_FEE_BPS)
    return fee_bps


@dataclass(frozen=True)
class FeeSplit:
    net_amount: int
    fee_amount: int

    def __post_init__(self) -> None:
        for name, v in (("net_amount", self.net_amount), ("fee_amount", self.fee_amount)):
            _require_int(name, v)
            if v < 0:
                raise ValueError(f"{name} must be non-negative: {v}")


@dataclass(frozen=True)
class FeeSchedule:
    """Entry and exit fees of one vault, in basis points of FEE_DENOMINATOR."""

    entry_fee_bps: int = 0
    exit_fee_bps: int = 0

    def __post_init__(self) -> None:
        validate_fee_bps(self.entry_fee_bps)
        validate_fee_bps(self.exit_fee_bps)

    def with_entry_fee(self, fee_bps: int) -> "FeeSchedule":
        return replace(self, entry_fee_bps=validate_fee_bps(fee_bps))

    def with_exit_fee(self, fee_bps: int) -> "FeeSchedule":
        return replace(self, exit_fee_bps=validate_fee_bps(fee_bps))


def apply_fee(amount: int, fee_bps: int) -> FeeSplit:
    """
    Split `amount` into (net, fee) with floor rounding on the fee:

        fee = floor(amount * fee_bps / FEE_DENOMINATOR)
        net = amount - fee

    `net + fee == amount` always holds, so no unit is created or lost by the split.
    """
    _require_int("amount", amount)
    if amount < 0:
        raise ValueError(f"amount must be non-negative, got {amount}")
    validate_fee_bps(fee_bps)

    fee = (amount * fee_bps) // FEE_DENOMINATOR
    net = amount - fee
    if net < 0 or net + fee != amount:
        raise AssertionError("fee split is not conservative")
    return FeeSplit(net_amount=net, fee_amount=fee)
