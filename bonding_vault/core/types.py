"""Data types for the vault conversion/fee engine.

All types are frozen dataclasses (immutable). Amounts are integer units of the
reserve asset or of the share token; fees are basis points of FEE_DENOMINATOR.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique

from .curve_math import MAX_UINT256, check_curve_state, require_non_negative
from .fees import FeeSchedule


MAX_TOTAL_ASSETS: int = MAX_UINT256


@unique
class Operation(Enum):
    DEPOSIT = "deposit"
    REDEEM = "redeem"


@unique
class Rejection(Enum):
    """One member per failure kind of a deposit or redeem step."""
    ZERO_AMOUNT = "zero_amount"
    AMOUNT_TOO_LARGE = "amount_too_large"
    CURVE_OVERFLOW = "curve_overflow"
    EXCEEDS_MAX_DEPOSIT = "exceeds_max_deposit"
    INSUFFICIENT_SHARES = "insufficient_shares"
    INVARIANT = "invariant"


@dataclass(frozen=True)
class VaultState:
    """Totals of one vault plus its current fee schedule."""

    total_shares: int = 0
    total_assets: int = 0
    fees: FeeSchedule = FeeSchedule()

    def __post_init__(self) -> None:
        check_curve_state(self.total_shares, self.total_assets)
        if self.total_shares > MAX_UINT256:
            raise ValueError("total_shares exceeds uint256 range")
        if self.total_assets > MAX_TOTAL_ASSETS:
            raise ValueError("total_assets exceeds uint256 range")
        if not isinstance(self.fees, FeeSchedule):
            raise TypeError("fees must be a FeeSchedule")


@dataclass(frozen=True)
class DepositQuote:
    assets: int
    fee: int
    net_assets: int
    shares: int

    def __post_init__(self) -> None:
        for name in ("assets", "fee", "net_assets", "shares"):
            require_non_negative(name, getattr(self, name))
        if self.net_assets + self.fee != self.assets:
            raise ValueError("deposit quote does not conserve assets")


@dataclass(frozen=True)
class RedeemQuote:
    shares: int
    gross_assets: int
    fee: int
    net_assets: int

    def __post_init__(self) -> None:
        for name in ("shares", "gross_assets", "fee", "net_assets"):
            require_non_negative(name, getattr(self, name))
        if self.net_assets + self.fee != self.gross_assets:
            raise ValueError("redeem quote does not conserve assets")


@dataclass(frozen=True)
class StepResult:
    """Outcome of one deposit/redeem step.

    `accepted=True` carries the post-state and the quote; otherwise
    `rejection` names the failure kind, `detail` explains it and `requested` and
    `limit` hold the amount asked for and the bound it exceeded (max deposit,
    available shares) when one applies.
    """

    accepted: bool
    operation: Operation
    state: VaultState | None = None
    quote: DepositQuote | RedeemQuote | None = None
    rejection: Rejection | None = None
    detail: str = ""
    requested: int | None = None
    limit: int | None = None
