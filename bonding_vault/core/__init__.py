"""
Core vault algorithms: fees, pricing curves, deposit/redeem kernel
"""

from .errors import (
    AmountTooLargeError,
    AssetTransferFailedError,
    CurveOverflowError,
    ExceedsMaxDepositError,
    FeeExceedsMaximumError,
    InsufficientBalanceError,
    InsufficientSharesError,
    VaultError,
    VaultInvariantError,
    ZeroAmountError,
)
from .fees import FEE_DENOMINATOR, MAX_FEE_BPS, FeeSchedule, FeeSplit, apply_fee, validate_fee_bps
from .curve_dispatch import CurveKind, CurveParams, PricingCurve, curve_for
from .linear_curve import LINEAR_MAX_AMOUNT
from .quadratic_curve import QUADRATIC_MAX_AMOUNT, QUADRATIC_MAX_RADICAND
from .logarithmic_curve import LOGARITHMIC_MAX_AMOUNT, LOG_MAX_RELATIVE_ERROR, LOG_MAX_SUPPLY
from .types import DepositQuote, Operation, RedeemQuote, Rejection, StepResult, VaultState
from .invariants import check_all
from .vault import (
    convert_to_assets,
    convert_to_shares,
    deposit_or_raise,
    deposit_step,
    init_vault_state,
    max_deposit,
    max_redeem,
    preview_deposit,
    preview_redeem,
    price_per_share,
    redeem_or_raise,
    redeem_step,
)

__all__ = [
    "AmountTooLargeError",
    "AssetTransferFailedError",
    "CurveOverflowError",
    "ExceedsMaxDepositError",
    "FeeExceedsMaximumError",
    "InsufficientBalanceError",
    "InsufficientSharesError",
    "VaultError",
    "VaultInvariantError",
    "ZeroAmountError",
    "FEE_DENOMINATOR",
    "MAX_FEE_BPS",
    "FeeSchedule",
    "FeeSplit",
    "apply_fee",
    "validate_fee_bps",
    "CurveKind",
    "CurveParams",
    "PricingCurve",
    "curve_for",
    "LINEAR_MAX_AMOUNT",
    "QUADRATIC_MAX_AMOUNT",
    "QUADRATIC_MAX_RADICAND",
    "LOGARITHMIC_MAX_AMOUNT",
    "LOG_MAX_RELATIVE_ERROR",
    "LOG_MAX_SUPPLY",
    "DepositQuote",
    "Operation",
    "RedeemQuote",
    "Rejection",
    "StepResult",
    "VaultState",
    "check_all",
    "convert_to_assets",
    "convert_to_shares",
    "deposit_or_raise",
    "deposit_step",
    "init_vault_state",
    "max_deposit",
    "max_redeem",
    "preview_deposit",
    "preview_redeem",
    "price_per_share",
    "redeem_or_raise",
    "redeem_step",
]
