"""Exception types for the vault conversion/fee engine.

Every failure path of a deposit, redeem or fee change raises one of these, so
callers can tell "too large" from "insufficient balance" from "transfer
failed" without parsing messages.
"""

from __future__ import annotations


class VaultError(Exception):
    """Base class for all vault failures."""


class ZeroAmountError(VaultError):
    """Raised when a deposit or redeem amount is zero."""


class InsufficientSharesError(VaultError):
    """Raised when a redeem asks for more shares than the owner holds."""

    def __init__(self, owner: str, requested: int, available: int) -> None:
        self.owner = owner
        self.requested = requested
        self.available = available
        super().__init__(f"insufficient shares for {owner}: requested {requested}, available {available}")


class InsufficientBalanceError(VaultError):
    """Raised by the ledger when a burn exceeds the holder's balance."""

    def __init__(self, holder: str, requested: int, available: int) -> None:
        self.holder = holder
        self.requested = requested
        self.available = available
        super().__init__(f"insufficient balance for {holder}: burn {requested}, balance {available}")


class ExceedsMaxDepositError(VaultError):
    """Raised when a deposit exceeds the vault's state-dependent headroom."""

    def __init__(self, amount: int, max_deposit: int) -> None:
        self.amount = amount
        self.max_deposit = max_deposit
        super().__init__(f"deposit {amount} exceeds max deposit {max_deposit}")


class AmountTooLargeError(VaultError):
    """Raised when an amount exceeds a curve's single-operation ceiling."""


class CurveOverflowError(AmountTooLargeError):
    """Raised when a curve's running magnitude would pass its fixed ceiling."""


class FeeExceedsMaximumError(VaultError):
    """Raised when a fee above half the fee denominator is configured."""

    def __init__(self, fee_bps: int, max_fee_bps: int) -> None:
        self.fee_bps = fee_bps
        self.max_fee_bps = max_fee_bps
        super().__init__(f"fee {fee_bps} bps exceeds maximum {max_fee_bps} bps")


class AssetTransferFailedError(VaultError):
    """Raised when the reserve asset refuses or fails a transfer."""


class VaultInvariantError(VaultError):
    """Raised when a vault state violates one or more invariants."""

    def __init__(self, violations: list[str]) -> None:
        self.violations = violations
        super().__init__(f"invariant violations: {', '.join(violations)}")
