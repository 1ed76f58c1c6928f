"""
Deposit/redeem protocol for one vault (imperative shell).

`VaultEngine` wires the pure kernel in `core/vault.py` to the outside world:
- reads and reconciles reserve custody,
- moves the reserve asset through a `ReserveAsset`,
- applies the kernel's quote to the `VaultLedger`,
- notifies listeners with one `SettlementRecord` per successful operation.

Every call runs under one re-entrant lock, so operations on a vault are
linearizable. Ledger changes are staged on a copy and committed only after the
reserve transfer succeeds; a failed call leaves the ledger untouched and emits
nothing.

Donations: reserve units sent straight to the vault's custody account are not
rejected. They are absorbed into `total_assets` by the next successful
operation and therefore raise the price every holder (and the next depositor)
sees. On an empty vault this lets a first depositor who also donates inflate
the share price; the behaviour is kept deliberately visible and is covered by
tests rather than mitigated here.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum, unique
from typing import Callable, Dict, List

from ..core import vault as kernel
from ..core.curve_dispatch import PricingCurve
from ..core.errors import AssetTransferFailedError, VaultInvariantError
from ..core.fees import FeeSchedule
from ..core.invariants import check_all
from ..core.types import DepositQuote, RedeemQuote, VaultState
from ..state.balances import Amount, HolderId
from ..state.ledger import VaultLedger
from .config import VaultConfig
from .reserve import ReserveAsset


logger = logging.getLogger(__name__)


@unique
class SettlementKind(Enum):
    DEPOSIT = "Deposit"
    WITHDRAW = "Withdraw"


@dataclass(frozen=True)
class SettlementRecord:
    """
    Emitted once per successful deposit/redeem, after commit.

    `net_asset_amount` is what entered pricing (deposit, after the entry fee)
    or what the receiver got (redeem, after the exit fee).
    """

    kind: SettlementKind
    caller: HolderId
    receiver: HolderId
    owner: HolderId
    net_asset_amount: Amount
    share_amount: Amount
    fee_amount: Amount


Listener = Callable[[SettlementRecord], None]


class VaultEngine:
    """One curve-priced vault over a reserve asset."""

    def __init__(self, reserve: ReserveAsset, config: VaultConfig | None = None):
        self.config = config if config is not None else VaultConfig()
        self.reserve = reserve
        self.curve: PricingCurve = self.config.pricing_curve()
        self.vault_address: HolderId = self.config.vault_address
        self._fees: FeeSchedule = self.config.fee_schedule()
        self._ledger = VaultLedger()
        self._listeners: List[Listener] = []
        self._lock = threading.RLock()

    # -- Share token ---------------------------------------------------------

    @property
    def name(self) -> str:
        return self.config.share_name

    @property
    def symbol(self) -> str:
        return self.config.share_symbol

    @property
    def decimals(self) -> int:
        return self.config.decimals

    def balance_of(self, holder: HolderId) -> Amount:
        with self._lock:
            return self._ledger.balance_of(holder)

    def total_supply(self) -> Amount:
        with self._lock:
            return self._ledger.total_shares

    def balances(self) -> Dict[HolderId, Amount]:
        with self._lock:
            return self._ledger.balances()

    # -- Fees ----------------------------------------------------------------

    @property
    def fees(self) -> FeeSchedule:
        with self._lock:
            return self._fees

    def set_entry_fee(self, fee_bps: int) -> None:
        """Raises FeeExceedsMaximumError when `fee_bps * 2 > FEE_DENOMINATOR`."""
        with self._lock:
            self._fees = self._fees.with_entry_fee(fee_bps)
            logger.info("entry fee set to %d bps", fee_bps)

    def set_exit_fee(self, fee_bps: int) -> None:
        """Raises FeeExceedsMaximumError when `fee_bps * 2 > FEE_DENOMINATOR`."""
        with self._lock:
            self._fees = self._fees.with_exit_fee(fee_bps)
            logger.info("exit fee set to %d bps", fee_bps)

    # -- Listeners -----------------------------------------------------------

    def subscribe(self, listener: Listener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        with self._lock:
            self._listeners.remove(listener)

    def _emit(self, record: SettlementRecord) -> None:
        for listener in list(self._listeners):
            try:
                listener(record)
            except Exception:
                # The operation is already committed; a listener cannot undo it.
                logger.exception("settlement listener %r failed", listener)

    # -- State ---------------------------------------------------------------

    def _custody(self) -> Amount:
        return self.reserve.balance_of(self.vault_address)

    def _priced_state(self) -> VaultState:
        """State used for pricing: ledger totals with any unabsorbed donation included."""
        custody = self._custody()
        if custody < self._ledger.total_assets:
            raise VaultInvariantError(["custody_matches_assets"])
        return VaultState(
            total_shares=self._ledger.total_shares,
            total_assets=custody,
            fees=self._fees,
        )

    def _absorb_donations(self, ledger: VaultLedger) -> VaultState:
        """Record unaccounted custody on `ledger` (a staged copy) and return its state."""
        custody = self._custody()
        recorded = ledger.total_assets
        if custody < recorded:
            logger.error("custody %d below recorded assets %d", custody, recorded)
            raise VaultInvariantError(["custody_matches_assets"])
        if custody > recorded:
            logger.warning("absorbing %d unaccounted reserve units into total assets", custody - recorded)
            ledger.record_assets_in(custody - recorded)
        return VaultState(
            total_shares=ledger.total_shares,
            total_assets=ledger.total_assets,
            fees=self._fees,
        )

    def _require_external(self, role: str, account: HolderId) -> None:
        # Custody-to-custody transfers move nothing.
        if account == self.vault_address:
            raise AssetTransferFailedError(f"{role} cannot be the vault custody account {account!r}")

    def state(self) -> VaultState:
        with self._lock:
            return self._priced_state()

    def check_invariants(self) -> List[str]:
        """Full invariant check, including the O(holders) sum of balances."""
        with self._lock:
            s = VaultState(
                total_shares=self._ledger.total_shares,
                total_assets=self._ledger.total_assets,
                fees=self._fees,
            )
            return check_all(s, balances=self._ledger.balances(), custody=self._custody())

    # -- Queries -------------------------------------------------------------

    def total_assets(self) -> Amount:
        with self._lock:
            return self._priced_state().total_assets

    def convert_to_shares(self, assets: Amount) -> Amount:
        with self._lock:
            return kernel.convert_to_shares(self._priced_state(), self.curve, assets)

    def convert_to_assets(self, shares: Amount) -> Amount:
        with self._lock:
            return kernel.convert_to_assets(self._priced_state(), self.curve, shares)

    def preview_deposit(self, assets: Amount) -> Amount:
        with self._lock:
            shares = kernel.preview_deposit(self._priced_state(), self.curve, assets)
            logger.debug("preview_deposit(%d) -> %d shares", assets, shares)
            return shares

    def preview_redeem(self, shares: Amount) -> Amount:
        with self._lock:
            assets = kernel.preview_redeem(self._priced_state(), self.curve, shares)
            logger.debug("preview_redeem(%d) -> %d assets", shares, assets)
            return assets

    def max_deposit(self, receiver: HolderId | None = None) -> Amount:
        with self._lock:
            return kernel.max_deposit(self._priced_state(), self.curve)

    def max_redeem(self, owner: HolderId) -> Amount:
        with self._lock:
            return kernel.max_redeem(self._priced_state(), self.curve, self._ledger.balance_of(owner))

    def price_per_share(self, unit: Amount = 10**18) -> Amount:
        with self._lock:
            return kernel.price_per_share(self._priced_state(), self.curve, unit)

    # -- Transfers -----------------------------------------------------------

    def _transfer_in(self, sender: HolderId, amount: Amount) -> None:
        try:
            ok = self.reserve.transfer_in(sender, amount)
        except Exception as exc:
            logger.warning("transfer_in from %s of %d raised: %s", sender, amount, exc)
            raise AssetTransferFailedError(f"transfer_in from {sender} of {amount} failed") from exc
        if not ok:
            logger.warning("transfer_in from %s of %d refused", sender, amount)
            raise AssetTransferFailedError(f"transfer_in from {sender} of {amount} refused")

    def _transfer_out(self, recipient: HolderId, amount: Amount) -> None:
        try:
            ok = self.reserve.transfer_out(recipient, amount)
        except Exception as exc:
            logger.warning("transfer_out to %s of %d raised: %s", recipient, amount, exc)
            raise AssetTransferFailedError(f"transfer_out to {recipient} of {amount} failed") from exc
        if not ok:
            logger.warning("transfer_out to %s of %d refused", recipient, amount)
            raise AssetTransferFailedError(f"transfer_out to {recipient} of {amount} refused")

    # -- Operations ----------------------------------------------------------

    def deposit(self, assets: Amount, receiver: HolderId, caller: HolderId | None = None) -> Amount:
        """
        Pull `assets` from `caller` and mint shares to `receiver`.

        Returns the number of shares minted.

        Raises:
            ZeroAmountError, AmountTooLargeError, ExceedsMaxDepositError,
            CurveOverflowError, AssetTransferFailedError, VaultInvariantError
        """
        caller = receiver if caller is None else caller
        with self._lock:
            self._require_external("caller", caller)
            staged = self._ledger.copy()
            state = self._absorb_donations(staged)
            result = kernel.deposit_or_raise(state, self.curve, assets)
            quote = result.quote
            if not isinstance(quote, DepositQuote):
                raise AssertionError("internal error: accepted deposit without a deposit quote")

            staged.mint(receiver, quote.shares)
            staged.record_assets_in(quote.assets)
            self._transfer_in(caller, quote.assets)
            self._ledger = staged

            record = SettlementRecord(
                kind=SettlementKind.DEPOSIT,
                caller=caller,
                receiver=receiver,
                owner=receiver,
                net_asset_amount=quote.net_assets,
                share_amount=quote.shares,
                fee_amount=quote.fee,
            )
            logger.info(
                "deposit caller=%s receiver=%s assets=%d fee=%d shares=%d",
                caller, receiver, quote.assets, quote.fee, quote.shares,
            )
            self._emit(record)
            return quote.shares

    def redeem(self, shares: Amount, receiver: HolderId, owner: HolderId) -> Amount:
        """
        Burn `shares` from `owner` and pay the net assets to `receiver`.

        Returns the net asset amount paid. The exit fee stays in the vault.

        Raises:
            ZeroAmountError, InsufficientSharesError, AmountTooLargeError,
            AssetTransferFailedError, VaultInvariantError
        """
        with self._lock:
            self._require_external("receiver", receiver)
            staged = self._ledger.copy()
            state = self._absorb_donations(staged)
            result = kernel.redeem_or_raise(state, self.curve, shares, staged.balance_of(owner), owner=owner)
            quote = result.quote
            if not isinstance(quote, RedeemQuote):
                raise AssertionError("internal error: accepted redeem without a redeem quote")

            staged.burn(owner, quote.shares)
            staged.record_assets_out(quote.net_assets)
            self._transfer_out(receiver, quote.net_assets)
            self._ledger = staged

            record = SettlementRecord(
                kind=SettlementKind.WITHDRAW,
                caller=owner,
                receiver=receiver,
                owner=owner,
                net_asset_amount=quote.net_assets,
                share_amount=quote.shares,
                fee_amount=quote.fee,
            )
            logger.info(
                "redeem owner=%s receiver=%s shares=%d gross=%d fee=%d net=%d",
                owner, receiver, quote.shares, quote.gross_assets, quote.fee, quote.net_assets,
            )
            self._emit(record)
            return quote.net_assets

    def __repr__(self) -> str:
        return f"VaultEngine(curve={self.curve.kind.value}, ledger={self._ledger!r})"
