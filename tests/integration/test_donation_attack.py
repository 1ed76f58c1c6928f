"""First-depositor share inflation through a direct reserve donation.

Reserve units sent straight to the vault's custody account are absorbed into
total assets. On a nearly empty vault this lets an attacker who holds the only
share push the share price high enough that a later deposit rounds down to
almost nothing. These tests pin the exact amounts so any change to rounding or
donation handling shows up here.
"""

from __future__ import annotations

import logging

import pytest

from bonding_vault.core.errors import VaultInvariantError
from bonding_vault.integration.config import VaultConfig
from bonding_vault.integration.reserve import InMemoryReserveAsset
from bonding_vault.integration.vault_engine import VaultEngine


def _setup(curve: str = "linear") -> tuple[VaultEngine, InMemoryReserveAsset]:
    reserve = InMemoryReserveAsset(custody="vault")
    reserve.mint("attacker", 10_001)
    reserve.mint("victim", 20_000)
    return VaultEngine(reserve, VaultConfig(curve=curve, vault_address="vault")), reserve


class TestInflationAttack:
    def test_victim_rounds_down_to_one_share(self) -> None:
        engine, reserve = _setup()

        assert engine.deposit(1, "attacker") == 1
        assert reserve.transfer("attacker", "vault", 10_000)
        # Pricing already sees the donation; the ledger catches up on the next operation.
        assert engine.total_assets() == 10_001
        assert engine.check_invariants() == ["custody_matches_assets"]

        assert engine.deposit(20_000, "victim") == 1
        assert engine.check_invariants() == []
        assert engine.total_assets() == 30_001

        assert engine.redeem(1, "attacker", "attacker") == 15_000
        assert reserve.balance_of("attacker") == 15_000
        assert engine.convert_to_assets(engine.balance_of("victim")) == 15_001

    def test_small_victim_deposit_mints_nothing(self) -> None:
        engine, reserve = _setup()
        engine.deposit(1, "attacker")
        reserve.transfer("attacker", "vault", 10_000)

        assert engine.preview_deposit(5000) == 0
        assert engine.deposit(5000, "victim") == 0
        assert engine.balance_of("victim") == 0
        assert engine.total_assets() == 15_001

        # The attacker's single share now owns the victim's deposit too.
        assert engine.redeem(1, "attacker", "attacker") == 15_001

    def test_donation_to_empty_vault_goes_to_first_depositor(self) -> None:
        engine, reserve = _setup()
        reserve.transfer("attacker", "vault", 500)

        # Bootstrap mints 1:1 against the net deposit, ignoring the donation.
        assert engine.deposit(1000, "victim") == 1000
        assert engine.total_assets() == 1500
        assert engine.redeem(1000, "victim", "victim") == 1500

    def test_quadratic_curve_is_also_exposed(self) -> None:
        engine, reserve = _setup("quadratic")
        engine.deposit(1, "attacker")
        reserve.transfer("attacker", "vault", 10_000)
        # cbrt(1 * 30001 / 10001) = 1.44 -> no new share.
        assert engine.deposit(20_000, "victim") == 0
        assert engine.redeem(1, "attacker", "attacker") == 30_001

    def test_absorption_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        engine, reserve = _setup()
        engine.deposit(1, "attacker")
        reserve.transfer("attacker", "vault", 10_000)
        with caplog.at_level(logging.WARNING, logger="bonding_vault.integration.vault_engine"):
            engine.deposit(20_000, "victim")
        assert "absorbing 10000" in caplog.text


class TestCustodyDeficit:
    def test_missing_custody_blocks_operations(self) -> None:
        engine, reserve = _setup()
        engine.deposit(1000, "victim")
        assert reserve.transfer("vault", "thief", 1)

        with pytest.raises(VaultInvariantError) as info:
            engine.deposit(10, "attacker")
        assert info.value.violations == ["custody_matches_assets"]
        with pytest.raises(VaultInvariantError):
            engine.total_assets()
        assert engine.balance_of("attacker") == 0
