from __future__ import annotations

import pytest

from bonding_vault.core.curve_dispatch import curve_for
from bonding_vault.core.curve_math import MAX_UINT256
from bonding_vault.core.invariants import check_all
from bonding_vault.core.types import Rejection, VaultState
from bonding_vault.core.vault import deposit_step, init_vault_state, max_deposit, redeem_step


@pytest.mark.parametrize(
    "kind,accepted_through",
    [("linear", 77), ("quadratic", 38), ("logarithmic", 40)],
)
def test_deposit_ladder_up_to_ten_to_the_77(kind: str, accepted_through: int) -> None:
    curve = curve_for(kind)
    state = init_vault_state()

    for exp in range(0, 78):
        amount = 10**exp
        r = deposit_step(state, curve, amount)
        if exp <= accepted_through:
            assert r.accepted, (exp, r.rejection, r.detail)
            state = r.state
            assert check_all(state) == []
        else:
            assert r.rejection is Rejection.AMOUNT_TOO_LARGE
            assert r.limit == curve.max_amount

    assert state.total_assets == sum(10**e for e in range(accepted_through + 1))
    assert state.total_shares > 0

    # A single holder exiting the whole supply takes every asset.
    exit_ = redeem_step(state, curve, state.total_shares, state.total_shares)
    if state.total_shares > curve.max_amount:
        assert exit_.rejection is Rejection.AMOUNT_TOO_LARGE
        return
    assert exit_.accepted
    assert exit_.quote.net_assets == state.total_assets
    assert exit_.state == VaultState()


def test_one_unit_deposits() -> None:
    for kind in ("linear", "quadratic", "logarithmic"):
        curve = curve_for(kind)
        r = deposit_step(init_vault_state(), curve, 1)
        assert r.accepted
        assert r.quote.shares == 1


def test_linear_capacity_near_uint256() -> None:
    curve = curve_for("linear")
    state = VaultState(total_shares=10**77, total_assets=10**77)
    assert deposit_step(state, curve, 10**77).rejection is Rejection.EXCEEDS_MAX_DEPOSIT

    room = max_deposit(state, curve)
    r = deposit_step(state, curve, room)
    assert r.accepted
    assert r.state.total_assets == MAX_UINT256
    assert max_deposit(r.state, curve) == 0
