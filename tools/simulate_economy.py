from __future__ import annotations

import argparse
import json
import logging
import random
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from bonding_vault.core.curve_dispatch import CurveKind
from bonding_vault.core.errors import FeeExceedsMaximumError, VaultError
from bonding_vault.integration.config import VaultConfig
from bonding_vault.integration.reserve import InMemoryReserveAsset
from bonding_vault.integration.vault_engine import SettlementKind, SettlementRecord, VaultEngine


logger = logging.getLogger("simulate_economy")

DEFAULT_FEES = "0,1,10,100,1000,5000,5001"
PRICE_UNIT = 10**18


@dataclass
class EconomyStats:
    deposits: int = 0
    redeems: int = 0
    skipped: int = 0
    fees_collected: int = 0
    fee_rejections: list[dict[str, int | str]] = field(default_factory=list)
    price_samples: list[int] = field(default_factory=list)
    supply_samples: list[int] = field(default_factory=list)
    asset_samples: list[int] = field(default_factory=list)

    def on_settlement(self, record: SettlementRecord) -> None:
        if record.kind is SettlementKind.DEPOSIT:
            self.deposits += 1
        else:
            self.redeems += 1
        self.fees_collected += record.fee_amount


def _parse_int_list(value: str) -> list[int]:
    out: list[int] = []
    for part in value.split(","):
        part = part.strip()
        if not part:
            continue
        out.append(int(part))
    if not out:
        raise ValueError("empty list")
    return out


def _sample(engine: VaultEngine, stats: EconomyStats) -> None:
    stats.price_samples.append(engine.price_per_share(PRICE_UNIT))
    stats.supply_samples.append(engine.total_supply())
    stats.asset_samples.append(engine.total_assets())


def _check(engine: VaultEngine) -> None:
    violations = engine.check_invariants()
    if violations:
        raise SystemExit(f"invariant violations: {violations}")


def _random_deposit(engine: VaultEngine, reserve: InMemoryReserveAsset, user: str, rng: random.Random) -> bool:
    cap = min(reserve.balance_of(user), engine.max_deposit(user))
    if cap <= 1:
        return False
    amount = rng.randint(1, cap - 1)
    expected = engine.preview_deposit(amount)
    minted = engine.deposit(amount, user, user)
    if minted != expected:
        raise SystemExit(f"preview_deposit({amount}) = {expected} but deposit minted {minted}")
    return True


def _random_redeem(engine: VaultEngine, user: str, rng: random.Random) -> bool:
    balance = engine.balance_of(user)
    if balance <= 1:
        return False
    shares = rng.randint(1, min(balance - 1, engine.max_redeem(user)))
    expected = engine.preview_redeem(shares)
    paid = engine.redeem(shares, user, user)
    if paid != expected:
        raise SystemExit(f"preview_redeem({shares}) = {expected} but redeem paid {paid}")
    return True


def run_economy(
    *,
    curve: CurveKind,
    seed: int,
    users: int,
    rounds: int,
    initial_mint: int,
    strategic_deposit: int,
    entry_fees: Sequence[int],
    exit_fees: Sequence[int],
    log_scale: int,
    drain: bool,
) -> dict[str, object]:
    rng = random.Random(seed)
    reserve = InMemoryReserveAsset()
    engine = VaultEngine(reserve, VaultConfig(curve=curve, log_scale=log_scale))
    stats = EconomyStats()
    engine.subscribe(stats.on_settlement)

    names = [f"user{i}" for i in range(users)]
    for name in names:
        reserve.mint(name, initial_mint)
    reserve.mint("strategic", strategic_deposit)
    minted_total = reserve.total_supply()

    engine.deposit(strategic_deposit, "strategic", "strategic")
    _sample(engine, stats)

    for entry_fee in entry_fees:
        for exit_fee in exit_fees:
            for setter, bps, label in (
                (engine.set_entry_fee, entry_fee, "entry"),
                (engine.set_exit_fee, exit_fee, "exit"),
            ):
                try:
                    setter(bps)
                except FeeExceedsMaximumError:
                    stats.fee_rejections.append({"fee": label, "bps": bps})

            for user_count in range(1, users + 1):
                for _ in range(rounds):
                    deposit = rng.randint(0, 100) < 50
                    for name in names[:user_count]:
                        try:
                            done = (
                                _random_deposit(engine, reserve, name, rng)
                                if deposit
                                else _random_redeem(engine, name, rng)
                            )
                        except VaultError as exc:
                            logger.debug("%s skipped: %s", name, exc)
                            done = False
                        if not done:
                            stats.skipped += 1
                        _check(engine)
                    _sample(engine, stats)
            logger.info(
                "fees entry=%s exit=%s: supply=%d assets=%d",
                engine.fees.entry_fee_bps, engine.fees.exit_fee_bps,
                engine.total_supply(), engine.total_assets(),
            )

    if drain:
        for name in names + ["strategic"]:
            balance = engine.balance_of(name)
            if balance:
                engine.redeem(balance, name, name)
        _check(engine)

    if reserve.total_supply() != minted_total:
        raise SystemExit("reserve supply changed during the simulation")

    return {
        "curve": curve.value,
        "seed": seed,
        "users": users,
        "deposits": stats.deposits,
        "redeems": stats.redeems,
        "skipped": stats.skipped,
        "fees_collected": str(stats.fees_collected),
        "fee_rejections": stats.fee_rejections,
        "final": {
            "total_supply": str(engine.total_supply()),
            "total_assets": str(engine.total_assets()),
            "holders": len(engine.balances()),
        },
        # With `drain`, whatever stays in the vault is fees plus rounding kept by the vault.
        "residual_assets": str(engine.total_assets()) if drain else None,
        "price_samples": [str(p) for p in stats.price_samples],
        "supply_samples": [str(s) for s in stats.supply_samples],
        "asset_samples": [str(a) for a in stats.asset_samples],
    }


def main() -> int:
    ap = argparse.ArgumentParser(
        description="Seeded random deposit/redeem economy over an entry/exit fee grid"
    )
    ap.add_argument("--curve", type=str, default="linear", choices=[k.value for k in CurveKind])
    ap.add_argument("--seed", type=int, default=0)
    ap.add_argument("--users", type=int, default=4)
    ap.add_argument("--rounds", type=int, default=3)
    ap.add_argument("--initial-mint", type=int, default=500 * 10**18)
    ap.add_argument("--strategic-deposit", type=int, default=10**18)
    ap.add_argument("--entry-fees", type=str, default=DEFAULT_FEES)
    ap.add_argument("--exit-fees", type=str, default=DEFAULT_FEES)
    ap.add_argument("--log-scale", type=int, default=10**18)
    ap.add_argument("--no-drain", action="store_true")
    ap.add_argument("--verbose", "-v", action="store_true")
    ap.add_argument("--out", type=str, default="")
    args = ap.parse_args()

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.users <= 0 or args.rounds <= 0:
        raise SystemExit("users and rounds must be positive")
    if args.initial_mint <= 0 or args.strategic_deposit <= 0:
        raise SystemExit("initial-mint and strategic-deposit must be positive")

    start = time.perf_counter()
    report = run_economy(
        curve=CurveKind.parse(args.curve),
        seed=args.seed,
        users=args.users,
        rounds=args.rounds,
        initial_mint=args.initial_mint,
        strategic_deposit=args.strategic_deposit,
        entry_fees=_parse_int_list(args.entry_fees),
        exit_fees=_parse_int_list(args.exit_fees),
        log_scale=args.log_scale,
        drain=not args.no_drain,
    )
    report["schema"] = "bonding-vault/economy-sim/v1"
    report["runtime_s"] = time.perf_counter() - start

    payload = json.dumps(report, indent=2, sort_keys=True)
    if args.out:
        out_path = Path(args.out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(payload + "\n", encoding="utf-8")
        print(f"Wrote {out_path}")
    else:
        print(payload)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
