"""
Vault configuration (imperative shell).

A `VaultConfig` is a frozen, validated description of one vault: curve kind
and parameters, initial fees and share token metadata. It can be built
directly, loaded from a YAML document, or read from `BONDING_VAULT_*`
environment variables.

YAML layout:

    curve: logarithmic
    log_scale: 1000000000000000000
    fees:
      entry_bps: 100
      exit_bps: 50
    share:
      name: Bonding Vault Share
      symbol: BVS
      decimals: 18
    vault_address: vault
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

from ..core.curve_dispatch import CurveKind, CurveParams, PricingCurve
from ..core.fees import FeeSchedule, validate_fee_bps
from ..core.logarithmic_curve import DEFAULT_LOG_SCALE, validate_log_scale


logger = logging.getLogger(__name__)

ENV_PREFIX = "BONDING_VAULT_"
MAX_DECIMALS = 77


@dataclass(frozen=True)
class VaultConfig:
    curve: CurveKind = CurveKind.LINEAR
    log_scale: int = DEFAULT_LOG_SCALE
    entry_fee_bps: int = 0
    exit_fee_bps: int = 0

    # Share token metadata.
    share_name: str = "Bonding Vault Share"
    share_symbol: str = "BVS"
    decimals: int = 18

    # Custody account of the vault at the reserve asset.
    vault_address: str = "vault"

    def __post_init__(self) -> None:
        object.__setattr__(self, "curve", CurveKind.parse(self.curve))
        validate_log_scale(self.log_scale)
        validate_fee_bps(self.entry_fee_bps)
        validate_fee_bps(self.exit_fee_bps)
        if not isinstance(self.decimals, int) or isinstance(self.decimals, bool):
            raise TypeError("decimals must be an int")
        if not 0 <= self.decimals <= MAX_DECIMALS:
            raise ValueError(f"decimals must be in [0, {MAX_DECIMALS}]: {self.decimals}")
        for name in ("share_name", "share_symbol", "vault_address"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"{name} must be a non-empty string")

    def pricing_curve(self) -> PricingCurve:
        return PricingCurve(kind=self.curve, params=CurveParams(log_scale=self.log_scale))

    def fee_schedule(self) -> FeeSchedule:
        return FeeSchedule(entry_fee_bps=self.entry_fee_bps, exit_fee_bps=self.exit_fee_bps)


def _section(obj: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = obj.get(key)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise TypeError(f"config section {key!r} must be a mapping")
    return value


def vault_config_from_mapping(obj: Mapping[str, Any]) -> VaultConfig:
    """Build a VaultConfig from a parsed document. Unknown top-level keys are rejected."""
    if not isinstance(obj, Mapping):
        raise TypeError("vault config must be a mapping")
    allowed = {"curve", "log_scale", "fees", "share", "vault_address"}
    unknown = sorted(set(obj) - allowed)
    if unknown:
        raise ValueError(f"unknown vault config keys: {unknown}")

    fees = _section(obj, "fees")
    share = _section(obj, "share")
    defaults = VaultConfig()
    return VaultConfig(
        curve=obj.get("curve", defaults.curve),
        log_scale=obj.get("log_scale", defaults.log_scale),
        entry_fee_bps=fees.get("entry_bps", defaults.entry_fee_bps),
        exit_fee_bps=fees.get("exit_bps", defaults.exit_fee_bps),
        share_name=share.get("name", defaults.share_name),
        share_symbol=share.get("symbol", defaults.share_symbol),
        decimals=share.get("decimals", defaults.decimals),
        vault_address=obj.get("vault_address", defaults.vault_address),
    )


def load_vault_config(path: str | Path) -> VaultConfig:
    p = Path(path)
    obj = yaml.safe_load(p.read_text(encoding="utf-8"))
    if obj is None:
        obj = {}
    config = vault_config_from_mapping(obj)
    logger.info("loaded vault config from %s: curve=%s", p, config.curve.value)
    return config


def _env_int(name: str, default: int, *, lo: int, hi: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return int(default)
    try:
        v = int(raw.strip())
    except ValueError:
        logger.warning("ignoring non-integer %s=%r", name, raw)
        return int(default)
    if v < lo or v > hi:
        raise ValueError(f"{name} must be in [{lo}, {hi}]: {v}")
    return v


def _env_str(name: str, default: str) -> str:
    raw = os.environ.get(name)
    if raw is None:
        return default
    v = raw.strip()
    return v if v else default


def vault_config_from_env(prefix: str = ENV_PREFIX) -> VaultConfig:
    """
    Read a VaultConfig from environment variables:

    CURVE, LOG_SCALE, ENTRY_FEE_BPS, EXIT_FEE_BPS, SHARE_NAME, SHARE_SYMBOL,
    DECIMALS and VAULT_ADDRESS, each under `prefix`. Unset or blank variables
    fall back to the VaultConfig defaults.
    """
    d = VaultConfig()
    return VaultConfig(
        curve=_env_str(prefix + "CURVE", d.curve.value),
        log_scale=_env_int(prefix + "LOG_SCALE", d.log_scale, lo=1, hi=2**64),
        entry_fee_bps=_env_int(prefix + "ENTRY_FEE_BPS", d.entry_fee_bps, lo=0, hi=10_000),
        exit_fee_bps=_env_int(prefix + "EXIT_FEE_BPS", d.exit_fee_bps, lo=0, hi=10_000),
        share_name=_env_str(prefix + "SHARE_NAME", d.share_name),
        share_symbol=_env_str(prefix + "SHARE_SYMBOL", d.share_symbol),
        decimals=_env_int(prefix + "DECIMALS", d.decimals, lo=0, hi=MAX_DECIMALS),
        vault_address=_env_str(prefix + "VAULT_ADDRESS", d.vault_address),
    )
