"""
Vault integration layer: reserve asset, configuration, deposit/redeem engine
"""

from .config import VaultConfig, load_vault_config, vault_config_from_env, vault_config_from_mapping
from .reserve import InMemoryReserveAsset, ReserveAsset
from .vault_engine import Listener, SettlementKind, SettlementRecord, VaultEngine

__all__ = [
    "VaultConfig",
    "load_vault_config",
    "vault_config_from_env",
    "vault_config_from_mapping",
    "InMemoryReserveAsset",
    "ReserveAsset",
    "Listener",
    "SettlementKind",
    "SettlementRecord",
    "VaultEngine",
]
