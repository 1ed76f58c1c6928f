"""
Reserve-backed bonding vault.

Layers:
- `core`: integer-only fees, pricing curves and the deposit/redeem kernel,
- `state`: share balances and the vault ledger,
- `integration`: reserve asset protocol, configuration and the locking engine.
"""

__version__ = "0.1.0"
