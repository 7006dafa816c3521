"""In-memory stores for properties and stake positions."""

from prop_stake.store.ledger import StakeLedger
from prop_stake.store.registry import PropertyRegistry

__all__ = ["PropertyRegistry", "StakeLedger"]
