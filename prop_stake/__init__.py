"""Property staking accounting engine."""

from prop_stake.engine import StakingEngine
from prop_stake.store import PropertyRegistry, StakeLedger
from prop_stake.transfer import AssetTransferPort, InMemoryAssetLedger

__version__ = "0.1.0"

__all__ = [
    "AssetTransferPort",
    "InMemoryAssetLedger",
    "PropertyRegistry",
    "StakeLedger",
    "StakingEngine",
]
