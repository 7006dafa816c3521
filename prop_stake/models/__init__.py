"""Domain models for property staking."""

from prop_stake.models.base import Event
from prop_stake.models.enums import ActionType, Asset, EventType
from prop_stake.models.property import Property
from prop_stake.models.stake import StakeInfo

__all__ = [
    "ActionType",
    "Asset",
    "Event",
    "EventType",
    "Property",
    "StakeInfo",
]
