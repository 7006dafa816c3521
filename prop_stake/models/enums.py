"""Enumeration types for staking entities."""

from enum import Enum


class Asset(str, Enum):
    STAKE = "STAKE"
    REWARD = "REWARD"


class EventType(str, Enum):
    PROPERTY_CREATED = "property.created"
    PROPERTY_UPDATED = "property.updated"
    PERIOD_CHANGED = "period.changed"
    DEPOSIT_MADE = "stake.deposited"
    WITHDRAWAL_MADE = "stake.withdrawn"
    REWARD_CLAIMED = "reward.claimed"
    POOL_FUNDED = "pool.funded"
    ADMIN_TRANSFERRED = "admin.transferred"


class ActionType(str, Enum):
    """Kinds of activity produced by the activity generator."""

    DEPOSIT = "DEPOSIT"
    WITHDRAW = "WITHDRAW"
    CLAIM = "CLAIM"
    FUND = "FUND"
    UPDATE_PROPERTY = "UPDATE_PROPERTY"
    ADVANCE_TIME = "ADVANCE_TIME"
