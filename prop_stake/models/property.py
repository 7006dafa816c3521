"""Property model for the staking registry."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Property:
    """Investment target users stake against.

    ``reward_rate_bps`` is the reward fraction paid per staking period in
    basis points (10000 = 100%). Rewards are only claimable while
    ``successful`` is set.
    """

    property_id: int
    reward_rate_bps: int
    successful: bool = False
    exists: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None
