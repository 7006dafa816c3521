"""Stake position model."""

from dataclasses import dataclass


@dataclass
class StakeInfo:
    """A user's position in one property.

    All three fields are zero for a position that was never funded or has
    been fully withdrawn.
    """

    amount: int = 0
    deposited_at: int = 0  # Start of the current lock window
    last_claim_at: int = 0  # Last reward checkpoint

    @property
    def is_empty(self) -> bool:
        return self.amount == 0

    def reset(self) -> None:
        self.amount = 0
        self.deposited_at = 0
        self.last_claim_at = 0

    def copy(self) -> "StakeInfo":
        return StakeInfo(self.amount, self.deposited_at, self.last_claim_at)
