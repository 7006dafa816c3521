"""Random user and administrator activity against a staking engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Sequence

from prop_stake.config import SECONDS_PER_DAY
from prop_stake.generators.base import BaseGenerator
from prop_stake.models.enums import ActionType


@dataclass
class Action:
    """One step of generated activity."""

    action_type: ActionType
    user: str | None = None
    property_id: int | None = None
    amount: int = 0
    seconds: int = 0
    successful: bool = False
    reward_rate_bps: int = 0


class ActivityGenerator(BaseGenerator):
    """Generate synthetic users and a weighted stream of actions."""

    ACTION_TYPES = list(ActionType)
    ACTION_WEIGHTS = [0.30, 0.20, 0.20, 0.05, 0.05, 0.20]

    # Upper bounds for generated quantities
    MAX_DEPOSIT = 10_000
    MAX_WITHDRAW = 3_000
    MAX_FUNDING = 50_000

    def __init__(
        self,
        seed: int | None = None,
        step_seconds: int = SECONDS_PER_DAY,
        locale: str = "en_US",
    ) -> None:
        super().__init__(seed, locale)
        self.step_seconds = step_seconds

    def generate_users(self, count: int) -> list[str]:
        """Generate distinct user identities."""
        return [self.fake.unique.user_name() for _ in range(count)]

    def generate(self, users: Sequence[str], property_ids: Sequence[int]) -> Action:
        """Generate a single action.

        Parameters
        ----------
        users : Sequence[str]
            Identities to act as.
        property_ids : Sequence[int]
            Properties to act on.

        Returns
        -------
        Action
            Generated action.
        """
        action_type = self.rng.choices(self.ACTION_TYPES, weights=self.ACTION_WEIGHTS, k=1)[0]
        return self._build(action_type, users, property_ids)

    def generate_batch(
        self, count: int, users: Sequence[str], property_ids: Sequence[int]
    ) -> Iterator[Action]:
        """Generate multiple actions.

        Yields
        ------
        Action
            Generated actions.
        """
        for _ in range(count):
            yield self.generate(users, property_ids)

    def _build(
        self, action_type: ActionType, users: Sequence[str], property_ids: Sequence[int]
    ) -> Action:
        if action_type == ActionType.ADVANCE_TIME:
            return Action(action_type, seconds=self.rng.randint(1, 3 * self.step_seconds))

        user = self.rng.choice(users)
        if action_type == ActionType.FUND:
            return Action(action_type, user=user, amount=self.rng.randint(1, self.MAX_FUNDING))

        property_id = self.rng.choice(property_ids)
        if action_type == ActionType.UPDATE_PROPERTY:
            return Action(
                action_type,
                property_id=property_id,
                successful=self.rng.random() < 0.7,
                # Occasionally out of range to exercise rejection
                reward_rate_bps=self.rng.randint(0, 11_000),
            )
        if action_type == ActionType.DEPOSIT:
            amount = self.rng.randint(1, self.MAX_DEPOSIT)
        elif action_type == ActionType.WITHDRAW:
            amount = self.rng.randint(1, self.MAX_WITHDRAW)
        else:
            amount = 0
        return Action(action_type, user=user, property_id=property_id, amount=amount)
