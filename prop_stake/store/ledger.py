"""Stake ledger keyed by (user, property id)."""

from dataclasses import dataclass, field

from prop_stake.models.stake import StakeInfo


@dataclass
class StakeLedger:
    """In-memory store of stake positions.

    A position is created zero-valued on first reference. It is only
    removed again when a rollback undoes the operation that created it.
    """

    stakes: dict[tuple[str, int], StakeInfo] = field(default_factory=dict)

    # Relationship index
    _user_properties: dict[str, list[int]] = field(default_factory=dict)

    def get(self, user: str, property_id: int) -> StakeInfo:
        """Return the live record, creating an empty one if needed."""
        key = (user, property_id)
        stake = self.stakes.get(key)
        if stake is None:
            stake = StakeInfo()
            self.stakes[key] = stake
            self._user_properties.setdefault(user, []).append(property_id)
        return stake

    def peek(self, user: str, property_id: int) -> StakeInfo:
        """Return a copy of the position without registering it."""
        stake = self.stakes.get((user, property_id))
        return stake.copy() if stake is not None else StakeInfo()

    def snapshot(self, user: str, property_id: int) -> StakeInfo | None:
        """Copy the position for a later ``restore``; None if never referenced."""
        stake = self.stakes.get((user, property_id))
        return stake.copy() if stake is not None else None

    def restore(self, user: str, property_id: int, snapshot: StakeInfo | None) -> None:
        """Copy a snapshot back into the live record.

        A ``None`` snapshot removes the position created since it was taken.
        """
        if snapshot is None:
            self.discard(user, property_id)
            return
        stake = self.get(user, property_id)
        stake.amount = snapshot.amount
        stake.deposited_at = snapshot.deposited_at
        stake.last_claim_at = snapshot.last_claim_at

    def discard(self, user: str, property_id: int) -> None:
        """Forget a position and its index entry."""
        if self.stakes.pop((user, property_id), None) is None:
            return
        pids = self._user_properties.get(user, [])
        if property_id in pids:
            pids.remove(property_id)
        if not pids:
            self._user_properties.pop(user, None)

    # Query methods
    def positions(self, user: str) -> dict[int, StakeInfo]:
        """Get every referenced position of a user."""
        return {pid: self.stakes[(user, pid)] for pid in self._user_properties.get(user, [])}

    def total_staked(self, property_id: int | None = None) -> int:
        """Sum of staked amounts, optionally restricted to one property."""
        return sum(
            stake.amount
            for (_, pid), stake in self.stakes.items()
            if property_id is None or pid == property_id
        )

    def summary(self) -> dict[str, int]:
        """Return summary counts."""
        return {
            "positions": len(self.stakes),
            "active_positions": sum(1 for s in self.stakes.values() if not s.is_empty),
            "users": len(self._user_properties),
            "total_staked": self.total_staked(),
        }
