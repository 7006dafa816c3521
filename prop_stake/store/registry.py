"""Property registry: sequential ids, success flag and reward rate."""

from dataclasses import dataclass, field
from datetime import datetime

from prop_stake.exceptions import InvalidRateError, PropertyNotFoundError
from prop_stake.models.property import Property

MAX_RATE_BPS = 10000


@dataclass
class PropertyRegistry:
    """In-memory catalog of properties keyed by integer id.

    Ids start at 1 and are never reused; records are only ever updated.
    """

    properties: dict[int, Property] = field(default_factory=dict)
    _next_id: int = 1

    def add_property(self, reward_rate_bps: int, created_at: datetime | None = None) -> Property:
        """Allocate the next id and register a new, unsuccessful property.

        The rate is stored as given; bounds are only enforced on update.
        """
        prop = Property(
            property_id=self._next_id,
            reward_rate_bps=reward_rate_bps,
            successful=False,
            created_at=created_at or datetime.now(),
        )
        self.properties[prop.property_id] = prop
        self._next_id += 1
        return prop

    def update_property(
        self,
        property_id: int,
        successful: bool,
        reward_rate_bps: int,
        updated_at: datetime | None = None,
    ) -> Property:
        """Overwrite both the success flag and the reward rate."""
        prop = self.require(property_id)
        if (
            isinstance(reward_rate_bps, bool)
            or not isinstance(reward_rate_bps, int)
            or not 0 <= reward_rate_bps <= MAX_RATE_BPS
        ):
            raise InvalidRateError(
                f"Reward rate {reward_rate_bps!r} bps is outside [0, {MAX_RATE_BPS}]"
            )
        prop.successful = successful
        prop.reward_rate_bps = reward_rate_bps
        prop.updated_at = updated_at or datetime.now()
        return prop

    def get(self, property_id: int) -> Property | None:
        return self.properties.get(property_id)

    def exists(self, property_id: int) -> bool:
        prop = self.properties.get(property_id)
        return prop is not None and prop.exists

    def require(self, property_id: int) -> Property:
        """Return the property or raise ``PropertyNotFoundError``."""
        prop = self.properties.get(property_id)
        if prop is None or not prop.exists:
            raise PropertyNotFoundError(f"Property {property_id} not found")
        return prop

    @property
    def next_id(self) -> int:
        return self._next_id

    def summary(self) -> dict[str, int]:
        """Return summary counts."""
        return {
            "properties": len(self.properties),
            "successful": sum(1 for p in self.properties.values() if p.successful),
        }
