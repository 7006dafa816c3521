"""Base models shared across components."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class Event:
    """Standard event envelope for notifications."""

    event_id: str
    event_type: str  # entity.action (e.g., stake.deposited)
    event_time: datetime
    source: str  # Component that emitted it
    subject: str  # Entity key affected
    data: dict
    metadata: dict = field(default_factory=dict)
