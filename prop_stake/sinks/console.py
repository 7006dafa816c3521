"""Console sink for debugging and development."""

import json
from typing import Any

from prop_stake.models.base import Event
from prop_stake.sinks.serialization import to_dict


class ConsoleSink:
    """Print events and snapshots to stdout."""

    def __init__(self, pretty: bool = True) -> None:
        self.pretty = pretty
        self._counts: dict[str, int] = {}

    def write_event(self, event: Event) -> None:
        """Print a single event."""
        print(self._dumps(to_dict(event)))
        self._counts[event.event_type] = self._counts.get(event.event_type, 0) + 1

    def write_batch(self, name: str, records: list[Any]) -> None:
        """Write a batch of records to console."""
        print(f"\n{'='*60}")
        print(f"Batch: {name} ({len(records)} records)")
        print("=" * 60)

        for record in records:
            print(self._dumps(to_dict(record)))

        self._counts[name] = self._counts.get(name, 0) + len(records)

    def close(self) -> None:
        """Print summary and close."""
        print(f"\n{'='*60}")
        print("Console Sink Summary")
        print("=" * 60)
        for name, count in self._counts.items():
            print(f"  {name}: {count} records")

    def _dumps(self, data: dict) -> str:
        if self.pretty:
            return json.dumps(data, indent=2, ensure_ascii=False, default=str)
        return json.dumps(data, ensure_ascii=False, default=str)
