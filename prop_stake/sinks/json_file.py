"""JSON file sink for keeping an audit trail on disk."""

import json
from pathlib import Path
from typing import Any, TextIO

from prop_stake.exceptions import SinkError
from prop_stake.models.base import Event
from prop_stake.sinks.serialization import to_dict


class JsonFileSink:
    """Append events to a JSON Lines file and dump snapshots as JSON."""

    def __init__(
        self,
        output_dir: str | Path,
        pretty: bool = False,
        events_file: str = "events.jsonl",
    ) -> None:
        """Initialize JSON file sink.

        Parameters
        ----------
        output_dir : str | Path
            Directory to write JSON files.
        pretty : bool
            Pretty-print batch snapshots.
        events_file : str
            File name of the event log inside ``output_dir``.
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.pretty = pretty
        self.events_path = self.output_dir / events_file
        self._events_fh: TextIO | None = None
        self._counts: dict[str, int] = {}

    def write_event(self, event: Event) -> None:
        """Append one event as a JSON line."""
        try:
            if self._events_fh is None:
                self._events_fh = open(self.events_path, "a", encoding="utf-8")
            self._events_fh.write(json.dumps(to_dict(event), ensure_ascii=False, default=str) + "\n")
            self._events_fh.flush()
        except OSError as exc:
            raise SinkError(f"Cannot write to {self.events_path}: {exc}") from exc
        self._counts["events"] = self._counts.get("events", 0) + 1

    def write_batch(self, name: str, records: list[Any]) -> None:
        """Write a batch of records to ``<name>.json``."""
        file_path = self.output_dir / f"{name}.json"

        data = [to_dict(record) for record in records]

        with open(file_path, "w", encoding="utf-8") as f:
            if self.pretty:
                json.dump(data, f, indent=2, ensure_ascii=False, default=str)
            else:
                json.dump(data, f, ensure_ascii=False, default=str)

        self._counts[name] = len(records)

    def close(self) -> None:
        """Close the event log and print summary."""
        if self._events_fh is not None:
            self._events_fh.close()
            self._events_fh = None
        print(f"JSON files written to: {self.output_dir}")
        for name, count in self._counts.items():
            print(f"  {name}: {count} records")
