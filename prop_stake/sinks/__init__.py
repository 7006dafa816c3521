"""Output sinks for publishing staking events."""

from prop_stake.sinks.console import ConsoleSink
from prop_stake.sinks.json_file import JsonFileSink
from prop_stake.sinks.kafka import KafkaSink

__all__ = ["ConsoleSink", "JsonFileSink", "KafkaSink"]
