"""Kafka sink for publishing staking events to Kafka topics."""

import json
from dataclasses import dataclass
from typing import Any

from confluent_kafka import KafkaException, Producer

from prop_stake.config import KafkaConfig
from prop_stake.exceptions import SinkError
from prop_stake.logging import get_logger
from prop_stake.models.base import Event
from prop_stake.sinks.serialization import to_dict

logger = get_logger(__name__)


@dataclass
class ProducerStats:
    """Track producer delivery statistics."""

    sent: int = 0
    delivered: int = 0
    failed: int = 0

    @property
    def success_rate(self) -> float:
        """Calculate success rate."""
        total = self.delivered + self.failed
        return self.delivered / total if total > 0 else 0.0


class KafkaSink:
    """Publish events to ``<topic_prefix>.<event_type>`` topics.

    Messages are keyed by the event subject so every event of one
    (user, property) position lands on the same partition.
    """

    def __init__(self, config: KafkaConfig | str) -> None:
        """Initialize Kafka sink.

        Parameters
        ----------
        config : KafkaConfig | str
            Producer configuration or bootstrap servers string.
        """
        if isinstance(config, str):
            config = KafkaConfig(bootstrap_servers=config)

        self.config = config
        self.producer = self._create_producer()
        self.stats = ProducerStats()

    def _create_producer(self) -> Producer:
        """Create Kafka producer with configuration."""
        return Producer(self.config.to_dict())

    def _delivery_callback(self, err: Any, msg: Any) -> None:
        """Handle delivery reports."""
        if err:
            self.stats.failed += 1
            logger.error("Delivery failed: %s", err)
        else:
            self.stats.delivered += 1
            logger.debug("Delivered to %s[%d]@%d", msg.topic(), msg.partition(), msg.offset())

    def topic_for(self, event_type: str) -> str:
        """Map an event type to its topic name.

        ``stake.deposited`` -> ``dev.staking.stake-deposited``
        """
        return f"{self.config.topic_prefix}.{event_type.replace('.', '-')}"

    def send(self, topic: str, record: Any, key: str | None = None) -> None:
        """Send a single record to Kafka topic."""
        data = to_dict(record)
        value = json.dumps(data, ensure_ascii=False, default=str).encode("utf-8")

        try:
            self.producer.produce(
                topic=topic,
                key=key.encode("utf-8") if key else None,
                value=value,
                callback=self._delivery_callback,
            )
        except (BufferError, KafkaException) as exc:
            self.stats.failed += 1
            raise SinkError(f"Cannot produce to {topic}: {exc}") from exc
        self.stats.sent += 1
        self.producer.poll(0)

    def write_event(self, event: Event) -> None:
        """Publish one event keyed by its subject."""
        self.send(self.topic_for(event.event_type), event, key=event.subject)

    def write_batch(self, name: str, records: list[Any]) -> None:
        """Write a named batch of records to its topic and flush."""
        topic = self.topic_for(name)
        logger.info("Writing batch to %s: %d records", topic, len(records))

        for record in records:
            self.send(topic, record)

        self.flush()
        logger.info("Batch complete: sent=%d, delivered=%d, failed=%d",
                    self.stats.sent, self.stats.delivered, self.stats.failed)

    def flush(self, timeout: float = 30.0) -> None:
        """Flush pending messages."""
        self.producer.flush(timeout)

    def close(self) -> None:
        """Flush and close the producer."""
        self.flush()
        logger.info(
            "Kafka sink closed: sent=%d, delivered=%d, failed=%d",
            self.stats.sent,
            self.stats.delivered,
            self.stats.failed,
        )
