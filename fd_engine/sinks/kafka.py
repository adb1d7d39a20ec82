"""Kafka sink publishing domain events to their topics."""

import logging
import time
from dataclasses import dataclass
from typing import Any

from confluent_kafka import Producer

from fd_engine.config import KafkaConfig
from fd_engine.exceptions import SinkError
from fd_engine.models import (
    AccountAlertEvent,
    AccountClosedEvent,
    AccountCreatedEvent,
    AccountMaturedEvent,
    CommunicationRequestedEvent,
    StatementNotification,
)
from fd_engine.sinks.serialization import to_json

logger = logging.getLogger(__name__)

# Event class to topic mapping
DEFAULT_TOPICS: dict[type, str] = {
    AccountCreatedEvent: "fd.account.created",
    AccountClosedEvent: "fd.account.closed",
    AccountMaturedEvent: "fd.account.matured",
    CommunicationRequestedEvent: "fd.communication",
    StatementNotification: "statement",
    AccountAlertEvent: "alert",
}


@dataclass
class ProducerStats:
    """Track producer delivery statistics."""

    sent: int = 0
    delivered: int = 0
    failed: int = 0
    start_time: float | None = None

    @property
    def success_rate(self) -> float:
        """Calculate success rate."""
        total = self.delivered + self.failed
        return self.delivered / total if total > 0 else 0.0

    @property
    def pending(self) -> int:
        return self.sent - self.delivered - self.failed


class KafkaEventSink:
    """Publish events to Kafka, keyed by account number, JSON-encoded."""

    def __init__(
        self,
        config: KafkaConfig | str,
        topics: dict[type, str] | None = None,
    ) -> None:
        """Initialize Kafka sink.

        Parameters
        ----------
        config : KafkaConfig | str
            Producer configuration or bootstrap servers string.
        topics : dict[type, str] | None
            Overrides for the event class to topic mapping.
        """
        if isinstance(config, str):
            config = KafkaConfig(bootstrap_servers=config)

        self.config = config
        self.topics = {**DEFAULT_TOPICS, **(topics or {})}
        self.producer = self._create_producer()
        self.stats = ProducerStats(start_time=time.time())

    def _create_producer(self) -> Producer:
        """Create Kafka producer with configuration."""
        try:
            return Producer(self.config.to_dict())
        except Exception as e:
            raise SinkError(f"Cannot create Kafka producer: {e}") from e

    def _delivery_callback(self, err: Any, msg: Any) -> None:
        """Handle delivery reports."""
        if err:
            self.stats.failed += 1
            logger.error("Delivery failed: %s", err)
        else:
            self.stats.delivered += 1
            logger.debug("Delivered to %s[%d]@%d", msg.topic(), msg.partition(), msg.offset())

    def topic_for(self, event: Any) -> str:
        try:
            return self.topics[type(event)]
        except KeyError as e:
            raise SinkError(f"No topic configured for {type(event).__name__}") from e

    def publish(self, event: Any) -> None:
        """Send a single event to its topic."""
        topic = self.topic_for(event)
        key = getattr(event, "account_number", None)
        value = to_json(event).encode("utf-8")

        self.producer.produce(
            topic=topic,
            key=key.encode("utf-8") if key else None,
            value=value,
            callback=self._delivery_callback,
        )
        self.stats.sent += 1
        self.producer.poll(0)

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
