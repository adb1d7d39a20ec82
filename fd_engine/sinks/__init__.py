"""Event sinks for publishing domain events."""

from fd_engine.config import EngineConfig
from fd_engine.exceptions import ConfigurationError
from fd_engine.sinks.base import EventSink
from fd_engine.sinks.console import ConsoleEventSink
from fd_engine.sinks.memory import InMemoryEventSink

__all__ = ["ConsoleEventSink", "EventSink", "InMemoryEventSink", "create_sink"]


def create_sink(config: EngineConfig) -> EventSink:
    """Build the sink selected by ``config.event_sink``."""
    if config.event_sink == "console":
        return ConsoleEventSink()
    if config.event_sink == "memory":
        return InMemoryEventSink()
    if config.event_sink == "kafka":
        from fd_engine.sinks.kafka import KafkaEventSink

        return KafkaEventSink(config.kafka)
    raise ConfigurationError(f"Unknown event sink: {config.event_sink}")
