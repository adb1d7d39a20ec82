"""Console sink for debugging and development."""

from typing import Any

from fd_engine.sinks.serialization import to_json


class ConsoleEventSink:
    """Print events to stdout as JSON."""

    def __init__(self, pretty: bool = True) -> None:
        self.pretty = pretty
        self._counts: dict[str, int] = {}

    def publish(self, event: Any) -> None:
        event_type = getattr(event, "event_type", type(event).__name__)
        print(f"--- {event_type} ---")
        print(to_json(event, pretty=self.pretty))
        self._counts[event_type] = self._counts.get(event_type, 0) + 1

    def close(self) -> None:
        """Print summary and close."""
        print(f"\n{'='*60}")
        print("Console Sink Summary")
        print("=" * 60)
        for event_type, count in self._counts.items():
            print(f"  {event_type}: {count} events")
