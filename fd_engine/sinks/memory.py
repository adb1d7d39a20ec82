"""In-memory sink collecting published events."""

from typing import Any


class InMemoryEventSink:
    """Keep published events in a list, optionally failing on demand."""

    def __init__(self) -> None:
        self.events: list[Any] = []
        self.fail_with: Exception | None = None

    def publish(self, event: Any) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.events.append(event)

    def of_type(self, event_class: type) -> list[Any]:
        return [e for e in self.events if isinstance(e, event_class)]

    def clear(self) -> None:
        self.events.clear()

    def close(self) -> None:
        pass
