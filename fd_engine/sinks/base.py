"""Event sink interface."""

from typing import Any, Protocol


class EventSink(Protocol):
    """Destination for domain events (accounts, communications, statements, alerts)."""

    def publish(self, event: Any) -> None: ...

    def close(self) -> None: ...
