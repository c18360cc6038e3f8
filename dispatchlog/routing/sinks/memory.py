"""In-memory sink - collects events, mainly for inspection and tests."""

from __future__ import annotations

import threading

from dispatchlog.models.events import LogEvent
from dispatchlog.routing.sinks import PropertySink


class MemorySink(PropertySink):
    """Keeps every accepted event (and its rendered line) in memory.

    ``label`` is a free-form string property, convenient as the override
    property of a dispatcher: each per-key copy gets its own label.
    """

    default_name = "memory"

    def __init__(self) -> None:
        super().__init__()
        self._label: str | None = None
        self._capacity = 0
        self._events: list[LogEvent] = []
        self._lines: list[str] = []
        self._activated = False
        self._closed = False
        self._lock = threading.Lock()

    @property
    def label(self) -> str | None:
        return self._label

    @label.setter
    def label(self, value: str | None) -> None:
        self._label = value

    @property
    def capacity(self) -> int:
        """Maximum events retained (oldest dropped first); 0 means unbounded."""
        return self._capacity

    @capacity.setter
    def capacity(self, value: int) -> None:
        self._capacity = value

    @property
    def events(self) -> list[LogEvent]:
        with self._lock:
            return list(self._events)

    @property
    def lines(self) -> list[str]:
        with self._lock:
            return list(self._lines)

    @property
    def activated(self) -> bool:
        return self._activated

    @property
    def closed(self) -> bool:
        return self._closed

    def activate(self) -> None:
        self._activated = True

    def close(self) -> None:
        self._closed = True

    def clear(self) -> None:
        with self._lock:
            self._events.clear()
            self._lines.clear()

    def accept(self, event: LogEvent) -> None:
        if not self.is_loggable(event):
            return
        with self._lock:
            self._events.append(event)
            self._lines.append(self.render(event))
            if self._capacity and len(self._events) > self._capacity:
                del self._events[0]
                del self._lines[0]
