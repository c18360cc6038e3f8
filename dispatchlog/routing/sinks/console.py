"""Console sink - prints formatted events through a Rich console."""

from __future__ import annotations

import threading

from rich.console import Console
from rich.text import Text

from dispatchlog.models.events import Level, LogEvent
from dispatchlog.routing.sinks import PropertySink

_LEVEL_STYLES: dict[Level, str] = {
    Level.DEBUG: "dim",
    Level.INFO: "",
    Level.WARNING: "yellow",
    Level.ERROR: "red",
    Level.CRITICAL: "bold red",
}


class ConsoleSink(PropertySink):
    """Writes events to stdout (or stderr) via ``rich.console.Console``.

    When ``style`` is unset, the line is styled by the event's level.
    """

    default_name = "console"

    def __init__(self) -> None:
        super().__init__()
        self._stderr = False
        self._style: str | None = None
        self._console: Console | None = None
        self._lock = threading.Lock()

    @property
    def stderr(self) -> bool:
        return self._stderr

    @stderr.setter
    def stderr(self, value: bool) -> None:
        self._stderr = value

    @property
    def style(self) -> str | None:
        return self._style

    @style.setter
    def style(self, value: str | None) -> None:
        self._style = value

    @property
    def console(self) -> Console:
        if self._console is None:
            self._console = Console(stderr=self._stderr, highlight=False)
        return self._console

    def activate(self) -> None:
        self._console = Console(stderr=self._stderr, highlight=False)

    def accept(self, event: LogEvent) -> None:
        if not self.is_loggable(event):
            return
        style = self._style if self._style is not None else _LEVEL_STYLES[event.level]
        text = Text(self.render(event).rstrip("\n"), style=style)
        with self._lock:
            self.console.print(text)
