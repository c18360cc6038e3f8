"""File sink - appends formatted events to a single file.

The file is opened in ``activate()``, after every property has been set,
so a dispatcher can copy a template ``FileSink`` and point each copy at a
different ``path`` before anything touches the filesystem.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import TextIO

from dispatchlog.models.events import LogEvent
from dispatchlog.routing.errors import ConfigurationError
from dispatchlog.routing.sinks import PropertySink

logger = logging.getLogger(__name__)


class FileSink(PropertySink):
    """Writes each accepted event as one formatted line to ``path``.

    Properties
    ----------
    path:
        Target file.  Parent directories are created on activation.
    append:
        Append to an existing file (default) instead of truncating it.
    encoding:
        Text encoding, ``utf-8`` by default.
    immediate_flush:
        Flush after every event (default ``True``).
    """

    default_name = "file"

    def __init__(self) -> None:
        super().__init__()
        self._path: Path | None = None
        self._append = True
        self._encoding = "utf-8"
        self._immediate_flush = True
        self._stream: TextIO | None = None
        self._lock = threading.Lock()

    @property
    def path(self) -> Path | None:
        return self._path

    @path.setter
    def path(self, value: Path | None) -> None:
        self._path = Path(value) if value is not None else None

    @property
    def append(self) -> bool:
        return self._append

    @append.setter
    def append(self, value: bool) -> None:
        self._append = value

    @property
    def encoding(self) -> str:
        return self._encoding

    @encoding.setter
    def encoding(self, value: str) -> None:
        self._encoding = value

    @property
    def immediate_flush(self) -> bool:
        return self._immediate_flush

    @immediate_flush.setter
    def immediate_flush(self, value: bool) -> None:
        self._immediate_flush = value

    @property
    def is_open(self) -> bool:
        return self._stream is not None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def activate(self) -> None:
        """Open ``path`` for writing, creating parent directories."""
        if self._path is None:
            raise ConfigurationError(f"FileSink {self.sink_name!r} requires a path")
        with self._lock:
            if self._stream is not None:
                self._stream.close()
            self._path.parent.mkdir(parents=True, exist_ok=True)
            mode = "a" if self._append else "w"
            self._stream = self._path.open(mode, encoding=self._encoding)
        logger.debug("FileSink: opened %s (mode=%s)", self._path, mode)

    def close(self) -> None:
        with self._lock:
            if self._stream is not None:
                self._stream.close()
                self._stream = None

    def accept(self, event: LogEvent) -> None:
        if not self.is_loggable(event):
            return
        line = self.render(event)
        if not line.endswith("\n"):
            line += "\n"
        with self._lock:
            if self._stream is None:
                raise ConfigurationError(
                    f"FileSink {self.sink_name!r} is not open; call activate() first"
                )
            self._stream.write(line)
            if self._immediate_flush:
                self._stream.flush()
