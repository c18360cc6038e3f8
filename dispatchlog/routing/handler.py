"""RoutingHandler - bridges the standard ``logging`` module onto a sink.

Each ``LogRecord`` becomes a :class:`LogEvent` carrying the diagnostic
context that is current at emission, then goes to the wrapped sink
(usually a :class:`DispatcherSink`).  Exceptions raised by the sink are
reported through ``logging.Handler.handleError``, the stdlib's own
error policy for handlers.
"""

from __future__ import annotations

import logging
import threading

from dispatchlog.core.context import DiagnosticContext
from dispatchlog.models.events import Level, LogEvent
from dispatchlog.routing.dispatcher import DispatcherSink
from dispatchlog.routing.sinks import BaseSink


def event_from_record(record: logging.LogRecord) -> LogEvent:
    """Build a LogEvent from *record* and the current diagnostic context."""
    exc_text = record.exc_text
    if exc_text is None and record.exc_info:
        exc_text = logging.Formatter().formatException(record.exc_info)
    return LogEvent(
        level=Level.from_levelno(record.levelno),
        logger_name=record.name,
        message=record.getMessage(),
        ndc=DiagnosticContext.get(),
        mdc=DiagnosticContext.mdc(),
        thread_name=record.threadName or "",
        exc_text=exc_text,
    )


class RoutingHandler(logging.Handler):
    """A ``logging.Handler`` that forwards records to a sink.

    Records emitted while this handler is already emitting on the same
    thread (for example the library's own diagnostics raised while a new
    destination is being created) are not forwarded again.
    """

    def __init__(self, sink: BaseSink, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self.sink = sink
        self._local = threading.local()

    def emit(self, record: logging.LogRecord) -> None:
        if getattr(self._local, "emitting", False):
            return
        self._local.emitting = True
        try:
            self.sink.accept(event_from_record(record))
        except Exception:  # noqa: BLE001
            self.handleError(record)
        finally:
            self._local.emitting = False

    def close(self) -> None:
        try:
            if isinstance(self.sink, DispatcherSink):
                self.sink.close()
                self.sink.close_destinations()
            else:
                close = getattr(self.sink, "close", None)
                if callable(close):
                    close()
        finally:
            super().close()
