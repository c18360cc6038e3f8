"""Unit tests for RoutingHandler - the bridge from stdlib logging to sinks."""

from __future__ import annotations

import logging
from collections.abc import Iterator

import pytest

from dispatchlog.core.context import DiagnosticContext
from dispatchlog.models.events import Level, LogEvent
from dispatchlog.routing.handler import RoutingHandler, event_from_record
from dispatchlog.routing.sinks.memory import MemorySink


class _FailingSink(MemorySink):
    def accept(self, event: LogEvent) -> None:
        raise RuntimeError("sink failure for testing")


class _ChattySink(MemorySink):
    """Logs through the same logger while accepting an event."""

    def __init__(self) -> None:
        super().__init__()
        self.target: logging.Logger | None = None

    def accept(self, event: LogEvent) -> None:
        super().accept(event)
        if self.target is not None:
            self.target.warning("nested message from the sink")


@pytest.fixture
def app_logger() -> Iterator[logging.Logger]:
    target = logging.getLogger("tests.handler.app")
    target.setLevel(logging.DEBUG)
    target.propagate = False
    yield target
    for handler in list(target.handlers):
        target.removeHandler(handler)
    target.propagate = True


class TestEventFromRecord:
    def test_captures_record_fields(self):
        record = logging.LogRecord(
            "tests.handler", logging.WARNING, __file__, 1, "hello %s", ("world",), None
        )
        event = event_from_record(record)
        assert event.message == "hello world"
        assert event.level is Level.WARNING
        assert event.logger_name == "tests.handler"
        assert event.ndc is None

    def test_captures_diagnostic_context(self):
        record = logging.LogRecord("t", logging.INFO, __file__, 1, "m", None, None)
        DiagnosticContext.put("user", "alice")
        with DiagnosticContext.scope("req-1"):
            event = event_from_record(record)
        assert event.ndc == "req-1"
        assert event.mdc == {"user": "alice"}


class TestRoutingHandler:
    def test_forwards_records(self, app_logger):
        sink = MemorySink()
        app_logger.addHandler(RoutingHandler(sink))

        app_logger.info("plain")
        with DiagnosticContext.scope("alice"):
            app_logger.error("scoped")

        assert [(e.message, e.ndc) for e in sink.events] == [("plain", None), ("scoped", "alice")]
        assert sink.events[1].level is Level.ERROR

    def test_exception_text_is_captured(self, app_logger):
        sink = MemorySink()
        app_logger.addHandler(RoutingHandler(sink))
        try:
            raise ValueError("bad value")
        except ValueError:
            app_logger.exception("failed")
        assert "ValueError: bad value" in sink.events[0].exc_text

    def test_sink_errors_go_to_handle_error(self, app_logger):
        handler = RoutingHandler(_FailingSink())
        handled: list[logging.LogRecord] = []
        handler.handleError = handled.append
        app_logger.addHandler(handler)

        app_logger.info("will fail")

        assert len(handled) == 1
        assert handled[0].getMessage() == "will fail"

    def test_reentrant_records_are_not_forwarded(self, app_logger):
        sink = _ChattySink()
        sink.target = app_logger
        app_logger.addHandler(RoutingHandler(sink))

        app_logger.info("outer")

        assert [e.message for e in sink.events] == ["outer"]

    def test_handler_level(self, app_logger):
        sink = MemorySink()
        app_logger.addHandler(RoutingHandler(sink, level=logging.WARNING))
        app_logger.info("ignored")
        app_logger.warning("kept")
        assert [e.message for e in sink.events] == ["kept"]

    def test_close_closes_plain_sink(self):
        sink = MemorySink()
        RoutingHandler(sink).close()
        assert sink.closed

    def test_close_closes_dispatcher_and_destinations(
        self, make_dispatcher, memory_template, make_event
    ):
        dispatcher = make_dispatcher(memory_template)
        copy = dispatcher.resolve(make_event(ndc="alice"))

        RoutingHandler(dispatcher).close()

        assert dispatcher.state.value == "closed"
        assert copy.closed
        assert memory_template.closed
