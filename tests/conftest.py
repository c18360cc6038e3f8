"""Shared test fixtures for dispatchlog."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest

from dispatchlog.core.context import DiagnosticContext
from dispatchlog.core.layout import PatternLayout
from dispatchlog.models.events import Level, LogEvent
from dispatchlog.models.routing import CachePolicy
from dispatchlog.routing.dispatcher import DispatcherSink
from dispatchlog.routing.sinks import BaseSink
from dispatchlog.routing.sinks.file import FileSink
from dispatchlog.routing.sinks.memory import MemorySink


@pytest.fixture(autouse=True)
def clean_context() -> Iterator[None]:
    """Every test starts and ends with an empty diagnostic context."""
    DiagnosticContext.clear()
    DiagnosticContext.clear_mdc()
    yield
    DiagnosticContext.clear()
    DiagnosticContext.clear_mdc()


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for log files."""
    return tmp_path


# ---------------------------------------------------------------------------
# Event factories
# ---------------------------------------------------------------------------


@pytest.fixture
def make_event() -> Callable[..., LogEvent]:
    """Factory fixture: build a LogEvent with sensible defaults."""

    def _factory(
        message: str = "hello",
        ndc: str | None = None,
        level: Level = Level.INFO,
        **overrides: Any,
    ) -> LogEvent:
        defaults: dict[str, Any] = {
            "message": message,
            "ndc": ndc,
            "level": level,
            "logger_name": "tests.app",
        }
        defaults.update(overrides)
        return LogEvent(**defaults)

    return _factory


# ---------------------------------------------------------------------------
# Sink and dispatcher factories
# ---------------------------------------------------------------------------


@pytest.fixture
def memory_template() -> MemorySink:
    """An activated MemorySink labelled ``default`` with a few properties set."""
    sink = MemorySink()
    sink.name = "memory-template"
    sink.label = "default"
    sink.capacity = 100
    sink.layout = PatternLayout("%p: %m")
    sink.activate()
    return sink


@pytest.fixture
def file_template(tmp_dir: Path) -> Iterator[FileSink]:
    """An activated FileSink writing to ``{tmp}/default.log``."""
    sink = FileSink()
    sink.path = tmp_dir / "default.log"
    sink.layout = PatternLayout("%5p: %m%n")
    sink.activate()
    yield sink
    sink.close()


@pytest.fixture
def make_dispatcher() -> Callable[..., DispatcherSink]:
    """Factory fixture: an activated DispatcherSink around *template*."""

    def _factory(
        template: BaseSink,
        property_name: str = "label",
        pattern: str = "key:%x",
        cache_policy: CachePolicy = CachePolicy.SINGLE_FLIGHT,
        variables: dict[str, str] | None = None,
    ) -> DispatcherSink:
        dispatcher = DispatcherSink(cache_policy=cache_policy, variables=variables)
        dispatcher.add_sink(template)
        dispatcher.property_name = property_name
        dispatcher.layout = PatternLayout(pattern)
        dispatcher.activate()
        return dispatcher

    return _factory
