"""Integration tests - stdlib logging through a dispatcher into per-context files.

Exercises the full path: logger -> RoutingHandler -> DispatcherSink ->
DestinationCache -> SinkCopier -> FileSink, both wired by hand and from a
configuration file.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from dispatchlog.configurator import configure_logging, load_config, unconfigure_logging
from dispatchlog.core.context import DiagnosticContext
from dispatchlog.core.layout import PatternLayout
from dispatchlog.routing.dispatcher import DispatcherSink
from dispatchlog.routing.handler import RoutingHandler
from dispatchlog.routing.sinks.file import FileSink


@pytest.fixture
def app_logger() -> Iterator[logging.Logger]:
    target = logging.getLogger("tests.integration.app")
    target.setLevel(logging.INFO)
    target.propagate = False
    yield target
    for handler in list(target.handlers):
        target.removeHandler(handler)
        handler.close()
    target.propagate = True
    target.setLevel(logging.NOTSET)


def _log_files(root: Path) -> list[Path]:
    return sorted(root.rglob("*.log"))


class TestFileRouting:
    def test_default_and_keyed_files(self, app_logger, file_template: FileSink, tmp_dir: Path):
        dispatcher = DispatcherSink()
        dispatcher.add_sink(file_template)
        dispatcher.property_name = "path"
        dispatcher.layout = PatternLayout(f"{tmp_dir.as_posix()}/logs/%x.log")
        dispatcher.activate()
        app_logger.addHandler(RoutingHandler(dispatcher))

        app_logger.info("foo")
        DiagnosticContext.push("alt")
        try:
            app_logger.info("bar")
            app_logger.warning("baz")
        finally:
            DiagnosticContext.pop()

        keyed = dispatcher.destinations.get("alt")
        assert keyed.path == tmp_dir / "logs" / "alt.log"
        assert file_template.path == tmp_dir / "default.log"

        app_logger.handlers[0].close()

        assert _log_files(tmp_dir) == [tmp_dir / "default.log", tmp_dir / "logs" / "alt.log"]
        assert (tmp_dir / "default.log").read_text(encoding="utf-8") == " INFO: foo\n"
        assert (tmp_dir / "logs" / "alt.log").read_text(encoding="utf-8") == (
            " INFO: bar\nWARNING: baz\n"
        )

    def test_one_file_per_context_value(self, app_logger, file_template: FileSink, tmp_dir: Path):
        dispatcher = DispatcherSink()
        dispatcher.add_sink(file_template)
        dispatcher.property_name = "path"
        dispatcher.layout = PatternLayout(f"{tmp_dir.as_posix()}/tenants/%x.log")
        dispatcher.activate()
        app_logger.addHandler(RoutingHandler(dispatcher))

        for tenant in ("acme", "globex", "acme", "initech", "globex"):
            with DiagnosticContext.scope(tenant):
                app_logger.info("event for %s", tenant)

        app_logger.handlers[0].close()

        tenant_files = sorted(p.name for p in (tmp_dir / "tenants").iterdir())
        assert tenant_files == ["acme.log", "globex.log", "initech.log"]
        acme = (tmp_dir / "tenants" / "acme.log").read_text(encoding="utf-8")
        assert acme.count("event for acme") == 2
        assert "globex" not in acme

    def test_unknown_property_writes_only_default_file(
        self, app_logger, file_template: FileSink, tmp_dir: Path
    ):
        dispatcher = DispatcherSink()
        dispatcher.add_sink(file_template)
        dispatcher.property_name = "nonExistent"
        dispatcher.layout = PatternLayout(f"{tmp_dir.as_posix()}/logs/%x.log")
        dispatcher.activate()
        app_logger.addHandler(RoutingHandler(dispatcher))

        app_logger.info("foo")
        with DiagnosticContext.scope("foo"):
            app_logger.info("foo")

        app_logger.handlers[0].close()

        assert _log_files(tmp_dir) == [tmp_dir / "default.log"]
        assert (tmp_dir / "default.log").read_text(encoding="utf-8").count("foo") == 2


class TestConfiguredFileRouting:
    def test_from_toml(self, tmp_dir: Path, monkeypatch):
        monkeypatch.setenv("DISPATCHLOG_TEST_ROOT", tmp_dir.as_posix())
        path = tmp_dir / "dispatchlog.toml"
        path.write_text(
            "\n".join(
                [
                    'loggers = ["tests.integration.configured"]',
                    "propagate = false",
                    "",
                    "[dispatcher]",
                    'property_name = "path"',
                    'key_pattern = "${DISPATCHLOG_TEST_ROOT}/logs/%x.log"',
                    "",
                    "[dispatcher.template]",
                    'sink_type = "file"',
                    'pattern = "%p [%x] %m%n"',
                    'properties = { path = "${DISPATCHLOG_TEST_ROOT}/default.log" }',
                ]
            ),
            encoding="utf-8",
        )
        config = load_config(path)
        handler = configure_logging(config)
        target = logging.getLogger("tests.integration.configured")
        try:
            target.warning("unkeyed")
            with DiagnosticContext.scope("alt"):
                target.warning("keyed")
        finally:
            unconfigure_logging(handler, config)
            target.propagate = True
            target.setLevel(logging.NOTSET)

        assert (tmp_dir / "default.log").read_text(encoding="utf-8") == "WARNING [] unkeyed\n"
        assert (tmp_dir / "logs" / "alt.log").read_text(encoding="utf-8") == (
            "WARNING [alt] keyed\n"
        )
