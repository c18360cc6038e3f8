"""Configurator - builds and wires sinks and dispatchers from configuration.

Turns the declarative models in :mod:`dispatchlog.models.config` into live,
activated objects and attaches them to the standard ``logging`` tree.
Configuration problems raise :class:`ConfigurationError` here, at startup,
never later while events are flowing.
"""

from __future__ import annotations

import importlib
import json
import logging
import tomllib
import weakref
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from dispatchlog.config import DispatchSettings, settings as default_settings
from dispatchlog.core.layout import PatternLayout, substitute_vars
from dispatchlog.models.config import DispatcherConfig, LoggingConfig, SinkConfig
from dispatchlog.routing.dispatcher import DispatcherSink
from dispatchlog.routing.errors import ConfigurationError
from dispatchlog.routing.handler import RoutingHandler
from dispatchlog.routing.sinks import BaseSink
from dispatchlog.routing.sinks.console import ConsoleSink
from dispatchlog.routing.sinks.file import FileSink
from dispatchlog.routing.sinks.memory import MemorySink

logger = logging.getLogger(__name__)

SINK_TYPES: dict[str, type] = {
    "file": FileSink,
    "console": ConsoleSink,
    "memory": MemorySink,
}

# Logger level and propagate flag as they were before configure_logging().
_SavedState = dict[str, tuple[int, bool]]
_saved_logger_state: weakref.WeakKeyDictionary[RoutingHandler, _SavedState] = (
    weakref.WeakKeyDictionary()
)


def resolve_sink_type(sink_type: str) -> type:
    """Return the class for a registered name or a ``module:Class`` path."""
    if sink_type in SINK_TYPES:
        return SINK_TYPES[sink_type]
    if ":" not in sink_type:
        raise ConfigurationError(
            f"Unknown sink type {sink_type!r}; expected one of "
            f"{sorted(SINK_TYPES)} or a 'module:Class' path"
        )
    module_name, _, class_name = sink_type.partition(":")
    try:
        module = importlib.import_module(module_name)
        return getattr(module, class_name)
    except (ImportError, AttributeError) as exc:
        raise ConfigurationError(f"Cannot load sink type {sink_type!r}: {exc}") from exc


def build_sink(
    config: SinkConfig, settings: DispatchSettings | None = None
) -> BaseSink:
    """Instantiate, configure and activate a single sink."""
    settings = settings or default_settings
    variables = settings.substitution_variables()
    sink_type = resolve_sink_type(config.sink_type)
    try:
        sink = sink_type()
    except TypeError as exc:
        raise ConfigurationError(
            f"Sink type {config.sink_type!r} cannot be constructed without arguments"
        ) from exc

    if config.properties and not callable(getattr(sink, "set_property", None)):
        raise ConfigurationError(
            f"Sink type {config.sink_type!r} does not accept properties"
        )
    if config.name is not None and hasattr(sink, "set_property"):
        sink.set_property("name", config.name)
    sink.layout = PatternLayout(
        substitute_vars(config.pattern or settings.default_pattern, variables)
    )
    for name, value in config.properties.items():
        sink.set_property(name, substitute_vars(value, variables))

    activate = getattr(sink, "activate", None)
    if callable(activate):
        try:
            activate()
        except OSError as exc:
            raise ConfigurationError(
                f"Cannot activate sink {config.sink_type!r}: {exc}"
            ) from exc
    return sink


def build_dispatcher(
    config: DispatcherConfig, settings: DispatchSettings | None = None
) -> DispatcherSink:
    """Build the template, wire the dispatcher, and activate it."""
    settings = settings or default_settings
    dispatcher = DispatcherSink(
        name=config.name,
        cache_policy=config.cache_policy or settings.cache_policy,
        variables=settings.substitution_variables(),
    )
    if config.template is not None:
        dispatcher.add_sink(build_sink(config.template, settings))
    if config.property_name is not None:
        dispatcher.property_name = config.property_name
    if config.key_pattern is not None:
        dispatcher.layout = PatternLayout(config.key_pattern)
    dispatcher.activate()
    return dispatcher


def load_config(path: Path | str) -> LoggingConfig:
    """Parse a ``.toml`` or ``.json`` logging configuration file.

    Raises
    ------
    FileNotFoundError
        If *path* does not exist.
    ConfigurationError
        If the format is unsupported or the content is invalid.
    """
    path = Path(path)
    suffix = path.suffix.lower()
    raw: dict[str, Any]
    if suffix == ".toml":
        with path.open("rb") as fh:
            try:
                raw = tomllib.load(fh)
            except tomllib.TOMLDecodeError as exc:
                raise ConfigurationError(f"Invalid TOML in {path}: {exc}") from exc
    elif suffix == ".json":
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"Invalid JSON in {path}: {exc}") from exc
    else:
        raise ConfigurationError(
            f"Unsupported configuration format {suffix!r} (use .toml or .json)"
        )

    try:
        return LoggingConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration in {path}: {exc}") from exc


def configure_logging(
    config: LoggingConfig, settings: DispatchSettings | None = None
) -> RoutingHandler:
    """Attach a RoutingHandler around a new dispatcher to the configured loggers."""
    settings = settings or default_settings
    level = config.level or settings.log_level
    dispatcher = build_dispatcher(config.dispatcher, settings)
    logger.info(
        "Routing loggers %s through dispatcher %s", config.loggers, dispatcher.sink_name
    )
    handler = RoutingHandler(dispatcher)
    saved: dict[str, tuple[int, bool]] = {}
    for name in config.loggers:
        target = logging.getLogger(name or None)
        saved.setdefault(name, (target.level, target.propagate))
        target.setLevel(level.numeric)
        target.addHandler(handler)
        if name:
            target.propagate = config.propagate
    _saved_logger_state[handler] = saved
    return handler


def unconfigure_logging(handler: RoutingHandler, config: LoggingConfig) -> None:
    """Detach *handler*, restore the loggers it was attached to, and close it."""
    saved = _saved_logger_state.pop(handler, {})
    for name in config.loggers:
        target = logging.getLogger(name or None)
        target.removeHandler(handler)
        if name in saved:
            level, propagate = saved[name]
            target.setLevel(level)
            target.propagate = propagate
    handler.close()
