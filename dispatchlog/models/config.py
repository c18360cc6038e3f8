"""Declarative logging configuration models.

Loaded from a ``.toml`` or ``.json`` file by
:func:`dispatchlog.configurator.load_config`, for example::

    level = "INFO"

    [dispatcher]
    property_name = "path"
    key_pattern = "logs/%x.log"

    [dispatcher.template]
    sink_type = "file"
    pattern = "%p: %m%n"
    properties = { path = "logs/default.log", append = "true" }
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator

from dispatchlog.models.events import Level
from dispatchlog.models.routing import CachePolicy


class SinkConfig(BaseModel):
    """A single sink: its type plus string-valued properties.

    ``sink_type`` is a registered short name (``"file"``, ``"console"``,
    ``"memory"``) or a dotted ``"module:Class"`` import path.
    """

    model_config = ConfigDict(frozen=True)

    sink_type: str
    name: str | None = None
    pattern: str | None = None  # layout ConversionPattern for the sink
    properties: dict[str, str] = {}

    @field_validator("properties", mode="before")
    @classmethod
    def _stringify(cls, value: object) -> object:
        # TOML gives booleans and integers natively; sinks take strings.
        if isinstance(value, dict):
            return {
                k: (str(v).lower() if isinstance(v, bool) else str(v))
                for k, v in value.items()
            }
        return value


class DispatcherConfig(BaseModel):
    """Configuration of the context-keyed dispatcher."""

    model_config = ConfigDict(frozen=True)

    name: str = "dispatcher"
    property_name: str | None = None
    key_pattern: str | None = None
    template: SinkConfig | None = None
    cache_policy: CachePolicy | None = None  # None: use DispatchSettings


class LoggingConfig(BaseModel):
    """Top-level configuration: which loggers feed the dispatcher."""

    model_config = ConfigDict(frozen=True)

    level: Level | None = None  # None: use DispatchSettings.log_level
    loggers: list[str] = [""]  # "" is the root logger
    propagate: bool = True
    dispatcher: DispatcherConfig = DispatcherConfig()
