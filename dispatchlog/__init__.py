"""dispatchlog: context-keyed log routing.

A ``DispatcherSink`` sends each log event to a destination chosen by the
event's diagnostic context, creating one destination per distinct context
value by copying a single template sink with one property overridden
(typically the file path).

  - Nested / mapped diagnostic context on ``contextvars``
  - Pattern layouts with ``${NAME}`` substitution
  - File, console (Rich) and in-memory sinks with string-settable properties
  - Single-flight or first-writer-wins destination cache
  - ``logging.Handler`` bridge and TOML / JSON configuration
"""

__version__ = "0.1.0"
__description__ = "Route log events to per-context destinations copied from a template sink"

from dispatchlog.core.context import DiagnosticContext
from dispatchlog.core.layout import PatternLayout, substitute_vars
from dispatchlog.models.events import Level, LogEvent
from dispatchlog.routing.dispatcher import DispatcherSink
from dispatchlog.routing.errors import ConfigurationError
from dispatchlog.routing.handler import RoutingHandler

__all__ = [
    "ConfigurationError",
    "DiagnosticContext",
    "DispatcherSink",
    "Level",
    "LogEvent",
    "PatternLayout",
    "RoutingHandler",
    "substitute_vars",
    "__version__",
]
