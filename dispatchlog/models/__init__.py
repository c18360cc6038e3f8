"""dispatchlog data models - all Pydantic v2, all frozen (immutable)."""

from dispatchlog.models.config import DispatcherConfig, LoggingConfig, SinkConfig
from dispatchlog.models.events import Level, LogEvent
from dispatchlog.models.routing import VALID_TRANSITIONS, CachePolicy, RouterState

__all__ = [
    "CachePolicy",
    "DispatcherConfig",
    "Level",
    "LogEvent",
    "LoggingConfig",
    "RouterState",
    "SinkConfig",
    "VALID_TRANSITIONS",
]
