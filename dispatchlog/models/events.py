"""Log event model - the structured unit every sink accepts.

Each event is a frozen Pydantic model.  The diagnostic context that was in
effect when the event was emitted is captured on the event itself, so sinks
and the dispatcher never consult ambient thread state.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Level(str, Enum):
    """Severity levels, mirroring the standard-library names."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    @property
    def numeric(self) -> int:
        return logging.getLevelName(self.value)

    @classmethod
    def from_levelno(cls, levelno: int) -> Level:
        """Map a stdlib level number onto the nearest level at or below it."""
        chosen = cls.DEBUG
        for level in cls:
            if level.numeric <= levelno:
                chosen = level
        return chosen

    def is_at_least(self, other: Level) -> bool:
        return self.numeric >= other.numeric


class LogEvent(BaseModel):
    """A single logging event routed through sinks.

    ``ndc`` is the space-joined nested diagnostic context, or ``None`` when
    the context stack was empty at emission.  ``mdc`` is the mapped
    diagnostic context (name -> value).
    """

    model_config = ConfigDict(frozen=True)

    level: Level = Level.INFO
    logger_name: str = "root"
    message: str = ""
    ndc: str | None = None
    mdc: dict[str, str] = {}
    thread_name: str = Field(
        default_factory=lambda: threading.current_thread().name
    )
    timestamp_utc: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    exc_text: str | None = None

    @property
    def has_context(self) -> bool:
        return bool(self.ndc)
