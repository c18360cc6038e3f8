"""Exceptions raised by the routing subsystem."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Raised when a sink or dispatcher is configured inconsistently.

    Configuration errors surface synchronously from the offending
    configuration call or from ``activate()``; they are never raised while
    an event is being dispatched.
    """


class PropertyError(ConfigurationError):
    """Raised when a named property cannot be read, found, or coerced."""


class SinkCreationError(RuntimeError):
    """Raised when a per-key destination sink cannot be built."""


class InvalidStateError(RuntimeError):
    """Raised when an operation is not valid in the dispatcher's state."""
