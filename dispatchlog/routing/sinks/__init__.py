"""Sink protocols and the property-introspection base class.

Every sink implements ``BaseSink``: a ``sink_name`` property and an
``accept(event)`` method.  Sinks that can serve as a dispatcher template also
implement ``ConfigurableSink``: they expose their configuration as named,
string-settable properties and have an ``activate()`` / ``close()``
lifecycle.

``PropertySink`` implements ``ConfigurableSink`` for any subclass that
declares its configuration as Python properties with setters::

    class FileSink(PropertySink):
        @property
        def path(self) -> Path | None:
            return self._path

        @path.setter
        def path(self, value: Path | None) -> None:
            self._path = value

``set_property("path", "logs/a.log")`` then coerces the string into the
setter's declared type.
"""

from __future__ import annotations

import functools
import typing
from enum import Enum
from pathlib import PurePath
from typing import Any, Protocol, runtime_checkable

from pydantic import TypeAdapter, ValidationError

from dispatchlog.core.layout import Layout
from dispatchlog.models.events import Level, LogEvent
from dispatchlog.routing.errors import PropertyError

# Property value types that are transferred as strings when a sink is copied.
_SIMPLE_TYPES = (str, int, float, bool, Enum, PurePath)


@runtime_checkable
class BaseSink(Protocol):
    """Protocol that every sink must implement."""

    @property
    def sink_name(self) -> str:
        """Return the human-readable name of this sink."""
        ...

    def accept(self, event: LogEvent) -> None:
        """Accept and process an event."""
        ...


@runtime_checkable
class ConfigurableSink(BaseSink, Protocol):
    """A sink whose configuration can be enumerated and re-applied.

    ``PropertySink`` is the reference implementation; the dispatcher and
    the copier depend only on this protocol.
    """

    layout: Layout | None

    def property_names(self) -> set[str]:
        """Names of the writable configuration properties."""
        ...

    def list_properties(self) -> dict[str, Any]:
        """Current values of the readable, writable, simple-typed properties."""
        ...

    def set_property(self, name: str, value: str) -> None:
        """Coerce *value* into the property's declared type and set it."""
        ...

    def activate(self) -> None:
        """Finish configuration (open files, connect, ...)."""
        ...

    def close(self) -> None:
        ...


@functools.lru_cache(maxsize=None)
def _adapter(hint: Any) -> TypeAdapter:
    return TypeAdapter(hint)


def _setter_hint(prop: property) -> Any:
    """Return the declared type of a property setter's value argument."""
    hints = typing.get_type_hints(prop.fset)
    hints.pop("return", None)
    if not hints:
        return str
    return next(iter(hints.values()))


class PropertySink:
    """Base class giving subclasses bean-style property introspection.

    Subclasses must be constructible without arguments so that the
    dispatcher can copy them.  Configuration belongs in properties with
    setters; ``activate()`` performs the post-configuration setup.
    """

    default_name = "sink"

    def __init__(self) -> None:
        self._name: str | None = None
        self._threshold: Level | None = None
        self.layout: Layout | None = None

    # ------------------------------------------------------------------
    # Common properties
    # ------------------------------------------------------------------

    @property
    def name(self) -> str | None:
        return self._name

    @name.setter
    def name(self, value: str | None) -> None:
        self._name = value

    @property
    def threshold(self) -> Level | None:
        """Events below this level are ignored by ``accept``."""
        return self._threshold

    @threshold.setter
    def threshold(self, value: Level | None) -> None:
        self._threshold = value

    @property
    def sink_name(self) -> str:
        return self._name or self.default_name

    def is_loggable(self, event: LogEvent) -> bool:
        return self._threshold is None or event.level.is_at_least(self._threshold)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @classmethod
    def configuration_properties(cls) -> dict[str, property]:
        """All public properties declared with a setter, keyed by name."""
        found: dict[str, property] = {}
        for klass in reversed(cls.__mro__):
            for attr, value in vars(klass).items():
                if attr.startswith("_"):
                    continue
                if isinstance(value, property) and value.fset is not None:
                    found[attr] = value
                else:
                    # A subclass may shadow a property with a plain attribute.
                    found.pop(attr, None)
        return found

    def property_names(self) -> set[str]:
        return set(self.configuration_properties())

    def list_properties(self) -> dict[str, Any]:
        values: dict[str, Any] = {}
        for attr, prop in self.configuration_properties().items():
            if prop.fget is None:
                continue
            value = prop.fget(self)
            if isinstance(value, _SIMPLE_TYPES):
                values[attr] = value
        return values

    def set_property(self, name: str, value: str) -> None:
        prop = self.configuration_properties().get(name)
        if prop is None:
            raise PropertyError(
                f"No writable property {name!r} on {type(self).__name__}"
            )
        try:
            coerced = _adapter(_setter_hint(prop)).validate_python(value)
        except ValidationError as exc:
            raise PropertyError(
                f"Cannot convert {value!r} for property {name!r} "
                f"of {type(self).__name__}: {exc.errors()[0]['msg']}"
            ) from exc
        prop.fset(self, coerced)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def activate(self) -> None:
        """Hook for subclasses; the base implementation does nothing."""

    def close(self) -> None:
        """Hook for subclasses; the base implementation does nothing."""

    def render(self, event: LogEvent) -> str:
        """Format *event* with the sink's layout, or just its message."""
        if self.layout is None:
            return event.message
        return self.layout.format(event)
