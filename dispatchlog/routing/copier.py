"""SinkCopier - builds per-key copies of a template sink.

A copy is a new instance of the template's concrete type, configured with
every simple-typed property of the template except one, which is set to a
caller-supplied override value instead.  The template's layout object is
shared by reference, never copied.
"""

from __future__ import annotations

import inspect
import logging
from enum import Enum
from typing import Any

from dispatchlog.routing.errors import PropertyError, SinkCreationError
from dispatchlog.routing.sinks import ConfigurableSink

logger = logging.getLogger(__name__)


def is_default_constructible(sink_type: type) -> bool:
    """Whether *sink_type* can be instantiated without arguments."""
    try:
        signature = inspect.signature(sink_type)
    except (TypeError, ValueError):
        return False
    return all(
        param.default is not inspect.Parameter.empty
        or param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD)
        for param in signature.parameters.values()
    )


def verify_property(template: Any, property_name: str) -> bool:
    """Whether *template* exposes a writable property called *property_name*.

    Logs a warning when it does not: every event will then be delivered to
    the template itself.
    """
    names: set[str] = set()
    property_names = getattr(template, "property_names", None)
    if callable(property_names):
        names = set(property_names())
    else:
        logger.error(
            "Cannot introspect %r: %s does not implement ConfigurableSink",
            template,
            type(template).__name__,
        )
    if property_name in names:
        return True
    logger.warning(
        "No property named %r was found on sink of type %s "
        "(all events will go to the default sink)",
        property_name,
        type(template).__qualname__,
    )
    return False


def _as_property_string(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


class SinkCopier:
    """Copies a template sink, overriding one named property.

    Parameters
    ----------
    template:
        The sink to copy.  Never modified.
    property_name:
        The property set to the override value on each copy.

    The overridable check runs once, on construction.  When it fails,
    :meth:`create` returns the template itself for every override.
    """

    def __init__(self, template: ConfigurableSink, property_name: str) -> None:
        self._template = template
        self._property_name = property_name
        self._overridable = verify_property(template, property_name)

    @property
    def template(self) -> ConfigurableSink:
        return self._template

    @property
    def property_name(self) -> str:
        return self._property_name

    @property
    def overridable(self) -> bool:
        return self._overridable

    def create(self, override: str) -> ConfigurableSink:
        """Return a new, activated copy of the template with *override* applied.

        Raises
        ------
        SinkCreationError
            If the copy cannot be constructed, configured or activated.
        """
        if not self._overridable:
            return self._template

        sink_type = type(self._template)
        try:
            output = sink_type()
        except Exception as exc:
            raise SinkCreationError(f"Cannot create new {sink_type.__qualname__}: {exc}") from exc

        try:
            for name, value in self._template.list_properties().items():
                if name == self._property_name or value is None:
                    continue
                output.set_property(name, _as_property_string(value))
            output.set_property(self._property_name, override)
        except PropertyError as exc:
            raise SinkCreationError(str(exc)) from exc
        except Exception as exc:
            raise SinkCreationError(
                f"Cannot configure new {sink_type.__qualname__} "
                f"with {self._property_name}={override!r}: {exc}"
            ) from exc

        layout = getattr(self._template, "layout", None)
        if layout is not None:
            output.layout = layout

        try:
            output.activate()
        except Exception as exc:
            _close_partial(output)
            raise SinkCreationError(
                f"Cannot activate new {sink_type.__qualname__} "
                f"with {self._property_name}={override!r}: {exc}"
            ) from exc

        logger.debug(
            "Created %s with %s=%r", sink_type.__qualname__, self._property_name, override
        )
        return output


def _close_partial(sink: ConfigurableSink) -> None:
    try:
        sink.close()
    except Exception:  # noqa: BLE001
        logger.warning(
            "Failed to close partially created %s", type(sink).__qualname__, exc_info=True
        )
