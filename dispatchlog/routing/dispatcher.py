"""DispatcherSink - routes each event to a per-context copy of a template sink.

Clients attach one template sink, a layout, and the name of a property of
the template to override.  At runtime they push a value onto the
diagnostic context (ideally popping it in a ``finally`` block, or using
``DiagnosticContext.scope``).  For each distinct context value the
dispatcher copies the template once, setting the named property to the
layout's rendering of the event, and sends every later event with that
context to the same copy.  Events without a context go to the template.

Usage
-----
>>> template = FileSink()
>>> template.path = "logs/default.log"
>>> template.layout = PatternLayout("%5p: %m%n")
>>> template.activate()
>>> dispatcher = DispatcherSink()
>>> dispatcher.add_sink(template)
>>> dispatcher.property_name = "path"
>>> dispatcher.layout = PatternLayout("logs/%x.log")
>>> dispatcher.activate()

Events logged under ``DiagnosticContext.scope("alice")`` then land in
``logs/alice.log``; everything else in ``logs/default.log``.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from typing import cast

from dispatchlog.core.layout import Layout, substitute_vars
from dispatchlog.models.events import LogEvent
from dispatchlog.models.routing import VALID_TRANSITIONS, CachePolicy, RouterState
from dispatchlog.routing.cache import DestinationCache
from dispatchlog.routing.copier import SinkCopier, is_default_constructible
from dispatchlog.routing.errors import (
    ConfigurationError,
    InvalidStateError,
    SinkCreationError,
)
from dispatchlog.routing.sinks import BaseSink, ConfigurableSink

logger = logging.getLogger(__name__)


class DispatcherSink:
    """A sink that dispatches to one destination per diagnostic-context value.

    Parameters
    ----------
    name:
        Name reported as ``sink_name``.
    cache_policy:
        How concurrent first events for a new context value are resolved.
    variables:
        Extra ``${NAME}`` values for substitution, consulted before the
        process environment.
    """

    requires_layout = True

    def __init__(
        self,
        name: str = "dispatcher",
        cache_policy: CachePolicy = CachePolicy.SINGLE_FLIGHT,
        variables: Mapping[str, str] | None = None,
    ) -> None:
        self._name = name
        self._variables = dict(variables) if variables else None
        self._state = RouterState.UNCONFIGURED
        self._template: BaseSink | None = None
        self._layout: Layout | None = None
        self._property_name: str | None = None
        self._destinations: DestinationCache[BaseSink] = DestinationCache(cache_policy)
        self._copier: SinkCopier | None = None
        self._copier_lock = threading.Lock()

    @property
    def sink_name(self) -> str:
        return self._name

    @property
    def state(self) -> RouterState:
        return self._state

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @property
    def property_name(self) -> str | None:
        """Name of the template property overridden on each copy (e.g. ``"path"``).

        Mandatory, with no default.
        """
        return self._property_name

    @property_name.setter
    def property_name(self, value: str | None) -> None:
        self._require_unconfigured("set property_name")
        self._property_name = value

    @property
    def layout(self) -> Layout | None:
        """Layout rendering the override value from an event.  Mandatory."""
        return self._layout

    @layout.setter
    def layout(self, value: Layout | None) -> None:
        self._require_unconfigured("set layout")
        self._layout = value

    def add_sink(self, sink: BaseSink) -> None:
        """Attach the template sink.  Only one may be attached."""
        if self._template is not None:
            raise ConfigurationError(
                "A template sink was already attached to "
                f"{self._name!r}; only one is allowed"
            )
        self._require_unconfigured("attach a sink")
        self._template = sink
        logger.info("Attached template sink %s to %s", sink.sink_name, self._name)

    @property
    def all_sinks(self) -> list[BaseSink]:
        """The attached template as a 0- or 1-element list.

        Per-key copies are never listed here; see :attr:`destinations`.
        """
        return [] if self._template is None else [self._template]

    def get_sink(self, name: str) -> BaseSink | None:
        if self._template is not None and self._template.sink_name == name:
            return self._template
        return None

    def is_attached(self, sink: BaseSink) -> bool:
        return sink is self._template

    def remove_sink(self, sink: BaseSink | str) -> None:
        self._require_unconfigured("remove a sink")
        if self._template is None:
            return
        if sink is self._template or sink == self._template.sink_name:
            self._template = None

    def remove_all_sinks(self) -> None:
        self._require_unconfigured("remove sinks")
        self._template = None

    @property
    def destinations(self) -> DestinationCache[BaseSink]:
        """The per-key destination cache (read-only use)."""
        return self._destinations

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def activate(self) -> None:
        """Check mandatory settings and start accepting events.

        Raises
        ------
        ConfigurationError
            Naming the first missing requirement: layout, property name,
            or template sink.  The dispatcher stays unconfigured.
        """
        self._require_unconfigured("activate")
        if self._layout is None:
            raise ConfigurationError(f"{self._name!r} requires a layout")
        if not self._property_name:
            raise ConfigurationError(
                f"{self._name!r} requires a property_name (e.g. 'path')"
            )
        if self._template is None:
            raise ConfigurationError(
                f"{self._name!r} requires a template sink (use add_sink())"
            )
        if not is_default_constructible(type(self._template)):
            raise ConfigurationError(
                f"Template sink type {type(self._template).__qualname__} "
                "cannot be constructed without arguments"
            )
        self._transition(RouterState.ACTIVE)
        logger.info(
            "Dispatcher %s active (property=%s, layout=%r)",
            self._name,
            self._property_name,
            self._layout,
        )

    def close(self) -> None:
        """Stop accepting events.  Idempotent.

        The dispatcher holds no resources of its own; see
        :meth:`close_destinations` for the template and its copies.
        """
        if self._state is not RouterState.CLOSED:
            self._transition(RouterState.CLOSED)

    def close_destinations(self) -> None:
        """Close every per-key copy and then the template."""
        self._destinations.close_all(keep=self._template)
        close = getattr(self._template, "close", None)
        if callable(close):
            close()

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def accept(self, event: LogEvent) -> None:
        """Deliver *event* to the destination for its context.

        Errors raised by the destination itself propagate to the caller.
        If the destination cannot be created the event is dropped and the
        failure logged.
        """
        destination = self.resolve(event)
        if destination is not None:
            destination.accept(event)

    def resolve(self, event: LogEvent) -> BaseSink | None:
        """Return the sink *event* would be delivered to.

        ``None`` means the event has no usable destination and is dropped.
        """
        if self._state is not RouterState.ACTIVE:
            raise InvalidStateError(
                f"Dispatcher {self._name!r} is {self._state.value}, not active"
            )
        template = self._template
        if template is None:
            raise InvalidStateError(f"Dispatcher {self._name!r} has no template sink")
        key = event.ndc
        if not key:
            return template

        copier = self._get_copier()
        if not copier.overridable:
            return template

        try:
            return self._destinations.resolve(
                key, lambda _key: copier.create(self._destination_value(event))
            )
        except SinkCreationError as exc:
            logger.error(
                "Dropping event for context %r on %s: %s", key, self._name, exc
            )
            return None

    def _destination_value(self, event: LogEvent) -> str:
        layout = cast(Layout, self._layout)
        return substitute_vars(layout.format(event), self._variables)

    def _get_copier(self) -> SinkCopier:
        copier = self._copier
        if copier is None:
            with self._copier_lock:
                if self._copier is None:
                    self._copier = SinkCopier(
                        cast(ConfigurableSink, self._template),
                        substitute_vars(cast(str, self._property_name), self._variables),
                    )
                copier = self._copier
        return copier

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def _transition(self, target: RouterState) -> None:
        allowed = VALID_TRANSITIONS.get(self._state, set())
        if target not in allowed:
            raise InvalidStateError(
                f"Cannot transition {self._name!r} from {self._state.value} "
                f"to {target.value}"
            )
        self._state = target

    def _require_unconfigured(self, action: str) -> None:
        if self._state is not RouterState.UNCONFIGURED:
            raise InvalidStateError(
                f"Cannot {action} on {self._name!r}: dispatcher is {self._state.value}"
            )
