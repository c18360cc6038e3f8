"""Dispatcher lifecycle and cache policy models."""

from __future__ import annotations

from enum import Enum


class RouterState(str, Enum):
    """Lifecycle of a DispatcherSink."""

    UNCONFIGURED = "unconfigured"
    ACTIVE = "active"
    CLOSED = "closed"


# Valid state transitions - enforced by DispatcherSink.
# CLOSED is terminal.
VALID_TRANSITIONS: dict[RouterState, set[RouterState]] = {
    RouterState.UNCONFIGURED: {RouterState.ACTIVE, RouterState.CLOSED},
    RouterState.ACTIVE: {RouterState.CLOSED},
    RouterState.CLOSED: set(),
}


class CachePolicy(str, Enum):
    """How concurrent first lookups for the same routing key are resolved.

    * ``single_flight`` - at most one destination is ever built per key;
      concurrent callers wait for it.
    * ``first_writer_wins`` - every racing caller builds a candidate, the
      first one installed wins and the losers are closed.
    """

    SINGLE_FLIGHT = "single_flight"
    FIRST_WRITER_WINS = "first_writer_wins"
