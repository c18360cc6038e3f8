"""DestinationCache - maps routing keys to long-lived destination sinks.

Entries are created on first use and never replaced or removed.  How
concurrent first lookups for one key are resolved depends on the
:class:`~dispatchlog.models.routing.CachePolicy`:

* ``SINGLE_FLIGHT`` builds under a per-key lock, so exactly one
  destination is ever constructed for a key.  Other keys are not blocked
  while it is built.
* ``FIRST_WRITER_WINS`` builds without locking and installs with
  insert-if-absent.  Losing candidates are closed and discarded; their
  callers receive the winning destination.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Generic, TypeVar

from dispatchlog.models.routing import CachePolicy

logger = logging.getLogger(__name__)

S = TypeVar("S")


class DestinationCache(Generic[S]):
    """Thread-safe, grow-only ``key -> sink`` map."""

    def __init__(self, policy: CachePolicy = CachePolicy.SINGLE_FLIGHT) -> None:
        self._policy = policy
        self._entries: dict[str, S] = {}
        self._lock = threading.Lock()
        # Per-key construction locks (SINGLE_FLIGHT only).
        self._building: dict[str, threading.Lock] = {}

    @property
    def policy(self) -> CachePolicy:
        return self._policy

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve(self, key: str, factory: Callable[[str], S]) -> S:
        """Return the sink for *key*, building it with *factory* on a miss.

        Exceptions from *factory* propagate and leave no entry behind, so a
        later call for the same key will try again.
        """
        existing = self._entries.get(key)
        if existing is not None:
            return existing
        if self._policy is CachePolicy.SINGLE_FLIGHT:
            return self._resolve_single_flight(key, factory)
        return self._resolve_first_writer(key, factory)

    def _resolve_single_flight(self, key: str, factory: Callable[[str], S]) -> S:
        with self._lock:
            existing = self._entries.get(key)
            if existing is not None:
                return existing
            key_lock = self._building.setdefault(key, threading.Lock())

        with key_lock:
            try:
                existing = self._entries.get(key)
                if existing is not None:
                    return existing
                created = factory(key)
                with self._lock:
                    winner = self._entries.setdefault(key, created)
            finally:
                with self._lock:
                    if self._building.get(key) is key_lock:
                        del self._building[key]
        if winner is not created:
            # A retry after a failed build raced a fresh lock for this key.
            _close_quietly(created, winner)
            return winner
        logger.debug("Installed destination for key %r", key)
        return created

    def _resolve_first_writer(self, key: str, factory: Callable[[str], S]) -> S:
        candidate = factory(key)
        with self._lock:
            winner = self._entries.setdefault(key, candidate)
        if winner is not candidate:
            logger.debug("Discarding losing destination candidate for key %r", key)
            _close_quietly(candidate, winner)
        return winner

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    def get(self, key: str) -> S | None:
        return self._entries.get(key)

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._entries)

    def snapshot(self) -> dict[str, S]:
        with self._lock:
            return dict(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close_all(self, keep: object = None) -> None:
        """Close every cached sink except *keep* (typically the template).

        Entries stay in the map; closing is the surrounding lifecycle's
        concern, not eviction.
        """
        closed: set[int] = set()
        for sink in self.snapshot().values():
            if sink is keep or id(sink) in closed:
                continue
            closed.add(id(sink))
            close = getattr(sink, "close", None)
            if callable(close):
                close()


def _close_quietly(candidate: object, winner: object) -> None:
    # A factory may hand out one shared instance; never close the winner.
    if candidate is winner:
        return
    close = getattr(candidate, "close", None)
    if not callable(close):
        return
    try:
        close()
    except Exception:  # noqa: BLE001
        logger.exception("Failed to close discarded destination candidate")
