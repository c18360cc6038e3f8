"""DiagnosticContext - ContextVar-backed nested and mapped diagnostic context.

The nested context is a stack of strings; its rendered form (the values
joined by single spaces) is the routing key the dispatcher uses.  The
mapped context is a flat name -> value mapping available to layouts via
``%X{name}``.

Values are stored as immutable tuples / fresh dicts so that a context copied
into a thread or task never observes later mutations from its parent.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

_ndc_stack: ContextVar[tuple[str, ...]] = ContextVar("dispatchlog_ndc", default=())
_mdc_map: ContextVar[dict[str, str] | None] = ContextVar("dispatchlog_mdc", default=None)


class DiagnosticContext:
    """Static accessors for the current diagnostic context."""

    # ------------------------------------------------------------------
    # Nested context (stack)
    # ------------------------------------------------------------------

    @staticmethod
    def push(value: str) -> None:
        _ndc_stack.set(_ndc_stack.get() + (str(value),))

    @staticmethod
    def pop() -> str | None:
        """Remove and return the innermost value, or ``None`` if empty."""
        stack = _ndc_stack.get()
        if not stack:
            return None
        _ndc_stack.set(stack[:-1])
        return stack[-1]

    @staticmethod
    def peek() -> str | None:
        stack = _ndc_stack.get()
        return stack[-1] if stack else None

    @staticmethod
    def depth() -> int:
        return len(_ndc_stack.get())

    @staticmethod
    def clear() -> None:
        _ndc_stack.set(())

    @staticmethod
    def get() -> str | None:
        """Return the rendered stack, or ``None`` when it is empty."""
        stack = _ndc_stack.get()
        return " ".join(stack) if stack else None

    @staticmethod
    @contextmanager
    def scope(value: str) -> Iterator[None]:
        """Push *value* for the duration of a ``with`` block."""
        token = _ndc_stack.set(_ndc_stack.get() + (str(value),))
        try:
            yield
        finally:
            _ndc_stack.reset(token)

    # ------------------------------------------------------------------
    # Mapped context
    # ------------------------------------------------------------------

    @staticmethod
    def put(name: str, value: str) -> None:
        mapping = dict(_mdc_map.get() or {})
        mapping[name] = str(value)
        _mdc_map.set(mapping)

    @staticmethod
    def remove(name: str) -> None:
        mapping = dict(_mdc_map.get() or {})
        mapping.pop(name, None)
        _mdc_map.set(mapping)

    @staticmethod
    def mdc() -> dict[str, str]:
        return dict(_mdc_map.get() or {})

    @staticmethod
    def clear_mdc() -> None:
        _mdc_map.set({})
