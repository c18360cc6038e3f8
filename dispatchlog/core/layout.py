"""Pattern layouts and ``${NAME}`` variable substitution.

A layout turns a :class:`LogEvent` into a string.  Sinks use one to render
the lines they write; the dispatcher uses one to turn an event's diagnostic
context into the value of the property it overrides on each cloned sink
(for instance ``"logs/%x.log"`` -> ``"logs/alice.log"``).

Conversion characters
---------------------
======  ==================================================
``%x``  nested diagnostic context (empty when unset)
``%X``  mapped context entry, ``%X{name}``
``%p``  level name
``%c``  logger name, ``%c{1}`` keeps the last component
``%m``  message
``%t``  thread name
``%d``  timestamp, ISO 8601 or ``%d{strftime format}``
``%n``  newline
``%%``  a literal ``%``
======  ==================================================

An optional width may precede the character: ``%5p`` pads on the left,
``%-5p`` pads on the right.
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from typing import Protocol, runtime_checkable

from dispatchlog.models.events import LogEvent

_CONVERSION = re.compile(r"%(-?\d+)?([a-zA-Z%])(?:\{([^}]*)\})?")
_VARIABLE = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")


@runtime_checkable
class Layout(Protocol):
    """Anything that can format an event into a string."""

    def format(self, event: LogEvent) -> str:
        ...


def substitute_vars(text: str, variables: Mapping[str, str] | None = None) -> str:
    """Expand ``${NAME}`` tokens in *text*.

    Names are looked up in *variables* first, then in the process
    environment.  ``${NAME:-fallback}`` yields ``fallback`` when the name is
    undefined; an undefined name without a fallback expands to ``""``.

    Examples
    --------
    >>> substitute_vars("${APP}/logs", {"APP": "billing"})
    'billing/logs'
    >>> substitute_vars("${MISSING:-none}")
    'none'
    """

    def _replace(match: re.Match[str]) -> str:
        name, fallback = match.group(1), match.group(2)
        if variables is not None and name in variables:
            return str(variables[name])
        if name in os.environ:
            return os.environ[name]
        return fallback if fallback is not None else ""

    return _VARIABLE.sub(_replace, text)


class PatternLayout:
    """Formats events according to a conversion pattern.

    Parameters
    ----------
    pattern:
        The conversion pattern, e.g. ``"%5p [%x] %c{1}: %m%n"``.
    """

    def __init__(self, pattern: str = "%m%n") -> None:
        self._pattern = pattern

    @property
    def pattern(self) -> str:
        return self._pattern

    def __repr__(self) -> str:
        return f"PatternLayout({self._pattern!r})"

    def format(self, event: LogEvent) -> str:
        return _CONVERSION.sub(
            lambda match: self._convert(match, event), self._pattern
        )

    # ------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------

    def _convert(self, match: re.Match[str], event: LogEvent) -> str:
        width, char, option = match.group(1), match.group(2), match.group(3)

        if char == "%":
            value = "%"
        elif char == "n":
            value = "\n"
        elif char == "x":
            value = event.ndc or ""
        elif char == "X":
            value = event.mdc.get(option or "", "")
        elif char == "p":
            value = event.level.value
        elif char == "c":
            value = _abbreviate(event.logger_name, option)
        elif char == "m":
            value = event.message
        elif char == "t":
            value = event.thread_name
        elif char == "d":
            value = (
                event.timestamp_utc.strftime(option)
                if option
                else event.timestamp_utc.isoformat()
            )
        else:
            # Unknown conversions are emitted verbatim.
            return match.group(0)

        if width:
            size = int(width)
            value = value.ljust(-size) if size < 0 else value.rjust(size)
        return value


def _abbreviate(logger_name: str, option: str | None) -> str:
    if not option or not option.isdigit():
        return logger_name
    keep = int(option)
    if keep <= 0:
        return logger_name
    return ".".join(logger_name.split(".")[-keep:])
