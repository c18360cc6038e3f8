"""``dispatchlog emit`` - send one message through a configured dispatcher.

Useful to see where a given diagnostic context ends up before wiring the
configuration into an application.
"""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console

from dispatchlog.config import settings
from dispatchlog.configurator import configure_logging, load_config, unconfigure_logging
from dispatchlog.core.context import DiagnosticContext
from dispatchlog.models.events import Level
from dispatchlog.routing.errors import ConfigurationError

console = Console()


def emit_cmd(
    message: str = typer.Argument(..., help="Message to log."),
    config_path: Path = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file (.toml or .json). Defaults to DISPATCHLOG_CONFIG_PATH.",
    ),
    context: list[str] = typer.Option(
        None,
        "--context",
        "-x",
        help="Diagnostic context value to push (repeatable).",
    ),
    level: Level = typer.Option(Level.INFO, "--level", "-l", help="Event level."),
    logger_name: str = typer.Option(
        None, "--logger", help="Logger to emit through (default: first configured)."
    ),
) -> None:
    """Emit one message under the given diagnostic context."""
    path = config_path or settings.config_path
    try:
        config = load_config(path)
        handler = configure_logging(config)
    except FileNotFoundError:
        console.print(f"[red]Configuration file not found:[/red] {path}")
        raise typer.Exit(code=1)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(code=1)

    pushed = 0
    try:
        for value in context or []:
            DiagnosticContext.push(value)
            pushed += 1
        target = logger_name or (config.loggers or [""])[0]
        logging.getLogger(target or None).log(level.numeric, message)
        dispatcher = handler.sink
        destinations = dispatcher.destinations.keys()
    finally:
        for _ in range(pushed):
            DiagnosticContext.pop()
        unconfigure_logging(handler, config)

    key = " ".join(context or [])
    if key and key in destinations:
        console.print(f"[green]Sent[/green] to destination for context [bold]{key}[/bold]")
    else:
        console.print("[green]Sent[/green] to the template sink")
