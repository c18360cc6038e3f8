"""``dispatchlog check`` - validate a logging configuration file.

Builds and activates the dispatcher described by the file, then shows the
template sink's configuration properties and whether the override
property can be set on copies.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from dispatchlog.config import settings
from dispatchlog.configurator import build_dispatcher, load_config
from dispatchlog.core.layout import substitute_vars
from dispatchlog.routing.errors import ConfigurationError

console = Console()


def check_cmd(
    config_path: Path = typer.Argument(
        None,
        help="Configuration file (.toml or .json). Defaults to DISPATCHLOG_CONFIG_PATH.",
    ),
) -> None:
    """Validate a configuration and describe its dispatcher."""
    path = config_path or settings.config_path
    try:
        config = load_config(path)
        dispatcher = build_dispatcher(config.dispatcher)
    except FileNotFoundError:
        console.print(f"[red]Configuration file not found:[/red] {path}")
        raise typer.Exit(code=1)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(code=1)

    try:
        template = dispatcher.all_sinks[0]
        property_name = substitute_vars(
            dispatcher.property_name or "", settings.substitution_variables()
        )
        list_properties = getattr(template, "list_properties", None)
        values = list_properties() if callable(list_properties) else {}
        writable = template.property_names() if hasattr(template, "property_names") else set()

        table = Table(title=f"Template sink: {template.sink_name}")
        table.add_column("Property", style="cyan")
        table.add_column("Value")
        table.add_column("Override", justify="center")
        for name in sorted(writable):
            marker = "[green]Yes[/green]" if name == property_name else ""
            value = getattr(values.get(name), "value", values.get(name))
            table.add_row(name, "" if value is None else str(value), marker)
        console.print(table)

        if property_name in writable:
            pattern = getattr(dispatcher.layout, "pattern", repr(dispatcher.layout))
            console.print(
                f"[green]OK[/green] events with a context are routed by "
                f"[bold]{property_name}[/bold] = {pattern!r}"
            )
        else:
            console.print(
                f"[yellow]Warning[/yellow] {type(template).__name__} has no writable "
                f"property {property_name!r}; all events will go to the template"
            )
    finally:
        dispatcher.close()
        dispatcher.close_destinations()
