"""Main Typer application - imports and registers all CLI commands.

Entry point: ``dispatchlog`` (configured via pyproject.toml scripts).
"""

from __future__ import annotations

import typer

from dispatchlog.cli.commands.check import check_cmd
from dispatchlog.cli.commands.emit import emit_cmd

app = typer.Typer(
    name="dispatchlog",
    help="dispatchlog: route log events to per-context destinations.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Register subcommands
app.command(name="check", help="Validate a logging configuration file.")(check_cmd)
app.command(name="emit", help="Emit one message through a configured dispatcher.")(emit_cmd)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
