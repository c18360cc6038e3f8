"""dispatchlog CLI - Typer-based command-line interface.

Provides the ``dispatchlog`` command with subcommands for checking a
logging configuration and emitting test events through it.

All output uses Rich for formatted terminal display.
"""
