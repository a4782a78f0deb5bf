#!/usr/bin/env python3
"""
Rewind CLI - inspect and replay action histories

Main entrypoint for the rewind command-line tool.
"""

import typer
from rich.console import Console
from rich.table import Table

from rewind.cli.commands import log, replay
from rewind.logging_config import setup_logging

app = typer.Typer(
    name="rewind",
    help="Time-travel action history for reducers",
    add_completion=False,
)

console = Console()

app.add_typer(log.app, name="log", help="Exported log operations")
app.command(name="replay")(replay.replay_command)


@app.callback()
def _configure() -> None:
    setup_logging()


@app.command()
def version():
    """Show version information."""
    from rewind import __version__

    table = Table(show_header=False, box=None)
    table.add_row("[bold]Rewind[/bold]", f"v{__version__}")
    table.add_row("Meta-actions", "8")

    console.print(table)


def main():
    """Main entrypoint."""
    app()


if __name__ == "__main__":
    main()
