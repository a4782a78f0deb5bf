"""
Rich rendering shared by CLI commands.
"""

import json

from rich.console import Console
from rich.table import Table

from rewind.core.state import LiftedState
from rewind.query import staged_actions, summarize


def log_table(lifted: LiftedState, title: str, show_state: bool = False) -> Table:
    table = Table(title=title)
    table.add_column("Index", style="cyan", justify="right")
    table.add_column("Id", style="cyan", justify="right")
    table.add_column("Type", style="green")
    table.add_column("Status")
    if show_state:
        table.add_column("State", style="dim")

    for row in staged_actions(lifted):
        if row["error"]:
            status = f"[red]{row['error']}[/red]"
        elif row["skipped"]:
            status = "[yellow]skipped[/yellow]"
        else:
            status = "[green]ok[/green]"

        index = str(row["index"])
        if row["index"] == lifted.current_state_index:
            index = f"[bold]> {index}[/bold]"

        cells = [index, str(row["id"]), str(row["type"]), status]
        if show_state:
            cells.append(json.dumps(row["state"], default=str))
        table.add_row(*cells)
    return table


def print_summary(console: Console, lifted: LiftedState) -> None:
    info = summarize(lifted)
    console.print(f"  Staged actions: [cyan]{info['staged']}[/cyan]")
    console.print(f"  Skipped actions: [cyan]{info['skipped']}[/cyan]")
    console.print(f"  Current index: [cyan]{info['current_state_index']}[/cyan]"
                  + (" (live)" if info["live"] else ""))
    if info["errors"]:
        console.print(
            f"  [red]Errors: {info['errors']} (first at index {info['first_error_index']})[/red]"
        )
