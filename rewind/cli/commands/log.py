"""
Exported log commands: show, verify, replay
"""

import json
from pathlib import Path

import typer
from rich.console import Console

from rewind.cli.loader import load_object
from rewind.cli.render import log_table, print_summary
from rewind.core import SnapshotError
from rewind.logging_config import get_logger
from rewind.history import compute_log_hash, import_json
from rewind.query import staged_actions, summarize
from rewind.replay import replay as replay_log

app = typer.Typer()
console = Console()


def _load(path: str, json_output: bool):
    try:
        return import_json(Path(path).read_text())
    except FileNotFoundError:
        if json_output:
            print(json.dumps({"error": "Export file not found", "path": path}))
        else:
            console.print(f"[red]Error: Export file not found:[/red] {path}")
        raise typer.Exit(2)
    except SnapshotError as e:
        if json_output:
            print(json.dumps({"error": str(e), "path": path}))
        else:
            console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(2)


@app.command()
def show(
    path: str = typer.Argument(..., help="Exported lifted state (JSON)"),
    show_state: bool = typer.Option(False, "--show-state", "-s", help="Show state per entry"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Show the staged actions of an exported lifted state.

    Examples:
        rewind log show session.json
        rewind log show session.json --show-state
    """
    lifted = _load(path, json_output)

    if json_output:
        rows = staged_actions(lifted)
        if not show_state:
            for row in rows:
                row.pop("state")
        output = {
            "summary": summarize(lifted),
            "log_hash": compute_log_hash(lifted),
            "actions": rows,
        }
        print(json.dumps(output, indent=2, default=str))
        raise typer.Exit(0)

    print_summary(console, lifted)
    console.print(f"  Log hash: [yellow]{compute_log_hash(lifted)}[/yellow]")
    if lifted.computed_states is None:
        console.print("[yellow]No computed states in export[/yellow]")
    console.print(log_table(lifted, title=f"Exported log: {path}", show_state=show_state))


@app.command()
def verify(
    path: str = typer.Argument(..., help="Exported lifted state (JSON)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Check an exported lifted state against the log invariants.

    Exit code 0 when consistent, 1 when invariants are violated.
    """
    lifted = _load(path, json_output)
    problems = lifted.check_invariants()

    if json_output:
        print(json.dumps({"valid": not problems, "problems": problems}, indent=2))
    elif problems:
        console.print(f"[red]✗ {len(problems)} invariant violation(s):[/red]")
        for problem in problems:
            console.print(f"  - {problem}")
    else:
        console.print("[green]✓ Lifted state is consistent[/green]")

    raise typer.Exit(1 if problems else 0)


@app.command("replay")
def replay_export(
    path: str = typer.Argument(..., help="Exported lifted state (JSON)"),
    reducer_ref: str = typer.Option(..., "--reducer", "-r", help="App reducer as module:attr"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Recompute an exported log with a reducer and compare against the export.

    Exit code 0 when every recomputed state matches, 1 when some differ.

    Examples:
        rewind log replay session.json --reducer myapp.reducers:counter
    """
    logger = get_logger(__name__, trace_id=path)
    lifted = _load(path, json_output)
    try:
        reducer = load_object(reducer_ref)
    except ValueError as e:
        if json_output:
            print(json.dumps({"error": str(e)}))
        else:
            console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(2)

    logger.debug("Replaying %d staged actions", len(lifted.staged_action_ids))
    result = replay_log(
        reducer,
        lifted.committed_state,
        lifted.actions_by_id,
        lifted.staged_action_ids,
        lifted.skipped_action_ids,
    )

    exported = lifted.computed_states or ()
    diverged = [
        index for index, entry in enumerate(result.computed_states)
        if index >= len(exported) or exported[index] != entry
    ]
    if diverged:
        logger.warning("Replay diverges from export at %d entries", len(diverged))

    if json_output:
        output = {
            "applied": result.applied,
            "skipped": result.skipped,
            "errored": result.errored,
            "final_state": result.final_state,
            "diverged_indexes": diverged,
        }
        print(json.dumps(output, indent=2, default=str))
    else:
        console.print(
            f"Applied [green]{result.applied}[/green], "
            f"skipped [yellow]{result.skipped}[/yellow], "
            f"errored [red]{result.errored}[/red]"
        )
        if diverged:
            console.print(f"[red]✗ Recomputed states differ at indexes {diverged}[/red]")
        else:
            console.print("[green]✓ Recomputed states match the export[/green]")

    raise typer.Exit(1 if diverged else 0)
