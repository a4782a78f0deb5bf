"""
Replay command: run an action file through a reducer with history
"""

import json
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.syntax import Syntax

from rewind.cli.loader import load_object
from rewind.cli.render import log_table, print_summary
from rewind.core import ActionCreators, RewindError
from rewind.history import export_json
from rewind.logging_config import get_logger
from rewind.query import summarize
from rewind.store import create_store, instrument

console = Console()


def read_actions(path: str) -> List[dict]:
    """Read one JSON app action per non-empty line."""
    actions = []
    with open(path, "r") as f:
        for lineno, line in enumerate(f, start=1):
            if not line.strip():
                continue
            try:
                actions.append(json.loads(line))
            except ValueError as exc:
                raise RewindError(f"{path}:{lineno}: invalid JSON: {exc}") from exc
    return actions


def replay_command(
    actions_path: str = typer.Argument(..., help="JSONL file, one app action per line"),
    reducer_ref: str = typer.Option(..., "--reducer", "-r", help="App reducer as module:attr"),
    initial: Optional[str] = typer.Option(None, "--initial", "-i", help="Initial state as JSON"),
    skip: List[int] = typer.Option([], "--skip", help="Action id to skip (repeatable)"),
    jump: Optional[int] = typer.Option(None, "--jump", "-j", help="Select state at this index"),
    show_state: bool = typer.Option(False, "--show-state", "-s", help="Show state per entry"),
    export: Optional[str] = typer.Option(None, "--export", "-o", help="Write lifted state JSON here"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Replay an action file through a reducer and show the history log.

    Examples:
        rewind replay actions.jsonl --reducer myapp.reducers:counter
        rewind replay actions.jsonl -r myapp.reducers:counter --skip 2 --jump 1
        rewind replay actions.jsonl -r myapp.reducers:counter --json
    """
    logger = get_logger(__name__, trace_id=actions_path)
    try:
        reducer = load_object(reducer_ref)
        initial_state = json.loads(initial) if initial is not None else None
        actions = read_actions(actions_path)
        logger.debug("Loaded %d actions", len(actions))

        store = create_store(reducer, initial_state, instrument(strict=True))
        creators = ActionCreators()
        for action in actions:
            store.dispatch(action)
        for action_id in skip:
            store.dispatch_lifted(creators.toggle_action(action_id))
        if jump is not None:
            store.dispatch_lifted(creators.jump_to_state(jump))

        lifted = store.get_lifted_state()

        if export:
            Path(export).write_text(export_json(lifted))

        if json_output:
            output = {
                "success": True,
                "actions_replayed": len(actions),
                "summary": summarize(lifted),
                "state": store.get_state(),
            }
            print(json.dumps(output, indent=2, default=str))
        else:
            console.print(f"[green]✓ Replayed {len(actions)} actions[/green]")
            print_summary(console, lifted)
            console.print(log_table(lifted, title=f"History: {actions_path}", show_state=show_state))
            console.print("\n[bold]Selected State:[/bold]")
            syntax = Syntax(json.dumps(store.get_state(), indent=2, default=str), "json", theme="monokai")
            console.print(syntax)
            if export:
                console.print(f"Exported lifted state to [cyan]{export}[/cyan]")

        raise typer.Exit(0)

    except FileNotFoundError:
        if json_output:
            print(json.dumps({"error": "Action file not found", "path": actions_path}))
        else:
            console.print(f"[red]Error: Action file not found:[/red] {actions_path}")
        raise typer.Exit(2)
    except (RewindError, ValueError) as e:
        if json_output:
            print(json.dumps({"error": str(e)}))
        else:
            console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(2)
