"""
Read-only query helpers over a lifted state.
"""

from typing import Any, Dict, List, Optional

from .core.actions import action_type
from .core.state import ERROR_PROPAGATION_MESSAGE, LiftedState


def current_state(lifted: LiftedState) -> Any:
    return lifted.current_entry().state


def is_live(lifted: LiftedState) -> bool:
    """True when the cursor is on the newest entry, so new actions are followed."""
    return lifted.current_state_index == len(lifted.staged_action_ids) - 1


def staged_actions(lifted: LiftedState) -> List[Dict[str, Any]]:
    """
    One row per staged action, in log order.

    Row keys: index, id, type, timestamp, skipped, error, state
    """
    skipped = set(lifted.skipped_action_ids)
    computed = lifted.computed_states or ()
    rows = []
    for index, action_id in enumerate(lifted.staged_action_ids):
        record = lifted.actions_by_id.get(action_id)
        entry = computed[index] if index < len(computed) else None
        rows.append({
            "index": index,
            "id": action_id,
            "type": action_type(record.action) if record is not None else None,
            "timestamp": record.timestamp if record is not None else None,
            "skipped": action_id in skipped,
            "error": entry.error if entry is not None else None,
            "state": entry.state if entry is not None else None,
        })
    return rows


def error_entries(lifted: LiftedState, include_propagated: bool = False) -> List[Dict[str, Any]]:
    """
    Entries whose reducer call failed.

    Propagated errors ("Interrupted by an error up the chain") are left out
    unless include_propagated is set.
    """
    return [
        row for row in staged_actions(lifted)
        if row["error"] is not None
        and (include_propagated or row["error"] != ERROR_PROPAGATION_MESSAGE)
    ]


def first_error_index(lifted: LiftedState) -> Optional[int]:
    for index, entry in enumerate(lifted.computed_states or ()):
        if entry.error is not None:
            return index
    return None


def summarize(lifted: LiftedState) -> Dict[str, Any]:
    """Counts and cursor position, suitable for JSON output."""
    computed = lifted.computed_states or ()
    return {
        "staged": len(lifted.staged_action_ids),
        "skipped": len(lifted.skipped_action_ids),
        "recorded": len(lifted.actions_by_id),
        "next_action_id": lifted.next_action_id,
        "current_state_index": lifted.current_state_index,
        "live": is_live(lifted),
        "errors": sum(1 for e in computed if e.error is not None),
        "first_error_index": first_error_index(lifted),
    }
