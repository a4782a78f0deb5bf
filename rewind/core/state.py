"""
State model for the history log.

ComputedEntry is one replay result; LiftedState wraps the app state with the
full action log, the skip set and the replay cursor.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple

from .actions import PerformAction

ERROR_PROPAGATION_MESSAGE = "Interrupted by an error up the chain"


@dataclass(frozen=True)
class ComputedEntry:
    """
    State computed for one staged action.

    Fields:
        state: App state after the action (or the previous state on error)
        error: Stringified reducer failure, None when the reducer succeeded
    """
    state: Any
    error: Optional[str] = None


@dataclass(frozen=True)
class LiftedState:
    """
    Immutable history record.

    Fields:
        monitor_state: Opaque value owned by the monitor reducer
        actions_by_id: Action id -> recorded PerformAction (id 0 is @@INIT)
        next_action_id: Next id to assign (never reused)
        staged_action_ids: Ids in play, in dispatch order (first is always 0)
        skipped_action_ids: Ids suppressed during replay, most recent toggle first
        committed_state: Baseline state replay starts from
        current_state_index: Index of the externally visible entry
        computed_states: One entry per staged id (None before the first replay)

    Use replace() to derive a new LiftedState.
    """
    monitor_state: Any = None
    actions_by_id: Dict[int, PerformAction] = field(default_factory=dict)
    next_action_id: int = 1
    staged_action_ids: Tuple[int, ...] = (0,)
    skipped_action_ids: Tuple[int, ...] = ()
    committed_state: Any = None
    current_state_index: int = 0
    computed_states: Optional[Tuple[ComputedEntry, ...]] = None

    def replace(self, **changes: Any) -> "LiftedState":
        return replace(self, **changes)

    def current_entry(self) -> ComputedEntry:
        """Return the computed entry selected by current_state_index."""
        return self.computed_states[self.current_state_index]

    def check_invariants(self) -> List[str]:
        """
        Return a description of every violated log invariant.

        An empty list means the lifted state is structurally consistent.
        """
        problems: List[str] = []
        staged = self.staged_action_ids

        if not staged or staged[0] != 0:
            problems.append("staged_action_ids must start with id 0")
        missing = [i for i in staged if i not in self.actions_by_id]
        if missing:
            problems.append(f"staged ids missing from actions_by_id: {missing}")
        if len(set(staged)) != len(staged):
            problems.append("staged_action_ids contains duplicates")
        if self.actions_by_id and self.next_action_id <= max(self.actions_by_id):
            problems.append(
                f"next_action_id {self.next_action_id} does not exceed recorded ids"
            )
        if not 0 <= self.current_state_index < len(staged):
            problems.append(
                f"current_state_index {self.current_state_index} out of range "
                f"for {len(staged)} staged actions"
            )
        if self.computed_states is not None and len(self.computed_states) != len(staged):
            problems.append(
                f"computed_states has {len(self.computed_states)} entries "
                f"for {len(staged)} staged actions"
            )
        return problems
