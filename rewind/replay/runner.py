"""
Replay runner: recompute the computed-state log from the recorded actions.

Replay is pure: it reads its inputs, never mutates them, and keeps no cache
between calls.
"""

import logging
import traceback
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence, Tuple

from ..core.actions import PerformAction
from ..core.state import ERROR_PROPAGATION_MESSAGE, ComputedEntry

logger = logging.getLogger(__name__)

AppReducer = Callable[[Any, Any], Any]


def format_error(exc: BaseException) -> str:
    """Stringify a reducer failure as "ExcType: message"."""
    return "".join(traceback.format_exception_only(type(exc), exc)).strip()


def compute_next_entry(
    reducer: AppReducer,
    action: Any,
    state: Any,
    error: Optional[str],
) -> ComputedEntry:
    """
    Compute the entry that follows (state, error) for one action.

    A previous error is propagated without calling the reducer. A reducer
    exception is caught and recorded; the previous state is kept.
    """
    if error:
        return ComputedEntry(state=state, error=ERROR_PROPAGATION_MESSAGE)

    try:
        next_state = reducer(state, action)
    except Exception as exc:
        logger.error("Reducer failed on action %r", action, exc_info=True)
        return ComputedEntry(state=state, error=format_error(exc))

    return ComputedEntry(state=next_state)


def recompute_states(
    reducer: AppReducer,
    committed_state: Any,
    actions_by_id: Mapping[int, PerformAction],
    staged_action_ids: Sequence[int],
    skipped_action_ids: Iterable[int],
) -> Tuple[ComputedEntry, ...]:
    """
    Run the reducer over every staged action.

    Args:
        reducer: App reducer
        committed_state: Baseline state before the first staged action
        actions_by_id: Recorded actions
        staged_action_ids: Ids to replay, in order
        skipped_action_ids: Ids whose entry repeats the previous entry

    Returns:
        One ComputedEntry per staged id
    """
    skipped = frozenset(skipped_action_ids)
    computed = []
    previous = ComputedEntry(state=committed_state)

    for i, action_id in enumerate(staged_action_ids):
        if action_id in skipped:
            # Same object as the previous entry: the action has no effect.
            entry = previous if i > 0 else ComputedEntry(state=committed_state)
        else:
            action = actions_by_id[action_id].action
            entry = compute_next_entry(reducer, action, previous.state, previous.error)
        computed.append(entry)
        previous = entry

    return tuple(computed)


@dataclass(frozen=True)
class ReplayResult:
    """
    Result of a full replay.

    Fields:
        computed_states: One entry per staged action
        applied: Entries whose reducer call succeeded
        skipped: Entries suppressed by the skip set
        errored: Entries carrying an error (own or propagated)
    """
    computed_states: Tuple[ComputedEntry, ...]
    applied: int
    skipped: int
    errored: int

    @property
    def final_state(self) -> Any:
        return self.computed_states[-1].state if self.computed_states else None


def replay(
    reducer: AppReducer,
    committed_state: Any,
    actions_by_id: Mapping[int, PerformAction],
    staged_action_ids: Sequence[int],
    skipped_action_ids: Iterable[int] = (),
) -> ReplayResult:
    """Recompute states and count what happened to each staged action."""
    skipped = frozenset(skipped_action_ids)
    computed = recompute_states(
        reducer, committed_state, actions_by_id, staged_action_ids, skipped
    )

    n_skipped = sum(1 for i in staged_action_ids if i in skipped)
    n_errored = sum(1 for e in computed if e.error is not None)
    n_applied = sum(
        1 for i, e in zip(staged_action_ids, computed) if i not in skipped and e.error is None
    )

    return ReplayResult(
        computed_states=computed,
        applied=n_applied,
        skipped=n_skipped,
        errored=n_errored,
    )
