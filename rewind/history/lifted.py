"""
Lifted reducer: the history state machine.

Wraps an app reducer into a reducer over LiftedState. Meta-actions rewrite
the log; everything else is handed to the monitor reducer only.

Recompute policy:
- RESET, COMMIT, ROLLBACK, TOGGLE_ACTION, SWEEP, INIT: full replay
- PERFORM_ACTION: one new entry computed from the last one
- JUMP_TO_STATE, IMPORT_STATE, monitor actions: no replay
"""

import logging
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from ..core.actions import (
    META_ACTION_CLASSES,
    ActionTypes,
    ImportState,
    JumpToState,
    PerformAction,
    ToggleAction,
    action_type,
)
from ..core.errors import ImportValidationError, InvalidTransitionError, SnapshotError
from ..core.state import LiftedState
from ..log.records import initial_records, with_record
from ..replay.runner import compute_next_entry, recompute_states
from .snapshot import lifted_state_from_dict, meta_action_from_wire

logger = logging.getLogger(__name__)

AppReducer = Callable[[Any, Any], Any]
MonitorReducer = Callable[[Any, Any], Any]

# Transition handler: (lifted_state, meta_action) -> (next_lifted_state, recompute)
Transition = Tuple[LiftedState, bool]


def null_monitor_reducer(monitor_state: Any, action: Any) -> Any:
    """Default monitor reducer: always None."""
    return None


class LiftedReducer:
    """
    Reducer over LiftedState for one app reducer.

    Usage:
        lifted = lift_reducer_with(app_reducer, None, null_monitor_reducer)
        state = lifted(None, Init())
        state = lifted(state, creators.perform_action({"type": "INC"}))
    """

    def __init__(
        self,
        reducer: AppReducer,
        initial_committed_state: Any = None,
        monitor_reducer: Optional[MonitorReducer] = None,
        clock=None,
        strict: bool = False,
    ) -> None:
        self.reducer = reducer
        self.initial_committed_state = initial_committed_state
        self.monitor_reducer = monitor_reducer or null_monitor_reducer
        self.clock = clock
        self.strict = strict
        self._handlers: Dict[str, Callable[[LiftedState, Any], Transition]] = {
            ActionTypes.RESET: self._reset,
            ActionTypes.COMMIT: self._commit,
            ActionTypes.ROLLBACK: self._rollback,
            ActionTypes.TOGGLE_ACTION: self._toggle_action,
            ActionTypes.JUMP_TO_STATE: self._jump_to_state,
            ActionTypes.SWEEP: self._sweep,
            ActionTypes.PERFORM_ACTION: self._perform_action,
            ActionTypes.IMPORT_STATE: self._import_state,
            ActionTypes.INIT: self._init,
        }

    def initial_lifted_state(self) -> LiftedState:
        return LiftedState(
            monitor_state=self.monitor_reducer(None, {}),
            actions_by_id=initial_records(self.clock),
            next_action_id=1,
            staged_action_ids=(0,),
            skipped_action_ids=(),
            committed_state=self.initial_committed_state,
            current_state_index=0,
            computed_states=None,
        )

    def __call__(self, lifted_state: Optional[LiftedState], lifted_action: Any) -> LiftedState:
        if lifted_state is None:
            lifted_state = self.initial_lifted_state()

        lifted_action = self._decode(lifted_action)
        handler = None
        type_ = action_type(lifted_action)
        if type(lifted_action) is META_ACTION_CLASSES.get(type_):
            handler = self._handlers.get(type_)
        if handler is None:
            # A monitor action can't change history.
            next_state, should_recompute = lifted_state, False
        else:
            next_state, should_recompute = handler(lifted_state, lifted_action)
            logger.debug(
                "Applied %s (staged=%d, index=%d, recompute=%s)",
                type_,
                len(next_state.staged_action_ids),
                next_state.current_state_index,
                should_recompute,
            )

        computed_states = next_state.computed_states
        if should_recompute or computed_states is None:
            computed_states = recompute_states(
                self.reducer,
                next_state.committed_state,
                next_state.actions_by_id,
                next_state.staged_action_ids,
                next_state.skipped_action_ids,
            )

        monitor_state = self.monitor_reducer(next_state.monitor_state, lifted_action)
        return next_state.replace(monitor_state=monitor_state, computed_states=computed_states)

    def _decode(self, lifted_action: Any) -> Any:
        """Turn wire mappings of known meta-action types into dataclasses."""
        if not isinstance(lifted_action, Mapping):
            return lifted_action
        if lifted_action.get("type") not in META_ACTION_CLASSES:
            return lifted_action
        try:
            return meta_action_from_wire(lifted_action)
        except SnapshotError as exc:
            if self.strict:
                raise InvalidTransitionError(str(exc)) from exc
            logger.warning("Ignoring malformed meta-action: %s", exc)
            return lifted_action

    def _cleared_log(self, lifted: LiftedState, committed_state: Any) -> LiftedState:
        return lifted.replace(
            actions_by_id=initial_records(self.clock),
            next_action_id=1,
            staged_action_ids=(0,),
            skipped_action_ids=(),
            committed_state=committed_state,
            current_state_index=0,
        )

    def _reset(self, lifted: LiftedState, action: Any) -> Transition:
        return self._cleared_log(lifted, self.initial_committed_state), True

    def _commit(self, lifted: LiftedState, action: Any) -> Transition:
        computed = lifted.computed_states or ()
        if 0 <= lifted.current_state_index < len(computed):
            committed = computed[lifted.current_state_index].state
        else:
            committed = lifted.committed_state
        return self._cleared_log(lifted, committed), True

    def _rollback(self, lifted: LiftedState, action: Any) -> Transition:
        return self._cleared_log(lifted, lifted.committed_state), True

    def _toggle_action(self, lifted: LiftedState, action: ToggleAction) -> Transition:
        if action.id == 0:
            # The @@INIT entry anchors the log and cannot be skipped.
            if self.strict:
                raise InvalidTransitionError("Cannot toggle the @@INIT action (id 0)")
            return lifted, False
        if self.strict and action.id not in lifted.actions_by_id:
            raise InvalidTransitionError(f"Cannot toggle unknown action id: {action.id}")

        skipped = lifted.skipped_action_ids
        if action.id in skipped:
            skipped = tuple(i for i in skipped if i != action.id)
        else:
            skipped = (action.id,) + skipped
        return lifted.replace(skipped_action_ids=skipped), True

    def _jump_to_state(self, lifted: LiftedState, action: JumpToState) -> Transition:
        if self.strict and not 0 <= action.index < len(lifted.staged_action_ids):
            raise InvalidTransitionError(
                f"Cannot jump to index {action.index}: "
                f"{len(lifted.staged_action_ids)} states in history"
            )
        # History has not changed.
        return lifted.replace(current_state_index=action.index), False

    def _sweep(self, lifted: LiftedState, action: Any) -> Transition:
        skipped = set(lifted.skipped_action_ids)
        skipped.discard(0)
        staged = tuple(i for i in lifted.staged_action_ids if i not in skipped)
        return lifted.replace(
            staged_action_ids=staged,
            skipped_action_ids=(),
            current_state_index=min(lifted.current_state_index, len(staged) - 1),
        ), True

    def _perform_action(self, lifted: LiftedState, action: PerformAction) -> Transition:
        staged = lifted.staged_action_ids
        index = lifted.current_state_index
        if index == len(staged) - 1:
            # Follow the newest state while the cursor is on it.
            index += 1

        action_id = lifted.next_action_id
        actions_by_id = with_record(lifted.actions_by_id, action_id, action)
        next_state = lifted.replace(
            actions_by_id=actions_by_id,
            next_action_id=action_id + 1,
            staged_action_ids=staged + (action_id,),
            current_state_index=index,
        )

        if not lifted.computed_states:
            return next_state, True

        # The past has not changed: append one entry instead of replaying.
        previous = lifted.computed_states[-1]
        entry = compute_next_entry(self.reducer, action.action, previous.state, previous.error)
        return next_state.replace(computed_states=lifted.computed_states + (entry,)), False

    def _import_state(self, lifted: LiftedState, action: ImportState) -> Transition:
        imported = action.next_lifted_state
        try:
            if isinstance(imported, Mapping):
                imported = lifted_state_from_dict(imported)
            if not isinstance(imported, LiftedState):
                raise ImportValidationError(f"Cannot import {type(imported).__name__}")
        except (SnapshotError, ImportValidationError) as exc:
            if self.strict:
                raise ImportValidationError(str(exc)) from exc
            logger.warning("Ignoring IMPORT_STATE: %s", exc)
            return lifted, False

        if self.strict:
            problems = imported.check_invariants()
            if problems:
                raise ImportValidationError("; ".join(problems))

        # Imported states are trusted as already computed.
        return imported, False

    def _init(self, lifted: LiftedState, action: Any) -> Transition:
        # Recompute on init and on reducer hot reload.
        return lifted, True


def lift_reducer_with(
    reducer: AppReducer,
    initial_committed_state: Any = None,
    monitor_reducer: Optional[MonitorReducer] = None,
    clock=None,
    strict: bool = False,
) -> LiftedReducer:
    """Create a history reducer from an app reducer."""
    return LiftedReducer(
        reducer,
        initial_committed_state=initial_committed_state,
        monitor_reducer=monitor_reducer,
        clock=clock,
        strict=strict,
    )
