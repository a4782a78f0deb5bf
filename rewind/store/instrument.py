"""
Projection layer: the app's view into a store running the lifted reducer.

instrument() is a store enhancer. The returned store looks like a plain
store to the app (dispatch/get_state/subscribe/replace_reducer) while the
underlying lifted store records every action.
"""

import logging
from typing import Any, Callable, Optional

from ..config import Settings
from ..core.actions import MetaAction, lift_action
from ..core.state import LiftedState
from ..history.lifted import LiftedReducer, MonitorReducer, lift_reducer_with
from .base import Listener, PlainStore, Unsubscribe

logger = logging.getLogger(__name__)


def unlift_state(lifted_state: LiftedState) -> Any:
    """
    Return the app state selected by the lifted state's cursor.

    A cursor outside the computed states (negative included) selects nothing
    and yields None.
    """
    computed = lifted_state.computed_states or ()
    index = lifted_state.current_state_index
    if not 0 <= index < len(computed):
        return None
    return computed[index].state


class InstrumentedStore:
    """
    App-facing store backed by a lifted store.

    Fields:
        lifted_store: Underlying plain store holding the LiftedState
    """

    def __init__(
        self,
        lifted_store: PlainStore,
        lift_reducer: Callable[[Callable[[Any, Any], Any]], LiftedReducer],
        clock=None,
    ) -> None:
        self.lifted_store = lifted_store
        self._lift_reducer = lift_reducer
        self._clock = clock
        self._last_defined_state: Any = None

    def dispatch(self, action: Any) -> Any:
        """Record action in the history and return it unchanged."""
        self.lifted_store.dispatch(lift_action(action, self._clock))
        return action

    def dispatch_lifted(self, meta_action: MetaAction) -> MetaAction:
        """Send a meta-action (RESET, JUMP_TO_STATE, ...) straight to the lifted store."""
        return self.lifted_store.dispatch(meta_action)

    def get_state(self) -> Any:
        """
        Return the selected app state.

        Once a non-None state has been seen, None is never returned: the last
        non-None state stands in for it.
        """
        lifted = self.lifted_store.get_state()
        state = unlift_state(lifted) if lifted is not None else None
        if state is not None:
            self._last_defined_state = state
        return self._last_defined_state

    def get_lifted_state(self) -> LiftedState:
        return self.lifted_store.get_state()

    def subscribe(self, listener: Listener) -> Unsubscribe:
        return self.lifted_store.subscribe(listener)

    def replace_reducer(self, next_reducer: Callable[[Any, Any], Any]) -> None:
        """Swap the app reducer and replay the whole log through it."""
        self.lifted_store.replace_reducer(self._lift_reducer(next_reducer))


def instrument(
    monitor_reducer: Optional[MonitorReducer] = None,
    clock=None,
    strict: Optional[bool] = None,
):
    """
    History store enhancer.

    Args:
        monitor_reducer: (monitor_state, meta_action) -> monitor_state
        clock: Timestamp source for lifted actions (wall clock by default)
        strict: Validate JUMP/TOGGLE/IMPORT (default from REWIND_STRICT)

    Returns:
        enhancer(create_store) -> create(reducer, initial_state=None)
    """
    if strict is None:
        strict = Settings.from_env().strict

    def enhancer(create_store):
        def create(reducer, initial_state=None):
            def lift_reducer(r):
                return lift_reducer_with(r, initial_state, monitor_reducer, clock, strict)

            logger.debug("Creating instrumented store (strict=%s)", strict)
            lifted_store = create_store(lift_reducer(reducer))
            return InstrumentedStore(lifted_store, lift_reducer, clock)

        return create

    return enhancer
