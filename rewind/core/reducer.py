"""
Reducer: pure state transition functions for app state.

Any callable (state, action) -> state works with the history engine. This
registry is a convenience for building one out of per-type handlers. It must be:
- Pure (no side effects, no I/O)
- Deterministic (same input -> same output)
"""

from typing import Any, Callable, Dict

from .actions import action_type
from .errors import InvalidTransitionError

# Handler signature: (current_state, action) -> new_state
Handler = Callable[[Any, Any], Any]


class Reducer:
    """
    Registry of action handlers forming an app reducer.

    Usage:
        reducer = Reducer(initial_state={"n": 0})
        reducer.register("INC", handle_inc)
        new_state = reducer(state, {"type": "INC"})
    """

    def __init__(self, initial_state: Any = None, strict: bool = False) -> None:
        self._handlers: Dict[str, Handler] = {}
        self.initial_state = initial_state
        self.strict = strict

    def register(self, action_type: str, handler: Handler) -> None:
        """
        Register action handler.

        Args:
            action_type: Action type string
            handler: Pure function (current_state, action) -> new_state
        """
        self._handlers[action_type] = handler

    def handles(self, type_: str) -> bool:
        return type_ in self._handlers

    def __call__(self, state: Any, action: Any) -> Any:
        """
        Apply action to state using the registered handler.

        A None state is replaced by initial_state. Unhandled action types
        return the state unchanged.

        Raises:
            InvalidTransitionError: If strict and no handler is registered
        """
        if state is None:
            state = self.initial_state

        type_ = action_type(action)
        handler = self._handlers.get(type_)
        if handler is None:
            if self.strict:
                raise InvalidTransitionError(f"No handler for action type: {type_}")
            return state
        return handler(state, action)
