"""
Plain store: holds one state value and runs one reducer.

The history engine only needs this contract (dispatch, get_state, subscribe,
replace_reducer). MemoryStore is the in-process implementation.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional

from ..core.actions import Init
from ..core.errors import StoreError

logger = logging.getLogger(__name__)

Listener = Callable[[], None]
Unsubscribe = Callable[[], None]


class PlainStore(ABC):
    """
    Abstract store interface.

    All implementations must guarantee:
    - dispatch runs the reducer to completion before returning
    - listeners are notified after every dispatch
    - replace_reducer dispatches the initialization signal
    """

    @abstractmethod
    def dispatch(self, action: Any) -> Any:
        """
        Run the reducer on action and notify listeners.

        Returns:
            The dispatched action
        """
        ...

    @abstractmethod
    def get_state(self) -> Any:
        ...

    @abstractmethod
    def subscribe(self, listener: Listener) -> Unsubscribe:
        """
        Register a change listener.

        Returns:
            Callable that removes the listener
        """
        ...

    @abstractmethod
    def replace_reducer(self, next_reducer: Callable[[Any, Any], Any]) -> None:
        ...


class MemoryStore(PlainStore):
    """In-memory synchronous store."""

    def __init__(self, reducer: Callable[[Any, Any], Any], preloaded_state: Any = None) -> None:
        self._reducer = reducer
        self._state = preloaded_state
        self._listeners: List[Listener] = []
        self._dispatching = False
        self.dispatch(Init())

    def dispatch(self, action: Any) -> Any:
        if self._dispatching:
            raise StoreError("Reducers may not dispatch actions")

        self._dispatching = True
        try:
            self._state = self._reducer(self._state, action)
        finally:
            self._dispatching = False

        for listener in list(self._listeners):
            listener()
        return action

    def get_state(self) -> Any:
        return self._state

    def subscribe(self, listener: Listener) -> Unsubscribe:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def replace_reducer(self, next_reducer: Callable[[Any, Any], Any]) -> None:
        logger.debug("Replacing reducer")
        self._reducer = next_reducer
        self.dispatch(Init())


def create_store(
    reducer: Callable[[Any, Any], Any],
    preloaded_state: Any = None,
    enhancer: Optional[Callable] = None,
):
    """
    Create a store, optionally through an enhancer such as instrument().

    Example:
        store = create_store(counter, None, instrument())
    """
    if enhancer is not None:
        return enhancer(create_store)(reducer, preloaded_state)
    return MemoryStore(reducer, preloaded_state)
