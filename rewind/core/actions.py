"""
Meta-actions: the closed set of actions that operate on the history log.

Every app action is wrapped in PerformAction before it reaches the lifted
reducer. The other variants rewrite the log itself. Each variant carries
exactly its documented wire fields.
"""

from dataclasses import dataclass
from typing import Any, ClassVar, Mapping, Optional, Union

from .clock import DEFAULT_CLOCK


class ActionTypes:
    PERFORM_ACTION = "PERFORM_ACTION"
    RESET = "RESET"
    ROLLBACK = "ROLLBACK"
    COMMIT = "COMMIT"
    SWEEP = "SWEEP"
    TOGGLE_ACTION = "TOGGLE_ACTION"
    JUMP_TO_STATE = "JUMP_TO_STATE"
    IMPORT_STATE = "IMPORT_STATE"
    # Initialization signal sent by the plain store on creation and reducer swap.
    INIT = "@@rewind/INIT"


# Synthetic action recorded under id 0 of every log.
INIT_ACTION = {"type": "@@INIT"}


@dataclass(frozen=True)
class PerformAction:
    """An app action as recorded in the log."""
    type: ClassVar[str] = ActionTypes.PERFORM_ACTION
    action: Any
    timestamp: int


@dataclass(frozen=True)
class Reset:
    type: ClassVar[str] = ActionTypes.RESET
    timestamp: int


@dataclass(frozen=True)
class Rollback:
    type: ClassVar[str] = ActionTypes.ROLLBACK
    timestamp: int


@dataclass(frozen=True)
class Commit:
    type: ClassVar[str] = ActionTypes.COMMIT
    timestamp: int


@dataclass(frozen=True)
class Sweep:
    type: ClassVar[str] = ActionTypes.SWEEP


@dataclass(frozen=True)
class ToggleAction:
    type: ClassVar[str] = ActionTypes.TOGGLE_ACTION
    id: int


@dataclass(frozen=True)
class JumpToState:
    type: ClassVar[str] = ActionTypes.JUMP_TO_STATE
    index: int


@dataclass(frozen=True)
class ImportState:
    """Replace the whole lifted state (payload is a LiftedState)."""
    type: ClassVar[str] = ActionTypes.IMPORT_STATE
    next_lifted_state: Any


@dataclass(frozen=True)
class Init:
    type: ClassVar[str] = ActionTypes.INIT


MetaAction = Union[
    PerformAction, Reset, Rollback, Commit, Sweep, ToggleAction, JumpToState, ImportState, Init
]

META_ACTION_CLASSES = {
    cls.type: cls
    for cls in (
        PerformAction, Reset, Rollback, Commit, Sweep, ToggleAction, JumpToState, ImportState, Init
    )
}


def action_type(action: Any) -> Optional[str]:
    """
    Return the type discriminant of an app or meta action.

    Accepts mappings ({"type": ...}) and objects with a `type` attribute.
    """
    if isinstance(action, Mapping):
        return action.get("type")
    return getattr(action, "type", None)


class ActionCreators:
    """
    Factory for meta-actions.

    Usage:
        creators = ActionCreators()
        store.dispatch_lifted(creators.jump_to_state(3))
    """

    def __init__(self, clock=None) -> None:
        self.clock = clock or DEFAULT_CLOCK

    def perform_action(self, action: Any) -> PerformAction:
        return PerformAction(action=action, timestamp=self.clock.now())

    def reset(self) -> Reset:
        return Reset(timestamp=self.clock.now())

    def rollback(self) -> Rollback:
        return Rollback(timestamp=self.clock.now())

    def commit(self) -> Commit:
        return Commit(timestamp=self.clock.now())

    def sweep(self) -> Sweep:
        return Sweep()

    def toggle_action(self, id: int) -> ToggleAction:
        return ToggleAction(id=id)

    def jump_to_state(self, index: int) -> JumpToState:
        return JumpToState(index=index)

    def import_state(self, next_lifted_state: Any) -> ImportState:
        return ImportState(next_lifted_state=next_lifted_state)


def lift_action(action: Any, clock=None) -> PerformAction:
    """Lift an app action into a PERFORM_ACTION meta-action."""
    return ActionCreators(clock).perform_action(action)
