"""
Core history primitives.

This module provides:
- Meta-actions: the closed set of log-rewriting actions and their creators
- State: ComputedEntry and LiftedState
- Reducer: handler registry for app reducers
- Canonical: deterministic serialization
- Clock: timestamp sources
"""

from .actions import (
    ActionTypes,
    ActionCreators,
    INIT_ACTION,
    MetaAction,
    PerformAction,
    Reset,
    Rollback,
    Commit,
    Sweep,
    ToggleAction,
    JumpToState,
    ImportState,
    Init,
    action_type,
    lift_action,
)
from .state import ComputedEntry, LiftedState, ERROR_PROPAGATION_MESSAGE
from .reducer import Reducer
from .canonical import canonicalize, canonical_json_bytes, canonical_json_str
from .clock import SystemClock, ManualClock
from .errors import (
    RewindError,
    InvalidTransitionError,
    ImportValidationError,
    StoreError,
    SnapshotError,
)

__all__ = [
    "ActionTypes",
    "ActionCreators",
    "INIT_ACTION",
    "MetaAction",
    "PerformAction",
    "Reset",
    "Rollback",
    "Commit",
    "Sweep",
    "ToggleAction",
    "JumpToState",
    "ImportState",
    "Init",
    "action_type",
    "lift_action",
    "ComputedEntry",
    "LiftedState",
    "ERROR_PROPAGATION_MESSAGE",
    "Reducer",
    "canonicalize",
    "canonical_json_bytes",
    "canonical_json_str",
    "SystemClock",
    "ManualClock",
    "RewindError",
    "InvalidTransitionError",
    "ImportValidationError",
    "StoreError",
    "SnapshotError",
]
