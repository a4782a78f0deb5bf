"""
History state machine and its wire format.

This module provides:
- LiftedReducer / lift_reducer_with: meta-action driven history reducer
- snapshot: meta-action wire codec and lifted-state export/import
"""

from .lifted import LiftedReducer, lift_reducer_with, null_monitor_reducer
from .snapshot import (
    meta_action_to_wire,
    meta_action_from_wire,
    lifted_state_to_dict,
    lifted_state_from_dict,
    export_json,
    import_json,
    compute_log_hash,
)

__all__ = [
    "LiftedReducer",
    "lift_reducer_with",
    "null_monitor_reducer",
    "meta_action_to_wire",
    "meta_action_from_wire",
    "lifted_state_to_dict",
    "lifted_state_from_dict",
    "export_json",
    "import_json",
    "compute_log_hash",
]
