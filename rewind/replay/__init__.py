"""
Replay system for computed-state reconstruction.

Replay applies the app reducer to the staged actions to rebuild the log.
Must be 100% deterministic: same actions -> same computed states.
"""

from .runner import ReplayResult, compute_next_entry, recompute_states, replay

__all__ = [
    "ReplayResult",
    "compute_next_entry",
    "recompute_states",
    "replay",
]
