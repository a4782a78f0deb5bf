"""
Action record store: id -> recorded PerformAction.

Ids are assigned strictly increasing and never reused. Records are only ever
discarded wholesale (RESET/COMMIT/ROLLBACK start a fresh map holding id 0).
"""

from typing import Dict

from ..core.actions import INIT_ACTION, PerformAction, lift_action

ActionsById = Dict[int, PerformAction]


def initial_records(clock=None) -> ActionsById:
    """Fresh record map containing only the synthetic @@INIT action under id 0."""
    return {0: lift_action(INIT_ACTION, clock)}


def with_record(records: ActionsById, action_id: int, lifted_action: PerformAction) -> ActionsById:
    """
    Return a copy of records with one record added.

    The input map is left untouched, so every earlier LiftedState keeps
    exactly the records it was built with.
    """
    new_records = dict(records)
    new_records[action_id] = lifted_action
    return new_records
