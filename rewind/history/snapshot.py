"""
Wire format for meta-actions and lifted-state export.

Meta-actions travel as mappings with a `type` discriminant and their exact
documented fields:

    PERFORM_ACTION{action, timestamp}   RESET{timestamp}
    ROLLBACK{timestamp}                 COMMIT{timestamp}
    SWEEP{}                             TOGGLE_ACTION{id}
    JUMP_TO_STATE{index}                IMPORT_STATE{nextLiftedState}

Exports are canonical JSON so the same log always produces the same bytes.
"""

import hashlib
import json
from typing import Any, Dict, Mapping

from ..core.actions import (
    ActionTypes,
    Commit,
    ImportState,
    Init,
    JumpToState,
    MetaAction,
    PerformAction,
    Reset,
    Rollback,
    Sweep,
    ToggleAction,
)
from ..core.canonical import canonical_json_bytes, canonical_json_str
from ..core.errors import SnapshotError
from ..core.state import ComputedEntry, LiftedState


def meta_action_to_wire(action: MetaAction) -> Dict[str, Any]:
    """Encode a meta-action as its wire mapping."""
    if isinstance(action, PerformAction):
        return {"type": action.type, "action": action.action, "timestamp": action.timestamp}
    if isinstance(action, (Reset, Rollback, Commit)):
        return {"type": action.type, "timestamp": action.timestamp}
    if isinstance(action, (Sweep, Init)):
        return {"type": action.type}
    if isinstance(action, ToggleAction):
        return {"type": action.type, "id": action.id}
    if isinstance(action, JumpToState):
        return {"type": action.type, "index": action.index}
    if isinstance(action, ImportState):
        payload = action.next_lifted_state
        if isinstance(payload, LiftedState):
            payload = lifted_state_to_dict(payload)
        return {"type": action.type, "nextLiftedState": payload}
    raise SnapshotError(f"Not a meta-action: {action!r}")


def meta_action_from_wire(data: Mapping[str, Any]) -> MetaAction:
    """
    Decode a wire mapping into a meta-action.

    Raises:
        SnapshotError: If the type is unknown or a field is missing
    """
    type_ = data.get("type")
    try:
        if type_ == ActionTypes.PERFORM_ACTION:
            return PerformAction(action=data["action"], timestamp=data["timestamp"])
        if type_ == ActionTypes.RESET:
            return Reset(timestamp=data["timestamp"])
        if type_ == ActionTypes.ROLLBACK:
            return Rollback(timestamp=data["timestamp"])
        if type_ == ActionTypes.COMMIT:
            return Commit(timestamp=data["timestamp"])
        if type_ == ActionTypes.SWEEP:
            return Sweep()
        if type_ == ActionTypes.TOGGLE_ACTION:
            return ToggleAction(id=data["id"])
        if type_ == ActionTypes.JUMP_TO_STATE:
            return JumpToState(index=data["index"])
        if type_ == ActionTypes.IMPORT_STATE:
            payload = data["nextLiftedState"]
            if isinstance(payload, Mapping):
                payload = lifted_state_from_dict(payload)
            return ImportState(next_lifted_state=payload)
        if type_ == ActionTypes.INIT:
            return Init()
    except KeyError as exc:
        raise SnapshotError(f"{type_} is missing field {exc.args[0]!r}") from exc
    raise SnapshotError(f"Unknown meta-action type: {type_!r}")


def lifted_state_to_dict(lifted: LiftedState) -> Dict[str, Any]:
    """Encode a lifted state using the wire field names."""
    computed = None
    if lifted.computed_states is not None:
        computed = []
        for entry in lifted.computed_states:
            item = {"state": entry.state}
            if entry.error is not None:
                item["error"] = entry.error
            computed.append(item)

    return {
        "monitorState": lifted.monitor_state,
        "actionsById": {
            str(action_id): meta_action_to_wire(record)
            for action_id, record in lifted.actions_by_id.items()
        },
        "nextActionId": lifted.next_action_id,
        "stagedActionIds": list(lifted.staged_action_ids),
        "skippedActionIds": list(lifted.skipped_action_ids),
        "committedState": lifted.committed_state,
        "currentStateIndex": lifted.current_state_index,
        "computedStates": computed,
    }


def lifted_state_from_dict(data: Mapping[str, Any]) -> LiftedState:
    """
    Decode a lifted state from its wire mapping.

    Structure is decoded, not validated: see LiftedState.check_invariants().

    Raises:
        SnapshotError: If a field is missing or has the wrong shape
    """
    try:
        actions_by_id = {}
        for key, record in data["actionsById"].items():
            decoded = meta_action_from_wire(record)
            if not isinstance(decoded, PerformAction):
                raise SnapshotError(f"Record {key} is not a PERFORM_ACTION")
            actions_by_id[int(key)] = decoded

        computed = data.get("computedStates")
        if computed is not None:
            computed = tuple(
                ComputedEntry(state=item.get("state"), error=item.get("error"))
                for item in computed
            )

        return LiftedState(
            monitor_state=data.get("monitorState"),
            actions_by_id=actions_by_id,
            next_action_id=int(data["nextActionId"]),
            staged_action_ids=tuple(int(i) for i in data["stagedActionIds"]),
            skipped_action_ids=tuple(int(i) for i in data.get("skippedActionIds", ())),
            committed_state=data.get("committedState"),
            current_state_index=int(data["currentStateIndex"]),
            computed_states=computed,
        )
    except KeyError as exc:
        raise SnapshotError(f"Lifted state is missing field {exc.args[0]!r}") from exc
    except (TypeError, ValueError, AttributeError) as exc:
        raise SnapshotError(f"Malformed lifted state: {exc}") from exc


def export_json(lifted: LiftedState) -> str:
    """Serialize a lifted state to canonical JSON."""
    return canonical_json_str(lifted_state_to_dict(lifted))


def import_json(raw: str) -> LiftedState:
    """
    Parse a lifted state exported by export_json().

    Raises:
        SnapshotError: If the text is not valid JSON or not a lifted state
    """
    try:
        data = json.loads(raw)
    except ValueError as exc:
        raise SnapshotError(f"Invalid JSON: {exc}") from exc
    if not isinstance(data, Mapping):
        raise SnapshotError("Lifted state export must be a JSON object")
    return lifted_state_from_dict(data)


def compute_log_hash(lifted: LiftedState) -> str:
    """
    SHA-256 of the canonical export.

    Two lifted states with the same hash replay identically.
    """
    return hashlib.sha256(canonical_json_bytes(lifted_state_to_dict(lifted))).hexdigest()
