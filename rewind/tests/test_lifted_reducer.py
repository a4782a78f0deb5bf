"""
Tests for the history state machine.

Each meta-action is applied to a lifted reducer directly, without a store.
"""

import pytest

from rewind.core import (
    ActionCreators,
    ERROR_PROPAGATION_MESSAGE,
    INIT_ACTION,
    ImportState,
    Init,
    InvalidTransitionError,
    ImportValidationError,
    JumpToState,
    LiftedState,
    ToggleAction,
)
from rewind.core.clock import ManualClock
from rewind.history import lift_reducer_with
from rewind.replay import recompute_states
from rewind.tests.reducers import counter, type_counting_monitor


@pytest.fixture
def creators():
    return ActionCreators(ManualClock())


def _run(lifted_reducer, state, *actions):
    for action in actions:
        state = lifted_reducer(state, action)
    return state


def _states(lifted):
    return [e.state for e in lifted.computed_states]


def test_initial_lifted_state():
    """Init produces the one-entry log holding @@INIT under id 0."""
    lifted = lift_reducer_with(counter)(None, Init())

    assert lifted.staged_action_ids == (0,)
    assert lifted.actions_by_id[0].action == INIT_ACTION
    assert lifted.next_action_id == 1
    assert lifted.skipped_action_ids == ()
    assert lifted.current_state_index == 0
    assert _states(lifted) == [0]


def test_perform_action_appends_and_follows(creators):
    """New actions get fresh ids and the live cursor follows them."""
    r = lift_reducer_with(counter)
    lifted = _run(r, None, Init(), creators.perform_action({"type": "INC"}),
                  creators.perform_action({"type": "INC"}))

    assert lifted.staged_action_ids == (0, 1, 2)
    assert lifted.next_action_id == 3
    assert lifted.current_state_index == 2
    assert _states(lifted) == [0, 1, 2]


def test_perform_action_keeps_cursor_when_not_live(creators):
    """A cursor pointing into the past stays where it is."""
    r = lift_reducer_with(counter)
    lifted = _run(r, None, Init(),
                  creators.perform_action({"type": "INC"}),
                  creators.perform_action({"type": "INC"}),
                  creators.jump_to_state(1),
                  creators.perform_action({"type": "INC"}))

    assert lifted.current_state_index == 1
    assert lifted.staged_action_ids == (0, 1, 2, 3)
    assert _states(lifted) == [0, 1, 2, 3]


def test_perform_action_is_incremental(creators):
    """Appending calls the reducer once, not once per staged action."""
    calls = []

    def spy(state, action):
        calls.append(action)
        return counter(state, action)

    r = lift_reducer_with(spy)
    lifted = _run(r, None, Init(), *[creators.perform_action({"type": "INC"}) for _ in range(5)])
    calls.clear()

    r(lifted, creators.perform_action({"type": "INC"}))

    assert calls == [{"type": "INC"}]


def test_incremental_append_equals_full_replay(creators):
    """The appended log equals a from-scratch replay of the same actions."""
    r = lift_reducer_with(counter, 10)
    actions = [creators.perform_action({"type": "ADD", "by": n}) for n in (3, -1, 7, 2)]
    lifted = _run(r, None, Init(), *actions)

    full = recompute_states(
        counter, 10, lifted.actions_by_id, lifted.staged_action_ids, lifted.skipped_action_ids
    )

    assert lifted.computed_states == full
    assert lifted.computed_states[-1].state == 10 + 3 - 1 + 7 + 2


def test_jump_to_state_is_idempotent(creators):
    """Jumping twice to the same index changes nothing and keeps computed states."""
    r = lift_reducer_with(counter)
    lifted = _run(r, None, Init(), creators.perform_action({"type": "INC"}),
                  creators.perform_action({"type": "INC"}))

    once = r(lifted, JumpToState(1))
    twice = r(once, JumpToState(1))

    assert once == twice
    assert twice.computed_states is lifted.computed_states
    assert twice.current_state_index == 1


def test_toggle_action_skips_and_restores(creators):
    """Toggling an action off removes its effect; toggling it back restores it."""
    r = lift_reducer_with(counter)
    lifted = _run(r, None, Init(),
                  creators.perform_action({"type": "ADD", "by": 1}),
                  creators.perform_action({"type": "ADD", "by": 10}),
                  creators.perform_action({"type": "ADD", "by": 100}))
    original = _states(lifted)

    skipped = r(lifted, ToggleAction(2))
    assert skipped.skipped_action_ids == (2,)
    assert skipped.computed_states[2].state == skipped.computed_states[1].state
    assert _states(skipped) == [0, 1, 1, 101]

    restored = r(skipped, ToggleAction(2))
    assert restored.skipped_action_ids == ()
    assert _states(restored) == original


def test_toggle_action_inserts_at_front(creators):
    """The most recently skipped id comes first."""
    r = lift_reducer_with(counter)
    lifted = _run(r, None, Init(), *[creators.perform_action({"type": "INC"}) for _ in range(3)])

    lifted = _run(r, lifted, ToggleAction(1), ToggleAction(3))

    assert lifted.skipped_action_ids == (3, 1)


def test_error_containment(creators):
    """A throwing reducer marks its entry and every later one, keeping the last good state."""
    r = lift_reducer_with(counter)
    lifted = _run(r, None, Init(),
                  creators.perform_action({"type": "INC"}),
                  creators.perform_action({"type": "BOOM"}),
                  creators.perform_action({"type": "INC"}))

    good, failed, after = lifted.computed_states[1:]
    assert good.error is None and good.state == 1
    assert failed.error == "ValueError: boom"
    assert failed.state == good.state
    assert after.error == ERROR_PROPAGATION_MESSAGE
    assert after.state == good.state


def test_earlier_history_survives_errors(creators):
    """Entries computed before a failure are untouched by it."""
    r = lift_reducer_with(counter)
    before = _run(r, None, Init(), creators.perform_action({"type": "INC"}))
    after = r(before, creators.perform_action({"type": "BOOM"}))

    assert after.computed_states[:2] == before.computed_states


def test_commit_folds_selected_state(creators):
    """COMMIT makes the selected state the new baseline and clears the log."""
    r = lift_reducer_with(counter)
    lifted = _run(r, None, Init(),
                  creators.perform_action({"type": "INC"}),
                  creators.perform_action({"type": "INC"}),
                  creators.perform_action({"type": "INC"}),
                  creators.jump_to_state(2))

    committed = r(lifted, creators.commit())

    assert committed.committed_state == 2
    assert committed.staged_action_ids == (0,)
    assert list(committed.actions_by_id) == [0]
    assert committed.actions_by_id[0].action == INIT_ACTION
    assert committed.next_action_id == 1
    assert committed.current_state_index == 0
    assert _states(committed) == [2]


def test_rollback_cannot_undo_commit(creators):
    """After COMMIT, ROLLBACK returns to the committed state, not before it."""
    r = lift_reducer_with(counter)
    lifted = _run(r, None, Init(),
                  creators.perform_action({"type": "INC"}),
                  creators.perform_action({"type": "INC"}),
                  creators.commit(),
                  creators.perform_action({"type": "INC"}),
                  creators.rollback())

    assert lifted.committed_state == 2
    assert lifted.staged_action_ids == (0,)
    assert _states(lifted) == [2]


def test_rollback_discards_staged_actions(creators):
    """ROLLBACK drops staged actions and keeps the committed state."""
    r = lift_reducer_with(counter, 5)
    lifted = _run(r, None, Init(),
                  creators.perform_action({"type": "INC"}),
                  creators.perform_action({"type": "INC"}),
                  creators.rollback())

    assert lifted.committed_state == 5
    assert lifted.staged_action_ids == (0,)
    assert _states(lifted) == [5]


def test_reset_restores_initial_committed_state(creators):
    """RESET goes back to the reducer's original initial state, even past commits."""
    r = lift_reducer_with(counter, 5)
    lifted = _run(r, None, Init(),
                  creators.perform_action({"type": "INC"}),
                  creators.commit(),
                  creators.perform_action({"type": "INC"}),
                  creators.toggle_action(1),
                  creators.reset())

    assert lifted.committed_state == 5
    assert lifted.staged_action_ids == (0,)
    assert lifted.skipped_action_ids == ()
    assert lifted.next_action_id == 1
    assert _states(lifted) == [5]


def test_ids_are_never_reused_after_sweep(creators):
    """Swept ids stay recorded and new actions get fresh ids."""
    r = lift_reducer_with(counter)
    lifted = _run(r, None, Init(),
                  creators.perform_action({"type": "INC"}),
                  creators.perform_action({"type": "INC"}),
                  creators.toggle_action(2),
                  creators.sweep(),
                  creators.perform_action({"type": "INC"}))

    assert lifted.staged_action_ids == (0, 1, 3)
    assert 2 in lifted.actions_by_id
    assert lifted.next_action_id == 4


def test_sweep_drops_skipped_and_clamps_cursor(creators):
    """SWEEP compacts the log and clamps the cursor to the new length."""
    r = lift_reducer_with(counter)
    lifted = _run(r, None, Init(),
                  creators.perform_action({"type": "ADD", "by": 1}),
                  creators.perform_action({"type": "ADD", "by": 10}),
                  creators.perform_action({"type": "ADD", "by": 100}),
                  creators.toggle_action(2))
    assert lifted.current_state_index == 3

    swept = r(lifted, creators.sweep())

    assert swept.staged_action_ids == (0, 1, 3)
    assert swept.skipped_action_ids == ()
    assert swept.current_state_index == 2
    assert _states(swept) == [0, 1, 101]


def test_import_state_replaces_everything(creators):
    """IMPORT_STATE installs the payload as-is without replaying."""
    source = _run(lift_reducer_with(counter), None, Init(),
                  creators.perform_action({"type": "INC"}),
                  creators.perform_action({"type": "INC"}))

    calls = []

    def spy(state, action):
        calls.append(action)
        return counter(state, action)

    r = lift_reducer_with(spy)
    target = r(None, Init())
    calls.clear()

    imported = r(target, ImportState(source))

    assert calls == []
    assert imported == source


def test_import_state_without_computed_states_replays(creators):
    """An import lacking computed states is replayed so the log is usable."""
    source = _run(lift_reducer_with(counter), None, Init(),
                  creators.perform_action({"type": "INC"}))
    bare = source.replace(computed_states=None)

    imported = lift_reducer_with(counter)(None, ImportState(bare))

    assert _states(imported) == [0, 1]


def test_init_signal_recomputes_with_new_reducer(creators):
    """Re-running Init through a new lifted reducer replays the whole log."""
    lifted = _run(lift_reducer_with(counter), None, Init(),
                  creators.perform_action({"type": "INC"}),
                  creators.perform_action({"type": "INC"}))

    def tripling(state, action):
        state = 0 if state is None else state
        return state + 3 if action.get("type") == "INC" else state

    reloaded = lift_reducer_with(tripling)(lifted, Init())

    assert _states(reloaded) == [0, 3, 6]


def test_unknown_action_goes_to_monitor_only(creators):
    """Actions outside the meta-action set leave history alone."""
    r = lift_reducer_with(counter, monitor_reducer=type_counting_monitor)
    lifted = _run(r, None, Init(), creators.perform_action({"type": "INC"}))

    after = r(lifted, {"type": "MONITOR_SCROLL", "top": 40})

    assert after.computed_states is lifted.computed_states
    assert after.staged_action_ids == lifted.staged_action_ids
    assert after.monitor_state["MONITOR_SCROLL"] == 1


def test_monitor_sees_every_meta_action(creators):
    """The monitor reducer runs once per lifted action, whatever its branch."""
    r = lift_reducer_with(counter, monitor_reducer=type_counting_monitor)
    lifted = _run(r, None, Init(),
                  creators.perform_action({"type": "INC"}),
                  creators.jump_to_state(0),
                  creators.toggle_action(1),
                  creators.sweep(),
                  creators.commit())

    assert lifted.monitor_state == {
        "@@rewind/INIT": 1,
        "PERFORM_ACTION": 1,
        "JUMP_TO_STATE": 1,
        "TOGGLE_ACTION": 1,
        "SWEEP": 1,
        "COMMIT": 1,
    }


def test_wire_meta_actions_are_decoded(creators):
    """Meta-actions may arrive as wire mappings."""
    r = lift_reducer_with(counter)
    lifted = _run(r, None, Init(),
                  {"type": "PERFORM_ACTION", "action": {"type": "INC"}, "timestamp": 1},
                  {"type": "PERFORM_ACTION", "action": {"type": "INC"}, "timestamp": 2},
                  {"type": "JUMP_TO_STATE", "index": 1})

    assert _states(lifted) == [0, 1, 2]
    assert lifted.current_state_index == 1
    assert lifted.actions_by_id[2].timestamp == 2


def test_malformed_wire_meta_action_is_ignored():
    """A known type with missing fields is treated as a monitor action."""
    r = lift_reducer_with(counter)
    lifted = r(None, Init())

    after = r(lifted, {"type": "TOGGLE_ACTION"})

    assert after == lifted


def test_permissive_mode_does_not_validate(creators):
    """Out-of-range jumps and unknown toggles are accepted as given."""
    r = lift_reducer_with(counter)
    lifted = r(None, Init())

    jumped = r(lifted, creators.jump_to_state(99))
    toggled = r(lifted, creators.toggle_action(42))

    assert jumped.current_state_index == 99
    assert toggled.skipped_action_ids == (42,)
    assert _states(toggled) == [0]


def test_strict_mode_rejects_bad_jump(creators):
    r = lift_reducer_with(counter, strict=True)
    lifted = r(None, Init())

    with pytest.raises(InvalidTransitionError):
        r(lifted, creators.jump_to_state(1))
    with pytest.raises(InvalidTransitionError):
        r(lifted, creators.jump_to_state(-1))


def test_strict_mode_rejects_unknown_toggle(creators):
    r = lift_reducer_with(counter, strict=True)
    lifted = r(None, Init())

    with pytest.raises(InvalidTransitionError):
        r(lifted, creators.toggle_action(7))


def test_strict_mode_rejects_inconsistent_import():
    """Imports violating the log invariants raise ImportValidationError."""
    r = lift_reducer_with(counter, strict=True)
    lifted = r(None, Init())
    broken = lifted.replace(staged_action_ids=(0, 5), current_state_index=3)

    with pytest.raises(ImportValidationError) as excinfo:
        r(lifted, ImportState(broken))

    assert "missing from actions_by_id" in str(excinfo.value)
    assert "out of range" in str(excinfo.value)


def test_strict_mode_rejects_malformed_wire_action():
    r = lift_reducer_with(counter, strict=True)
    lifted = r(None, Init())

    with pytest.raises(InvalidTransitionError):
        r(lifted, {"type": "JUMP_TO_STATE"})


def test_permissive_import_of_non_state_is_ignored():
    r = lift_reducer_with(counter)
    lifted = r(None, Init())

    assert r(lifted, ImportState("not a lifted state")) == lifted


def test_lifted_state_defaults_are_consistent():
    """A default LiftedState with its records filled in has no violations."""
    lifted = lift_reducer_with(counter)(None, Init())

    assert lifted.check_invariants() == []
    assert LiftedState().check_invariants() == ["staged ids missing from actions_by_id: [0]"]


def test_branching_from_one_state_keeps_logs_separate(creators):
    """Two actions performed from the same lifted state each keep their own record."""
    r = lift_reducer_with(counter)
    base = r(None, Init())

    incremented = r(base, creators.perform_action({"type": "INC"}))
    added = r(base, creators.perform_action({"type": "ADD", "by": 10}))

    assert incremented.actions_by_id[1].action == {"type": "INC"}
    assert added.actions_by_id[1].action == {"type": "ADD", "by": 10}
    full = recompute_states(
        counter, None, incremented.actions_by_id, incremented.staged_action_ids, ()
    )
    assert full[-1].state == 1
    assert _states(added) == [0, 10]


def test_perform_action_leaves_earlier_records_untouched(creators):
    """Earlier lifted states never see records added after them."""
    r = lift_reducer_with(counter)
    base = r(None, Init())

    r(base, creators.perform_action({"type": "INC"}))

    assert sorted(base.actions_by_id) == [0]


def test_toggle_init_action_is_ignored(creators):
    """Id 0 cannot be skipped, so SWEEP keeps the log anchored on it."""
    r = lift_reducer_with(counter)
    lifted = _run(r, None, Init(), creators.perform_action({"type": "INC"}))

    toggled = r(lifted, creators.toggle_action(0))
    swept = r(toggled, creators.sweep())

    assert toggled.skipped_action_ids == ()
    assert swept.staged_action_ids == (0, 1)
    assert swept.check_invariants() == []


def test_actions_after_toggling_init_on_bare_log(creators):
    """TOGGLE(0) then SWEEP on a one-entry log leaves it usable."""
    r = lift_reducer_with(counter)
    lifted = _run(r, None, Init(), creators.toggle_action(0), creators.sweep(),
                  creators.perform_action({"type": "INC"}))

    assert lifted.staged_action_ids == (0, 1)
    assert lifted.current_state_index == 1
    assert _states(lifted) == [0, 1]


def test_sweep_keeps_init_even_if_imported_as_skipped(creators):
    """An imported skip set naming id 0 does not let SWEEP drop it."""
    r = lift_reducer_with(counter)
    lifted = _run(r, None, Init(), creators.perform_action({"type": "INC"}))
    imported = r(lifted, ImportState(lifted.replace(skipped_action_ids=(0,))))

    swept = r(imported, creators.sweep())

    assert swept.staged_action_ids == (0, 1)
    assert swept.skipped_action_ids == ()
    assert swept.current_state_index == 1


def test_strict_mode_rejects_toggling_init(creators):
    r = lift_reducer_with(counter, strict=True)
    lifted = r(None, Init())

    with pytest.raises(InvalidTransitionError):
        r(lifted, creators.toggle_action(0))


def test_commit_with_out_of_range_cursor_keeps_baseline(creators):
    """A cursor that selects nothing commits the existing baseline."""
    r = lift_reducer_with(counter, 5)
    lifted = _run(r, None, Init(),
                  creators.perform_action({"type": "INC"}),
                  creators.jump_to_state(-1),
                  creators.commit())

    assert lifted.committed_state == 5
    assert _states(lifted) == [5]
