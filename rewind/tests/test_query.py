"""
Tests for lifted-state query helpers.
"""

from rewind.core import ActionCreators, ERROR_PROPAGATION_MESSAGE
from rewind.query import current_state, error_entries, first_error_index, is_live, staged_actions, summarize
from rewind.store import create_store, instrument
from rewind.tests.reducers import counter


def _store(*actions):
    store = create_store(counter, None, instrument())
    for action in actions:
        store.dispatch(action)
    return store


def test_staged_actions_rows():
    store = _store({"type": "INC"}, {"type": "ADD", "by": 5})
    store.dispatch_lifted(ActionCreators().toggle_action(1))

    rows = staged_actions(store.get_lifted_state())

    assert [r["type"] for r in rows] == ["@@INIT", "INC", "ADD"]
    assert [r["skipped"] for r in rows] == [False, True, False]
    assert [r["state"] for r in rows] == [0, 0, 5]


def test_live_cursor():
    store = _store({"type": "INC"}, {"type": "INC"})
    assert is_live(store.get_lifted_state())

    store.dispatch_lifted(ActionCreators().jump_to_state(0))

    lifted = store.get_lifted_state()
    assert not is_live(lifted)
    assert current_state(lifted) == 0


def test_error_entries():
    store = _store({"type": "INC"}, {"type": "BOOM"}, {"type": "INC"})
    lifted = store.get_lifted_state()

    own = error_entries(lifted)
    everything = error_entries(lifted, include_propagated=True)

    assert [r["id"] for r in own] == [2]
    assert [r["error"] for r in everything] == ["ValueError: boom", ERROR_PROPAGATION_MESSAGE]
    assert first_error_index(lifted) == 2


def test_summarize():
    store = _store({"type": "INC"}, {"type": "BOOM"})
    store.dispatch_lifted(ActionCreators().toggle_action(1))

    assert summarize(store.get_lifted_state()) == {
        "staged": 3,
        "skipped": 1,
        "recorded": 3,
        "next_action_id": 3,
        "current_state_index": 2,
        "live": True,
        "errors": 1,
        "first_error_index": 2,
    }
