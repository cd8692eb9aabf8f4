"""
Tests for the row selection state machine.
"""

import pytest

from core.cookies import SelectionState, next_index_after_delete
from core.cookies.selection import SelectionMode


class TestNextIndexAfterDelete:

    @pytest.mark.parametrize(
        "index, length, expected",
        [
            (0, 3, 0),
            (1, 3, 1),
            (2, 3, 1),
            (0, 1, None),
            (None, 3, None),
            (-1, 3, None),
        ],
    )
    def test_successor(self, index, length, expected):
        assert next_index_after_delete(index, length) == expected


class TestSelectionState:

    def test_starts_idle(self):
        state = SelectionState()
        assert state.mode is SelectionMode.IDLE
        assert state.key is None

    def test_pick_present_key(self):
        state = SelectionState()
        assert state.pick("b", ["a", "b"]) == "b"
        assert state.mode is SelectionMode.SELECTED
        assert state.index == 1

    def test_pick_absent_key_goes_idle(self):
        state = SelectionState()
        state.pick("a", ["a"])
        assert state.pick("zzz", ["a"]) is None
        assert state.mode is SelectionMode.IDLE

    def test_resolve_drops_vanished_key(self):
        state = SelectionState()
        state.pick("b", ["a", "b", "c"])
        assert state.resolve(["c", "b"]) == "b"
        assert state.index == 1
        assert state.resolve(["c"]) is None
        assert state.index == -1

    def test_reset_clears_recovery(self):
        state = SelectionState()
        state.recover(0, ["a"])
        state.reset("iframe")
        assert state.context == "iframe"
        assert state.recovered is False
        assert state.mode is SelectionMode.IDLE

    def test_deletion_target_user_pick(self):
        state = SelectionState()
        state.pick("b", ["a", "b", "c"])
        assert state.deletion_target(["a", "b", "c"]) == ("b", 1)

    def test_deletion_target_after_recovery_uses_index(self):
        state = SelectionState()
        state.recover(1, ["a", "c"])
        assert state.deletion_target(["a", "c"]) == ("c", 1)
        assert state.deletion_target(["a"]) == (None, None)

    def test_recover_clamps(self):
        state = SelectionState()
        assert state.recover(5, ["a", "b"]) == "b"
        assert state.recover(None, ["a"]) is None
        assert state.recover(0, []) is None
        assert state.recovered is True

    def test_pick_clears_recovery_gate(self):
        state = SelectionState()
        state.recover(0, ["a", "b"])
        state.pick("b", ["a", "b"])
        assert state.recovered is False
