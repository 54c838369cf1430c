"""
Unit tests for MatchStateMachine class.
Tests the single open -> resolved transition, its guard, and helper methods.
"""
import pytest
from shared.state_machine import (
    MatchStateMachine,
    MatchState,
    TransitionError,
    Transition,
    winner_index_guard
)


class TestMatchStateEnum:
    """Tests for MatchState enum."""

    def test_all_states_exist(self):
        assert MatchState.OPEN.value == "open"
        assert MatchState.RESOLVED.value == "resolved"

    def test_state_is_string_enum(self):
        assert isinstance(MatchState.OPEN.value, str)
        assert MatchState.OPEN == "open"


class TestTransitionError:
    """Tests for TransitionError exception."""

    def test_error_attributes(self):
        error = TransitionError("resolved", "open")
        assert error.from_state == "resolved"
        assert error.to_state == "open"

    def test_default_reason(self):
        error = TransitionError("resolved", "open")
        assert "resolved" in str(error)
        assert "open" in str(error)

    def test_custom_reason(self):
        error = TransitionError("open", "resolved", "Custom error message")
        assert str(error) == "Custom error message"


class TestStateMachineInit:
    """Tests for MatchStateMachine initialization."""

    def test_default_initial_state(self):
        sm = MatchStateMachine()
        assert sm.state == MatchState.OPEN

    def test_empty_history_on_init(self):
        assert MatchStateMachine().get_history() == []

    def test_from_state_string_valid(self):
        sm = MatchStateMachine.from_state_string("resolved")
        assert sm.state == MatchState.RESOLVED

    def test_from_state_string_invalid(self):
        """Unknown strings must not silently become OPEN."""
        with pytest.raises(TransitionError):
            MatchStateMachine.from_state_string("pending")


class TestTransitions:
    """Tests for the resolve transition."""

    def test_resolve_from_open(self):
        sm = MatchStateMachine()
        new_state = sm.transition("resolve")
        assert new_state == MatchState.RESOLVED
        assert sm.state == MatchState.RESOLVED

    def test_resolve_records_history(self):
        sm = MatchStateMachine()
        sm.transition("resolve")
        assert sm.get_history() == [(MatchState.OPEN, "resolve", MatchState.RESOLVED)]

    def test_history_is_copy(self):
        sm = MatchStateMachine()
        sm.get_history().append("junk")
        assert sm.get_history() == []

    def test_resolve_twice_fails(self):
        sm = MatchStateMachine()
        sm.transition("resolve")
        with pytest.raises(TransitionError):
            sm.transition("resolve")
        assert sm.state == MatchState.RESOLVED

    def test_unknown_action_fails(self):
        sm = MatchStateMachine()
        with pytest.raises(TransitionError):
            sm.transition("reopen")
        assert sm.state == MatchState.OPEN

    def test_guard_rejects_out_of_range_winner(self):
        sm = MatchStateMachine()
        with pytest.raises(TransitionError):
            sm.transition("resolve", guard_context={"teams": [["a"], ["b"]], "winner_index": 2})
        assert sm.state == MatchState.OPEN

    def test_guard_accepts_valid_winner(self):
        sm = MatchStateMachine()
        sm.transition("resolve", guard_context={"teams": [["a"], ["b"]], "winner_index": 1})
        assert sm.state == MatchState.RESOLVED


class TestHelpers:
    """Tests for can_transition and is_terminal."""

    def test_open_can_resolve(self):
        sm = MatchStateMachine()
        assert sm.can_transition("resolve")
        assert not sm.is_terminal

    def test_resolved_is_terminal(self):
        sm = MatchStateMachine(MatchState.RESOLVED)
        assert not sm.can_transition("resolve")
        assert sm.is_terminal

    def test_transition_dataclass(self):
        t = Transition(MatchState.OPEN, MatchState.RESOLVED, "resolve")
        assert t.guard is None


class TestWinnerIndexGuard:
    """Tests for winner_index_guard."""

    @pytest.mark.parametrize("winner_index", [0, 1, 2])
    def test_in_range(self, winner_index):
        assert winner_index_guard({"teams": [["a"], ["b"], ["c"]], "winner_index": winner_index})

    @pytest.mark.parametrize("winner_index", [-1, 3, None, "0", True, 1.0])
    def test_out_of_range_or_wrong_type(self, winner_index):
        assert not winner_index_guard({"teams": [["a"], ["b"], ["c"]], "winner_index": winner_index})
