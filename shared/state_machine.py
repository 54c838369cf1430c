from enum import Enum
from typing import Optional, Callable, List
from dataclasses import dataclass


class MatchState(str, Enum):
    OPEN = "open"
    RESOLVED = "resolved"


class TransitionError(Exception):
    def __init__(self, from_state: str, to_state: str, reason: str = None):
        self.from_state = from_state
        self.to_state = to_state
        self.reason = reason or f"Cannot transition from {from_state} to {to_state}"
        super().__init__(self.reason)


@dataclass
class Transition:
    from_state: MatchState
    to_state: MatchState
    action: str
    guard: Optional[Callable] = None


def winner_index_guard(context: dict) -> bool:
    teams = context.get("teams", [])
    winner_index = context.get("winner_index")
    if isinstance(winner_index, bool) or not isinstance(winner_index, int):
        return False
    return 0 <= winner_index < len(teams)


class MatchStateMachine:
    TRANSITIONS = [
        Transition(MatchState.OPEN, MatchState.RESOLVED, "resolve", guard=winner_index_guard),
    ]

    def __init__(self, initial_state: MatchState = MatchState.OPEN):
        self._state = initial_state
        self._history: List[tuple] = []

    @property
    def state(self) -> MatchState:
        return self._state

    @property
    def is_terminal(self) -> bool:
        return not any(t.from_state == self._state for t in self.TRANSITIONS)

    def can_transition(self, action: str) -> bool:
        for t in self.TRANSITIONS:
            if t.from_state == self._state and t.action == action:
                return True
        return False

    def transition(self, action: str, guard_context: dict = None) -> MatchState:
        for t in self.TRANSITIONS:
            if t.from_state == self._state and t.action == action:
                if t.guard and guard_context:
                    if not t.guard(guard_context):
                        raise TransitionError(
                            self._state.value,
                            t.to_state.value,
                            f"Guard condition failed for action '{action}'"
                        )

                old_state = self._state
                self._state = t.to_state
                self._history.append((old_state, action, self._state))
                return self._state

        raise TransitionError(
            self._state.value,
            "unknown",
            f"No valid transition for action '{action}' from state '{self._state.value}'"
        )

    def get_history(self) -> List[tuple]:
        return self._history.copy()

    @classmethod
    def from_state_string(cls, state_str: str) -> "MatchStateMachine":
        # Unknown states never fall back to OPEN.
        try:
            state = MatchState(state_str)
        except ValueError:
            raise TransitionError(str(state_str), "unknown", f"Unknown match state '{state_str}'")
        return cls(initial_state=state)

