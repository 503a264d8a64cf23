"""
Sparse tabular store of Q(s, a) estimates.

Entries are keyed by (state key, action key). ``get_or_insert`` keeps the
read-creates-if-missing contract the learner relies on; ``peek`` is the pure
read used by policy extraction so diagnostics never grow the table.
"""

from __future__ import annotations

from typing import Any, Dict, Iterator, List, Sequence, Tuple

from .model import Action, key_of
from .rules import HanoiRules

QKey = Tuple[str, str]


def _q_key(state: Sequence[int], action: Action) -> QKey:
    return key_of(state), action.key


class QTable:
    """Mapping (state, action) -> float, lazily populated with 0.0."""

    def __init__(self, default: float = 0.0):
        self.default = default
        self._values: Dict[QKey, float] = {}

    def get_or_insert(self, state: Sequence[int], action: Action) -> float:
        key = _q_key(state, action)
        if key not in self._values:
            self._values[key] = self.default
        return self._values[key]

    def peek(self, state: Sequence[int], action: Action) -> float:
        return self._values.get(_q_key(state, action), self.default)

    def get(self, state: Sequence[int], action: Action, check_only: bool = False) -> float:
        """Lookup; inserts the default unless ``check_only`` is set."""
        if check_only:
            return self.peek(state, action)
        return self.get_or_insert(state, action)

    def set(self, state: Sequence[int], action: Action, value: float) -> None:
        self._values[_q_key(state, action)] = float(value)

    def clear(self) -> None:
        self._values.clear()

    def initialize_all(self, rules: HanoiRules) -> None:
        """Seed every (state, valid action) pair of the state space at the default."""
        for state in rules.all_states():
            for action in rules.valid_actions(state):
                self._values[_q_key(state, action)] = self.default

    def __len__(self) -> int:
        return len(self._values)

    def __contains__(self, item: Tuple[Sequence[int], Action]) -> bool:
        state, action = item
        return _q_key(state, action) in self._values

    def items(self) -> Iterator[Tuple[QKey, float]]:
        return iter(self._values.items())

    def rows(self) -> List[Dict[str, Any]]:
        """Flat listing of the table, one row per entry."""
        return [
            {"state": state_key, "action": action_key, "value": value}
            for (state_key, action_key), value in self._values.items()
        ]

    def snapshot(self, precision: int = 4) -> Dict[str, float]:
        """Serializable view keyed by "<state>_<action>"."""
        return {
            f"{state_key}_{action_key}": round(value, precision)
            for (state_key, action_key), value in self._values.items()
        }
