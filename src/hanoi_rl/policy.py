"""
Epsilon-greedy action selection over a Q-table.

Greedy choices scan the valid actions in the legality engine's order and keep
the first maximal value, so a run is reproducible once the exploration RNG is
seeded.
"""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

from .errors import NoValidActions
from .model import Action, key_of
from .qtable import QTable
from .rules import HanoiRules


def select_action(
    rules: HanoiRules,
    state: Sequence[int],
    q_table: QTable,
    epsilon: float,
    rng: np.random.Generator,
) -> Action:
    """
    Choose an action for ``state``.

    With probability ``epsilon`` a valid action is drawn uniformly; otherwise
    the action with the highest Q value is returned (first one on ties).

    Raises:
        NoValidActions: if the state has no legal moves
    """
    actions = rules.valid_actions(state)
    if not actions:
        raise NoValidActions(f"No valid actions available in state {key_of(state)}")

    if rng.random() < epsilon:
        return actions[int(rng.integers(len(actions)))]

    values = np.array([q_table.get_or_insert(state, a) for a in actions])
    return actions[int(np.argmax(values))]


def best_action(rules: HanoiRules, state: Sequence[int], q_table: QTable) -> Optional[Action]:
    """Greedy action using read-only lookups, or None if nothing is legal."""
    actions = rules.valid_actions(state)
    if not actions:
        return None
    values = np.array([q_table.peek(state, a) for a in actions])
    return actions[int(np.argmax(values))]


def best_value(rules: HanoiRules, state: Sequence[int], q_table: QTable) -> float:
    """Highest read-only Q value in ``state`` (0.0 without legal moves)."""
    actions = rules.valid_actions(state)
    if not actions:
        return 0.0
    return float(max(q_table.peek(state, a) for a in actions))
