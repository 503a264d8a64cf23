"""Tests for epsilon-greedy selection and greedy extraction."""

import numpy as np
import pytest

from hanoi_rl.errors import NoValidActions
from hanoi_rl.model import Action
from hanoi_rl.policy import best_action, best_value, select_action
from hanoi_rl.qtable import QTable
from hanoi_rl.rules import HanoiRules


RULES = HanoiRules()
START = (0, 0, 0)


class DeadEndRules(HanoiRules):
    """Rules with no legal moves anywhere."""

    def valid_actions(self, state):
        return []


def test_greedy_breaks_ties_by_first_action():
    q = QTable()
    rng = np.random.default_rng(0)
    assert select_action(RULES, START, q, 0.0, rng) == Action(0, 0, 1)


def test_greedy_picks_highest_value():
    q = QTable()
    q.set(START, Action(0, 0, 2), 1.0)
    rng = np.random.default_rng(0)
    for _ in range(10):
        assert select_action(RULES, START, q, 0.0, rng) == Action(0, 0, 2)


def test_greedy_read_inserts_missing_entries():
    q = QTable()
    select_action(RULES, START, q, 0.0, np.random.default_rng(0))
    assert len(q) == 2


def test_full_exploration_draws_valid_actions_uniformly():
    q = QTable()
    q.set(START, Action(0, 0, 2), 100.0)
    rng = np.random.default_rng(42)
    picks = [select_action(RULES, START, q, 1.0, rng) for _ in range(200)]
    assert set(picks) == {Action(0, 0, 1), Action(0, 0, 2)}


def test_selection_is_reproducible_with_seed():
    q = QTable()
    a = [select_action(RULES, (2, 0, 0), q, 0.5, np.random.default_rng(3)) for _ in range(5)]
    b = [select_action(RULES, (2, 0, 0), q, 0.5, np.random.default_rng(3)) for _ in range(5)]
    assert a == b


def test_no_valid_actions_raises():
    with pytest.raises(NoValidActions):
        select_action(DeadEndRules(), START, QTable(), 0.0, np.random.default_rng(0))


def test_best_action_is_read_only():
    q = QTable()
    assert best_action(RULES, (2, 0, 0), q) == Action(0, 2, 0)
    assert len(q) == 0
    q.set((2, 0, 0), Action(1, 0, 1), 0.5)
    assert best_action(RULES, (2, 0, 0), q) == Action(1, 0, 1)
    assert len(q) == 1


def test_best_action_none_without_moves():
    assert best_action(DeadEndRules(), START, QTable()) is None
    assert best_value(DeadEndRules(), START, QTable()) == 0.0


def test_best_value():
    q = QTable()
    q.set(START, Action(0, 0, 1), -1.0)
    q.set(START, Action(0, 0, 2), 2.5)
    assert best_value(RULES, START, q) == 2.5
