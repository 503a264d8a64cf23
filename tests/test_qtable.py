"""Tests for the sparse Q-table."""

from hanoi_rl.model import Action
from hanoi_rl.qtable import QTable
from hanoi_rl.rules import HanoiRules


START = (0, 0, 0)
MOVE = Action(0, 0, 2)


def test_get_or_insert_creates_default():
    q = QTable()
    assert len(q) == 0
    assert q.get_or_insert(START, MOVE) == 0.0
    assert len(q) == 1
    assert (START, MOVE) in q


def test_lazy_read_is_idempotent():
    q = QTable()
    first = q.get(START, MOVE)
    second = q.get(START, MOVE)
    assert first == second == 0.0
    assert len(q) == 1


def test_check_only_never_inserts():
    q = QTable()
    assert q.get(START, MOVE, check_only=True) == 0.0
    assert q.peek(START, MOVE) == 0.0
    assert len(q) == 0
    assert (START, MOVE) not in q


def test_check_only_matches_inserting_read():
    q = QTable()
    q.set(START, MOVE, 3.5)
    assert q.get(START, MOVE, check_only=True) == q.get(START, MOVE) == 3.5


def test_set_overwrites_and_clear_empties():
    q = QTable()
    q.set(START, MOVE, 1.0)
    q.set(START, MOVE, -2.0)
    assert q.peek(START, MOVE) == -2.0
    q.clear()
    assert len(q) == 0


def test_initialize_all_seeds_every_valid_pair():
    rules = HanoiRules()
    q = QTable()
    q.initialize_all(rules)
    expected = sum(len(rules.valid_actions(s)) for s in rules.all_states())
    # 24 states with three moves, 3 single-stack states with two
    assert expected == 78
    assert len(q) == expected
    assert all(value == 0.0 for _, value in q.items())


def test_rows_and_snapshot():
    q = QTable()
    q.set(START, MOVE, 1.23456)
    assert q.rows() == [{"state": "0|0|0", "action": "0_0_2", "value": 1.23456}]
    assert q.snapshot() == {"0|0|0_0_0_2": 1.2346}
