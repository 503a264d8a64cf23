"""Tests for the Hanoi state/action model and legality engine."""

from itertools import product

import pytest

from hanoi_rl.errors import InvalidAction
from hanoi_rl.model import Action, action_key, key_of, state_from_key
from hanoi_rl.rules import HanoiRules


RULES = HanoiRules()


# ============================================================================
# Model
# ============================================================================


def test_key_of_joins_pegs_in_disk_order():
    assert key_of((0, 1, 2)) == "0|1|2"
    assert key_of([2, 1, 0]) == "2|1|0"


def test_keys_are_canonical_over_all_states():
    """Distinct states never share a key; equal states always do."""
    states = list(product(range(3), repeat=3))
    keys = {key_of(s) for s in states}
    assert len(states) == 27
    assert len(keys) == 27
    for s in states:
        assert key_of(list(s)) == key_of(tuple(s))
        assert state_from_key(key_of(s)) == s


def test_action_is_value_object():
    a = Action(1, 0, 2)
    assert a == Action(1, 0, 2)
    assert hash(a) == hash(Action(1, 0, 2))
    assert a != Action(1, 2, 0)
    assert a.key == "1_0_2" == action_key(1, 0, 2)
    assert Action.from_key("1_0_2") == a
    assert str(a) == "disk 1: 0→2"
    with pytest.raises(AttributeError):
        a.dst = 1  # type: ignore[misc]


# ============================================================================
# Legality engine
# ============================================================================


def test_disks_on_peg_ascending():
    state = (1, 0, 1)
    assert RULES.disks_on_peg(state, 1) == [0, 2]
    assert RULES.disks_on_peg(state, 0) == [1]
    assert RULES.disks_on_peg(state, 2) == []


def test_top_disk_is_smallest_index():
    state = (1, 0, 1)
    assert RULES.is_top_disk(state, 0, 1)
    assert not RULES.is_top_disk(state, 2, 1)
    assert RULES.is_top_disk(state, 1, 0)
    assert not RULES.is_top_disk(state, 1, 2)


def test_can_move_to_peg():
    state = (1, 0, 0)
    assert RULES.can_move_to_peg(state, 1, 2)  # empty peg
    assert not RULES.can_move_to_peg(state, 1, 1)  # disk 0 is smaller
    assert RULES.can_move_to_peg(state, 0, 0)  # onto disk 1


def test_valid_actions_start_state():
    assert RULES.valid_actions((0, 0, 0)) == [Action(0, 0, 1), Action(0, 0, 2)]


def test_valid_actions_order_is_disk_then_target():
    assert RULES.valid_actions((2, 0, 0)) == [
        Action(0, 2, 0),
        Action(0, 2, 1),
        Action(1, 0, 1),
    ]


def test_legality_soundness_all_states():
    """Every generated action moves a top disk onto an empty peg or a larger disk."""
    for state in RULES.all_states():
        for action in RULES.valid_actions(state):
            assert action.src != action.dst
            assert state[action.disk_num] == action.src
            assert RULES.is_top_disk(state, action.disk_num, action.src)
            on_target = RULES.disks_on_peg(state, action.dst)
            assert not on_target or on_target[0] > action.disk_num
            RULES.validate_action(state, action)


def test_no_dead_ends():
    """Every state has moves, the goal included, and only the goal is a goal."""
    states = list(RULES.all_states())
    assert len(states) == RULES.state_count == 27
    for state in states:
        assert RULES.valid_actions(state)
    goals = [s for s in states if RULES.is_goal_state(s)]
    assert goals == [(2, 2, 2)]
    assert RULES.valid_actions((2, 2, 2)) == [Action(0, 2, 0), Action(0, 2, 1)]


def test_apply_action_returns_new_state():
    state = (0, 0, 0)
    nxt = RULES.apply_action(state, Action(0, 0, 2))
    assert nxt == (2, 0, 0)
    assert state == (0, 0, 0)


def test_apply_action_does_not_validate():
    # Mechanical update even for an illegal move
    assert RULES.apply_action((0, 0, 0), Action(2, 0, 1)) == (0, 0, 1)


def test_apply_action_rejects_out_of_range_indices():
    """Negative or too-large indices never produce a malformed state."""
    with pytest.raises(InvalidAction, match="Invalid disk number"):
        RULES.apply_action((0, 0, 0), Action(-1, 0, 2))
    with pytest.raises(InvalidAction, match="Invalid disk number"):
        RULES.apply_action((0, 0, 0), Action(3, 0, 2))
    with pytest.raises(InvalidAction, match="Invalid to peg"):
        RULES.apply_action((0, 0, 0), Action(0, 0, 3))
    with pytest.raises(InvalidAction, match="Invalid to peg"):
        RULES.apply_action((0, 0, 0), Action(0, 0, -1))


def test_start_and_goal_states():
    rules = HanoiRules(disk_count=4, peg_count=4)
    assert rules.start_state() == (0, 0, 0, 0)
    assert rules.goal_state() == (3, 3, 3, 3)
    assert rules.goal_peg == 3
    assert rules.is_goal_state((3, 3, 3, 3))


def test_rules_reject_bad_sizes():
    with pytest.raises(ValueError):
        HanoiRules(disk_count=0)
    with pytest.raises(ValueError):
        HanoiRules(peg_count=2)


class TestValidateAction:
    """Explicit move validation used by manual moves."""

    @pytest.mark.parametrize(
        "state, action, message",
        [
            ((0, 0, 0), Action(3, 0, 1), "Invalid disk number"),
            ((0, 0, 0), Action(0, -1, 1), "Invalid from peg"),
            ((0, 0, 0), Action(0, 0, 3), "Invalid to peg"),
            ((0, 0, 0), Action(0, 0, 0), "equal"),
            ((0, 0, 0), Action(0, 1, 2), "is not on peg 1"),
            ((0, 0, 0), Action(1, 0, 2), "not the top disk"),
            ((2, 0, 0), Action(1, 0, 2), "smaller disk 0"),
        ],
    )
    def test_invalid(self, state, action, message):
        with pytest.raises(InvalidAction, match=message):
            RULES.validate_action(state, action)
        assert not RULES.is_legal(state, action)

    def test_invalid_action_is_value_error(self):
        with pytest.raises(ValueError):
            RULES.validate_action((0, 0, 0), Action(0, 0, 0))

    def test_valid(self):
        RULES.validate_action((0, 0, 0), Action(0, 0, 1))
        assert RULES.is_legal((2, 0, 0), Action(1, 0, 1))
