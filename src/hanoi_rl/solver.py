"""Exact Hanoi solutions and policy playback."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence

from .model import Action, State, key_of, state_from_key
from .qtable import QTable
from .rules import HanoiRules

logger = logging.getLogger(__name__)

Policy = Mapping[str, Action]

OPTIMAL_3_DISK_POLICY: Dict[str, Action] = {
    key_of((0, 0, 0)): Action(0, 0, 2),
    key_of((2, 0, 0)): Action(1, 0, 1),
    key_of((2, 1, 0)): Action(0, 2, 1),
    key_of((1, 1, 0)): Action(2, 0, 2),
    key_of((1, 1, 2)): Action(0, 1, 0),
    key_of((0, 1, 2)): Action(1, 1, 2),
    key_of((0, 2, 2)): Action(0, 0, 2),
}


def optimal_3_disk_action(state: Sequence[int]) -> Optional[Action]:
    """Optimal move on the 3-disk solution path, None off the path."""
    return OPTIMAL_3_DISK_POLICY.get(key_of(state))


def plan_hanoi(n: int, src: int = 0, aux: int = 1, dst: int = 2) -> List[Action]:
    """Return the 2^n - 1 optimal moves that carry disks 0..n-1 from src to dst."""
    if n <= 0:
        return []
    plan: List[Action] = []
    plan.extend(plan_hanoi(n - 1, src, dst, aux))
    plan.append(Action(n - 1, src, dst))
    plan.extend(plan_hanoi(n - 1, aux, src, dst))
    return plan


def optimal_policy_for(rules: HanoiRules) -> Dict[str, Action]:
    """State key -> optimal move along the solution path from the start state."""
    policy: Dict[str, Action] = {}
    state = rules.start_state()
    for action in plan_hanoi(rules.disk_count, 0, 1, rules.goal_peg):
        policy[key_of(state)] = action
        state = rules.apply_action(state, action)
    return policy


def seed_q_table(q_table: QTable, policy: Policy, value: float = 1.0) -> None:
    """Give each policy action a Q value above the table default so it wins the greedy scan."""
    for state_key, action in policy.items():
        q_table.set(state_from_key(state_key), action, q_table.default + value)


@dataclass
class SolveResult:
    """Trajectory produced by following a policy."""

    state_sequence: List[str] = field(default_factory=list)
    action_sequence: List[Action] = field(default_factory=list)
    step_count: int = 0
    solved: bool = False

    def to_dict(self) -> Dict[str, object]:
        return {
            "state_sequence": list(self.state_sequence),
            "action_sequence": [a.key for a in self.action_sequence],
            "step_count": self.step_count,
            "solved": self.solved,
        }


def play_policy(
    rules: HanoiRules,
    policy: Policy,
    start: Optional[State] = None,
    max_steps: int = 50,
) -> SolveResult:
    """
    Follow ``policy`` from ``start`` until the goal, a missing entry or the step cap.

    A state without a policy entry is logged and ends the trajectory with
    ``solved=False``.
    """
    state: State = tuple(start) if start is not None else rules.start_state()
    result = SolveResult(state_sequence=[key_of(state)])

    while result.step_count < max_steps and not rules.is_goal_state(state):
        action = policy.get(key_of(state))
        if action is None:
            logger.error("No policy found for state: %s", key_of(state))
            break
        result.action_sequence.append(action)
        state = rules.apply_action(state, action)
        result.state_sequence.append(key_of(state))
        result.step_count += 1

    result.solved = rules.is_goal_state(state)
    return result
