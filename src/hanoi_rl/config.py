"""
Hyperparameters and puzzle size for the TD learner.

A config is immutable; the engine takes one at construction and another
(optionally) at reset.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Optional

from .rules import HanoiRules


@dataclass(frozen=True)
class TDConfig:
    """
    Configuration for epsilon-greedy Q-learning.

    Attributes:
        alpha: Learning rate
        gamma: Discount factor
        epsilon: Initial exploration rate
        epsilon_decay: Multiplicative decay applied after each episode
        min_epsilon: Floor for the exploration rate
        max_steps_per_episode: Step cap for one episode
        goal_reward: Reward for the transition that reaches the goal
        step_penalty: Reward for every other transition
        disk_count: Number of disks
        peg_count: Number of pegs (the last one is the goal peg)
        max_solve_steps: Step cap for policy playback
        success_window: Episodes kept for the recent success rate
        seed: Seed for the exploration RNG (None = nondeterministic)
    """

    alpha: float = 0.1
    gamma: float = 0.9
    epsilon: float = 0.9
    epsilon_decay: float = 0.9
    min_epsilon: float = 0.01
    max_steps_per_episode: int = 50
    goal_reward: float = 50.0
    step_penalty: float = -0.5
    disk_count: int = 3
    peg_count: int = 3
    max_solve_steps: int = 50
    success_window: int = 20
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        if not 0.0 < self.alpha <= 1.0:
            raise ValueError(f"alpha must be in (0, 1], got {self.alpha}")
        if not 0.0 <= self.gamma <= 1.0:
            raise ValueError(f"gamma must be in [0, 1], got {self.gamma}")
        for name in ("epsilon", "epsilon_decay", "min_epsilon"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be in [0, 1], got {value}")
        for name in ("max_steps_per_episode", "max_solve_steps", "success_window"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be positive")
        # Puzzle size is checked by the rules themselves
        self.rules()

    def rules(self) -> HanoiRules:
        return HanoiRules(disk_count=self.disk_count, peg_count=self.peg_count)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TDConfig":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


# Alternate reward scale and a mostly-greedy start.
LOW_EXPLORATION_CONFIG = TDConfig(goal_reward=100.0, step_penalty=-1.0, epsilon=0.1)
