# src/hanoi_rl/__init__.py
"""
Tabular Q-learning for the Tower of Hanoi.

This package provides the puzzle rules, a sparse Q-table, an epsilon-greedy
selector, the TD-control learning engine with its event stream, and exact
solutions used to check learned policies.
"""

from .model import Action, State, key_of, state_from_key
from .errors import HanoiError, InvalidAction, NoValidActions
from .rules import HanoiRules
from .qtable import QTable
from .policy import select_action, best_action
from .config import TDConfig, LOW_EXPLORATION_CONFIG
from .events import EventStream, StepEvent, EpisodeEvent, ResetEvent
from .engine import TDLearningEngine, TrainingStats, q_learning_update
from .solver import (
    OPTIMAL_3_DISK_POLICY,
    SolveResult,
    optimal_3_disk_action,
    optimal_policy_for,
    plan_hanoi,
    play_policy,
    seed_q_table,
)
from .puzzle import TowerOfHanoi
from .logger import RunLogger

__all__ = [
    # Model and rules
    "Action", "State", "key_of", "state_from_key", "HanoiRules",
    "HanoiError", "InvalidAction", "NoValidActions",
    # Learning
    "QTable", "select_action", "best_action", "TDConfig", "LOW_EXPLORATION_CONFIG",
    "TDLearningEngine", "TrainingStats", "q_learning_update",
    # Events
    "EventStream", "StepEvent", "EpisodeEvent", "ResetEvent", "RunLogger",
    # Exact solutions
    "OPTIMAL_3_DISK_POLICY", "SolveResult", "optimal_3_disk_action",
    "optimal_policy_for", "plan_hanoi", "play_policy", "seed_q_table",
    "TowerOfHanoi",
]
