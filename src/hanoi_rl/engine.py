"""
TD-control (Q-learning) engine for the Tower of Hanoi.

The engine owns the Q-table, the exploration rate and the training
statistics. ``start_learning`` is a coroutine that yields once per step so an
embedding event loop can observe progress (and call ``stop_learning``) while
it runs; at most one run is active at a time.

State machine:
    Idle --start_learning--> Running --(episodes done | stop_learning | reset)--> Idle
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, List, Optional, Sequence, Tuple

import numpy as np

from .config import TDConfig
from .events import EpisodeEvent, EventStream, StepEvent
from .model import Action, State, key_of
from .policy import best_action, best_value, select_action
from .qtable import QTable
from .solver import SolveResult, play_policy

logger = logging.getLogger(__name__)


def q_learning_update(
    current_q: float,
    reward: float,
    max_next_q: float,
    alpha: float,
    gamma: float,
) -> Tuple[float, float]:
    """
    One-step Q-learning backup.

    target = r + gamma * max_a' Q(s', a')
    new_q  = Q(s, a) + alpha * (target - Q(s, a))

    Returns:
        (target, new_q)
    """
    target = reward + gamma * max_next_q
    new_q = current_q + alpha * (target - current_q)
    return target, new_q


@dataclass
class TDUpdate:
    """Arithmetic of a single backup, kept for the step event."""

    current_q: float
    max_next_q: float
    target: float
    new_q: float


@dataclass
class TrainingStats:
    """
    Aggregate counters for a learning run.

    Attributes:
        total_episodes: Episodes finished
        successful_episodes: Episodes that reached the goal
        average_steps: Running mean of steps per episode
        best_steps: Fewest steps of any solved episode (None until one is solved)
        recent_outcomes: Solved flags of the most recent episodes
    """

    total_episodes: int = 0
    successful_episodes: int = 0
    average_steps: float = 0.0
    best_steps: Optional[int] = None
    recent_outcomes: Deque[bool] = field(default_factory=lambda: deque(maxlen=20))

    @classmethod
    def with_window(cls, window: int) -> "TrainingStats":
        return cls(recent_outcomes=deque(maxlen=window))

    def record(self, steps: int, solved: bool) -> None:
        self.total_episodes += 1
        if solved:
            self.successful_episodes += 1
            self.best_steps = steps if self.best_steps is None else min(self.best_steps, steps)
        self.average_steps += (steps - self.average_steps) / self.total_episodes
        self.recent_outcomes.append(solved)

    def success_rate(self) -> float:
        if self.total_episodes == 0:
            return 0.0
        return self.successful_episodes / self.total_episodes

    def recent_success_rate(self) -> float:
        if not self.recent_outcomes:
            return 0.0
        return sum(self.recent_outcomes) / len(self.recent_outcomes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_episodes": self.total_episodes,
            "successful_episodes": self.successful_episodes,
            "average_steps": round(self.average_steps, 4),
            "best_steps": self.best_steps,
            "success_rate": round(self.success_rate(), 4),
            "recent_success_rate": round(self.recent_success_rate(), 4),
        }


class TDLearningEngine:
    """
    Epsilon-greedy Q-learning over the full Hanoi state space.

    Args:
        config: Hyperparameters and puzzle size
        stream: Channel for step/episode/reset events (a private one if omitted)
        rng: Exploration RNG (built from ``config.seed`` if omitted)
    """

    def __init__(
        self,
        config: Optional[TDConfig] = None,
        stream: Optional[EventStream] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        self.config = config or TDConfig()
        self.stream = stream or EventStream()
        self.rng = rng if rng is not None else np.random.default_rng(self.config.seed)
        self.rules = self.config.rules()
        self.q_table = QTable()
        self.q_table.initialize_all(self.rules)
        self.epsilon = self.config.epsilon
        self.stats = TrainingStats.with_window(self.config.success_window)
        self.episode_history: List[EpisodeEvent] = []
        self._running = False
        # Bumped by reset() so a run interrupted by a reset leaves the fresh state alone
        self._generation = 0
        # Set once the active loop has fully exited; a new run waits on it
        self._loop_idle: Optional[asyncio.Event] = None

    # ------------------------------------------------------------------
    # Run control
    # ------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self._running

    def get_is_running(self) -> bool:
        return self._running

    async def start_learning(self, max_episodes: int = 100, step_delay_ms: int = 200) -> None:
        """
        Run up to ``max_episodes`` episodes, sleeping ``step_delay_ms`` after each step.

        A call while a run is active logs a warning and returns immediately.
        After stop_learning() or reset() the old loop may still be finishing its
        current step; a new run waits for it to exit before starting.

        Raises:
            ValueError: on a non-positive episode count or negative delay
            NoValidActions: if an episode reaches a state with no legal moves
        """
        if max_episodes < 1:
            raise ValueError(f"max_episodes must be positive, got {max_episodes}")
        if step_delay_ms < 0:
            raise ValueError(f"step_delay_ms must be non-negative, got {step_delay_ms}")
        if self._running:
            logger.warning("TD learning already running")
            return
        if self._loop_idle is not None and not self._loop_idle.is_set():
            logger.info("Waiting for the stopped run to finish its current step")
            await self._loop_idle.wait()
            if self._running:
                logger.warning("TD learning already running")
                return

        self._running = True
        generation = self._generation
        idle = asyncio.Event()
        self._loop_idle = idle
        self.stats = TrainingStats.with_window(self.config.success_window)
        self.episode_history = []
        delay = step_delay_ms / 1000.0
        logger.info("Starting TD learning: %d episodes, config=%s", max_episodes, self.config.to_dict())

        try:
            for episode in range(max_episodes):
                steps, solved, total_reward = await self._run_episode(episode + 1, delay)
                if generation != self._generation:
                    # reset() ran mid-episode; its fresh stats must stay untouched
                    return
                if steps > 0:
                    self._finish_episode(episode, steps, solved, total_reward)
                if not self._running:
                    break
        finally:
            idle.set()
            if generation == self._generation:
                self._running = False

        logger.info("TD learning completed: %s", self.stats.to_dict())

    def stop_learning(self) -> None:
        """Ask the active run to stop after its current step."""
        self._running = False

    def reset(self, config: Optional[TDConfig] = None) -> None:
        """
        Clear the Q-table, statistics and exploration rate, and force Idle.

        A new ``config`` replaces the current one; the RNG is reseeded from it
        when it carries a seed.
        """
        if config is not None:
            self.config = config
            self.rules = config.rules()
            if config.seed is not None:
                self.rng = np.random.default_rng(config.seed)
        self._generation += 1
        self._running = False
        self.q_table.clear()
        self.q_table.initialize_all(self.rules)
        self.epsilon = self.config.epsilon
        self.stats = TrainingStats.with_window(self.config.success_window)
        self.episode_history = []
        self.stream.signal_reset()

    # ------------------------------------------------------------------
    # Learning internals
    # ------------------------------------------------------------------

    async def _run_episode(self, episode: int, delay: float) -> Tuple[int, bool, float]:
        """Play one episode; returns (steps, solved, total reward)."""
        state = self.rules.start_state()
        total_reward = 0.0
        steps = 0
        solved = False

        for step in range(self.config.max_steps_per_episode):
            if not self._running:
                break
            action = select_action(self.rules, state, self.q_table, self.epsilon, self.rng)
            next_state = self.rules.apply_action(state, action)
            reward = self._reward(next_state)
            update = self._update(state, action, reward, next_state)

            self.stream.publish_step(
                StepEvent(
                    episode=episode,
                    step=step,
                    state_key=key_of(state),
                    action=action,
                    reward=reward,
                    next_state_key=key_of(next_state),
                    value=best_value(self.rules, state, self.q_table),
                    current_q=update.current_q,
                    max_next_q=update.max_next_q,
                    target=update.target,
                    new_q=update.new_q,
                    alpha=self.config.alpha,
                    gamma=self.config.gamma,
                )
            )

            total_reward += reward
            state = next_state
            steps = step + 1

            await asyncio.sleep(delay)

            if self.rules.is_goal_state(state):
                solved = True
                break

        return steps, solved, total_reward

    def _reward(self, next_state: State) -> float:
        if self.rules.is_goal_state(next_state):
            return self.config.goal_reward
        return self.config.step_penalty

    def _update(self, state: State, action: Action, reward: float, next_state: State) -> TDUpdate:
        current_q = self.q_table.get_or_insert(state, action)
        next_actions = self.rules.valid_actions(next_state)
        max_next_q = 0.0
        if next_actions:
            max_next_q = max(self.q_table.get_or_insert(next_state, a) for a in next_actions)
        target, new_q = q_learning_update(
            current_q, reward, max_next_q, self.config.alpha, self.config.gamma
        )
        self.q_table.set(state, action, new_q)
        return TDUpdate(current_q=current_q, max_next_q=max_next_q, target=target, new_q=new_q)

    def _finish_episode(self, episode: int, steps: int, solved: bool, total_reward: float) -> None:
        self.stats.record(steps, solved)
        self.epsilon = max(self.config.min_epsilon, self.epsilon * self.config.epsilon_decay)
        event = self.stream.publish_episode(
            EpisodeEvent(
                episode=episode + 1,
                total_reward=total_reward,
                epsilon=self.epsilon,
                steps=steps,
                solved=solved,
            )
        )
        self.episode_history.append(event)

        if episode % 10 == 0 or solved:
            logger.info(
                "Episode %d: %s in %d steps, eps=%.3f, success rate=%.1f%%",
                episode,
                "SOLVED" if solved else "FAILED",
                steps,
                self.epsilon,
                self.stats.success_rate() * 100,
            )

    # ------------------------------------------------------------------
    # Policy extraction
    # ------------------------------------------------------------------

    def get_best_action(self, state: Sequence[int]) -> Optional[Action]:
        """Greedy action for ``state`` without touching the table."""
        return best_action(self.rules, state, self.q_table)

    def get_all_best_actions(self) -> Dict[str, Action]:
        """State key -> greedy action over the whole state space."""
        best: Dict[str, Action] = {}
        for state in self.rules.all_states():
            action = self.get_best_action(state)
            if action is not None:
                best[key_of(state)] = action
        return best

    def get_optimal_policy(self) -> Dict[str, Action]:
        return self.get_all_best_actions()

    def solve_with_policy(self) -> SolveResult:
        """Replay the greedy policy from the start state."""
        return play_policy(
            self.rules,
            self.get_optimal_policy(),
            start=self.rules.start_state(),
            max_steps=self.config.max_solve_steps,
        )

    def get_q_table(self) -> List[Dict[str, Any]]:
        return self.q_table.rows()
