"""
Observation events emitted by the learner and the channel that carries them.

Events are purely observational: the engine publishes and never reads them
back. The stream keeps a bounded backlog for consumers that poll (``drain``)
and calls registered listeners synchronously for consumers that push.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import asdict, dataclass, field, replace
from typing import Any, Callable, Deque, Dict, List, Optional, Tuple, Type, Union

from .model import Action

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StepEvent:
    """One transition with the full TD arithmetic."""

    episode: int
    step: int
    state_key: str
    action: Action
    reward: float
    next_state_key: str
    value: float
    current_q: float
    max_next_q: float
    target: float
    new_q: float
    alpha: float
    gamma: float
    timestamp: float = field(default_factory=time.time)
    event_id: int = 0

    @property
    def action_key(self) -> str:
        return self.action.key

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["type"] = "step"
        d["action"] = self.action.key
        d["action_label"] = str(self.action)
        return d


@dataclass(frozen=True)
class EpisodeEvent:
    """Summary of a finished episode (episode numbers are 1-based)."""

    episode: int
    total_reward: float
    epsilon: float
    steps: int = 0
    solved: bool = False
    event_id: int = 0

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["type"] = "episode"
        return d


@dataclass(frozen=True)
class ResetEvent:
    """Reset notification; ``signal`` increases with every reset."""

    signal: int

    def to_dict(self) -> Dict[str, Any]:
        return {"type": "reset", "signal": self.signal}


Event = Union[StepEvent, EpisodeEvent, ResetEvent]
Listener = Callable[[Event], None]


class EventStream:
    """
    Fire-and-forget event channel.

    Each published step/episode event is stamped with a per-kind id that
    increases monotonically, so repeated identical payloads stay distinct.
    Listener failures are logged and do not reach the publisher.
    """

    def __init__(self, maxlen: int = 10_000):
        self._queue: Deque[Event] = deque(maxlen=maxlen)
        self._listeners: List[Tuple[Optional[Type], Listener]] = []
        self.step_counter = 0
        self.episode_counter = 0
        self.reset_signal = 0

    def subscribe(self, callback: Listener, kind: Optional[Type] = None) -> Callable[[], None]:
        """Register ``callback`` for all events or only instances of ``kind``."""
        entry = (kind, callback)
        self._listeners.append(entry)

        def unsubscribe() -> None:
            if entry in self._listeners:
                self._listeners.remove(entry)

        return unsubscribe

    def publish_step(self, event: StepEvent) -> StepEvent:
        self.step_counter += 1
        stamped = replace(event, event_id=self.step_counter)
        self._publish(stamped)
        return stamped

    def publish_episode(self, event: EpisodeEvent) -> EpisodeEvent:
        self.episode_counter += 1
        stamped = replace(event, event_id=self.episode_counter)
        self._publish(stamped)
        return stamped

    def signal_reset(self) -> ResetEvent:
        self.reset_signal += 1
        event = ResetEvent(signal=self.reset_signal)
        self._publish(event)
        return event

    def drain(self) -> List[Event]:
        """Return pending events oldest first and empty the backlog."""
        events = list(self._queue)
        self._queue.clear()
        return events

    def __len__(self) -> int:
        return len(self._queue)

    def _publish(self, event: Event) -> None:
        self._queue.append(event)
        for kind, callback in list(self._listeners):
            if kind is not None and not isinstance(event, kind):
                continue
            try:
                callback(event)
            except Exception:
                logger.exception("Event listener %r failed on %s", callback, type(event).__name__)
