import json
from typing import Any, Callable, Dict, List, Optional

from .events import Event, EventStream, StepEvent


class RunLogger:
    """
    Collects learner events as frames for replay/visualization.

    Frame schema:
      {"type": "step", "episode": int, "step": int, "state_key": str,
       "action": str, "reward": float, "value": float, "new_q": float, ...}
      {"type": "episode", "episode": int, "total_reward": float, "epsilon": float, ...}
      {"type": "reset", "signal": int}
    """

    def __init__(self, record_steps: bool = True):
        self.record_steps = record_steps
        self.events: List[Dict[str, Any]] = []
        self._unsubscribe: Optional[Callable[[], None]] = None

    def attach(self, stream: EventStream):
        """Start recording everything published on ``stream``."""
        self.detach()
        self._unsubscribe = stream.subscribe(self.record)

    def detach(self):
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def record(self, event: Event):
        if isinstance(event, StepEvent) and not self.record_steps:
            return
        self.events.append(event.to_dict())

    def episodes(self) -> List[Dict[str, Any]]:
        return [e for e in self.events if e["type"] == "episode"]

    def reward_curve(self) -> List[float]:
        """Total reward per episode, in order (what a progress chart plots)."""
        return [e["total_reward"] for e in self.episodes()]

    def snapshot(self, note: str = "", stats: Optional[Dict[str, Any]] = None):
        frame: Dict[str, Any] = {"type": "snapshot", "note": note}
        if stats is not None:
            frame["stats"] = stats
        self.events.append(frame)

    def to_json(self, path: str):
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.events, f, indent=2)
