"""Interactive Tower of Hanoi session for manual moves."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List

from .errors import InvalidAction
from .model import Action, State
from .rules import HanoiRules

logger = logging.getLogger(__name__)


@dataclass
class TowerOfHanoi:
    """Puzzle state with validated moves; every move replaces ``state`` with a new tuple."""

    rules: HanoiRules = field(default_factory=HanoiRules)
    state: State = field(init=False)
    moves: int = field(default=0, init=False)
    history: List[Action] = field(default_factory=list, init=False)

    def __post_init__(self) -> None:
        self.state = self.rules.start_state()

    @property
    def is_solved(self) -> bool:
        return self.rules.is_goal_state(self.state)

    def peg_of(self, disk: int) -> int:
        if not 0 <= disk < self.rules.disk_count:
            raise InvalidAction(f"Invalid disk number: {disk}")
        return self.state[disk]

    def disks_on_peg(self, peg: int) -> List[int]:
        return self.rules.disks_on_peg(self.state, peg)

    def legal(self, src: int, dst: int) -> bool:
        """Return True iff moving the top disk from src to dst is legal."""
        if not (0 <= src < self.rules.peg_count and 0 <= dst < self.rules.peg_count):
            return False
        disks = self.disks_on_peg(src)
        if not disks:
            return False
        return self.rules.is_legal(self.state, Action(disks[0], src, dst))

    def move_disk(self, action: Action) -> State:
        """Apply a validated move; raises InvalidAction on a rule violation."""
        self.rules.validate_action(self.state, action)
        logger.debug("Moving disk %d from %d to %d", action.disk_num, action.src, action.dst)
        self.state = self.rules.apply_action(self.state, action)
        self.moves += 1
        self.history.append(action)
        return self.state

    def move(self, src: int, dst: int) -> bool:
        """Move the top disk of src onto dst; returns False when the move is illegal."""
        if not self.legal(src, dst):
            return False
        self.move_disk(Action(self.disks_on_peg(src)[0], src, dst))
        return True

    def reset(self) -> None:
        self.state = self.rules.start_state()
        self.moves = 0
        self.history.clear()

    def __str__(self) -> str:
        """Render the pegs as ASCII rows (top row first), disks numbered from 1."""
        stacks = [
            list(reversed(self.disks_on_peg(peg)))  # bottom first
            for peg in range(self.rules.peg_count)
        ]
        levels = []
        for level in range(self.rules.disk_count - 1, -1, -1):
            row = []
            for stack in stacks:
                if len(stack) > level:
                    row.append(str(stack[level] + 1).rjust(2))
                else:
                    row.append(" |")
            levels.append("  ".join(row))
        labels = "  ".join(chr(ord("A") + peg).rjust(2) for peg in range(self.rules.peg_count))
        return "\n".join(levels + [labels])
