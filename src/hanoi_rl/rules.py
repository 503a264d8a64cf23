"""
Legality engine for the Tower of Hanoi.

The state only records which peg each disk sits on, so stacking order is
implied: among the disks sharing a peg, the one with the smallest index is
on top. All helpers here are pure and never mutate the state they are given.
"""

from __future__ import annotations

from dataclasses import dataclass
from itertools import product
from typing import Iterator, List, Sequence

from .errors import InvalidAction
from .model import Action, State


@dataclass(frozen=True)
class HanoiRules:
    """Move rules for ``disk_count`` disks on ``peg_count`` pegs."""

    disk_count: int = 3
    peg_count: int = 3

    def __post_init__(self) -> None:
        if self.disk_count <= 0:
            raise ValueError("Hanoi requires at least one disk")
        if self.peg_count < 3:
            raise ValueError("Hanoi requires at least three pegs")

    @property
    def goal_peg(self) -> int:
        return self.peg_count - 1

    @property
    def state_count(self) -> int:
        return self.peg_count ** self.disk_count

    def start_state(self) -> State:
        """All disks stacked on peg 0."""
        return (0,) * self.disk_count

    def goal_state(self) -> State:
        return (self.goal_peg,) * self.disk_count

    def all_states(self) -> Iterator[State]:
        """Every peg assignment, disk 0 varying slowest."""
        return product(range(self.peg_count), repeat=self.disk_count)

    def disks_on_peg(self, state: Sequence[int], peg: int) -> List[int]:
        """Disks on ``peg`` ordered top to bottom (ascending disk number)."""
        return [disk for disk in range(self.disk_count) if state[disk] == peg]

    def is_top_disk(self, state: Sequence[int], disk: int, peg: int) -> bool:
        disks = self.disks_on_peg(state, peg)
        return len(disks) > 0 and disks[0] == disk

    def can_move_to_peg(self, state: Sequence[int], disk: int, target_peg: int) -> bool:
        """True if ``target_peg`` is empty or its top disk is larger than ``disk``."""
        disks = self.disks_on_peg(state, target_peg)
        if not disks:
            return True
        return disk < disks[0]

    def valid_actions(self, state: Sequence[int]) -> List[Action]:
        """Legal moves, disks ascending then target pegs ascending."""
        actions: List[Action] = []
        for disk in range(self.disk_count):
            current = state[disk]
            if not self.is_top_disk(state, disk, current):
                continue
            for target in range(self.peg_count):
                if target != current and self.can_move_to_peg(state, disk, target):
                    actions.append(Action(disk, current, target))
        return actions

    def apply_action(self, state: Sequence[int], action: Action) -> State:
        """
        Return the successor state.

        Stacking rules are not re-checked here, but the disk and target peg
        must be in range so the result is still a well-formed state.

        Raises:
            InvalidAction: on an out-of-range disk number or target peg
        """
        if not 0 <= action.disk_num < self.disk_count:
            raise InvalidAction(f"Invalid disk number: {action.disk_num}")
        if not 0 <= action.dst < self.peg_count:
            raise InvalidAction(f"Invalid to peg number: {action.dst}")
        next_state = list(state)
        next_state[action.disk_num] = action.dst
        return tuple(next_state)

    def is_goal_state(self, state: Sequence[int]) -> bool:
        return all(peg == self.goal_peg for peg in state)

    def validate_action(self, state: Sequence[int], action: Action) -> None:
        """
        Check a move against the puzzle rules.

        Raises:
            InvalidAction: naming the first rule the move breaks
        """
        disk, src, dst = action.disk_num, action.src, action.dst
        if not 0 <= disk < self.disk_count:
            raise InvalidAction(f"Invalid disk number: {disk}")
        if not 0 <= src < self.peg_count:
            raise InvalidAction(f"Invalid from peg number: {src}")
        if not 0 <= dst < self.peg_count:
            raise InvalidAction(f"Invalid to peg number: {dst}")
        if src == dst:
            raise InvalidAction(f"From and to pegs are equal: {src}")
        src_disks = self.disks_on_peg(state, src)
        if disk not in src_disks:
            raise InvalidAction(f"Disk {disk} is not on peg {src}")
        if src_disks[0] != disk:
            raise InvalidAction(f"Disk {disk} is not the top disk on peg {src}")
        dst_disks = self.disks_on_peg(state, dst)
        if dst_disks and dst_disks[0] < disk:
            raise InvalidAction(
                f"Cannot move disk {disk} on top of smaller disk {dst_disks[0]} on peg {dst}"
            )

    def is_legal(self, state: Sequence[int], action: Action) -> bool:
        try:
            self.validate_action(state, action)
        except InvalidAction:
            return False
        return True
