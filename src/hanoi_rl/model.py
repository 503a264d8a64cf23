"""
State and action model for the Tower of Hanoi MDP.

A state is a tuple where ``state[d]`` is the peg holding disk ``d``
(disk 0 is the smallest). States are immutable and threaded by value;
every transition produces a new tuple.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

State = Tuple[int, ...]

STATE_SEPARATOR = "|"


def key_of(state: Sequence[int]) -> str:
    """Canonical key for a state, e.g. (0, 1, 2) -> "0|1|2"."""
    return STATE_SEPARATOR.join(str(peg) for peg in state)


def state_from_key(key: str) -> State:
    """Inverse of key_of."""
    return tuple(int(part) for part in key.split(STATE_SEPARATOR))


def action_key(disk_num: int, src: int, dst: int) -> str:
    return f"{disk_num}_{src}_{dst}"


@dataclass(frozen=True)
class Action:
    """
    Move of one disk between pegs.

    Attributes:
        disk_num: Disk being moved (0 = smallest)
        src: Peg the disk leaves
        dst: Peg the disk lands on
    """

    disk_num: int
    src: int
    dst: int

    @property
    def key(self) -> str:
        return action_key(self.disk_num, self.src, self.dst)

    @classmethod
    def from_key(cls, key: str) -> "Action":
        disk_num, src, dst = (int(part) for part in key.split("_"))
        return cls(disk_num, src, dst)

    def __str__(self) -> str:
        return f"disk {self.disk_num}: {self.src}→{self.dst}"
