"""Exception types raised by the Hanoi engine."""


class HanoiError(Exception):
    """Base class for engine errors."""


class InvalidAction(HanoiError, ValueError):
    """A move breaks the puzzle rules (bad indices, not the top disk, smaller disk below)."""


class NoValidActions(HanoiError, RuntimeError):
    """The selector was asked to act in a state with no legal moves."""
