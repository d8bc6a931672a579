"""Error taxonomy for ledger replay and the update models.

Every error is raised while validating input or replaying history, so a
failing operation never reaches the save step.
"""

from typing import Optional


class UltiraError(Exception):
    """Base class for all errors raised by the ledger."""


class MissingPlayer(UltiraError, LookupError):
    """A change references a player that has not been added yet."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Player '{name}' is not in the ratings (add the player first)")


class SingularSystem(UltiraError, ArithmeticError):
    """The diffusion pseudo-inverse could not be computed within tolerance."""


class DegenerateGroupSize(UltiraError, ValueError):
    """A group model was given fewer participants than it needs."""

    def __init__(self, size: int, minimum: int = 3, model: Optional[str] = None):
        self.size = size
        self.minimum = minimum
        where = f" for {model}" if model else ""
        super().__init__(f"Need at least {minimum} players{where}, got {size}")


class InvalidInput(UltiraError, ValueError):
    """Input rejected before an update formula runs."""


class EmptyHistory(UltiraError, IndexError):
    """Undo requested on an empty history."""

    def __init__(self):
        super().__init__("Nothing to undo (undo only affects history)")


class UnsupportedRename(UltiraError, NotImplementedError):
    """Rename touches players keyed inside a mapping (Arbitrary, Symmetric)."""
