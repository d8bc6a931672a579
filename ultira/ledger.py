"""
The ledger document: configuration plus history.

This is the unit that is loaded, changed and saved. Every operation that
records a change follows the same path:

    before = ledger.evaluate()
    ledger.history.append(change)
    after = ledger.evaluate()        # full replay
    ledger.save(path)

``record`` performs the first three steps and undoes the append if the
replay fails, so a failing change never reaches the file.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple, Union

from .base.config import LedgerConfig
from .base.exceptions import InvalidInput, UltiraError
from .data.history import History
from .data.storage import read_document, write_document
from .data.types import (
    AddPlayer,
    AdjustAlpha,
    Arbitrary,
    Change,
    Circular,
    Play,
    Symmetric,
)
from .evaluation.evaluator import Evaluation, evaluate
from .systems.diffusion import DEFAULT_EPSILON

logger = logging.getLogger(__name__)


@dataclass
class Ledger:
    """
    Configuration and history of one rating ledger.

    Example:
        >>> ledger = Ledger.new()
        >>> for name in ("A", "B", "C"):
        ...     ledger.add_player(name, 0.0)
        >>> before, after = ledger.play(Play.now(1, [Outcome("A", 4), Outcome("B", -2), Outcome("C", -2)]))
        >>> ledger.config.rating_to_display(after.ratings["A"])
    """

    config: LedgerConfig = field(default_factory=LedgerConfig)
    history: History = field(default_factory=History)
    epsilon: float = DEFAULT_EPSILON

    @classmethod
    def new(cls, config: Optional[LedgerConfig] = None) -> "Ledger":
        """Empty ledger with default (or given) configuration."""
        return cls(config=config or LedgerConfig())

    @classmethod
    def load(cls, path: Union[str, Path]) -> "Ledger":
        config, history = read_document(path)
        return cls(config=config, history=history)

    def save(self, path: Union[str, Path]) -> None:
        write_document(path, self.config, self.history)

    # =========================================================================
    # Evaluation
    # =========================================================================

    def starting_evaluation(self) -> Evaluation:
        return Evaluation.start(self.config.starting_alpha)

    def evaluate(self) -> Evaluation:
        return evaluate(self.history, self.config.starting_alpha, self.epsilon)

    def record(self, change: Change) -> Tuple[Evaluation, Evaluation]:
        """
        Append a change and replay the history.

        Returns:
            (evaluation before the change, evaluation after it)

        Raises:
            Any replay error; the change is removed again first.
        """
        before = self.evaluate()
        self.history.append(change)
        try:
            after = self.evaluate()
        except Exception:
            self.history.undo()
            raise
        logger.info("Recorded %s (%d changes)", type(change).__name__, len(self.history))
        return before, after

    # =========================================================================
    # Changes
    # =========================================================================

    def add_player(self, name: str, rating: float = 0.0) -> Tuple[Evaluation, Evaluation]:
        """Add (or reset) a player at an internal rating."""
        return self.record(AddPlayer(name=name, rating=float(rating)))

    def add_player_display(
        self, name: str, display: Optional[float] = None
    ) -> Tuple[Evaluation, Evaluation]:
        """Add (or reset) a player at a display rating; defaults to the base rating."""
        if display is None:
            display = self.config.base_rating
        return self.add_player(name, self.config.rating_from_display(display))

    def play(self, play: Play) -> Tuple[Evaluation, Evaluation]:
        return self.record(play)

    def arbitrary(self, arbitrary: Arbitrary) -> Tuple[Evaluation, Evaluation]:
        return self.record(arbitrary)

    def circular(self, circular: Circular) -> Tuple[Evaluation, Evaluation]:
        return self.record(circular)

    def symmetric(self, symmetric: Symmetric) -> Tuple[Evaluation, Evaluation]:
        return self.record(symmetric)

    def adjust_alpha(self, new_alpha: float) -> Tuple[Evaluation, Evaluation]:
        return self.record(AdjustAlpha(new_alpha=float(new_alpha)))

    def adjust_alpha_display(self, new_display: float) -> Tuple[Evaluation, Evaluation]:
        """Set the decay coefficient from its display value (the score multiplier)."""
        return self.adjust_alpha(self.config.alpha_from_display(new_display))

    def undo(self) -> Change:
        """Remove the last change from history."""
        return self.history.undo()

    def rename(self, old: str, new: str) -> bool:
        """
        Rename a player throughout history.

        The renamed history is replayed before it is kept. Merging two
        players who took part in the same session would list one player
        twice in it, so such a merge is rejected and the history restored.

        Returns:
            True if ``new`` already existed, i.e. the two players were merged

        Raises:
            UnsupportedRename: ``old`` is a score key in an Arbitrary or Symmetric change
            InvalidInput: the renamed history no longer replays
        """
        merged = new in self.evaluate().ratings
        previous = self.history.copy()
        self.history.rename(old, new)
        try:
            self.evaluate()
        except UltiraError as exc:
            self.history = previous
            raise InvalidInput(f"Cannot rename '{old}' to '{new}': {exc}") from exc
        return merged

    # =========================================================================
    # Queries
    # =========================================================================

    def display_ratings(self) -> Dict[str, float]:
        return self.evaluate().display_ratings(self.config)

    def rating_changes(
        self, before: Evaluation, after: Evaluation, players: Iterable[str]
    ) -> Dict[str, Tuple[Optional[float], float]]:
        """Display rating before and after for each player (None if new)."""
        changes = {}
        for name in players:
            old = before.ratings.get(name)
            changes[name] = (
                self.config.rating_to_display(old) if old is not None else None,
                self.config.rating_to_display(after.ratings[name]),
            )
        return changes

    def __repr__(self) -> str:
        return (
            f"Ledger(spread={self.config.spread}, base_rating={self.config.base_rating}, "
            f"starting_alpha={self.config.starting_alpha}, changes={len(self.history)})"
        )
