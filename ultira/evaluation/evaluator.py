"""
Replay of a history into ratings.

Ratings are never stored. ``evaluate`` folds every change of the history,
in insertion order, into a fresh ``Evaluation`` starting from the
configured decay coefficient and an empty ratings map. The fold has no
hidden state, so evaluating the same history twice gives bit-identical
results, and changing anything in the history (including an AdjustAlpha
in the middle) changes every rating downstream of it on the next replay.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

import numpy as np
import polars as pl

from ..base.config import LedgerConfig
from ..base.exceptions import InvalidInput, MissingPlayer
from ..data.types import (
    AddPlayer,
    AdjustAlpha,
    Arbitrary,
    Change,
    Circular,
    Play,
    Symmetric,
    change_date,
    referenced_players,
)
from ..systems.decay import three_player_decay
from ..systems.diffusion import DEFAULT_EPSILON, arbitrary_diffusion, circular_diffusion
from ..systems.symmetric import symmetric_decay

logger = logging.getLogger(__name__)


@dataclass
class Evaluation:
    """
    Point-in-time result of replaying a history.

    Attributes:
        alpha: Current decay coefficient
        ratings: Player name -> internal rating
        last_date: Latest date seen so far (the maximum, not the most recent)
    """

    alpha: float
    ratings: Dict[str, float] = field(default_factory=dict)
    last_date: Optional[date] = None

    @classmethod
    def start(cls, starting_alpha: float) -> "Evaluation":
        """Evaluation of an empty history."""
        return cls(alpha=float(starting_alpha))

    def copy(self) -> "Evaluation":
        return Evaluation(alpha=self.alpha, ratings=dict(self.ratings), last_date=self.last_date)

    def rating(self, name: str) -> float:
        """Internal rating of a player."""
        try:
            return self.ratings[name]
        except KeyError:
            raise MissingPlayer(name) from None

    def _current(self, names: Sequence[str]) -> np.ndarray:
        if len(set(names)) != len(names):
            raise InvalidInput(f"A player appears more than once in one session: {list(names)}")
        return np.array([self.rating(name) for name in names], dtype=np.float64)

    def _store(self, names: Sequence[str], new_ratings: np.ndarray) -> None:
        for name, rating in zip(names, new_ratings):
            self.ratings[name] = float(rating)

    def apply(self, change: Change, epsilon: float = DEFAULT_EPSILON) -> None:
        """
        Fold one change into this evaluation (in place).

        A failing change leaves the evaluation untouched: new ratings are
        computed in full before any entry is overwritten, and ``last_date``
        only advances once the change has been applied. The timeline relies
        on this when it compares a change against the previous snapshot.
        """
        if isinstance(change, AddPlayer):
            self.ratings[change.name] = float(change.rating)
        elif isinstance(change, AdjustAlpha):
            self.alpha = float(change.new_alpha)
        elif isinstance(change, Play):
            names = [o.player for o in change.outcomes]
            if len(names) != 3:
                raise InvalidInput(f"A play needs exactly three outcomes, got {len(names)}")
            new_ratings = three_player_decay(
                self.alpha,
                change.game_count,
                self._current(names),
                [o.score for o in change.outcomes],
            )
            self._store(names, new_ratings)
        elif isinstance(change, Arbitrary):
            names = list(referenced_players(change))
            new_ratings = arbitrary_diffusion(
                self.alpha,
                names,
                self._current(names),
                change.scores,
                change.game_collections,
                epsilon,
            )
            self._store(names, new_ratings)
        elif isinstance(change, Circular):
            names = [o.player for o in change.outcomes]
            new_ratings = circular_diffusion(
                self.alpha,
                change.game_count,
                self._current(names),
                [o.score for o in change.outcomes],
                epsilon,
            )
            self._store(names, new_ratings)
        elif isinstance(change, Symmetric):
            names = list(change.scores)
            new_ratings = symmetric_decay(
                self.alpha,
                change.round_count,
                self._current(names),
                [change.scores[name] for name in names],
            )
            self._store(names, new_ratings)
        else:
            raise TypeError(f"Unknown change type: {type(change).__name__}")

        when = change_date(change)
        if when is not None and (self.last_date is None or when > self.last_date):
            self.last_date = when

        logger.debug("Applied %s (alpha=%s, players=%d)", type(change).__name__, self.alpha, len(self.ratings))

    def display_ratings(self, config: LedgerConfig) -> Dict[str, float]:
        """Player name -> display rating."""
        return {name: config.rating_to_display(r) for name, r in self.ratings.items()}

    def ranked(self) -> List[Tuple[str, float]]:
        """(name, internal rating) pairs, highest rating first, ties by name."""
        return sorted(self.ratings.items(), key=lambda item: (-item[1], item[0]))

    def to_dataframe(self, config: Optional[LedgerConfig] = None) -> pl.DataFrame:
        """Ratings as a Polars DataFrame: rank, name, rating, display_rating."""
        config = config or LedgerConfig()
        ranked = self.ranked()
        data = {
            "rank": np.arange(1, len(ranked) + 1, dtype=np.int32),
            "name": [name for name, _ in ranked],
            "rating": np.array([r for _, r in ranked], dtype=np.float64),
            "display_rating": np.array(
                [config.rating_to_display(r) for _, r in ranked], dtype=np.float64
            ),
        }
        return pl.DataFrame(
            data,
            schema={
                "rank": pl.Int32,
                "name": pl.Utf8,
                "rating": pl.Float64,
                "display_rating": pl.Float64,
            },
        )


def evaluate(
    history: Iterable[Change],
    starting_alpha: float,
    epsilon: float = DEFAULT_EPSILON,
) -> Evaluation:
    """
    Replay a history from scratch.

    Args:
        history: Changes in insertion order
        starting_alpha: Decay coefficient at the start of history
        epsilon: Pseudo-inverse tolerance for the diffusion models

    Returns:
        Evaluation after the last change

    Raises:
        MissingPlayer: a change references a player not added before it
        InvalidInput, DegenerateGroupSize, SingularSystem: from the update models
    """
    evaluation = Evaluation.start(starting_alpha)
    for change in history:
        evaluation.apply(change, epsilon)
    return evaluation


def replay(
    history: Iterable[Change],
    starting_alpha: float,
    epsilon: float = DEFAULT_EPSILON,
) -> Iterator[Tuple[Change, Evaluation]]:
    """
    Fold a history step by step, yielding ``(change, evaluation)`` after each change.

    Each yielded evaluation is an independent snapshot, so callers may keep
    them. The last snapshot equals ``evaluate(history, starting_alpha)``.
    """
    evaluation = Evaluation.start(starting_alpha)
    for change in history:
        evaluation.apply(change, epsilon)
        yield change, evaluation.copy()
