"""History change records.

``Change`` is a closed union of frozen dataclasses. Each variant is plain
data; the evaluator dispatches on the variant type, and the small set of
per-variant capabilities (date, referenced players, rename) live here as
free functions so adding a variant means adding one class and one branch
in each function.
"""

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Dict, Optional, Tuple, Union

from ..base.exceptions import UnsupportedRename


@dataclass(frozen=True)
class AddPlayer:
    """Register a player at an internal rating (overwrites an existing one)."""

    name: str
    rating: float = 0.0


@dataclass(frozen=True)
class Outcome:
    """A player's total net score over a session."""

    player: str
    score: float


@dataclass(frozen=True)
class Play:
    """
    A consecutive series of games by the same three people on one day.

    A play is interrupted once any of the three plays a rated game with
    someone other than the other two.
    """

    game_count: int
    date: date
    outcomes: Tuple[Outcome, ...]

    def __post_init__(self):
        object.__setattr__(self, "outcomes", tuple(self.outcomes))

    @classmethod
    def now(cls, game_count: int, outcomes) -> "Play":
        return cls(game_count=game_count, date=date.today(), outcomes=tuple(outcomes))


@dataclass(frozen=True)
class GameCollection:
    """Number of games two players took part in together."""

    players: Tuple[str, str]
    game_count: int

    def __post_init__(self):
        object.__setattr__(self, "players", tuple(self.players))


@dataclass(frozen=True)
class Arbitrary:
    """Scores plus an explicit pairwise game-count graph."""

    date: date
    scores: Dict[str, float] = field(default_factory=dict)
    game_collections: Tuple[GameCollection, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "scores", dict(self.scores))
        object.__setattr__(self, "game_collections", tuple(self.game_collections))

    @classmethod
    def now(cls, scores, game_collections) -> "Arbitrary":
        return cls(date=date.today(), scores=scores, game_collections=game_collections)


@dataclass(frozen=True)
class Circular:
    """Players seated in a cycle; every three consecutive seats play together."""

    date: date
    outcomes: Tuple[Outcome, ...]
    game_count: int

    def __post_init__(self):
        object.__setattr__(self, "outcomes", tuple(self.outcomes))

    @classmethod
    def now(cls, outcomes, game_count: int) -> "Circular":
        return cls(date=date.today(), outcomes=outcomes, game_count=game_count)


@dataclass(frozen=True)
class Symmetric:
    """Every triple of an n-player group plays the same number of rounds."""

    date: date
    scores: Dict[str, float] = field(default_factory=dict)
    round_count: int = 1

    def __post_init__(self):
        object.__setattr__(self, "scores", dict(self.scores))

    @classmethod
    def now(cls, scores, round_count: int) -> "Symmetric":
        return cls(date=date.today(), scores=scores, round_count=round_count)


@dataclass(frozen=True)
class AdjustAlpha:
    """Change the decay coefficient from this point of history onwards."""

    new_alpha: float


Change = Union[AddPlayer, Play, Arbitrary, Circular, Symmetric, AdjustAlpha]

CHANGE_TYPES = (AddPlayer, Play, Arbitrary, Circular, Symmetric, AdjustAlpha)

# Variants that move ratings through an update model
RATED_TYPES = (Play, Arbitrary, Circular, Symmetric)


def change_date(change: Change) -> Optional[date]:
    """Date attached to a change, or None for undated changes."""
    if isinstance(change, (Play, Arbitrary, Circular, Symmetric)):
        return change.date
    return None


def referenced_players(change: Change) -> Tuple[str, ...]:
    """Player names a change refers to, in order of first appearance."""
    if isinstance(change, AddPlayer):
        names = [change.name]
    elif isinstance(change, (Play, Circular)):
        names = [o.player for o in change.outcomes]
    elif isinstance(change, Arbitrary):
        names = list(change.scores)
        for collection in change.game_collections:
            names.extend(collection.players)
    elif isinstance(change, Symmetric):
        names = list(change.scores)
    elif isinstance(change, AdjustAlpha):
        names = []
    else:
        raise TypeError(f"Unknown change type: {type(change).__name__}")
    return tuple(dict.fromkeys(names))


def _rename_outcomes(outcomes: Tuple[Outcome, ...], old: str, new: str) -> Tuple[Outcome, ...]:
    return tuple(
        replace(o, player=new) if o.player == old else o
        for o in outcomes
    )


def rename_in_change(change: Change, old: str, new: str) -> Change:
    """
    Return ``change`` with every reference to ``old`` replaced by ``new``.

    Mapping-keyed variants (Arbitrary, Symmetric) would need a key remap and
    a merge policy for colliding scores, which is undefined, so they raise
    UnsupportedRename when they reference ``old``.
    """
    if old not in referenced_players(change):
        return change

    if isinstance(change, AddPlayer):
        return replace(change, name=new)
    if isinstance(change, (Play, Circular)):
        return replace(change, outcomes=_rename_outcomes(change.outcomes, old, new))
    if isinstance(change, (Arbitrary, Symmetric)):
        raise UnsupportedRename(
            f"Cannot rename '{old}': it is a score key in a "
            f"{type(change).__name__.lower()} change dated {change.date}"
        )
    raise TypeError(f"Unknown change type: {type(change).__name__}")
