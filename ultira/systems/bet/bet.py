"""
Pairwise bet settlement.

One player bids alone against a two-person team. The points of the bet
are signed (positive means the lone player succeeded). Each bet is settled
on its own, with no decay:

    team_rating = mean(team_ratings)
    expected    = (alone_rating - team_rating) / spread
    delta       = k * (points - expected)
    new_alone   = alone_rating + delta
    new_team[i] = team_ratings[i] - delta
"""

from dataclasses import dataclass
from typing import Dict, MutableMapping, Sequence, Tuple

import numpy as np

from ...base.exceptions import InvalidInput
from .._validation import as_vector
from ._numba_core import settle


@dataclass
class BetConfig:
    """Configuration for bet settlement."""

    k: float = 1.0
    spread: float = 100.0
    default_rating: float = 1000.0  # Rating given to players seen for the first time

    def __post_init__(self):
        if self.spread == 0:
            raise InvalidInput("spread must be non-zero")


def settle_bet(
    alone_rating: float,
    team_ratings: Sequence[float],
    points: float,
    config: BetConfig = None,
) -> Tuple[float, np.ndarray]:
    """
    Settle one bet.

    Returns:
        (new_alone_rating, new_team_ratings)
    """
    config = config or BetConfig()
    team = as_vector(team_ratings, "team_ratings", size=2)
    alone_rating, points = float(alone_rating), float(points)
    if not (np.isfinite(alone_rating) and np.isfinite(points)):
        raise InvalidInput("alone_rating and points must be finite")

    delta = settle(alone_rating, team, points, float(config.k), float(config.spread))
    return alone_rating + delta, team - delta


def apply_bet(
    ratings: MutableMapping[str, float],
    alone: str,
    team: Sequence[str],
    points: float,
    config: BetConfig = None,
) -> Dict[str, float]:
    """
    Settle a bet against a name -> rating mapping, updating it in place.

    Players not yet in the mapping start at ``config.default_rating``.

    Returns:
        The new ratings of the three players involved
    """
    config = config or BetConfig()
    team = list(team)
    if len(team) != 2 or len({alone, *team}) != 3:
        raise InvalidInput("A bet needs one lone player and two distinct team members")

    for name in (alone, *team):
        ratings.setdefault(name, config.default_rating)

    new_alone, new_team = settle_bet(
        ratings[alone], [ratings[team[0]], ratings[team[1]]], points, config
    )
    ratings[alone] = float(new_alone)
    ratings[team[0]] = float(new_team[0])
    ratings[team[1]] = float(new_team[1])

    return {name: ratings[name] for name in (alone, *team)}
