"""
Numba-compiled core of the three-player decay model.

No fastmath here: replaying the same history must give bit-identical
ratings, so floating point reassociation is not allowed.
"""

import numpy as np
from numba import njit


@njit(cache=True)
def three_player_update(
    alpha: float,
    games: int,
    ratings: np.ndarray,
    scores: np.ndarray,
) -> np.ndarray:
    """
    Blend each rating towards the average rating plus the player's score per game.

    ``games`` applications of the one-game step collapse into the weight
    (1 - alpha)^games on the old rating.
    """
    average_rating = (ratings[0] + ratings[1] + ratings[2]) / 3.0
    keep = (1.0 - alpha) ** games

    new_ratings = np.empty(3, dtype=np.float64)
    for i in range(3):
        target = average_rating + scores[i] / games
        new_ratings[i] = keep * ratings[i] + target * (1.0 - keep)

    return new_ratings


@njit(cache=True)
def rating_targets(games: int, ratings: np.ndarray, scores: np.ndarray) -> np.ndarray:
    """Ratings the three players drift towards as the number of games grows."""
    average_rating = (ratings[0] + ratings[1] + ratings[2]) / 3.0
    targets = np.empty(3, dtype=np.float64)
    for i in range(3):
        targets[i] = average_rating + scores[i] / games
    return targets
