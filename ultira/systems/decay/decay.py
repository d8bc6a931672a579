"""
Three-player zero-sum decay model used for ``Play`` sessions.

For g games, ratings r_i, average rating r_avg and total scores score_i:

    s_i     = score_i / g
    new_r_i = (1 - alpha)^g * r_i + (r_avg + s_i) * (1 - (1 - alpha)^g)

Each new rating is a convex blend of the old rating and the target
r_avg + s_i. When the three scores sum to zero the sum of ratings is
unchanged.
"""

import numpy as np

from .._validation import as_vector, check_alpha, check_count
from ._numba_core import rating_targets, three_player_update


def three_player_decay(
    alpha: float,
    game_count: int,
    ratings,
    scores,
) -> np.ndarray:
    """
    New ratings of the three players after a session.

    Args:
        alpha: Decay coefficient per game
        game_count: Number of games in the session (>= 1)
        ratings: Current internal ratings of the three players
        scores: Total net score of each player over the session

    Returns:
        Array of the three new internal ratings
    """
    game_count = check_count(game_count, "game_count")
    alpha = check_alpha(alpha)
    ratings = as_vector(ratings, "ratings", size=3)
    scores = as_vector(scores, "scores", size=3)

    return three_player_update(alpha, game_count, ratings, scores)


def session_targets(game_count: int, ratings, scores) -> np.ndarray:
    """Ratings a session pulls each player towards (average rating plus score per game)."""
    game_count = check_count(game_count, "game_count")
    return rating_targets(
        game_count,
        as_vector(ratings, "ratings", size=3),
        as_vector(scores, "scores", size=3),
    )
