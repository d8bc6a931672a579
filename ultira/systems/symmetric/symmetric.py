"""
Symmetric group decay for ``Symmetric`` sessions.

n >= 3 players, every triple of the group plays the same number of rounds g.
With ratings r_i, average r_avg and total scores score_i:

    offset_i = r_avg + 3 / (n * (n - 2)) * score_i
    new_r_i  = (r_i - offset_i) * exp(-n * (n - 2) / 3 * alpha * g) + offset_i

At n = 2 the (n - 2) divisor vanishes, so groups smaller than three are rejected.
"""

import numpy as np

from ...base.exceptions import DegenerateGroupSize
from .._validation import as_vector, check_alpha, check_count
from ._numba_core import group_decay

MIN_GROUP_SIZE = 3


def symmetric_decay(
    alpha: float,
    round_count: int,
    ratings,
    scores,
) -> np.ndarray:
    """
    New ratings of every group member.

    Args:
        alpha: Decay coefficient
        round_count: Number of rounds played (>= 1)
        ratings: Current internal ratings, one per member
        scores: Total net score of each member, same order as ratings

    Returns:
        Array of new internal ratings in input order

    Raises:
        DegenerateGroupSize: fewer than three members
        InvalidInput: round_count < 1 or mismatched / non-finite inputs
    """
    ratings = as_vector(ratings, "ratings")
    if len(ratings) < MIN_GROUP_SIZE:
        raise DegenerateGroupSize(len(ratings), MIN_GROUP_SIZE, model="symmetric decay")
    scores = as_vector(scores, "scores", size=len(ratings))
    round_count = check_count(round_count, "round_count")
    alpha = check_alpha(alpha)

    return group_decay(alpha, round_count, ratings, scores)
