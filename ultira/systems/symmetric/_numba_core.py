"""Numba-compiled core of the symmetric group decay model."""

import numpy as np
from numba import njit


@njit(cache=True)
def group_decay(
    alpha: float,
    rounds: int,
    ratings: np.ndarray,
    scores: np.ndarray,
) -> np.ndarray:
    """
    Exponential relaxation of every rating towards its group offset.

    Assumes len(ratings) >= 3; the caller checks.
    """
    n = len(ratings)
    pairs_factor = n * (n - 2)
    average_rating = 0.0
    for i in range(n):
        average_rating += ratings[i]
    average_rating /= n

    keep = np.exp(-pairs_factor / 3.0 * alpha * rounds)

    new_ratings = np.empty(n, dtype=np.float64)
    for i in range(n):
        offset = average_rating + 3.0 / pairs_factor * scores[i]
        new_ratings[i] = (ratings[i] - offset) * keep + offset

    return new_ratings
