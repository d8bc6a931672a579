"""Numba-compiled core of the pairwise bet settlement model."""

import numpy as np
from numba import njit


@njit(cache=True)
def settle(
    alone_rating: float,
    team_ratings: np.ndarray,
    points: float,
    k: float,
    spread: float,
) -> float:
    """Rating change of the player who bid alone against the two-person team."""
    team_rating = (team_ratings[0] + team_ratings[1]) / 2.0
    expected = (alone_rating - team_rating) / spread
    return k * (points - expected)
