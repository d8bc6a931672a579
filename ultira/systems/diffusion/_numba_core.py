"""
Numba-compiled Laplacian builders for the diffusion models.

Both builders produce the negative semi-definite graph Laplacian:
off-diagonal entries hold the edge weight, diagonal entries hold minus
the total weight of the node's edges, so every row sums to zero.
"""

import numpy as np
from numba import njit


@njit(cache=True)
def arbitrary_laplacian(
    n: int,
    first: np.ndarray,
    second: np.ndarray,
    weights: np.ndarray,
) -> np.ndarray:
    """Laplacian of an explicit weighted edge list (edges may repeat)."""
    laplacian = np.zeros((n, n), dtype=np.float64)
    for e in range(len(first)):
        i = first[e]
        j = second[e]
        w = weights[e]
        laplacian[i, j] += w
        laplacian[j, i] += w
        laplacian[i, i] -= w
        laplacian[j, j] -= w
    return laplacian


@njit(cache=True)
def circular_laplacian(n: int, game_count: int) -> np.ndarray:
    """
    Laplacian of players seated in a cycle.

    In every round each window of three consecutive seats (n windows,
    wrapping around) plays together: each ordered pair inside the window
    gains +1 and each member's diagonal gains -2.
    """
    laplacian = np.zeros((n, n), dtype=np.float64)
    window = np.empty(3, dtype=np.int64)
    for _ in range(game_count):
        for start in range(n):
            for k in range(3):
                window[k] = (start + k) % n
            for a in range(3):
                i = window[a]
                laplacian[i, i] -= 2.0
                for b in range(3):
                    if a != b:
                        laplacian[i, window[b]] += 1.0
    return laplacian
