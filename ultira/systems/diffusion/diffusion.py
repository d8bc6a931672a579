"""
Rating diffusion over a graph of games played together.

Players are the nodes of a weighted graph whose edge weights count the
games two players took part in together. Ratings follow the linear ODE

    dr/dt = (alpha / 3) * L * r + const

whose closed-form solution is

    steady = -3 * pinv(L, epsilon) * scores
    new    = expm(L * alpha / 3) * (ratings - steady) + steady

Ratings exchange along edges and converge to ``steady`` (plus the
unchanged average rating) as alpha * games grows. The pseudo-inverse
makes disconnected and rank-deficient graphs well defined.

Two ways to build L:
- arbitrary_diffusion: explicit pairwise game counts (``Arbitrary``)
- circular_diffusion: players seated in a cycle (``Circular``)
"""

from typing import Iterable, Mapping, Sequence

import numpy as np
from scipy import linalg

from ...base.exceptions import DegenerateGroupSize, InvalidInput, SingularSystem
from .._validation import as_vector, check_alpha, check_count
from ._numba_core import arbitrary_laplacian, circular_laplacian

# Singular values below this are treated as zero by the pseudo-inverse
DEFAULT_EPSILON = 1e-9

MIN_CIRCLE_SIZE = 3


def _check_epsilon(epsilon: float) -> float:
    epsilon = float(epsilon)
    if not np.isfinite(epsilon) or epsilon <= 0.0:
        raise InvalidInput(f"epsilon must be positive and finite, got {epsilon}")
    return epsilon


def _check_laplacian(laplacian) -> np.ndarray:
    laplacian = np.ascontiguousarray(laplacian, dtype=np.float64)
    if laplacian.ndim != 2 or laplacian.shape[0] != laplacian.shape[1]:
        raise InvalidInput(f"Laplacian must be square, got shape {laplacian.shape}")
    if not np.all(np.isfinite(laplacian)):
        raise InvalidInput("Laplacian must be finite")
    return laplacian


def steady_state(laplacian, scores, epsilon: float = DEFAULT_EPSILON) -> np.ndarray:
    """
    Rating offsets the diffusion converges to, ``-3 * pinv(L) * scores``.

    Raises:
        SingularSystem: the pseudo-inverse did not converge
    """
    laplacian = _check_laplacian(laplacian)
    scores = as_vector(scores, "scores", size=laplacian.shape[0])
    epsilon = _check_epsilon(epsilon)

    try:
        # L is symmetric, so the eigen-decomposition based pinvh applies
        pseudo_inverse = linalg.pinvh(laplacian, atol=epsilon, rtol=0.0)
    except (linalg.LinAlgError, ValueError) as exc:
        raise SingularSystem(f"Pseudo-inverse failed at tolerance {epsilon}: {exc}") from exc

    steady = -3.0 * (pseudo_inverse @ scores)
    if not np.all(np.isfinite(steady)):
        raise SingularSystem(f"Pseudo-inverse is not finite at tolerance {epsilon}")
    return steady


def diffuse(
    laplacian,
    ratings,
    scores,
    alpha: float,
    epsilon: float = DEFAULT_EPSILON,
) -> np.ndarray:
    """
    Advance ratings along the diffusion for effective time ``alpha``.

    Args:
        laplacian: (n, n) negative semi-definite graph Laplacian
        ratings: (n,) current internal ratings
        scores: (n,) total net scores
        alpha: Decay coefficient
        epsilon: Pseudo-inverse tolerance

    Returns:
        (n,) new internal ratings
    """
    laplacian = _check_laplacian(laplacian)
    n = laplacian.shape[0]
    ratings = as_vector(ratings, "ratings", size=n)
    alpha = check_alpha(alpha)

    steady = steady_state(laplacian, scores, epsilon)
    propagator = linalg.expm(laplacian * (alpha / 3.0))
    new_ratings = propagator @ (ratings - steady) + steady

    if not np.all(np.isfinite(new_ratings)):
        raise SingularSystem("Diffusion produced non-finite ratings")
    return new_ratings


def game_graph_laplacian(players: Sequence[str], game_collections: Iterable) -> np.ndarray:
    """
    Laplacian of the game-count graph over ``players``.

    Each collection adds its game count to the edge between its two players.
    """
    index = {name: i for i, name in enumerate(players)}
    first, second, weights = [], [], []

    for collection in game_collections:
        pair = tuple(collection.players)
        if len(pair) != 2:
            raise InvalidInput(f"A game collection needs exactly two players, got {pair}")
        if pair[0] == pair[1]:
            raise InvalidInput(f"'{pair[0]}' cannot play a game collection with themselves")
        for name in pair:
            if name not in index:
                raise InvalidInput(f"'{name}' is in a game collection but not among the players")
        first.append(index[pair[0]])
        second.append(index[pair[1]])
        weights.append(check_count(collection.game_count, "game_count"))

    return arbitrary_laplacian(
        len(players),
        np.asarray(first, dtype=np.int64),
        np.asarray(second, dtype=np.int64),
        np.asarray(weights, dtype=np.float64),
    )


def arbitrary_diffusion(
    alpha: float,
    players: Sequence[str],
    ratings,
    scores: Mapping[str, float],
    game_collections: Iterable,
    epsilon: float = DEFAULT_EPSILON,
) -> np.ndarray:
    """
    New ratings for an ``Arbitrary`` session.

    Args:
        alpha: Decay coefficient
        players: Every participant (score keys and collection members)
        ratings: Current ratings, same order as ``players``
        scores: Player -> total score; absent players score 0
        game_collections: Objects with ``players`` (two names) and ``game_count``
        epsilon: Pseudo-inverse tolerance

    Returns:
        New ratings in the order of ``players``
    """
    players = list(players)
    if len(set(players)) != len(players):
        raise InvalidInput("Players of an arbitrary session must be distinct")
    unknown = [name for name in scores if name not in players]
    if unknown:
        raise InvalidInput(f"Scores given for players outside the session: {unknown}")
    if not players:
        return np.empty(0, dtype=np.float64)

    laplacian = game_graph_laplacian(players, game_collections)
    score_vector = np.array([scores.get(name, 0.0) for name in players], dtype=np.float64)
    return diffuse(laplacian, ratings, score_vector, alpha, epsilon)


def circular_diffusion(
    alpha: float,
    game_count: int,
    ratings,
    scores,
    epsilon: float = DEFAULT_EPSILON,
) -> np.ndarray:
    """
    New ratings for a ``Circular`` session; ratings and scores in seat order.

    Raises:
        DegenerateGroupSize: fewer than three seats
    """
    ratings = as_vector(ratings, "ratings")
    n = len(ratings)
    if n < MIN_CIRCLE_SIZE:
        raise DegenerateGroupSize(n, MIN_CIRCLE_SIZE, model="circular diffusion")
    scores = as_vector(scores, "scores", size=n)
    game_count = check_count(game_count, "game_count")

    laplacian = circular_laplacian(n, game_count)
    return diffuse(laplacian, ratings, scores, alpha, epsilon)
