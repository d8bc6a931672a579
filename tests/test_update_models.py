"""Tests for the rating update models.

Verifies:
1. Three-player decay: worked example, zero-sum conservation, convexity
2. Symmetric group decay: formula and the group size guard
3. Bet settlement
4. Diffusion: Laplacian construction, steady state, convergence, mass conservation
5. Input validation happens before any formula runs
"""

from types import SimpleNamespace

import numpy as np
import pytest
from scipy import linalg

from ultira import (
    DegenerateGroupSize,
    InvalidInput,
    SingularSystem,
    BetConfig,
    apply_bet,
    settle_bet,
    three_player_decay,
    symmetric_decay,
    arbitrary_diffusion,
    circular_diffusion,
    diffuse,
    steady_state,
)
from ultira.systems.decay import session_targets
from ultira.systems.diffusion import circular_laplacian, game_graph_laplacian


def collection(first, second, games):
    return SimpleNamespace(players=(first, second), game_count=games)


# ---------------------------------------------------------------------------
# Three-player decay
# ---------------------------------------------------------------------------

def test_three_player_decay_worked_example():
    """One game at alpha=0.1 from equal ratings moves 10% of the way to the scores."""
    new = three_player_decay(0.1, 1, [0.0, 0.0, 0.0], [4.0, -2.0, -2.0])
    assert np.allclose(new, [0.4, -0.2, -0.2], atol=1e-12), f"Unexpected ratings: {new}"


def test_three_player_decay_conserves_rating_mass():
    """Zero-sum scores leave the sum of ratings unchanged for every alpha and game count."""
    rng = np.random.RandomState(7)
    for alpha in (0.001, 0.02, 0.1, 0.5, 0.9, 0.999):
        for games in (1, 2, 5, 17, 100):
            ratings = rng.normal(0, 2, 3)
            scores = rng.randint(-20, 20, 3).astype(float)
            scores[2] = -(scores[0] + scores[1])

            new = three_player_decay(alpha, games, ratings, scores)
            assert np.isclose(new.sum(), ratings.sum(), atol=1e-9), (
                f"alpha={alpha}, games={games}: sum {ratings.sum()} -> {new.sum()}"
            )


def test_three_player_decay_is_convex_blend():
    """Each new rating lies between the old rating and its target."""
    rng = np.random.RandomState(11)
    for alpha in (0.01, 0.3, 0.8):
        for games in (1, 3, 40):
            ratings = rng.normal(0, 3, 3)
            scores = rng.normal(0, 10, 3)
            new = three_player_decay(alpha, games, ratings, scores)
            targets = session_targets(games, ratings, scores)

            low = np.minimum(ratings, targets) - 1e-12
            high = np.maximum(ratings, targets) + 1e-12
            assert np.all((low <= new) & (new <= high)), (
                f"alpha={alpha}, games={games}: {new} not within [{low}, {high}]"
            )


def test_three_player_decay_many_games_reaches_target():
    ratings = np.array([1.0, -0.5, 0.2])
    scores = np.array([30.0, -10.0, -20.0])
    new = three_player_decay(0.5, 200, ratings, scores)
    assert np.allclose(new, session_targets(200, ratings, scores))


@pytest.mark.parametrize("games", [0, -1, 1.5])
def test_three_player_decay_rejects_bad_game_count(games):
    with pytest.raises(InvalidInput):
        three_player_decay(0.1, games, [0.0, 0.0, 0.0], [1.0, -1.0, 0.0])


def test_three_player_decay_needs_three_players():
    with pytest.raises(InvalidInput):
        three_player_decay(0.1, 1, [0.0, 0.0], [1.0, -1.0])


# ---------------------------------------------------------------------------
# Symmetric group decay
# ---------------------------------------------------------------------------

def test_symmetric_decay_three_players():
    alpha, rounds = 0.1, 1
    scores = np.array([2.0, -1.0, -1.0])
    new = symmetric_decay(alpha, rounds, [0.0, 0.0, 0.0], scores)
    # n = 3: offset = average + score, rate = alpha * rounds
    expected = scores * (1.0 - np.exp(-alpha * rounds))
    assert np.allclose(new, expected, atol=1e-12), f"{new} != {expected}"


def test_symmetric_decay_formula_larger_group():
    ratings = np.array([0.5, -0.2, 0.1, 0.0, -0.4])
    scores = np.array([6.0, -2.0, 1.0, -3.0, -2.0])
    alpha, rounds, n = 0.03, 4, 5

    offset = ratings.mean() + 3.0 / (n * (n - 2)) * scores
    expected = (ratings - offset) * np.exp(-n * (n - 2) / 3.0 * alpha * rounds) + offset

    assert np.allclose(symmetric_decay(alpha, rounds, ratings, scores), expected)


def test_symmetric_decay_group_size_guard():
    with pytest.raises(DegenerateGroupSize) as excinfo:
        symmetric_decay(0.1, 1, [0.0, 0.0], [1.0, -1.0])
    assert excinfo.value.size == 2

    # Three is the smallest valid group
    symmetric_decay(0.1, 1, [0.0, 0.0, 0.0], [1.0, -1.0, 0.0])


def test_symmetric_decay_rejects_bad_round_count():
    with pytest.raises(InvalidInput):
        symmetric_decay(0.1, 0, [0.0, 0.0, 0.0], [1.0, -1.0, 0.0])


# ---------------------------------------------------------------------------
# Bet settlement
# ---------------------------------------------------------------------------

def test_settle_bet_equal_ratings():
    new_alone, new_team = settle_bet(1000.0, [1000.0, 1000.0], 3.0, BetConfig(k=1.0, spread=100.0))
    assert new_alone == pytest.approx(1003.0)
    assert np.allclose(new_team, [997.0, 997.0])


def test_settle_bet_expected_result_moves_nothing():
    """A stronger lone player who wins exactly as expected keeps their rating."""
    config = BetConfig(k=2.0, spread=100.0)
    # alone - team average = 200 -> expected 2 points
    new_alone, new_team = settle_bet(1200.0, [950.0, 1050.0], 2.0, config)
    assert new_alone == pytest.approx(1200.0)
    assert np.allclose(new_team, [950.0, 1050.0])


def test_apply_bet_registers_new_players():
    ratings = {"Anna": 1010.0}
    result = apply_bet(ratings, "Anna", ["Béla", "Cili"], -4.0, BetConfig())

    # expected = (1010 - 1000) / 100 = 0.1, delta = -4.1
    assert result["Anna"] == pytest.approx(1005.9)
    assert result["Béla"] == pytest.approx(1004.1)
    assert ratings["Cili"] == pytest.approx(1004.1)


def test_apply_bet_rejects_repeated_players():
    with pytest.raises(InvalidInput):
        apply_bet({}, "Anna", ["Anna", "Béla"], 1.0)


# ---------------------------------------------------------------------------
# Diffusion
# ---------------------------------------------------------------------------

def test_game_graph_laplacian_structure():
    L = game_graph_laplacian(
        ["A", "B", "C"],
        [collection("A", "B", 2), collection("B", "C", 3), collection("A", "B", 1)],
    )
    expected = np.array([
        [-3.0, 3.0, 0.0],
        [3.0, -6.0, 3.0],
        [0.0, 3.0, -3.0],
    ])
    assert np.array_equal(L, expected), f"Unexpected Laplacian:\n{L}"


def test_circular_laplacian_three_seats_is_triangle():
    """With three seats every window is the whole table: each pair gets 3 games per round."""
    games = 4
    triangle = game_graph_laplacian(
        ["A", "B", "C"],
        [collection("A", "B", 3 * games), collection("B", "C", 3 * games), collection("A", "C", 3 * games)],
    )
    assert np.array_equal(circular_laplacian(3, games), triangle)


def test_circular_laplacian_five_seats():
    L = circular_laplacian(5, 1)
    assert np.allclose(L, L.T)
    assert np.allclose(L.sum(axis=1), 0.0)
    assert L[0, 1] == 2.0  # neighbours share two windows
    assert L[0, 2] == 1.0  # two seats apart share one window
    assert L[0, 0] == -6.0
    assert np.array_equal(circular_laplacian(5, 3), 3 * L)


def test_steady_state_of_play_matches_score_per_game():
    """A triangle of g games pulls ratings to score / g, as the three-player model does."""
    games = 5
    L = game_graph_laplacian(
        ["A", "B", "C"],
        [collection("A", "B", games), collection("B", "C", games), collection("A", "C", games)],
    )
    scores = np.array([10.0, -4.0, -6.0])
    assert np.allclose(steady_state(L, scores), scores / games, atol=1e-10)


def test_diffusion_converges_to_steady_state():
    """On a connected graph, long diffusion forgets the initial ratings (beyond their mean)."""
    players = ["A", "B", "C", "D"]
    collections = [collection("A", "B", 2), collection("B", "C", 3), collection("C", "D", 1)]
    scores = {"A": 3.0, "B": -1.0, "D": -2.0}

    L = game_graph_laplacian(players, collections)
    steady = steady_state(L, [3.0, -1.0, 0.0, -2.0])

    for initial in ([0.0, 0.0, 0.0, 0.0], [1.0, -1.0, 0.5, -0.5]):
        new = arbitrary_diffusion(1000.0, players, initial, scores, collections)
        assert np.allclose(new, steady + np.mean(initial), atol=1e-6), (
            f"initial={initial}: {new} did not converge to {steady}"
        )


def test_diffusion_conserves_rating_mass_per_component():
    """Disconnected groups exchange nothing between them."""
    players = ["A", "B", "C", "D"]
    collections = [collection("A", "B", 4), collection("C", "D", 2)]
    initial = np.array([0.3, -0.1, 0.7, 0.2])
    scores = {"A": 5.0, "B": -5.0, "C": 1.0, "D": -1.0}

    new = arbitrary_diffusion(0.05, players, initial, scores, collections)

    assert np.isclose(new[:2].sum(), initial[:2].sum(), atol=1e-12)
    assert np.isclose(new[2:].sum(), initial[2:].sum(), atol=1e-12)
    assert new[0] > initial[0] and new[2] > initial[2]


def test_diffusion_zero_alpha_keeps_ratings():
    initial = np.array([0.3, -0.1, 0.7])
    new = circular_diffusion(0.0, 2, initial, [1.0, 0.0, -1.0])
    assert np.allclose(new, initial, atol=1e-12)


def test_arbitrary_player_without_games_keeps_rating():
    """A scored player with no game collection is an isolated node."""
    new = arbitrary_diffusion(
        0.1, ["A", "B", "C"], [0.0, 0.0, 0.25], {"A": 1.0, "B": -1.0, "C": 3.0},
        [collection("A", "B", 1)],
    )
    assert np.isclose(new[2], 0.25, atol=1e-12)


def test_diffusion_input_validation():
    with pytest.raises(InvalidInput):
        arbitrary_diffusion(0.1, ["A", "B"], [0.0, 0.0], {"A": 1.0}, [collection("A", "A", 1)])
    with pytest.raises(InvalidInput):
        arbitrary_diffusion(0.1, ["A", "B"], [0.0, 0.0], {}, [collection("A", "B", 0)])
    with pytest.raises(InvalidInput):
        arbitrary_diffusion(0.1, ["A", "B"], [0.0, 0.0], {"Z": 1.0}, [collection("A", "B", 1)])
    with pytest.raises(DegenerateGroupSize):
        circular_diffusion(0.1, 1, [0.0, 0.0], [1.0, -1.0])
    with pytest.raises(InvalidInput):
        circular_diffusion(0.1, 0, [0.0, 0.0, 0.0], [1.0, -1.0, 0.0])
    with pytest.raises(InvalidInput):
        diffuse(np.zeros((3, 3)), [0.0, 0.0, 0.0], [0.0, 0.0, 0.0], 0.1, epsilon=0.0)


def test_pseudo_inverse_failure_is_singular_system(monkeypatch):
    def fail(*args, **kwargs):
        raise linalg.LinAlgError("did not converge")

    monkeypatch.setattr(linalg, "pinvh", fail)
    with pytest.raises(SingularSystem):
        circular_diffusion(0.1, 1, [0.0, 0.0, 0.0], [1.0, -1.0, 0.0])
