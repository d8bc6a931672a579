"""Rating update models.

Each model is a pure function of the current ratings, the session result
and the decay coefficient:

- bet: pairwise bet settlement (one player against a team, no decay)
- decay: three-player zero-sum decay (``Play``)
- diffusion: graph diffusion over pairings (``Arbitrary``) or a cycle (``Circular``)
- symmetric: homogeneous group decay (``Symmetric``)

Hot loops are compiled with Numba; matrix functions come from SciPy.
"""

from .bet import BetConfig, settle_bet, apply_bet
from .decay import three_player_decay, session_targets
from .diffusion import (
    DEFAULT_EPSILON,
    steady_state,
    diffuse,
    game_graph_laplacian,
    circular_laplacian,
    arbitrary_diffusion,
    circular_diffusion,
)
from .symmetric import symmetric_decay

__all__ = [
    # Bet settlement
    "BetConfig",
    "settle_bet",
    "apply_bet",
    # Three-player decay
    "three_player_decay",
    "session_targets",
    # Diffusion
    "DEFAULT_EPSILON",
    "steady_state",
    "diffuse",
    "game_graph_laplacian",
    "circular_laplacian",
    "arbitrary_diffusion",
    "circular_diffusion",
    # Group decay
    "symmetric_decay",
]
