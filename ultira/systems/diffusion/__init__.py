"""Graph diffusion models (arbitrary pairings and circular seating)."""

from .diffusion import (
    DEFAULT_EPSILON,
    steady_state,
    diffuse,
    game_graph_laplacian,
    arbitrary_diffusion,
    circular_diffusion,
)
from ._numba_core import circular_laplacian

__all__ = [
    "DEFAULT_EPSILON",
    "steady_state",
    "diffuse",
    "game_graph_laplacian",
    "circular_laplacian",
    "arbitrary_diffusion",
    "circular_diffusion",
]
