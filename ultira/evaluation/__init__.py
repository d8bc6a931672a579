"""Replay of the history into ratings."""

from .evaluator import Evaluation, evaluate, replay
from .timeline import ratings_timeline, TIMELINE_BASES

__all__ = [
    "Evaluation",
    "evaluate",
    "replay",
    "ratings_timeline",
    "TIMELINE_BASES",
]
