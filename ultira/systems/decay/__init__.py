"""Three-player zero-sum decay model."""

from .decay import three_player_decay, session_targets

__all__ = ["three_player_decay", "session_targets"]
