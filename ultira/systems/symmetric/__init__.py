"""Symmetric group decay model."""

from .symmetric import symmetric_decay, MIN_GROUP_SIZE

__all__ = ["symmetric_decay", "MIN_GROUP_SIZE"]
