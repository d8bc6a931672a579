"""Pairwise bet settlement model."""

from .bet import BetConfig, settle_bet, apply_bet

__all__ = ["BetConfig", "settle_bet", "apply_bet"]
