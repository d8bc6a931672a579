"""Ledger configuration and the display <-> internal rating transform."""

from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Mapping, Optional

import numpy as np

from .exceptions import InvalidInput


@dataclass
class LedgerConfig:
    """
    Configuration stored alongside the history.

    Internal ratings are unit-less; display ratings are rescaled for people:
    a player rated k * spread above the average wins k points per game on
    average.

    Attributes:
        spread: Display scale factor (must be non-zero)
        base_rating: Display rating of internal rating 0
        starting_alpha: Decay coefficient at the start of history
    """

    spread: float = 50.0
    base_rating: float = 100.0
    starting_alpha: float = 0.02

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            try:
                setattr(self, f.name, float(value))
            except (TypeError, ValueError):
                raise InvalidInput(f"{f.name} must be a number, got {value!r}") from None
        if self.spread == 0.0 or not np.isfinite(self.spread):
            raise InvalidInput(f"spread must be finite and non-zero, got {self.spread}")

    def rating_from_display(self, display: float) -> float:
        return (display - self.base_rating) / self.spread

    def rating_to_display(self, rating: float) -> float:
        return rating * self.spread + self.base_rating

    def alpha_from_display(self, display: float) -> float:
        return display / self.spread

    def alpha_to_display(self, alpha: float) -> float:
        return alpha * self.spread

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "LedgerConfig":
        """Build a config from a mapping; missing keys use defaults, unknown keys are ignored."""
        if not data:
            return cls()
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})
