"""Input checks shared by the update models.

Counts and coefficients are checked before any formula runs so bad input
surfaces as InvalidInput rather than as NaN or inf further down.
"""

import numpy as np

from ..base.exceptions import InvalidInput


def check_count(value, what: str = "game_count") -> int:
    """Require a positive integer count."""
    try:
        integral = int(value) == value
    except (TypeError, ValueError, OverflowError):
        integral = False
    if isinstance(value, bool) or not integral:
        raise InvalidInput(f"{what} must be an integer, got {value!r}")
    value = int(value)
    if value < 1:
        raise InvalidInput(f"{what} must be at least 1, got {value}")
    return value


def check_alpha(alpha: float) -> float:
    alpha = float(alpha)
    if not np.isfinite(alpha):
        raise InvalidInput(f"alpha must be finite, got {alpha}")
    return alpha


def as_vector(values, what: str, size: int = None) -> np.ndarray:
    """Contiguous float64 copy of ``values``, checked for length and finiteness."""
    arr = np.ascontiguousarray(values, dtype=np.float64).copy()
    if arr.ndim != 1:
        raise InvalidInput(f"{what} must be one-dimensional")
    if size is not None and len(arr) != size:
        raise InvalidInput(f"{what} must have {size} entries, got {len(arr)}")
    if not np.all(np.isfinite(arr)):
        raise InvalidInput(f"{what} must be finite")
    return arr
