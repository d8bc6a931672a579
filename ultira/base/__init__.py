"""Configuration and error types shared by every part of the ledger."""

from .config import LedgerConfig
from .exceptions import (
    UltiraError,
    MissingPlayer,
    SingularSystem,
    DegenerateGroupSize,
    InvalidInput,
    EmptyHistory,
    UnsupportedRename,
)

__all__ = [
    "LedgerConfig",
    "UltiraError",
    "MissingPlayer",
    "SingularSystem",
    "DegenerateGroupSize",
    "InvalidInput",
    "EmptyHistory",
    "UnsupportedRename",
]
