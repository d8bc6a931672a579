"""History records, the history ledger and its TOML storage."""

from .types import (
    AddPlayer,
    AdjustAlpha,
    Arbitrary,
    Change,
    Circular,
    GameCollection,
    Outcome,
    Play,
    Symmetric,
    change_date,
    referenced_players,
    rename_in_change,
)
from .history import History
from .storage import read_document, write_document

__all__ = [
    "AddPlayer",
    "AdjustAlpha",
    "Arbitrary",
    "Change",
    "Circular",
    "GameCollection",
    "Outcome",
    "Play",
    "Symmetric",
    "change_date",
    "referenced_players",
    "rename_in_change",
    "History",
    "read_document",
    "write_document",
]
