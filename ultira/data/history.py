"""Append-only history of rating-affecting changes."""

import logging
from typing import Iterable, Iterator, List, Optional

from ..base.exceptions import EmptyHistory
from .types import Change, referenced_players, rename_in_change

logger = logging.getLogger(__name__)


class History:
    """
    Ordered log of changes.

    Insertion order is the causal order used for replay; the dates embedded
    in changes are advisory only. The log never computes ratings and never
    validates what is appended. Validation happens when the history is
    replayed by the evaluator.

    Mutations:
    - append(): add a change at the end
    - undo(): remove the last change
    - rename(): rewrite player references in every change
    """

    def __init__(self, changes: Optional[Iterable[Change]] = None):
        self._changes: List[Change] = list(changes) if changes is not None else []

    def append(self, change: Change) -> None:
        self._changes.append(change)

    def undo(self) -> Change:
        """Remove and return the last change."""
        if not self._changes:
            raise EmptyHistory()
        change = self._changes.pop()
        logger.info("Undid %s", type(change).__name__)
        return change

    def rename(self, old: str, new: str) -> int:
        """
        Replace every reference to ``old`` with ``new``.

        Renaming onto an existing name merges the two players. Either every
        change is rewritten or, if any change cannot be (UnsupportedRename),
        none is.

        Returns:
            Number of changes that were rewritten
        """
        renamed = [rename_in_change(c, old, new) for c in self._changes]
        count = sum(1 for before, after in zip(self._changes, renamed) if before is not after)
        self._changes = renamed
        logger.info("Renamed '%s' to '%s' in %d changes", old, new, count)
        return count

    def players(self) -> List[str]:
        """Every player name referenced anywhere, in first-seen order."""
        seen = {}
        for change in self._changes:
            for name in referenced_players(change):
                seen.setdefault(name, None)
        return list(seen)

    @property
    def last(self) -> Optional[Change]:
        return self._changes[-1] if self._changes else None

    def copy(self) -> "History":
        return History(self._changes)

    def __len__(self) -> int:
        return len(self._changes)

    def __iter__(self) -> Iterator[Change]:
        return iter(self._changes)

    def __getitem__(self, index):
        return self._changes[index]

    def __eq__(self, other) -> bool:
        if not isinstance(other, History):
            return NotImplemented
        return self._changes == other._changes

    def __repr__(self) -> str:
        return f"History(changes={len(self._changes)})"
