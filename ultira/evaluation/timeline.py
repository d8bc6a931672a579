"""Ratings over time, computed by stepping through the history."""

from typing import Iterable, List, Tuple

import polars as pl

from ..base.config import LedgerConfig
from ..base.exceptions import InvalidInput
from ..data.types import RATED_TYPES, Change, Play, change_date
from ..systems.diffusion import DEFAULT_EPSILON
from .evaluator import Evaluation, replay

TIMELINE_BASES = ("date", "play", "event")


def ratings_timeline(
    history: Iterable[Change],
    config: LedgerConfig,
    basis: str = "date",
    datum_name: str = "datum",
    epsilon: float = DEFAULT_EPSILON,
) -> pl.DataFrame:
    """
    Display ratings of every player over time.

    One column per player (sorted by name) after a leading label column.
    Cells are null before a player is added.

    Bases:
        date: one row per distinct date, with the ratings at the end of that
            date; a row is emitted whenever the next dated change is later
            than every date seen so far, plus one for the final date
        play: one row after every Play, labelled with its date
        event: one row after every rating-changing change, labelled with its date

    Raises:
        InvalidInput: unknown basis, or a player named like the label column
    """
    if basis not in TIMELINE_BASES:
        raise InvalidInput(f"Unknown timeline basis '{basis}', expected one of {TIMELINE_BASES}")

    rows: List[Tuple[str, Evaluation]] = []
    previous = Evaluation.start(config.starting_alpha)

    for change, after in replay(history, config.starting_alpha, epsilon):
        when = change_date(change)
        if basis == "date":
            if when is not None and previous.last_date is not None and when > previous.last_date:
                rows.append((previous.last_date.isoformat(), previous))
        elif basis == "play":
            if isinstance(change, Play):
                rows.append((change.date.isoformat(), after))
        elif isinstance(change, RATED_TYPES):
            rows.append((when.isoformat(), after))
        previous = after

    if basis == "date" and previous.last_date is not None:
        rows.append((previous.last_date.isoformat(), previous))

    names = sorted(previous.ratings)
    if datum_name in names:
        raise InvalidInput(f"Label column '{datum_name}' clashes with a player name")

    data = {datum_name: [label for label, _ in rows]}
    for name in names:
        data[name] = [
            config.rating_to_display(ev.ratings[name]) if name in ev.ratings else None
            for _, ev in rows
        ]

    schema = {datum_name: pl.Utf8}
    schema.update({name: pl.Float64 for name in names})
    return pl.DataFrame(data, schema=schema)
