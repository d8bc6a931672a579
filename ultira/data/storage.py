"""TOML storage of the ledger document.

The document holds a ``[config]`` table and a ``[[history]]`` array. Each
history entry carries a ``kind`` tag naming its variant, followed by the
variant's fields in declaration order:

    [config]
    spread = 50.0
    base_rating = 100.0
    starting_alpha = 0.02

    [[history]]
    kind = "add_player"
    name = "Kovács Anna"
    rating = 0.0

    [[history]]
    kind = "play"
    game_count = 12
    date = 2024-05-01
    outcomes = [{ player = "Kovács Anna", score = 8.0 }, ...]
"""

import logging
import os
import tempfile
import tomllib
from dataclasses import fields
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Mapping, Tuple, Union

import tomli_w

from ..base.config import LedgerConfig
from ..base.exceptions import InvalidInput
from ..systems._validation import check_count
from .history import History
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
)

logger = logging.getLogger(__name__)

KINDS = {
    "add_player": AddPlayer,
    "play": Play,
    "arbitrary": Arbitrary,
    "circular": Circular,
    "symmetric": Symmetric,
    "adjust_alpha": AdjustAlpha,
}
_KIND_OF = {cls: kind for kind, cls in KINDS.items()}


def _encode_value(value: Any) -> Any:
    if isinstance(value, (Outcome, GameCollection)):
        return {f.name: _encode_value(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, (list, tuple)):
        return [_encode_value(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _encode_value(v) for k, v in value.items()}
    return value


def change_to_dict(change: Change) -> Dict[str, Any]:
    """Tagged mapping for one change, fields in declaration order."""
    kind = _KIND_OF.get(type(change))
    if kind is None:
        raise TypeError(f"Unknown change type: {type(change).__name__}")
    data = {"kind": kind}
    for f in fields(change):
        data[f.name] = _encode_value(getattr(change, f.name))
    return data


def _require(data: Mapping[str, Any], key: str, kind: str) -> Any:
    try:
        return data[key]
    except KeyError:
        raise InvalidInput(f"'{kind}' change is missing field '{key}'") from None


def _count(data: Mapping[str, Any], key: str, kind: str) -> int:
    return check_count(_require(data, key, kind), f"{key} of '{kind}' change")


def _number(value: Any, what: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise InvalidInput(f"{what} must be a number, got {value!r}") from None


def _parse_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value)
        except ValueError:
            pass
    raise InvalidInput(f"Invalid date: {value!r}")


def _parse_outcomes(items: Any, kind: str) -> Tuple[Outcome, ...]:
    try:
        return tuple(Outcome(player=str(o["player"]), score=float(o["score"])) for o in items)
    except (KeyError, TypeError, ValueError) as exc:
        raise InvalidInput(f"Invalid outcomes in '{kind}' change: {exc}") from exc


def _parse_scores(scores: Any, kind: str) -> Dict[str, float]:
    try:
        return {str(name): float(score) for name, score in scores.items()}
    except (AttributeError, TypeError, ValueError) as exc:
        raise InvalidInput(f"Invalid scores in '{kind}' change: {exc}") from exc


def change_from_dict(data: Mapping[str, Any]) -> Change:
    """Inverse of ``change_to_dict``."""
    if not isinstance(data, Mapping):
        raise InvalidInput(f"History entries must be tables, got {data!r}")
    kind = data.get("kind")
    if kind not in KINDS:
        raise InvalidInput(f"Unknown change kind: {kind!r}")

    if kind == "add_player":
        return AddPlayer(
            name=str(_require(data, "name", kind)),
            rating=_number(data.get("rating", 0.0), "rating"),
        )
    if kind == "adjust_alpha":
        return AdjustAlpha(new_alpha=_number(_require(data, "new_alpha", kind), "new_alpha"))
    if kind == "play":
        return Play(
            game_count=_count(data, "game_count", kind),
            date=_parse_date(_require(data, "date", kind)),
            outcomes=_parse_outcomes(_require(data, "outcomes", kind), kind),
        )
    if kind == "circular":
        return Circular(
            date=_parse_date(_require(data, "date", kind)),
            outcomes=_parse_outcomes(_require(data, "outcomes", kind), kind),
            game_count=_count(data, "game_count", kind),
        )
    if kind == "symmetric":
        return Symmetric(
            date=_parse_date(_require(data, "date", kind)),
            scores=_parse_scores(_require(data, "scores", kind), kind),
            round_count=_count(data, "round_count", kind),
        )

    try:
        collections = tuple(
            GameCollection(
                players=tuple(str(p) for p in c["players"]),
                game_count=check_count(c["game_count"], "game_count of a game collection"),
            )
            for c in data.get("game_collections", [])
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise InvalidInput(f"Invalid game collections in '{kind}' change: {exc}") from exc
    return Arbitrary(
        date=_parse_date(_require(data, "date", kind)),
        scores=_parse_scores(data.get("scores", {}), kind),
        game_collections=collections,
    )


def document_to_dict(config: LedgerConfig, history: History) -> Dict[str, Any]:
    return {
        "config": config.to_dict(),
        "history": [change_to_dict(c) for c in history],
    }


def document_from_dict(data: Mapping[str, Any]) -> Tuple[LedgerConfig, History]:
    raw_config = data.get("config")
    if raw_config is not None and not isinstance(raw_config, Mapping):
        raise InvalidInput("[config] must be a table")
    config = LedgerConfig.from_dict(raw_config)

    entries: List[Mapping[str, Any]] = data.get("history", [])
    if not isinstance(entries, list):
        raise InvalidInput("history must be an array of tables")
    return config, History(change_from_dict(entry) for entry in entries)


def read_document(path: Union[str, Path]) -> Tuple[LedgerConfig, History]:
    """Load ``(config, history)`` from a TOML file."""
    path = Path(path)
    with path.open("rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as exc:
            raise InvalidInput(f"{path}: {exc}") from exc
    config, history = document_from_dict(data)
    logger.info("Loaded %d changes from %s", len(history), path)
    return config, history


def write_document(path: Union[str, Path], config: LedgerConfig, history: History) -> None:
    """
    Write ``(config, history)`` to a TOML file.

    The document is written to a temporary file next to ``path`` and then
    moved over it, so the file is never left half-written.
    """
    path = Path(path)
    text = tomli_w.dumps(document_to_dict(config, history))

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    logger.info("Saved %d changes to %s", len(history), path)
