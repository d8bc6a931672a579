"""
Ultira - event-sourced skill ratings for Ulti.

Ratings are never stored. The ledger keeps an append-only history of
changes (players added, sessions played, decay coefficient adjusted) and
ratings are derived by replaying that history through the update models:

- Play: three-player zero-sum decay
- Arbitrary: diffusion over an explicit graph of games played together
- Circular: diffusion over players seated in a cycle
- Symmetric: homogeneous group decay
- settle_bet: pairwise bet settlement (standalone)

Quick Start:
    from ultira import Ledger, Play, Outcome

    ledger = Ledger.load("ultira.toml")

    before, after = ledger.play(
        Play.now(8, [Outcome("Anna", 6), Outcome("Béla", -2), Outcome("Cili", -4)])
    )
    print(after.to_dataframe(ledger.config))

    ledger.save("ultira.toml")

Command-line interface:
    ultira --file ultira.toml ratings
    ultira play 8 Anna 6 Béla -2 Cili -4
    ultira export ratings.tsv --basis date
"""

from .base import (
    LedgerConfig,
    UltiraError,
    MissingPlayer,
    SingularSystem,
    DegenerateGroupSize,
    InvalidInput,
    EmptyHistory,
    UnsupportedRename,
)
from .data import (
    AddPlayer,
    AdjustAlpha,
    Arbitrary,
    Change,
    Circular,
    GameCollection,
    Outcome,
    Play,
    Symmetric,
    History,
    read_document,
    write_document,
)
from .systems import (
    BetConfig,
    settle_bet,
    apply_bet,
    three_player_decay,
    arbitrary_diffusion,
    circular_diffusion,
    symmetric_decay,
    diffuse,
    steady_state,
    DEFAULT_EPSILON,
)
from .evaluation import Evaluation, evaluate, replay, ratings_timeline
from .ledger import Ledger

__version__ = "0.1.0"

__all__ = [
    # Config
    "LedgerConfig",
    # Errors
    "UltiraError",
    "MissingPlayer",
    "SingularSystem",
    "DegenerateGroupSize",
    "InvalidInput",
    "EmptyHistory",
    "UnsupportedRename",
    # History
    "AddPlayer",
    "AdjustAlpha",
    "Arbitrary",
    "Change",
    "Circular",
    "GameCollection",
    "Outcome",
    "Play",
    "Symmetric",
    "History",
    "read_document",
    "write_document",
    # Update models
    "BetConfig",
    "settle_bet",
    "apply_bet",
    "three_player_decay",
    "arbitrary_diffusion",
    "circular_diffusion",
    "symmetric_decay",
    "diffuse",
    "steady_state",
    "DEFAULT_EPSILON",
    # Evaluation
    "Evaluation",
    "evaluate",
    "replay",
    "ratings_timeline",
    "Ledger",
]
