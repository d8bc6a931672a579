"""
Command-line interface for the rating ledger.

Usage:
    ultira [--file ultira.toml] new [--force]
    ultira add-player <name> [rating]
    ultira play <games> <p1> <s1> <p2> <s2> <p3> <s3> [--date YYYY-MM-DD]
    ultira arbitrary --score <name> <score> ... --games <p1> <p2> <n> ... [--date]
    ultira circular <games> <name> <score> ... [--date]
    ultira symmetric <rounds> <name> <score> ... [--date]
    ultira ratings
    ultira config {spread,base-rating,score-multiplier} [value]
    ultira undo
    ultira rename <old> <new>
    ultira export <file> [--basis date|play|event] [--datum-name datum] [--decimal-comma]

Player names are matched exactly (they are case sensitive). Every command
loads the whole file, replays the history and, if nothing failed, writes
the whole file back.
"""

import argparse
import logging
import math
import sys
from dataclasses import replace
from datetime import date
from pathlib import Path
from typing import Iterable, List, Tuple

import polars as pl

from ..base.exceptions import InvalidInput, UltiraError
from ..data.types import Arbitrary, Circular, GameCollection, Outcome, Play, Symmetric
from ..evaluation import TIMELINE_BASES, ratings_timeline
from ..ledger import Ledger

DEFAULT_FILE = "ultira.toml"


def print_rating_change(ledger: Ledger, before, after, players: Iterable[str]) -> None:
    for name, (old, new) in ledger.rating_changes(before, after, players).items():
        old_text = f"{old:.1f}" if old is not None else "new"
        print(f"{name}: {old_text} -> {new:.1f}")


def parse_scores(values: List[str]) -> List[Tuple[str, float]]:
    """Pair up ``name score name score ...`` arguments."""
    if len(values) % 2 != 0:
        raise InvalidInput("Scores must be given as <name> <score> pairs")
    pairs = []
    for name, score in zip(values[::2], values[1::2]):
        try:
            pairs.append((name, float(score)))
        except ValueError:
            raise InvalidInput(f"Score of '{name}' must be a number, got '{score}'") from None
    return pairs


def cmd_new(args):
    """Create or clear the file."""
    path = Path(args.file)
    if path.exists() and not args.force:
        print(f"{path} already exists, use --force to overwrite it")
        return 1
    Ledger.new().save(path)
    print(f"Created {path}")
    return 0


def cmd_add_player(args):
    ledger = Ledger.load(args.file)
    before, after = ledger.add_player_display(args.player, args.rating)
    print_rating_change(ledger, before, after, [args.player])
    ledger.save(args.file)
    return 0


def cmd_play(args):
    """Record a play of three players."""
    ledger = Ledger.load(args.file)
    outcomes = [Outcome(player=name, score=score) for name, score in parse_scores(args.scores)]
    if len(outcomes) != 3:
        raise InvalidInput("A play needs exactly three players")
    if not math.isclose(sum(o.score for o in outcomes), 0.0, abs_tol=1e-9):
        raise InvalidInput("Points don't sum to 0")

    play = Play(game_count=args.game_count, date=args.date or date.today(), outcomes=outcomes)
    before, after = ledger.play(play)
    print_rating_change(ledger, before, after, [o.player for o in outcomes])
    ledger.save(args.file)
    return 0


def cmd_arbitrary(args):
    ledger = Ledger.load(args.file)

    scores = {}
    for name, score in parse_scores([v for pair in args.score or [] for v in pair]):
        scores[name] = scores.get(name, 0.0) + score

    collections = []
    for first, second, games in args.games or []:
        try:
            count = int(games)
        except ValueError:
            raise InvalidInput(f"Game count must be an integer, got '{games}'") from None
        collections.append(GameCollection(players=(first, second), game_count=count))

    arbitrary = Arbitrary(date=args.date or date.today(), scores=scores, game_collections=collections)
    before, after = ledger.arbitrary(arbitrary)
    print_rating_change(ledger, before, after, scores)
    ledger.save(args.file)
    return 0


def cmd_circular(args):
    ledger = Ledger.load(args.file)
    outcomes = [Outcome(player=name, score=score) for name, score in parse_scores(args.scores)]

    circular = Circular(date=args.date or date.today(), outcomes=outcomes, game_count=args.game_count)
    before, after = ledger.circular(circular)
    print_rating_change(ledger, before, after, [o.player for o in outcomes])
    ledger.save(args.file)
    return 0


def cmd_symmetric(args):
    ledger = Ledger.load(args.file)
    scores = dict(parse_scores(args.scores))

    symmetric = Symmetric(date=args.date or date.today(), scores=scores, round_count=args.round_count)
    before, after = ledger.symmetric(symmetric)
    print_rating_change(ledger, before, after, scores)
    ledger.save(args.file)
    return 0


def cmd_ratings(args):
    """Print display ratings, highest first."""
    ledger = Ledger.load(args.file)
    evaluation = ledger.evaluate()
    for name, rating in evaluation.ranked():
        print(f"{ledger.config.rating_to_display(rating):6.1f} {name}")
    return 0


def cmd_config(args):
    """
    Show or change a parameter.

    spread and base-rating only change display ratings and are not part of
    history; score-multiplier is the display decay coefficient and is
    recorded in history, affecting only later sessions.
    """
    ledger = Ledger.load(args.file)

    if args.param == "spread":
        if args.value is None:
            print(ledger.config.spread)
            return 0
        ledger.config = replace(ledger.config, spread=args.value)
    elif args.param == "base-rating":
        if args.value is None:
            print(ledger.config.base_rating)
            return 0
        ledger.config = replace(ledger.config, base_rating=args.value)
    else:
        if args.value is None:
            print(ledger.config.alpha_to_display(ledger.evaluate().alpha))
            return 0
        ledger.adjust_alpha_display(args.value)

    ledger.save(args.file)
    return 0


def cmd_undo(args):
    """Undo the last change to history."""
    ledger = Ledger.load(args.file)
    change = ledger.undo()
    print(f"Undid: {change}")
    ledger.save(args.file)
    return 0


def cmd_rename(args):
    """Rename a player; renaming onto an existing player merges them."""
    ledger = Ledger.load(args.file)
    if args.old_name not in ledger.evaluate().ratings:
        raise InvalidInput(f"Name '{args.old_name}' didn't match any player")
    merged = ledger.rename(args.old_name, args.new_name)
    ledger.save(args.file)
    if merged:
        print(f"Merged {args.old_name} into {args.new_name}")
    else:
        print(f"Renamed {args.old_name} to {args.new_name}")
    return 0


def cmd_export(args):
    """Export display ratings over time as a tab-separated table."""
    ledger = Ledger.load(args.file)
    timeline = ratings_timeline(
        ledger.history, ledger.config, basis=args.basis, datum_name=args.datum_name
    )
    if args.decimal_comma:
        timeline = timeline.with_columns(
            pl.col(pl.Float64).cast(pl.Utf8).str.replace(".", ",", literal=True)
        )
    timeline.write_csv(args.output, separator="\t")
    print(f"Exported {timeline.height} rows to {args.output}")
    return 0


def add_scores_arg(p):
    p.add_argument("scores", nargs="+", metavar="NAME SCORE",
                   help="Player names each followed by their total score")


def add_date_arg(p):
    p.add_argument("--date", "-d", type=date.fromisoformat, default=None,
                   help="Date of the session (YYYY-MM-DD, default: today); does not affect ordering")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ultira",
        description="Ulti rating calculator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--file", "-f", default=DEFAULT_FILE,
                        help=f"File containing the data (default: {DEFAULT_FILE})")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log debug output")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    new_parser = subparsers.add_parser("new", help="Create or clear the file")
    new_parser.add_argument("--force", action="store_true", help="Overwrite an existing file")

    add_parser = subparsers.add_parser("add-player", aliases=["add"],
                                       help="Add a player, or reset an existing player's rating")
    add_parser.add_argument("player", help="Name of the player")
    add_parser.add_argument("rating", nargs="?", type=float, default=None,
                            help="Display rating (default: base rating)")

    play_parser = subparsers.add_parser("play", aliases=["p"], help="Record a play of three players")
    play_parser.add_argument("game_count", type=int, help="Number of games")
    add_scores_arg(play_parser)
    add_date_arg(play_parser)

    arbitrary_parser = subparsers.add_parser("arbitrary", aliases=["a"],
                                             help="Record scores with explicit pairwise game counts")
    arbitrary_parser.add_argument("--score", nargs=2, action="append", metavar=("NAME", "SCORE"),
                                  help="Total score of a player (repeatable)")
    arbitrary_parser.add_argument("--games", nargs=3, action="append", metavar=("P1", "P2", "N"),
                                  help="Games two players played together (repeatable)")
    add_date_arg(arbitrary_parser)

    circular_parser = subparsers.add_parser("circular", aliases=["c"],
                                            help="Record a session of players seated in a cycle")
    circular_parser.add_argument("game_count", type=int, help="Number of rounds around the table")
    add_scores_arg(circular_parser)
    add_date_arg(circular_parser)

    symmetric_parser = subparsers.add_parser("symmetric", aliases=["s"],
                                             help="Record a session where every triple played equally")
    symmetric_parser.add_argument("round_count", type=int, help="Number of rounds")
    add_scores_arg(symmetric_parser)
    add_date_arg(symmetric_parser)

    subparsers.add_parser("ratings", aliases=["r"], help="Print the ratings of the players")

    config_parser = subparsers.add_parser("config", help="Show or change a parameter")
    config_parser.add_argument("param", choices=["spread", "base-rating", "score-multiplier"])
    config_parser.add_argument("value", nargs="?", type=float, default=None)

    subparsers.add_parser("undo", help="Undo the last change to history")

    rename_parser = subparsers.add_parser("rename", help="Rename (or merge) a player")
    rename_parser.add_argument("old_name")
    rename_parser.add_argument("new_name")

    export_parser = subparsers.add_parser("export", help="Export ratings over time")
    export_parser.add_argument("output", help="Output file (tab-separated)")
    export_parser.add_argument("--basis", "-b", choices=TIMELINE_BASES, default="date")
    export_parser.add_argument("--datum-name", default="datum", help="Header of the label column")
    export_parser.add_argument("--decimal-comma", "-c", action="store_true",
                               help="Use a decimal comma instead of a decimal point")

    return parser


def main(argv=None):
    """Main entry point for CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 1

    commands = {
        "new": cmd_new,
        "add-player": cmd_add_player,
        "add": cmd_add_player,
        "play": cmd_play,
        "p": cmd_play,
        "arbitrary": cmd_arbitrary,
        "a": cmd_arbitrary,
        "circular": cmd_circular,
        "c": cmd_circular,
        "symmetric": cmd_symmetric,
        "s": cmd_symmetric,
        "ratings": cmd_ratings,
        "r": cmd_ratings,
        "config": cmd_config,
        "undo": cmd_undo,
        "rename": cmd_rename,
        "export": cmd_export,
    }

    try:
        return commands[args.command](args)
    except FileNotFoundError as exc:
        print(f"{exc.filename}: file not found (create it with 'ultira new')", file=sys.stderr)
    except UltiraError as exc:
        print(f"Error: {exc}", file=sys.stderr)
    return 1


if __name__ == "__main__":
    sys.exit(main())
