"""Tests for loading and saving the ledger document."""

from datetime import date

import pytest

from ultira import (
    AddPlayer,
    AdjustAlpha,
    Arbitrary,
    Circular,
    GameCollection,
    History,
    InvalidInput,
    Ledger,
    LedgerConfig,
    Outcome,
    Play,
    Symmetric,
    read_document,
    write_document,
)
from ultira.data.storage import change_to_dict


def full_history() -> History:
    return History([
        AddPlayer("Kovács Anna", 0.0),
        AddPlayer("Nagy Béla", 0.25),
        AddPlayer("Szabó Cili", -0.1),
        AddPlayer("Tóth Dani", 0.0),
        Play(game_count=8, date=date(2024, 5, 1),
             outcomes=[Outcome("Kovács Anna", 6), Outcome("Nagy Béla", -2), Outcome("Szabó Cili", -4)]),
        AdjustAlpha(0.03),
        Arbitrary(date=date(2024, 5, 3), scores={"Kovács Anna": 2.5, "Tóth Dani": -2.5},
                  game_collections=[GameCollection(("Kovács Anna", "Tóth Dani"), 5)]),
        Circular(date=date(2024, 4, 30), game_count=2,
                 outcomes=[Outcome("Tóth Dani", 3), Outcome("Nagy Béla", -1),
                           Outcome("Szabó Cili", -1), Outcome("Kovács Anna", -1)]),
        Symmetric(date=date(2024, 5, 7), scores={"Kovács Anna": 1, "Nagy Béla": -1, "Tóth Dani": 0},
                  round_count=3),
    ])


def test_round_trip_preserves_history_and_ratings(tmp_path):
    path = tmp_path / "ultira.toml"
    config = LedgerConfig(spread=40.0, base_rating=1000.0, starting_alpha=0.015)
    history = full_history()

    write_document(path, config, history)
    loaded_config, loaded_history = read_document(path)

    assert loaded_config == config
    assert loaded_history == history
    assert Ledger(loaded_config, loaded_history).evaluate() == Ledger(config, history).evaluate()


def test_save_keeps_variant_tags_and_field_order():
    data = change_to_dict(Circular(date=date(2024, 1, 2), outcomes=[Outcome("A", 1)], game_count=4))
    assert list(data) == ["kind", "date", "outcomes", "game_count"]
    assert data["kind"] == "circular"
    assert data["outcomes"] == [{"player": "A", "score": 1}]


def test_missing_config_uses_defaults(tmp_path):
    path = tmp_path / "ultira.toml"
    path.write_text(
        '[[history]]\nkind = "add_player"\nname = "A"\nrating = 0.0\n',
        encoding="utf-8",
    )
    config, history = read_document(path)

    assert config == LedgerConfig(spread=50.0, base_rating=100.0, starting_alpha=0.02)
    assert list(history) == [AddPlayer("A", 0.0)]


def test_partial_config_and_integer_scores(tmp_path):
    path = tmp_path / "ultira.toml"
    path.write_text(
        "[config]\n"
        "spread = 25.0\n"
        "\n"
        "[[history]]\n"
        'kind = "play"\n'
        "game_count = 2\n"
        "date = 2023-11-05\n"
        'outcomes = [{ player = "A", score = 4 }, { player = "B", score = -2 }, { player = "C", score = -2 }]\n',
        encoding="utf-8",
    )
    config, history = read_document(path)

    assert config.spread == 25.0
    assert config.base_rating == 100.0
    assert history[0] == Play(game_count=2, date=date(2023, 11, 5),
                              outcomes=[Outcome("A", 4.0), Outcome("B", -2.0), Outcome("C", -2.0)])


def test_empty_document(tmp_path):
    path = tmp_path / "ultira.toml"
    path.write_text("", encoding="utf-8")
    config, history = read_document(path)
    assert config == LedgerConfig()
    assert len(history) == 0


def test_unknown_kind(tmp_path):
    path = tmp_path / "ultira.toml"
    path.write_text('[[history]]\nkind = "teleport"\n', encoding="utf-8")
    with pytest.raises(InvalidInput):
        read_document(path)


def test_invalid_toml(tmp_path):
    path = tmp_path / "ultira.toml"
    path.write_text("[config\nspread = ", encoding="utf-8")
    with pytest.raises(InvalidInput):
        read_document(path)


def test_zero_spread_rejected():
    with pytest.raises(InvalidInput):
        LedgerConfig(spread=0.0)


def test_ledger_load_save(tmp_path):
    path = tmp_path / "ledger.toml"
    ledger = Ledger.new()
    ledger.add_player_display("A", 150.0)
    ledger.save(path)

    loaded = Ledger.load(path)
    assert loaded.evaluate().ratings == {"A": 1.0}
    # No temporary files left behind
    assert [p.name for p in tmp_path.iterdir()] == ["ledger.toml"]


@pytest.mark.parametrize("entry", [
    'kind = "play"\ngame_count = 1.5\ndate = 2024-01-01\n'
    'outcomes = [{ player = "A", score = 1 }, { player = "B", score = 0 }, { player = "C", score = -1 }]\n',
    'kind = "circular"\ngame_count = 0\ndate = 2024-01-01\noutcomes = []\n',
    'kind = "symmetric"\nround_count = 2.5\ndate = 2024-01-01\nscores = { A = 1, B = 0, C = -1 }\n',
    'kind = "arbitrary"\ndate = 2024-01-01\nscores = { A = 1, B = -1 }\n'
    'game_collections = [{ players = ["A", "B"], game_count = 0.5 }]\n',
])
def test_non_integral_counts_are_rejected_on_load(tmp_path, entry):
    path = tmp_path / "ultira.toml"
    path.write_text("[[history]]\n" + entry, encoding="utf-8")
    with pytest.raises(InvalidInput):
        read_document(path)


def test_integral_float_count_is_accepted(tmp_path):
    path = tmp_path / "ultira.toml"
    path.write_text(
        '[[history]]\nkind = "symmetric"\nround_count = 2.0\ndate = 2024-01-01\n'
        "scores = { A = 1, B = 0, C = -1 }\n",
        encoding="utf-8",
    )
    _, history = read_document(path)
    assert history[0].round_count == 2


@pytest.mark.parametrize("text", [
    '[config]\nspread = "wide"\n',
    '[config]\nstarting_alpha = [1, 2]\n',
    'config = 3\n',
    'history = [1, 2]\n',
    'history = "none"\n',
    '[[history]]\nkind = "add_player"\nname = "A"\nrating = "high"\n',
])
def test_malformed_documents_raise_invalid_input(tmp_path, text):
    path = tmp_path / "ultira.toml"
    path.write_text(text, encoding="utf-8")
    with pytest.raises(InvalidInput):
        read_document(path)
