import json
import zipfile

import pytest

from keeper import cli
from keeper.scorekeeper import ScoreKeeper


# ---------------------------------------------------------
# Parsing
# ---------------------------------------------------------

def test_parse_points_digits():
    plain = (None, None, None)
    assert cli.parse_points("1121") == [(1, *plain), (1, *plain), (2, *plain), (1, *plain)]


def test_parse_points_tokens():
    assert cli.parse_points("1:first:ace, 2:second, 1") == [
        (1, "first", "ace", None),
        (2, "second", "winner", None),
        (1, None, None, None),
    ]


@pytest.mark.parametrize("token", ["3", "", "1:first:ace:extra", "x:first"])
def test_parse_point_token_rejects_bad_input(token):
    with pytest.raises(ValueError):
        cli.parse_point_token(token)


def test_parse_point_token_accepts_spaces():
    assert cli.parse_point_token("2 second net") == (2, "second", "net", None)


# ---------------------------------------------------------
# Announcements
# ---------------------------------------------------------

def test_play_announces_points_and_games():
    keeper = ScoreKeeper(player1="Ana", player2="Ben")
    keeper.new_match()
    lines = []
    for _ in range(3):
        cli.play(keeper, (1, None, None, None), lines.append)
    cli.play(keeper, (1, "first", "ace", None), lines.append)

    assert lines == [
        "Point Ana, Game Score: 15 - Love",
        "Point Ana, Game Score: 30 - Love",
        "Point Ana, Game Score: 40 - Love",
        "Point Ana, Game Ana",
        "Set Score: Ana vs Ben 1 - 0",
    ]


def test_play_announces_set_and_match():
    keeper = ScoreKeeper(player1="Ana", player2="Ben")
    keeper.new_match(sets_to_win=1)
    lines = []
    for _ in range(24):
        cli.play(keeper, (2, None, None, None), lines.append)
    cli.play(keeper, (1, None, None, None), lines.append)

    assert lines[-4:] == [
        "Point Ben, Game Ben",
        "Set won by Ben. Games: Ana vs Ben 0 - 6",
        "Winner: Ben. Final Score (sets): Ana vs Ben 0 - 1",
        "Point Ana ignored: match is over.",
    ]


def test_format_statistics_has_header_row():
    keeper = ScoreKeeper(player1="Ana", player2="Ben")
    keeper.new_match()
    keeper.score_point_with_stats(1, "first", "ace")

    rows = cli.format_statistics(keeper)
    assert "Ana" in rows[0] and "Ben" in rows[0]
    assert any(row.startswith("Aces") and "1" in row for row in rows)


# ---------------------------------------------------------
# main
# ---------------------------------------------------------

def test_main_scores_points(capsys):
    assert cli.main(["--points", "1111", "--player-1", "Ana", "--player-2", "Ben"]) == 0

    out = capsys.readouterr().out
    assert "Start of play - Ana vs Ben - first to 2 sets" in out
    assert "Point Ana, Game Ana" in out
    assert "Games: 1 - 0" in out.splitlines()[-1]


def test_main_quiet_only_prints_summary(capsys):
    assert cli.main(["--points", "1111", "--quiet"]) == 0

    out = capsys.readouterr().out
    assert "Point" not in out
    assert out.splitlines()[-1].startswith("Sets:")


@pytest.mark.parametrize("points", ["13", "1:third:ace", "1:first:lob"])
def test_main_rejects_invalid_points(capsys, points):
    assert cli.main(["--points", points]) == 2
    assert "Invalid input" in capsys.readouterr().out


def test_main_requires_a_source():
    with pytest.raises(SystemExit) as exc:
        cli.main([])
    assert exc.value.code == 2


def test_main_rejects_zero_games_per_set():
    with pytest.raises(SystemExit):
        cli.main(["--points", "1", "--games-per-set", "0"])


def test_main_replays_history(tmp_path, capsys):
    history = {
        "pointsHistory": [
            {"winner": 1, "server": 1, "serveResult": "first", "pointType": "ace"},
            2,
            {"winner": 1, "server": 1},
        ]
    }
    source = tmp_path / "match-score.json"
    source.write_text(json.dumps(history), encoding="utf-8")

    assert cli.main(["--history", str(source), "--player-1", "Ana"]) == 0
    out = capsys.readouterr().out
    assert "Point Ana, Game Score: 30 - 15" in out


def test_history_replay_keeps_rally_lengths(tmp_path):
    keeper = ScoreKeeper(player1="Ana", player2="Ben")
    keeper.new_match()
    keeper.score_point_with_stats(1, "first", "winner", rally_length=7)
    keeper.score_point(2)
    path = keeper.export_archive(tmp_path)
    with zipfile.ZipFile(path) as archive:
        source = tmp_path / "match-score.json"
        source.write_bytes(archive.read("match-score.json"))

    specs = cli.history_specs(cli.load_history(source))
    assert specs == [(1, "first", "winner", 7), (2, None, None, None)]

    replayed = ScoreKeeper(player1="Ana", player2="Ben")
    replayed.new_match()
    for spec in specs:
        cli.play(replayed, spec, lambda line: None)
    assert replayed.get_state().points_history == keeper.get_state().points_history
    assert replayed.get_state().points_history[0].rally_length == 7


def test_main_rejects_missing_history(tmp_path, capsys):
    assert cli.main(["--history", str(tmp_path / "nope.json")]) == 2
    assert "Invalid input" in capsys.readouterr().out


def test_main_exports_archive(tmp_path, capsys):
    target = tmp_path / "out"
    assert cli.main(["--points", "1:first:ace,2", "--export", str(target), "--player-2", "Ben Lee"]) == 0

    path = target / "player_1_vs_ben_lee.zip"
    assert f"Exported {path}" in capsys.readouterr().out
    with zipfile.ZipFile(path) as archive:
        stats = json.loads(archive.read("match-statistics.json"))
    assert stats["statistics"]["player1"]["aces"] == 1


def test_interactive_session(monkeypatch, capsys):
    commands = iter(["1", "2 second net", "u2", "bogus", "s", "q"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(commands))

    assert cli.main(["--interactive", "--player-1", "Ana", "--player-2", "Ben"]) == 0
    out = capsys.readouterr().out
    assert "Point Ana, Game Score: 15 - Love" in out
    assert "Point Ben, Game Score: 15 - 15" in out
    assert "Undo Ben." in out
    assert "Invalid input: bad point: 'bogus'. Please try again." in out
    assert "Aces" in out
    assert "Games: 0 - 0" in out.splitlines()[-1]


def test_interactive_stops_at_end_of_input(monkeypatch):
    def no_more(prompt=""):
        raise EOFError

    monkeypatch.setattr("builtins.input", no_more)
    keeper = ScoreKeeper()
    keeper.new_match()

    assert cli.run_interactive(keeper) == 0
