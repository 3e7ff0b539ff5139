import json
import zipfile
from datetime import datetime, timezone

import pytest

from keeper import export
from keeper.scorekeeper import ScoreKeeper
from scoring.exceptions import InvalidPlayerError, InvalidPointError, MatchNotStartedError
from scoring.types import MatchConfig, MatchState, PointMetadata, PointType, ServeResult, SetScore


class FakeRenderer:
    def __init__(self):
        self.calls = []

    def render(self, state, config):
        self.calls.append((state, config))


GENERATED = datetime(2024, 5, 1, 12, 30, 15, 250000, tzinfo=timezone.utc)


@pytest.fixture
def keeper():
    k = ScoreKeeper(player1="Ana Ivo", player2="Ben")
    k.new_match()
    return k


# ---------------------------------------------------------
# Score keeper
# ---------------------------------------------------------

def test_calls_before_new_match_raise():
    k = ScoreKeeper()
    assert k.started is False
    with pytest.raises(MatchNotStartedError, match="new_match"):
        k.score_point(1)
    with pytest.raises(MatchNotStartedError):
        k.get_state()


def test_renderer_gets_a_snapshot_after_each_change():
    renderer = FakeRenderer()
    k = ScoreKeeper(renderer)
    k.new_match(games_per_set=4)
    k.score_point(1)
    k.score_point_with_stats(2, "first", "ace")
    k.remove_point(2)

    assert len(renderer.calls) == 4
    state, config = renderer.calls[1]
    assert state.player1.points == 1
    assert config.games_per_set == 4

    # Snapshots do not change after the fact.
    state.player1.points = 40
    assert k.get_state().player1.points == 1


def test_blank_names_fall_back_to_defaults():
    k = ScoreKeeper(player1="  ", player2="Ben")
    assert k.players == {"player1": "Player 1", "player2": "Ben"}

    k.rename_players(player2="")
    assert k.name_of(2) == "Player 2"


def test_new_match_replaces_the_old_one(keeper):
    keeper.score_point(1)
    keeper.new_match(sets_to_win=1)

    assert keeper.get_state() == MatchState()
    assert keeper.get_config().sets_to_win == 1


def test_get_server_follows_games(keeper):
    for _ in range(4):
        keeper.score_point(1)

    assert keeper.get_server() == 2


def test_errors_propagate_from_engine(keeper):
    with pytest.raises(InvalidPlayerError):
        keeper.score_point(5)


# ---------------------------------------------------------
# Documents
# ---------------------------------------------------------

def test_match_statistics_document(keeper):
    keeper.score_point_with_stats(1, "first", "ace")
    doc = export.build_match_statistics(keeper.get_state(), keeper.get_config(), keeper.players, GENERATED)

    assert doc["$schema"] == export.SCHEMA_URL
    assert doc["$id"] == "match-statistics-schema.json"
    assert doc["generatedAt"] == "2024-05-01T12:30:15.250Z"
    assert doc["matchDetails"] == {"setsToWin": 2, "gamesPerSet": 6, "tieBreakPoints": 7}
    assert doc["players"] == {"player1": "Ana Ivo", "player2": "Ben"}
    assert doc["finalScore"]["matchWinner"] is None
    assert doc["statistics"]["player1"]["aces"] == 1
    assert doc["statistics"]["player1"]["pointsWonOnFirstServe"] == 1
    assert doc["statistics"]["player2"]["firstServeMissedReturns"] == 1
    assert len(doc["statistics"]["player2"]) == 20


def test_match_score_document(keeper):
    keeper.score_point(2)
    keeper.score_point_with_stats(1, "second", "net", rally_length=5)
    doc = export.build_match_score(keeper.get_state(), keeper.get_config(), keeper.players)

    assert doc["$id"] == "match-score-schema.json"
    assert doc["pointsHistory"] == [
        {"winner": 2, "server": 1},
        {
            "winner": 1,
            "server": 1,
            "serveResult": "second",
            "pointType": "net",
            "wasBreakPoint": False,
            "rallyLength": 5,
        },
    ]


def test_final_score_names_the_winner():
    k = ScoreKeeper(player1="Ana", player2="Ben")
    k.new_match(sets_to_win=1)
    for _ in range(24):
        k.score_point(2)

    final = export.build_match_statistics(k.get_state(), k.get_config(), k.players)["finalScore"]
    assert final == {
        "player1Sets": 0,
        "player2Sets": 1,
        "setScores": [{"player1": 0, "player2": 6}],
        "matchWinner": "Ben",
    }


def test_format_timestamp_converts_to_utc():
    moment = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    assert export.format_timestamp(moment) == "2024-01-02T03:04:05.000Z"
    assert export.format_timestamp().endswith("Z")


def test_point_from_dict():
    point = export.point_from_dict({"winner": 2, "server": 1, "serveResult": "first", "pointType": "winner"})

    assert point == PointMetadata(2, 1, ServeResult.FIRST, PointType.WINNER)
    assert export.point_from_dict(1) == PointMetadata(winner=1, server=1)


@pytest.mark.parametrize("data", [
    {"server": 1},
    {"winner": 3},
    {"winner": 1, "serveResult": "first"},
    {"winner": 1, "serveResult": "first", "pointType": "smash"},
    "1",
    True,
    {"winner": True},
    {"winner": 1, "server": 2.0},
])
def test_point_from_dict_rejects_bad_entries(data):
    with pytest.raises((InvalidPointError, InvalidPlayerError)):
        export.point_from_dict(data)


# ---------------------------------------------------------
# Replay and archive
# ---------------------------------------------------------

def test_replay_history_recomputes_states(keeper):
    for player in (1, 1, 1, 1, 2):
        keeper.score_point(player)
    history = keeper.get_state().points_history

    steps = list(export.replay_history(history, keeper.get_config()))

    assert [index for index, *_ in steps] == [1, 2, 3, 4, 5]
    index, point, before, after = steps[4]
    assert point.winner == 2
    assert before.player1.games == 1
    assert after == keeper.get_state()


def test_card_filename_uses_position_before_point():
    state = MatchState()
    assert export.card_filename(1, state) == "001_set_1_game_1_point_0.png"


def test_safe_archive_name():
    assert export.safe_archive_name("Ana  Ivo", "Ben Lee ") == "ana_ivo_vs_ben_lee.zip"


def test_export_archive_without_cards(keeper, tmp_path):
    keeper.score_point(1)
    path = keeper.export_archive(tmp_path)

    assert path == tmp_path / "ana_ivo_vs_ben.zip"
    with zipfile.ZipFile(path) as archive:
        assert sorted(archive.namelist()) == ["match-score.json", "match-statistics.json"]
        score = json.loads(archive.read("match-score.json"))
    assert score["pointsHistory"] == [{"winner": 1, "server": 1}]


def test_export_archive_with_cards_skips_double_faults(keeper, tmp_path):
    drawn = []

    def fake_card(state, config, players):
        drawn.append(state)
        return b"png"

    keeper.score_point(1)
    keeper.score_point_with_stats(1, "second", "double_fault")
    keeper.score_point_with_stats(2, "first", "winner")
    path = keeper.export_archive(tmp_path, fake_card)

    with zipfile.ZipFile(path) as archive:
        names = sorted(archive.namelist())
    assert names == [
        "match-score.json",
        "match-statistics.json",
        "points/000_match_opener.png",
        "points/001_set_1_game_1_point_0.png",
        "points/003_set_1_game_1_point_2.png",
    ]
    assert len(drawn) == 3
    assert drawn[0] == MatchState()


def test_export_archive_keeps_live_match(keeper, tmp_path):
    keeper.score_point(2)
    before = keeper.get_state()
    keeper.export_archive(tmp_path, lambda state, config, players: b"")

    assert keeper.get_state() == before


def test_config_in_documents_is_the_live_config(keeper):
    keeper.update_config(tie_break_points=10)
    doc = export.build_match_score(keeper.get_state(), keeper.get_config(), keeper.players)

    assert doc["matchDetails"]["tieBreakPoints"] == 10
    assert isinstance(keeper.get_config(), MatchConfig)


def test_replay_uses_the_current_config(keeper):
    for _ in range(16):
        keeper.score_point(1)
    keeper.update_config(games_per_set=4)
    assert keeper.get_state().past_set_scores == []

    *_, (index, point, before, after) = export.replay_history(
        keeper.get_state().points_history, keeper.get_config()
    )

    assert index == 16
    assert after.past_set_scores == [SetScore(4, 0)]
