from __future__ import annotations

"""Match exports: JSON documents, history replay and score card archives.

Two JSON documents are produced, both starting with the same header
(generation time, match details, player names and final score):

* match statistics: the header plus both players' statistics counters
* match score: the header plus the full point history

Keys use the camelCase spelling of the exchange format.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple
import json
import logging
import re
import zipfile

from scoring.display import point_position
from scoring.engine import MatchEngine
from scoring.exceptions import InvalidPointError
from scoring.types import (
    STAT_FIELDS,
    MatchConfig,
    MatchState,
    PlayerStatistics,
    PointMetadata,
    PointType,
    check_player,
    parse_point_type,
    parse_serve_result,
)


logger = logging.getLogger(__name__)

SCHEMA_URL = "https://json-schema.org/draft/2020-12/schema"
STATISTICS_SCHEMA_ID = "match-statistics-schema.json"
SCORE_SCHEMA_ID = "match-score-schema.json"

STATISTICS_FILE = "match-statistics.json"
SCORE_FILE = "match-score.json"
OPENER_CARD = "points/000_match_opener.png"

# Draws one state and returns PNG bytes.
CardRenderer = Callable[[MatchState, MatchConfig, Mapping[str, str]], bytes]


def camel_case(name: str) -> str:
    """Return a snake_case name in camelCase, e.g. ``first_serves_in`` -> ``firstServesIn``."""
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def statistics_to_dict(stats: PlayerStatistics) -> Dict[str, int]:
    """Return all counters of one player keyed by their exchange names."""
    return {camel_case(name): getattr(stats, name) for name in STAT_FIELDS}


def point_to_dict(point: PointMetadata) -> Dict[str, object]:
    """Return the exchange form of a point; unset optional fields are left out."""
    data: Dict[str, object] = {"winner": point.winner, "server": point.server}
    if point.serve_result is not None:
        data["serveResult"] = point.serve_result.value
    if point.point_type is not None:
        data["pointType"] = point.point_type.value
    if point.has_statistics:
        data["wasBreakPoint"] = point.was_break_point
    if point.rally_length is not None:
        data["rallyLength"] = point.rally_length
    return data


def point_from_dict(data) -> PointMetadata:
    """Parse one point of an exported history.

    A bare ``1`` or ``2`` is accepted for points recorded without statistics.
    """
    if isinstance(data, int) and not isinstance(data, bool):
        return PointMetadata(winner=check_player(data), server=1)
    if not isinstance(data, Mapping) or "winner" not in data:
        raise InvalidPointError(f"invalid point entry: {data!r}")
    serve = data.get("serveResult")
    kind = data.get("pointType")
    if (serve is None) != (kind is None):
        raise InvalidPointError("serveResult and pointType must be given together")
    return PointMetadata(
        winner=check_player(data["winner"]),
        server=check_player(data.get("server", 1)),
        serve_result=None if serve is None else parse_serve_result(serve),
        point_type=None if kind is None else parse_point_type(kind),
        was_break_point=bool(data.get("wasBreakPoint", False)),
        rally_length=data.get("rallyLength"),
    )


def format_timestamp(moment: Optional[datetime] = None) -> str:
    """Return ``moment`` (default now) as UTC ISO 8601 with milliseconds and a Z suffix."""
    moment = moment or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _match_winner_name(state: MatchState, players: Mapping[str, str]) -> Optional[str]:
    if state.match_winner is None:
        return None
    return players[f"player{state.match_winner}"]


def _header(
    schema_id: str,
    state: MatchState,
    config: MatchConfig,
    players: Mapping[str, str],
    generated_at: Optional[datetime],
) -> Dict[str, object]:
    return {
        "$schema": SCHEMA_URL,
        "$id": schema_id,
        "generatedAt": format_timestamp(generated_at),
        "matchDetails": {
            "setsToWin": config.sets_to_win,
            "gamesPerSet": config.games_per_set,
            "tieBreakPoints": config.tie_break_points,
        },
        "players": {"player1": players["player1"], "player2": players["player2"]},
        "finalScore": {
            "player1Sets": state.player1.sets,
            "player2Sets": state.player2.sets,
            "setScores": [{"player1": s.player1, "player2": s.player2} for s in state.past_set_scores],
            "matchWinner": _match_winner_name(state, players),
        },
    }


def build_match_statistics(
    state: MatchState,
    config: MatchConfig,
    players: Mapping[str, str],
    generated_at: Optional[datetime] = None,
) -> Dict[str, object]:
    doc = _header(STATISTICS_SCHEMA_ID, state, config, players, generated_at)
    doc["statistics"] = {
        "player1": statistics_to_dict(state.player1_stats),
        "player2": statistics_to_dict(state.player2_stats),
    }
    return doc


def build_match_score(
    state: MatchState,
    config: MatchConfig,
    players: Mapping[str, str],
    generated_at: Optional[datetime] = None,
) -> Dict[str, object]:
    doc = _header(SCORE_SCHEMA_ID, state, config, players, generated_at)
    doc["pointsHistory"] = [point_to_dict(p) for p in state.points_history]
    return doc


def replay_history(
    history: Iterable[PointMetadata], config: MatchConfig
) -> Iterator[Tuple[int, PointMetadata, MatchState, MatchState]]:
    """Replay points through a fresh engine.

    Yields ``(index, point, before, after)`` for every point, ``index``
    counting from one. Server and break points are worked out again by the
    engine rather than taken from the history.
    """
    engine = MatchEngine(config)
    for index, point in enumerate(history, start=1):
        before = engine.get_state()
        if point.has_statistics:
            engine.score_point_with_stats(point.winner, point.serve_result, point.point_type, point.rally_length)
        else:
            engine.score_point(point.winner)
        yield index, point, before, engine.get_state()


def card_filename(index: int, before: MatchState) -> str:
    """Return the card name for a point, numbered by the position before it was played."""
    current_set, current_game, current_point = point_position(before)
    return f"{index:03d}_set_{current_set}_game_{current_game}_point_{current_point}.png"


def safe_archive_name(player1: str, player2: str) -> str:
    """Return ``<player1>_vs_<player2>.zip``, lowercased and without spaces."""
    def safe(name: str) -> str:
        return re.sub(r"\s+", "_", name.strip()).lower()

    return f"{safe(player1)}_vs_{safe(player2)}.zip"


def export_archive(
    path,
    state: MatchState,
    config: MatchConfig,
    players: Mapping[str, str],
    render_card: Optional[CardRenderer] = None,
    generated_at: Optional[datetime] = None,
) -> Path:
    """Write a zip with both JSON documents and, optionally, score cards.

    Cards are drawn from a replay of the history: an opener for the empty
    match and one per point, except double faults. The replay uses the
    current ``config``, so after a mid-match ``update_config`` the cards can
    differ from the scores that were live at the time. Each card carries the
    statistics panel as well, there is no separate statistics card. Returns
    the archive path.
    """
    path = Path(path)
    card_names: List[str] = []
    with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        if render_card is not None:
            archive.writestr(OPENER_CARD, render_card(MatchState(), config, players))
            card_names.append(OPENER_CARD)
            for index, point, before, after in replay_history(state.points_history, config):
                if point.point_type is PointType.DOUBLE_FAULT:
                    continue
                name = f"points/{card_filename(index, before)}"
                archive.writestr(name, render_card(after, config, players))
                card_names.append(name)

        archive.writestr(
            STATISTICS_FILE, json.dumps(build_match_statistics(state, config, players, generated_at), indent=2)
        )
        archive.writestr(SCORE_FILE, json.dumps(build_match_score(state, config, players, generated_at), indent=2))

    logger.info("exported %d points and %d cards to %s", len(state.points_history), len(card_names), path)
    return path
