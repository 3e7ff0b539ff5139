from __future__ import annotations

"""Per-player statistics derived from annotated points.

Every rule is a ``(role, counter)`` delta. ``apply_statistics`` adds one to
each counter that ``point_deltas`` names and ``reverse_statistics`` takes
one away from the very same list, so undoing a point always mirrors what
applying it did.

Roles are resolved against the point: ``server`` and ``returner`` come from
who served, ``winner`` and ``loser`` from who won. Counter names may hold a
``{lane}`` placeholder that is filled with the serve used (first/second).
"""

from typing import Dict, List, Tuple

from .types import MatchState, PlayerStatistics, PointMetadata, PointType, ServeResult


Delta = Tuple[str, str]

SERVE_DELTAS: Dict[ServeResult, Tuple[Delta, ...]] = {
    ServeResult.FIRST: (
        ("server", "first_serves_total"),
        ("server", "first_serves_in"),
    ),
    # The missed first serve still counts as an attempt.
    ServeResult.SECOND: (
        ("server", "first_serves_total"),
        ("server", "second_serves_total"),
        ("server", "second_serves_in"),
    ),
}

# Replaces the serve deltas above: neither serve went in.
DOUBLE_FAULT_DELTAS: Tuple[Delta, ...] = (
    ("server", "first_serves_total"),
    ("server", "second_serves_total"),
    ("server", "double_faults"),
)

POINT_TYPE_DELTAS: Dict[PointType, Tuple[Delta, ...]] = {
    PointType.ACE: (
        ("server", "aces"),
        ("loser", "{lane}_serve_missed_returns"),
    ),
    PointType.DOUBLE_FAULT: (),
    PointType.WINNER: (("winner", "winners"),),
    PointType.UNFORCED_ERROR: (("loser", "unforced_errors"),),
    PointType.FORCED_ERROR: (("loser", "forced_errors"),),
    PointType.NET: (("winner", "points_won_at_net"),),
    PointType.MISSED_RETURN: (("loser", "{lane}_serve_missed_returns"),),
}

SERVER_WON_DELTAS: Tuple[Delta, ...] = (("winner", "points_won_on_{lane}_serve"),)

RETURNER_WON_DELTAS: Tuple[Delta, ...] = (
    ("winner", "{lane}_serve_returns"),
    ("winner", "points_won_on_{lane}_serve_return"),
)

# The serve came back but the returner still lost the point.
RETURN_LOST_DELTAS: Tuple[Delta, ...] = (("loser", "{lane}_serve_returns"),)

BREAK_POINT_DELTAS: Tuple[Delta, ...] = (("returner", "break_points_total"),)
BREAK_POINT_WON_DELTAS: Tuple[Delta, ...] = (("returner", "break_points_won"),)


def _rule_deltas(point: PointMetadata) -> List[Delta]:
    """Return the unresolved deltas for a point in rule order."""
    deltas: List[Delta] = []

    if point.point_type is PointType.DOUBLE_FAULT:
        deltas.extend(DOUBLE_FAULT_DELTAS)
    else:
        deltas.extend(SERVE_DELTAS[point.serve_result])

    deltas.extend(POINT_TYPE_DELTAS[point.point_type])

    if point.winner == point.server:
        deltas.extend(SERVER_WON_DELTAS)
        if point.loser != point.server and point.point_type is not PointType.MISSED_RETURN:
            deltas.extend(RETURN_LOST_DELTAS)
    else:
        deltas.extend(RETURNER_WON_DELTAS)

    if point.was_break_point:
        deltas.extend(BREAK_POINT_DELTAS)
        if point.winner == point.returner:
            deltas.extend(BREAK_POINT_WON_DELTAS)
    return deltas


def point_deltas(point: PointMetadata) -> List[Tuple[int, str]]:
    """Return ``(player, counter)`` pairs touched by a point.

    Points recorded without statistics touch nothing.
    """
    if not point.has_statistics:
        return []
    roles = {
        "server": point.server,
        "returner": point.returner,
        "winner": point.winner,
        "loser": point.loser,
    }
    lane = point.serve_result.value
    return [(roles[role], counter.format(lane=lane)) for role, counter in _rule_deltas(point)]


def apply_statistics(state: MatchState, point: PointMetadata) -> None:
    """Add the counters for one annotated point to both players."""
    for player, counter in point_deltas(point):
        state.stats(player).increment(counter)


def reverse_statistics(state: MatchState, point: PointMetadata) -> None:
    """Undo ``apply_statistics`` for the same point, clamping at zero."""
    for player, counter in point_deltas(point):
        state.stats(player).decrement(counter)


def percentage(part: int, total: int) -> int:
    """Return a rounded whole percentage, zero when there is no total."""
    if total == 0:
        return 0
    # Half-up rounding, the way scoreboards display it.
    return int(part * 100 / total + 0.5)


def first_serve_percentage(stats: PlayerStatistics) -> int:
    """Return the share of first serves that went in."""
    return percentage(stats.first_serves_in, stats.first_serves_total)


def second_serve_percentage(stats: PlayerStatistics) -> int:
    """Return the share of second serves that went in."""
    return percentage(stats.second_serves_in, stats.second_serves_total)
