from __future__ import annotations

"""Data model shared by the scoring engine, exporter and front ends.

Scores and statistics are plain mutable dataclasses owned by the engine.
Everything that leaves the engine is either a deep copy or a frozen value
(``MatchConfig``, ``SetScore``, ``PointMetadata``).
"""

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import List, Optional

from .exceptions import InvalidConfigError, InvalidPlayerError, InvalidPointError


PLAYERS = (1, 2)


class ServeResult(str, Enum):
    FIRST = "first"
    SECOND = "second"


class PointType(str, Enum):
    ACE = "ace"
    DOUBLE_FAULT = "double_fault"
    WINNER = "winner"
    UNFORCED_ERROR = "unforced_error"
    FORCED_ERROR = "forced_error"
    NET = "net"
    MISSED_RETURN = "missed_return"


def check_player(player: int) -> int:
    """Return the player number or raise if it is not 1 or 2."""
    if isinstance(player, bool) or not isinstance(player, int) or player not in PLAYERS:
        raise InvalidPlayerError(f"player must be 1 or 2, got {player!r}")
    return player


def other_player(player: int) -> int:
    return 2 if player == 1 else 1


def parse_serve_result(value) -> ServeResult:
    """Return the serve result for "first"/"second" or an enum member."""
    try:
        return ServeResult(value)
    except ValueError:
        raise InvalidPointError(f"unknown serve result: {value!r}") from None


def parse_point_type(value) -> PointType:
    """Return the point type for its name or an enum member."""
    try:
        return PointType(value)
    except ValueError:
        raise InvalidPointError(f"unknown point type: {value!r}") from None


@dataclass(frozen=True)
class MatchConfig:
    games_per_set: int = 6
    sets_to_win: int = 2
    tie_break_points: int = 7
    # Display only; the engine never reads it.
    theme: str = "default"

    def __post_init__(self) -> None:
        for name in ("games_per_set", "sets_to_win", "tie_break_points"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise InvalidConfigError(f"{name} must be an integer >= 1, got {value!r}")


@dataclass
class PlayerScore:
    points: int = 0
    games: int = 0
    sets: int = 0


@dataclass(frozen=True)
class SetScore:
    """Games won by each player in one completed set."""

    player1: int
    player2: int


@dataclass
class PlayerStatistics:
    # Serve
    first_serves_in: int = 0
    first_serves_total: int = 0
    second_serves_in: int = 0
    second_serves_total: int = 0
    aces: int = 0
    double_faults: int = 0

    # Point outcomes
    unforced_errors: int = 0
    forced_errors: int = 0
    winners: int = 0
    points_won_at_net: int = 0

    # Service points won
    points_won_on_first_serve: int = 0
    points_won_on_second_serve: int = 0

    # Returns
    first_serve_returns: int = 0
    second_serve_returns: int = 0
    points_won_on_first_serve_return: int = 0
    points_won_on_second_serve_return: int = 0
    first_serve_missed_returns: int = 0
    second_serve_missed_returns: int = 0

    # Break points, as returner
    break_points_won: int = 0
    break_points_total: int = 0

    def increment(self, name: str) -> None:
        setattr(self, name, getattr(self, name) + 1)

    def decrement(self, name: str) -> None:
        """Lower a counter by one without going below zero."""
        setattr(self, name, max(0, getattr(self, name) - 1))


STAT_FIELDS = tuple(f.name for f in fields(PlayerStatistics))


@dataclass(frozen=True)
class PointMetadata:
    """One applied point as stored in the match history.

    ``serve_result`` and ``point_type`` are ``None`` for points scored
    without statistics; those entries are skipped by the accumulator.
    """

    winner: int
    server: int
    serve_result: Optional[ServeResult] = None
    point_type: Optional[PointType] = None
    was_break_point: bool = False
    rally_length: Optional[int] = None

    @property
    def has_statistics(self) -> bool:
        return self.serve_result is not None and self.point_type is not None

    @property
    def loser(self) -> int:
        return other_player(self.winner)

    @property
    def returner(self) -> int:
        return other_player(self.server)


@dataclass
class MatchState:
    player1: PlayerScore = field(default_factory=PlayerScore)
    player2: PlayerScore = field(default_factory=PlayerScore)
    player1_stats: PlayerStatistics = field(default_factory=PlayerStatistics)
    player2_stats: PlayerStatistics = field(default_factory=PlayerStatistics)
    server: int = 1
    past_set_scores: List[SetScore] = field(default_factory=list)
    match_winner: Optional[int] = None
    is_tie_break: bool = False
    points_history: List[PointMetadata] = field(default_factory=list)

    def score(self, player: int) -> PlayerScore:
        return self.player1 if player == 1 else self.player2

    def stats(self, player: int) -> PlayerStatistics:
        return self.player1_stats if player == 1 else self.player2_stats
