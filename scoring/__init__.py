"""Tennis scoring engine.

Pure match logic with no display dependencies: points, games, sets,
tie-breaks and per-player statistics with exact undo.
"""

from .engine import MatchEngine, SUPER_TIE_BREAK_POINTS
from .exceptions import (
    InvalidConfigError,
    InvalidPlayerError,
    InvalidPointError,
    MatchNotStartedError,
    ScoringError,
)
from .statistics import first_serve_percentage, second_serve_percentage
from .types import (
    MatchConfig,
    MatchState,
    PlayerScore,
    PlayerStatistics,
    PointMetadata,
    PointType,
    ServeResult,
    SetScore,
)

__all__ = [
    "MatchEngine",
    "SUPER_TIE_BREAK_POINTS",
    "InvalidConfigError",
    "InvalidPlayerError",
    "InvalidPointError",
    "MatchNotStartedError",
    "ScoringError",
    "first_serve_percentage",
    "second_serve_percentage",
    "MatchConfig",
    "MatchState",
    "PlayerScore",
    "PlayerStatistics",
    "PointMetadata",
    "PointType",
    "ServeResult",
    "SetScore",
]
