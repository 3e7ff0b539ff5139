from __future__ import annotations

"""Tennis match engine: points, games, sets and match with statistics.

The engine owns one ``MatchState`` and mutates it in place. Callers only
ever see copies through ``get_state``/``get_statistics``. Every scoring call
runs the same cascade: point, then tie-break entry, then game, set and match
checks. Once a match winner is known, scoring and undo are ignored.
"""

from copy import deepcopy
from dataclasses import fields, replace
from typing import Dict, Mapping, Optional
import logging

from .exceptions import InvalidConfigError, InvalidPointError
from .statistics import apply_statistics, reverse_statistics
from .types import (
    MatchConfig,
    MatchState,
    PlayerStatistics,
    PointMetadata,
    SetScore,
    check_player,
    other_player,
    parse_point_type,
    parse_serve_result,
)


logger = logging.getLogger(__name__)

# Points needed to win the tie-break of a deciding set.
SUPER_TIE_BREAK_POINTS = 10

CONFIG_FIELDS = frozenset(f.name for f in fields(MatchConfig))


def merge_config(base: MatchConfig, changes: Mapping[str, object]) -> MatchConfig:
    """Return ``base`` with ``changes`` applied; unspecified fields keep their values."""
    unknown = set(changes) - CONFIG_FIELDS
    if unknown:
        raise InvalidConfigError(f"unknown config field(s): {sorted(unknown)}")
    return replace(base, **changes)


class MatchEngine:
    """Score a two-player match and keep per-player statistics."""

    def __init__(self, config: Optional[MatchConfig] = None, **overrides) -> None:
        self._config = merge_config(config or MatchConfig(), overrides)
        self._state = MatchState()

    # Read access

    def get_config(self) -> MatchConfig:
        """Return a copy of the current match configuration."""
        return replace(self._config)

    def get_state(self) -> MatchState:
        """Return a deep copy of the match state; changing it does not affect the engine."""
        return deepcopy(self._state)

    def get_statistics(self) -> Dict[str, PlayerStatistics]:
        """Return copies of both players' statistics keyed "player1" and "player2"."""
        return {
            "player1": replace(self._state.player1_stats),
            "player2": replace(self._state.player2_stats),
        }

    # Configuration and lifecycle

    def update_config(self, **changes) -> None:
        """Merge new config values; they apply from the next point on."""
        self._config = merge_config(self._config, changes)
        logger.debug("config updated: %s", self._config)

    def reset(self) -> None:
        """Start the match over from 0-0. The config is kept."""
        self._state = MatchState()
        logger.debug("match reset")

    # Scoring

    def score_point(self, player: int) -> None:
        """Award a point to ``player`` without statistics."""
        check_player(player)
        if self._state.match_winner is not None:
            logger.debug("match over; ignoring point for player %s", player)
            return
        self._state.points_history.append(PointMetadata(winner=player, server=self._state.server))
        self._play(player, rotate_tie_break_server=False)

    def score_point_with_stats(
        self,
        player: int,
        serve_result,
        point_type,
        rally_length: Optional[int] = None,
    ) -> None:
        """Award a point to ``player`` and record how it was won.

        ``serve_result`` is ``"first"``/``"second"`` and ``point_type`` one of
        the ``PointType`` values; enum members are accepted as well. Break
        points are detected from the score before the point is applied.
        """
        check_player(player)
        serve = parse_serve_result(serve_result)
        kind = parse_point_type(point_type)
        if rally_length is not None and (
            isinstance(rally_length, bool) or not isinstance(rally_length, int) or rally_length < 1
        ):
            raise InvalidPointError(f"rally_length must be a positive integer, got {rally_length!r}")
        if self._state.match_winner is not None:
            logger.debug("match over; ignoring point for player %s", player)
            return

        point = PointMetadata(
            winner=player,
            server=self._state.server,
            serve_result=serve,
            point_type=kind,
            was_break_point=self._is_break_point(),
            rally_length=rally_length,
        )
        apply_statistics(self._state, point)
        self._state.points_history.append(point)
        self._play(player, rotate_tie_break_server=True)

    def remove_point(self, player: int) -> None:
        """Undo the last point, taking it away from ``player``.

        Intra-game history is not tracked, so stepping back over a finished
        game lands on deuce (40-40) and stepping back over a finished set
        lands on 5-5, deuce.
        """
        check_player(player)
        state = self._state
        if state.match_winner is not None:
            logger.debug("match over; ignoring undo for player %s", player)
            return

        target = state.score(player)
        if target.points > 0:
            target.points -= 1
        elif target.games > 0:
            target.games -= 1
            state.player1.points = state.player2.points = 3
            state.is_tie_break = False
            self._switch_server()
        elif target.sets > 0:
            target.sets -= 1
            if state.past_set_scores:
                state.past_set_scores.pop()
            state.player1.games = state.player2.games = 5
            state.player1.points = state.player2.points = 3
            state.is_tie_break = False

        if state.points_history:
            reverse_statistics(state, state.points_history.pop())

    # Cascade

    def _play(self, player: int, rotate_tie_break_server: bool) -> None:
        state = self._state
        scorer = state.score(player)
        scorer.points += 1

        if not state.is_tie_break and self._should_enter_tie_break():
            state.is_tie_break = True
            state.player1.points = state.player2.points = 0
            # The point that triggered entry is the first tie-break point.
            scorer.points = 1
            logger.debug(
                "tie-break started at %s-%s games%s",
                state.player1.games,
                state.player2.games,
                " (deciding set)" if self._is_deciding_set() else "",
            )

        if state.is_tie_break:
            if self._has_won_tie_break(player):
                self._close_tie_break(player)
            elif rotate_tie_break_server and (state.player1.points + state.player2.points) % 2 == 1:
                self._switch_server()
            return

        if not self._has_won_game(player):
            return

        scorer.games += 1
        state.player1.points = state.player2.points = 0
        self._switch_server()
        logger.debug("game player %s, games %s-%s", player, state.player1.games, state.player2.games)

        if self._has_won_set(player):
            scorer.sets += 1
            state.past_set_scores.append(SetScore(state.player1.games, state.player2.games))
            state.player1.games = state.player2.games = 0
            logger.debug("set player %s, sets %s-%s", player, state.player1.sets, state.player2.sets)
            self._check_match_win(player)

    def _close_tie_break(self, player: int) -> None:
        state = self._state
        state.score(player).sets += 1
        # The tie-break counts as the deciding game of the set.
        state.past_set_scores.append(
            SetScore(
                state.player1.games + (1 if player == 1 else 0),
                state.player2.games + (1 if player == 2 else 0),
            )
        )
        logger.debug("tie-break and set player %s, sets %s-%s", player, state.player1.sets, state.player2.sets)
        if self._check_match_win(player):
            return
        state.player1.games = state.player2.games = 0
        state.player1.points = state.player2.points = 0
        state.is_tie_break = False

    def _check_match_win(self, player: int) -> bool:
        if self._state.score(player).sets >= self._config.sets_to_win:
            self._state.match_winner = player
            logger.debug("match player %s", player)
            return True
        return False

    # Rules

    def _has_won_game(self, player: int) -> bool:
        me = self._state.score(player)
        them = self._state.score(other_player(player))
        return me.points >= 4 and me.points >= them.points + 2

    def _has_won_set(self, player: int) -> bool:
        me = self._state.score(player)
        them = self._state.score(other_player(player))
        return me.games >= self._config.games_per_set and me.games >= them.games + 2

    def _has_won_tie_break(self, player: int) -> bool:
        me = self._state.score(player)
        them = self._state.score(other_player(player))
        needed = SUPER_TIE_BREAK_POINTS if self._is_deciding_set() else self._config.tie_break_points
        return me.points >= needed and me.points >= them.points + 2

    def _should_enter_tie_break(self) -> bool:
        state = self._state
        games = self._config.games_per_set
        return (state.player1.games == games and state.player2.games == games) or self._is_deciding_set()

    def _is_deciding_set(self) -> bool:
        """Return True when both players are one set away from the match."""
        one_away = max(self._config.sets_to_win - 1, 1)
        return self._state.player1.sets == one_away and self._state.player2.sets == one_away

    def _is_break_point(self) -> bool:
        """Return True if the returner wins the game by winning the next point."""
        state = self._state
        if state.is_tie_break:
            return False
        serving = state.score(state.server).points
        returning = state.score(other_player(state.server)).points
        if returning >= 3 and serving < 3:
            return True
        return returning >= 3 and serving >= 3 and returning == serving + 1

    def _switch_server(self) -> None:
        self._state.server = other_player(self._state.server)


__all__ = ["MatchEngine", "SUPER_TIE_BREAK_POINTS", "merge_config"]
