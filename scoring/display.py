from __future__ import annotations

"""Text for showing a match state: point calls, game and set scores."""

from typing import List, Tuple

from .types import MatchConfig, MatchState


PointLabel = {0: "0", 1: "15", 2: "30", 3: "40"}
PointName = {0: "Love", 1: "15", 2: "30", 3: "40"}


def point_display(points: int, opponent_points: int, is_tie_break: bool) -> str:
    """Return the call for one side of the current game.

    Tie-breaks show raw points. From 40-40 on the side ahead shows AD.
    """
    if is_tie_break:
        return str(points)
    if points >= 3 and opponent_points >= 3:
        return "AD" if points > opponent_points else "40"
    return PointLabel.get(points, "0")


def game_score_text(state: MatchState, name_1: str = "Player 1", name_2: str = "Player 2") -> str:
    """Return a friendly string for the score within the current game.

    This handles normal points, tie-breaks and the deuce and advantage states.
    """
    points_1, points_2 = state.player1.points, state.player2.points
    if state.is_tie_break:
        return f"Tie-break {points_1} - {points_2}"
    if points_1 >= 3 and points_2 >= 3:
        if points_1 == points_2:
            return "Deuce"
        return f"Ad {name_1}" if points_1 > points_2 else f"Ad {name_2}"
    return f"{PointName.get(points_1, '40')} - {PointName.get(points_2, '40')}"


def set_columns(state: MatchState, config: MatchConfig) -> List[Tuple[str, str]]:
    """Return one ``(player1, player2)`` cell pair per set slot.

    Completed sets show their games; sets not yet played show "-".
    """
    slots = max(config.sets_to_win, len(state.past_set_scores))
    columns = []
    for i in range(slots):
        if i < len(state.past_set_scores):
            done = state.past_set_scores[i]
            columns.append((str(done.player1), str(done.player2)))
        else:
            columns.append(("-", "-"))
    return columns


def point_position(state: MatchState) -> Tuple[int, int, int]:
    """Return the set and game being played and the points played in the game."""
    current_set = len(state.past_set_scores) + 1
    current_game = state.player1.games + state.player2.games + 1
    current_point = state.player1.points + state.player2.points
    return current_set, current_game, current_point


def summary_line(state: MatchState, name_1: str = "Player 1", name_2: str = "Player 2") -> str:
    """Return sets, completed set scores and current games on one line."""
    sets = ", ".join(f"{s.player1}-{s.player2}" for s in state.past_set_scores) or "none"
    return (
        f"Sets: {name_1} vs {name_2} {state.player1.sets} - {state.player2.sets} "
        f"(completed: {sets}) Games: {state.player1.games} - {state.player2.games}"
    )
