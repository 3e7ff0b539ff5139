from __future__ import annotations

import argparse
import json
import logging
import re
import sys
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from scoring.display import game_score_text, summary_line
from scoring.exceptions import ScoringError
from scoring.statistics import first_serve_percentage, second_serve_percentage
from scoring.types import MatchState, PointMetadata, PointType

from . import export
from .scorekeeper import ScoreKeeper


logger = logging.getLogger(__name__)

# (player, serve result, point type, rally length); serve and type are None for plain points.
PointSpec = Tuple[int, Optional[str], Optional[str], Optional[int]]

INTERACTIVE_HELP = (
    "Commands: 1 | 2 | <player> <first|second> <type> | u1 | u2 | r (reset) | s (stats) | q (quit)\n"
    "Types: " + ", ".join(t.value for t in PointType)
)


def parse_point_token(token: str) -> PointSpec:
    """Parse ``1``, ``2`` or ``<player>:<serve>[:<type>]``.

    A serve without a type is scored as a winner.
    """
    parts = [p for p in re.split(r"[:\s]+", token.strip()) if p]
    if not parts or parts[0] not in ("1", "2") or len(parts) > 3:
        raise ValueError(f"bad point: {token!r}")
    player = int(parts[0])
    if len(parts) == 1:
        return player, None, None, None
    point_type = parts[2] if len(parts) == 3 else PointType.WINNER.value
    return player, parts[1], point_type, None


def parse_points(text: str) -> List[PointSpec]:
    """Parse a point sequence.

    ``"1121"`` scores plain points one digit at a time; otherwise tokens are
    separated by commas, e.g. ``"1:first:ace, 2:second:winner, 1"``.
    """
    text = text.strip()
    if re.fullmatch(r"[12]+", text):
        return [(int(ch), None, None, None) for ch in text]
    return [parse_point_token(tok) for tok in text.split(",") if tok.strip()]


def load_history(path: Path) -> List[PointMetadata]:
    """Read the ``pointsHistory`` of a match-score export."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("pointsHistory")
    if not isinstance(data, list):
        raise ValueError("pointsHistory must be a list")
    return [export.point_from_dict(item) for item in data]


def history_specs(history: List[PointMetadata]) -> List[PointSpec]:
    """Return replayable specs for exported points, keeping rally lengths."""
    specs = []
    for point in history:
        if point.has_statistics:
            specs.append((point.winner, point.serve_result.value, point.point_type.value, point.rally_length))
        else:
            specs.append((point.winner, None, None, None))
    return specs


def describe_point(keeper: ScoreKeeper, player: int, before: MatchState, after: MatchState) -> List[str]:
    """Return the lines announcing one point, in scoreboard order."""
    name = keeper.name_of(player)
    if len(after.points_history) == len(before.points_history):
        return [f"Point {name} ignored: match is over."]

    lines = []
    set_closed = len(after.past_set_scores) > len(before.past_set_scores)
    game_closed = set_closed or (after.player1.games + after.player2.games) > (before.player1.games + before.player2.games)
    if game_closed:
        lines.append(f"Point {name}, Game {name}")
    else:
        lines.append(f"Point {name}, Game Score: {game_score_text(after, keeper.player1, keeper.player2)}")

    if set_closed:
        done = after.past_set_scores[-1]
        lines.append(
            f"Set won by {name}. Games: {keeper.player1} vs {keeper.player2} {done.player1} - {done.player2}"
        )
    elif game_closed:
        lines.append(
            f"Set Score: {keeper.player1} vs {keeper.player2} {after.player1.games} - {after.player2.games}"
        )

    if after.match_winner is not None:
        lines.append(
            f"Winner: {keeper.name_of(after.match_winner)}. Final Score (sets): "
            f"{keeper.player1} vs {keeper.player2} {after.player1.sets} - {after.player2.sets}"
        )
    return lines


def play(keeper: ScoreKeeper, spec: PointSpec, out: Callable[[str], None] = print) -> None:
    """Score one point and pass its announcement lines to ``out``."""
    player, serve, point_type, rally_length = spec
    before = keeper.get_state()
    if serve is None:
        keeper.score_point(player)
    else:
        keeper.score_point_with_stats(player, serve, point_type, rally_length)
    for line in describe_point(keeper, player, before, keeper.get_state()):
        out(line)


def format_statistics(keeper: ScoreKeeper) -> List[str]:
    """Return the statistics table as aligned text rows, names first."""
    stats = keeper.get_statistics()
    one, two = stats["player1"], stats["player2"]

    def row(label: str, left, right) -> str:
        return f"{label:<24}{str(left):>8}  {str(right):<8}"

    return [
        row("", keeper.player1, keeper.player2),
        row("1st serve %", f"{first_serve_percentage(one)}%", f"{first_serve_percentage(two)}%"),
        row("2nd serve %", f"{second_serve_percentage(one)}%", f"{second_serve_percentage(two)}%"),
        row("Aces", one.aces, two.aces),
        row("Double faults", one.double_faults, two.double_faults),
        row("Winners", one.winners, two.winners),
        row("Unforced errors", one.unforced_errors, two.unforced_errors),
        row("Forced errors", one.forced_errors, two.forced_errors),
        row("Net points won", one.points_won_at_net, two.points_won_at_net),
        row("1st serve points won", one.points_won_on_first_serve, two.points_won_on_first_serve),
        row("2nd serve points won", one.points_won_on_second_serve, two.points_won_on_second_serve),
        row(
            "Break points won",
            f"{one.break_points_won}/{one.break_points_total}",
            f"{two.break_points_won}/{two.break_points_total}",
        ),
    ]


def run_interactive(keeper: ScoreKeeper) -> int:
    """Read commands from stdin until ``q`` or end of input."""
    print(INTERACTIVE_HELP)
    while True:
        try:
            raw = input("> ").strip().lower()
        except EOFError:
            return 0
        if not raw:
            continue
        if raw in ("q", "quit"):
            return 0
        try:
            if raw in ("u1", "u2"):
                keeper.remove_point(int(raw[1]))
                print(f"Undo {keeper.name_of(int(raw[1]))}. {summary_line(keeper.get_state(), keeper.player1, keeper.player2)}")
            elif raw == "r":
                keeper.reset_match()
                print("Match reset.")
            elif raw == "s":
                for line in format_statistics(keeper):
                    print(line)
            else:
                play(keeper, parse_point_token(raw))
        except (ValueError, ScoringError) as e:
            print(f"Invalid input: {e}. Please try again.")


def _positive_int(text: str) -> int:
    value = int(text)
    if value < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Tennis match scorekeeper (CLI)")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--points", type=str, help='Points to score, e.g. "1121" or "1:first:ace,2:second:net"')
    source.add_argument("--history", type=Path, help="Replay the pointsHistory of a match-score JSON export")
    source.add_argument("--interactive", action="store_true", help="Score points typed at a prompt")
    parser.add_argument("--player-1", dest="player1", default="Player 1", help="Player 1 name")
    parser.add_argument("--player-2", dest="player2", default="Player 2", help="Player 2 name")
    parser.add_argument("--games-per-set", type=_positive_int, default=6, help="Games needed to win a set (default 6)")
    parser.add_argument("--sets-to-win", type=_positive_int, default=2, help="Sets needed to win the match (default 2)")
    parser.add_argument("--tie-break-points", type=_positive_int, default=7, help="Points to win a tie-break (default 7)")
    parser.add_argument("--export", type=Path, default=None, help="Directory to write the match archive to")
    parser.add_argument("--cards", action="store_true", help="Include score card images in the archive (needs pygame)")
    parser.add_argument("--quiet", action="store_true", help="Only print the final summary")
    parser.add_argument("--verbose", action="store_true", help="Log engine transitions")
    return parser


def main(argv=None) -> int:
    """Run the text mode interface for the tennis scorekeeper.

    Points come from a flag, an exported history or the keyboard; each one is
    announced as text and the match can be exported at the end.
    """
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    keeper = ScoreKeeper(player1=args.player1, player2=args.player2)
    keeper.new_match(
        games_per_set=args.games_per_set,
        sets_to_win=args.sets_to_win,
        tie_break_points=args.tie_break_points,
    )

    if args.interactive:
        status = run_interactive(keeper)
    else:
        try:
            specs = parse_points(args.points) if args.points is not None else history_specs(load_history(args.history))
        except (OSError, ValueError) as e:
            print(f"Invalid input: {e}")
            return 2
        out = (lambda line: None) if args.quiet else print
        print(f"Start of play - {keeper.player1} vs {keeper.player2} - first to {args.sets_to_win} sets")
        try:
            for spec in specs:
                play(keeper, spec, out)
        except ScoringError as e:
            print(f"Invalid input: {e}")
            return 2
        status = 0

    state = keeper.get_state()
    print(summary_line(state, keeper.player1, keeper.player2))

    if args.export is not None:
        render_card = None
        if args.cards:
            from gui.scoreboard import render_card
        args.export.mkdir(parents=True, exist_ok=True)
        path = keeper.export_archive(args.export, render_card)
        print(f"Exported {path}")
    return status


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
