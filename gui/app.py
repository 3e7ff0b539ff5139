from __future__ import annotations

"""Pygame scoreboard window for the tennis scorekeeper.

Run with: `python -m gui.app`.

Controls:
  - 1 / 2: point to player 1 / player 2
  - Shift+1 / Shift+2: undo the last point for that player
  - W, U, F, N, M: mark the next point as winner, unforced error,
    forced error, net point or missed return
  - Tab: toggle first / second serve for the next point
  - A: ace for the server, D: double fault by the server
  - T: next theme, R: reset match, E: export archive
  - Q/Esc: quit
"""

import argparse
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

try:
    import pygame
except Exception as e:  # pragma: no cover - runtime dependency hint
    print("Pygame is required for GUI. Install via: pip install pygame", file=sys.stderr)
    raise

from keeper.scorekeeper import ScoreKeeper
from scoring.exceptions import ScoringError
from scoring.types import PointType, ServeResult, other_player

from . import constants as C
from .scoreboard import ScoreboardRenderer, render_card


logger = logging.getLogger(__name__)

TYPE_KEYS = {
    pygame.K_w: PointType.WINNER,
    pygame.K_u: PointType.UNFORCED_ERROR,
    pygame.K_f: PointType.FORCED_ERROR,
    pygame.K_n: PointType.NET,
    pygame.K_m: PointType.MISSED_RETURN,
}
PLAYER_KEYS = {pygame.K_1: 1, pygame.K_KP1: 1, pygame.K_2: 2, pygame.K_KP2: 2}


@dataclass
class PendingPoint:
    """Annotation for the next point; cleared once the point is scored."""

    serve_result: ServeResult = ServeResult.FIRST
    point_type: Optional[PointType] = None

    def clear(self) -> None:
        self.serve_result = ServeResult.FIRST
        self.point_type = None

    def describe(self) -> str:
        kind = self.point_type.value if self.point_type else "plain"
        return f"next: {self.serve_result.value} serve, {kind}"


def next_theme(current: str) -> str:
    """Return the theme after ``current``, wrapping around."""
    if current not in C.THEME_ORDER:
        return C.THEME_ORDER[0]
    return C.THEME_ORDER[(C.THEME_ORDER.index(current) + 1) % len(C.THEME_ORDER)]


def handle_key(keeper: ScoreKeeper, pending: PendingPoint, key: int, shift: bool = False, export_dir: Path = Path(".")) -> str:
    """Apply one key press and return a status line for the window.

    Returns ``"quit"`` when the window should close.
    """
    if key in (pygame.K_ESCAPE, pygame.K_q):
        return "quit"

    if key in PLAYER_KEYS:
        player = PLAYER_KEYS[key]
        if shift:
            keeper.remove_point(player)
            pending.clear()
            return f"Undo: {keeper.name_of(player)}"
        if pending.point_type is None:
            keeper.score_point(player)
        else:
            keeper.score_point_with_stats(player, pending.serve_result, pending.point_type)
        pending.clear()
        return f"Point {keeper.name_of(player)}"

    if key == pygame.K_a:
        server = keeper.get_server()
        keeper.score_point_with_stats(server, pending.serve_result, PointType.ACE, rally_length=1)
        pending.clear()
        return f"Ace {keeper.name_of(server)}"

    if key == pygame.K_d:
        server = keeper.get_server()
        keeper.score_point_with_stats(other_player(server), ServeResult.SECOND, PointType.DOUBLE_FAULT)
        pending.clear()
        return f"Double fault {keeper.name_of(server)}"

    if key in TYPE_KEYS:
        pending.point_type = TYPE_KEYS[key]
        return pending.describe()

    if key == pygame.K_TAB:
        pending.serve_result = ServeResult.SECOND if pending.serve_result is ServeResult.FIRST else ServeResult.FIRST
        return pending.describe()

    if key == pygame.K_t:
        theme = next_theme(keeper.get_config().theme)
        keeper.update_config(theme=theme)
        return f"Theme: {theme}"

    if key == pygame.K_r:
        keeper.reset_match()
        pending.clear()
        return "Match reset"

    if key == pygame.K_e:
        path = keeper.export_archive(export_dir, render_card)
        return f"Exported {path}"

    return ""


def parse_args(argv=None):
    """Parse command line flags for the scoreboard window."""
    p = argparse.ArgumentParser(description="Tennis scoreboard (Pygame)")
    p.add_argument("--player-1", dest="player1", default="Player 1")
    p.add_argument("--player-2", dest="player2", default="Player 2")
    p.add_argument("--games-per-set", type=int, default=6)
    p.add_argument("--sets-to-win", type=int, default=2)
    p.add_argument("--tie-break-points", type=int, default=7)
    p.add_argument("--theme", choices=C.THEME_ORDER, default="default")
    p.add_argument("--export-dir", type=Path, default=Path("."))
    p.add_argument("--width", type=int, default=C.DEFAULT_WINDOW[0])
    p.add_argument("--height", type=int, default=C.DEFAULT_WINDOW[1])
    p.add_argument("--fps", type=int, default=C.TARGET_FPS)
    return p.parse_args(argv)


def run(argv=None) -> int:
    """Run the pygame scoreboard.

    This opens the window, wires the keyboard to the score keeper and redraws
    after every key press until exit.
    """
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    pygame.init()
    pygame.display.set_caption("Tennis Scorekeeper")
    flags = pygame.RESIZABLE | pygame.DOUBLEBUF
    screen = pygame.display.set_mode((args.width, args.height), flags)
    clock = pygame.time.Clock()

    keeper = ScoreKeeper(player1=args.player1, player2=args.player2)
    renderer = ScoreboardRenderer(screen, keeper.players)
    renderer.hint = "1/2 point | Shift undo | A ace | D double fault | W U F N M type | Tab serve | T theme | E export"
    keeper.renderer = renderer
    try:
        keeper.new_match(
            games_per_set=args.games_per_set,
            sets_to_win=args.sets_to_win,
            tie_break_points=args.tie_break_points,
            theme=args.theme,
        )
    except ScoringError as e:
        print(f"Invalid input: {e}", file=sys.stderr)
        pygame.quit()
        return 2

    pending = PendingPoint()
    running = True
    while running:
        clock.tick(args.fps)
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.VIDEORESIZE:
                screen = pygame.display.set_mode((max(640, event.w), max(420, event.h)), flags)
                renderer.surf = screen
                renderer.render(keeper.get_state(), keeper.get_config())
            elif event.type == pygame.KEYDOWN:
                shift = bool(event.mod & pygame.KMOD_SHIFT)
                try:
                    status = handle_key(keeper, pending, event.key, shift, args.export_dir)
                except (ScoringError, OSError) as e:
                    logger.warning("key %s failed: %s", pygame.key.name(event.key), e)
                    status = f"Error: {e}"
                if status == "quit":
                    running = False
                    break
                if status:
                    logger.info(status)
                    renderer.message = status
                    renderer.render(keeper.get_state(), keeper.get_config())
        pygame.display.flip()
    pygame.quit()
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(run())
