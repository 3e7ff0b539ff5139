from __future__ import annotations

"""Scoreboard renderer: draws a match snapshot onto a pygame surface.

The renderer only reads the ``(state, config)`` it is handed and never talks
back to the engine. The same drawing code backs the live window and the
off-screen score cards used by the archive export.
"""

from typing import List, Mapping, Optional, Tuple
import io

import pygame

from scoring.display import point_display, set_columns
from scoring.statistics import first_serve_percentage, second_serve_percentage
from scoring.types import MatchConfig, MatchState, PlayerStatistics

from . import constants as C


def stat_rows(one: PlayerStatistics, two: PlayerStatistics) -> List[Tuple[str, str, str]]:
    """Return ``(label, player1, player2)`` rows for the statistics panel."""
    return [
        ("1st serve in", f"{first_serve_percentage(one)}%", f"{first_serve_percentage(two)}%"),
        ("2nd serve in", f"{second_serve_percentage(one)}%", f"{second_serve_percentage(two)}%"),
        ("Aces", str(one.aces), str(two.aces)),
        ("Double faults", str(one.double_faults), str(two.double_faults)),
        ("Winners", str(one.winners), str(two.winners)),
        ("Unforced errors", str(one.unforced_errors), str(two.unforced_errors)),
        ("Forced errors", str(one.forced_errors), str(two.forced_errors)),
        ("Net points won", str(one.points_won_at_net), str(two.points_won_at_net)),
        (
            "Break points",
            f"{one.break_points_won}/{one.break_points_total}",
            f"{two.break_points_won}/{two.break_points_total}",
        ),
    ]


class ScoreboardRenderer:
    def __init__(self, surf: pygame.Surface, players: Optional[Mapping[str, str]] = None):
        # This sets up fonts and remembers the last snapshot drawn
        self.surf = surf
        self.font = pygame.font.SysFont(C.FONT_NAME, C.FONT_SIZE)
        self.font_small = pygame.font.SysFont(C.FONT_NAME, C.FONT_SIZE_SMALL)
        self.players = dict(players or {"player1": "Player 1", "player2": "Player 2"})
        self.hint = ""
        self.message = ""
        self.last_state: Optional[MatchState] = None
        self.last_config: Optional[MatchConfig] = None

    def render(self, state: MatchState, config: MatchConfig) -> None:
        """Draw the full board for a snapshot."""
        self.last_state = state
        self.last_config = config
        theme = C.THEMES.get(config.theme, C.THEMES["default"])
        self._draw_background(theme)
        y = self._draw_score_table(state, config, theme)
        y = self._draw_banner(state, y)
        self._draw_stats_panel(state, theme, y)
        # Bottom lines: last action above the key hint
        y = self.surf.get_height() - 8
        for text in (self.hint, self.message):
            if not text:
                continue
            img = self.font_small.render(text, True, C.MUTED_TEXT_COLOR)
            y -= img.get_height() + 4
            self.surf.blit(img, (C.PADDING_PX, y))

    def _draw_background(self, theme) -> None:
        w, h = self.surf.get_size()
        top, bottom = theme["top"], theme["bottom"]
        for row in range(h):
            t = row / max(1, h - 1)
            color = tuple(int(round(a + (b - a) * t)) for a, b in zip(top, bottom))
            pygame.draw.line(self.surf, color, (0, row), (w, row))

    def _text(self, text: str, pos: Tuple[int, int], color, small: bool = False, center: bool = False) -> None:
        font = self.font_small if small else self.font
        img = font.render(text, True, color)
        x, y = pos
        if center:
            x -= img.get_width() // 2
            y -= img.get_height() // 2
        self.surf.blit(img, (x, y))

    def _draw_score_table(self, state: MatchState, config: MatchConfig, theme) -> int:
        pad = C.PADDING_PX
        columns = set_columns(state, config)
        x_sets = pad + C.NAME_WIDTH_PX
        x_games = x_sets + C.CELL_WIDTH_PX * len(columns)
        x_points = x_games + C.CELL_WIDTH_PX + 20
        y = pad

        # Headers
        for i in range(len(columns)):
            x = x_sets + C.CELL_WIDTH_PX * i + C.CELL_WIDTH_PX // 2
            self._text(f"Set {i + 1}", (x, y + 8), C.MUTED_TEXT_COLOR, small=True, center=True)
        self._text("Games", (x_games + C.CELL_WIDTH_PX // 2, y + 8), C.MUTED_TEXT_COLOR, small=True, center=True)
        label = "Tie-break" if state.is_tie_break else "Points"
        self._text(label, (x_points + C.CELL_WIDTH_PX, y + 8), C.MUTED_TEXT_COLOR, small=True, center=True)
        y += 24

        for player in (1, 2):
            me = state.score(player)
            them = state.score(2 if player == 1 else 1)
            row = pygame.Surface((self.surf.get_width() - 2 * pad, C.ROW_HEIGHT_PX - 6), pygame.SRCALPHA)
            row.fill(C.PANEL_BG)
            self.surf.blit(row, (pad, y))
            mid = y + (C.ROW_HEIGHT_PX - 6) // 2

            if state.server == player and state.match_winner is None:
                pygame.draw.circle(self.surf, C.SERVE_MARKER_COLOR, (pad + 16, mid), 7)
            color = C.PLAYER_1_COLOR if player == 1 else C.PLAYER_2_COLOR
            pygame.draw.rect(self.surf, color, pygame.Rect(pad, y, 5, C.ROW_HEIGHT_PX - 6))
            name = self.players[f"player{player}"]
            self._text(name, (pad + 32, mid - self.font.get_height() // 2), theme["text"])

            for i, cells in enumerate(columns):
                cell = cells[player - 1]
                cell_color = C.EMPTY_SET_COLOR if cell == "-" else theme["text"]
                self._text(cell, (x_sets + C.CELL_WIDTH_PX * i + C.CELL_WIDTH_PX // 2, mid), cell_color, center=True)
            self._text(str(me.games), (x_games + C.CELL_WIDTH_PX // 2, mid), theme["text"], center=True)
            call = point_display(me.points, them.points, state.is_tie_break)
            self._text(call, (x_points + C.CELL_WIDTH_PX, mid), C.WINNER_BANNER_COLOR, center=True)
            y += C.ROW_HEIGHT_PX
        return y

    def _draw_banner(self, state: MatchState, y: int) -> int:
        if state.match_winner is None:
            return y + 8
        name = self.players[f"player{state.match_winner}"]
        self._text(f"{name} wins the match!", (self.surf.get_width() // 2, y + 22), C.WINNER_BANNER_COLOR, center=True)
        return y + 48

    def _draw_stats_panel(self, state: MatchState, theme, y: int) -> None:
        pad = C.PADDING_PX
        rows = stat_rows(state.player1_stats, state.player2_stats)
        line_h = self.font_small.get_height() + 6
        panel_h = line_h * (len(rows) + 1) + 12
        panel = pygame.Surface((self.surf.get_width() - 2 * pad, panel_h), pygame.SRCALPHA)
        panel.fill(C.PANEL_BG)
        self.surf.blit(panel, (pad, y))

        cx = self.surf.get_width() // 2
        left_x = cx - 160
        right_x = cx + 160
        y += 8
        self._text(self.players["player1"], (left_x, y + line_h // 2), theme["text"], small=True, center=True)
        self._text("Statistics", (cx, y + line_h // 2), C.MUTED_TEXT_COLOR, small=True, center=True)
        self._text(self.players["player2"], (right_x, y + line_h // 2), theme["text"], small=True, center=True)
        for label, one, two in rows:
            y += line_h
            self._text(one, (left_x, y + line_h // 2), theme["text"], small=True, center=True)
            self._text(label, (cx, y + line_h // 2), C.MUTED_TEXT_COLOR, small=True, center=True)
            self._text(two, (right_x, y + line_h // 2), theme["text"], small=True, center=True)


def render_card(state: MatchState, config: MatchConfig, players: Mapping[str, str]) -> bytes:
    """Draw a snapshot off-screen and return it as PNG bytes."""
    if not pygame.font.get_init():
        pygame.font.init()
    surf = pygame.Surface(C.CARD_SIZE)
    ScoreboardRenderer(surf, players).render(state, config)
    buf = io.BytesIO()
    pygame.image.save(surf, buf, "card.png")
    return buf.getvalue()
