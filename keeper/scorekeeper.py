from __future__ import annotations

"""Score keeper: the bridge between input events, the engine and a renderer.

Front ends (the text CLI, the pygame window, a replay) call the keeper; the
keeper forwards to ``scoring.MatchEngine`` and hands a fresh snapshot to the
renderer after every change. A renderer is any object with a
``render(state, config)`` method. It only reads the snapshot.
"""

from pathlib import Path
from typing import Dict, Optional
import logging

from scoring.engine import MatchEngine
from scoring.exceptions import MatchNotStartedError
from scoring.types import MatchConfig, MatchState, PlayerStatistics

from . import export


logger = logging.getLogger(__name__)

DEFAULT_NAMES = ("Player 1", "Player 2")


class ScoreKeeper:
    def __init__(self, renderer=None, player1: str = DEFAULT_NAMES[0], player2: str = DEFAULT_NAMES[1]):
        self.renderer = renderer
        self._match: Optional[MatchEngine] = None
        self.player1 = DEFAULT_NAMES[0]
        self.player2 = DEFAULT_NAMES[1]
        self.rename_players(player1, player2)

    @property
    def match(self) -> MatchEngine:
        if self._match is None:
            raise MatchNotStartedError("Match not initialized. Call new_match() first.")
        return self._match

    @property
    def started(self) -> bool:
        return self._match is not None

    @property
    def players(self) -> Dict[str, str]:
        return {"player1": self.player1, "player2": self.player2}

    def new_match(self, config: Optional[MatchConfig] = None, **overrides) -> None:
        """Start a fresh match, replacing any match in progress."""
        self._match = MatchEngine(config, **overrides)
        logger.info("new match: %s vs %s, %s", self.player1, self.player2, self._match.get_config())
        self._refresh()

    def rename_players(self, player1: Optional[str] = None, player2: Optional[str] = None) -> None:
        """Set display names; blank names fall back to the defaults."""
        if player1 is not None:
            self.player1 = player1.strip() or DEFAULT_NAMES[0]
        if player2 is not None:
            self.player2 = player2.strip() or DEFAULT_NAMES[1]
        if self.started:
            self._refresh()

    def name_of(self, player: int) -> str:
        return self.player1 if player == 1 else self.player2

    # Engine forwarding

    def get_config(self) -> MatchConfig:
        return self.match.get_config()

    def update_config(self, **changes) -> None:
        self.match.update_config(**changes)
        self._refresh()

    def get_state(self) -> MatchState:
        return self.match.get_state()

    def get_statistics(self) -> Dict[str, PlayerStatistics]:
        return self.match.get_statistics()

    def get_server(self) -> int:
        """Return the player serving the next point."""
        return self.match.get_state().server

    def score_point(self, player: int) -> None:
        self.match.score_point(player)
        self._refresh()

    def score_point_with_stats(self, player: int, serve_result, point_type, rally_length: Optional[int] = None) -> None:
        self.match.score_point_with_stats(player, serve_result, point_type, rally_length)
        self._refresh()

    def remove_point(self, player: int) -> None:
        self.match.remove_point(player)
        self._refresh()

    def reset_match(self) -> None:
        """Clear the score and statistics; config and names are kept."""
        self.match.reset()
        self._refresh()

    # Exports

    def export_archive(self, directory=".", render_card: Optional[export.CardRenderer] = None) -> Path:
        """Write the match archive into ``directory`` and return its path."""
        path = Path(directory) / export.safe_archive_name(self.player1, self.player2)
        return export.export_archive(path, self.get_state(), self.get_config(), self.players, render_card)

    def _refresh(self) -> None:
        if self.renderer is not None:
            self.renderer.render(self.match.get_state(), self.match.get_config())
