"""Score keeper package for the tennis scorer.

This package sits between front ends (text CLI, pygame window, replays) and
the `scoring` engine, and produces the match exports.
"""

from . import export
from .scorekeeper import ScoreKeeper

__all__ = ["ScoreKeeper", "export", "scorekeeper"]
