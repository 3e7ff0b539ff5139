import os
import sys

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

# Pygame must not open a real window or audio device under test.
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

from scoring.engine import MatchEngine  # noqa: E402


@pytest.fixture
def engine():
    """A match with the default config: 6 games, 2 sets, 7-point tie-break."""
    return MatchEngine()
