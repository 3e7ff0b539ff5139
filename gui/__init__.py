"""Pygame front end for the tennis scorekeeper.

Contains the scoreboard renderer (also used for exported score cards),
display constants and themes, and the application entry point
(`python -m gui.app`).
"""

__all__ = [
    "constants",
    "scoreboard",
    "app",
]
