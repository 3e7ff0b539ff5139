from __future__ import annotations

"""Constants for the scoreboard window and score cards.

Sizes are in pixels. Themes map a name (the ``theme`` field of the match
config) to a top and bottom background color for a vertical gradient and a
text color.
"""

# Colors (R,G,B)
HUD_TEXT_COLOR = (245, 245, 245)
MUTED_TEXT_COLOR = (200, 200, 210)
PANEL_BG = (0, 0, 0, 110)
SERVE_MARKER_COLOR = (242, 214, 0)
WINNER_BANNER_COLOR = (255, 221, 0)
EMPTY_SET_COLOR = (150, 150, 160)
PLAYER_1_COLOR = (66, 135, 245)
PLAYER_2_COLOR = (236, 88, 64)

THEMES = {
    "default": {"top": (102, 126, 234), "bottom": (118, 75, 162), "text": HUD_TEXT_COLOR},
    "sunset": {"top": (255, 126, 95), "bottom": (254, 180, 123), "text": HUD_TEXT_COLOR},
    "forest": {"top": (17, 153, 142), "bottom": (56, 239, 125), "text": HUD_TEXT_COLOR},
    "royal": {"top": (102, 126, 234), "bottom": (118, 75, 162), "text": HUD_TEXT_COLOR},
    "dark": {"top": (44, 62, 80), "bottom": (52, 73, 94), "text": HUD_TEXT_COLOR},
}
THEME_ORDER = ["default", "sunset", "forest", "royal", "dark"]

# Rendering
DEFAULT_WINDOW = (960, 600)
CARD_SIZE = (960, 600)
TARGET_FPS = 30
PADDING_PX = 24
ROW_HEIGHT_PX = 64
CELL_WIDTH_PX = 56
NAME_WIDTH_PX = 300

FONT_NAME = "arial"
FONT_SIZE = 34
FONT_SIZE_SMALL = 18
