"""
Centralized constants for the note layout engine.
All magic numbers used by layout, styling and rendering live here.
"""

# ===========================================
# LAYOUT DEFAULTS
# ===========================================
DEFAULT_BASE_FONT_SIZE = 14.0
DEFAULT_SCALE_RATIO = 1.25
DEFAULT_LINE_HEIGHT = 1.6
DEFAULT_MAX_LINE_LENGTH = 70          # characters
DEFAULT_MARGIN_TOP = 20.0             # points
DEFAULT_MARGIN_BOTTOM = 20.0
DEFAULT_MARGIN_SIDE = 40.0
DEFAULT_BLOCK_GAP = 8.0
DEFAULT_CARD_THRESHOLD = 0.7

MAX_HEADING_LEVEL = 6
CARD_PADDING = 12.0                   # inner whitespace around a card
CARD_MARGIN = 6.0                     # extra outer whitespace around a card
SEPARATOR_HEIGHT_RATIO = 0.5          # of one line
DEFAULT_IMAGE_ASPECT = 0.75           # height / width when unknown (4:3)
AVG_CHAR_WIDTH_RATIO = 0.5           # average glyph width / font size
CODE_CHAR_WIDTH_RATIO = 0.6          # monospace glyph width / font size

# Page sizes in points (width, height)
PAGE_SIZES = {
    "A4": (595.28, 841.89),
    "A5": (419.53, 595.28),
    "Letter": (612.0, 792.0),
    "Legal": (612.0, 1008.0),
}

# Multipliers applied to DEFAULT_BLOCK_GAP
SPACING_SCALES = {
    "compact": 0.5,
    "normal": 1.0,
    "relaxed": 1.75,
}

# Font size multipliers for the style hint size bucket
SIZE_SCALES = {
    "small": 0.85,
    "normal": 1.0,
    "large": 1.2,
    "xlarge": 1.5,
}

# ===========================================
# STYLE
# ===========================================
MIN_CONTRAST_RATIO = 4.5              # WCAG AA body text
DEFAULT_TEXT_COLOR = "#333333"
TOC_EMPHASIS_WEIGHT = 0.7             # outline weight at or above → bold entry
TOC_MIN_LAYOUT_WEIGHT = 0.5

# ===========================================
# VISUALS
# ===========================================
WATERMARK_TEXT = "AI-Generated Notes"
ICON_BASE_X = 20.0
ICON_BASE_Y = 600.0
ICON_STEP_Y = 80.0
ICON_SIZE = 16.0
ENHANCEMENT_WORKERS = 6

# ===========================================
# LOGGING
# ===========================================
LOG_LEVEL = 'INFO'
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_FILE = 'logs/notelayout.log'
LOG_MAX_SIZE_MB = 10
LOG_BACKUP_COUNT = 5
