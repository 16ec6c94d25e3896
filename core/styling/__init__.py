"""
Style resolution: theme catalog and per-block style merging.
"""

from .themes import (
    ThemeDefaults,
    THEME_DEFAULTS,
    DEFAULT_PALETTE,
    get_theme,
    list_themes,
    card_background_for,
    resolve_theme_name,
)
from .resolver import (
    ResolvedStyle,
    StyleResolver,
    ensure_accessible_contrast,
    css_variables,
)

__all__ = [
    "ThemeDefaults",
    "THEME_DEFAULTS",
    "DEFAULT_PALETTE",
    "get_theme",
    "list_themes",
    "card_background_for",
    "resolve_theme_name",
    "ResolvedStyle",
    "StyleResolver",
    "ensure_accessible_contrast",
    "css_variables",
]
