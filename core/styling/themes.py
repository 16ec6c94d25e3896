#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Theme Catalog

Each theme is a complete bundle of style defaults, so style resolution
never has an unset field to fall back from.

Usage:
    from core.styling.themes import get_theme, list_themes

    defaults = get_theme(Theme.ACADEMIC)
    catalog = list_themes()
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from core.contracts import Alignment, Spacing, PageSize, Theme


DEFAULT_PALETTE: Tuple[str, ...] = ("#0B2140", "#19E7FF", "#F6F8FA")


@dataclass(frozen=True)
class ThemeDefaults:
    """Lowest layer of style resolution"""
    theme: Theme
    display_name: str
    description: str
    palette: Tuple[str, ...]
    heading_font: str
    body_font: str
    spacing: Spacing
    page_size: PageSize
    align: Alignment
    heading_align: Alignment
    border: bool
    # None -> derived from the palette (see card_background_for)
    card_background: Optional[str]

    def to_dict(self) -> Dict:
        return {
            "id": self.theme.value,
            "name": self.display_name,
            "description": self.description,
            "palette": list(self.palette),
            "fontPair": {"heading": self.heading_font, "body": self.body_font},
            "spacing": self.spacing.value,
            "pageSize": self.page_size.value,
        }


THEME_DEFAULTS: Dict[Theme, ThemeDefaults] = {
    Theme.MODERN_CARD: ThemeDefaults(
        theme=Theme.MODERN_CARD,
        display_name="Modern Card",
        description="Clean, card-based layout with modern typography",
        palette=DEFAULT_PALETTE,
        heading_font="Inter",
        body_font="Roboto",
        spacing=Spacing.NORMAL,
        page_size=PageSize.A4,
        align=Alignment.LEFT,
        heading_align=Alignment.LEFT,
        border=False,
        card_background=None,
    ),
    Theme.CLASSIC_REPORT: ThemeDefaults(
        theme=Theme.CLASSIC_REPORT,
        display_name="Classic Report",
        description="Traditional academic report style",
        palette=("#1F2937", "#2563EB", "#FFFFFF"),
        heading_font="Georgia",
        body_font="Times New Roman",
        spacing=Spacing.NORMAL,
        page_size=PageSize.LETTER,
        align=Alignment.JUSTIFY,
        heading_align=Alignment.LEFT,
        border=False,
        card_background="#FFFFFF",
    ),
    Theme.COMPACT_NOTES: ThemeDefaults(
        theme=Theme.COMPACT_NOTES,
        display_name="Compact Notes",
        description="Dense, space-efficient layout for quick reference",
        palette=("#111827", "#10B981", "#FAFAFA"),
        heading_font="Inter",
        body_font="Inter",
        spacing=Spacing.COMPACT,
        page_size=PageSize.A4,
        align=Alignment.LEFT,
        heading_align=Alignment.LEFT,
        border=False,
        card_background="#FAFAFA",
    ),
    Theme.ACADEMIC: ThemeDefaults(
        theme=Theme.ACADEMIC,
        display_name="Academic",
        description="Formal academic paper formatting",
        palette=("#000000", "#1E3A8A", "#FFFFFF"),
        heading_font="Times New Roman",
        body_font="Times New Roman",
        spacing=Spacing.RELAXED,
        page_size=PageSize.A4,
        align=Alignment.JUSTIFY,
        heading_align=Alignment.CENTER,
        border=True,
        card_background="#FFFFFF",
    ),
    Theme.PRESENTATION: ThemeDefaults(
        theme=Theme.PRESENTATION,
        display_name="Presentation",
        description="Slide-like layout for presentations",
        palette=DEFAULT_PALETTE,
        heading_font="Inter",
        body_font="Roboto",
        spacing=Spacing.RELAXED,
        page_size=PageSize.A4,
        align=Alignment.CENTER,
        heading_align=Alignment.CENTER,
        border=False,
        card_background=None,
    ),
}

if set(THEME_DEFAULTS) != set(Theme):
    raise TypeError(f"themes without defaults: {sorted(t.value for t in set(Theme) - set(THEME_DEFAULTS))}")


def get_theme(theme: Theme) -> ThemeDefaults:
    return THEME_DEFAULTS[theme]


def card_background_for(theme: Theme, palette: Tuple[str, ...]) -> str:
    """Card fill: fixed per theme, or taken from the palette"""
    defaults = THEME_DEFAULTS[theme]
    if defaults.card_background is not None:
        return defaults.card_background
    if theme == Theme.PRESENTATION:
        return palette[0] if palette else "#0B2140"
    return palette[2] if len(palette) > 2 else "#F6F8FA"


def list_themes() -> List[Dict[str, str]]:
    """Catalog for the themes endpoint and CLI"""
    return [
        {"id": t.theme.value, "name": t.display_name, "description": t.description}
        for t in THEME_DEFAULTS.values()
    ]


def resolve_theme_name(name: Optional[str], fallback: Theme) -> Theme:
    """Map a template selector to a theme; unknown or empty selectors keep the fallback"""
    if not name:
        return fallback
    try:
        return Theme(name)
    except ValueError:
        return fallback
