#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Style Resolver

Merges three layers into one fully-resolved style per block:

    theme defaults  ->  document styles (palette, font pair, spacing, page size)
                    ->  block styleHints

Later layers win; unset fields inherit. Resolution is total and pure: no
clock reads, no randomness, no shared mutable state.

Version: 1.0.0
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional, Tuple
import logging

from config.constants import DEFAULT_TEXT_COLOR, MIN_CONTRAST_RATIO
from core.contracts import (
    Alignment,
    BlockType,
    DocumentStyles,
    Emphasis,
    PageSize,
    SizeBucket,
    Spacing,
    StyleHints,
    Theme,
    ValidatedDocument,
    contrast_ratio,
    is_color,
    parse_color,
)
from .themes import DEFAULT_PALETTE, card_background_for, get_theme

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedStyle:
    """Every style decision a renderer needs for one block"""
    theme: Theme
    font_family: str
    heading_font: str
    body_font: str
    palette: Tuple[str, ...]
    primary_color: str
    accent_color: str
    background_color: str
    text_color: str
    card_background: str
    card_text_color: str
    block_background: Optional[str]
    spacing: Spacing
    page_size: PageSize
    align: Alignment
    emphasis: Emphasis
    size: SizeBucket
    border: bool

    @property
    def bold(self) -> bool:
        return self.emphasis == Emphasis.BOLD

    @property
    def italic(self) -> bool:
        return self.emphasis == Emphasis.ITALIC

    @property
    def underline(self) -> bool:
        return self.emphasis == Emphasis.UNDERLINE

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        for key, value in data.items():
            if hasattr(value, "value"):
                data[key] = value.value
        data["palette"] = list(self.palette)
        return data


def ensure_accessible_contrast(foreground: str, background: str) -> str:
    """
    Keep the foreground if it reaches the minimum contrast ratio against
    the background, otherwise switch to black or white.
    """
    fg = parse_color(foreground)
    bg = parse_color(background)
    if contrast_ratio(fg, bg) >= MIN_CONTRAST_RATIO:
        return foreground
    return "#000000" if bg.luminance() > 0.5 else "#FFFFFF"


def _palette_entry(palette: Tuple[str, ...], index: int) -> str:
    if index < len(palette):
        return palette[index]
    return DEFAULT_PALETTE[index]


def _usable_palette(palette: Tuple[str, ...], fallback: Tuple[str, ...]) -> Tuple[str, ...]:
    """Replace entries that are not colors with the fallback entry at the same index"""
    usable = []
    for index, color in enumerate(palette):
        if is_color(color):
            usable.append(color)
        elif index < len(fallback):
            usable.append(fallback[index])
        elif index < len(DEFAULT_PALETTE):
            usable.append(DEFAULT_PALETTE[index])
    return tuple(usable) or tuple(fallback)


class StyleResolver:
    """
    Resolves document and block styles.

    Usage:
        resolver = StyleResolver()
        style = resolver.resolve(document.styles, block.style_hints, block.type)
        styles = resolver.resolve_all(validated)   # {block_id: ResolvedStyle}
    """

    def resolve(
        self,
        styles: DocumentStyles,
        hints: Optional[StyleHints] = None,
        block_type: Optional[BlockType] = None,
    ) -> ResolvedStyle:
        theme = get_theme(styles.theme)

        # Layer 2: document declarations over theme defaults
        palette = _usable_palette(styles.palette, theme.palette) if styles.palette else theme.palette
        heading_font = theme.heading_font
        body_font = theme.body_font
        if styles.font_pair is not None:
            heading_font = styles.font_pair.heading or heading_font
            body_font = styles.font_pair.body or body_font
        spacing = styles.spacing or theme.spacing
        page_size = styles.page_size or theme.page_size

        is_heading = block_type == BlockType.HEADING
        align = theme.heading_align if is_heading else theme.align
        emphasis = Emphasis.BOLD if is_heading else Emphasis.NORMAL
        size = SizeBucket.NORMAL
        border = theme.border
        block_background = None

        # Layer 3: block hints
        if hints is not None:
            align = hints.align or align
            emphasis = hints.emphasis or emphasis
            size = hints.size or size
            if hints.border is not None:
                border = hints.border
            if hints.background is not None:
                if is_color(hints.background):
                    block_background = hints.background
                else:
                    logger.warning(f"Ignoring block background {hints.background!r}: not a color")

        background_color = _palette_entry(palette, 2)
        card_background = card_background_for(styles.theme, palette)

        return ResolvedStyle(
            theme=styles.theme,
            font_family=heading_font if is_heading else body_font,
            heading_font=heading_font,
            body_font=body_font,
            palette=tuple(palette),
            primary_color=_palette_entry(palette, 0),
            accent_color=_palette_entry(palette, 1),
            background_color=background_color,
            text_color=ensure_accessible_contrast(DEFAULT_TEXT_COLOR, block_background or background_color),
            card_background=card_background,
            card_text_color=ensure_accessible_contrast(DEFAULT_TEXT_COLOR, block_background or card_background),
            block_background=block_background,
            spacing=spacing,
            page_size=page_size,
            align=align,
            emphasis=emphasis,
            size=size,
            border=border,
        )

    def resolve_document(self, styles: DocumentStyles) -> ResolvedStyle:
        """Document-level style, i.e. a block with no hints"""
        return self.resolve(styles)

    def resolve_all(self, validated: ValidatedDocument) -> Dict[str, ResolvedStyle]:
        """Resolve every block of a validated document, keyed by block id"""
        styles = validated.styles
        resolved = {
            block.id: self.resolve(styles, block.style_hints, block.type)
            for block in validated.blocks
        }
        logger.info(f"Resolved styles for {len(resolved)} blocks (theme {styles.theme.value})")
        return resolved


def css_variables(style: ResolvedStyle, base_font_size: float, line_height: float) -> Dict[str, str]:
    """CSS custom properties for the markup backend"""
    return {
        "--primary-color": style.primary_color,
        "--accent-color": style.accent_color,
        "--background-color": style.background_color,
        "--text-color": style.text_color,
        "--card-background": style.card_background,
        "--card-text-color": style.card_text_color,
        "--heading-font": style.heading_font,
        "--body-font": style.body_font,
        "--base-font-size": f"{base_font_size:g}px",
        "--line-height": f"{line_height:g}",
        "--border-radius": "8px",
        "--shadow": "0 2px 8px rgba(0, 0, 0, 0.1)",
    }
