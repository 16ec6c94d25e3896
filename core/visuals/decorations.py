#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Decorative Elements

Table-driven rules keyed by design style. A style with no entry in a
table gets an empty set for that category.
"""

from typing import Dict, Tuple

from config.settings import settings
from core.contracts import Color
from .elements import (
    Border,
    GradientBackground,
    GradientDirection,
    GradientType,
    Shadow,
    Texture,
    Watermark,
)
from .palettes import ramp_for


GRADIENT_STYLES = frozenset({"modern", "colorful"})
GRADIENT_OPACITY = 0.1

BORDER_RULES: Dict[str, Tuple[Border, ...]] = {
    "academic": (Border(type="classic", width=2, pattern="solid", corners="rounded"),),
    "modern": (Border(type="minimal", width=1, pattern="gradient", corners="sharp"),),
}

_DROP_SHADOW = Shadow(offset_x=3, offset_y=3, blur=5, opacity=0.2, color=Color.rgb(0, 0, 0))

SHADOW_RULES: Dict[str, Tuple[Shadow, ...]] = {
    "modern": (_DROP_SHADOW,),
    "colorful": (_DROP_SHADOW,),
}

TEXTURE_RULES: Dict[str, Tuple[Texture, ...]] = {
    "colorful": (Texture(type="subtle-dots", opacity=0.05, size=2, spacing=20),),
}


def _key(design_style: str) -> str:
    return (design_style or "").strip().lower()


def generate_gradients(design_style: str, color_scheme: str) -> Tuple[GradientBackground, ...]:
    if _key(design_style) not in GRADIENT_STYLES:
        return ()
    ramp = ramp_for(color_scheme)
    return (GradientBackground(
        type=GradientType.LINEAR,
        colors=ramp.stops,
        direction=GradientDirection.DIAGONAL,
        opacity=GRADIENT_OPACITY,
    ),)


def generate_watermarks() -> Tuple[Watermark, ...]:
    """Always present, whatever the style"""
    return (Watermark(
        text=settings.watermark_text,
        opacity=0.05,
        rotation=-45,
        font_size=72,
        color=Color.rgb(0.5, 0.5, 0.5),
    ),)


def generate_borders(design_style: str) -> Tuple[Border, ...]:
    return BORDER_RULES.get(_key(design_style), ())


def generate_shadows(design_style: str) -> Tuple[Shadow, ...]:
    return SHADOW_RULES.get(_key(design_style), ())


def generate_textures(design_style: str) -> Tuple[Texture, ...]:
    return TEXTURE_RULES.get(_key(design_style), ())
