#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Visual Element Descriptors

Derived, ephemeral decoration descriptors. They are recomputed for every
render and reference blocks by id only.

Version: 1.0.0
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple
from enum import Enum

from core.contracts import Color


class IconType(Enum):
    CONCEPT = "concept"
    SUMMARY = "summary"
    APPLICATION = "application"
    PROCESS = "process"


class GradientType(Enum):
    LINEAR = "linear"
    RADIAL = "radial"
    PATTERN = "pattern"


class GradientDirection(Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    DIAGONAL = "diagonal"


@dataclass(frozen=True)
class IconElement:
    """Contextual symbol; ``target_id`` names the outline entry or block it marks"""
    type: IconType
    symbol: str
    label: str  # fallback letter for backends without emoji glyphs
    color: Color
    size: float
    x: float
    y: float
    target_id: Optional[str] = None

    def to_dict(self) -> Dict:
        return {
            "type": self.type.value,
            "symbol": self.symbol,
            "label": self.label,
            "color": self.color.to_dict(),
            "size": self.size,
            "position": {"x": self.x, "y": self.y},
            "targetId": self.target_id,
        }


@dataclass(frozen=True)
class GradientBackground:
    type: GradientType
    colors: Tuple[Color, ...]
    direction: GradientDirection
    opacity: float

    def to_dict(self) -> Dict:
        return {
            "type": self.type.value,
            "colors": [c.to_dict() for c in self.colors],
            "direction": self.direction.value,
            "opacity": self.opacity,
        }


@dataclass(frozen=True)
class Watermark:
    text: str
    opacity: float
    rotation: float  # degrees
    font_size: float
    color: Color

    def to_dict(self) -> Dict:
        return {
            "text": self.text,
            "opacity": self.opacity,
            "rotation": self.rotation,
            "fontSize": self.font_size,
            "color": self.color.to_dict(),
        }


@dataclass(frozen=True)
class Border:
    type: str      # classic | minimal
    width: float
    pattern: str   # solid | gradient
    corners: str   # rounded | sharp

    def to_dict(self) -> Dict:
        return {"type": self.type, "width": self.width, "pattern": self.pattern, "corners": self.corners}


@dataclass(frozen=True)
class Shadow:
    offset_x: float
    offset_y: float
    blur: float
    opacity: float
    color: Color

    def to_dict(self) -> Dict:
        return {
            "offset": {"x": self.offset_x, "y": self.offset_y},
            "blur": self.blur,
            "opacity": self.opacity,
            "color": self.color.to_dict(),
        }


@dataclass(frozen=True)
class Texture:
    type: str
    opacity: float
    size: float
    spacing: float

    def to_dict(self) -> Dict:
        return {"type": self.type, "opacity": self.opacity, "size": self.size, "spacing": self.spacing}


@dataclass(frozen=True)
class AdvancedVisualElements:
    """The enhancement set of one document"""
    icons: Tuple[IconElement, ...] = ()
    gradients: Tuple[GradientBackground, ...] = ()
    watermarks: Tuple[Watermark, ...] = ()
    borders: Tuple[Border, ...] = ()
    shadows: Tuple[Shadow, ...] = ()
    textures: Tuple[Texture, ...] = ()

    def icon_for(self, target_id: str) -> Optional[IconElement]:
        for icon in self.icons:
            if icon.target_id == target_id:
                return icon
        return None

    def to_dict(self) -> Dict:
        return {
            "icons": [i.to_dict() for i in self.icons],
            "gradients": [g.to_dict() for g in self.gradients],
            "watermarks": [w.to_dict() for w in self.watermarks],
            "borders": [b.to_dict() for b in self.borders],
            "shadows": [s.to_dict() for s in self.shadows],
            "textures": [t.to_dict() for t in self.textures],
        }
