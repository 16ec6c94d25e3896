#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Color Values

RGB colors as used across palettes, style hints, annotations and visual
elements. Components are floats in [0, 1].
"""

from dataclasses import dataclass
from typing import Dict


# CSS level 1 basic colors
BASIC_COLORS: Dict[str, str] = {
    "black": "#000000",
    "silver": "#c0c0c0",
    "gray": "#808080",
    "grey": "#808080",
    "white": "#ffffff",
    "maroon": "#800000",
    "red": "#ff0000",
    "purple": "#800080",
    "fuchsia": "#ff00ff",
    "green": "#008000",
    "lime": "#00ff00",
    "olive": "#808000",
    "yellow": "#ffff00",
    "navy": "#000080",
    "blue": "#0000ff",
    "teal": "#008080",
    "aqua": "#00ffff",
    "orange": "#ffa500",
}


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


@dataclass(frozen=True)
class Color:
    r: float
    g: float
    b: float

    @classmethod
    def rgb(cls, r: float, g: float, b: float) -> 'Color':
        """Build a color, clamping each component into [0, 1]"""
        return cls(round(_clamp(r), 4), round(_clamp(g), 4), round(_clamp(b), 4))

    @property
    def hex(self) -> str:
        return "#{:02x}{:02x}{:02x}".format(
            round(self.r * 255), round(self.g * 255), round(self.b * 255)
        )

    def css_rgba(self, opacity: float = 1.0) -> str:
        return "rgba({}, {}, {}, {})".format(
            round(self.r * 255), round(self.g * 255), round(self.b * 255), opacity
        )

    def luminance(self) -> float:
        """WCAG relative luminance"""
        def channel(c: float) -> float:
            return c / 12.92 if c <= 0.03928 else ((c + 0.055) / 1.055) ** 2.4

        return 0.2126 * channel(self.r) + 0.7152 * channel(self.g) + 0.0722 * channel(self.b)

    def to_dict(self) -> Dict[str, float]:
        return {"r": self.r, "g": self.g, "b": self.b}


def parse_color(value: str) -> Color:
    """
    Parse ``#rgb``, ``#rrggbb`` or a basic CSS color name.

    Raises:
        ValueError: if the value is not a recognised color
    """
    text = value.strip().lower()
    text = BASIC_COLORS.get(text, text)
    if not text.startswith("#"):
        raise ValueError(f"not a color: {value!r}")
    digits = text[1:]
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    if len(digits) != 6:
        raise ValueError(f"not a color: {value!r}")
    try:
        r, g, b = (int(digits[i:i + 2], 16) for i in (0, 2, 4))
    except ValueError:
        raise ValueError(f"not a color: {value!r}") from None
    return Color(r / 255, g / 255, b / 255)


def is_color(value: str) -> bool:
    if not isinstance(value, str):
        return False
    try:
        parse_color(value)
    except ValueError:
        return False
    return True


def contrast_ratio(a: Color, b: Color) -> float:
    lighter = max(a.luminance(), b.luminance())
    darker = min(a.luminance(), b.luminance())
    return (lighter + 0.05) / (darker + 0.05)
