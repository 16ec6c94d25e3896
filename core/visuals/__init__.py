"""
Visual enhancement generation: icons, gradients and decorative elements.
"""

from .elements import (
    AdvancedVisualElements,
    Border,
    GradientBackground,
    GradientDirection,
    GradientType,
    IconElement,
    IconType,
    Shadow,
    Texture,
    Watermark,
)
from .palettes import COLOR_RAMPS, FALLBACK_SCHEME, ColorRamp, ramp_for
from .icons import ICON_RULES, DEFAULT_RULE, match_icon, icon_color, generate_icons
from .decorations import (
    generate_borders,
    generate_gradients,
    generate_shadows,
    generate_textures,
    generate_watermarks,
)
from .generator import VisualEnhancer, enhance

__all__ = [
    "AdvancedVisualElements",
    "Border",
    "GradientBackground",
    "GradientDirection",
    "GradientType",
    "IconElement",
    "IconType",
    "Shadow",
    "Texture",
    "Watermark",
    "COLOR_RAMPS",
    "FALLBACK_SCHEME",
    "ColorRamp",
    "ramp_for",
    "ICON_RULES",
    "DEFAULT_RULE",
    "match_icon",
    "icon_color",
    "generate_icons",
    "generate_borders",
    "generate_gradients",
    "generate_shadows",
    "generate_textures",
    "generate_watermarks",
    "VisualEnhancer",
    "enhance",
]
