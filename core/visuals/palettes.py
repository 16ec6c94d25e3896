#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Color Ramps

Closed table of 3-stop gradient ramps keyed by color scheme name.
Checked once at import; unknown schemes resolve to FALLBACK_SCHEME.
"""

from dataclasses import dataclass
from typing import Dict, Tuple

from core.contracts import Color


FALLBACK_SCHEME = "blue"


@dataclass(frozen=True)
class ColorRamp:
    name: str
    stops: Tuple[Color, Color, Color]


def _ramp(name: str, *stops: Tuple[float, float, float]) -> ColorRamp:
    return ColorRamp(name, tuple(Color.rgb(*s) for s in stops))


COLOR_RAMPS: Dict[str, ColorRamp] = {
    "blue": _ramp("blue", (0.9, 0.95, 1.0), (0.7, 0.85, 0.98), (0.5, 0.7, 0.95)),
    "green": _ramp("green", (0.9, 1.0, 0.95), (0.7, 0.95, 0.8), (0.5, 0.9, 0.7)),
    "purple": _ramp("purple", (0.95, 0.9, 1.0), (0.85, 0.7, 0.98), (0.75, 0.5, 0.95)),
    "orange": _ramp("orange", (1.0, 0.95, 0.9), (0.98, 0.85, 0.7), (0.95, 0.75, 0.5)),
}


def _check_ramps() -> None:
    if FALLBACK_SCHEME not in COLOR_RAMPS:
        raise RuntimeError(f"fallback color scheme '{FALLBACK_SCHEME}' is not defined")
    for name, ramp in COLOR_RAMPS.items():
        if ramp.name != name or len(ramp.stops) != 3:
            raise RuntimeError(f"color ramp '{name}' is malformed")


_check_ramps()


def ramp_for(scheme: str) -> ColorRamp:
    """Ramp of a color scheme, or the fallback ramp for unknown names"""
    return COLOR_RAMPS.get((scheme or "").strip().lower(), COLOR_RAMPS[FALLBACK_SCHEME])
