#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Layout and Render Options

LayoutConfig parameterises the layout engine; RenderOptions selects the
output backend and which optional content to include.

Version: 1.0.0
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional
from enum import Enum

from config.constants import (
    DEFAULT_BASE_FONT_SIZE,
    DEFAULT_BLOCK_GAP,
    DEFAULT_CARD_THRESHOLD,
    DEFAULT_LINE_HEIGHT,
    DEFAULT_MARGIN_BOTTOM,
    DEFAULT_MARGIN_SIDE,
    DEFAULT_MARGIN_TOP,
    DEFAULT_MAX_LINE_LENGTH,
    DEFAULT_SCALE_RATIO,
)
from .base import ConfigurationError


class OutputFormat(Enum):
    """Renderer capability selected per request"""
    PRINT_PAGINATED = "print-paginated"
    MARKUP = "markup"
    FLOW_DOCUMENT = "flow-document"

    @classmethod
    def parse(cls, value: Any) -> 'OutputFormat':
        """
        Accept the canonical names and the file-extension aliases.

        Raises:
            ValueError: if the name is neither
        """
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        alias = FORMAT_ALIASES.get(key)
        if alias is not None:
            return alias
        try:
            return cls(key)
        except ValueError:
            allowed = [f.value for f in cls] + sorted(FORMAT_ALIASES)
            raise ValueError(f"unknown format '{value}', expected one of {allowed}") from None

    @property
    def extension(self) -> str:
        return FORMAT_EXTENSIONS[self]

    @property
    def media_type(self) -> str:
        return FORMAT_MEDIA_TYPES[self]


FORMAT_ALIASES = {
    "pdf": OutputFormat.PRINT_PAGINATED,
    "print": OutputFormat.PRINT_PAGINATED,
    "html": OutputFormat.MARKUP,
    "docx": OutputFormat.FLOW_DOCUMENT,
}

FORMAT_EXTENSIONS = {
    OutputFormat.PRINT_PAGINATED: "pdf",
    OutputFormat.MARKUP: "html",
    OutputFormat.FLOW_DOCUMENT: "docx",
}

FORMAT_MEDIA_TYPES = {
    OutputFormat.PRINT_PAGINATED: "application/pdf",
    OutputFormat.MARKUP: "text/html; charset=utf-8",
    OutputFormat.FLOW_DOCUMENT: "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}

# camelCase wire name -> field name
_LAYOUT_KEYS = {
    "baseFontSize": "base_font_size",
    "scaleRatio": "scale_ratio",
    "lineHeight": "line_height",
    "maxLineLength": "max_line_length",
    "marginTop": "margin_top",
    "marginBottom": "margin_bottom",
    "marginSide": "margin_side",
    "blockGap": "block_gap",
    "cardThreshold": "card_threshold",
}

_RENDER_KEYS = {
    "includeAnnotations": "include_annotations",
    "includeTOC": "include_toc",
    "includeFootnotes": "include_footnotes",
    "pageNumbers": "page_numbers",
    "designStyle": "design_style",
    "colorScheme": "color_scheme",
}

_RENDER_TOGGLES = ("include_annotations", "include_toc", "include_footnotes", "page_numbers")


def _normalise_keys(data: Dict[str, Any], mapping: Dict[str, str]) -> Dict[str, Any]:
    return {mapping.get(k, k): v for k, v in data.items()}


@dataclass(frozen=True)
class LayoutConfig:
    """Typographic and pagination parameters, all in points except max_line_length"""
    base_font_size: float = DEFAULT_BASE_FONT_SIZE
    scale_ratio: float = DEFAULT_SCALE_RATIO
    line_height: float = DEFAULT_LINE_HEIGHT
    max_line_length: int = DEFAULT_MAX_LINE_LENGTH  # characters
    margin_top: float = DEFAULT_MARGIN_TOP
    margin_bottom: float = DEFAULT_MARGIN_BOTTOM
    margin_side: float = DEFAULT_MARGIN_SIDE
    block_gap: float = DEFAULT_BLOCK_GAP
    card_threshold: float = DEFAULT_CARD_THRESHOLD

    def check(self, page_height: Optional[float] = None, page_width: Optional[float] = None) -> List[str]:
        """Return every configuration problem (empty if valid)"""
        problems = []

        not_numbers = [
            name for name in self.__dataclass_fields__
            if isinstance(getattr(self, name), bool) or not isinstance(getattr(self, name), (int, float))
        ]
        if not_numbers:
            return [f"{name} must be a number, got {getattr(self, name)!r}" for name in not_numbers]

        for name in ("base_font_size", "line_height"):
            value = getattr(self, name)
            if not value > 0:
                problems.append(f"{name} must be > 0, got {value}")

        if isinstance(self.max_line_length, bool) or int(self.max_line_length) != self.max_line_length:
            problems.append(f"max_line_length must be an integer, got {self.max_line_length}")
        elif self.max_line_length <= 0:
            problems.append(f"max_line_length must be > 0, got {self.max_line_length}")

        if not self.scale_ratio > 1:
            problems.append(f"scale_ratio must be > 1, got {self.scale_ratio}")

        for name in ("margin_top", "margin_bottom", "margin_side", "block_gap"):
            value = getattr(self, name)
            if not value >= 0:
                problems.append(f"{name} must be >= 0, got {value}")

        if not 0 <= self.card_threshold <= 1:
            problems.append(f"card_threshold must be within [0, 1], got {self.card_threshold}")

        if page_height is not None and self.margin_top + self.margin_bottom >= page_height:
            problems.append(
                f"margins ({self.margin_top} + {self.margin_bottom}) leave no content height "
                f"on a {page_height}pt page"
            )
        if page_width is not None and 2 * self.margin_side >= page_width:
            problems.append(f"side margins ({self.margin_side} x 2) leave no content width")

        return problems

    def validate_or_raise(self, page_height: Optional[float] = None, page_width: Optional[float] = None) -> None:
        problems = self.check(page_height, page_width)
        if problems:
            raise ConfigurationError(problems)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'LayoutConfig':
        """Build from wire (camelCase) or snake_case keys; unknown keys are ignored"""
        if not data:
            return cls()
        values = _normalise_keys(data, _LAYOUT_KEYS)
        known = {k: v for k, v in values.items() if k in cls.__dataclass_fields__}
        return cls(**known)


@dataclass(frozen=True)
class RenderOptions:
    """Output selection and content toggles"""
    format: OutputFormat = OutputFormat.MARKUP
    template: Optional[str] = None
    include_annotations: bool = True
    include_toc: bool = True
    include_footnotes: bool = True
    page_numbers: bool = True
    design_style: str = "modern"
    color_scheme: str = "blue"

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["format"] = self.format.value
        return data

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'RenderOptions':
        """
        Raises:
            ConfigurationError: if the format is unknown or a toggle is not a boolean
        """
        if not data:
            return cls()
        values = _normalise_keys(data, _RENDER_KEYS)
        known = {k: v for k, v in values.items() if k in cls.__dataclass_fields__}

        problems = [
            f"{name} must be a boolean, got {known[name]!r}"
            for name in _RENDER_TOGGLES
            if name in known and not isinstance(known[name], bool)
        ]
        if problems:
            raise ConfigurationError(problems)

        if "format" in known:
            try:
                known["format"] = OutputFormat.parse(known["format"])
            except ValueError as e:
                raise ConfigurationError([str(e)]) from e
        return cls(**known)
