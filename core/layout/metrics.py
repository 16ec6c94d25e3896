#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Block Metrics

Font sizes, line widths and per-type height estimators used by the block
flow executor. Everything here is a pure function of the block, its
resolved style and the layout configuration, except the image size
lookup which is memoised in a shared thread-safe cache.

Version: 1.0.0
"""

from dataclasses import dataclass
from typing import Optional, Tuple
import base64
import binascii
import hashlib
import io
import logging

from PIL import Image, UnidentifiedImageError

from config.constants import (
    AVG_CHAR_WIDTH_RATIO,
    CODE_CHAR_WIDTH_RATIO,
    DEFAULT_IMAGE_ASPECT,
    MAX_HEADING_LEVEL,
    SEPARATOR_HEIGHT_RATIO,
    SIZE_SCALES,
)
from config.settings import settings
from core.cache import CacheStats, LRUCache
from core.contracts import (
    Block,
    CodeBlock,
    HeadingBlock,
    ImageBlock,
    LayoutConfig,
    ListBlock,
    TableBlock,
    TextBlock,
)
from core.styling import ResolvedStyle
from .wrapping import WrappedText

logger = logging.getLogger(__name__)

# Shared across renders; keys are content digests so entries never go stale
_image_size_cache = LRUCache(max_size=settings.image_cache_size)

LIST_MARKER_WIDTH = 3  # characters reserved for "1. " / "•  "


@dataclass(frozen=True)
class BlockMetrics:
    """Measured content of one block, before placement"""
    font_size: float
    line_height: float  # points per line
    content_height: float
    lines: Tuple[WrappedText, ...] = ()
    line_count: int = 0
    image_size: Optional[Tuple[int, int]] = None


def heading_font_size(level: int, config: LayoutConfig) -> float:
    """base * ratio^(6 - level); level 1 is the largest"""
    level = max(1, min(MAX_HEADING_LEVEL, level))
    return config.base_font_size * config.scale_ratio ** (MAX_HEADING_LEVEL - level)


def font_size_for(block: Block, style: ResolvedStyle, config: LayoutConfig) -> float:
    if isinstance(block, HeadingBlock):
        size = heading_font_size(block.level, config)
    else:
        size = config.base_font_size
    return size * SIZE_SCALES[style.size.value]


def chars_per_line(block: Block, font_size: float, column_width: float, config: LayoutConfig) -> int:
    """Line width in characters: maxLineLength, narrowed when the column cannot hold it"""
    ratio = CODE_CHAR_WIDTH_RATIO if isinstance(block, CodeBlock) else AVG_CHAR_WIDTH_RATIO
    fitting = int(column_width // (font_size * ratio))
    return max(1, min(config.max_line_length, fitting))


def image_size(data: str) -> Optional[Tuple[int, int]]:
    """
    Intrinsic (width, height) of a base64-encoded image, or None if the
    payload cannot be decoded.
    """
    digest = hashlib.sha256(data.encode("ascii", "ignore")).hexdigest()

    def measure() -> Optional[Tuple[int, int]]:
        try:
            raw = base64.b64decode(data, validate=False)
            with Image.open(io.BytesIO(raw)) as img:
                return img.size
        except (binascii.Error, UnidentifiedImageError, OSError, ValueError) as e:
            logger.debug(f"Could not read image dimensions: {e}")
            return None

    return _image_size_cache.get_or_compute(digest, measure)


def image_cache_stats() -> CacheStats:
    return _image_size_cache.stats()


def measure_block(
    block: Block,
    style: ResolvedStyle,
    config: LayoutConfig,
    column_width: float,
) -> BlockMetrics:
    """
    Height estimate for a block's content (card padding excluded).

    - text: wrapped lines x line height
    - list: wrapped lines of every item x line height (one line per item minimum)
    - table: (rows + header row) x line height
    - image: column width x intrinsic aspect ratio, plus a caption line
    - separator: half a line
    """
    font_size = font_size_for(block, style, config)
    line_height = font_size * config.line_height

    if isinstance(block, TextBlock):
        width = chars_per_line(block, font_size, column_width, config)
        wrapped = WrappedText(block.text, width, preserve_indent=isinstance(block, CodeBlock))
        count = max(1, wrapped.line_count())
        return BlockMetrics(font_size, line_height, count * line_height, (wrapped,), count)

    if isinstance(block, ListBlock):
        width = max(1, chars_per_line(block, font_size, column_width, config) - LIST_MARKER_WIDTH)
        items = tuple(WrappedText(item, width) for item in block.items)
        count = sum(max(1, item.line_count()) for item in items)
        return BlockMetrics(font_size, line_height, max(1, count) * line_height, items, count)

    if isinstance(block, TableBlock):
        rows = len(block.rows) + (1 if block.headers else 0)
        rows = max(1, rows)
        return BlockMetrics(font_size, line_height, rows * line_height, (), rows)

    if isinstance(block, ImageBlock):
        size = image_size(block.data) if block.data else None
        aspect = size[1] / size[0] if size and size[0] > 0 else DEFAULT_IMAGE_ASPECT
        height = column_width * aspect
        lines: Tuple[WrappedText, ...] = ()
        count = 0
        if block.caption:
            caption = WrappedText(block.caption, chars_per_line(block, font_size, column_width, config))
            count = max(1, caption.line_count())
            lines = (caption,)
            height += count * line_height
        return BlockMetrics(font_size, line_height, height, lines, count, size)

    # Separator
    return BlockMetrics(font_size, line_height, SEPARATOR_HEIGHT_RATIO * line_height)
