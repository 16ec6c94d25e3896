#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Renderer Module

Provides document rendering for multiple output formats: one backend per
OutputFormat value.
"""

from typing import Dict, Type

from core.contracts import OutputFormat
from .base_renderer import (
    BaseRenderer,
    Footnote,
    RenderContext,
    RenderOutput,
    TextSegment,
    collect_footnotes,
    segment_text,
)
from .docx_renderer import DocxRenderer
from .html_renderer import HTMLRenderer
from .pdf_renderer import PDFRenderer

RENDERERS: Dict[OutputFormat, Type[BaseRenderer]] = {
    OutputFormat.PRINT_PAGINATED: PDFRenderer,
    OutputFormat.MARKUP: HTMLRenderer,
    OutputFormat.FLOW_DOCUMENT: DocxRenderer,
}

if set(RENDERERS) != set(OutputFormat):
    raise TypeError(f"output formats without a renderer: {sorted(f.value for f in set(OutputFormat) - set(RENDERERS))}")


def get_renderer(output_format: OutputFormat) -> BaseRenderer:
    """New renderer instance for a format (renderers hold no per-document state)"""
    return RENDERERS[output_format]()


__all__ = [
    "BaseRenderer",
    "Footnote",
    "RenderContext",
    "RenderOutput",
    "TextSegment",
    "collect_footnotes",
    "segment_text",
    "DocxRenderer",
    "HTMLRenderer",
    "PDFRenderer",
    "RENDERERS",
    "get_renderer",
]
