#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Layout Core Module

Turns a validated document into paginated, decorated output.

Components:
- BlockFlowExecutor: Measure, place and paginate blocks
- build_toc: Table of contents from the outline or headings
- Renderers: PDF, HTML, DOCX
- LayoutAgent: Orchestrates the pipeline

Usage:
    from core.layout import render_document

    result = render_document(payload, {"cardThreshold": 0.7}, {"format": "pdf"})
    if result.ok:
        Path("notes.pdf").write_bytes(result.content)

Version: 1.0.0
"""

from .agent import LayoutAgent, PreparedDocument, RenderResult, render_document
from .executor.block_flow import BlockFlowExecutor, FlowState, LayoutPlan, PlacedBox, PlacementMode
from .metrics import BlockMetrics, chars_per_line, font_size_for, heading_font_size, measure_block
from .renderer import RENDERERS, DocxRenderer, HTMLRenderer, PDFRenderer, get_renderer
from .toc import TocEntry, build_toc, layout_weight, toc_to_text
from .wrapping import WrappedLine, WrappedText, WrappedWord, iter_lines, iter_wrapped_lines

__all__ = [
    "LayoutAgent",
    "PreparedDocument",
    "RenderResult",
    "render_document",
    "BlockFlowExecutor",
    "FlowState",
    "LayoutPlan",
    "PlacedBox",
    "PlacementMode",
    "BlockMetrics",
    "chars_per_line",
    "font_size_for",
    "heading_font_size",
    "measure_block",
    "RENDERERS",
    "DocxRenderer",
    "HTMLRenderer",
    "PDFRenderer",
    "get_renderer",
    "TocEntry",
    "build_toc",
    "layout_weight",
    "toc_to_text",
    "WrappedLine",
    "WrappedText",
    "WrappedWord",
    "iter_lines",
    "iter_wrapped_lines",
]

__version__ = "1.0.0"
