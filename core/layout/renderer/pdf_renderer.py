#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
PDF Renderer

Renders a laid-out document to PDF (print-paginated backend) with the
ReportLab canvas. Every block is drawn at the position the layout plan
gave it; the renderer never re-flows text.

Page order:
- Table of contents page(s), when enabled
- One page per layout page
- Notes page(s) collecting the footnotes, when enabled

Fonts: a family is taken from FONT_DIR/<Family>.ttf when present,
otherwise mapped to the closest built-in PDF font (with a warning).

Version: 1.0.0
"""

from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple
import base64
import binascii
import io
import logging
import math
import threading

from reportlab.lib.colors import Color as PDFColor
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFError, TTFont
from reportlab.pdfgen import canvas

from config.settings import settings
from core.contracts import (
    Alignment,
    AnnotationType,
    Block,
    BlockType,
    CodeBlock,
    Color,
    ImageBlock,
    ListBlock,
    OutputFormat,
    TableBlock,
    TextBlock,
    parse_color,
)
from core.styling import ResolvedStyle
from core.visuals import GradientBackground, GradientDirection, IconElement, Texture, Watermark
from ..executor.block_flow import PlacedBox
from ..metrics import LIST_MARKER_WIDTH
from ..wrapping import WrappedLine, WrappedText
from .base_renderer import DEFAULT_HIGHLIGHT_COLOR, BaseRenderer, RenderContext

logger = logging.getLogger(__name__)

# (regular, bold, italic, bold-italic)
BUILTIN_FONTS: Dict[str, Tuple[str, str, str, str]] = {
    "sans": ("Helvetica", "Helvetica-Bold", "Helvetica-Oblique", "Helvetica-BoldOblique"),
    "serif": ("Times-Roman", "Times-Bold", "Times-Italic", "Times-BoldItalic"),
    "mono": ("Courier", "Courier-Bold", "Courier-Oblique", "Courier-BoldOblique"),
}
SERIF_HINTS = ("times", "georgia", "garamond", "serif", "cambria", "palatino")
MONO_HINTS = ("mono", "courier", "consolas", "menlo", "code")

LINK_COLOR = "#0563C1"
SHADOW_OFFSET = 3
CARD_RADIUS = 6
GRADIENT_STEPS = 24
CHROME_FONT = "Helvetica"
CHROME_FONT_SIZE = 8

# Characters the built-in fonts can draw
BUILTIN_ENCODING = "cp1252"


class FontRegistry:
    """
    Maps font families to registered PDF font names.

    TrueType registration is process-wide in ReportLab, so it is guarded
    by a class-level lock and remembered across renders.
    """

    _lock = threading.Lock()
    _registered: Dict[Tuple[str, str], Optional[str]] = {}

    def __init__(self, font_dir: Optional[Path] = None):
        self.font_dir = Path(font_dir) if font_dir else None

    @staticmethod
    def generic_family(family: str) -> str:
        name = family.lower()
        if any(hint in name for hint in MONO_HINTS):
            return "mono"
        if any(hint in name for hint in SERIF_HINTS):
            return "serif"
        return "sans"

    def _register_ttf(self, family: str, ctx: RenderContext) -> Optional[str]:
        if self.font_dir is None:
            return None
        with self._lock:
            key = (str(self.font_dir), family)
            if key in self._registered:
                return self._registered[key]
            font_name = None
            for candidate in (family, family.replace(" ", "")):
                path = self.font_dir / f"{candidate}.ttf"
                if not path.exists():
                    continue
                try:
                    pdfmetrics.registerFont(TTFont(family, str(path)))
                    font_name = family
                    logger.info(f"Registered font {family} from {path}")
                except TTFError as e:
                    ctx.warn(f"font file {path.name} could not be loaded ({e})")
                break
            self._registered[key] = font_name
            return font_name

    def resolve(self, family: str, ctx: RenderContext, bold: bool = False, italic: bool = False) -> str:
        ttf = self._register_ttf(family, ctx)
        if ttf:
            return ttf
        generic = self.generic_family(family)
        variants = BUILTIN_FONTS[generic]
        if family not in variants:
            ctx.warn(f"font '{family}' is not available, using {variants[0]}")
        return variants[int(bold) + 2 * int(italic)]

    @staticmethod
    def is_builtin(font_name: str) -> bool:
        return any(font_name in variants for variants in BUILTIN_FONTS.values())


def pdf_color(value, alpha: float = 1.0) -> PDFColor:
    """ReportLab color from a Color or a color string"""
    color = value if isinstance(value, Color) else parse_color(value)
    return PDFColor(color.r, color.g, color.b, alpha=alpha)


def _interpolate(colors: Tuple[Color, ...], t: float) -> Color:
    if len(colors) == 1:
        return colors[0]
    position = t * (len(colors) - 1)
    index = min(int(position), len(colors) - 2)
    local = position - index
    a, b = colors[index], colors[index + 1]
    return Color.rgb(a.r + (b.r - a.r) * local, a.g + (b.g - a.g) * local, a.b + (b.b - a.b) * local)


class PDFRenderer(BaseRenderer):
    """
    Renders to PDF (print-paginated format).

    Features:
    - Page headers and footers ("n / total")
    - Cards with fill, border and shadow
    - Inline annotations: highlight, underline, strikethrough, links, note markers
    - Gradient, texture and watermark page decorations

    Usage:
        renderer = PDFRenderer()
        output = renderer.render(validated, styles, doc_style, plan, visuals, options, config, toc)
        Path("notes.pdf").write_bytes(output.content)
    """

    format = OutputFormat.PRINT_PAGINATED

    def __init__(self, font_dir: Optional[Path] = None):
        super().__init__()
        self.fonts = FontRegistry(font_dir or settings.font_dir)

    def block_handlers(self) -> Dict[BlockType, Callable]:
        return {
            BlockType.HEADING: self._draw_text,
            BlockType.PARAGRAPH: self._draw_text,
            BlockType.LIST: self._draw_list,
            BlockType.QUOTE: self._draw_quote,
            BlockType.IMAGE: self._draw_image,
            BlockType.TABLE: self._draw_table,
            BlockType.CODE: self._draw_code,
            BlockType.SEPARATOR: self._draw_separator,
        }

    def _render(self, ctx: RenderContext) -> bytes:
        plan = ctx.plan
        meta = ctx.validated.meta
        buffer = io.BytesIO()
        c = canvas.Canvas(buffer, pagesize=(plan.page_width, plan.page_height), invariant=1)
        c.setTitle(meta.title)
        if meta.author:
            c.setAuthor(meta.author)
        if meta.tags:
            c.setKeywords(", ".join(meta.tags))
        c.setCreator("note-layout-engine")

        toc_pages = self._chunk_lines(ctx, self._toc_lines(ctx)) if ctx.toc_enabled() else []
        note_pages = self._chunk_lines(ctx, self._note_lines(ctx)) if ctx.footnotes_enabled() else []
        total = len(toc_pages) + plan.page_count + len(note_pages)
        page_number = 0

        for index, lines in enumerate(toc_pages):
            page_number += 1
            self._begin_page(c, ctx)
            self._draw_listing(c, ctx, "Table of Contents" if index == 0 else None, lines)
            self._end_page(c, ctx, page_number, total)

        blocks = {block.id: block for block in ctx.validated.blocks}
        for page_index in range(plan.page_count):
            page_number += 1
            self._begin_page(c, ctx)
            for box in plan.boxes_on_page(page_index):
                block = blocks[box.block_id]
                ctx.current_block = block.id
                self._draw_block(c, ctx, block, box)
            ctx.current_block = None
            self._end_page(c, ctx, page_number, total)

        for index, lines in enumerate(note_pages):
            page_number += 1
            self._begin_page(c, ctx)
            self._draw_listing(c, ctx, "Notes" if index == 0 else None, lines)
            self._end_page(c, ctx, page_number, total)

        c.save()
        return buffer.getvalue()

    # ------------------------------------------------------------------
    # Page furniture
    # ------------------------------------------------------------------

    def _begin_page(self, c: canvas.Canvas, ctx: RenderContext) -> None:
        for gradient in ctx.visuals.gradients:
            self._draw_gradient(c, ctx, gradient)
        for texture in ctx.visuals.textures:
            self._draw_texture(c, ctx, texture)

    def _end_page(self, c: canvas.Canvas, ctx: RenderContext, page_number: int, total: int) -> None:
        plan = ctx.plan
        for watermark in ctx.visuals.watermarks:
            self._draw_watermark(c, ctx, watermark)

        c.saveState()
        c.setFont(CHROME_FONT, CHROME_FONT_SIZE)
        c.setFillColor(PDFColor(0.5, 0.5, 0.5))
        title = self._drawable(ctx, ctx.validated.meta.title, CHROME_FONT)
        c.drawCentredString(plan.page_width / 2, plan.page_height - plan.margin_top / 2, title)
        if ctx.options.page_numbers:
            c.drawCentredString(plan.page_width / 2, plan.margin_bottom / 2, f"{page_number} / {total}")
        c.restoreState()
        c.showPage()

    def _draw_gradient(self, c: canvas.Canvas, ctx: RenderContext, gradient: GradientBackground) -> None:
        """Stepped bands approximating a linear gradient"""
        width, height = ctx.plan.page_width, ctx.plan.page_height
        c.saveState()
        if gradient.direction == GradientDirection.DIAGONAL:
            span = math.hypot(width, height)
            c.translate(width / 2, height / 2)
            c.rotate(-45)
            origin_x, origin_y, length, thickness = -span / 2, -span / 2, span, span
        elif gradient.direction == GradientDirection.VERTICAL:
            # top to bottom: rotate so bands advance downwards
            c.translate(0, height)
            c.rotate(-90)
            origin_x, origin_y, length, thickness = 0, 0, height, width
        else:
            origin_x, origin_y, length, thickness = 0, 0, width, height

        band = length / GRADIENT_STEPS
        for step in range(GRADIENT_STEPS):
            t = step / (GRADIENT_STEPS - 1)
            c.setFillColor(pdf_color(_interpolate(gradient.colors, t), alpha=gradient.opacity))
            c.rect(origin_x + step * band, origin_y, band + 0.5, thickness, stroke=0, fill=1)
        c.restoreState()

    def _draw_texture(self, c: canvas.Canvas, ctx: RenderContext, texture: Texture) -> None:
        if texture.spacing <= 0:
            return
        c.saveState()
        c.setFillColor(PDFColor(0, 0, 0, alpha=texture.opacity))
        radius = texture.size / 2
        y = texture.spacing / 2
        while y < ctx.plan.page_height:
            x = texture.spacing / 2
            while x < ctx.plan.page_width:
                c.circle(x, y, radius, stroke=0, fill=1)
                x += texture.spacing
            y += texture.spacing
        c.restoreState()

    def _draw_watermark(self, c: canvas.Canvas, ctx: RenderContext, watermark: Watermark) -> None:
        c.saveState()
        c.setFillColor(pdf_color(watermark.color, alpha=watermark.opacity))
        c.setFont(CHROME_FONT, watermark.font_size)
        c.translate(ctx.plan.page_width / 2, ctx.plan.page_height / 2)
        c.rotate(watermark.rotation)
        c.drawCentredString(0, 0, self._drawable(ctx, watermark.text, CHROME_FONT))
        c.restoreState()

    # ------------------------------------------------------------------
    # TOC and notes listings
    # ------------------------------------------------------------------

    def _toc_lines(self, ctx: RenderContext) -> List[Tuple[str, int, bool, str]]:
        offset = len(self._chunk_lines(ctx, ctx.toc))
        lines = []
        for entry in ctx.toc:
            page = str(entry.page_number + offset) if entry.page_number else ""
            lines.append((entry.title, entry.level, entry.emphasized, page))
        return lines

    def _note_lines(self, ctx: RenderContext) -> List[Tuple[str, int, bool, str]]:
        lines = []
        width = max(1, int(ctx.plan.content_width // (ctx.config.base_font_size * 0.5)) - 4)
        for note in ctx.footnotes:
            for i, text in enumerate(WrappedText(note.text, width)):
                prefix = f"{note.number}. " if i == 0 else "    "
                lines.append((prefix + text, 1, False, ""))
        return lines

    def _lines_per_page(self, ctx: RenderContext) -> int:
        plan = ctx.plan
        available = plan.page_height - plan.margin_top - plan.margin_bottom
        return max(1, int(available // (ctx.config.base_font_size * ctx.config.line_height)))

    def _chunk_lines(self, ctx: RenderContext, lines: List) -> List[List]:
        # The first page gives two lines to its title
        per_page = self._lines_per_page(ctx)
        first = max(1, per_page - 2)
        chunks = [lines[:first]]
        rest = lines[first:]
        while rest:
            chunks.append(rest[:per_page])
            rest = rest[per_page:]
        return chunks

    def _draw_listing(self, c: canvas.Canvas, ctx: RenderContext, title: Optional[str], lines: List) -> None:
        plan = ctx.plan
        size = ctx.config.base_font_size
        line_height = size * ctx.config.line_height
        style = ctx.document_style
        regular = self.fonts.resolve(style.body_font, ctx)
        bold = self.fonts.resolve(style.body_font, ctx, bold=True)
        y = plan.margin_top

        c.setFillColor(pdf_color(style.text_color))
        if title:
            heading = self.fonts.resolve(style.heading_font, ctx, bold=True)
            c.setFont(heading, size * ctx.config.scale_ratio)
            c.drawString(plan.margin_side, plan.page_height - (y + size), self._drawable(ctx, title, heading))
            y += 2 * line_height

        right = plan.page_width - plan.margin_side
        for text, level, emphasized, page in lines:
            font = bold if emphasized else regular
            c.setFont(font, size)
            baseline = plan.page_height - (y + size)
            c.drawString(plan.margin_side + (level - 1) * 12, baseline, self._drawable(ctx, text, font))
            if page:
                c.drawRightString(right, baseline, page)
            y += line_height

    # ------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------

    def _draw_block(self, c: canvas.Canvas, ctx: RenderContext, block: Block, box: PlacedBox) -> None:
        style = ctx.styles[block.id]
        self._draw_box(c, ctx, style, box)
        icon = ctx.visuals.icon_for(block.id)
        if icon is not None:
            self._draw_icon(c, ctx, icon, box)
        self.handler_for(block)(c, ctx, block, box, style)

    def _draw_box(self, c: canvas.Canvas, ctx: RenderContext, style: ResolvedStyle, box: PlacedBox) -> None:
        """Card fill, shadow and border, or the inline background/border hints"""
        page_height = ctx.plan.page_height
        bottom = page_height - box.bottom
        rounded = box.is_card and any(b.corners == "rounded" for b in ctx.visuals.borders)
        fill = style.block_background or (style.card_background if box.is_card else None)

        c.saveState()
        if box.is_card:
            for shadow in ctx.visuals.shadows:
                c.setFillColor(pdf_color(shadow.color, alpha=shadow.opacity))
                self._rect(c, box.x + SHADOW_OFFSET, bottom - SHADOW_OFFSET, box.width, box.height, rounded, fill=1)
        if fill:
            c.setFillColor(pdf_color(fill))
            self._rect(c, box.x, bottom, box.width, box.height, rounded, fill=1)

        borders = ctx.visuals.borders if box.is_card else ()
        if borders:
            for border in borders:
                color = style.accent_color if border.pattern == "gradient" else style.primary_color
                c.setStrokeColor(pdf_color(color))
                c.setLineWidth(border.width)
                self._rect(c, box.x, bottom, box.width, box.height, rounded, stroke=1)
        elif style.border:
            c.setStrokeColor(pdf_color(style.primary_color))
            c.setLineWidth(1)
            self._rect(c, box.x, bottom, box.width, box.height, rounded, stroke=1)
        c.restoreState()

    @staticmethod
    def _rect(c: canvas.Canvas, x: float, y: float, w: float, h: float, rounded: bool, stroke: int = 0, fill: int = 0):
        if rounded:
            c.roundRect(x, y, w, h, CARD_RADIUS, stroke=stroke, fill=fill)
        else:
            c.rect(x, y, w, h, stroke=stroke, fill=fill)

    def _draw_icon(self, c: canvas.Canvas, ctx: RenderContext, icon: IconElement, box: PlacedBox) -> None:
        """
        Emoji glyphs are not in the PDF fonts: draw a colored disc with the icon's letter.

        Only ``icon.x`` is honored. ``icon.y`` is a page-independent step per
        icon, so the disc is centered on the first line of the target block.
        """
        ctx.warn("icon symbols drawn as lettered discs")
        radius = icon.size / 2
        center_y = ctx.plan.page_height - (box.content_y + box.font_size / 2)
        c.saveState()
        c.setFillColor(pdf_color(icon.color))
        c.circle(icon.x, center_y, radius, stroke=0, fill=1)
        c.setFillColor(PDFColor(1, 1, 1))
        c.setFont("Helvetica-Bold", icon.size * 0.6)
        c.drawCentredString(icon.x, center_y - icon.size * 0.2, icon.label)
        c.restoreState()

    def _text_color(self, style: ResolvedStyle, box: PlacedBox) -> str:
        return style.card_text_color if box.is_card else style.text_color

    def _drawable(self, ctx: RenderContext, text: str, font_name: str) -> str:
        """Built-in fonts only carry cp1252; anything else is replaced"""
        if not FontRegistry.is_builtin(font_name):
            return text
        try:
            text.encode(BUILTIN_ENCODING)
            return text
        except UnicodeEncodeError:
            ctx.warn(f"characters outside the {font_name} encoding were replaced; set NOTELAYOUT_FONT_DIR")
            return text.encode(BUILTIN_ENCODING, "replace").decode(BUILTIN_ENCODING)

    def _draw_text(self, c: canvas.Canvas, ctx: RenderContext, block: TextBlock, box: PlacedBox, style: ResolvedStyle,
                   font_name: Optional[str] = None, x_offset: float = 0.0) -> None:
        font = font_name or self.fonts.resolve(style.font_family, ctx, style.bold, style.italic)
        color = self._text_color(style, box)
        for i, line in enumerate(box.lines[0].lines() if box.lines else ()):
            top = box.content_y + i * box.line_height
            self._draw_line(c, ctx, block, line, font, box.font_size, color, style,
                            box.content_x + x_offset, box.content_width - x_offset, top)

    def _draw_line(self, c: canvas.Canvas, ctx: RenderContext, block: TextBlock, line: WrappedLine, font: str,
                   size: float, color: str, style: ResolvedStyle, x: float, width: float, top: float) -> None:
        """One wrapped line, word by word, with its annotations"""
        if not line.words:
            return
        baseline = ctx.plan.page_height - (top + size)
        text = self._drawable(ctx, line.text, font)
        natural = pdfmetrics.stringWidth(text, font, size)

        gap = 0.0
        start_x = x
        if style.align == Alignment.CENTER:
            start_x = x + max(0.0, (width - natural) / 2)
        elif style.align == Alignment.RIGHT:
            start_x = x + max(0.0, width - natural)
        elif style.align == Alignment.JUSTIFY and not line.paragraph_end and len(line.words) > 1 and natural < width:
            gap = (width - natural) / (len(line.words) - 1)

        placed = []
        for index, word in enumerate(line.words):
            length = word.end - word.start
            word_x = start_x + pdfmetrics.stringWidth(text[:word.column], font, size) + gap * index
            word_text = text[word.column:word.column + length]
            placed.append((word, word_x, word_text, pdfmetrics.stringWidth(word_text, font, size)))

        annotations = ctx.block_annotations(block)

        # Backgrounds go under the glyphs
        c.saveState()
        for ann in annotations:
            if ann.type != AnnotationType.HIGHLIGHT:
                continue
            for x1, x2 in self._spans(ann, placed, font, size):
                c.setFillColor(pdf_color(ann.color or DEFAULT_HIGHLIGHT_COLOR))
                c.rect(x1, baseline - size * 0.25, x2 - x1, size * 1.15, stroke=0, fill=1)
        c.restoreState()

        links = [a for a in annotations if a.type == AnnotationType.LINK]
        c.setFont(font, size)
        for word, word_x, word_text, _ in placed:
            is_link = any(a.start < word.end and a.end > word.start for a in links)
            c.setFillColor(pdf_color(LINK_COLOR if is_link else color))
            c.drawString(word_x, baseline, word_text)

        c.saveState()
        c.setLineWidth(max(0.5, size / 18))
        if style.underline:
            c.setStrokeColor(pdf_color(color))
            first, last = placed[0], placed[-1]
            c.line(first[1], baseline - 2, last[1] + last[3], baseline - 2)
        for ann in annotations:
            spans = self._spans(ann, placed, font, size)
            if ann.type in (AnnotationType.UNDERLINE, AnnotationType.LINK):
                c.setStrokeColor(pdf_color(LINK_COLOR if ann.type == AnnotationType.LINK else color))
                for x1, x2 in spans:
                    c.line(x1, baseline - 2, x2, baseline - 2)
            elif ann.type == AnnotationType.STRIKETHROUGH:
                c.setStrokeColor(pdf_color(color))
                for x1, x2 in spans:
                    c.line(x1, baseline + size * 0.3, x2, baseline + size * 0.3)
            if ann.type == AnnotationType.LINK and ann.url:
                for x1, x2 in spans:
                    c.linkURL(ann.url, (x1, baseline - 2, x2, baseline + size), relative=0)
        c.restoreState()

        if ctx.footnotes_enabled():
            self._draw_note_markers(c, ctx, block, annotations, placed, font, size, baseline)

    @staticmethod
    def _spans(ann, placed, font: str, size: float) -> List[Tuple[float, float]]:
        """Horizontal extents of an annotation on one line"""
        x1 = x2 = None
        for word, word_x, word_text, _ in placed:
            lo, hi = max(ann.start, word.start), min(ann.end, word.end)
            if lo >= hi:
                continue
            left = word_x + pdfmetrics.stringWidth(word_text[:lo - word.start], font, size)
            right = word_x + pdfmetrics.stringWidth(word_text[:hi - word.start], font, size)
            x1 = left if x1 is None else x1
            x2 = right
        return [(x1, x2)] if x1 is not None else []

    def _draw_note_markers(self, c, ctx, block, annotations, placed, font, size, baseline) -> None:
        for ann in annotations:
            if ann.type != AnnotationType.NOTE:
                continue
            number = ctx.footnote_number(block.id, ann, block)
            if number is None:
                continue
            for word, word_x, word_text, _ in placed:
                if word.start < ann.end <= word.end:
                    end_x = word_x + pdfmetrics.stringWidth(word_text[:ann.end - word.start], font, size)
                    c.setFont(font, size * 0.6)
                    c.drawString(end_x + 0.5, baseline + size * 0.4, str(number))
                    c.setFont(font, size)

    def _draw_quote(self, c: canvas.Canvas, ctx: RenderContext, block: TextBlock, box: PlacedBox, style: ResolvedStyle) -> None:
        c.saveState()
        c.setFillColor(pdf_color(style.accent_color))
        c.rect(box.content_x - 6, ctx.plan.page_height - (box.content_y + box.height - 2 * box.padding),
               3, box.height - 2 * box.padding, stroke=0, fill=1)
        c.restoreState()
        font = self.fonts.resolve(style.font_family, ctx, style.bold, True)
        self._draw_text(c, ctx, block, box, style, font_name=font)

    def _draw_code(self, c: canvas.Canvas, ctx: RenderContext, block: CodeBlock, box: PlacedBox, style: ResolvedStyle) -> None:
        if not box.is_card and not style.block_background:
            c.saveState()
            c.setFillColor(PDFColor(0.96, 0.97, 0.98))
            c.rect(box.x, ctx.plan.page_height - box.bottom, box.width, box.height, stroke=0, fill=1)
            c.restoreState()
        font = BUILTIN_FONTS["mono"][int(style.bold)]
        self._draw_text(c, ctx, block, box, style, font_name=font)

    def _draw_list(self, c: canvas.Canvas, ctx: RenderContext, block: ListBlock, box: PlacedBox, style: ResolvedStyle) -> None:
        font = self.fonts.resolve(style.font_family, ctx, style.bold, style.italic)
        color = self._text_color(style, box)
        marker_width = LIST_MARKER_WIDTH * box.font_size * 0.5
        row = 0
        for number, item in enumerate(box.lines, start=1):
            top = box.content_y + row * box.line_height
            marker = f"{number}." if block.ordered else self._drawable(ctx, "•", font)
            c.setFont(font, box.font_size)
            c.setFillColor(pdf_color(color))
            c.drawString(box.content_x, ctx.plan.page_height - (top + box.font_size), marker)
            lines = list(item.lines())
            for i, line in enumerate(lines):
                self._draw_line(c, ctx, block, line, font, box.font_size, color, style,
                                box.content_x + marker_width, box.content_width - marker_width,
                                top + i * box.line_height)
            row += max(1, len(lines))

    def _draw_table(self, c: canvas.Canvas, ctx: RenderContext, block: TableBlock, box: PlacedBox, style: ResolvedStyle) -> None:
        rows: List[Tuple[str, ...]] = []
        if block.headers:
            rows.append(tuple(block.headers))
        rows.extend(tuple(r) for r in block.rows)
        columns = max([len(r) for r in rows] + [1])
        col_width = box.content_width / columns
        size = box.font_size
        regular = self.fonts.resolve(style.font_family, ctx, style.bold, style.italic)
        bold = self.fonts.resolve(style.font_family, ctx, True, style.italic)
        page_height = ctx.plan.page_height

        c.saveState()
        c.setLineWidth(0.5)
        c.setStrokeColor(PDFColor(0.82, 0.84, 0.87))
        for r, cells in enumerate(rows):
            top = box.content_y + r * box.line_height
            is_header = bool(block.headers) and r == 0
            if is_header:
                c.setFillColor(PDFColor(0.93, 0.94, 0.96))
                c.rect(box.content_x, page_height - (top + box.line_height), box.content_width, box.line_height, stroke=0, fill=1)
            font = bold if is_header else regular
            c.setFont(font, size)
            c.setFillColor(pdf_color(self._text_color(style, box)))
            for col in range(columns):
                cell_x = box.content_x + col * col_width
                c.rect(cell_x, page_height - (top + box.line_height), col_width, box.line_height, stroke=1, fill=0)
                text = self._drawable(ctx, cells[col] if col < len(cells) else "", font)
                fitted = self._fit(text, font, size, col_width - 6)
                if fitted != text:
                    ctx.warn("table cell text truncated to the column width", block.id)
                c.drawString(cell_x + 3, page_height - (top + size + (box.line_height - size) / 2), fitted)
        c.restoreState()

    @staticmethod
    def _fit(text: str, font: str, size: float, width: float) -> str:
        if pdfmetrics.stringWidth(text, font, size) <= width:
            return text
        ellipsis = "..."
        while text and pdfmetrics.stringWidth(text + ellipsis, font, size) > width:
            text = text[:-1]
        return text + ellipsis if text else ""

    def _draw_image(self, c: canvas.Canvas, ctx: RenderContext, block: ImageBlock, box: PlacedBox, style: ResolvedStyle) -> None:
        page_height = ctx.plan.page_height
        caption_height = box.line_count * box.line_height
        image_height = box.height - 2 * box.padding - caption_height
        x, y = box.content_x, page_height - (box.content_y + image_height)

        drawn = False
        if block.data:
            try:
                reader = ImageReader(io.BytesIO(base64.b64decode(block.data)))
                c.drawImage(reader, x, y, width=box.content_width, height=image_height, mask="auto")
                drawn = True
            except (binascii.Error, OSError, ValueError) as e:
                ctx.warn(f"image could not be decoded ({e}); drawn as a placeholder", block.id)
        else:
            ctx.warn("remote image not embedded; drawn as a placeholder", block.id)

        if not drawn:
            c.saveState()
            c.setStrokeColor(PDFColor(0.6, 0.6, 0.6))
            c.setDash(4, 3)
            c.rect(x, y, box.content_width, image_height, stroke=1, fill=0)
            c.setFont(CHROME_FONT, CHROME_FONT_SIZE)
            c.setFillColor(PDFColor(0.4, 0.4, 0.4))
            label = self._fit(self._drawable(ctx, block.url or "[image]", CHROME_FONT),
                              CHROME_FONT, CHROME_FONT_SIZE, box.content_width - 8)
            c.drawCentredString(x + box.content_width / 2, y + image_height / 2, label)
            c.restoreState()

        if box.lines:
            font = self.fonts.resolve(style.font_family, ctx, False, True)
            color = self._text_color(style, box)
            for i, line in enumerate(box.lines[0].lines()):
                top = box.content_y + image_height + i * box.line_height
                self._draw_line(c, ctx, block, line, font, box.font_size, color, style,
                                box.content_x, box.content_width, top)

    def _draw_separator(self, c: canvas.Canvas, ctx: RenderContext, block: Block, box: PlacedBox, style: ResolvedStyle) -> None:
        y = ctx.plan.page_height - (box.y + box.height / 2)
        c.saveState()
        c.setStrokeColor(pdf_color(style.accent_color))
        c.setLineWidth(1)
        c.line(box.content_x, y, box.content_x + box.content_width, y)
        c.restoreState()
