#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
DOCX Renderer

Renders a laid-out document to DOCX (flow-document backend) with
python-docx. Word re-flows text itself, so the layout plan contributes
page breaks, font sizes and card placement; block order is the plan's.

Version: 1.0.0
"""

from typing import Callable, Dict, List, Optional
import base64
import binascii
import io
import logging

from docx import Document as WordDocument
from docx.enum.table import WD_TABLE_ALIGNMENT
from docx.enum.text import WD_ALIGN_PARAGRAPH, WD_TAB_ALIGNMENT, WD_TAB_LEADER
from docx.image.exceptions import InvalidImageStreamError, UnexpectedEndOfFileError, UnrecognizedImageError
from docx.opc.constants import RELATIONSHIP_TYPE as RT
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Pt, RGBColor

from core.contracts import (
    Alignment,
    AnnotationType,
    Block,
    BlockType,
    CodeBlock,
    HeadingBlock,
    ImageBlock,
    ListBlock,
    OutputFormat,
    TableBlock,
    TextBlock,
    parse_color,
)
from core.styling import ResolvedStyle
from ..executor.block_flow import PlacedBox
from .base_renderer import DEFAULT_HIGHLIGHT_COLOR, BaseRenderer, RenderContext, segment_text

logger = logging.getLogger(__name__)

ALIGNMENTS = {
    Alignment.LEFT: WD_ALIGN_PARAGRAPH.LEFT,
    Alignment.CENTER: WD_ALIGN_PARAGRAPH.CENTER,
    Alignment.RIGHT: WD_ALIGN_PARAGRAPH.RIGHT,
    Alignment.JUSTIFY: WD_ALIGN_PARAGRAPH.JUSTIFY,
}

CODE_FONT = "Courier New"
CODE_BACKGROUND = "#F6F8FA"
LINK_COLOR = "#0563C1"
WATERMARK_COLOR = "#BFBFBF"


def rgb(value: str) -> RGBColor:
    return RGBColor.from_string(parse_color(value).hex[1:].upper())


def _fill(value: str) -> str:
    return parse_color(value).hex[1:].upper()


def shade_paragraph(paragraph, color: str) -> None:
    """Paragraph background (w:shd)"""
    shading = OxmlElement("w:shd")
    shading.set(qn("w:val"), "clear")
    shading.set(qn("w:color"), "auto")
    shading.set(qn("w:fill"), _fill(color))
    paragraph._p.get_or_add_pPr().append(shading)


def border_paragraph(paragraph, color: str, width: float = 1.0, sides=("top", "left", "bottom", "right")) -> None:
    """Paragraph border (w:pBdr); width in points"""
    borders = OxmlElement("w:pBdr")
    for side in sides:
        edge = OxmlElement(f"w:{side}")
        edge.set(qn("w:val"), "single")
        edge.set(qn("w:sz"), str(max(2, int(width * 8))))  # eighths of a point
        edge.set(qn("w:space"), "4")
        edge.set(qn("w:color"), _fill(color))
        borders.append(edge)
    paragraph._p.get_or_add_pPr().append(borders)


def shade_run(run, color: str) -> None:
    """Arbitrary-color highlight (w:shd on the run)"""
    shading = OxmlElement("w:shd")
    shading.set(qn("w:val"), "clear")
    shading.set(qn("w:color"), "auto")
    shading.set(qn("w:fill"), _fill(color))
    run._r.get_or_add_rPr().append(shading)


def add_field(paragraph, instruction: str, placeholder: str = "1") -> None:
    """Complex field (PAGE, NUMPAGES) updated by Word when the document opens"""
    begin = OxmlElement("w:fldChar")
    begin.set(qn("w:fldCharType"), "begin")
    paragraph.add_run()._r.append(begin)

    instr = OxmlElement("w:instrText")
    instr.set(qn("xml:space"), "preserve")
    instr.text = instruction
    paragraph.add_run()._r.append(instr)

    separate = OxmlElement("w:fldChar")
    separate.set(qn("w:fldCharType"), "separate")
    paragraph.add_run()._r.append(separate)

    paragraph.add_run(placeholder)

    end = OxmlElement("w:fldChar")
    end.set(qn("w:fldCharType"), "end")
    paragraph.add_run()._r.append(end)


def wrap_in_hyperlink(paragraph, run, url: str) -> None:
    """Move an existing run inside an external w:hyperlink"""
    r_id = paragraph.part.relate_to(url, RT.HYPERLINK, is_external=True)
    hyperlink = OxmlElement("w:hyperlink")
    hyperlink.set(qn("r:id"), r_id)
    paragraph._p.append(hyperlink)
    hyperlink.append(run._r)


class DocxRenderer(BaseRenderer):
    """
    Renders to DOCX (flow-document format).

    Usage:
        renderer = DocxRenderer()
        output = renderer.render(validated, styles, doc_style, plan, visuals, options, config, toc)
        Path("notes.docx").write_bytes(output.content)
    """

    format = OutputFormat.FLOW_DOCUMENT

    def block_handlers(self) -> Dict[BlockType, Callable]:
        return {
            BlockType.HEADING: self._render_heading,
            BlockType.PARAGRAPH: self._render_paragraph,
            BlockType.LIST: self._render_list,
            BlockType.QUOTE: self._render_quote,
            BlockType.IMAGE: self._render_image,
            BlockType.TABLE: self._render_table,
            BlockType.CODE: self._render_code,
            BlockType.SEPARATOR: self._render_separator,
        }

    def _render(self, ctx: RenderContext) -> bytes:
        doc = WordDocument()
        meta = ctx.validated.meta
        doc.core_properties.title = meta.title
        if meta.author:
            doc.core_properties.author = meta.author
        if meta.tags:
            doc.core_properties.keywords = ", ".join(meta.tags)
        doc.core_properties.language = meta.language

        self._set_page(doc, ctx)
        self._set_default_font(doc, ctx.document_style, ctx.config.base_font_size)
        self._apply_visuals(doc, ctx)

        title = doc.add_paragraph(style="Title")
        title_run = title.add_run(meta.title)
        title_run.font.color.rgb = rgb(ctx.document_style.primary_color)

        toc_pages = 0
        if ctx.toc_enabled():
            self._add_toc(doc, ctx)
            doc.add_page_break()
            toc_pages = 1

        current_page = 0
        for block in ctx.validated.blocks:
            box = ctx.plan.box_for(block.id)
            if box.page_index != current_page:
                doc.add_page_break()
                current_page = box.page_index
            ctx.current_block = block.id
            self.handler_for(block)(doc, ctx, block, box, ctx.styles[block.id])
        ctx.current_block = None

        if ctx.footnotes_enabled():
            self._add_notes(doc, ctx)

        logger.debug(f"DOCX flow: {toc_pages} TOC page(s), {ctx.plan.page_count} layout page(s)")
        buffer = io.BytesIO()
        doc.save(buffer)
        return buffer.getvalue()

    # ------------------------------------------------------------------
    # Document setup
    # ------------------------------------------------------------------

    def _set_page(self, doc, ctx: RenderContext) -> None:
        plan = ctx.plan
        section = doc.sections[0]
        section.page_width = Pt(plan.page_width)
        section.page_height = Pt(plan.page_height)
        section.top_margin = Pt(plan.margin_top)
        section.bottom_margin = Pt(plan.margin_bottom)
        section.left_margin = Pt(plan.margin_side)
        section.right_margin = Pt(plan.margin_side)
        section.header_distance = Pt(plan.margin_top / 2)
        section.footer_distance = Pt(plan.margin_bottom / 2)

        if ctx.options.page_numbers:
            footer = section.footer
            paragraph = footer.paragraphs[0] if footer.paragraphs else footer.add_paragraph()
            paragraph.alignment = WD_ALIGN_PARAGRAPH.CENTER
            add_field(paragraph, "PAGE")
            paragraph.add_run(" / ")
            add_field(paragraph, "NUMPAGES")
            for run in paragraph.runs:
                run.font.size = Pt(8)

    def _set_default_font(self, doc, style: ResolvedStyle, base_font_size: float) -> None:
        normal = doc.styles["Normal"]
        normal.font.name = style.body_font
        normal.font.size = Pt(base_font_size)
        normal.font.color.rgb = rgb(style.text_color)

    def _apply_visuals(self, doc, ctx: RenderContext) -> None:
        visuals = ctx.visuals
        if visuals.gradients:
            ctx.warn("gradient backgrounds are not supported in flow documents; omitted")
        if visuals.shadows:
            ctx.warn("card shadows are not supported in flow documents; omitted")
        if visuals.textures:
            ctx.warn("background textures are not supported in flow documents; omitted")
        if visuals.watermarks:
            ctx.warn("watermark rendered as page header text")
            header = doc.sections[0].header
            paragraph = header.paragraphs[0] if header.paragraphs else header.add_paragraph()
            paragraph.alignment = WD_ALIGN_PARAGRAPH.CENTER
            for watermark in visuals.watermarks:
                run = paragraph.add_run(watermark.text)
                run.font.size = Pt(8)
                run.font.color.rgb = rgb(WATERMARK_COLOR)

    def _add_toc(self, doc, ctx: RenderContext) -> None:
        doc.add_heading("Table of Contents", level=1)
        tab_position = Pt(ctx.plan.content_width)
        for entry in ctx.toc:
            paragraph = doc.add_paragraph()
            paragraph.paragraph_format.left_indent = Pt((entry.level - 1) * 12)
            paragraph.paragraph_format.space_after = Pt(2)
            paragraph.paragraph_format.tab_stops.add_tab_stop(tab_position, WD_TAB_ALIGNMENT.RIGHT, WD_TAB_LEADER.DOTS)
            run = paragraph.add_run(entry.title)
            run.bold = entry.emphasized
            if entry.page_number:
                # Page numbers are layout pages after the TOC page
                paragraph.add_run(f"\t{entry.page_number + 1}")

    def _add_notes(self, doc, ctx: RenderContext) -> None:
        doc.add_heading("Notes", level=2)
        for note in ctx.footnotes:
            paragraph = doc.add_paragraph()
            number = paragraph.add_run(f"{note.number}. ")
            number.bold = True
            paragraph.add_run(note.text)

    # ------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------

    def _format_paragraph(self, paragraph, ctx: RenderContext, block: Block, box: PlacedBox, style: ResolvedStyle,
                          default_fill: Optional[str] = None) -> None:
        """Border and background first (schema order), then spacing and alignment"""
        fill = style.block_background or (style.card_background if box.is_card else default_fill)
        card_border = box.is_card and ctx.visuals.borders
        if card_border:
            border = ctx.visuals.borders[0]
            color = style.accent_color if border.pattern == "gradient" else style.primary_color
            border_paragraph(paragraph, color, border.width)
        elif style.border:
            border_paragraph(paragraph, style.primary_color)
        if fill:
            shade_paragraph(paragraph, fill)

        fmt = paragraph.paragraph_format
        fmt.alignment = ALIGNMENTS[style.align]
        fmt.space_after = Pt(ctx.config.block_gap)
        fmt.line_spacing = ctx.config.line_height
        if box.is_card:
            fmt.keep_together = True

    def _text_color(self, style: ResolvedStyle, box: PlacedBox) -> str:
        return style.card_text_color if box.is_card else style.text_color

    def _icon_run(self, paragraph, ctx: RenderContext, block: Block) -> None:
        icon = ctx.visuals.icon_for(block.id)
        if icon is None:
            return
        run = paragraph.add_run(f"{icon.symbol} ")
        run.font.color.rgb = rgb(icon.color.hex)

    def _add_runs(self, paragraph, ctx: RenderContext, block: TextBlock, box: PlacedBox, style: ResolvedStyle,
                  font: Optional[str] = None, italic: Optional[bool] = None) -> None:
        """Block text as runs, one per annotation segment"""
        color = self._text_color(style, box)
        for segment in segment_text(block.text, ctx.block_annotations(block)):
            run = paragraph.add_run(segment.text)
            run.font.name = font or style.font_family
            run.font.size = Pt(box.font_size)
            run.font.color.rgb = rgb(color)
            run.bold = style.bold or None
            run.italic = italic if italic is not None else (style.italic or None)
            run.underline = style.underline or None

            link = segment.first(AnnotationType.LINK)
            if segment.has(AnnotationType.UNDERLINE):
                run.underline = True
            if segment.has(AnnotationType.STRIKETHROUGH):
                run.font.strike = True
            if link is not None:
                run.underline = True
                run.font.color.rgb = rgb(LINK_COLOR)
            highlight = segment.first(AnnotationType.HIGHLIGHT)
            if highlight is not None:
                shade_run(run, highlight.color or DEFAULT_HIGHLIGHT_COLOR)
            if link is not None and link.url:
                wrap_in_hyperlink(paragraph, run, link.url)

            if ctx.footnotes_enabled():
                for ann in segment.annotations:
                    if ann.type == AnnotationType.NOTE and ann.end == segment.end:
                        number = ctx.footnote_number(block.id, ann, block)
                        if number is not None:
                            marker = paragraph.add_run(str(number))
                            marker.font.superscript = True
                            marker.font.size = Pt(box.font_size)

    def _render_heading(self, doc, ctx: RenderContext, block: HeadingBlock, box: PlacedBox, style: ResolvedStyle) -> None:
        paragraph = doc.add_heading("", level=min(block.level, 9))
        self._format_paragraph(paragraph, ctx, block, box, style)
        self._icon_run(paragraph, ctx, block)
        self._add_runs(paragraph, ctx, block, box, style)

    def _render_paragraph(self, doc, ctx: RenderContext, block: TextBlock, box: PlacedBox, style: ResolvedStyle) -> None:
        paragraph = doc.add_paragraph()
        self._format_paragraph(paragraph, ctx, block, box, style)
        self._icon_run(paragraph, ctx, block)
        self._add_runs(paragraph, ctx, block, box, style)

    def _render_quote(self, doc, ctx: RenderContext, block: TextBlock, box: PlacedBox, style: ResolvedStyle) -> None:
        paragraph = doc.add_paragraph(style="Quote")
        self._format_paragraph(paragraph, ctx, block, box, style)
        paragraph.paragraph_format.left_indent = Pt(18)
        self._icon_run(paragraph, ctx, block)
        self._add_runs(paragraph, ctx, block, box, style, italic=True)

    def _render_code(self, doc, ctx: RenderContext, block: CodeBlock, box: PlacedBox, style: ResolvedStyle) -> None:
        paragraph = doc.add_paragraph()
        self._format_paragraph(paragraph, ctx, block, box, style, default_fill=CODE_BACKGROUND)
        paragraph.paragraph_format.alignment = WD_ALIGN_PARAGRAPH.LEFT
        self._add_runs(paragraph, ctx, block, box, style, font=CODE_FONT)

    def _render_list(self, doc, ctx: RenderContext, block: ListBlock, box: PlacedBox, style: ResolvedStyle) -> None:
        color = self._text_color(style, box)
        for number, item in enumerate(block.items, start=1):
            # Ordered lists are numbered per block, not continued across lists
            paragraph = doc.add_paragraph(style="List Paragraph" if block.ordered else "List Bullet")
            self._format_paragraph(paragraph, ctx, block, box, style)
            paragraph.paragraph_format.space_after = Pt(0)
            if number == 1:
                self._icon_run(paragraph, ctx, block)
            text = f"{number}. {item}" if block.ordered else item
            run = paragraph.add_run(text)
            run.font.name = style.font_family
            run.font.size = Pt(box.font_size)
            run.font.color.rgb = rgb(color)
            run.bold = style.bold or None
            run.italic = style.italic or None

    def _render_table(self, doc, ctx: RenderContext, block: TableBlock, box: PlacedBox, style: ResolvedStyle) -> None:
        rows: List[List[str]] = []
        if block.headers:
            rows.append(list(block.headers))
        rows.extend(list(r) for r in block.rows)
        if not rows:
            return
        columns = max(len(r) for r in rows)
        table = doc.add_table(rows=len(rows), cols=columns)
        table.style = "Table Grid"
        table.alignment = WD_TABLE_ALIGNMENT.CENTER

        for r, cells in enumerate(rows):
            is_header = bool(block.headers) and r == 0
            for c, text in enumerate(cells):
                cell = table.rows[r].cells[c]
                cell.text = text
                for paragraph in cell.paragraphs:
                    for run in paragraph.runs:
                        run.font.size = Pt(box.font_size)
                        run.bold = is_header or style.bold or None
        doc.add_paragraph()

    def _render_image(self, doc, ctx: RenderContext, block: ImageBlock, box: PlacedBox, style: ResolvedStyle) -> None:
        if block.data:
            try:
                stream = io.BytesIO(base64.b64decode(block.data))
                doc.add_picture(stream, width=Pt(box.content_width))
                doc.paragraphs[-1].alignment = ALIGNMENTS[style.align]
            except (binascii.Error, InvalidImageStreamError, UnexpectedEndOfFileError,
                    UnrecognizedImageError, OSError, ValueError) as e:
                ctx.warn(f"image could not be decoded ({e}); caption only", block.id)
        else:
            ctx.warn("remote image not embedded; caption only", block.id)

        if block.caption:
            paragraph = doc.add_paragraph(style="Caption")
            paragraph.alignment = ALIGNMENTS[style.align]
            run = paragraph.add_run(block.caption)
            run.italic = True
            run.font.size = Pt(box.font_size)

    def _render_separator(self, doc, ctx: RenderContext, block: Block, box: PlacedBox, style: ResolvedStyle) -> None:
        paragraph = doc.add_paragraph()
        border_paragraph(paragraph, style.accent_color, 1.0, sides=("bottom",))
