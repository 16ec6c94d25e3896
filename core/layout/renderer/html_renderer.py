#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
HTML Renderer

Renders a laid-out document to a standalone HTML page (markup backend).
Theme values are exposed as CSS custom properties; decorations become
CSS rules. Page breaks from the layout plan are kept as print breaks.

Version: 1.0.0
"""

from html import escape
from typing import Callable, Dict, List
import logging

from core.contracts import (
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
)
from core.styling import ResolvedStyle, css_variables
from core.visuals import AdvancedVisualElements, GradientDirection
from ..executor.block_flow import PlacedBox
from .base_renderer import (
    DEFAULT_HIGHLIGHT_COLOR,
    BaseRenderer,
    RenderContext,
    segment_text,
)

logger = logging.getLogger(__name__)

GRADIENT_ANGLES = {
    GradientDirection.HORIZONTAL: "to right",
    GradientDirection.VERTICAL: "to bottom",
    GradientDirection.DIAGONAL: "135deg",
}

BASE_CSS = """
* { box-sizing: border-box; }
body.document {
    margin: 0;
    font-family: var(--body-font), -apple-system, BlinkMacSystemFont, 'Segoe UI', sans-serif;
    font-size: var(--base-font-size);
    line-height: var(--line-height);
    color: var(--text-color);
    background-color: var(--background-color);
}
.page-container { max-width: 860px; margin: 0 auto; padding: 32px; position: relative; }
.document-header { margin-bottom: 24px; }
.document-title { font-family: var(--heading-font); margin: 0 0 8px 0; color: var(--primary-color); }
.document-meta { font-size: 0.9em; opacity: 0.8; }
.table-of-contents { margin-bottom: 24px; }
.toc-title { font-family: var(--heading-font); }
.toc-item { display: flex; justify-content: space-between; }
.toc-item.emphasized { font-weight: bold; }
.toc-item a { color: inherit; text-decoration: none; }
.block { margin: 8px 0; }
.block.card {
    background-color: var(--card-background);
    color: var(--card-text-color);
    border-radius: var(--border-radius);
    padding: 12px;
}
.block-heading { font-family: var(--heading-font); margin: 0; }
.block-content { margin: 0; }
.block-quote { border-left: 3px solid var(--accent-color); padding-left: 12px; font-style: italic; }
.block-code { font-family: 'Monaco', 'Courier New', monospace; font-size: 0.9em; white-space: pre-wrap; }
.block-table table { border-collapse: collapse; width: 100%; }
.block-table th, .block-table td { border: 1px solid #d0d7de; padding: 4px 8px; text-align: left; }
.block-image img { max-width: 100%; }
.image-caption { font-size: 0.9em; font-style: italic; }
.icon { margin-right: 6px; }
.page-break { break-before: page; }
.page-number { text-align: center; font-size: 0.8em; opacity: 0.7; margin: 12px 0; }
.footnotes { margin-top: 24px; font-size: 0.9em; border-top: 1px solid #d0d7de; }
.watermark {
    position: fixed; top: 50%; left: 50%;
    pointer-events: none; white-space: nowrap; z-index: 0;
}
@media print {
    .page-container { max-width: none; margin: 0; padding: 15mm; }
    .block { break-inside: avoid; }
    .block-heading { break-after: avoid; }
}
"""


class HTMLRenderer(BaseRenderer):
    """
    Renders to HTML (markup format).

    Usage:
        renderer = HTMLRenderer()
        output = renderer.render(validated, styles, doc_style, plan, visuals, options, config, toc)
        html_text = output.content.decode("utf-8")
    """

    format = OutputFormat.MARKUP

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
        meta = ctx.validated.meta
        parts = [
            "<!DOCTYPE html>",
            f'<html lang="{escape(meta.language)}">',
            "<head>",
            '<meta charset="UTF-8">',
            '<meta name="viewport" content="width=device-width, initial-scale=1.0">',
            f"<title>{escape(meta.title)}</title>",
            f"<style>{self._css(ctx)}</style>",
            "</head>",
            f'<body class="document" data-theme="{ctx.document_style.theme.value}" '
            f'data-design-style="{escape(ctx.options.design_style)}">',
        ]
        parts.extend(self._watermarks(ctx.visuals))
        parts.append('<div class="page-container">')
        parts.append(self._header(ctx))
        if ctx.toc_enabled():
            parts.append(self._toc(ctx))

        parts.append('<main class="content">')
        parts.extend(self._blocks(ctx))
        parts.append("</main>")

        if ctx.footnotes_enabled():
            parts.append(self._footnotes(ctx))
        parts.append("</div>")
        parts.append("</body>")
        parts.append("</html>")
        return "\n".join(parts).encode("utf-8")

    # ------------------------------------------------------------------
    # Page furniture
    # ------------------------------------------------------------------

    def _css(self, ctx: RenderContext) -> str:
        variables = css_variables(ctx.document_style, ctx.config.base_font_size, ctx.config.line_height)
        rules = [":root {"]
        rules.extend(f"    {name}: {value};" for name, value in variables.items())
        rules.append("}")
        rules.append(BASE_CSS)
        rules.extend(self._visual_css(ctx.visuals))
        return "\n".join(rules)

    def _visual_css(self, visuals: AdvancedVisualElements) -> List[str]:
        rules = []
        for gradient in visuals.gradients:
            stops = ", ".join(c.css_rgba(gradient.opacity) for c in gradient.colors)
            rules.append(
                f"body.document {{ background-image: linear-gradient({GRADIENT_ANGLES[gradient.direction]}, {stops}); }}"
            )
        for border in visuals.borders:
            radius = "var(--border-radius)" if border.corners == "rounded" else "0"
            if border.pattern == "gradient":
                rules.append(
                    f".block.card {{ border: {border.width:g}px solid; border-image: "
                    f"linear-gradient(135deg, var(--primary-color), var(--accent-color)) 1; border-radius: {radius}; }}"
                )
            else:
                rules.append(
                    f".block.card {{ border: {border.width:g}px solid var(--primary-color); border-radius: {radius}; }}"
                )
        for shadow in visuals.shadows:
            rules.append(
                f".block.card {{ box-shadow: {shadow.offset_x:g}px {shadow.offset_y:g}px {shadow.blur:g}px "
                f"{shadow.color.css_rgba(shadow.opacity)}; }}"
            )
        for texture in visuals.textures:
            rules.append(
                f".page-container {{ background-image: radial-gradient(rgba(0, 0, 0, {texture.opacity}) "
                f"{texture.size:g}px, transparent {texture.size:g}px); "
                f"background-size: {texture.spacing:g}px {texture.spacing:g}px; }}"
            )
        return rules

    def _watermarks(self, visuals: AdvancedVisualElements) -> List[str]:
        return [
            f'<div class="watermark" aria-hidden="true" style="transform: translate(-50%, -50%) '
            f"rotate({wm.rotation:g}deg); font-size: {wm.font_size:g}px; "
            f'color: {wm.color.css_rgba(wm.opacity)};">{escape(wm.text)}</div>'
            for wm in visuals.watermarks
        ]

    def _header(self, ctx: RenderContext) -> str:
        meta = ctx.validated.meta
        details = []
        if meta.author:
            details.append(f"<span>By {escape(meta.author)}</span>")
        if meta.date:
            details.append(f"<span>{escape(meta.date)}</span>")
        if meta.tags:
            details.append(f"<span>{escape(', '.join(meta.tags))}</span>")
        return (
            '<header class="document-header">'
            f'<h1 class="document-title">{escape(meta.title)}</h1>'
            f'<div class="document-meta">{" &bull; ".join(details)}</div>'
            "</header>"
        )

    def _toc(self, ctx: RenderContext) -> str:
        items = []
        for entry in ctx.toc:
            classes = "toc-item emphasized" if entry.emphasized else "toc-item"
            title = escape(entry.title)
            if entry.block_id:
                title = f'<a href="#block-{escape(entry.block_id)}">{title}</a>'
            page = f'<span class="toc-page">{entry.page_number}</span>' if entry.page_number else ""
            items.append(
                f'<div class="{classes}" style="padding-left: {(entry.level - 1) * 16}px;">'
                f"<span>{title}</span>{page}</div>"
            )
        return (
            '<section class="table-of-contents">'
            '<h2 class="toc-title">Table of Contents</h2>'
            + "".join(items)
            + "</section>"
        )

    def _footnotes(self, ctx: RenderContext) -> str:
        items = "".join(
            f'<li id="fn-{note.number}">{escape(note.text)}</li>' for note in ctx.footnotes
        )
        return f'<section class="footnotes"><ol>{items}</ol></section>'

    def _page_number(self, ctx: RenderContext, page_index: int) -> str:
        return f'<div class="page-number">Page {page_index + 1} / {ctx.plan.page_count}</div>'

    # ------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------

    def _blocks(self, ctx: RenderContext) -> List[str]:
        parts = []
        current_page = 0
        for block in ctx.validated.blocks:
            box = ctx.plan.box_for(block.id)
            if box.page_index != current_page:
                if ctx.options.page_numbers:
                    parts.append(self._page_number(ctx, current_page))
                parts.append('<div class="page-break" aria-hidden="true"></div>')
                current_page = box.page_index
            parts.append(self._block(ctx, block, box))
        if ctx.options.page_numbers and ctx.validated.blocks:
            parts.append(self._page_number(ctx, current_page))
        return parts

    def _block(self, ctx: RenderContext, block: Block, box: PlacedBox) -> str:
        style = ctx.styles[block.id]
        classes = ["block", "card" if box.is_card else "inline", f"block-{block.type.value}-wrapper"]

        declarations = [f"text-align: {style.align.value}"]
        if block.type != BlockType.CODE:
            declarations.append(f"font-size: {box.font_size:.2f}px")
        if style.bold:
            declarations.append("font-weight: bold")
        elif style.italic:
            declarations.append("font-style: italic")
        elif style.underline:
            declarations.append("text-decoration: underline")
        if style.block_background:
            declarations.append(f"background-color: {style.block_background}")
            declarations.append(f"color: {style.card_text_color if box.is_card else style.text_color}")
        if style.border:
            declarations.append("border: 1px solid var(--primary-color)")

        icon = ""
        element = ctx.visuals.icon_for(block.id)
        if element is not None:
            icon = (
                f'<span class="icon" data-icon-type="{element.type.value}" '
                f'style="color: {element.color.hex}; font-size: {element.size:g}px;">{element.symbol}</span>'
            )

        content = self.handler_for(block)(ctx, block, style)
        return (
            f'<div id="block-{escape(block.id)}" class="{" ".join(classes)}" '
            f'data-page="{box.page_index + 1}" style="{"; ".join(declarations)};">'
            f"{icon}{content}</div>"
        )

    def _inline(self, ctx: RenderContext, block: TextBlock) -> str:
        """Block text with annotation markup and footnote references"""
        out = []
        annotations = ctx.block_annotations(block)
        for segment in segment_text(block.text, annotations):
            html = escape(segment.text)
            for ann in segment.annotations:
                if ann.type == AnnotationType.HIGHLIGHT:
                    color = escape(ann.color or DEFAULT_HIGHLIGHT_COLOR)
                    html = f'<span class="annotation-highlight" style="background-color: {color}">{html}</span>'
                elif ann.type == AnnotationType.NOTE:
                    html = f'<span class="annotation-note" title="{escape(ann.note or "")}">{html}</span>'
                elif ann.type == AnnotationType.LINK:
                    html = f'<a href="{escape(ann.url or "")}" target="_blank" rel="noopener">{html}</a>'
                elif ann.type == AnnotationType.UNDERLINE:
                    html = f"<u>{html}</u>"
                elif ann.type == AnnotationType.STRIKETHROUGH:
                    html = f"<s>{html}</s>"
            out.append(html)

            if ctx.footnotes_enabled():
                for ann in segment.annotations:
                    if ann.type == AnnotationType.NOTE and ann.end == segment.end:
                        number = ctx.footnote_number(block.id, ann, block)
                        if number is not None:
                            out.append(f'<sup class="footnote-ref"><a href="#fn-{number}">{number}</a></sup>')
        return "".join(out)

    def _render_heading(self, ctx: RenderContext, block: HeadingBlock, style: ResolvedStyle) -> str:
        level = block.level
        return f'<h{level} class="block-heading block-content level-{level}">{self._inline(ctx, block)}</h{level}>'

    def _render_paragraph(self, ctx: RenderContext, block: TextBlock, style: ResolvedStyle) -> str:
        return f'<p class="block-paragraph block-content">{self._inline(ctx, block)}</p>'

    def _render_quote(self, ctx: RenderContext, block: TextBlock, style: ResolvedStyle) -> str:
        return f'<blockquote class="block-quote block-content">{self._inline(ctx, block)}</blockquote>'

    def _render_code(self, ctx: RenderContext, block: CodeBlock, style: ResolvedStyle) -> str:
        language = escape(block.language or "text")
        return (
            f'<pre class="block-code block-content"><code class="language-{language}">'
            f"{self._inline(ctx, block)}</code></pre>"
        )

    def _render_list(self, ctx: RenderContext, block: ListBlock, style: ResolvedStyle) -> str:
        tag = "ol" if block.ordered else "ul"
        items = "".join(f"<li>{escape(item)}</li>" for item in block.items)
        return f'<{tag} class="block-list block-content">{items}</{tag}>'

    def _render_image(self, ctx: RenderContext, block: ImageBlock, style: ResolvedStyle) -> str:
        src = f"data:{block.mime};base64,{block.data}" if block.data else (block.url or "")
        alt = block.caption or "Image"
        caption = f'<figcaption class="image-caption block-content">{escape(block.caption)}</figcaption>' if block.caption else ""
        return f'<figure class="block-image"><img src="{escape(src)}" alt="{escape(alt)}" />{caption}</figure>'

    def _render_table(self, ctx: RenderContext, block: TableBlock, style: ResolvedStyle) -> str:
        rows = []
        if block.headers:
            rows.append("<tr>" + "".join(f"<th>{escape(h)}</th>" for h in block.headers) + "</tr>")
        for row in block.rows:
            rows.append("<tr>" + "".join(f"<td>{escape(cell)}</td>" for cell in row) + "</tr>")
        return f'<div class="block-table block-content"><table>{"".join(rows)}</table></div>'

    def _render_separator(self, ctx: RenderContext, block: Block, style: ResolvedStyle) -> str:
        return '<hr class="block-separator">'
