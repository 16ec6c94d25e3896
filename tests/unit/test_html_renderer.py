"""
Unit tests for the markup (HTML) backend.
"""
from html.parser import HTMLParser

import pytest

from core.contracts import Annotation, AnnotationType, OutputFormat
from core.layout import RENDERERS, HTMLRenderer, get_renderer
from core.layout.renderer import segment_text


class BlockTextParser(HTMLParser):
    """Collects the visible text of every .block-content element by block id."""

    def __init__(self):
        super().__init__()
        self.texts = {}
        self.classes = {}
        self._block = None
        self._depth = 0
        self._skip = 0

    def handle_starttag(self, tag, attrs):
        attrs = dict(attrs)
        if tag == "div" and (attrs.get("id") or "").startswith("block-"):
            self._block = attrs["id"][len("block-"):]
            self.classes[self._block] = attrs.get("class", "").split()
            self.texts[self._block] = ""
        if self._depth:
            self._depth += 1
        elif "block-content" in (attrs.get("class") or "").split():
            self._depth = 1
        if tag == "sup":
            self._skip += 1

    def handle_endtag(self, tag):
        if self._depth:
            self._depth -= 1
        if tag == "sup":
            self._skip -= 1

    def handle_data(self, data):
        if self._depth and not self._skip and self._block:
            self.texts[self._block] += data


@pytest.fixture
def html_output(prepared, render):
    return render(HTMLRenderer(), prepared)


@pytest.fixture
def html_text(html_output):
    return html_output.content.decode("utf-8")


@pytest.fixture
def parsed(html_text):
    parser = BlockTextParser()
    parser.feed(html_text)
    return parser


class TestDocumentStructure:

    def test_standalone_page(self, html_text):
        assert html_text.startswith("<!DOCTYPE html>")
        assert "<title>Photosynthesis Notes</title>" in html_text
        assert 'data-theme="modern-card"' in html_text
        assert "--primary-color: #0B2140;" in html_text

    def test_every_block_rendered(self, parsed, validated_document):
        assert list(parsed.texts) == [b.id for b in validated_document.blocks]

    def test_text_round_trip(self, parsed, validated_document):
        for block in validated_document.blocks:
            if block.type.value in ("heading", "paragraph", "quote", "code"):
                assert parsed.texts[block.id] == block.text

    def test_card_and_inline_classes(self, parsed):
        assert "card" in parsed.classes["p1"]
        assert "inline" in parsed.classes["p2"]

    def test_list_and_table(self, html_text):
        assert html_text.count("<li>") == 3
        assert "<ol class=\"block-list block-content\">" in html_text
        assert "<th>Stage</th>" in html_text
        assert "<td>Stroma</td>" in html_text

    def test_image_is_inlined(self, html_text):
        assert 'src="data:image/png;base64,' in html_text
        assert "Chloroplast diagram" in html_text


class TestAnnotations:

    def test_inline_markup(self, html_text):
        assert 'class="annotation-highlight" style="background-color: #fff3cd">Plants</span>' in html_text
        assert "<u>into</u>" in html_text
        assert "<s>details</s>" in html_text
        assert '<a href="https://example.org/photosynthesis" target="_blank" rel="noopener">reference article</a>' in html_text

    def test_footnote_reference_and_list(self, html_text):
        assert '<sup class="footnote-ref"><a href="#fn-1">1</a></sup>' in html_text
        assert '<li id="fn-1">Mostly red and blue wavelengths.</li>' in html_text

    def test_annotations_toggle(self, prepared, render):
        text = render(HTMLRenderer(), prepared, include_annotations=False).content.decode("utf-8")
        assert "annotation-highlight" not in text
        assert "<u>" not in text

    def test_no_orphan_notes_without_annotations(self, prepared, render):
        text = render(HTMLRenderer(), prepared, include_annotations=False, include_footnotes=True).content.decode("utf-8")
        assert "footnote-ref" not in text
        assert "Mostly red and blue wavelengths." not in text

    def test_footnotes_toggle(self, prepared, render):
        text = render(HTMLRenderer(), prepared, include_footnotes=False).content.decode("utf-8")
        assert 'class="footnotes"' not in text
        assert "footnote-ref" not in text


class TestPageFurniture:

    def test_toc(self, html_text):
        assert '<h2 class="toc-title">Table of Contents</h2>' in html_text
        assert '<a href="#block-h1">Key Concepts</a>' in html_text
        assert "toc-item emphasized" in html_text

    def test_toc_toggle(self, prepared, render):
        text = render(HTMLRenderer(), prepared, include_toc=False).content.decode("utf-8")
        assert "table-of-contents" not in text

    def test_page_numbers(self, prepared, render, html_text):
        assert f"Page 1 / {prepared.plan.page_count}" in html_text
        text = render(HTMLRenderer(), prepared, page_numbers=False).content.decode("utf-8")
        assert "page-number\">" not in text

    def test_visual_css(self, html_text):
        assert "background-image: linear-gradient(135deg, rgba(" in html_text
        assert "box-shadow: 3px 3px 5px rgba(0, 0, 0, 0.2)" in html_text
        assert "radial-gradient(rgba(0, 0, 0, 0.05)" in html_text
        assert 'class="watermark"' in html_text

    def test_icons(self, html_text):
        assert 'data-icon-type="concept"' in html_text
        assert 'data-icon-type="process"' in html_text

    def test_deterministic(self, prepared, render, html_output):
        assert render(HTMLRenderer(), prepared).content == html_output.content

    def test_no_warnings(self, html_output):
        assert html_output.warnings == ()

    def test_supports_format(self):
        assert HTMLRenderer.supports_format("html")
        assert HTMLRenderer.supports_format("markup")
        assert not HTMLRenderer.supports_format("pdf")
        assert HTMLRenderer.format == OutputFormat.MARKUP

    def test_every_format_has_a_renderer(self):
        assert set(RENDERERS) == set(OutputFormat)
        for output_format in OutputFormat:
            assert get_renderer(output_format).format == output_format


class TestSegmentation:

    def test_overlapping_annotations(self):
        highlight = Annotation(AnnotationType.HIGHLIGHT, (0, 6))
        underline = Annotation(AnnotationType.UNDERLINE, (3, 9))
        segments = segment_text("abcdefghij", (highlight, underline))

        assert [s.text for s in segments] == ["abc", "def", "ghi", "j"]
        assert segments[1].annotations == (highlight, underline)
        assert segments[3].annotations == ()

    def test_no_annotations(self):
        assert [s.text for s in segment_text("plain", ())] == ["plain"]
        assert segment_text("", ()) == []
