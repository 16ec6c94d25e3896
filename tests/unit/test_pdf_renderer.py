#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Unit Tests for the PDF (print-paginated) Backend

Tests cover:
- Valid PDF output and physical page count
- TOC and Notes pages
- Deterministic output
- Recovered fallbacks reported as warnings
"""

import re

import pytest

from core.contracts import Color, ContractValidator, LayoutConfig, OutputFormat, RenderBackendError, RenderOptions
from core.layout import LayoutAgent, PDFRenderer
from core.layout.renderer.pdf_renderer import FontRegistry, _interpolate

PAGE_OBJECT = re.compile(rb"/Type /Page\b")


def page_count(pdf: bytes) -> int:
    return len(PAGE_OBJECT.findall(pdf))


@pytest.fixture
def pdf_output(prepared, render):
    return render(PDFRenderer(), prepared)


class TestPDFOutput:

    def test_is_pdf(self, pdf_output):
        assert pdf_output.content.startswith(b"%PDF-")
        assert pdf_output.content.rstrip().endswith(b"%%EOF")

    def test_page_count_includes_toc_and_notes(self, prepared, pdf_output):
        # one TOC page + layout pages + one Notes page
        assert page_count(pdf_output.content) == prepared.plan.page_count + 2

    def test_toggles_drop_extra_pages(self, prepared, render):
        output = render(PDFRenderer(), prepared, include_toc=False, include_footnotes=False)
        assert page_count(output.content) == prepared.plan.page_count

    def test_no_notes_page_without_annotations(self, prepared, render):
        output = render(PDFRenderer(), prepared, include_annotations=False, include_footnotes=True)
        # TOC page only
        assert page_count(output.content) == prepared.plan.page_count + 1

    def test_title_metadata(self, pdf_output):
        assert b"Photosynthesis Notes" in pdf_output.content

    def test_link_annotation(self, pdf_output):
        assert b"https://example.org/photosynthesis" in pdf_output.content

    def test_deterministic(self, prepared, render, pdf_output):
        assert render(PDFRenderer(), prepared).content == pdf_output.content

    def test_multi_page_document(self):
        payload = {
            "meta": {"title": "Long"},
            "blocks": [
                {"id": f"p{i}", "type": "paragraph", "text": " ".join(["lorem"] * 60)}
                for i in range(40)
            ],
        }
        result = LayoutAgent().process(payload, LayoutConfig(), RenderOptions(format=OutputFormat.PRINT_PAGINATED))

        assert result.ok
        assert result.plan.page_count > 1
        assert page_count(result.content) == result.plan.page_count

    def test_oversize_block_still_renders(self):
        payload = {
            "meta": {"title": "Oversize"},
            "blocks": [{"id": "huge", "type": "paragraph", "text": " ".join(["word"] * 4000)}],
        }
        result = LayoutAgent().process(payload, None, {"format": "pdf"})

        assert result.ok
        assert result.plan.boxes[0].overflow


class TestFallbackWarnings:

    def test_missing_fonts_are_reported(self, pdf_output):
        assert any("font 'Roboto' is not available" in w for w in pdf_output.warnings)

    def test_icons_drawn_as_discs(self, pdf_output):
        assert "icon symbols drawn as lettered discs" in pdf_output.warnings

    def test_icon_discs_follow_their_block(self, prepared, render, monkeypatch):
        from reportlab.pdfgen.canvas import Canvas

        drawn = []
        original = Canvas.circle

        def recording_circle(self, x, y, r, *args, **kwargs):
            drawn.append((x, y, r))
            return original(self, x, y, r, *args, **kwargs)

        monkeypatch.setattr(Canvas, "circle", recording_circle)
        render(PDFRenderer(), prepared)

        plan = prepared.plan
        targets = [(icon, plan.box_for(icon.target_id)) for icon in prepared.visuals.icons]
        targets = [(icon, box) for icon, box in targets if box is not None]
        assert targets
        for icon, box in targets:
            center_y = plan.page_height - (box.content_y + box.font_size / 2)
            assert (icon.x, center_y, icon.size / 2) in drawn

    def test_undecodable_image_becomes_placeholder(self):
        payload = {
            "meta": {"title": "Broken image"},
            "blocks": [{"id": "img", "type": "image", "mime": "image/png", "data": "bm90IGFuIGltYWdl"}],
        }
        result = LayoutAgent().process(payload, None, {"format": "pdf"})

        assert result.ok
        assert any(w.startswith("block 'img': image could not be decoded") for w in result.warnings)

    def test_remote_image_placeholder(self):
        payload = {
            "meta": {"title": "Remote image"},
            "blocks": [{"id": "img", "type": "image", "url": "https://example.org/a.png", "caption": "Remote"}],
        }
        result = LayoutAgent().process(payload, None, {"format": "pdf"})

        assert result.ok
        assert "block 'img': remote image not embedded; drawn as a placeholder" in result.warnings

    def test_unencodable_text_is_replaced(self):
        payload = {
            "meta": {"title": "Unicode"},
            "blocks": [{"id": "p", "type": "paragraph", "text": "Quang hợp ở thực vật"}],
        }
        result = LayoutAgent().process(payload, None, {"format": "pdf"})

        assert result.ok
        assert any("characters outside the" in w for w in result.warnings)

    def test_narrow_table_cells_are_truncated(self):
        payload = {
            "meta": {"title": "Table"},
            "blocks": [{
                "id": "t",
                "type": "table",
                "headers": [f"h{i}" for i in range(8)],
                "rows": [["a very long cell value that cannot fit"] * 8],
            }],
        }
        result = LayoutAgent().process(payload, None, {"format": "pdf"})

        assert result.ok
        assert "block 't': table cell text truncated to the column width" in result.warnings


class TestHelpers:

    @pytest.mark.parametrize("family,expected", [
        ("Roboto", "sans"),
        ("Times New Roman", "serif"),
        ("Georgia", "serif"),
        ("JetBrains Mono", "mono"),
    ])
    def test_generic_family(self, family, expected):
        assert FontRegistry.generic_family(family) == expected

    def test_builtin_font_names(self):
        assert FontRegistry.is_builtin("Helvetica-Bold")
        assert not FontRegistry.is_builtin("Roboto")

    def test_interpolate(self):
        stops = (Color.rgb(0, 0, 0), Color.rgb(1, 1, 1))
        assert _interpolate(stops, 0.0) == stops[0]
        assert _interpolate(stops, 1.0) == stops[1]
        assert _interpolate(stops, 0.5) == Color.rgb(0.5, 0.5, 0.5)

    def test_font_dir_without_files_falls_back(self, tmp_path, prepared, render):
        output = render(PDFRenderer(font_dir=tmp_path), prepared)
        assert output.content.startswith(b"%PDF-")
        assert any("is not available" in w for w in output.warnings)


def test_renders_validated_document_directly(sample_document):
    validated = ContractValidator().validate_or_raise(sample_document)
    result = LayoutAgent().process(validated, None, {"format": "print-paginated", "includeTOC": False})
    assert result.ok
    assert result.format == OutputFormat.PRINT_PAGINATED


class TestBackendFailure:

    def test_unexpected_error_names_the_block(self, prepared, render, monkeypatch):
        def broken(self, c, ctx, block, box, style):
            raise RuntimeError("glyph table corrupted")

        monkeypatch.setattr(PDFRenderer, "_draw_code", broken)

        with pytest.raises(RenderBackendError) as exc_info:
            render(PDFRenderer(), prepared)

        assert exc_info.value.block_id == "c1"
        assert exc_info.value.format == "print-paginated"
        assert "glyph table corrupted" in str(exc_info.value)

    def test_agent_reports_failure(self, sample_document, monkeypatch):
        def broken(self, c, ctx, block, box, style):
            raise RuntimeError("glyph table corrupted")

        monkeypatch.setattr(PDFRenderer, "_draw_code", broken)
        result = LayoutAgent().process(sample_document, None, {"format": "pdf"})

        assert not result.ok
        assert result.error_block_id == "c1"
        assert result.plan is not None
        assert result.content == b""
