#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Integration Tests for the Layout Agent

Tests cover:
- End-to-end rendering in every output format
- Violations reported instead of output
- Configuration failures before layout
- Multi-format export sharing one layout pass
- Template override of the document theme
"""

import pytest

from core.contracts import (
    ConfigurationError,
    LayoutConfig,
    OutputFormat,
    RenderOptions,
    Theme,
)
from core.layout import LayoutAgent, render_document


class TestProcess:

    @pytest.mark.parametrize("output_format", list(OutputFormat))
    def test_every_format(self, agent, sample_document, output_format):
        result = agent.process(sample_document, LayoutConfig(), RenderOptions(format=output_format))

        assert result.ok, result.error
        assert result.format == output_format
        assert result.content
        assert result.media_type == output_format.media_type
        assert result.violations == []
        assert result.checksum

    def test_invalid_span_reports_violation(self, agent):
        payload = {
            "meta": {"title": "Broken"},
            "blocks": [{
                "id": "p1",
                "type": "paragraph",
                "text": "Some paragraph text",
                "annotations": [{"type": "highlight", "span": [10, 5]}],
            }],
        }
        result = agent.process(payload, None, {"format": "pdf"})

        assert not result.ok
        assert result.content == b""
        assert [(v.path, v.code) for v in result.violations] == [("blocks[0].annotations[0].span", "span")]
        assert result.plan is None

    def test_all_violations_reported_together(self, agent):
        payload = {
            "meta": {},
            "blocks": [
                {"id": "a", "type": "paragraph", "text": "x", "importance": 2},
                {"id": "a", "type": "heading", "text": "y", "level": 9},
            ],
        }
        result = agent.process(payload)

        assert not result.ok
        assert len(result.violations) >= 4

    def test_invalid_config_rejected_before_layout(self, agent, sample_document):
        result = agent.process(sample_document, {"cardThreshold": 1.5}, {"format": "html"})

        assert not result.ok
        assert result.plan is None
        assert "card_threshold" in result.error

    def test_string_toggle_rejected(self, agent, sample_document):
        result = agent.process(sample_document, None, {"format": "html", "includeTOC": "false"})

        assert not result.ok
        assert result.plan is None
        assert "include_toc must be a boolean" in result.error

    def test_unknown_format_rejected(self, agent, sample_document):
        result = agent.process(sample_document, None, {"format": "rtf"})

        assert not result.ok
        assert "unknown format 'rtf'" in result.error

    def test_to_dict(self, agent, sample_document):
        data = agent.process(sample_document, None, {"format": "html"}).to_dict()

        assert data["ok"] is True
        assert data["format"] == "markup"
        assert data["pageCount"] >= 1
        assert data["size"] > 0

    def test_same_input_same_output(self, sample_document):
        first = LayoutAgent().process(sample_document, None, {"format": "pdf"})
        second = LayoutAgent().process(sample_document, None, {"format": "pdf"})
        assert first.content == second.content


class TestRenderMany:

    def test_shared_layout(self, agent, sample_document):
        results = agent.render_many(sample_document, ["pdf", "print-paginated", "html", "docx"])

        assert list(results) == [OutputFormat.PRINT_PAGINATED, OutputFormat.MARKUP, OutputFormat.FLOW_DOCUMENT]
        assert all(r.ok for r in results.values())
        plans = {id(r.plan) for r in results.values()}
        assert len(plans) == 1

    def test_unknown_format_raises(self, agent, sample_document):
        with pytest.raises(ConfigurationError):
            agent.render_many(sample_document, ["pdf", "odt"])

    def test_invalid_document_fails_every_format(self, agent):
        results = agent.render_many({"meta": {"title": "x"}, "blocks": "nope"}, ["pdf", "html"])

        assert set(results) == {OutputFormat.PRINT_PAGINATED, OutputFormat.MARKUP}
        assert all(not r.ok and r.violations for r in results.values())


class TestTemplates:

    def test_template_overrides_theme(self, agent, validated_document):
        options = RenderOptions(template="classic-report")
        prepared = agent.prepare(validated_document, LayoutConfig(), options)

        assert prepared.validated.styles.theme == Theme.CLASSIC_REPORT
        assert (prepared.plan.page_width, prepared.plan.page_height) == pytest.approx((612, 792))
        assert prepared.validated.checksum != validated_document.checksum

    def test_unknown_template_keeps_theme(self, agent, validated_document):
        prepared = agent.prepare(validated_document, LayoutConfig(), RenderOptions(template="nope"))
        assert prepared.validated.styles.theme == Theme.MODERN_CARD

    def test_template_in_markup(self, agent, sample_document):
        result = agent.process(sample_document, None, {"format": "html", "template": "academic"})
        assert b'data-theme="academic"' in result.content


class TestRenderDocument:

    def test_camel_case_mappings(self, sample_document):
        result = render_document(
            sample_document,
            {"baseFontSize": 12, "cardThreshold": 0.5},
            {"format": "markup", "includeTOC": False, "designStyle": "minimal"},
        )

        assert result.ok
        assert b"table-of-contents" not in result.content
        # importance 0.6 only clears the lowered threshold
        assert result.plan.box_for("h2").is_card

    def test_defaults(self, minimal_document):
        result = render_document(minimal_document)

        assert result.ok
        assert result.format == OutputFormat.MARKUP
