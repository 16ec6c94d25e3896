#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Unit Tests for Block Metrics and Block Flow Execution

Tests cover:
- Heading font size ladder and per-type height estimates
- Card vs inline placement
- Pagination and the oversize-block overflow policy
- Configuration errors raised before layout
"""

import math

import pytest

from config.constants import CARD_PADDING, PAGE_SIZES
from core.contracts import (
    ConfigurationError,
    ContractValidator,
    DocumentStyles,
    LayoutConfig,
    PageSize,
    ParagraphBlock,
    TableBlock,
    ListBlock,
    HeadingBlock,
    SeparatorBlock,
)
from core.layout import (
    BlockFlowExecutor,
    PlacementMode,
    chars_per_line,
    heading_font_size,
    measure_block,
)
from core.layout.metrics import image_size
from core.styling import StyleResolver


def _layout(payload, config=None):
    validated = ContractValidator().validate_or_raise(payload)
    styles = StyleResolver().resolve_all(validated)
    page_size = StyleResolver().resolve_document(validated.styles).page_size
    return BlockFlowExecutor(config or LayoutConfig(), page_size=page_size).execute(validated, styles)


def _paragraphs(count, words=20, importance=0.5):
    return {
        "meta": {"title": "Flow"},
        "blocks": [
            {"id": f"p{i}", "type": "paragraph", "text": " ".join(["word"] * words), "importance": importance}
            for i in range(count)
        ],
    }


class TestMetrics:

    def test_heading_ladder(self):
        config = LayoutConfig(base_font_size=10, scale_ratio=1.25)
        assert heading_font_size(6, config) == pytest.approx(10)
        assert heading_font_size(1, config) == pytest.approx(10 * 1.25 ** 5)
        sizes = [heading_font_size(level, config) for level in range(1, 7)]
        assert sizes == sorted(sizes, reverse=True)

    def test_chars_per_line_is_capped_by_max_line_length(self):
        config = LayoutConfig(max_line_length=40)
        block = ParagraphBlock(id="p", text="x")
        assert chars_per_line(block, 10, 1000, config) == 40
        assert chars_per_line(block, 10, 100, config) == 20

    def test_text_height_is_lines_times_line_height(self):
        config = LayoutConfig(max_line_length=20)
        style = StyleResolver().resolve(DocumentStyles())
        block = ParagraphBlock(id="p", text=" ".join(["abcd"] * 20))
        metrics = measure_block(block, style, config, 500)

        assert metrics.line_count == 5
        assert metrics.content_height == pytest.approx(5 * config.base_font_size * config.line_height)

    def test_list_height_sums_item_lines(self):
        config = LayoutConfig()
        style = StyleResolver().resolve(DocumentStyles())
        block = ListBlock(id="l", items=("one", "two", "three"))
        metrics = measure_block(block, style, config, 500)
        assert metrics.line_count == 3

    def test_table_height_counts_header_row(self):
        config = LayoutConfig()
        style = StyleResolver().resolve(DocumentStyles())
        block = TableBlock(id="t", headers=("a", "b"), rows=(("1", "2"), ("3", "4")))
        assert measure_block(block, style, config, 500).line_count == 3

    def test_separator_is_half_a_line(self):
        config = LayoutConfig()
        style = StyleResolver().resolve(DocumentStyles())
        metrics = measure_block(SeparatorBlock(id="s"), style, config, 500)
        assert metrics.content_height == pytest.approx(0.5 * config.base_font_size * config.line_height)

    def test_heading_is_taller_than_paragraph(self):
        config = LayoutConfig()
        style = StyleResolver().resolve(DocumentStyles())
        heading = measure_block(HeadingBlock(id="h", text="Title", level=1), style, config, 500)
        paragraph = measure_block(ParagraphBlock(id="p", text="Title"), style, config, 500)
        assert heading.content_height > paragraph.content_height

    def test_image_size(self, png_base64):
        assert image_size(png_base64) == (40, 20)
        assert image_size("not base64 !!") is None


class TestPlacement:

    def test_card_threshold(self):
        payload = {
            "meta": {"title": "Placement"},
            "blocks": [
                {"id": "h1", "type": "heading", "level": 1, "text": "Key Concepts", "importance": 0.5},
                {"id": "k1", "type": "paragraph", "text": "Energy flows from sunlight.", "importance": 0.9},
                {"id": "k2", "type": "paragraph", "text": "Chlorophyll is green.", "importance": 0.3},
            ],
        }
        plan = _layout(payload, LayoutConfig(card_threshold=0.7))

        assert plan.box_for("k1").mode == PlacementMode.CARD
        assert plan.box_for("k2").mode == PlacementMode.INLINE
        assert plan.box_for("k1").padding == CARD_PADDING

    def test_threshold_is_strict(self):
        plan = _layout(_paragraphs(1, importance=0.7), LayoutConfig(card_threshold=0.7))
        assert not plan.boxes[0].is_card

    def test_placement_ignores_neighbours(self):
        alone = _layout(_paragraphs(1, importance=0.8))
        crowded = _layout(_paragraphs(6, importance=0.8))
        assert alone.boxes[0].mode == crowded.boxes[3].mode == PlacementMode.CARD

    def test_boxes_follow_document_order(self, validated_document):
        styles = StyleResolver().resolve_all(validated_document)
        plan = BlockFlowExecutor(LayoutConfig()).execute(validated_document, styles)

        assert [b.block_id for b in plan.boxes] == [b.id for b in validated_document.blocks]
        positions = [(b.page_index, b.y) for b in plan.boxes]
        assert positions == sorted(positions)


class TestPagination:

    def test_single_page(self, minimal_document):
        plan = _layout(minimal_document)
        assert plan.page_count == 1
        assert plan.boxes[0].y == LayoutConfig().margin_top

    def test_empty_document_has_one_page(self):
        plan = _layout({"meta": {"title": "Empty"}, "blocks": []})
        assert plan.page_count == 1
        assert plan.boxes == ()

    def test_boxes_stay_within_margins(self):
        config = LayoutConfig()
        plan = _layout(_paragraphs(60), config)
        height = PAGE_SIZES["A4"][1]

        assert plan.page_count > 1
        for box in plan.boxes:
            assert box.y >= config.margin_top
            assert box.bottom <= height - config.margin_bottom + 1e-6

    def test_every_page_is_used(self):
        plan = _layout(_paragraphs(60))
        assert {b.page_index for b in plan.boxes} == set(range(plan.page_count))

    def test_oversize_block_overflows_its_own_page(self):
        config = LayoutConfig()
        payload = {
            "meta": {"title": "Oversize"},
            "blocks": [
                {"id": "before", "type": "paragraph", "text": "Short."},
                {"id": "huge", "type": "paragraph", "text": " ".join(["word"] * 4000)},
                {"id": "after", "type": "paragraph", "text": "Short again."},
            ],
        }
        plan = _layout(payload, config)

        huge = plan.box_for("huge")
        assert huge.overflow
        assert huge.page_index == 1
        assert huge.y == config.margin_top
        assert plan.box_for("after").page_index == 2
        assert plan.page_count == 3

    def test_page_size_from_styles(self, minimal_document):
        minimal_document["styles"] = {"theme": "classic-report"}
        plan = _layout(minimal_document)
        assert (plan.page_width, plan.page_height) == PAGE_SIZES[PageSize.LETTER.value]

    def test_narrower_lines_make_more_lines(self):
        text = {"meta": {"title": "W"}, "blocks": [{"id": "p", "type": "paragraph", "text": "word " * 100}]}
        wide = _layout(text, LayoutConfig(max_line_length=70)).boxes[0]
        narrow = _layout(text, LayoutConfig(max_line_length=35)).boxes[0]
        assert narrow.line_count > wide.line_count
        assert wide.line_count >= math.ceil(len(("word " * 100).strip()) / 70)


class TestConfiguration:

    def test_invalid_config_raises_before_layout(self):
        with pytest.raises(ConfigurationError):
            BlockFlowExecutor(LayoutConfig(line_height=0))

    def test_margins_larger_than_page(self):
        with pytest.raises(ConfigurationError):
            BlockFlowExecutor(LayoutConfig(margin_top=300, margin_bottom=300), page_size=PageSize.A5)
