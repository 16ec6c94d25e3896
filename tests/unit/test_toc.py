"""
Unit tests for table of contents generation.
"""
import pytest

from core.contracts import ContractValidator, HeadingBlock, LayoutConfig
from core.layout import BlockFlowExecutor, build_toc, layout_weight, toc_to_text
from core.styling import StyleResolver


def _validated(payload):
    return ContractValidator().validate_or_raise(payload)


def _plan(validated):
    styles = StyleResolver().resolve_all(validated)
    return BlockFlowExecutor(LayoutConfig()).execute(validated, styles)


class TestOutlineToc:

    def test_entries_follow_outline(self, validated_document):
        entries = build_toc(validated_document)

        assert [e.title for e in entries] == ["Key Concepts", "Process Steps"]
        assert [e.level for e in entries] == [1, 2]
        assert entries[0].emphasized and not entries[1].emphasized
        assert all(e.page_number is None for e in entries)

    def test_page_numbers_from_plan(self, validated_document):
        entries = build_toc(validated_document, _plan(validated_document))
        assert entries[0].block_id == "h1"
        assert entries[0].page_number == 1

    def test_unlinked_outline_entry(self, sample_document):
        sample_document["outline"].append({"id": "appendix", "level": 1, "title": "Appendix"})
        validated = _validated(sample_document)

        entries = build_toc(validated, _plan(validated))

        assert entries[-1].block_id is None
        assert entries[-1].page_number is None


class TestHeadingFallback:

    def test_prominent_headings_only(self):
        validated = _validated({
            "meta": {"title": "No outline"},
            "blocks": [
                {"id": "a", "type": "heading", "level": 1, "text": "Important", "importance": 0.9},
                {"id": "b", "type": "heading", "level": 3, "text": "Minor", "importance": 0.2},
                {"id": "c", "type": "paragraph", "text": "Body", "importance": 1.0},
            ],
        })

        entries = build_toc(validated)

        assert [e.block_id for e in entries] == ["a"]

    def test_layout_weight(self):
        heading = HeadingBlock(id="h", text="T", level=1, importance=0.6)
        deeper = HeadingBlock(id="h", text="T", level=4, importance=0.6)
        assert layout_weight(heading) == pytest.approx(0.6 * (1 + 0.5 / 1.5))
        assert layout_weight(deeper) < layout_weight(heading)

    def test_empty_without_headings(self, minimal_document):
        assert build_toc(_validated(minimal_document)) == []


def test_toc_to_text(validated_document):
    text = toc_to_text(build_toc(validated_document, _plan(validated_document)))
    lines = text.splitlines()
    assert lines[0] == "Key Concepts ... 1"
    assert lines[1].startswith("  Process Steps")
