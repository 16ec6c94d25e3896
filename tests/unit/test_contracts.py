#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Unit Tests for Document Contracts

Tests cover:
- Parsing mappings into typed blocks
- Collecting every violation in one pass
- Annotation span, heading level and table shape invariants
- ValidatedDocument construction and checksums
"""

import copy

import pytest

from core.contracts import (
    BlockType,
    ContractValidator,
    Document,
    DocumentValidationError,
    HeadingBlock,
    ListBlock,
    PageSize,
    Theme,
    ValidatedDocument,
    create_document_summary,
    load_document,
    parse_document,
)


def _paths(violations):
    return {v.path for v in violations}


class TestParsing:
    """Mapping -> Document"""

    def test_every_block_type_has_a_class(self):
        from core.contracts.document import BLOCK_CLASSES

        assert set(BLOCK_CLASSES) == set(BlockType)
        assert all(cls.__name__.endswith("Block") for cls in BLOCK_CLASSES.values())

    def test_parses_every_block_type(self, sample_document):
        document, violations = load_document(sample_document)

        assert violations == []
        assert [b.type for b in document.blocks] == [
            BlockType.HEADING, BlockType.PARAGRAPH, BlockType.PARAGRAPH, BlockType.HEADING,
            BlockType.LIST, BlockType.QUOTE, BlockType.CODE, BlockType.TABLE,
            BlockType.SEPARATOR, BlockType.IMAGE,
        ]
        heading = document.blocks[0]
        assert isinstance(heading, HeadingBlock)
        assert heading.level == 1
        assert isinstance(document.blocks[4], ListBlock)
        assert document.blocks[4].items == ("Light absorption", "Water splitting", "Carbon fixation")

    def test_defaults(self, minimal_document):
        document, violations = load_document(minimal_document)

        assert violations == []
        assert document.blocks[0].importance == 0.5
        assert document.styles.theme == Theme.MODERN_CARD
        assert document.meta.language == "en"
        assert document.outline == ()

    def test_camel_and_snake_case_keys(self, minimal_document):
        minimal_document["styles"] = {"theme": "academic", "page_size": "Letter", "fontPair": {"body": "Georgia"}}
        minimal_document["blocks"][0]["style_hints"] = {"align": "center"}

        document, violations = load_document(minimal_document)

        assert violations == []
        assert document.styles.page_size == PageSize.LETTER
        assert document.styles.font_pair.body == "Georgia"
        assert document.blocks[0].style_hints.align.value == "center"

    def test_round_trip_through_dict(self, sample_document):
        document = Document.from_dict(sample_document)
        again = Document.from_dict(document.to_dict())

        assert again == document
        assert again.checksum() == document.checksum()

    def test_from_dict_raises_on_parse_problems(self):
        with pytest.raises(DocumentValidationError) as exc_info:
            Document.from_dict({"meta": {"title": "T"}, "blocks": [{"id": "x", "type": "video"}]})

        assert "blocks[0].type" in _paths(exc_info.value.violations)

    def test_non_mapping_root(self):
        parsed = parse_document(["not", "a", "document"])
        assert _paths(parsed.parse_violations) == {"$"}


class TestViolations:
    """Every violation is reported at once"""

    def test_inverted_span_is_reported_with_its_path(self, minimal_document):
        minimal_document["blocks"][0]["annotations"] = [{"type": "highlight", "span": [10, 5]}]

        _, violations = load_document(minimal_document)

        assert len(violations) == 1
        assert violations[0].path == "blocks[0].annotations[0].span"
        assert violations[0].code == "span"

    def test_span_past_end_of_text(self, minimal_document):
        text = minimal_document["blocks"][0]["text"]
        minimal_document["blocks"][0]["annotations"] = [{"type": "underline", "span": [0, len(text) + 1]}]

        _, violations = load_document(minimal_document)

        assert _paths(violations) == {"blocks[0].annotations[0].span"}

    def test_span_covering_whole_text_is_valid(self, minimal_document):
        text = minimal_document["blocks"][0]["text"]
        minimal_document["blocks"][0]["annotations"] = [{"type": "underline", "span": [0, len(text)]}]

        _, violations = load_document(minimal_document)

        assert violations == []

    def test_collects_all_problems_without_short_circuit(self, sample_document):
        doc = copy.deepcopy(sample_document)
        doc["meta"]["title"] = "  "
        doc["blocks"][0]["level"] = 7
        doc["blocks"][1]["importance"] = 1.5
        doc["blocks"][2]["id"] = "p1"
        doc["blocks"][7]["rows"].append(["only one cell"])
        doc["outline"][1]["weight"] = -0.1

        _, violations = load_document(doc)

        assert _paths(violations) == {
            "meta.title",
            "blocks[0].level",
            "blocks[1].importance",
            "blocks[2].id",
            "blocks[7].rows[2]",
            "outline[1].weight",
        }

    def test_paths_survive_dropped_blocks(self, minimal_document):
        minimal_document["blocks"].insert(0, {"id": "bad", "type": "unknown"})
        minimal_document["blocks"][1]["importance"] = 2

        _, violations = load_document(minimal_document)

        assert _paths(violations) == {"blocks[0].type", "blocks[1].importance"}

    def test_image_needs_a_source(self):
        _, violations = load_document({
            "meta": {"title": "T"},
            "blocks": [
                {"id": "i1", "type": "image"},
                {"id": "i2", "type": "image", "data": "AAAA"},
            ],
        })

        assert _paths(violations) == {"blocks[0]", "blocks[1].mime"}

    def test_annotation_requirements(self, minimal_document):
        minimal_document["blocks"][0]["annotations"] = [
            {"type": "link", "span": [0, 5]},
            {"type": "note", "span": [0, 5]},
            {"type": "highlight", "span": [0, 5], "color": "not-a-color"},
        ]

        _, violations = load_document(minimal_document)

        assert _paths(violations) == {
            "blocks[0].annotations[0].url",
            "blocks[0].annotations[1].note",
            "blocks[0].annotations[2].color",
        }

    def test_annotations_on_non_text_blocks(self):
        _, violations = load_document({
            "meta": {"title": "T"},
            "blocks": [{
                "id": "l1", "type": "list", "items": ["a"],
                "annotations": [{"type": "highlight", "span": [0, 1]}],
            }],
        })

        assert _paths(violations) == {"blocks[0].annotations[0].span"}

    def test_wrong_types_are_reported(self):
        _, violations = load_document({
            "meta": {"title": 3},
            "blocks": [{"id": "p", "type": "paragraph", "text": "x", "importance": "high"}],
            "styles": {"theme": "neon", "palette": []},
        })

        paths = _paths(violations)
        assert "meta.title" in paths
        assert "blocks[0].importance" in paths
        assert "styles.theme" in paths
        assert "styles.palette" in paths

    def test_duplicate_outline_ids(self, sample_document):
        sample_document["outline"][1]["id"] = "h1"

        _, violations = load_document(sample_document)

        assert [v.code for v in violations] == ["duplicate"]


class TestContractValidator:
    """ContractValidator produces ValidatedDocument"""

    def test_validate_or_raise(self, sample_document):
        validated = ContractValidator().validate_or_raise(sample_document)

        assert isinstance(validated, ValidatedDocument)
        assert validated.checksum == validated.document.checksum()
        assert ContractValidator().verify_checksum(validated)

    def test_validate_or_raise_lists_every_violation(self, sample_document):
        sample_document["blocks"][0]["importance"] = -1
        sample_document["blocks"][1]["importance"] = 2

        with pytest.raises(DocumentValidationError) as exc_info:
            ContractValidator().validate_or_raise(sample_document)

        assert len(exc_info.value.violations) == 2

    def test_validate_typed_document(self, sample_document):
        document = Document.from_dict(sample_document)
        assert ContractValidator().validate(document) == []
        assert document.is_valid()

    def test_checksum_is_stable(self, sample_document):
        a = ContractValidator().validate_or_raise(sample_document)
        b = ContractValidator().validate_or_raise(copy.deepcopy(sample_document))
        assert a.checksum == b.checksum

    def test_summary(self, validated_document):
        summary = create_document_summary(validated_document.document)

        assert summary["title"] == "Photosynthesis Notes"
        assert summary["totalBlocks"] == 10
        assert summary["blockTypes"]["paragraph"] == 2
        assert summary["annotations"] == 5
        assert summary["hasImages"] is True
