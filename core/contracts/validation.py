#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Contract Validation Layer

Checks the structural invariants of a Document and produces the
ValidatedDocument that layout and rendering accept.

Validation never short-circuits: every violation is collected so the
caller gets the complete list in one pass.

Version: 1.0.0
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Union
import logging

from config.constants import MAX_HEADING_LEVEL
from .base import DocumentValidationError, SchemaViolation
from .colors import is_color
from .document import (
    AnnotationType,
    Block,
    BlockType,
    Document,
    HeadingBlock,
    ImageBlock,
    TableBlock,
)

logger = logging.getLogger(__name__)


def _in_unit_range(value: float) -> bool:
    return 0.0 <= value <= 1.0


def _check_block(block: Block, path: str, ann_paths: Sequence[str]) -> List[SchemaViolation]:
    violations = []

    if not _in_unit_range(block.importance):
        violations.append(SchemaViolation(
            f"{path}.importance",
            f"importance must be within [0, 1], got {block.importance}",
            "out_of_range",
        ))

    if isinstance(block, HeadingBlock) and not 1 <= block.level <= MAX_HEADING_LEVEL:
        violations.append(SchemaViolation(
            f"{path}.level",
            f"heading level must be 1..{MAX_HEADING_LEVEL}, got {block.level}",
            "out_of_range",
        ))

    if isinstance(block, ImageBlock):
        if not block.data and not block.url:
            violations.append(SchemaViolation(path, "image needs either data or url", "missing"))
        if block.data and not block.mime:
            violations.append(SchemaViolation(f"{path}.mime", "mime is required with inline data", "missing"))

    if isinstance(block, TableBlock) and block.headers:
        width = len(block.headers)
        for i, row in enumerate(block.rows):
            if len(row) != width:
                violations.append(SchemaViolation(
                    f"{path}.rows[{i}]",
                    f"row has {len(row)} cells, headers have {width}",
                    "shape",
                ))

    if block.style_hints is not None and block.style_hints.background is not None:
        if not is_color(block.style_hints.background):
            violations.append(SchemaViolation(
                f"{path}.styleHints.background",
                f"not a color: {block.style_hints.background!r}",
            ))

    text_length = len(block.annotatable_text)
    for i, annotation in enumerate(block.annotations):
        ann_path = ann_paths[i] if i < len(ann_paths) else f"{path}.annotations[{i}]"
        start, end = annotation.span
        if block.type not in (BlockType.HEADING, BlockType.PARAGRAPH, BlockType.QUOTE, BlockType.CODE):
            violations.append(SchemaViolation(
                f"{ann_path}.span",
                f"{block.type.value} blocks have no text to annotate",
                "span",
            ))
        elif not 0 <= start < end <= text_length:
            violations.append(SchemaViolation(
                f"{ann_path}.span",
                f"span [{start}, {end}] must satisfy 0 <= start < end <= {text_length}",
                "span",
            ))

        if annotation.type == AnnotationType.LINK and not annotation.url:
            violations.append(SchemaViolation(f"{ann_path}.url", "link annotation needs a url", "missing"))
        if annotation.type == AnnotationType.NOTE and not annotation.note:
            violations.append(SchemaViolation(f"{ann_path}.note", "note annotation needs note text", "missing"))
        if annotation.color is not None and not is_color(annotation.color):
            violations.append(SchemaViolation(f"{ann_path}.color", f"not a color: {annotation.color!r}"))

    return violations


def collect_violations(
    document: Document,
    block_paths: Optional[Sequence[str]] = None,
    outline_paths: Optional[Sequence[str]] = None,
    annotation_paths: Optional[Sequence[Sequence[str]]] = None,
) -> List[SchemaViolation]:
    """
    Check every structural invariant of a document.

    Args:
        document: Parsed document
        block_paths: Original input location of each block (defaults to blocks[i])
        outline_paths: Original input location of each outline entry
        annotation_paths: Original input location of each block's annotations

    Returns:
        All violations, in document order (empty if valid)
    """
    violations: List[SchemaViolation] = []

    if not document.meta.title.strip():
        violations.append(SchemaViolation("meta.title", "title must not be empty", "missing"))

    seen_outline: Dict[str, str] = {}
    for i, entry in enumerate(document.outline):
        path = outline_paths[i] if outline_paths else f"outline[{i}]"
        if entry.id in seen_outline:
            violations.append(SchemaViolation(
                f"{path}.id",
                f"duplicate outline id '{entry.id}' (first at {seen_outline[entry.id]})",
                "duplicate",
            ))
        else:
            seen_outline[entry.id] = path
        if not 1 <= entry.level <= MAX_HEADING_LEVEL:
            violations.append(SchemaViolation(
                f"{path}.level",
                f"outline level must be 1..{MAX_HEADING_LEVEL}, got {entry.level}",
                "out_of_range",
            ))
        if not _in_unit_range(entry.weight):
            violations.append(SchemaViolation(
                f"{path}.weight",
                f"weight must be within [0, 1], got {entry.weight}",
                "out_of_range",
            ))

    seen_blocks: Dict[str, str] = {}
    for i, block in enumerate(document.blocks):
        path = block_paths[i] if block_paths else f"blocks[{i}]"
        if block.id in seen_blocks:
            violations.append(SchemaViolation(
                f"{path}.id",
                f"duplicate block id '{block.id}' (first at {seen_blocks[block.id]})",
                "duplicate",
            ))
        else:
            seen_blocks[block.id] = path
        ann_paths = annotation_paths[i] if annotation_paths else []
        violations.extend(_check_block(block, path, ann_paths))

    palette = document.styles.palette
    if palette is not None:
        if not palette:
            violations.append(SchemaViolation("styles.palette", "palette must not be empty", "missing"))
        for i, entry in enumerate(palette):
            if not is_color(entry):
                violations.append(SchemaViolation(f"styles.palette[{i}]", f"not a color: {entry!r}"))

    return violations


@dataclass(frozen=True)
class ValidatedDocument:
    """
    A Document that passed every invariant.

    Only ContractValidator builds these; layout and rendering accept
    nothing else.
    """
    document: Document
    checksum: str

    @property
    def meta(self):
        return self.document.meta

    @property
    def blocks(self):
        return self.document.blocks

    @property
    def outline(self):
        return self.document.outline

    @property
    def styles(self):
        return self.document.styles


class ContractValidator:
    """
    Validates documents before layout.

    Usage:
        validator = ContractValidator()

        # Collect problems
        violations = validator.validate(document_or_mapping)

        # Validate and raise error
        validated = validator.validate_or_raise(document_or_mapping)
    """

    def validate(self, document: Union[Document, Dict[str, Any]]) -> List[SchemaViolation]:
        """
        Validate a document or a raw mapping.

        Returns:
            List of violations (empty if valid)
        """
        if isinstance(document, Document):
            violations = collect_violations(document)
        else:
            from .loader import load_document
            _, violations = load_document(document)

        if violations:
            logger.warning(f"Document validation failed with {len(violations)} violation(s)")
        return violations

    def validate_or_raise(self, document: Union[Document, Dict[str, Any]]) -> ValidatedDocument:
        """
        Validate and wrap.

        Raises:
            DocumentValidationError: If any invariant is broken
        """
        if isinstance(document, Document):
            violations = collect_violations(document)
        else:
            from .loader import load_document
            document, violations = load_document(document)

        if violations:
            logger.warning(f"Document validation failed with {len(violations)} violation(s)")
            raise DocumentValidationError(violations)

        validated = ValidatedDocument(document=document, checksum=document.checksum())
        logger.info(
            f"Document validated: '{document.meta.title}' "
            f"({len(document.blocks)} blocks, checksum {validated.checksum})"
        )
        return validated

    def verify_checksum(self, validated: ValidatedDocument) -> bool:
        actual = validated.document.checksum()
        if actual != validated.checksum:
            logger.warning(f"Checksum mismatch: expected {validated.checksum}, got {actual}")
            return False
        return True


def validate_document(document: Union[Document, Dict[str, Any]]) -> ValidatedDocument:
    """Shortcut for ContractValidator().validate_or_raise(document)"""
    return ContractValidator().validate_or_raise(document)


def create_document_summary(document: Document) -> Dict[str, Any]:
    """
    Human-readable summary of a document, as returned by the validate
    endpoint and CLI command.
    """
    annotations = sum(len(b.annotations) for b in document.blocks)
    return {
        "title": document.meta.title,
        "totalBlocks": len(document.blocks),
        "blockTypes": document.count_by_type(),
        "outlineEntries": len(document.outline),
        "annotations": annotations,
        "theme": document.styles.theme.value,
        "hasImages": any(b.type == BlockType.IMAGE for b in document.blocks),
        "checksum": document.checksum(),
    }
