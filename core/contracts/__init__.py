#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Document Contracts Module

Defines the formal contract between the content-generation step and the
layout core:
- Document (meta, outline, typed blocks, styles) -> ValidatedDocument
- LayoutConfig / RenderOptions -> parameters of one render request

Usage:
    from core.contracts import (
        Document,
        ContractValidator,
        load_document,
    )

    # Parse and collect every problem at once
    document, violations = load_document(payload)

    # Validate and wrap
    validator = ContractValidator()
    validated = validator.validate_or_raise(document)

    # Serialize
    json_str = document.to_json()

Version: 1.0.0
"""

from .base import (
    BaseContract,
    ContractError,
    SchemaViolation,
    DocumentValidationError,
    ConfigurationError,
    RenderBackendError,
    calculate_checksum,
)

from .colors import (
    Color,
    parse_color,
    is_color,
    contrast_ratio,
)

from .document import (
    Document,
    DocumentMeta,
    DocumentSource,
    SourceType,
    OutlineEntry,
    Annotation,
    AnnotationType,
    StyleHints,
    Alignment,
    Emphasis,
    SizeBucket,
    Block,
    BlockType,
    TextBlock,
    HeadingBlock,
    ParagraphBlock,
    QuoteBlock,
    CodeBlock,
    ListBlock,
    ImageBlock,
    TableBlock,
    SeparatorBlock,
    BLOCK_CLASSES,
    DocumentStyles,
    FontPair,
    Theme,
    Spacing,
    PageSize,
)

from .options import (
    LayoutConfig,
    RenderOptions,
    OutputFormat,
)

from .loader import (
    ParsedDocument,
    parse_document,
    load_document,
)

from .validation import (
    ContractValidator,
    ValidatedDocument,
    collect_violations,
    validate_document,
    create_document_summary,
)

__all__ = [
    # Base
    "BaseContract",
    "ContractError",
    "SchemaViolation",
    "DocumentValidationError",
    "ConfigurationError",
    "RenderBackendError",
    "calculate_checksum",

    # Colors
    "Color",
    "parse_color",
    "is_color",
    "contrast_ratio",

    # Document
    "Document",
    "DocumentMeta",
    "DocumentSource",
    "SourceType",
    "OutlineEntry",
    "Annotation",
    "AnnotationType",
    "StyleHints",
    "Alignment",
    "Emphasis",
    "SizeBucket",
    "Block",
    "BlockType",
    "TextBlock",
    "HeadingBlock",
    "ParagraphBlock",
    "QuoteBlock",
    "CodeBlock",
    "ListBlock",
    "ImageBlock",
    "TableBlock",
    "SeparatorBlock",
    "BLOCK_CLASSES",
    "DocumentStyles",
    "FontPair",
    "Theme",
    "Spacing",
    "PageSize",

    # Options
    "LayoutConfig",
    "RenderOptions",
    "OutputFormat",

    # Loading & validation
    "ParsedDocument",
    "parse_document",
    "load_document",
    "ContractValidator",
    "ValidatedDocument",
    "collect_violations",
    "validate_document",
    "create_document_summary",
]

__version__ = "1.0.0"
