#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Document Loader

Turns a JSON-like mapping (as produced by the content-generation step)
into a typed Document. Problems are collected, not raised: an element
that cannot be built at all is dropped and reported, everything else is
kept so invariant validation can still run over it.

Keys follow the camelCase wire format (styleHints, fontPair, pageSize);
snake_case spellings are accepted as well.

Version: 1.0.0
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple, Type, TypeVar
import logging

from .base import SchemaViolation
from .document import (
    Alignment,
    Annotation,
    AnnotationType,
    Block,
    BLOCK_CLASSES,
    BlockType,
    Document,
    DocumentMeta,
    DocumentSource,
    DocumentStyles,
    Emphasis,
    FontPair,
    OutlineEntry,
    PageSize,
    SizeBucket,
    SourceType,
    Spacing,
    StyleHints,
    Theme,
)

logger = logging.getLogger(__name__)

E = TypeVar('E', bound=Enum)

TEXT_BLOCK_TYPES = (BlockType.HEADING, BlockType.PARAGRAPH, BlockType.QUOTE, BlockType.CODE)


@dataclass
class ParsedDocument:
    """
    Result of parsing a mapping.

    ``block_paths`` / ``outline_paths`` / ``annotation_paths`` give the
    original location of every element that survived parsing, so invariant
    violations point at the caller's input even when elements were dropped.
    """
    document: Document
    parse_violations: List[SchemaViolation] = field(default_factory=list)
    block_paths: List[str] = field(default_factory=list)
    outline_paths: List[str] = field(default_factory=list)
    annotation_paths: List[List[str]] = field(default_factory=list)


def _get(data: Dict[str, Any], *keys: str) -> Any:
    """First present key among alternative spellings"""
    for key in keys:
        if key in data:
            return data[key]
    return None


class _Reader:
    """Typed field access that records problems instead of raising"""

    def __init__(self):
        self.violations: List[SchemaViolation] = []

    def add(self, path: str, message: str, code: str = "invalid") -> None:
        self.violations.append(SchemaViolation(path, message, code))

    def mapping(self, value: Any, path: str, required: bool = True) -> Optional[Dict[str, Any]]:
        if value is None:
            if required:
                self.add(path, "is required", "missing")
            return None
        if not isinstance(value, dict):
            self.add(path, f"expected an object, got {type(value).__name__}", "type")
            return None
        return value

    def sequence(self, value: Any, path: str) -> List[Any]:
        if value is None:
            return []
        if not isinstance(value, (list, tuple)):
            self.add(path, f"expected a list, got {type(value).__name__}", "type")
            return []
        return list(value)

    def string(self, value: Any, path: str, required: bool = False) -> Optional[str]:
        if value is None:
            if required:
                self.add(path, "is required", "missing")
            return None
        if not isinstance(value, str):
            self.add(path, f"expected a string, got {type(value).__name__}", "type")
            return None
        return value

    def number(self, value: Any, path: str, default: float) -> float:
        if value is None:
            return default
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            self.add(path, f"expected a number, got {type(value).__name__}", "type")
            return default
        return float(value)

    def integer(self, value: Any, path: str, default: Optional[int]) -> Optional[int]:
        if value is None:
            return default
        if isinstance(value, bool) or not isinstance(value, (int, float)) or int(value) != value:
            self.add(path, f"expected an integer, got {value!r}", "type")
            return default
        return int(value)

    def boolean(self, value: Any, path: str, default: Optional[bool]) -> Optional[bool]:
        if value is None:
            return default
        if not isinstance(value, bool):
            self.add(path, f"expected a boolean, got {type(value).__name__}", "type")
            return default
        return value

    def strings(self, value: Any, path: str) -> Tuple[str, ...]:
        items = []
        for i, item in enumerate(self.sequence(value, path)):
            text = self.string(item, f"{path}[{i}]", required=True)
            if text is not None:
                items.append(text)
        return tuple(items)

    def enum(self, enum_cls: Type[E], value: Any, path: str, default: Optional[E] = None) -> Optional[E]:
        if value is None:
            return default
        try:
            return enum_cls(value)
        except ValueError:
            allowed = ", ".join(e.value for e in enum_cls)
            self.add(path, f"'{value}' is not one of: {allowed}", "unknown_value")
            return default


# =============================================================================
# ELEMENT PARSERS
# =============================================================================

def _parse_meta(r: _Reader, data: Any) -> DocumentMeta:
    meta = r.mapping(data, "meta")
    if meta is None:
        return DocumentMeta(title="")

    sources = []
    raw_sources = _get(meta, "source", "sources")
    for i, raw in enumerate(r.sequence(raw_sources, "meta.source")):
        path = f"meta.source[{i}]"
        src = r.mapping(raw, path)
        if src is None:
            continue
        src_type = r.enum(SourceType, src.get("type"), f"{path}.type")
        uri = r.string(_get(src, "uri", "locator"), f"{path}.uri", required=True)
        if src_type is None or uri is None:
            if src.get("type") is None:
                r.add(f"{path}.type", "is required", "missing")
            continue
        sources.append(DocumentSource(
            type=src_type,
            uri=uri,
            page=r.integer(src.get("page"), f"{path}.page", None),
            timestamp=r.string(src.get("timestamp"), f"{path}.timestamp"),
        ))

    return DocumentMeta(
        title=r.string(meta.get("title"), "meta.title", required=True) or "",
        author=r.string(meta.get("author"), "meta.author"),
        date=r.string(meta.get("date"), "meta.date"),
        sources=tuple(sources),
        tags=r.strings(meta.get("tags"), "meta.tags"),
        language=r.string(meta.get("language"), "meta.language") or "en",
    )


def _parse_outline(r: _Reader, data: Any) -> Tuple[List[OutlineEntry], List[str]]:
    entries: List[OutlineEntry] = []
    paths: List[str] = []
    for i, raw in enumerate(r.sequence(data, "outline")):
        path = f"outline[{i}]"
        item = r.mapping(raw, path)
        if item is None:
            continue
        entry_id = r.string(item.get("id"), f"{path}.id", required=True)
        level = r.integer(item.get("level"), f"{path}.level", None)
        if level is None and item.get("level") is None:
            r.add(f"{path}.level", "is required", "missing")
        if entry_id is None or level is None:
            continue
        entries.append(OutlineEntry(
            id=entry_id,
            level=level,
            title=r.string(item.get("title"), f"{path}.title", required=True) or "",
            weight=r.number(item.get("weight"), f"{path}.weight", 0.5),
        ))
        paths.append(path)
    return entries, paths


def _parse_annotations(r: _Reader, data: Any, block_path: str) -> Tuple[List[Annotation], List[str]]:
    annotations: List[Annotation] = []
    paths: List[str] = []
    base = f"{block_path}.annotations"
    for i, raw in enumerate(r.sequence(data, base)):
        path = f"{base}[{i}]"
        item = r.mapping(raw, path)
        if item is None:
            continue
        ann_type = r.enum(AnnotationType, item.get("type"), f"{path}.type")
        if item.get("type") is None:
            r.add(f"{path}.type", "is required", "missing")

        span = item.get("span")
        parsed_span: Optional[Tuple[int, int]] = None
        if (
            isinstance(span, (list, tuple)) and len(span) == 2
            and all(isinstance(v, int) and not isinstance(v, bool) for v in span)
        ):
            parsed_span = (span[0], span[1])
        else:
            r.add(f"{path}.span", f"expected a pair of integer offsets, got {span!r}", "type")

        if ann_type is None or parsed_span is None:
            continue
        annotations.append(Annotation(
            type=ann_type,
            span=parsed_span,
            color=r.string(item.get("color"), f"{path}.color"),
            note=r.string(item.get("note"), f"{path}.note"),
            url=r.string(item.get("url"), f"{path}.url"),
        ))
        paths.append(path)
    return annotations, paths


def _parse_style_hints(r: _Reader, data: Any, block_path: str) -> Optional[StyleHints]:
    path = f"{block_path}.styleHints"
    hints = r.mapping(data, path, required=False)
    if hints is None:
        return None
    return StyleHints(
        align=r.enum(Alignment, hints.get("align"), f"{path}.align"),
        background=r.string(hints.get("background"), f"{path}.background"),
        border=r.boolean(hints.get("border"), f"{path}.border", None),
        emphasis=r.enum(Emphasis, hints.get("emphasis"), f"{path}.emphasis"),
        size=r.enum(SizeBucket, hints.get("size"), f"{path}.size"),
    )


def _parse_rows(r: _Reader, data: Any, path: str) -> Tuple[Tuple[str, ...], ...]:
    rows = []
    for i, raw in enumerate(r.sequence(data, path)):
        rows.append(r.strings(raw, f"{path}[{i}]"))
    return tuple(rows)


def _variant_fields(r: _Reader, block_type: BlockType, item: Dict[str, Any], path: str) -> Dict[str, Any]:
    """Fields specific to one block variant"""
    if block_type in TEXT_BLOCK_TYPES:
        fields: Dict[str, Any] = {
            "text": r.string(item.get("text"), f"{path}.text", required=True) or "",
        }
        if block_type == BlockType.HEADING:
            fields["level"] = r.integer(item.get("level"), f"{path}.level", 1)
        elif block_type == BlockType.CODE:
            fields["language"] = r.string(item.get("language"), f"{path}.language")
        return fields

    if block_type == BlockType.LIST:
        return {
            "ordered": r.boolean(item.get("ordered"), f"{path}.ordered", False),
            "items": r.strings(item.get("items"), f"{path}.items"),
        }

    if block_type == BlockType.IMAGE:
        return {
            "mime": r.string(item.get("mime"), f"{path}.mime"),
            "data": r.string(item.get("data"), f"{path}.data"),
            "url": r.string(item.get("url"), f"{path}.url"),
            "caption": r.string(item.get("caption"), f"{path}.caption"),
        }

    if block_type == BlockType.TABLE:
        return {
            "headers": r.strings(item.get("headers"), f"{path}.headers"),
            "rows": _parse_rows(r, item.get("rows"), f"{path}.rows"),
        }

    return {}


def _parse_blocks(r: _Reader, data: Any) -> Tuple[List[Block], List[str], List[List[str]]]:
    blocks: List[Block] = []
    paths: List[str] = []
    annotation_paths: List[List[str]] = []

    for i, raw in enumerate(r.sequence(data, "blocks")):
        path = f"blocks[{i}]"
        item = r.mapping(raw, path)
        if item is None:
            continue

        block_id = r.string(item.get("id"), f"{path}.id", required=True)
        if item.get("type") is None:
            r.add(f"{path}.type", "is required", "missing")
        block_type = r.enum(BlockType, item.get("type"), f"{path}.type")
        if block_id is None or block_type is None:
            continue

        annotations, ann_paths = _parse_annotations(r, item.get("annotations"), path)
        block_cls = BLOCK_CLASSES[block_type]
        blocks.append(block_cls(
            id=block_id,
            importance=r.number(item.get("importance"), f"{path}.importance", 0.5),
            annotations=tuple(annotations),
            style_hints=_parse_style_hints(r, _get(item, "styleHints", "style_hints"), path),
            **_variant_fields(r, block_type, item, path),
        ))
        paths.append(path)
        annotation_paths.append(ann_paths)

    return blocks, paths, annotation_paths


def _parse_styles(r: _Reader, data: Any) -> DocumentStyles:
    styles = r.mapping(data, "styles", required=False)
    if styles is None:
        return DocumentStyles()

    palette = None
    raw_palette = styles.get("palette")
    if raw_palette is not None:
        palette = r.strings(raw_palette, "styles.palette")

    font_pair = None
    raw_pair = r.mapping(_get(styles, "fontPair", "font_pair"), "styles.fontPair", required=False)
    if raw_pair is not None:
        font_pair = FontPair(
            heading=r.string(raw_pair.get("heading"), "styles.fontPair.heading"),
            body=r.string(raw_pair.get("body"), "styles.fontPair.body"),
        )

    return DocumentStyles(
        theme=r.enum(Theme, styles.get("theme"), "styles.theme", Theme.MODERN_CARD),
        palette=palette,
        font_pair=font_pair,
        spacing=r.enum(Spacing, styles.get("spacing"), "styles.spacing"),
        page_size=r.enum(PageSize, _get(styles, "pageSize", "page_size"), "styles.pageSize"),
    )


def parse_document(data: Any) -> ParsedDocument:
    """
    Parse a document mapping.

    Args:
        data: Mapping with meta / outline / blocks / styles keys

    Returns:
        ParsedDocument with the typed document and every parse problem
    """
    r = _Reader()
    root = r.mapping(data, "$")
    if root is None:
        return ParsedDocument(document=Document(meta=DocumentMeta(title="")), parse_violations=r.violations)

    meta = _parse_meta(r, root.get("meta"))
    outline, outline_paths = _parse_outline(r, root.get("outline"))
    blocks, block_paths, annotation_paths = _parse_blocks(r, root.get("blocks"))
    styles = _parse_styles(r, root.get("styles"))

    document = Document(
        meta=meta,
        outline=tuple(outline),
        blocks=tuple(blocks),
        styles=styles,
    )

    if r.violations:
        logger.debug(f"Parsed document with {len(r.violations)} parse problem(s)")

    return ParsedDocument(
        document=document,
        parse_violations=r.violations,
        block_paths=block_paths,
        outline_paths=outline_paths,
        annotation_paths=annotation_paths,
    )


def load_document(data: Any) -> Tuple[Document, List[SchemaViolation]]:
    """
    Parse and validate a mapping in one pass.

    Returns:
        (document, violations) where violations covers both parse problems
        and structural invariants
    """
    from .validation import collect_violations

    parsed = parse_document(data)
    violations = list(parsed.parse_violations)
    reported = {v.path for v in violations}
    for violation in collect_violations(
        parsed.document,
        block_paths=parsed.block_paths,
        outline_paths=parsed.outline_paths,
        annotation_paths=parsed.annotation_paths,
    ):
        # A field that failed to parse was replaced by a default; don't
        # report it a second time
        if violation.path not in reported:
            violations.append(violation)
    return parsed.document, violations
