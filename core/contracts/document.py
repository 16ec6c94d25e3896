#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Document Contract

Defines the format-agnostic document that the content-generation step
produces and the layout core consumes: metadata, outline, an ordered list
of typed blocks, and document-level style declarations.

Blocks are a closed family: one frozen dataclass per BlockType, each
carrying only the fields it needs.

Version: 1.0.0
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Optional, Tuple
from enum import Enum

from .base import BaseContract


class SourceType(Enum):
    """Provenance of the document content"""
    PDF = "pdf"
    TEXT = "text"
    IMAGE = "image"
    URL = "url"


class BlockType(Enum):
    """Types of content blocks"""
    HEADING = "heading"
    PARAGRAPH = "paragraph"
    LIST = "list"
    QUOTE = "quote"
    IMAGE = "image"
    TABLE = "table"
    CODE = "code"
    SEPARATOR = "separator"


class AnnotationType(Enum):
    """Inline annotation kinds"""
    HIGHLIGHT = "highlight"
    UNDERLINE = "underline"
    STRIKETHROUGH = "strikethrough"
    NOTE = "note"
    LINK = "link"


class Alignment(Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"
    JUSTIFY = "justify"


class Emphasis(Enum):
    NORMAL = "normal"
    BOLD = "bold"
    ITALIC = "italic"
    UNDERLINE = "underline"


class SizeBucket(Enum):
    SMALL = "small"
    NORMAL = "normal"
    LARGE = "large"
    XLARGE = "xlarge"


class Theme(Enum):
    """Named bundles of default style choices"""
    MODERN_CARD = "modern-card"
    CLASSIC_REPORT = "classic-report"
    COMPACT_NOTES = "compact-notes"
    ACADEMIC = "academic"
    PRESENTATION = "presentation"


class Spacing(Enum):
    COMPACT = "compact"
    NORMAL = "normal"
    RELAXED = "relaxed"


class PageSize(Enum):
    A4 = "A4"
    A5 = "A5"
    LETTER = "Letter"
    LEGAL = "Legal"


def _drop_none(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


# =============================================================================
# METADATA & OUTLINE
# =============================================================================

@dataclass(frozen=True)
class DocumentSource:
    """Where a piece of content came from; not used for rendering"""
    type: SourceType
    uri: str
    page: Optional[int] = None
    timestamp: Optional[str] = None

    def to_dict(self) -> Dict:
        return _drop_none({
            "type": self.type.value,
            "uri": self.uri,
            "page": self.page,
            "timestamp": self.timestamp,
        })


@dataclass(frozen=True)
class DocumentMeta:
    title: str
    author: Optional[str] = None
    date: Optional[str] = None
    sources: Tuple[DocumentSource, ...] = ()
    tags: Tuple[str, ...] = ()
    language: str = "en"

    def to_dict(self) -> Dict:
        return _drop_none({
            "title": self.title,
            "author": self.author,
            "date": self.date,
            "source": [s.to_dict() for s in self.sources] or None,
            "tags": list(self.tags) or None,
            "language": self.language,
        })


@dataclass(frozen=True)
class OutlineEntry:
    """Table-of-contents entry; weight is its relative prominence"""
    id: str
    level: int
    title: str
    weight: float = 0.5

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "level": self.level,
            "title": self.title,
            "weight": self.weight,
        }


# =============================================================================
# INLINE DECORATION
# =============================================================================

@dataclass(frozen=True)
class Annotation:
    """Half-open character span [start, end) into the owning block's text"""
    type: AnnotationType
    span: Tuple[int, int]
    color: Optional[str] = None
    note: Optional[str] = None
    url: Optional[str] = None

    @property
    def start(self) -> int:
        return self.span[0]

    @property
    def end(self) -> int:
        return self.span[1]

    def to_dict(self) -> Dict:
        return _drop_none({
            "type": self.type.value,
            "span": [self.span[0], self.span[1]],
            "color": self.color,
            "note": self.note,
            "url": self.url,
        })


@dataclass(frozen=True)
class StyleHints:
    """Optional per-block overrides; None means inherit"""
    align: Optional[Alignment] = None
    background: Optional[str] = None
    border: Optional[bool] = None
    emphasis: Optional[Emphasis] = None
    size: Optional[SizeBucket] = None

    def to_dict(self) -> Dict:
        return _drop_none({
            "align": self.align.value if self.align else None,
            "background": self.background,
            "border": self.border,
            "emphasis": self.emphasis.value if self.emphasis else None,
            "size": self.size.value if self.size else None,
        })


# =============================================================================
# BLOCKS
# =============================================================================

@dataclass(frozen=True)
class Block:
    """Fields shared by every block variant"""
    type: ClassVar[BlockType]

    id: str
    importance: float = 0.5
    annotations: Tuple[Annotation, ...] = ()
    style_hints: Optional[StyleHints] = None

    @property
    def annotatable_text(self) -> str:
        """Text that annotation spans index into; empty for non-text blocks"""
        return ""

    def plain_text(self) -> List[str]:
        """Every piece of visible text, in reading order"""
        return []

    def _fields(self) -> Dict[str, Any]:
        return {}

    def to_dict(self) -> Dict:
        data: Dict[str, Any] = {"id": self.id, "type": self.type.value}
        data.update(self._fields())
        data["importance"] = self.importance
        if self.annotations:
            data["annotations"] = [a.to_dict() for a in self.annotations]
        if self.style_hints is not None:
            data["styleHints"] = self.style_hints.to_dict()
        return data


@dataclass(frozen=True)
class TextBlock(Block):
    text: str = ""

    @property
    def annotatable_text(self) -> str:
        return self.text

    def plain_text(self) -> List[str]:
        return [self.text] if self.text else []

    def _fields(self) -> Dict[str, Any]:
        return {"text": self.text}


@dataclass(frozen=True)
class HeadingBlock(TextBlock):
    type: ClassVar[BlockType] = BlockType.HEADING
    level: int = 1

    def _fields(self) -> Dict[str, Any]:
        return {"text": self.text, "level": self.level}


@dataclass(frozen=True)
class ParagraphBlock(TextBlock):
    type: ClassVar[BlockType] = BlockType.PARAGRAPH


@dataclass(frozen=True)
class QuoteBlock(TextBlock):
    type: ClassVar[BlockType] = BlockType.QUOTE


@dataclass(frozen=True)
class CodeBlock(TextBlock):
    type: ClassVar[BlockType] = BlockType.CODE
    language: Optional[str] = None

    def _fields(self) -> Dict[str, Any]:
        return _drop_none({"text": self.text, "language": self.language})


@dataclass(frozen=True)
class ListBlock(Block):
    type: ClassVar[BlockType] = BlockType.LIST
    ordered: bool = False
    items: Tuple[str, ...] = ()

    def plain_text(self) -> List[str]:
        return list(self.items)

    def _fields(self) -> Dict[str, Any]:
        return {"ordered": self.ordered, "items": list(self.items)}


@dataclass(frozen=True)
class ImageBlock(Block):
    type: ClassVar[BlockType] = BlockType.IMAGE
    mime: Optional[str] = None
    data: Optional[str] = None  # base64 payload
    url: Optional[str] = None
    caption: Optional[str] = None

    def plain_text(self) -> List[str]:
        return [self.caption] if self.caption else []

    def _fields(self) -> Dict[str, Any]:
        return _drop_none({
            "mime": self.mime,
            "data": self.data,
            "url": self.url,
            "caption": self.caption,
        })


@dataclass(frozen=True)
class TableBlock(Block):
    type: ClassVar[BlockType] = BlockType.TABLE
    headers: Tuple[str, ...] = ()
    rows: Tuple[Tuple[str, ...], ...] = ()

    def plain_text(self) -> List[str]:
        cells = list(self.headers)
        for row in self.rows:
            cells.extend(row)
        return cells

    def _fields(self) -> Dict[str, Any]:
        return {
            "headers": list(self.headers),
            "rows": [list(row) for row in self.rows],
        }


@dataclass(frozen=True)
class SeparatorBlock(Block):
    type: ClassVar[BlockType] = BlockType.SEPARATOR


BLOCK_CLASSES: Dict[BlockType, type] = {
    BlockType.HEADING: HeadingBlock,
    BlockType.PARAGRAPH: ParagraphBlock,
    BlockType.LIST: ListBlock,
    BlockType.QUOTE: QuoteBlock,
    BlockType.IMAGE: ImageBlock,
    BlockType.TABLE: TableBlock,
    BlockType.CODE: CodeBlock,
    BlockType.SEPARATOR: SeparatorBlock,
}

if set(BLOCK_CLASSES) != set(BlockType):
    raise TypeError(f"block types without a class: {sorted(t.value for t in set(BlockType) - set(BLOCK_CLASSES))}")


# =============================================================================
# STYLES
# =============================================================================

@dataclass(frozen=True)
class FontPair:
    heading: Optional[str] = None
    body: Optional[str] = None

    def to_dict(self) -> Dict:
        return _drop_none({"heading": self.heading, "body": self.body})


@dataclass(frozen=True)
class DocumentStyles:
    """
    Document-level style declaration.

    Everything except the theme is optional; unset fields inherit the
    theme's defaults during style resolution.
    """
    theme: Theme = Theme.MODERN_CARD
    palette: Optional[Tuple[str, ...]] = None
    font_pair: Optional[FontPair] = None
    spacing: Optional[Spacing] = None
    page_size: Optional[PageSize] = None

    def to_dict(self) -> Dict:
        return _drop_none({
            "theme": self.theme.value,
            "palette": list(self.palette) if self.palette is not None else None,
            "fontPair": self.font_pair.to_dict() if self.font_pair else None,
            "spacing": self.spacing.value if self.spacing else None,
            "pageSize": self.page_size.value if self.page_size else None,
        })


# =============================================================================
# DOCUMENT
# =============================================================================

@dataclass(frozen=True)
class Document(BaseContract):
    """
    Root of one rendering request.

    Usage:
        doc = Document.from_dict(payload)      # raises on schema problems
        problems = doc.validate()              # List[SchemaViolation]
    """
    meta: DocumentMeta
    outline: Tuple[OutlineEntry, ...] = ()
    blocks: Tuple[Block, ...] = ()
    styles: DocumentStyles = field(default_factory=DocumentStyles)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "meta": self.meta.to_dict(),
            "outline": [o.to_dict() for o in self.outline],
            "blocks": [b.to_dict() for b in self.blocks],
            "styles": self.styles.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Document':
        """Parse a mapping; raises DocumentValidationError on parse problems"""
        from .loader import parse_document
        from .base import DocumentValidationError

        parsed = parse_document(data)
        if parsed.parse_violations:
            raise DocumentValidationError(parsed.parse_violations)
        return parsed.document

    def validate(self) -> List[Any]:
        """Collect every invariant violation (never short-circuits)"""
        from .validation import collect_violations
        return collect_violations(self)

    # Convenience methods
    def get_block_by_id(self, block_id: str) -> Optional[Block]:
        for b in self.blocks:
            if b.id == block_id:
                return b
        return None

    def get_blocks_by_type(self, block_type: BlockType) -> List[Block]:
        return [b for b in self.blocks if b.type == block_type]

    def get_full_text(self) -> str:
        """Visible text of every block, one block per paragraph"""
        parts = []
        for block in self.blocks:
            text = "\n".join(block.plain_text())
            if text:
                parts.append(text)
        return "\n\n".join(parts)

    def count_by_type(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for block in self.blocks:
            counts[block.type.value] = counts.get(block.type.value, 0) + 1
        return counts
