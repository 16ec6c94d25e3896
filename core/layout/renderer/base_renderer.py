#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Base Renderer Interface

Defines the common interface for all renderers plus the pieces every
backend shares: the render context, annotation segmentation and footnote
numbering.

Renderers are pure consumers: they place what the layout plan and the
enhancement set describe and never re-derive either.

Version: 1.0.0
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, ClassVar, Dict, List, Optional, Tuple
import logging

from core.contracts import (
    Annotation,
    AnnotationType,
    Block,
    BlockType,
    LayoutConfig,
    OutputFormat,
    RenderBackendError,
    RenderOptions,
    ValidatedDocument,
)
from core.styling import ResolvedStyle
from core.visuals import AdvancedVisualElements
from ..executor.block_flow import LayoutPlan
from ..toc import TocEntry

logger = logging.getLogger(__name__)

DEFAULT_HIGHLIGHT_COLOR = "#fff3cd"


@dataclass(frozen=True)
class Footnote:
    number: int
    text: str
    block_id: str
    annotation_index: int


@dataclass(frozen=True)
class TextSegment:
    """Maximal run of text covered by the same set of annotations"""
    start: int
    end: int
    text: str
    annotations: Tuple[Annotation, ...] = ()

    def has(self, ann_type: AnnotationType) -> bool:
        return any(a.type == ann_type for a in self.annotations)

    def first(self, ann_type: AnnotationType) -> Optional[Annotation]:
        for a in self.annotations:
            if a.type == ann_type:
                return a
        return None


def segment_text(text: str, annotations: Tuple[Annotation, ...]) -> List[TextSegment]:
    """
    Split text at every annotation boundary.

    Overlapping annotations are allowed: each segment carries all
    annotations that cover it, in their declared order.
    """
    if not annotations:
        return [TextSegment(0, len(text), text)] if text else []

    bounds = {0, len(text)}
    for ann in annotations:
        bounds.add(ann.start)
        bounds.add(ann.end)
    points = sorted(b for b in bounds if 0 <= b <= len(text))

    segments = []
    for start, end in zip(points, points[1:]):
        if start == end:
            continue
        active = tuple(a for a in annotations if a.start <= start and a.end >= end)
        segments.append(TextSegment(start, end, text[start:end], active))
    return segments


def collect_footnotes(validated: ValidatedDocument) -> List[Footnote]:
    """Note annotations numbered in document order"""
    notes = []
    for block in validated.blocks:
        for index, ann in enumerate(block.annotations):
            if ann.type == AnnotationType.NOTE and ann.note:
                notes.append(Footnote(len(notes) + 1, ann.note, block.id, index))
    return notes


@dataclass
class RenderContext:
    """Everything one render call consumes; warnings accumulate during rendering"""
    validated: ValidatedDocument
    styles: Dict[str, ResolvedStyle]
    document_style: ResolvedStyle
    plan: LayoutPlan
    visuals: AdvancedVisualElements
    options: RenderOptions
    config: LayoutConfig
    toc: List[TocEntry] = field(default_factory=list)
    footnotes: List[Footnote] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    current_block: Optional[str] = None  # block being drawn, for error attribution

    def __post_init__(self):
        self._footnote_index = {(f.block_id, f.annotation_index): f.number for f in self.footnotes}

    def warn(self, message: str, block_id: Optional[str] = None) -> None:
        text = f"block '{block_id}': {message}" if block_id else message
        if text not in self.warnings:
            self.warnings.append(text)
            logger.warning(text)

    def footnote_number(self, block_id: str, annotation: Annotation, block: Block) -> Optional[int]:
        for index, ann in enumerate(block.annotations):
            if ann is annotation:
                return self._footnote_index.get((block_id, index))
        return None

    def block_annotations(self, block: Block) -> Tuple[Annotation, ...]:
        """Annotations to draw for a block, honouring the annotation toggle"""
        if not self.options.include_annotations:
            return ()
        return block.annotations

    def footnotes_enabled(self) -> bool:
        # Notes are annotations; without their markers the list would be orphaned
        return self.options.include_footnotes and self.options.include_annotations and bool(self.footnotes)

    def toc_enabled(self) -> bool:
        return self.options.include_toc and bool(self.toc)


@dataclass(frozen=True)
class RenderOutput:
    content: bytes
    warnings: Tuple[str, ...] = ()


class BaseRenderer(ABC):
    """
    Abstract base class for document renderers.

    All renderers must implement:
    - block_handlers(): one handler per BlockType (checked at construction)
    - _render(): Main rendering method
    """

    format: ClassVar[OutputFormat]

    def __init__(self):
        handlers = self.block_handlers()
        missing = set(BlockType) - set(handlers)
        if missing:
            names = ", ".join(sorted(t.value for t in missing))
            raise TypeError(f"{type(self).__name__} has no handler for block type(s): {names}")
        self._handlers: Dict[BlockType, Callable] = handlers

    @abstractmethod
    def block_handlers(self) -> Dict[BlockType, Callable]:
        """Map every BlockType to the method drawing it"""
        pass

    @abstractmethod
    def _render(self, ctx: RenderContext) -> bytes:
        pass

    def render(
        self,
        validated: ValidatedDocument,
        styles: Dict[str, ResolvedStyle],
        document_style: ResolvedStyle,
        plan: LayoutPlan,
        visuals: AdvancedVisualElements,
        options: RenderOptions,
        config: LayoutConfig,
        toc: Optional[List[TocEntry]] = None,
    ) -> RenderOutput:
        """
        Render to bytes.

        Args:
            validated: Validated document
            styles: Resolved style per block id
            document_style: Document-level resolved style
            plan: Layout plan
            visuals: Enhancement set
            options: Render options (toggles)
            config: Layout parameters
            toc: Table of contents entries

        Returns:
            RenderOutput with the bytes and any recovered-fallback warnings

        Raises:
            RenderBackendError: on a failure with no safe fallback
        """
        ctx = RenderContext(
            validated=validated,
            styles=styles,
            document_style=document_style,
            plan=plan,
            visuals=visuals,
            options=options,
            config=config,
            toc=list(toc or []),
            footnotes=collect_footnotes(validated),
        )
        logger.info(f"Rendering {self.format.value}: {len(validated.blocks)} blocks")
        try:
            content = self._render(ctx)
        except RenderBackendError:
            raise
        except Exception as e:
            logger.error(f"{self.format.value} backend failed: {e}", exc_info=True)
            raise RenderBackendError(
                f"{type(e).__name__}: {e}", format=self.format.value, block_id=ctx.current_block
            ) from e
        logger.info(f"Rendered {self.format.value}: {len(content)} bytes, {len(ctx.warnings)} warning(s)")
        return RenderOutput(content=content, warnings=tuple(ctx.warnings))

    def handler_for(self, block: Block) -> Callable:
        return self._handlers[block.type]

    @classmethod
    def supports_format(cls, format_name: str) -> bool:
        """Check if renderer supports given format (canonical name or alias)"""
        try:
            return OutputFormat.parse(format_name) == cls.format
        except ValueError:
            return False

    @classmethod
    def get_supported_formats(cls) -> List[str]:
        return [cls.format.value, cls.format.extension]
