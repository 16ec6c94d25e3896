#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Table of Contents Generator - Generate TOC from the document outline.

Provides:
- TOC entries from the outline, emphasised by outline weight
- Fallback to prominent heading blocks when there is no outline
- Page numbers from the layout plan for entries linked to a block
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from config.constants import TOC_EMPHASIS_WEIGHT, TOC_MIN_LAYOUT_WEIGHT
from core.contracts import Block, HeadingBlock, ValidatedDocument
from .executor.block_flow import LayoutPlan


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass(frozen=True)
class TocEntry:
    """Single entry in the Table of Contents."""
    level: int                      # 1..6
    title: str
    block_id: Optional[str] = None  # linked block, if any
    page_number: Optional[int] = None  # 1-based, from the layout plan
    emphasized: bool = False

    @property
    def indent(self) -> str:
        return "  " * (self.level - 1)

    def to_dict(self) -> Dict:
        return {
            "level": self.level,
            "title": self.title,
            "block_id": self.block_id,
            "page": self.page_number,
            "emphasized": self.emphasized,
        }

    def __repr__(self):
        return f"{self.indent}[L{self.level}] {self.title}"


def layout_weight(block: Block) -> float:
    """importance * (1 + 0.5 * levelPenalty); headings of deeper levels weigh less"""
    level = block.level if isinstance(block, HeadingBlock) else None
    level_penalty = 1 / (1 + 0.5 * level) if level else 1.0
    return block.importance * (1 + 0.5 * level_penalty)


# =============================================================================
# TOC GENERATOR
# =============================================================================

def build_toc(validated: ValidatedDocument, plan: Optional[LayoutPlan] = None) -> List[TocEntry]:
    """
    Generate TOC entries.

    Args:
        validated: Validated document
        plan: Layout plan used for page numbers (optional)

    Returns:
        Entries in document order; empty if the document has no outline
        and no sufficiently prominent heading
    """
    block_ids = {block.id for block in validated.blocks}

    def page_for(block_id: Optional[str]) -> Optional[int]:
        if plan is None or block_id is None:
            return None
        page = plan.page_of(block_id)
        return page + 1 if page is not None else None

    if validated.outline:
        entries = []
        for entry in validated.outline:
            linked = entry.id if entry.id in block_ids else None
            entries.append(TocEntry(
                level=entry.level,
                title=entry.title,
                block_id=linked,
                page_number=page_for(linked),
                emphasized=entry.weight >= TOC_EMPHASIS_WEIGHT,
            ))
        return entries

    entries = []
    for block in validated.blocks:
        if not isinstance(block, HeadingBlock):
            continue
        weight = layout_weight(block)
        if weight <= TOC_MIN_LAYOUT_WEIGHT:
            continue
        entries.append(TocEntry(
            level=block.level,
            title=block.text,
            block_id=block.id,
            page_number=page_for(block.id),
            emphasized=weight >= TOC_EMPHASIS_WEIGHT,
        ))
    return entries


def toc_to_text(entries: List[TocEntry]) -> str:
    """Plain-text rendition, one indented line per entry"""
    lines = []
    for entry in entries:
        suffix = f" ... {entry.page_number}" if entry.page_number is not None else ""
        lines.append(f"{entry.indent}{entry.title}{suffix}")
    return "\n".join(lines)
