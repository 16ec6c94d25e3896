#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Block Flow Executor

Places the blocks of a validated document onto fixed-size pages:
- Measure each block (font size ladder, wrapping, type-specific heights)
- Decide card vs inline placement per block
- Paginate top to bottom between the top and bottom margins

No block is ever split. A block taller than the content area starts a
fresh page and overflows it; the following block starts the next page.

Version: 1.0.0
"""

from typing import Dict, List, Optional, Tuple
from dataclasses import dataclass, field
from enum import Enum
import logging

from config.constants import CARD_MARGIN, CARD_PADDING, PAGE_SIZES, SPACING_SCALES
from core.contracts import Block, LayoutConfig, PageSize, ValidatedDocument
from core.styling import ResolvedStyle
from ..metrics import BlockMetrics, measure_block
from ..wrapping import WrappedText

logger = logging.getLogger(__name__)


class PlacementMode(Enum):
    CARD = "card"
    INLINE = "inline"


@dataclass
class FlowState:
    """Current state of block flow execution (y grows downwards from the page top)"""
    page_height: float
    margin_top: float
    margin_bottom: float
    current_page: int = 0  # 0-based page index
    y_position: float = 0
    page_empty: bool = True
    previous_card: bool = False

    def __post_init__(self):
        self.y_position = self.margin_top

    @property
    def bottom(self) -> float:
        return self.page_height - self.margin_bottom

    @property
    def content_height(self) -> float:
        return self.bottom - self.margin_top

    def available_space(self) -> float:
        """Calculate available space on current page"""
        return self.bottom - self.y_position

    def new_page(self):
        """Start a new page"""
        self.current_page += 1
        self.y_position = self.margin_top
        self.page_empty = True
        self.previous_card = False

    def advance(self, height: float):
        """Advance position by height"""
        self.y_position += height


@dataclass(frozen=True)
class PlacedBox:
    """
    Computed box of one block. References the block by id only.

    ``x``/``y`` are the top-left corner measured from the page's top-left,
    in points. For cards the box includes the padding; ``content_*`` give
    the area the block's own content occupies.
    """
    block_id: str
    page_index: int
    x: float
    y: float
    width: float
    height: float
    mode: PlacementMode
    font_size: float
    line_height: float
    lines: Tuple[WrappedText, ...] = ()
    line_count: int = 0
    image_size: Optional[Tuple[int, int]] = None
    overflow: bool = False

    @property
    def is_card(self) -> bool:
        return self.mode == PlacementMode.CARD

    @property
    def padding(self) -> float:
        return CARD_PADDING if self.is_card else 0.0

    @property
    def content_x(self) -> float:
        return self.x + self.padding

    @property
    def content_y(self) -> float:
        return self.y + self.padding

    @property
    def content_width(self) -> float:
        return self.width - 2 * self.padding

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def to_dict(self) -> Dict:
        return {
            "block_id": self.block_id,
            "page_index": self.page_index,
            "x": round(self.x, 2),
            "y": round(self.y, 2),
            "width": round(self.width, 2),
            "height": round(self.height, 2),
            "mode": self.mode.value,
            "font_size": round(self.font_size, 2),
            "line_count": self.line_count,
            "overflow": self.overflow,
        }


@dataclass(frozen=True)
class LayoutPlan:
    """Ordered placed boxes plus page geometry"""
    boxes: Tuple[PlacedBox, ...]
    page_count: int
    page_width: float
    page_height: float
    margin_top: float
    margin_bottom: float
    margin_side: float
    _index: Dict[str, PlacedBox] = field(default_factory=dict, repr=False, compare=False)

    def __post_init__(self):
        self._index.update({box.block_id: box for box in self.boxes})

    def box_for(self, block_id: str) -> Optional[PlacedBox]:
        return self._index.get(block_id)

    def page_of(self, block_id: str) -> Optional[int]:
        box = self._index.get(block_id)
        return box.page_index if box else None

    def boxes_on_page(self, page_index: int) -> List[PlacedBox]:
        return [b for b in self.boxes if b.page_index == page_index]

    @property
    def content_width(self) -> float:
        return self.page_width - 2 * self.margin_side

    def to_dict(self) -> Dict:
        return {
            "page_count": self.page_count,
            "page_width": self.page_width,
            "page_height": self.page_height,
            "boxes": [b.to_dict() for b in self.boxes],
        }


class BlockFlowExecutor:
    """
    Computes the LayoutPlan of a validated document.

    This is the core of the layout stage: it takes resolved styles and
    produces page-positioned boxes for the renderers.

    Usage:
        executor = BlockFlowExecutor(LayoutConfig(), page_size=PageSize.A4)
        plan = executor.execute(validated, resolved_styles)
    """

    def __init__(self, config: LayoutConfig, page_size: PageSize = PageSize.A4):
        """
        Initialize block flow executor.

        Args:
            config: Layout parameters
            page_size: Page size of the document

        Raises:
            ConfigurationError: if a parameter is out of range for this page
        """
        self.config = config
        self.page_size = page_size

        width, height = PAGE_SIZES[page_size.value]
        config.validate_or_raise(page_height=height, page_width=width)
        self.page_width = width
        self.page_height = height
        self.content_width = width - 2 * config.margin_side

        logger.info(f"BlockFlowExecutor initialized: {page_size.value} ({width}x{height}pt)")

    def is_card(self, block: Block) -> bool:
        """Card placement depends only on the block's own importance"""
        return block.importance > self.config.card_threshold

    def execute(self, validated: ValidatedDocument, styles: Dict[str, ResolvedStyle]) -> LayoutPlan:
        """
        Place every block.

        Args:
            validated: Document that passed validation
            styles: Resolved style per block id

        Returns:
            LayoutPlan with one box per block, in document order
        """
        logger.info(f"Executing block flow for {len(validated.blocks)} blocks...")

        state = FlowState(
            page_height=self.page_height,
            margin_top=self.config.margin_top,
            margin_bottom=self.config.margin_bottom,
        )

        boxes: List[PlacedBox] = []
        for block in validated.blocks:
            style = styles[block.id]
            card = self.is_card(block)
            padding = CARD_PADDING if card else 0.0
            metrics = measure_block(block, style, self.config, self.content_width - 2 * padding)
            height = metrics.content_height + 2 * padding

            spacing_before = self._spacing_before(style, state, card)

            # Move to a new page unless the block already starts one
            if not state.page_empty and spacing_before + height > state.available_space():
                state.new_page()
                spacing_before = 0.0

            state.advance(spacing_before)
            y = state.y_position
            state.advance(height)

            overflow = state.y_position > state.bottom
            if overflow:
                logger.warning(
                    f"Block '{block.id}' ({height:.0f}pt) is taller than the content area "
                    f"({state.content_height:.0f}pt); it overflows page {state.current_page + 1}"
                )

            boxes.append(self._make_box(block, metrics, state.current_page, y, height, card, overflow))
            state.page_empty = False
            state.previous_card = card

        plan = LayoutPlan(
            boxes=tuple(boxes),
            page_count=state.current_page + 1,
            page_width=self.page_width,
            page_height=self.page_height,
            margin_top=self.config.margin_top,
            margin_bottom=self.config.margin_bottom,
            margin_side=self.config.margin_side,
        )

        logger.info(f"Flow complete: {len(boxes)} blocks across {plan.page_count} pages")
        return plan

    def _spacing_before(self, style: ResolvedStyle, state: FlowState, card: bool) -> float:
        """Gap above a block; nothing at the top of a page"""
        if state.page_empty:
            return 0.0
        gap = self.config.block_gap * SPACING_SCALES[style.spacing.value]
        if card or state.previous_card:
            gap += CARD_MARGIN
        return gap

    def _make_box(
        self,
        block: Block,
        metrics: BlockMetrics,
        page: int,
        y: float,
        height: float,
        card: bool,
        overflow: bool,
    ) -> PlacedBox:
        return PlacedBox(
            block_id=block.id,
            page_index=page,
            x=self.config.margin_side,
            y=y,
            width=self.content_width,
            height=height,
            mode=PlacementMode.CARD if card else PlacementMode.INLINE,
            font_size=metrics.font_size,
            line_height=metrics.line_height,
            lines=metrics.lines,
            line_count=metrics.line_count,
            image_size=metrics.image_size,
            overflow=overflow,
        )

