#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Visual Enhancement Generator

Produces the enhancement set of a document: icons, gradients, watermarks,
borders, shadows and textures. The six sub-generators are independent
pure functions; they run as one fan-out/fan-in stage and their results
are merged by category, so completion order never affects the output.

The generator does not look at the layout plan and can run before,
after or alongside layout.

Version: 1.0.0
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, Optional, Tuple
import logging

from config.settings import settings
from core.contracts import Document, ValidatedDocument
from .decorations import (
    generate_borders,
    generate_gradients,
    generate_shadows,
    generate_textures,
    generate_watermarks,
)
from .elements import AdvancedVisualElements
from .icons import generate_icons

logger = logging.getLogger(__name__)


class VisualEnhancer:
    """
    Builds AdvancedVisualElements.

    Usage:
        enhancer = VisualEnhancer()
        visuals = enhancer.enhance(document, design_style="modern", color_scheme="green")
    """

    def __init__(self, max_workers: Optional[int] = None):
        self.max_workers = max_workers or settings.enhancement_workers

    def _tasks(self, document: Document, design_style: str, color_scheme: str) -> Dict[str, Tuple[Callable, tuple]]:
        return {
            "icons": (generate_icons, (document,)),
            "gradients": (generate_gradients, (design_style, color_scheme)),
            "watermarks": (generate_watermarks, ()),
            "borders": (generate_borders, (design_style,)),
            "shadows": (generate_shadows, (design_style,)),
            "textures": (generate_textures, (design_style,)),
        }

    def enhance(self, document: Any, design_style: str, color_scheme: str) -> AdvancedVisualElements:
        """
        Generate every decoration category.

        Args:
            document: Document or ValidatedDocument
            design_style: academic | modern | minimal | colorful (others get no decorations)
            color_scheme: blue | green | purple | orange (others fall back to blue)

        Returns:
            AdvancedVisualElements
        """
        if isinstance(document, ValidatedDocument):
            document = document.document

        tasks = self._tasks(document, design_style, color_scheme)
        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="visuals") as pool:
            futures = {name: pool.submit(func, *args) for name, (func, args) in tasks.items()}
            # result() re-raises a sub-generator failure in the caller
            results = {name: future.result() for name, future in futures.items()}

        visuals = AdvancedVisualElements(**results)
        logger.info(
            f"Generated visuals (style={design_style}, scheme={color_scheme}): "
            f"{len(visuals.icons)} icons, {len(visuals.gradients)} gradients, "
            f"{len(visuals.borders)} borders, {len(visuals.shadows)} shadows, "
            f"{len(visuals.textures)} textures"
        )
        return visuals


def enhance(document: Any, design_style: str, color_scheme: str) -> AdvancedVisualElements:
    """Shortcut for VisualEnhancer().enhance(...)"""
    return VisualEnhancer().enhance(document, design_style, color_scheme)
