#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Contextual Icons

Symbol selection is an ordered keyword rule list: the first rule with a
keyword contained in the title wins, so later rules only apply when no
earlier one matched.
"""

from typing import List, NamedTuple, Tuple

from config.constants import ICON_BASE_X, ICON_BASE_Y, ICON_SIZE, ICON_STEP_Y
from core.contracts import Color, Document, HeadingBlock
from .elements import IconElement, IconType


class IconRule(NamedTuple):
    keywords: Tuple[str, ...]
    symbol: str
    label: str
    icon_type: IconType


ICON_RULES: Tuple[IconRule, ...] = (
    IconRule(("process", "step"), "⚙️", "P", IconType.PROCESS),
    IconRule(("data", "information"), "\U0001F4CA", "D", IconType.CONCEPT),
    IconRule(("theory", "concept"), "\U0001F4A1", "T", IconType.CONCEPT),
    IconRule(("formula", "equation"), "\U0001F4D0", "F", IconType.CONCEPT),
    IconRule(("example", "case"), "\U0001F3AF", "E", IconType.APPLICATION),
    IconRule(("result", "outcome"), "✅", "R", IconType.SUMMARY),
    IconRule(("problem", "issue"), "⚠️", "!", IconType.CONCEPT),
    IconRule(("solution", "answer"), "\U0001F527", "S", IconType.APPLICATION),
)

DEFAULT_RULE = IconRule((), "\U0001F4CB", "N", IconType.CONCEPT)


def match_icon(title: str) -> IconRule:
    text = title.lower()
    for rule in ICON_RULES:
        if any(keyword in text for keyword in rule.keywords):
            return rule
    return DEFAULT_RULE


def icon_color(index: int) -> Color:
    """Deterministic color of the index-th icon"""
    return Color.rgb(0.2 + index * 0.1, 0.4 + index * 0.05, 0.8 - index * 0.1)


def icon_targets(document: Document) -> List[Tuple[str, str]]:
    """(target id, title) of every icon-bearing element: outline entries, else headings"""
    if document.outline:
        return [(entry.id, entry.title) for entry in document.outline]
    return [(block.id, block.text) for block in document.blocks if isinstance(block, HeadingBlock)]


def generate_icons(document: Document) -> Tuple[IconElement, ...]:
    icons = []
    for index, (target_id, title) in enumerate(icon_targets(document)):
        rule = match_icon(title)
        icons.append(IconElement(
            type=rule.icon_type,
            symbol=rule.symbol,
            label=rule.label,
            color=icon_color(index),
            size=ICON_SIZE,
            x=ICON_BASE_X,
            y=ICON_BASE_Y - index * ICON_STEP_Y,
            target_id=target_id,
        ))
    return tuple(icons)
