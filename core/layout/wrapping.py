#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Text Wrapping

Greedy word wrap that breaks only at whitespace. A word longer than the
line width is never split; it occupies a line of its own.

Each wrapped line remembers where its words came from in the source
text, so annotation spans can be mapped onto drawn lines.

Version: 1.0.0
"""

from typing import Iterator, NamedTuple, Tuple
import re

_WORD = re.compile(r"\S+")


class WrappedWord(NamedTuple):
    column: int  # offset within the wrapped line
    start: int   # offset within the source text
    end: int


class WrappedLine(NamedTuple):
    text: str
    words: Tuple[WrappedWord, ...]
    paragraph_end: bool  # last line before a hard break or the end of text


def iter_lines(text: str, width: int, preserve_indent: bool = False) -> Iterator[WrappedLine]:
    """
    Yield the wrapped lines of ``text``.

    Hard line breaks are kept. Runs of whitespace inside a line collapse
    to one space, except leading indentation when ``preserve_indent``
    (code) is set.
    """
    if width <= 0:
        raise ValueError(f"width must be > 0, got {width}")

    offset = 0
    for source_line in text.split("\n"):
        line_start = offset
        offset += len(source_line) + 1

        matches = list(_WORD.finditer(source_line))
        if not matches:
            yield WrappedLine("", (), True)
            continue

        indent = ""
        if preserve_indent:
            indent = source_line[:matches[0].start()].replace("\t", "    ")

        current = ""
        words = []
        for match in matches:
            word = match.group()
            start, end = line_start + match.start(), line_start + match.end()
            if not current:
                if indent and not words and len(indent) + len(word) <= width:
                    current = indent
                words.append(WrappedWord(len(current), start, end))
                current += word
            elif len(current) + 1 + len(word) <= width:
                words.append(WrappedWord(len(current) + 1, start, end))
                current = f"{current} {word}"
            else:
                yield WrappedLine(current, tuple(words), False)
                current = word
                words = [WrappedWord(0, start, end)]
        yield WrappedLine(current, tuple(words), True)


def iter_wrapped_lines(text: str, width: int, preserve_indent: bool = False) -> Iterator[str]:
    """Line strings only"""
    for line in iter_lines(text, width, preserve_indent):
        yield line.text


class WrappedText:
    """
    Lazy, restartable sequence of wrapped lines.

    Nothing is computed until iterated; every iteration starts over from
    the first line.

    Usage:
        lines = WrappedText(block.text, 70)
        for line in lines:
            ...
        count = lines.line_count()
    """

    __slots__ = ("text", "width", "preserve_indent")

    def __init__(self, text: str, width: int, preserve_indent: bool = False):
        if width <= 0:
            raise ValueError(f"width must be > 0, got {width}")
        self.text = text
        self.width = width
        self.preserve_indent = preserve_indent

    def __iter__(self) -> Iterator[str]:
        if not self.text:
            return iter(())
        return iter_wrapped_lines(self.text, self.width, self.preserve_indent)

    def lines(self) -> Iterator[WrappedLine]:
        """Lines with source offsets"""
        if not self.text:
            return iter(())
        return iter_lines(self.text, self.width, self.preserve_indent)

    def line_count(self) -> int:
        return sum(1 for _ in self)

    def __eq__(self, other) -> bool:
        if not isinstance(other, WrappedText):
            return NotImplemented
        return (self.text, self.width, self.preserve_indent) == (other.text, other.width, other.preserve_indent)

    def __hash__(self) -> int:
        return hash((self.text, self.width, self.preserve_indent))

    def __repr__(self) -> str:
        preview = self.text[:30] + ("..." if len(self.text) > 30 else "")
        return f"WrappedText({preview!r}, width={self.width})"
