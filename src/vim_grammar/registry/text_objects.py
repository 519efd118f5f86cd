"""Default text objects (the ``iw`` in ``diw``, the ``a(`` in ``ca(``).

Every object returns an exclusive characterwise ``Range`` except the
paragraph object, which is linewise.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from vim_grammar.buffer import Position, Range, offset_for, position_at, position_from_offset
from vim_grammar.grammar.ast import TextObjectMode

from .motions import char_class, sentence_starts

Span = Tuple[int, int]
SpanFunc = Callable[[str, int, bool], Optional[Span]]

_TAG = re.compile(r"<(/?)([A-Za-z][\w:.-]*)[^<>]*?(/?)>")


def _line_class(ch: str, big: bool) -> int:
    return 0 if ch in " \t" else char_class(ch, big)


def word_span(line: str, column: int, around: bool, big: bool) -> Optional[Span]:
    if not line:
        return None
    column = min(column, len(line) - 1)
    cls = _line_class(line[column], big)
    start = column
    while start > 0 and _line_class(line[start - 1], big) == cls:
        start -= 1
    end = column
    while end < len(line) and _line_class(line[end], big) == cls:
        end += 1
    if not around:
        return start, end

    if cls == 0:
        # blanks plus the word after them
        if end < len(line):
            next_cls = _line_class(line[end], big)
            while end < len(line) and _line_class(line[end], big) == next_cls:
                end += 1
        return start, end

    trailing = end
    while trailing < len(line) and line[trailing] in " \t":
        trailing += 1
    if trailing > end:
        return start, trailing
    while start > 0 and line[start - 1] in " \t":
        start -= 1
    return start, end


def quote_span(line: str, column: int, quote: str, around: bool) -> Optional[Span]:
    positions = [
        i for i, ch in enumerate(line) if ch == quote and (i == 0 or line[i - 1] != "\\")
    ]
    pairs = list(zip(positions[0::2], positions[1::2]))
    chosen = next((p for p in pairs if p[0] <= column <= p[1]), None)
    if chosen is None:
        chosen = next((p for p in pairs if p[0] > column), None)
    if chosen is None:
        return None
    open_at, close_at = chosen
    if not around:
        return open_at + 1, close_at
    end = close_at + 1
    trailing = end
    while trailing < len(line) and line[trailing] in " \t":
        trailing += 1
    if trailing > end:
        return open_at, trailing
    start = open_at
    while start > 0 and line[start - 1] in " \t":
        start -= 1
    return start, end


def bracket_span(text: str, offset: int, opener: str, closer: str, around: bool) -> Optional[Span]:
    depth = 0
    open_at = None
    index = offset
    if index < len(text) and text[index] == closer:
        index -= 1
    while index >= 0:
        ch = text[index]
        if ch == closer:
            depth += 1
        elif ch == opener:
            if depth == 0:
                open_at = index
                break
            depth -= 1
        index -= 1
    if open_at is None:
        return None

    depth = 0
    close_at = None
    for index in range(open_at + 1, len(text)):
        ch = text[index]
        if ch == opener:
            depth += 1
        elif ch == closer:
            if depth == 0:
                close_at = index
                break
            depth -= 1
    if close_at is None:
        return None

    if around:
        return open_at, close_at + 1
    start, end = open_at + 1, close_at
    if start < end and text[start] == "\n":
        start += 1
    line_start = text.rfind("\n", start, end)
    if line_start != -1 and not text[line_start + 1 : end].strip():
        end = line_start
    return start, max(start, end)


def tag_span(text: str, offset: int, around: bool) -> Optional[Span]:
    stack: List[Tuple[str, int, int]] = []
    best: Optional[Tuple[int, int, int, int]] = None
    for match in _TAG.finditer(text):
        closing, name, self_closing = match.group(1), match.group(2), match.group(3)
        if self_closing:
            continue
        if not closing:
            stack.append((name, match.start(), match.end()))
            continue
        for depth in range(len(stack) - 1, -1, -1):
            if stack[depth][0] == name:
                _, open_start, open_end = stack[depth]
                del stack[depth:]
                if open_start <= offset < match.end():
                    if best is None or open_start > best[0]:
                        best = (open_start, open_end, match.start(), match.end())
                break
    if best is None:
        return None
    open_start, open_end, close_start, close_end = best
    return (open_start, close_end) if around else (open_end, close_start)


def sentence_span(text: str, offset: int, around: bool) -> Optional[Span]:
    starts = sentence_starts(text)
    if not starts:
        return None
    start = max((s for s in starts if s <= offset), default=starts[0])
    following = [s for s in starts if s > start]
    end = following[0] if following else len(text)
    if around:
        return start, end
    trimmed = end
    while trimmed > start and text[trimmed - 1] in " \t\n":
        trimmed -= 1
    return start, trimmed


@dataclass(frozen=True, slots=True)
class LineTextObject:
    """Object computed from the cursor's line alone (words, quotes)."""

    func: Callable[[str, int, bool], Optional[Span]]

    def calculate(
        self, cursor: Position, lines: Sequence[str], mode: TextObjectMode
    ) -> Optional[Range]:
        span = self.func(lines[cursor.line], cursor.column, mode == "around")
        if span is None or (span[0] == span[1] and mode == "around"):
            return None
        return Range(
            start=position_at(lines, cursor.line, span[0]),
            end=position_at(lines, cursor.line, span[1]),
        )


@dataclass(frozen=True, slots=True)
class TextSpanObject:
    """Object computed over the whole document (brackets, tags, sentences)."""

    func: SpanFunc

    def calculate(
        self, cursor: Position, lines: Sequence[str], mode: TextObjectMode
    ) -> Optional[Range]:
        text = "\n".join(lines)
        offset = offset_for(lines, cursor.line, cursor.column)
        span = self.func(text, offset, mode == "around")
        if span is None:
            return None
        return Range(
            start=position_from_offset(lines, span[0]),
            end=position_from_offset(lines, span[1]),
        )


@dataclass(frozen=True, slots=True)
class ParagraphObject:
    def calculate(
        self, cursor: Position, lines: Sequence[str], mode: TextObjectMode
    ) -> Optional[Range]:
        blank = not lines[cursor.line].strip()

        def same(row: int) -> bool:
            return (not lines[row].strip()) == blank

        first = cursor.line
        while first > 0 and same(first - 1):
            first -= 1
        last = cursor.line
        while last < len(lines) - 1 and same(last + 1):
            last += 1

        if mode == "around":
            extended = last
            while extended < len(lines) - 1 and (not lines[extended + 1].strip()) != blank:
                extended += 1
            if extended > last:
                last = extended
            else:
                while first > 0 and (not lines[first - 1].strip()) != blank:
                    first -= 1

        return Range(
            start=position_at(lines, first, 0),
            end=position_at(lines, last, 0),
            linewise=True,
        )


def _word(big: bool) -> LineTextObject:
    return LineTextObject(lambda line, column, around: word_span(line, column, around, big))


def _quote(quote: str) -> LineTextObject:
    return LineTextObject(lambda line, column, around: quote_span(line, column, quote, around))


def _bracket(opener: str, closer: str) -> TextSpanObject:
    return TextSpanObject(
        lambda text, offset, around: bracket_span(text, offset, opener, closer, around)
    )


def default_text_objects() -> List[tuple[str, object]]:
    parens = _bracket("(", ")")
    squares = _bracket("[", "]")
    braces = _bracket("{", "}")
    angles = _bracket("<", ">")
    return [
        ("w", _word(big=False)),
        ("W", _word(big=True)),
        ('"', _quote('"')),
        ("'", _quote("'")),
        ("`", _quote("`")),
        ("(", parens),
        (")", parens),
        ("b", parens),
        ("[", squares),
        ("]", squares),
        ("{", braces),
        ("}", braces),
        ("B", braces),
        ("<", angles),
        (">", angles),
        ("t", TextSpanObject(tag_span)),
        ("s", TextSpanObject(sentence_span)),
        ("p", ParagraphObject()),
    ]


__all__ = [
    "LineTextObject",
    "ParagraphObject",
    "TextSpanObject",
    "bracket_span",
    "default_text_objects",
    "quote_span",
    "sentence_span",
    "tag_span",
    "word_span",
]
