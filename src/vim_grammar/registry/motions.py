"""Default motion implementations.

Each motion computes a destination without touching the text. The
registry wraps them so ``calculate`` returns ``Range(start=cursor,
end=destination)``; the executor decides the range's shape.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

from vim_grammar.buffer import Position, Range, offset_for, position_at, position_from_offset

from .base import MotionOptions

MotionFunc = Callable[[Position, Sequence[str], int, MotionOptions], Optional[Position]]

_BLANK = " \t\n"
_CLOSERS = ")]\"'"
_PAIRS = {"(": ")", "[": "]", "{": "}", ")": "(", "]": "[", "}": "{"}


def char_class(ch: str, big: bool = False) -> int:
    """0 for blanks, 2 for keyword characters, 1 for other punctuation."""

    if ch in _BLANK:
        return 0
    if big:
        return 1
    if ch.isalnum() or ch == "_":
        return 2
    return 1


def first_non_blank(line: str) -> int:
    stripped = len(line) - len(line.lstrip(" \t"))
    return min(stripped, max(len(line) - 1, 0))


def last_non_blank(line: str) -> int:
    trimmed = line.rstrip(" \t")
    return max(len(trimmed) - 1, 0)


def _is_blank(line: str) -> bool:
    return not line.strip()


def _cursor_offset(cursor: Position, lines: Sequence[str]) -> int:
    return offset_for(lines, cursor.line, cursor.column)


def _line_start(lines: Sequence[str], row: int) -> Position:
    row = min(max(row, 0), len(lines) - 1)
    return position_at(lines, row, first_non_blank(lines[row]))


# Words ---------------------------------------------------------------


def _next_word_start(text: str, i: int, big: bool) -> int:
    n = len(text)
    if i >= n:
        return n
    cls = char_class(text[i], big)
    if cls:
        while i < n and char_class(text[i], big) == cls:
            i += 1
    while i < n and char_class(text[i], big) == 0:
        # an empty line counts as a word
        if text[i] == "\n" and (i + 1 >= n or text[i + 1] == "\n"):
            return i + 1
        i += 1
    return i


def _next_word_end(text: str, i: int, big: bool) -> int:
    n = len(text)
    i += 1
    while i < n and char_class(text[i], big) == 0:
        i += 1
    if i >= n:
        return max(n - 1, 0)
    cls = char_class(text[i], big)
    while i + 1 < n and char_class(text[i + 1], big) == cls:
        i += 1
    return i


def _prev_word_start(text: str, i: int, big: bool) -> int:
    if i <= 0:
        return 0
    i -= 1
    while i > 0 and char_class(text[i], big) == 0:
        if text[i] == "\n" and text[i - 1] == "\n":
            return i
        i -= 1
    if i <= 0:
        return 0
    cls = char_class(text[i], big)
    while i > 0 and char_class(text[i - 1], big) == cls:
        i -= 1
    return i


def _prev_word_end(text: str, i: int, big: bool) -> int:
    if i >= len(text):
        i = len(text) - 1
    if i <= 0:
        return 0
    cls = char_class(text[i], big)
    if cls:
        while i >= 0 and char_class(text[i], big) == cls:
            i -= 1
    while i >= 0 and char_class(text[i], big) == 0:
        i -= 1
    return max(i, 0)


def _word_motion(step: Callable[[str, int, bool], int], big: bool) -> MotionFunc:
    def motion(
        cursor: Position, lines: Sequence[str], count: int, options: MotionOptions
    ) -> Optional[Position]:
        text = "\n".join(lines)
        offset = _cursor_offset(cursor, lines)
        for _ in range(count):
            offset = step(text, offset, big)
        return position_from_offset(lines, offset)

    return motion


# Lines ---------------------------------------------------------------


def motion_left(cursor: Position, lines: Sequence[str], count: int, options: MotionOptions):
    return position_at(lines, cursor.line, max(cursor.column - count, 0))


def motion_right(cursor: Position, lines: Sequence[str], count: int, options: MotionOptions):
    return position_at(lines, cursor.line, min(cursor.column + count, len(lines[cursor.line])))


def motion_down(cursor: Position, lines: Sequence[str], count: int, options: MotionOptions):
    if cursor.line >= len(lines) - 1:
        return None
    row = min(cursor.line + count, len(lines) - 1)
    return position_at(lines, row, min(cursor.column, len(lines[row])))


def motion_up(cursor: Position, lines: Sequence[str], count: int, options: MotionOptions):
    if cursor.line <= 0:
        return None
    row = max(cursor.line - count, 0)
    return position_at(lines, row, min(cursor.column, len(lines[row])))


def motion_line_start(cursor: Position, lines: Sequence[str], count: int, options: MotionOptions):
    return position_at(lines, cursor.line, 0)


def motion_first_non_blank(
    cursor: Position, lines: Sequence[str], count: int, options: MotionOptions
):
    return _line_start(lines, cursor.line)


def motion_line_end(cursor: Position, lines: Sequence[str], count: int, options: MotionOptions):
    row = min(cursor.line + count - 1, len(lines) - 1)
    return position_at(lines, row, max(len(lines[row]) - 1, 0))


def motion_first_non_blank_down(
    cursor: Position, lines: Sequence[str], count: int, options: MotionOptions
):
    """``_``: first non-blank ``count - 1`` lines below."""

    return _line_start(lines, cursor.line + count - 1)


def motion_last_non_blank(
    cursor: Position, lines: Sequence[str], count: int, options: MotionOptions
):
    row = min(cursor.line + count - 1, len(lines) - 1)
    return position_at(lines, row, last_non_blank(lines[row]))


def motion_document_start(
    cursor: Position, lines: Sequence[str], count: int, options: MotionOptions
):
    return _line_start(lines, count - 1 if options.explicit_count else 0)


def motion_document_end(
    cursor: Position, lines: Sequence[str], count: int, options: MotionOptions
):
    return _line_start(lines, count - 1 if options.explicit_count else len(lines) - 1)


def motion_screen_top(cursor: Position, lines: Sequence[str], count: int, options: MotionOptions):
    return _line_start(lines, count - 1)


def motion_screen_middle(
    cursor: Position, lines: Sequence[str], count: int, options: MotionOptions
):
    return _line_start(lines, (len(lines) - 1) // 2)


def motion_screen_bottom(
    cursor: Position, lines: Sequence[str], count: int, options: MotionOptions
):
    return _line_start(lines, len(lines) - count)


def motion_stay(cursor: Position, lines: Sequence[str], count: int, options: MotionOptions):
    """Scroll commands keep the cursor where it is."""

    return position_at(lines, cursor.line, cursor.column)


# Paragraphs, sentences, sections -------------------------------------


def _paragraph_row(lines: Sequence[str], row: int, count: int, step: int) -> int:
    """Row of the ``count``-th blank line reached after passing some text."""

    last = len(lines) - 1
    for _ in range(count):
        seen_text = False
        while True:
            if not _is_blank(lines[row]):
                seen_text = True
            if not 0 <= row + step <= last:
                return row
            row += step
            if seen_text and _is_blank(lines[row]):
                break
    return row


def motion_paragraph_forward(
    cursor: Position, lines: Sequence[str], count: int, options: MotionOptions
):
    row = _paragraph_row(lines, cursor.line, count, 1)
    column = 0 if _is_blank(lines[row]) else max(len(lines[row]) - 1, 0)
    return position_at(lines, row, column)


def motion_paragraph_backward(
    cursor: Position, lines: Sequence[str], count: int, options: MotionOptions
):
    return position_at(lines, _paragraph_row(lines, cursor.line, count, -1), 0)


def sentence_starts(text: str) -> List[int]:
    n = len(text)
    starts: List[int] = []
    i = 0
    while i < n and text[i] in _BLANK:
        i += 1
    if i < n:
        starts.append(i)
    j = 0
    while j < n:
        ch = text[j]
        if ch in ".!?":
            k = j + 1
            while k < n and text[k] in _CLOSERS:
                k += 1
            if k < n and text[k] in _BLANK:
                while k < n and text[k] in _BLANK:
                    k += 1
                if k < n:
                    starts.append(k)
                j = k
                continue
        elif ch == "\n" and j + 1 < n and text[j + 1] == "\n":
            starts.append(j + 1)
            k = j + 1
            while k < n and text[k] in _BLANK:
                k += 1
            if k < n:
                starts.append(k)
            j = k
            continue
        j += 1
    return sorted(set(starts))


def motion_sentence_forward(
    cursor: Position, lines: Sequence[str], count: int, options: MotionOptions
):
    text = "\n".join(lines)
    offset = _cursor_offset(cursor, lines)
    starts = sentence_starts(text)
    for _ in range(count):
        following = [s for s in starts if s > offset]
        if not following:
            offset = max(len(text) - 1, 0)
            break
        offset = following[0]
    return position_from_offset(lines, offset)


def motion_sentence_backward(
    cursor: Position, lines: Sequence[str], count: int, options: MotionOptions
):
    text = "\n".join(lines)
    offset = _cursor_offset(cursor, lines)
    starts = sentence_starts(text)
    for _ in range(count):
        preceding = [s for s in starts if s < offset]
        if not preceding:
            offset = 0
            break
        offset = preceding[-1]
    return position_from_offset(lines, offset)


def _section_motion(forward: bool, brace: str) -> MotionFunc:
    def motion(cursor: Position, lines: Sequence[str], count: int, options: MotionOptions):
        step = 1 if forward else -1
        row = cursor.line
        for _ in range(count):
            row += step
            while 0 <= row < len(lines) and not lines[row].startswith(brace):
                row += step
            if not 0 <= row < len(lines):
                row = len(lines) - 1 if forward else 0
                break
        return position_at(lines, row, 0)

    return motion


def _method_motion(forward: bool) -> MotionFunc:
    def motion(cursor: Position, lines: Sequence[str], count: int, options: MotionOptions):
        rows = range(cursor.line + 1, len(lines)) if forward else range(cursor.line - 1, -1, -1)
        found = [row for row in rows if "{" in lines[row]]
        if len(found) < count:
            return None
        return _line_start(lines, found[count - 1])

    return motion


def motion_match_pair(cursor: Position, lines: Sequence[str], count: int, options: MotionOptions):
    """``%``: jump to the matching bracket; ``N%`` goes to N percent of the file."""

    if options.explicit_count:
        if count > 100:
            return None
        return _line_start(lines, (count * len(lines) + 99) // 100 - 1)

    line = lines[cursor.line]
    column = next(
        (col for col in range(cursor.column, len(line)) if line[col] in _PAIRS), None
    )
    if column is None:
        return None

    text = "\n".join(lines)
    start = offset_for(lines, cursor.line, column)
    opener = text[start]
    partner = _PAIRS[opener]
    forward = opener in "([{"
    step = 1 if forward else -1
    depth = 0
    index = start
    while 0 <= index < len(text):
        ch = text[index]
        if ch == opener:
            depth += 1
        elif ch == partner:
            depth -= 1
            if depth == 0:
                return position_from_offset(lines, index)
        index += step
    return None


# Find, search, marks ---------------------------------------------------


def find_in_line(
    line: str, column: int, key: str, char: str, count: int, *, repeat: bool = False
) -> Optional[int]:
    """Column reached by ``f``/``F``/``t``/``T`` or ``None`` if not found."""

    forward = key in ("f", "t")
    till = key in ("t", "T")
    # a repeated till must not get stuck right before its target
    skip = 1 if till and repeat else 0
    if forward:
        hits = [i for i in range(column + 1 + skip, len(line)) if line[i] == char]
    else:
        hits = [i for i in range(column - 1 - skip, -1, -1) if line[i] == char]
    if len(hits) < count:
        return None
    target = hits[count - 1]
    if till:
        target = target - 1 if forward else target + 1
    return target


_VIM_WORD_BOUNDARY = re.compile(r"\\[<>]")


def compile_pattern(pattern: str) -> "re.Pattern[str]":
    """Compile a search pattern, treating invalid regular expressions literally."""

    translated = _VIM_WORD_BOUNDARY.sub(r"\\b", pattern)
    try:
        return re.compile(translated)
    except re.error:
        return re.compile(re.escape(pattern))


def search_text(
    text: str, offset: int, pattern: str, *, forward: bool, wrap: bool = True
) -> Optional[int]:
    regex = compile_pattern(pattern)
    if forward:
        found = regex.search(text, offset + 1)
        if found is None and wrap:
            found = regex.search(text, 0)
        return found.start() if found else None
    starts = [m.start() for m in regex.finditer(text)]
    before = [s for s in starts if s < offset]
    if before:
        return before[-1]
    if wrap and starts:
        return starts[-1]
    return None


@dataclass(slots=True)
class MotionMemory:
    """State shared by stateful motions: last find, last search and marks."""

    last_find: Optional[tuple[str, str]] = None
    last_search: Optional[tuple[bool, str]] = None
    marks: Dict[str, Position] = field(default_factory=dict)
    search_wrap: bool = True

    def set_mark(self, name: str, position: Position) -> None:
        self.marks[name] = position


_REVERSED_FIND = {"f": "F", "F": "f", "t": "T", "T": "t"}


class MotionLibrary:
    """Stateful motions bound to one ``MotionMemory``."""

    def __init__(self, memory: Optional[MotionMemory] = None) -> None:
        self.memory = memory or MotionMemory()

    def find_char(self, key: str) -> MotionFunc:
        def motion(cursor: Position, lines: Sequence[str], count: int, options: MotionOptions):
            if options.char is None:
                return None
            column = find_in_line(lines[cursor.line], cursor.column, key, options.char, count)
            if column is None:
                return None
            self.memory.last_find = (key, options.char)
            return position_at(lines, cursor.line, column)

        return motion

    def repeat_find(self, reverse: bool) -> MotionFunc:
        def motion(cursor: Position, lines: Sequence[str], count: int, options: MotionOptions):
            if self.memory.last_find is None:
                return None
            key, char = self.memory.last_find
            if reverse:
                key = _REVERSED_FIND[key]
            column = find_in_line(
                lines[cursor.line], cursor.column, key, char, count, repeat=True
            )
            return None if column is None else position_at(lines, cursor.line, column)

        return motion

    def _search(
        self, cursor: Position, lines: Sequence[str], count: int, pattern: str, forward: bool
    ) -> Optional[Position]:
        text = "\n".join(lines)
        offset = _cursor_offset(cursor, lines)
        for _ in range(count):
            found = search_text(
                text, offset, pattern, forward=forward, wrap=self.memory.search_wrap
            )
            if found is None:
                return None
            offset = found
        return position_from_offset(lines, offset)

    def search(self, forward: bool) -> MotionFunc:
        def motion(cursor: Position, lines: Sequence[str], count: int, options: MotionOptions):
            pattern = options.pattern
            if not pattern:
                # an empty pattern reuses the previous one
                if self.memory.last_search is None:
                    return None
                pattern = self.memory.last_search[1]
            if options.direction is not None:
                direction_forward = options.direction == "forward"
            else:
                direction_forward = forward
            self.memory.last_search = (direction_forward, pattern)
            return self._search(cursor, lines, count, pattern, direction_forward)

        return motion

    def repeat_search(self, reverse: bool) -> MotionFunc:
        def motion(cursor: Position, lines: Sequence[str], count: int, options: MotionOptions):
            if self.memory.last_search is None:
                return None
            forward, pattern = self.memory.last_search
            return self._search(cursor, lines, count, pattern, forward != reverse)

        return motion

    def search_word(self, forward: bool) -> MotionFunc:
        def motion(cursor: Position, lines: Sequence[str], count: int, options: MotionOptions):
            line = lines[cursor.line]
            start = next(
                (c for c in range(cursor.column, len(line)) if char_class(line[c]) == 2),
                None,
            )
            if start is None:
                return None
            while start > 0 and char_class(line[start - 1]) == 2:
                start -= 1
            end = start
            while end < len(line) and char_class(line[end]) == 2:
                end += 1
            pattern = rf"\b{re.escape(line[start:end])}\b"
            self.memory.last_search = (forward, pattern)
            anchor = position_at(lines, cursor.line, start)
            return self._search(anchor, lines, count, pattern, forward)

        return motion

    def mark(self, linewise: bool) -> MotionFunc:
        def motion(cursor: Position, lines: Sequence[str], count: int, options: MotionOptions):
            if options.mark is None or options.mark not in self.memory.marks:
                return None
            target = self.memory.marks[options.mark]
            if target.line >= len(lines):
                return None
            if linewise:
                return _line_start(lines, target.line)
            return position_at(lines, target.line, min(target.column, len(lines[target.line])))

        return motion


@dataclass(frozen=True, slots=True)
class FunctionMotion:
    """Adapts a destination function to the registry's motion protocol."""

    key: str
    func: MotionFunc

    def calculate(
        self,
        cursor: Position,
        lines: Sequence[str],
        count: int,
        options: MotionOptions,
    ) -> Optional[Range]:
        if not lines:
            return None
        destination = self.func(cursor, lines, max(count, 1), options)
        if destination is None:
            return None
        return Range(start=cursor, end=destination)


def default_motions(library: Optional[MotionLibrary] = None) -> List[tuple[str, FunctionMotion]]:
    lib = library or MotionLibrary()
    funcs: Dict[str, MotionFunc] = {
        "h": motion_left,
        "l": motion_right,
        "j": motion_down,
        "k": motion_up,
        "gj": motion_down,
        "gk": motion_up,
        "0": motion_line_start,
        "g0": motion_line_start,
        "^": motion_first_non_blank,
        "g^": motion_first_non_blank,
        "$": motion_line_end,
        "g$": motion_line_end,
        "_": motion_first_non_blank_down,
        "g_": motion_last_non_blank,
        "gg": motion_document_start,
        "G": motion_document_end,
        "H": motion_screen_top,
        "M": motion_screen_middle,
        "L": motion_screen_bottom,
        "zt": motion_stay,
        "zz": motion_stay,
        "zb": motion_stay,
        "w": _word_motion(_next_word_start, big=False),
        "W": _word_motion(_next_word_start, big=True),
        "e": _word_motion(_next_word_end, big=False),
        "E": _word_motion(_next_word_end, big=True),
        "b": _word_motion(_prev_word_start, big=False),
        "B": _word_motion(_prev_word_start, big=True),
        "ge": _word_motion(_prev_word_end, big=False),
        "gE": _word_motion(_prev_word_end, big=True),
        "}": motion_paragraph_forward,
        "{": motion_paragraph_backward,
        ")": motion_sentence_forward,
        "(": motion_sentence_backward,
        "]]": _section_motion(True, "{"),
        "[[": _section_motion(False, "{"),
        "][": _section_motion(True, "}"),
        "[]": _section_motion(False, "}"),
        "]m": _method_motion(True),
        "[m": _method_motion(False),
        "%": motion_match_pair,
        "f": lib.find_char("f"),
        "F": lib.find_char("F"),
        "t": lib.find_char("t"),
        "T": lib.find_char("T"),
        ";": lib.repeat_find(reverse=False),
        ",": lib.repeat_find(reverse=True),
        "/": lib.search(forward=True),
        "?": lib.search(forward=False),
        "n": lib.repeat_search(reverse=False),
        "N": lib.repeat_search(reverse=True),
        "*": lib.search_word(forward=True),
        "#": lib.search_word(forward=False),
        "'": lib.mark(linewise=True),
        "`": lib.mark(linewise=False),
    }
    return [(key, FunctionMotion(key, func)) for key, func in funcs.items()]


__all__ = [
    "FunctionMotion",
    "MotionFunc",
    "MotionLibrary",
    "MotionMemory",
    "char_class",
    "compile_pattern",
    "default_motions",
    "find_in_line",
    "first_non_blank",
    "last_non_blank",
    "search_text",
    "sentence_starts",
]
