"""Default operator implementations.

Operators receive an ordered, already shaped ``Range`` and mutate the
context. Register writes are left to the executor, which reads the
returned ``OperatorOutcome``.
"""

from __future__ import annotations

import textwrap
from dataclasses import dataclass
from typing import Callable, List, Sequence, Tuple

from vim_grammar.buffer import EditorContext, Range, clamp_position, offset_for, position_at

from .base import OperatorOutcome
from .motions import first_non_blank

TEXT_WIDTH = 79


def _end_offset(lines: Sequence[str], target: Range) -> int:
    end = target.end
    offset = offset_for(lines, end.line, end.column)
    if target.inclusive and end.column < len(lines[end.line]):
        offset += 1
    return offset


def char_span(lines: Sequence[str], target: Range) -> Tuple[int, int]:
    """``[start, end)`` offsets covered by a characterwise range."""

    start = offset_for(lines, target.start.line, target.start.column)
    return start, max(_end_offset(lines, target), start)


def block_columns(target: Range) -> Tuple[int, int]:
    left = min(target.start.column, target.end.column)
    right = max(target.start.column, target.end.column) + 1
    return left, right


def _commit(context: EditorContext, lines: List[str], row: int, column: int, *, insert: bool = False) -> None:
    if not lines:
        lines = [""]
    context.update_content("\n".join(lines))
    if insert:
        row = min(max(row, 0), len(lines) - 1)
        context.set_cursor_position(position_at(lines, row, min(column, len(lines[row]))))
    else:
        context.set_cursor_position(clamp_position(lines, row, column))


def _remove(context: EditorContext, target: Range, *, insert: bool) -> Tuple[str, str]:
    """Cut ``target`` out of the buffer and return ``(text, register_type)``."""

    lines = list(context.lines)

    if target.linewise:
        first, last = target.start.line, min(target.end.line, len(lines) - 1)
        removed = lines[first : last + 1]
        if insert:
            indent = removed[0][: len(removed[0]) - len(removed[0].lstrip(" \t"))]
            lines[first : last + 1] = [indent]
            _commit(context, lines, first, len(indent), insert=True)
        else:
            del lines[first : last + 1]
            row = min(first, max(len(lines) - 1, 0))
            _commit(context, lines, row, first_non_blank(lines[row]) if lines else 0)
        return "\n".join(removed), "line"

    if target.blockwise:
        left, right = block_columns(target)
        pieces = []
        for row in range(target.start.line, target.end.line + 1):
            line = lines[row]
            pieces.append(line[left:right])
            lines[row] = line[:left] + line[right:]
        _commit(context, lines, target.start.line, left, insert=insert)
        return "\n".join(pieces), "block"

    content = "\n".join(lines)
    start, end = char_span(lines, target)
    removed_text = content[start:end]
    updated = (content[:start] + content[end:]).split("\n")
    _commit(context, updated, target.start.line, target.start.column, insert=insert)
    return removed_text, "char"


@dataclass(frozen=True, slots=True)
class DeleteOperator:
    def execute(self, target: Range, context: EditorContext) -> OperatorOutcome:
        text, register_type = _remove(context, target, insert=False)
        return OperatorOutcome(text=text, register_type=register_type)  # type: ignore[arg-type]


@dataclass(frozen=True, slots=True)
class ChangeOperator:
    """Delete and hand over to insert mode; ``cc`` keeps the line's indent."""

    def execute(self, target: Range, context: EditorContext) -> OperatorOutcome:
        text, register_type = _remove(context, target, insert=True)
        return OperatorOutcome(
            text=text, register_type=register_type, enters_insert=True  # type: ignore[arg-type]
        )


@dataclass(frozen=True, slots=True)
class YankOperator:
    def execute(self, target: Range, context: EditorContext) -> OperatorOutcome:
        lines = list(context.lines)
        cursor = context.cursor
        if target.linewise:
            last = min(target.end.line, len(lines) - 1)
            text = "\n".join(lines[target.start.line : last + 1])
            register_type = "line"
            if cursor.line != target.start.line:
                context.set_cursor_position(
                    position_at(lines, target.start.line, first_non_blank(lines[target.start.line]))
                )
        elif target.blockwise:
            left, right = block_columns(target)
            text = "\n".join(
                lines[row][left:right] for row in range(target.start.line, target.end.line + 1)
            )
            register_type = "block"
            context.set_cursor_position(clamp_position(lines, target.start.line, left))
        else:
            start, end = char_span(lines, target)
            text = "\n".join(lines)[start:end]
            register_type = "char"
            context.set_cursor_position(
                clamp_position(lines, target.start.line, target.start.column)
            )
        return OperatorOutcome(text=text, register_type=register_type, yank=True)  # type: ignore[arg-type]


def _shift_right(line: str, width: int) -> str:
    return line if not line.strip() else " " * width + line


def _shift_left(line: str, width: int) -> str:
    removed = 0
    index = 0
    while index < len(line) and removed < width and line[index] in " \t":
        removed += width if line[index] == "\t" else 1
        index += 1
    return line[index:]


def _reindent(line: str, width: int) -> str:
    body = line.lstrip(" \t")
    indent = line[: len(line) - len(body)].expandtabs(width)
    return (indent + body).rstrip() if body else ""


@dataclass(frozen=True, slots=True)
class LineTransformOperator:
    """Rewrites every line the range touches; always linewise, no register write."""

    transform: Callable[[str, int], str]

    def execute(self, target: Range, context: EditorContext) -> OperatorOutcome:
        lines = list(context.lines)
        last = min(target.end.line, len(lines) - 1)
        for row in range(target.start.line, last + 1):
            lines[row] = self.transform(lines[row], context.tab_size)
        first = target.start.line
        _commit(context, lines, first, first_non_blank(lines[first]))
        return OperatorOutcome()


@dataclass(frozen=True, slots=True)
class CaseOperator:
    convert: Callable[[str], str]

    def execute(self, target: Range, context: EditorContext) -> OperatorOutcome:
        lines = list(context.lines)
        if target.linewise:
            last = min(target.end.line, len(lines) - 1)
            for row in range(target.start.line, last + 1):
                lines[row] = self.convert(lines[row])
            _commit(context, lines, target.start.line, target.start.column)
        elif target.blockwise:
            left, right = block_columns(target)
            for row in range(target.start.line, target.end.line + 1):
                line = lines[row]
                lines[row] = line[:left] + self.convert(line[left:right]) + line[right:]
            _commit(context, lines, target.start.line, left)
        else:
            content = "\n".join(lines)
            start, end = char_span(lines, target)
            updated = content[:start] + self.convert(content[start:end]) + content[end:]
            _commit(context, updated.split("\n"), target.start.line, target.start.column)
        return OperatorOutcome()


@dataclass(frozen=True, slots=True)
class FormatTextOperator:
    """``gq``: rewrap each paragraph in the range to ``width`` columns."""

    width: int = TEXT_WIDTH

    def execute(self, target: Range, context: EditorContext) -> OperatorOutcome:
        lines = list(context.lines)
        first, last = target.start.line, min(target.end.line, len(lines) - 1)
        formatted: List[str] = []
        paragraph: List[str] = []

        def flush() -> None:
            if not paragraph:
                return
            indent = paragraph[0][: len(paragraph[0]) - len(paragraph[0].lstrip())]
            formatted.extend(
                textwrap.wrap(
                    " ".join(part.strip() for part in paragraph),
                    width=self.width,
                    initial_indent=indent,
                    subsequent_indent=indent,
                )
            )
            paragraph.clear()

        for line in lines[first : last + 1]:
            if line.strip():
                paragraph.append(line)
            else:
                flush()
                formatted.append(line)
        flush()

        lines[first : last + 1] = formatted
        row = first + max(len(formatted) - 1, 0)
        _commit(context, lines, row, first_non_blank(lines[row]) if lines else 0)
        return OperatorOutcome()


def default_operators() -> List[tuple[str, object]]:
    return [
        ("d", DeleteOperator()),
        ("c", ChangeOperator()),
        ("y", YankOperator()),
        (">", LineTransformOperator(_shift_right)),
        ("<", LineTransformOperator(_shift_left)),
        ("=", LineTransformOperator(_reindent)),
        ("g~", CaseOperator(str.swapcase)),
        ("gu", CaseOperator(str.lower)),
        ("gU", CaseOperator(str.upper)),
        ("gq", FormatTextOperator()),
    ]


__all__ = [
    "CaseOperator",
    "ChangeOperator",
    "DeleteOperator",
    "FormatTextOperator",
    "LineTransformOperator",
    "TEXT_WIDTH",
    "YankOperator",
    "block_columns",
    "char_span",
    "default_operators",
]
