"""Positions and ranges over a list-of-lines document."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Sequence


@dataclass(frozen=True, slots=True, order=True)
class Position:
    """Zero-based ``line``/``column`` plus the absolute character ``offset``.

    Lines are joined by a single ``\\n`` when computing offsets.
    """

    line: int
    column: int
    offset: int = 0


@dataclass(frozen=True, slots=True)
class Range:
    start: Position
    end: Position
    linewise: bool = False
    inclusive: bool = False
    blockwise: bool = False

    def ordered(self) -> "Range":
        if self.end < self.start:
            return replace(self, start=self.end, end=self.start)
        return self

    @property
    def characterwise(self) -> bool:
        return not self.linewise and not self.blockwise


def offset_for(lines: Sequence[str], line: int, column: int) -> int:
    return sum(len(text) + 1 for text in lines[:line]) + column


def position_at(lines: Sequence[str], line: int, column: int) -> Position:
    return Position(line, column, offset_for(lines, line, column))


def position_from_offset(lines: Sequence[str], offset: int) -> Position:
    running = 0
    for row, text in enumerate(lines):
        if offset <= running + len(text):
            return Position(row, offset - running, offset)
        running += len(text) + 1
    last = max(len(lines) - 1, 0)
    column = len(lines[last]) if lines else 0
    return position_at(lines, last, column)


def clamp_position(lines: Sequence[str], line: int, column: int) -> Position:
    """Nearest valid normal-mode position (column stops on the last character)."""

    if not lines:
        return Position(0, 0, 0)
    row = min(max(line, 0), len(lines) - 1)
    col = min(max(column, 0), max(len(lines[row]) - 1, 0))
    return position_at(lines, row, col)


__all__ = [
    "Position",
    "Range",
    "clamp_position",
    "offset_for",
    "position_at",
    "position_from_offset",
]
