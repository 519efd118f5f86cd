"""Validation helpers for cursor positions on the reference buffer."""

from __future__ import annotations

from typing import Optional, Sequence

from .position import Position, position_at


class BufferValidationError(RuntimeError):
    """Raised when a caller hands the buffer an out-of-bounds position."""

    def __init__(self, message: str, *, position: Optional[Position] = None) -> None:
        super().__init__(message)
        self.position = position


def ensure_position(lines: Sequence[str], position: Position) -> Position:
    """Validate ``position`` and return it with a recomputed offset.

    The column may sit one past the last character so insert-mode style
    cursors and empty lines are accepted.
    """

    if position.line < 0 or position.line >= len(lines):
        raise BufferValidationError("Line out of range", position=position)
    if position.column < 0 or position.column > len(lines[position.line]):
        raise BufferValidationError("Column out of range", position=position)
    return position_at(lines, position.line, position.column)


__all__ = ["BufferValidationError", "ensure_position"]
