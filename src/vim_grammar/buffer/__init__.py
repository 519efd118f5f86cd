"""Positions, registers, undo history and the reference buffer."""

from .buffer import Buffer, BufferView, Transaction
from .context import EditorContext, HistoryContext
from .position import (
    Position,
    Range,
    clamp_position,
    offset_for,
    position_at,
    position_from_offset,
)
from .registers import RegisterBank, RegisterType, RegisterValue
from .undo import UndoEntry, UndoTimeline
from .validation import BufferValidationError, ensure_position

__all__ = [
    "Buffer",
    "BufferValidationError",
    "BufferView",
    "EditorContext",
    "HistoryContext",
    "Position",
    "Range",
    "RegisterBank",
    "RegisterType",
    "RegisterValue",
    "Transaction",
    "UndoEntry",
    "UndoTimeline",
    "clamp_position",
    "ensure_position",
    "offset_for",
    "position_at",
    "position_from_offset",
]
