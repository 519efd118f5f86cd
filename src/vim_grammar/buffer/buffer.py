"""In-memory reference buffer implementing ``EditorContext``."""

from __future__ import annotations

from contextlib import AbstractContextManager
from dataclasses import dataclass
from typing import ContextManager, Optional, Sequence

from vim_grammar.runtime import telemetry

from .position import Position, clamp_position, position_at
from .undo import UndoEntry, UndoTimeline
from .validation import ensure_position


@dataclass(frozen=True, slots=True)
class BufferView:
    text: str
    cursor: Position
    version: int


class Buffer:
    """List-of-lines document with a cursor and a linear undo timeline."""

    def __init__(
        self,
        text: str = "",
        *,
        buffer_id: str = "default",
        tab_size: int = 4,
        undo: Optional[UndoTimeline] = None,
    ) -> None:
        self._lines: list[str] = _split(text)
        self._cursor = Position(0, 0, 0)
        self._buffer_id = buffer_id
        self._tab_size = tab_size
        self.undo_timeline = undo or UndoTimeline()
        self.version = 0
        self._open: Optional[Transaction] = None

    @classmethod
    def from_text(
        cls, text: str, *, cursor: tuple[int, int] = (0, 0), **kwargs: object
    ) -> "Buffer":
        buffer = cls(text, **kwargs)  # type: ignore[arg-type]
        buffer.set_cursor_position(position_at(buffer.lines, *cursor))
        return buffer

    # EditorContext -------------------------------------------------------

    @property
    def lines(self) -> Sequence[str]:
        return tuple(self._lines)

    @property
    def content(self) -> str:
        return "\n".join(self._lines)

    @property
    def cursor(self) -> Position:
        return self._cursor

    @property
    def active_buffer_id(self) -> str:
        return self._buffer_id

    @property
    def tab_size(self) -> int:
        return self._tab_size

    def update_content(self, text: str) -> None:
        if self._open is not None:
            self._replace(text)
            return
        with self.transaction("update_content"):
            self._replace(text)

    def set_cursor_position(self, position: Position) -> None:
        self._cursor = ensure_position(self._lines, position)

    # History -------------------------------------------------------------

    def transaction(self, label: str) -> ContextManager[object]:
        if self._open is not None:
            return _Nested(self._open)
        return Transaction(self, label)

    def undo(self) -> bool:
        entry = self.undo_timeline.undo()
        if entry is None:
            return False
        self._restore(entry.before_text, entry.cursor_before)
        return True

    def redo(self) -> bool:
        entry = self.undo_timeline.redo()
        if entry is None:
            return False
        self._restore(entry.after_text, entry.cursor_after)
        return True

    # Helpers -------------------------------------------------------------

    def line(self, index: Optional[int] = None) -> str:
        return self._lines[self._cursor.line if index is None else index]

    def snapshot(self) -> BufferView:
        return BufferView(text=self.content, cursor=self._cursor, version=self.version)

    def _replace(self, text: str) -> None:
        self._lines = _split(text)
        self.version += 1
        cursor = self._cursor
        row = min(cursor.line, len(self._lines) - 1)
        column = min(cursor.column, len(self._lines[row]))
        self._cursor = position_at(self._lines, row, column)

    def _restore(self, text: str, cursor: Position) -> None:
        self._lines = _split(text)
        self.version += 1
        self._cursor = clamp_position(self._lines, cursor.line, cursor.column)


class Transaction(AbstractContextManager["Transaction"]):
    """Collapse the edits made inside the block into a single undo entry."""

    def __init__(self, buffer: Buffer, label: str) -> None:
        self.buffer = buffer
        self.label = label
        self._span_cm: Optional[ContextManager[telemetry.SpanHandle]] = None
        self._before_text = ""
        self._before_cursor = Position(0, 0, 0)

    def __enter__(self) -> "Transaction":
        self._before_text = self.buffer.content
        self._before_cursor = self.buffer.cursor
        self.buffer._open = self
        self._span_cm = telemetry.span(
            name=f"buffer::{self.label}",
            component=True,
            metadata={"buffer": self.buffer.active_buffer_id},
        )
        self._span_cm.__enter__()
        return self

    def commit(self) -> None:
        after_text = self.buffer.content
        if after_text == self._before_text:
            return
        self.buffer.undo_timeline.push(
            UndoEntry(
                label=self.label,
                before_text=self._before_text,
                after_text=after_text,
                cursor_before=self._before_cursor,
                cursor_after=self.buffer.cursor,
            )
        )

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.buffer._open = None
        try:
            if exc_type is None:
                self.commit()
        finally:
            if self._span_cm is not None:
                self._span_cm.__exit__(exc_type, exc, tb)
        return False


class _Nested(AbstractContextManager[object]):
    def __init__(self, outer: Transaction) -> None:
        self.outer = outer

    def __enter__(self) -> Transaction:
        return self.outer

    def __exit__(self, exc_type, exc, tb) -> bool:
        return False


def _split(text: str) -> list[str]:
    return text.split("\n")


__all__ = ["Buffer", "BufferView", "Transaction"]
