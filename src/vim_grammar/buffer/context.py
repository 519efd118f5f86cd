"""Boundary protocols between the interpreter and the host's text buffer."""

from __future__ import annotations

from typing import ContextManager, Protocol, Sequence, runtime_checkable

from .position import Position


class EditorContext(Protocol):
    """Editing surface the executor mutates.

    ``lines`` and ``content`` must stay consistent: ``content`` is ``lines``
    joined with ``\\n``.
    """

    @property
    def lines(self) -> Sequence[str]:
        ...

    @property
    def content(self) -> str:
        ...

    @property
    def cursor(self) -> Position:
        ...

    @property
    def active_buffer_id(self) -> str:
        ...

    @property
    def tab_size(self) -> int:
        ...

    def update_content(self, text: str) -> None:
        """Replace the whole document; the cursor is clamped by the host."""
        ...

    def set_cursor_position(self, position: Position) -> None:
        ...


@runtime_checkable
class HistoryContext(Protocol):
    """Optional host capability: undo storage and change grouping."""

    def undo(self) -> bool:
        ...

    def redo(self) -> bool:
        ...

    def transaction(self, label: str) -> ContextManager[object]:
        """Group every ``update_content`` inside the block into one undo step."""
        ...


__all__ = ["EditorContext", "HistoryContext"]
