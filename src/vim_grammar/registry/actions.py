"""Registry-backed normal-mode actions: ``J``, ``~``, undo and redo."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from vim_grammar.buffer import EditorContext, HistoryContext, clamp_position


@dataclass(frozen=True, slots=True)
class JoinLinesAction:
    """``J``: join ``count`` lines (at least two), separating them with one space."""

    def execute(self, context: EditorContext, count: int) -> Optional[bool]:
        lines = list(context.lines)
        row = context.cursor.line
        joins = max(count, 2) - 1
        if row >= len(lines) - 1:
            return False

        joined = lines[row]
        column = 0
        for following in lines[row + 1 : row + 1 + joins]:
            body = following.lstrip(" \t")
            if body and joined and not joined.endswith((" ", "\t")) and not body.startswith(")"):
                column = len(joined)
                joined = f"{joined} {body}"
            else:
                column = max(len(joined) - 1, 0)
                joined = joined + body
        lines[row : row + 1 + joins] = [joined]
        context.update_content("\n".join(lines))
        context.set_cursor_position(clamp_position(lines, row, column))
        return True


@dataclass(frozen=True, slots=True)
class ToggleCaseAction:
    """``~``: switch case of ``count`` characters and move past them."""

    def execute(self, context: EditorContext, count: int) -> Optional[bool]:
        lines: List[str] = list(context.lines)
        cursor = context.cursor
        line = lines[cursor.line]
        if not line:
            return False
        end = min(cursor.column + max(count, 1), len(line))
        lines[cursor.line] = line[: cursor.column] + line[cursor.column : end].swapcase() + line[end:]
        context.update_content("\n".join(lines))
        context.set_cursor_position(clamp_position(lines, cursor.line, end))
        return True


@dataclass(frozen=True, slots=True)
class UndoAction:
    def execute(self, context: EditorContext, count: int) -> Optional[bool]:
        if not isinstance(context, HistoryContext):
            return False
        return context.undo()


@dataclass(frozen=True, slots=True)
class RedoAction:
    def execute(self, context: EditorContext, count: int) -> Optional[bool]:
        if not isinstance(context, HistoryContext):
            return False
        return context.redo()


def default_actions() -> List[tuple[str, object]]:
    return [
        ("J", JoinLinesAction()),
        ("~", ToggleCaseAction()),
        ("u", UndoAction()),
        ("<C-r>", RedoAction()),
    ]


__all__ = [
    "JoinLinesAction",
    "RedoAction",
    "ToggleCaseAction",
    "UndoAction",
    "default_actions",
]
