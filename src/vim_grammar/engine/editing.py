"""Built-in edits the executor performs without consulting the registry."""

from __future__ import annotations

from typing import List

from vim_grammar.buffer import (
    EditorContext,
    RegisterValue,
    clamp_position,
    offset_for,
    position_at,
    position_from_offset,
)
from vim_grammar.grammar.ast import ModeChange
from vim_grammar.grammar.keys import CR


def _indent_of(line: str) -> str:
    return line[: len(line) - len(line.lstrip(" \t"))]


def put_text(context: EditorContext, value: RegisterValue, *, after: bool, count: int = 1) -> None:
    """Insert ``count`` copies of ``value`` relative to the cursor as one block of text."""

    lines: List[str] = list(context.lines)
    cursor = context.cursor

    if value.type == "line":
        row = cursor.line + 1 if after else cursor.line
        lines[row:row] = value.text.split("\n") * count
        context.update_content("\n".join(lines))
        context.set_cursor_position(
            position_at(lines, row, len(_indent_of(lines[row])) if lines[row].strip() else 0)
        )
        return

    if value.type == "block":
        column = cursor.column + 1 if after and lines[cursor.line] else cursor.column
        pieces = value.text.split("\n")
        width = max(len(piece) for piece in pieces)
        for index, piece in enumerate(pieces):
            piece = piece.ljust(width) * (count - 1) + piece
            row = cursor.line + index
            if row >= len(lines):
                lines.append("")
            line = lines[row].ljust(column)
            lines[row] = line[:column] + piece + line[column:]
        context.update_content("\n".join(lines))
        context.set_cursor_position(clamp_position(lines, cursor.line, column))
        return

    line = lines[cursor.line]
    column = min(cursor.column + 1, len(line)) if after and line else cursor.column
    start = offset_for(lines, cursor.line, column)
    content = "\n".join(lines)
    text = value.text * count
    updated = content[:start] + text + content[start:]
    new_lines = updated.split("\n")
    context.update_content(updated)
    if "\n" in text:
        landing = position_from_offset(new_lines, start)
    else:
        landing = position_from_offset(new_lines, start + max(len(text) - 1, 0))
    context.set_cursor_position(clamp_position(new_lines, landing.line, landing.column))


def replace_chars(context: EditorContext, char: str, count: int) -> bool:
    """``r``: replace ``count`` characters; fail without editing if the line is too short."""

    lines = list(context.lines)
    cursor = context.cursor
    line = lines[cursor.line]
    if cursor.column + count > len(line):
        return False

    head, tail = line[: cursor.column], line[cursor.column + count :]
    if char == CR:
        # r<CR> swaps the whole run for one line break
        lines[cursor.line : cursor.line + 1] = [head.rstrip(" \t"), tail.lstrip(" \t")]
        context.update_content("\n".join(lines))
        context.set_cursor_position(position_at(lines, cursor.line + 1, 0))
        return True

    lines[cursor.line] = head + char * count + tail
    context.update_content("\n".join(lines))
    context.set_cursor_position(position_at(lines, cursor.line, cursor.column + count - 1))
    return True


def delete_chars(context: EditorContext, count: int, *, before: bool, clamp: bool = True) -> str:
    """``x``/``X``: delete up to ``count`` characters, returning them in buffer order."""

    lines = list(context.lines)
    cursor = context.cursor
    line = lines[cursor.line]
    column = min(cursor.column, len(line))
    removed = ""

    for _ in range(count):
        if before:
            if column == 0:
                break
            removed = line[column - 1] + removed
            line = line[: column - 1] + line[column:]
            column -= 1
        else:
            if column >= len(line):
                break
            removed += line[column]
            line = line[:column] + line[column + 1 :]

    if not removed:
        return ""
    lines[cursor.line] = line
    context.update_content("\n".join(lines))
    if clamp:
        context.set_cursor_position(clamp_position(lines, cursor.line, column))
    else:
        context.set_cursor_position(position_at(lines, cursor.line, column))
    return removed


def prepare_insert(context: EditorContext, mode: ModeChange) -> None:
    """Move the cursor (and open a line) for the given insert-entering action."""

    lines = list(context.lines)
    cursor = context.cursor
    line = lines[cursor.line]

    if mode == "append":
        column = min(cursor.column + 1, len(line)) if line else 0
        context.set_cursor_position(position_at(lines, cursor.line, column))
    elif mode == "appendLine":
        context.set_cursor_position(position_at(lines, cursor.line, len(line)))
    elif mode == "insertLineStart":
        context.set_cursor_position(position_at(lines, cursor.line, len(_indent_of(line))))
    elif mode in ("openBelow", "openAbove"):
        indent = _indent_of(line)
        row = cursor.line + 1 if mode == "openBelow" else cursor.line
        lines.insert(row, indent)
        context.update_content("\n".join(lines))
        context.set_cursor_position(position_at(lines, row, len(indent)))


__all__ = ["delete_chars", "prepare_insert", "put_text", "replace_chars"]
