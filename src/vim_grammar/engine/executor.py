"""Executor: runs normalized commands against an ``EditorContext``.

Commands resolve their targets through the pluggable ``CommandRegistry``;
the executor itself owns register I/O, mode transitions and dot-repeat.
Any exception raised by a registry implementation is contained here: the
buffer is restored to its pre-command state and ``execute`` returns
``False``.
"""

from __future__ import annotations

from contextlib import nullcontext
from dataclasses import replace
from typing import ContextManager, Optional, Union

from vim_grammar.buffer import (
    EditorContext,
    HistoryContext,
    Position,
    Range,
    clamp_position,
    position_at,
)
from vim_grammar.grammar.ast import (
    ActionCommand,
    CharMotion,
    CharReplaceAction,
    Command,
    MarkMotion,
    MiscAction,
    ModeChangeAction,
    Motion,
    MotionCommand,
    MotionTarget,
    OperatorCommand,
    PutAction,
    RedoAction,
    RepeatAction,
    SearchMotion,
    SimpleMotion,
    SingleCharAction,
    TextObjectTarget,
    UndoAction,
)
from vim_grammar.grammar.keys import CTRL_R
from vim_grammar.grammar.motion_kind import MotionInfo, apply_forced_kind, resolve_motion_info
from vim_grammar.grammar.normalize import NormalizedCommand, normalize
from vim_grammar.registry import CommandRegistry, MotionOptions
from vim_grammar.registry.motions import char_class
from vim_grammar.runtime import telemetry

from . import editing
from .session import InterpreterSession, Mode

ENGINE_LOGGER = "vim_grammar.engine"

# ``cw`` on a non-blank behaves like ``ce``
_CHANGE_WORD = {"w": "e", "W": "E"}


def has_explicit_count(command: Command) -> bool:
    if isinstance(command, OperatorCommand):
        return command.count_before is not None or command.count_after is not None
    return command.count is not None


def motion_options(motion: Motion, *, explicit_count: bool) -> MotionOptions:
    if isinstance(motion, CharMotion):
        return MotionOptions(explicit_count=explicit_count, char=motion.char)
    if isinstance(motion, SearchMotion):
        return MotionOptions(
            explicit_count=explicit_count, pattern=motion.pattern, direction=motion.direction
        )
    if isinstance(motion, MarkMotion):
        return MotionOptions(explicit_count=explicit_count, mark=motion.mark)
    return MotionOptions(explicit_count=explicit_count)


class Executor:
    """Interprets commands for one session, registry and editing surface."""

    def __init__(
        self,
        session: InterpreterSession,
        registry: CommandRegistry,
        context: EditorContext,
        *,
        logger_name: str | None = ENGINE_LOGGER,
    ) -> None:
        self.session = session
        self.registry = registry
        self.context = context
        self._logger_name = logger_name
        self._repeat_depth = 0

    # Entry point -----------------------------------------------------------

    def execute(self, command: Union[Command, NormalizedCommand]) -> bool:
        normalized = normalize(
            command, unnamed_register=self.session.settings.unnamed_register
        )
        kind = normalized.command.kind
        with telemetry.span(
            f"executor::{kind}",
            logger_name=self._logger_name,
            metadata={"count": normalized.count, "register": normalized.register},
        ) as handle:
            before_text = self.context.content
            before_cursor = self.context.cursor
            with self._transaction(normalized):
                try:
                    ok = self._dispatch(normalized)
                except Exception as exc:
                    self._restore(before_text, before_cursor)
                    telemetry.record_event(
                        "executor.error",
                        level="error",
                        data={"kind": kind, "error": repr(exc)},
                        logger_name=self._logger_name,
                    )
                    handle.add_metadata("error", type(exc).__name__)
                    return False

            handle.add_metadata("success", ok)
            if ok and normalized.repeatable:
                self.session.set_last_repeatable_command(normalized)
            return ok

    def _transaction(self, normalized: NormalizedCommand) -> ContextManager[object]:
        command = normalized.command
        if isinstance(command, ActionCommand) and isinstance(
            command.action, (UndoAction, RedoAction, RepeatAction)
        ):
            return nullcontext()
        if isinstance(self.context, HistoryContext):
            return self.context.transaction(f"command::{command.kind}")
        return nullcontext()

    def _restore(self, text: str, cursor: Position) -> None:
        if self.context.content != text:
            self.context.update_content(text)
        self.context.set_cursor_position(cursor)

    def _reject(self, reason: str, **data: object) -> bool:
        telemetry.record_event(
            "executor.reject",
            level="warning",
            data={"reason": reason, **data},
            logger_name=self._logger_name,
        )
        return False

    def _dispatch(self, normalized: NormalizedCommand) -> bool:
        command = normalized.command
        if isinstance(command, ActionCommand):
            return self._run_action(normalized, command)
        if isinstance(command, OperatorCommand):
            return self._run_operator(normalized, command)
        return self._run_motion(normalized, command)

    # Actions ---------------------------------------------------------------

    def _run_action(self, normalized: NormalizedCommand, command: ActionCommand) -> bool:
        action = command.action
        count = normalized.count
        context = self.context

        if isinstance(action, PutAction):
            value = self.session.get_register_content(normalized.register)
            if value.empty:
                return self._reject("empty register", register=normalized.register)
            editing.put_text(context, value, after=action.which == "p", count=count)
            return True

        if isinstance(action, CharReplaceAction):
            if not editing.replace_chars(context, action.char, count):
                return self._reject("not enough characters to replace", count=count)
            return True

        if isinstance(action, ModeChangeAction):
            if action.mode == "substitute":
                removed = editing.delete_chars(context, count, before=False, clamp=False)
                if removed:
                    self.session.set_register_content(normalized.register, removed)
            else:
                editing.prepare_insert(context, action.mode)
            self.session.set_mode(Mode.INSERT)
            return True

        if isinstance(action, SingleCharAction):
            removed = editing.delete_chars(
                context, count, before=action.operation == "deleteCharBefore"
            )
            if not removed:
                return self._reject("nothing to delete")
            self.session.set_register_content(normalized.register, removed)
            return True

        if isinstance(action, (UndoAction, RedoAction)):
            key = "u" if isinstance(action, UndoAction) else CTRL_R
            impl = self.registry.get_action(key)
            if impl is None:
                return self._reject("unknown action", key=key)
            applied = 0
            for _ in range(count):
                if impl.execute(context, 1) is False:
                    break
                applied += 1
            return applied > 0 or self._reject("nothing to " + ("undo" if key == "u" else "redo"))

        if isinstance(action, RepeatAction):
            return self._repeat(command)

        if isinstance(action, MiscAction):
            impl = self.registry.get_action(action.key)
            if impl is None:
                return self._reject("unknown action", key=action.key)
            return impl.execute(context, count) is not False

        return self._reject("unsupported action", action=type(action).__name__)

    def _repeat(self, command: ActionCommand) -> bool:
        stored = self.session.get_last_repeatable_command()
        if stored is None:
            return self._reject("nothing to repeat")
        if self._repeat_depth >= self.session.settings.max_repeat_depth:
            return self._reject("repeat depth exceeded", depth=self._repeat_depth)
        if command.count is not None:
            stored = replace(stored, count=command.count)
        self._repeat_depth += 1
        try:
            return self.execute(stored)
        finally:
            self._repeat_depth -= 1

    # Operators ---------------------------------------------------------------

    def _run_operator(self, normalized: NormalizedCommand, command: OperatorCommand) -> bool:
        impl = self.registry.get_operator(command.operator)
        if impl is None:
            return self._reject("unknown operator", operator=command.operator)

        target = self.resolve_target(command, normalized.count)
        if target is None:
            return self._reject("unresolved target", operator=command.operator)

        outcome = impl.execute(target, self.context)
        if outcome.text is not None:
            self.session.set_register_content(
                normalized.register,
                outcome.text,
                register_type=outcome.register_type,
                kind="yank" if outcome.yank else "delete",
            )
        if outcome.enters_insert:
            self.session.set_mode(Mode.INSERT)
        return True

    def resolve_target(self, command: OperatorCommand, count: int) -> Optional[Range]:
        """Ordered, shaped range the operator applies to, or ``None``."""

        target = command.target
        lines = self.context.lines
        cursor = self.context.cursor

        if isinstance(target, TextObjectTarget):
            impl = self.registry.get_text_object(target.object)
            if impl is None:
                return None
            found = impl.calculate(cursor, lines, target.mode)
            if found is None:
                return None
            if target.forced is not None:
                info = MotionInfo(
                    "line" if found.linewise else "block" if found.blockwise else "char",
                    found.inclusive,
                )
                found = _shape(found, apply_forced_kind(info, target.forced))
            return found.ordered()

        if not isinstance(target, MotionTarget):
            return None

        motion = target.motion
        if (
            command.operator == "c"
            and isinstance(motion, SimpleMotion)
            and motion.key in _CHANGE_WORD
            and cursor.column < len(lines[cursor.line])
            and not lines[cursor.line][cursor.column].isspace()
        ):
            motion = SimpleMotion(_CHANGE_WORD[motion.key])
            # already on a word end: the first count changes just this character
            if _at_word_end(lines[cursor.line], cursor.column, big=motion.key == "E"):
                count -= 1

        if count == 0:
            raw: Optional[Range] = Range(start=cursor, end=cursor)
        else:
            raw = self._calculate(motion, count, explicit_count=has_explicit_count(command))
        if raw is None:
            return None
        shaped = _shape(raw, resolve_motion_info(motion, target.forced)).ordered()
        if target.forced is None:
            shaped = _exclusive_line_adjust(shaped, lines)
        return shaped

    # Motions ---------------------------------------------------------------

    def _calculate(self, motion: Motion, count: int, *, explicit_count: bool) -> Optional[Range]:
        impl = self.registry.get_motion(motion.lookup_key)
        if impl is None:
            return None
        return impl.calculate(
            self.context.cursor,
            self.context.lines,
            count,
            motion_options(motion, explicit_count=explicit_count),
        )

    def _run_motion(self, normalized: NormalizedCommand, command: MotionCommand) -> bool:
        found = self._calculate(
            command.motion, normalized.count, explicit_count=has_explicit_count(command)
        )
        if found is None:
            return self._reject("motion failed", motion=command.motion.lookup_key)
        lines = self.context.lines
        self.context.set_cursor_position(clamp_position(lines, found.end.line, found.end.column))
        return True


def _shape(found: Range, info: MotionInfo) -> Range:
    return Range(
        start=found.start,
        end=found.end,
        linewise=info.linewise,
        inclusive=info.inclusive,
        blockwise=info.blockwise,
    )


def _at_word_end(line: str, column: int, *, big: bool) -> bool:
    if column + 1 >= len(line):
        return True
    return char_class(line[column + 1], big) != char_class(line[column], big)


def _exclusive_line_adjust(found: Range, lines) -> Range:
    """An exclusive motion ending in column 0 stops at the end of the previous line."""

    if found.linewise or found.blockwise or found.inclusive:
        return found
    if found.end.column != 0 or found.end.line <= found.start.line:
        return found
    row = found.end.line - 1
    return replace(found, end=position_at(lines, row, len(lines[row])))


__all__ = ["ENGINE_LOGGER", "Executor", "has_explicit_count", "motion_options"]
