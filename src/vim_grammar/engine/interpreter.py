"""Public facade tying parser, normalizer and executor to one editor."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Literal, Optional, Sequence, Union

from vim_grammar.buffer import EditorContext, clamp_position, position_at
from vim_grammar.grammar.ast import Command, ParseComplete, ParseInvalid, ParseResult, ParseStatus
from vim_grammar.grammar.keys import CR, ESC, KeyStroke, as_keys, canonical
from vim_grammar.grammar.normalize import NormalizedCommand
from vim_grammar.grammar.parser import Parser
from vim_grammar.registry import CommandRegistry, MotionMemory, load_default_registry
from vim_grammar.runtime import InterpreterSettings, telemetry

from .executor import ENGINE_LOGGER, Executor
from .session import InterpreterSession, Mode

FeedStatus = Union[ParseStatus, Literal["cancelled", "insert"]]

_BACKSPACE = "<BS>"
_TAB = "<Tab>"


@dataclass(frozen=True, slots=True)
class FeedResult:
    """What happened to one keystroke handed to ``Interpreter.feed``."""

    status: FeedStatus
    executed: bool = False
    success: bool = False
    reason: Optional[str] = None
    keys: tuple[str, ...] = ()


class Interpreter:
    """Drives one editing surface from a stream of keystrokes.

    ``feed`` owns the pending key sequence: it re-parses after every key,
    executes complete commands and resets on completion, on invalid input
    and on ``<Esc>``.
    """

    def __init__(
        self,
        context: EditorContext,
        *,
        registry: Optional[CommandRegistry] = None,
        session: Optional[InterpreterSession] = None,
        settings: Optional[InterpreterSettings] = None,
        parser: Optional[Parser] = None,
        logger_name: str | None = ENGINE_LOGGER,
    ) -> None:
        self.context = context
        self.settings = settings or (session.settings if session else InterpreterSettings.from_env())
        self.session = session or InterpreterSession(
            settings=self.settings, logger_name=logger_name
        )
        self.registry = registry or load_default_registry(
            memory=MotionMemory(search_wrap=self.settings.search_wrap), logger_name=logger_name
        )
        self.parser = parser or Parser(logger_name=logger_name)
        self.executor = Executor(
            self.session, self.registry, context, logger_name=logger_name
        )
        self._logger_name = logger_name

    @property
    def mode(self) -> Mode:
        return self.session.mode

    @property
    def pending(self) -> tuple[str, ...]:
        return tuple(self.session.pending)

    def parse(self, keys: Union[str, Sequence[str]]) -> ParseResult:
        return self.parser.parse(keys)

    def get_command_parse_status(self, keys: Union[str, Sequence[str]]) -> ParseStatus:
        return self.parser.status(keys)

    def execute_ast(self, command: Union[Command, NormalizedCommand]) -> bool:
        return self.executor.execute(command)

    def cancel(self) -> None:
        if self.session.pending:
            telemetry.record_event(
                "interpreter.cancel",
                level="debug",
                data={"keys": "".join(self.session.pending)},
                logger_name=self._logger_name,
            )
        self.session.clear_pending()

    def feed(self, key: Union[str, KeyStroke]) -> FeedResult:
        token = key.token if isinstance(key, KeyStroke) else canonical(key)

        if self.session.mode == Mode.INSERT:
            return self._insert_key(token)

        if token == ESC:
            self.cancel()
            return FeedResult(status="cancelled")

        keys = tuple(self.session.push_key(token))
        result = self.parser.parse(keys)

        if isinstance(result, ParseComplete):
            self.session.clear_pending()
            success = self.executor.execute(result.command)
            return FeedResult(status="complete", executed=True, success=success, keys=keys)

        if isinstance(result, ParseInvalid):
            self.session.clear_pending()
            return FeedResult(status="invalid", reason=result.reason, keys=keys)

        return FeedResult(status=result.status, keys=keys)

    def run(self, keys: Union[str, Sequence[str]]) -> List[FeedResult]:
        """Feed every keystroke of ``keys`` in order."""

        return [self.feed(key) for key in as_keys(keys)]

    # Insert mode -------------------------------------------------------------

    def _insert_key(self, token: str) -> FeedResult:
        context = self.context
        lines = list(context.lines)
        cursor = context.cursor
        line = lines[cursor.line]

        if token == ESC:
            self.session.set_mode(Mode.NORMAL)
            context.set_cursor_position(
                clamp_position(lines, cursor.line, cursor.column - 1)
            )
            return FeedResult(status="insert", keys=(token,))

        if token == _BACKSPACE:
            if cursor.column == 0:
                return FeedResult(status="insert", keys=(token,))
            lines[cursor.line] = line[: cursor.column - 1] + line[cursor.column :]
            context.update_content("\n".join(lines))
            context.set_cursor_position(position_at(lines, cursor.line, cursor.column - 1))
            return FeedResult(status="insert", keys=(token,))

        if token == CR:
            lines[cursor.line : cursor.line + 1] = [line[: cursor.column], line[cursor.column :]]
            context.update_content("\n".join(lines))
            context.set_cursor_position(position_at(lines, cursor.line + 1, 0))
            return FeedResult(status="insert", keys=(token,))

        text = "\t" if token == _TAB else token
        if len(text) != 1:
            return FeedResult(status="insert", reason="unhandled key", keys=(token,))
        lines[cursor.line] = line[: cursor.column] + text + line[cursor.column :]
        context.update_content("\n".join(lines))
        context.set_cursor_position(position_at(lines, cursor.line, cursor.column + 1))
        return FeedResult(status="insert", keys=(token,))


__all__ = ["FeedResult", "FeedStatus", "Interpreter"]
