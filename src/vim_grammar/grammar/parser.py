"""Streaming command parser.

``parse`` is pure: it re-reads the whole accumulated key sequence on every
keystroke and reports whether the sequence is a complete command, a valid
prefix, a token waiting on one literal keystroke, or garbage.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

from vim_grammar.runtime import telemetry

from .ast import (
    INCOMPLETE,
    Action,
    ActionCommand,
    CharMotion,
    CharReplaceAction,
    ForcedKind,
    MarkMotion,
    MiscAction,
    ModeChangeAction,
    Motion,
    MotionCommand,
    MotionTarget,
    OperatorCommand,
    ParseComplete,
    ParseIncomplete,
    ParseInvalid,
    ParseNeedsChar,
    ParseResult,
    ParseStatus,
    PrefixedMotion,
    PutAction,
    RedoAction,
    RegisterRef,
    RepeatAction,
    SearchMotion,
    SearchRepeatMotion,
    SimpleMotion,
    SingleCharAction,
    Target,
    TextObjectTarget,
    UndoAction,
)
from .keys import CR, CTRL_R, CTRL_V, as_keys
from .tokens import DEFAULT_REGISTRY, TokenRegistry
from .trie import Token

_ACTIONS: dict[str, Action] = {
    "p": PutAction("p"),
    "P": PutAction("P"),
    "i": ModeChangeAction("insert"),
    "a": ModeChangeAction("append"),
    "A": ModeChangeAction("appendLine"),
    "I": ModeChangeAction("insertLineStart"),
    "o": ModeChangeAction("openBelow"),
    "O": ModeChangeAction("openAbove"),
    "s": ModeChangeAction("substitute"),
    "x": SingleCharAction("deleteChar"),
    "X": SingleCharAction("deleteCharBefore"),
    "u": UndoAction(),
    CTRL_R: RedoAction(),
    ".": RepeatAction(),
    "J": MiscAction("J"),
    "~": MiscAction("~"),
    "D": MiscAction("D"),
    "C": MiscAction("C"),
    "S": MiscAction("S"),
    "Y": MiscAction("Y"),
}

_FORCED: dict[str, ForcedKind] = {"v": "char", "V": "line", CTRL_V: "block"}

_PREFIX_HEADS = ("g", "z", "[", "]")


@dataclass(slots=True)
class ParseState:
    """Scratch state for one ``parse`` call."""

    keys: Sequence[str]
    index: int = 0
    register: Optional[RegisterRef] = None
    count_before: Optional[int] = None
    count_after: Optional[int] = None
    operator: Optional[Token] = None
    forced: Optional[ForcedKind] = None

    @property
    def exhausted(self) -> bool:
        return self.index >= len(self.keys)

    @property
    def remaining(self) -> int:
        return len(self.keys) - self.index

    def peek(self) -> str:
        return self.keys[self.index]

    def take(self, length: int = 1) -> Sequence[str]:
        taken = self.keys[self.index : self.index + length]
        self.index += length
        return taken


@dataclass(frozen=True, slots=True)
class _MotionParsed:
    motion: Motion


_MotionStep = Union[_MotionParsed, ParseIncomplete, ParseNeedsChar, ParseInvalid]


def _is_digit(key: str) -> bool:
    return len(key) == 1 and key in "0123456789"


class Parser:
    """Recursive-descent parser over a ``TokenRegistry``."""

    def __init__(
        self,
        registry: TokenRegistry | None = None,
        *,
        logger_name: str | None = None,
    ) -> None:
        self.registry = registry or DEFAULT_REGISTRY
        self._logger_name = logger_name

    def parse(self, keys: str | Sequence[str]) -> ParseResult:
        sequence = as_keys(keys)
        with telemetry.span(
            "grammar::parse",
            logger_name=self._logger_name,
            metadata={"keys": "".join(sequence)},
        ) as handle:
            result = self._parse(ParseState(keys=sequence))
            handle.add_metadata("status", result.status)
            if isinstance(result, ParseInvalid):
                handle.add_metadata("reason", result.reason)
        return result

    def status(self, keys: str | Sequence[str]) -> ParseStatus:
        return self.parse(keys).status

    # Command ------------------------------------------------------------

    def _parse(self, st: ParseState) -> ParseResult:
        if st.exhausted:
            return INCOMPLETE

        if st.peek() == '"':
            if st.remaining < 2:
                return INCOMPLETE
            st.take()
            st.register = RegisterRef(st.take()[0])

        st.count_before = self._parse_count(st)
        if st.exhausted:
            return INCOMPLETE

        action_match = self.registry.actions.match(st.keys, st.index)
        if action_match.partial:
            return INCOMPLETE
        if action_match.complete and action_match.token is not None:
            st.take(action_match.length)
            return self._parse_action(st, action_match.token)

        operator_match = self.registry.operators.match(st.keys, st.index)
        if operator_match.partial:
            return INCOMPLETE
        if operator_match.complete and operator_match.token is not None:
            st.take(operator_match.length)
            st.operator = operator_match.token
            return self._parse_operator(st, operator_match.token)

        step = self._parse_motion(st)
        if isinstance(step, _MotionParsed):
            if not st.exhausted:
                return ParseInvalid("Trailing keys after motion")
            return ParseComplete(MotionCommand(motion=step.motion, count=st.count_before))
        if isinstance(step, ParseInvalid):
            return ParseInvalid(f"Unknown command prefix '{st.peek()}'")
        return step

    def _parse_count(self, st: ParseState) -> Optional[int]:
        if st.exhausted or not _is_digit(st.peek()) or st.peek() == "0":
            return None
        digits = [st.take()[0]]
        while not st.exhausted and _is_digit(st.peek()):
            digits.append(st.take()[0])
        return int("".join(digits))

    # Actions ------------------------------------------------------------

    def _parse_action(self, st: ParseState, token: Token) -> ParseResult:
        if token.expects_char_arg:
            if st.exhausted:
                return ParseNeedsChar(context=token.key)
            char = st.take()[0]
            action: Optional[Action] = CharReplaceAction(
                which="gr" if token.key == "gr" else "r", char=char
            )
        else:
            action = _ACTIONS.get(token.key)

        if action is None:
            return ParseInvalid(f"Unknown action '{token.key}'")
        if not st.exhausted:
            return ParseInvalid("Trailing keys after action")
        return ParseComplete(
            ActionCommand(action=action, register=st.register, count=st.count_before)
        )

    # Operators ----------------------------------------------------------

    def _parse_operator(self, st: ParseState, operator: Token) -> ParseResult:
        doubled = self._parse_doubling(st, operator)
        if doubled is not None:
            return doubled

        st.count_after = self._parse_count(st)
        if st.count_after is not None:
            doubled = self._parse_doubling(st, operator)
            if doubled is not None:
                return doubled

        forced_match = self.registry.forced_kinds.match(st.keys, st.index)
        if forced_match.partial:
            return INCOMPLETE
        if forced_match.complete and forced_match.token is not None:
            st.take(forced_match.length)
            st.forced = _FORCED[forced_match.token.key]

        if st.exhausted:
            return INCOMPLETE

        target: Target
        if st.peek() in ("i", "a"):
            mode = "inner" if st.take()[0] == "i" else "around"
            if st.exhausted:
                return INCOMPLETE
            object_key = st.take()[0]
            if not self.registry.is_text_object_key(object_key):
                return ParseInvalid(f"Invalid text object '{object_key}'")
            target = TextObjectTarget(mode=mode, object=object_key, forced=st.forced)
        else:
            step = self._parse_motion(st)
            if not isinstance(step, _MotionParsed):
                return step
            target = MotionTarget(motion=step.motion, forced=st.forced)

        if not st.exhausted:
            return ParseInvalid("Trailing keys after operator target")
        return ParseComplete(self._operator_command(st, operator, target=target))

    def _parse_doubling(self, st: ParseState, operator: Token) -> Optional[ParseResult]:
        if not operator.supports_doubling:
            return None
        again = self.registry.operators.match(st.keys, st.index)
        if not again.complete or again.token is None or again.token.key != operator.key:
            return None
        st.take(again.length)
        if not st.exhausted:
            return ParseInvalid("Trailing keys after doubled operator")
        return ParseComplete(self._operator_command(st, operator, doubled=True))

    def _operator_command(
        self,
        st: ParseState,
        operator: Token,
        *,
        target: Optional[Target] = None,
        doubled: bool = False,
    ) -> OperatorCommand:
        return OperatorCommand(
            operator=operator.key,
            register=st.register,
            doubled=doubled,
            count_before=st.count_before,
            count_after=st.count_after,
            target=target,
        )

    # Motions ------------------------------------------------------------

    def _parse_motion(self, st: ParseState) -> _MotionStep:
        match = self.registry.motions.match(st.keys, st.index)
        if match.partial:
            return INCOMPLETE
        if not match.complete or match.token is None:
            return ParseInvalid("Expected motion")

        token = match.token
        st.take(match.length)
        key = token.key

        if key in ("/", "?"):
            return self._parse_search(st, key)

        if token.expects_char_arg:
            if st.exhausted:
                return ParseNeedsChar(context=key)
            literal = st.take()[0]
            if key in ("'", "`"):
                return _MotionParsed(MarkMotion(style=key, mark=literal))  # type: ignore[arg-type]
            return _MotionParsed(CharMotion(key=key, char=literal))  # type: ignore[arg-type]

        if key in ("n", "N", "*", "#"):
            return _MotionParsed(SearchRepeatMotion(key=key))  # type: ignore[arg-type]

        strokes = token.strokes
        if len(strokes) > 1 and strokes[0] in _PREFIX_HEADS:
            return _MotionParsed(
                PrefixedMotion(head=strokes[0], tail="".join(strokes[1:]))  # type: ignore[arg-type]
            )

        return _MotionParsed(SimpleMotion(key=key))

    def _parse_search(self, st: ParseState, key: str) -> _MotionStep:
        pattern: List[str] = []
        while not st.exhausted and st.peek() != CR:
            pattern.append(st.take()[0])
        if st.exhausted:
            return INCOMPLETE
        st.take()
        direction = "forward" if key == "/" else "backward"
        return _MotionParsed(SearchMotion(direction=direction, pattern="".join(pattern)))


DEFAULT_PARSER = Parser(logger_name="vim_grammar.grammar")


def parse(keys: str | Sequence[str]) -> ParseResult:
    """Parse ``keys`` with the default token registry."""

    return DEFAULT_PARSER.parse(keys)


def get_command_parse_status(keys: str | Sequence[str]) -> ParseStatus:
    """Tell a driver whether to keep buffering, prompt, execute or reset."""

    return DEFAULT_PARSER.status(keys)


__all__ = ["ParseState", "Parser", "DEFAULT_PARSER", "parse", "get_command_parse_status"]
