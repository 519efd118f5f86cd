"""Command AST produced by the parser and consumed by the executor.

Grammar::

    Command            := [Register] [Count] ( Action | OperatorInvocation | Motion )
    Register           := '"' key
    Count              := nonZeroDigit { digit }
    OperatorInvocation := Operator ( Operator | [Count] [ForcedKind] ( TextObject | Motion ) )
    ForcedKind         := 'v' | 'V' | '<C-V>'
    TextObject         := ( 'i' | 'a' ) objectKey

Every node is a frozen dataclass so parsed commands compare structurally
and can be stored for dot-repeat without aliasing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional, Union

ForcedKind = Literal["char", "line", "block"]
TextObjectMode = Literal["inner", "around"]
SearchDirection = Literal["forward", "backward"]
ModeChange = Literal[
    "insert",
    "append",
    "appendLine",
    "insertLineStart",
    "openBelow",
    "openAbove",
    "substitute",
]
SingleCharOperation = Literal["deleteChar", "deleteCharBefore"]


@dataclass(frozen=True, slots=True)
class RegisterRef:
    name: str


# Motions ---------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SimpleMotion:
    key: str

    @property
    def lookup_key(self) -> str:
        return self.key


@dataclass(frozen=True, slots=True)
class CharMotion:
    """``f``/``F``/``t``/``T`` with the literal keystroke that followed."""

    key: Literal["f", "F", "t", "T"]
    char: str

    @property
    def lookup_key(self) -> str:
        return self.key


@dataclass(frozen=True, slots=True)
class SearchMotion:
    direction: SearchDirection
    pattern: str

    @property
    def lookup_key(self) -> str:
        return "/" if self.direction == "forward" else "?"


@dataclass(frozen=True, slots=True)
class SearchRepeatMotion:
    key: Literal["n", "N", "*", "#"]

    @property
    def lookup_key(self) -> str:
        return self.key


@dataclass(frozen=True, slots=True)
class MarkMotion:
    style: Literal["'", "`"]
    mark: str

    @property
    def lookup_key(self) -> str:
        return self.style


@dataclass(frozen=True, slots=True)
class PrefixedMotion:
    """``g``/``z``/``[``/``]`` families, e.g. ``gg`` or ``]m``."""

    head: Literal["g", "z", "[", "]"]
    tail: str

    @property
    def lookup_key(self) -> str:
        return self.head + self.tail


Motion = Union[
    SimpleMotion, CharMotion, SearchMotion, SearchRepeatMotion, MarkMotion, PrefixedMotion
]


# Targets ---------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class MotionTarget:
    motion: Motion
    forced: Optional[ForcedKind] = None


@dataclass(frozen=True, slots=True)
class TextObjectTarget:
    mode: TextObjectMode
    object: str
    forced: Optional[ForcedKind] = None


Target = Union[MotionTarget, TextObjectTarget]


# Actions ---------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class PutAction:
    which: Literal["p", "P"]


@dataclass(frozen=True, slots=True)
class CharReplaceAction:
    which: Literal["r", "gr"]
    char: str


@dataclass(frozen=True, slots=True)
class ModeChangeAction:
    mode: ModeChange


@dataclass(frozen=True, slots=True)
class SingleCharAction:
    operation: SingleCharOperation


@dataclass(frozen=True, slots=True)
class UndoAction:
    pass


@dataclass(frozen=True, slots=True)
class RedoAction:
    pass


@dataclass(frozen=True, slots=True)
class RepeatAction:
    pass


@dataclass(frozen=True, slots=True)
class MiscAction:
    """Registry-backed actions (``J``, ``~``) and the ``D C S Y`` aliases."""

    key: str


Action = Union[
    PutAction,
    CharReplaceAction,
    ModeChangeAction,
    SingleCharAction,
    UndoAction,
    RedoAction,
    RepeatAction,
    MiscAction,
]


# Commands --------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ActionCommand:
    action: Action
    register: Optional[RegisterRef] = None
    count: Optional[int] = None

    kind: Literal["action"] = "action"


@dataclass(frozen=True, slots=True)
class OperatorCommand:
    operator: str
    register: Optional[RegisterRef] = None
    doubled: bool = False
    count_before: Optional[int] = None
    count_after: Optional[int] = None
    target: Optional[Target] = None

    kind: Literal["operator"] = "operator"


@dataclass(frozen=True, slots=True)
class MotionCommand:
    motion: Motion
    count: Optional[int] = None

    kind: Literal["motion"] = "motion"


Command = Union[ActionCommand, OperatorCommand, MotionCommand]


# Parse results ---------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ParseComplete:
    command: Command

    status: Literal["complete"] = "complete"


@dataclass(frozen=True, slots=True)
class ParseIncomplete:
    status: Literal["incomplete"] = "incomplete"


@dataclass(frozen=True, slots=True)
class ParseNeedsChar:
    """The last token wants exactly one more raw keystroke."""

    context: str

    status: Literal["needsChar"] = "needsChar"


@dataclass(frozen=True, slots=True)
class ParseInvalid:
    reason: str

    status: Literal["invalid"] = "invalid"


ParseResult = Union[ParseComplete, ParseIncomplete, ParseNeedsChar, ParseInvalid]
ParseStatus = Literal["complete", "incomplete", "invalid", "needsChar"]

INCOMPLETE = ParseIncomplete()


__all__ = [
    "Action",
    "ActionCommand",
    "CharMotion",
    "CharReplaceAction",
    "Command",
    "ForcedKind",
    "INCOMPLETE",
    "MarkMotion",
    "MiscAction",
    "ModeChange",
    "ModeChangeAction",
    "Motion",
    "MotionCommand",
    "MotionTarget",
    "OperatorCommand",
    "ParseComplete",
    "ParseIncomplete",
    "ParseInvalid",
    "ParseNeedsChar",
    "ParseResult",
    "ParseStatus",
    "PrefixedMotion",
    "PutAction",
    "RedoAction",
    "RegisterRef",
    "RepeatAction",
    "SearchDirection",
    "SearchMotion",
    "SearchRepeatMotion",
    "SimpleMotion",
    "SingleCharAction",
    "SingleCharOperation",
    "Target",
    "TextObjectMode",
    "TextObjectTarget",
    "UndoAction",
]
