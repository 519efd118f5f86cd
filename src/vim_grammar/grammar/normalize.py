"""Turn parsed commands into the canonical form the executor runs.

Aliases are expanded (``D`` → ``d$``, ``C`` → ``c$``, ``S`` → ``cc``,
``Y`` → ``yy``), counts are folded into one number, the register name is
defaulted and the command is flagged for dot-repeat.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, is_dataclass
from typing import Any, Optional, TypeVar, Union

from .ast import (
    ActionCommand,
    CharReplaceAction,
    Command,
    MiscAction,
    ModeChangeAction,
    MotionTarget,
    OperatorCommand,
    PutAction,
    RegisterRef,
    SimpleMotion,
    SingleCharAction,
)

UNNAMED_REGISTER = '"'

_LINE_TARGET = MotionTarget(motion=SimpleMotion("_"))
_TO_LINE_END = MotionTarget(motion=SimpleMotion("$"))

# alias -> (operator, doubled, target)
_ALIASES: dict[str, tuple[str, bool, MotionTarget]] = {
    "D": ("d", False, _TO_LINE_END),
    "C": ("c", False, _TO_LINE_END),
    "S": ("c", True, _LINE_TARGET),
    "Y": ("y", True, _LINE_TARGET),
}

_REPEATABLE_MISC = frozenset({"J", "~"})


@dataclass(frozen=True, slots=True)
class NormalizedCommand:
    command: Command
    register: str = UNNAMED_REGISTER
    count: int = 1
    repeatable: bool = False


T = TypeVar("T")


def clone(node: T) -> T:
    """Structural copy of an AST node tree."""

    if is_dataclass(node) and not isinstance(node, type):
        values: dict[str, Any] = {
            f.name: clone(getattr(node, f.name)) for f in fields(node) if f.init
        }
        return type(node)(**values)  # type: ignore[return-value]
    return node


def expand_alias(command: Command) -> Command:
    """Rewrite ``D C S Y`` into their operator form; other commands pass through."""

    if not isinstance(command, ActionCommand) or not isinstance(command.action, MiscAction):
        return command
    alias = _ALIASES.get(command.action.key)
    if alias is None:
        return command
    operator, doubled, target = alias
    return OperatorCommand(
        operator=operator,
        register=command.register,
        doubled=doubled,
        count_before=command.count,
        target=target,
    )


def effective_count(command: Command) -> int:
    if isinstance(command, OperatorCommand):
        return (command.count_before or 1) * (command.count_after or 1)
    return command.count or 1


def register_name(command: Command, default: str = UNNAMED_REGISTER) -> str:
    register: Optional[RegisterRef] = getattr(command, "register", None)
    return register.name if register is not None else default


def is_repeatable(command: Command) -> bool:
    if isinstance(command, OperatorCommand):
        return True
    if isinstance(command, ActionCommand):
        action = command.action
        if isinstance(action, (PutAction, CharReplaceAction, ModeChangeAction, SingleCharAction)):
            return True
        if isinstance(action, MiscAction):
            return action.key in _REPEATABLE_MISC
    return False


def normalize(
    command: Union[Command, NormalizedCommand],
    *,
    unnamed_register: str = UNNAMED_REGISTER,
) -> NormalizedCommand:
    """Return the canonical form of ``command``.

    Normalizing an already normalized command returns it unchanged.
    """

    if isinstance(command, NormalizedCommand):
        return command

    expanded = expand_alias(command)
    if isinstance(expanded, OperatorCommand) and expanded.doubled and expanded.target is None:
        expanded = OperatorCommand(
            operator=expanded.operator,
            register=expanded.register,
            doubled=True,
            count_before=expanded.count_before,
            count_after=expanded.count_after,
            target=_LINE_TARGET,
        )

    return NormalizedCommand(
        command=expanded,
        register=register_name(expanded, unnamed_register),
        count=effective_count(expanded),
        repeatable=is_repeatable(expanded),
    )


__all__ = [
    "NormalizedCommand",
    "UNNAMED_REGISTER",
    "clone",
    "effective_count",
    "expand_alias",
    "is_repeatable",
    "normalize",
    "register_name",
]
