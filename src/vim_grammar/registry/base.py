"""Pluggable motion, operator, text-object and action registry."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Generic, Iterable, Optional, Protocol, Sequence, TypeVar

from vim_grammar.buffer import EditorContext, Position, Range, RegisterType
from vim_grammar.grammar.ast import SearchDirection, TextObjectMode
from vim_grammar.runtime.telemetry import span


@dataclass(frozen=True, slots=True)
class MotionOptions:
    """Extra inputs a motion may need besides the cursor and count."""

    explicit_count: bool = False
    char: Optional[str] = None
    pattern: Optional[str] = None
    direction: Optional[SearchDirection] = None
    mark: Optional[str] = None


@dataclass(frozen=True, slots=True)
class OperatorOutcome:
    """What an operator did; the executor turns ``text`` into a register write.

    ``text`` is ``None`` for operators that leave the registers alone.
    """

    text: Optional[str] = None
    register_type: RegisterType = "char"
    enters_insert: bool = False
    yank: bool = False


class MotionImpl(Protocol):
    def calculate(
        self,
        cursor: Position,
        lines: Sequence[str],
        count: int,
        options: MotionOptions,
    ) -> Optional[Range]:
        ...


class OperatorImpl(Protocol):
    def execute(self, target: Range, context: EditorContext) -> OperatorOutcome:
        ...


class TextObjectImpl(Protocol):
    def calculate(
        self, cursor: Position, lines: Sequence[str], mode: TextObjectMode
    ) -> Optional[Range]:
        ...


class ActionImpl(Protocol):
    def execute(self, context: EditorContext, count: int) -> Optional[bool]:
        ...


class RegistryConflictError(RuntimeError):
    """Raised when a key is registered twice in the same table."""

    def __init__(self, table: str, key: str):
        super().__init__(f"{table} '{key}' already registered")
        self.table = table
        self.key = key


@dataclass(slots=True)
class CommandRegistryStats:
    motions: int
    operators: int
    text_objects: int
    actions: int


T = TypeVar("T")


class _Table(Generic[T]):
    def __init__(self, name: str) -> None:
        self.name = name
        self._entries: Dict[str, T] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def get(self, key: str) -> Optional[T]:
        return self._entries.get(key)

    def add(self, key: str, impl: T, *, replace: bool = False) -> T:
        if not replace and key in self._entries:
            raise RegistryConflictError(self.name, key)
        self._entries[key] = impl
        return impl

    def keys(self) -> tuple[str, ...]:
        return tuple(sorted(self._entries))


class CommandRegistry:
    """Key-indexed implementations consumed by the executor.

    Lookups return ``None`` for unknown keys; registration of an existing key
    raises ``RegistryConflictError`` unless ``replace=True``.
    """

    def __init__(self, *, logger_name: str | None = None) -> None:
        self._logger_name = logger_name
        self._motions: _Table[MotionImpl] = _Table("motion")
        self._operators: _Table[OperatorImpl] = _Table("operator")
        self._text_objects: _Table[TextObjectImpl] = _Table("text object")
        self._actions: _Table[ActionImpl] = _Table("action")

    def get_motion(self, key: str) -> Optional[MotionImpl]:
        return self._motions.get(key)

    def get_operator(self, key: str) -> Optional[OperatorImpl]:
        return self._operators.get(key)

    def get_text_object(self, key: str) -> Optional[TextObjectImpl]:
        return self._text_objects.get(key)

    def get_action(self, key: str) -> Optional[ActionImpl]:
        return self._actions.get(key)

    def register_motion(self, key: str, impl: MotionImpl, *, replace: bool = False) -> MotionImpl:
        return self._motions.add(key, impl, replace=replace)

    def register_operator(
        self, key: str, impl: OperatorImpl, *, replace: bool = False
    ) -> OperatorImpl:
        return self._operators.add(key, impl, replace=replace)

    def register_text_object(
        self, key: str, impl: TextObjectImpl, *, replace: bool = False
    ) -> TextObjectImpl:
        return self._text_objects.add(key, impl, replace=replace)

    def register_action(self, key: str, impl: ActionImpl, *, replace: bool = False) -> ActionImpl:
        return self._actions.add(key, impl, replace=replace)

    def register_table(
        self,
        table: str,
        entries: Iterable[tuple[str, object]],
        *,
        replace: bool = False,
    ) -> int:
        """Bulk-register ``(key, impl)`` pairs into ``motions``/``operators``/... ."""

        target = {
            "motions": self._motions,
            "operators": self._operators,
            "text_objects": self._text_objects,
            "actions": self._actions,
        }.get(table)
        if target is None:
            raise KeyError(f"Unknown registry table '{table}'")

        batch = tuple(entries)
        with span(
            "registry::register_table",
            logger_name=self._logger_name,
            component="registry",
            metadata={"table": table, "count": len(batch)},
        ):
            for key, impl in batch:
                target.add(key, impl, replace=replace)  # type: ignore[arg-type]
        return len(batch)

    def stats(self) -> CommandRegistryStats:
        return CommandRegistryStats(
            motions=len(self._motions),
            operators=len(self._operators),
            text_objects=len(self._text_objects),
            actions=len(self._actions),
        )


__all__ = [
    "ActionImpl",
    "CommandRegistry",
    "CommandRegistryStats",
    "MotionImpl",
    "MotionOptions",
    "OperatorImpl",
    "OperatorOutcome",
    "RegistryConflictError",
    "TextObjectImpl",
]
