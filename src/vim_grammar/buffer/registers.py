"""Register storage with Vim's unnamed, numbered and special registers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Literal, Mapping

RegisterType = Literal["char", "line", "block"]
WriteKind = Literal["yank", "delete"]

UNNAMED = '"'
BLACKHOLE = "_"
SMALL_DELETE = "-"
YANK = "0"
NUMBERED = tuple(str(n) for n in range(1, 10))


@dataclass(frozen=True, slots=True)
class RegisterValue:
    text: str
    type: RegisterType = "char"

    @property
    def empty(self) -> bool:
        return not self.text


EMPTY = RegisterValue(text="")


class RegisterBank:
    """Tracks unnamed, named, numbered, and special registers.

    Writes to ``"`` route the text into ``0`` (yanks) or the numbered ring
    and ``-`` (deletes). Uppercase names append to their lowercase register.
    The ``_`` register swallows everything.
    """

    def __init__(self, *, unnamed: str = UNNAMED) -> None:
        self.unnamed = unnamed
        self._registers: Dict[str, RegisterValue] = {unnamed: EMPTY}

    def get(self, name: str) -> RegisterValue:
        if name == BLACKHOLE:
            return EMPTY
        return self._registers.get(_storage_name(name), EMPTY)

    def set(self, name: str, value: RegisterValue) -> None:
        if name == BLACKHOLE:
            return
        if name.isalpha() and name.isupper():
            value = _append(self.get(name), value)
        self._registers[_storage_name(name)] = value
        if name != self.unnamed:
            self._registers[self.unnamed] = value

    def write(
        self,
        name: str,
        text: str,
        *,
        register_type: RegisterType = "char",
        kind: WriteKind = "delete",
    ) -> None:
        """Store operator output, updating the implicit registers."""

        if name == BLACKHOLE:
            return
        value = RegisterValue(text=text, type=register_type)
        if name == self.unnamed:
            if kind == "yank":
                self._registers[YANK] = value
            elif register_type == "line" or "\n" in text:
                self._shift_numbered(value)
            else:
                self._registers[SMALL_DELETE] = value
        self.set(name, value)

    def serialize(self) -> Mapping[str, RegisterValue]:
        return dict(self._registers)

    def load(self, data: Mapping[str, RegisterValue]) -> None:
        self._registers.update(
            {k: RegisterValue(text=v.text, type=v.type) for k, v in data.items()}
        )

    def _shift_numbered(self, value: RegisterValue) -> None:
        for older, newer in zip(reversed(NUMBERED[1:]), reversed(NUMBERED[:-1])):
            if newer in self._registers:
                self._registers[older] = self._registers[newer]
        self._registers[NUMBERED[0]] = value


def _storage_name(name: str) -> str:
    return name.lower() if name.isalpha() else name


def _append(existing: RegisterValue, value: RegisterValue) -> RegisterValue:
    if existing.empty:
        return value
    if existing.type == "line" or value.type == "line":
        return RegisterValue(text=f"{existing.text}\n{value.text}", type="line")
    return RegisterValue(text=existing.text + value.text, type=existing.type)


__all__ = [
    "BLACKHOLE",
    "EMPTY",
    "RegisterBank",
    "RegisterType",
    "RegisterValue",
    "SMALL_DELETE",
    "UNNAMED",
    "WriteKind",
    "YANK",
]
