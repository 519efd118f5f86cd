"""Per-editor interpreter state: registers, mode, dot-repeat and pending keys."""

from __future__ import annotations

from enum import Enum
from typing import Callable, Dict, List, Optional

from vim_grammar.buffer import RegisterBank, RegisterType, RegisterValue
from vim_grammar.buffer.registers import WriteKind
from vim_grammar.grammar.normalize import NormalizedCommand, clone
from vim_grammar.runtime import InterpreterSettings, telemetry


class Mode(str, Enum):
    NORMAL = "normal"
    INSERT = "insert"


class ModeBus:
    """Minimal event bus for mode switches and executor signals."""

    def __init__(self) -> None:
        self._subscribers: Dict[str, list[Callable[[object], None]]] = {}

    def subscribe(self, event: str, callback: Callable[[object], None]) -> None:
        self._subscribers.setdefault(event, []).append(callback)

    def emit(self, event: str, payload: object | None = None) -> None:
        for callback in self._subscribers.get(event, []):
            callback(payload)


class InterpreterSession:
    """State the executor reads and writes between keystrokes."""

    def __init__(
        self,
        *,
        settings: Optional[InterpreterSettings] = None,
        registers: Optional[RegisterBank] = None,
        bus: Optional[ModeBus] = None,
        logger_name: str | None = None,
    ) -> None:
        self.settings = settings or InterpreterSettings()
        self.registers = registers or RegisterBank(unnamed=self.settings.unnamed_register)
        self.bus = bus or ModeBus()
        self.mode = Mode.NORMAL
        self.pending: List[str] = []
        self._last_repeatable: Optional[NormalizedCommand] = None
        self._logger_name = logger_name

    # Registers -------------------------------------------------------------

    def get_register_content(self, name: str) -> RegisterValue:
        return self.registers.get(name)

    def set_register_content(
        self,
        name: str,
        text: str,
        *,
        register_type: RegisterType = "char",
        kind: WriteKind = "delete",
    ) -> None:
        self.registers.write(name, text, register_type=register_type, kind=kind)

    # Dot-repeat ------------------------------------------------------------

    def get_last_repeatable_command(self) -> Optional[NormalizedCommand]:
        return self._last_repeatable

    def set_last_repeatable_command(self, command: Optional[NormalizedCommand]) -> None:
        self._last_repeatable = clone(command) if command is not None else None

    # Mode ------------------------------------------------------------------

    def set_mode(self, mode: Mode) -> None:
        previous = self.mode
        if previous == mode:
            return
        self.mode = mode
        telemetry.record_event(
            "mode.switch",
            level="debug",
            data={"from": previous.value, "to": mode.value},
            logger_name=self._logger_name,
        )
        self.bus.emit("mode.switch", {"from": previous, "to": mode})

    # Pending keys ----------------------------------------------------------

    def push_key(self, key: str) -> List[str]:
        self.pending.append(key)
        return list(self.pending)

    def clear_pending(self) -> None:
        self.pending.clear()


__all__ = ["InterpreterSession", "Mode", "ModeBus"]
