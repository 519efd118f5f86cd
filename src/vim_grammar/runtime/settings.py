"""Interpreter settings resolved from ``VIM_GRAMMAR_*`` environment variables."""

from __future__ import annotations

from dataclasses import dataclass

from .telemetry import env, env_flag


def _env_int(name: str, default: int) -> int:
    raw = env(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"VIM_GRAMMAR_{name} must be an integer, got {raw!r}") from exc


@dataclass(frozen=True, slots=True)
class InterpreterSettings:
    """Knobs shared by the session, the executor and the reference buffer."""

    unnamed_register: str = '"'
    max_repeat_depth: int = 1
    search_wrap: bool = True
    tab_size: int = 4

    def __post_init__(self) -> None:
        if len(self.unnamed_register) != 1:
            raise ValueError("unnamed_register must be a single character")
        if self.max_repeat_depth < 1:
            raise ValueError("max_repeat_depth must be at least 1")
        if self.tab_size <= 0:
            raise ValueError("tab_size must be positive")

    @classmethod
    def from_env(cls) -> "InterpreterSettings":
        return cls(
            unnamed_register=env("UNNAMED_REGISTER") or '"',
            max_repeat_depth=_env_int("MAX_REPEAT_DEPTH", 1),
            search_wrap=env_flag("SEARCH_WRAP", True),
            tab_size=_env_int("TAB_SIZE", 4),
        )


__all__ = ["InterpreterSettings"]
