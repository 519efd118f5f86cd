"""Logical keystrokes and helpers for splitting key notation."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Sequence

CR = "<CR>"
ESC = "<Esc>"
CTRL_R = "<C-r>"
CTRL_V = "<C-V>"

# Bracketed names that denote a single logical keystroke.
_SPECIAL_KEY = re.compile(
    r"<(?:[CSMA]-.|CR|Esc|Tab|BS|Space|Enter|NL|Del|lt|Bslash|Bar)>",
    re.IGNORECASE,
)

_CANONICAL = {
    "<c-v>": CTRL_V,
    "<c-r>": CTRL_R,
    "<cr>": CR,
    "<enter>": CR,
    "<esc>": ESC,
    "<bs>": "<BS>",
    "<tab>": "<Tab>",
}

_NAMED_KEYS = {
    "enter": CR,
    "return": CR,
    "escape": ESC,
    "esc": ESC,
    "tab": "<Tab>",
    "backspace": "<BS>",
    "space": " ",
}


def _normalize_modifiers(modifiers: Iterable[str]) -> tuple[str, ...]:
    values = tuple(m.strip().lower() for m in modifiers if m.strip())
    return tuple(sorted(dict.fromkeys(values)))


@dataclass(frozen=True, slots=True)
class KeyStroke:
    """Single key press as delivered by a keyboard-capture layer."""

    key: str
    modifiers: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.key:
            raise ValueError("key cannot be empty")
        object.__setattr__(self, "modifiers", _normalize_modifiers(self.modifiers))

    @property
    def token(self) -> str:
        """Grammar notation for this stroke (``<C-r>``, ``<CR>``, ``x``)."""

        if "ctrl" in self.modifiers:
            return canonical(f"<C-{self.key}>")
        if len(self.key) > 1:
            return _NAMED_KEYS.get(self.key.lower(), self.key)
        return self.key


def canonical(key: str) -> str:
    """Fold spelling variants of the same special key (``<c-v>``, ``<C-V>``)."""

    return _CANONICAL.get(key.lower(), key)


def split_keys(text: str) -> list[str]:
    """Split ``text`` into logical keystrokes.

    Recognised bracketed names (``<C-r>``, ``<CR>``, ``<Esc>``) stay whole;
    every other character, including a lone ``<``, is its own keystroke.
    """

    keys: list[str] = []
    index = 0
    while index < len(text):
        special = _SPECIAL_KEY.match(text, index)
        if special:
            keys.append(canonical(special.group(0)))
            index = special.end()
        else:
            keys.append(text[index])
            index += 1
    return keys


def as_keys(keys: str | Sequence[str]) -> list[str]:
    if isinstance(keys, str):
        return split_keys(keys)
    return list(keys)


__all__ = [
    "CR",
    "ESC",
    "CTRL_R",
    "CTRL_V",
    "KeyStroke",
    "canonical",
    "split_keys",
    "as_keys",
]
