"""Token registry holding the five grammar dictionaries.

The default registry is built once at import time and frozen; the parser
consults it for every keystroke.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Optional

from vim_grammar.runtime.telemetry import span

from .keys import CTRL_R, CTRL_V
from .trie import Token, TokenKind, TokenTrie


@dataclass(slots=True)
class RegistryStats:
    """Snapshot of dictionary sizes."""

    operators: int
    actions: int
    motions: int
    forced_kinds: int
    text_objects: int
    frozen: bool


class TokenConflictError(RuntimeError):
    """Raised when a token key is registered twice in one dictionary."""

    def __init__(self, token: Token, existing: Token):
        super().__init__(
            f"Token '{token.key}' ({token.kind}) conflicts with an existing "
            f"{existing.kind} token"
        )
        self.token = token
        self.existing = existing


OPERATOR_TOKENS: tuple[Token, ...] = (
    Token("d", "operator", linewise_if_doubled=True, description="delete"),
    Token("c", "operator", linewise_if_doubled=True, description="change"),
    Token("y", "operator", linewise_if_doubled=True, description="yank"),
    Token(">", "operator", linewise_if_doubled=True, description="indent"),
    Token("<", "operator", linewise_if_doubled=True, description="outdent"),
    Token("=", "operator", linewise_if_doubled=True, description="format"),
    Token("!", "operator", description="filter"),
    Token("g~", "operator", linewise_if_doubled=True, description="toggle case"),
    Token("gu", "operator", linewise_if_doubled=True, description="lowercase"),
    Token("gU", "operator", linewise_if_doubled=True, description="uppercase"),
    Token("gq", "operator", description="format text"),
    Token("g@", "operator", description="operator function"),
)

ACTION_TOKENS: tuple[Token, ...] = (
    Token("p", "action", description="put after"),
    Token("P", "action", description="put before"),
    Token("r", "action", expects_char_arg=True, description="replace char"),
    Token("gr", "action", expects_char_arg=True, description="virtual replace"),
    Token("i", "action", description="insert"),
    Token("a", "action", description="append"),
    Token("A", "action", description="append at line end"),
    Token("I", "action", description="insert at first non-blank"),
    Token("o", "action", description="open line below"),
    Token("O", "action", description="open line above"),
    Token("s", "action", description="substitute char"),
    Token("x", "action", description="delete char"),
    Token("X", "action", description="delete char before"),
    Token("u", "action", description="undo"),
    Token(CTRL_R, "action", description="redo"),
    Token(".", "action", description="repeat last change"),
    Token("J", "action", description="join lines"),
    Token("~", "action", description="toggle case of char"),
    Token("D", "action", description="alias of d$"),
    Token("C", "action", description="alias of c$"),
    Token("S", "action", description="alias of cc"),
    Token("Y", "action", description="alias of yy"),
)

_SIMPLE_MOTIONS = (
    "w W e E b B ge gE h j k l 0 ^ $ _ g_ gg G { } ( ) % ; , / ? n N * # "
    "H M L zt zz zb ]] [[ ][ [] ]m [m gj gk g0 g^ g$"
)

MOTION_TOKENS: tuple[Token, ...] = tuple(
    Token(key, "motion") for key in _SIMPLE_MOTIONS.split()
) + tuple(
    Token(key, "motion", expects_char_arg=True) for key in ("f", "F", "t", "T", "'", "`")
)

FORCED_KIND_TOKENS: tuple[Token, ...] = (
    Token("v", "forcedKind", description="force characterwise"),
    Token("V", "forcedKind", description="force linewise"),
    Token(CTRL_V, "forcedKind", description="force blockwise"),
)

TEXT_OBJECT_KEYS: tuple[str, ...] = (
    "w", "W", "s", "p", "(", ")", "[", "]", "{", "}", "<", ">", '"', "'", "`", "t", "b", "B",
)  # fmt: skip


class TokenRegistry:
    """Owns the operator, action, motion, forced-kind and text-object tries."""

    def __init__(self, *, logger_name: str | None = None) -> None:
        self._logger_name = logger_name
        self._frozen = False
        self._tries: Dict[TokenKind, TokenTrie] = {
            "operator": TokenTrie("operators"),
            "action": TokenTrie("actions"),
            "motion": TokenTrie("motions"),
            "forcedKind": TokenTrie("forced_kinds"),
            "textobj": TokenTrie("text_objects"),
        }

    @property
    def operators(self) -> TokenTrie:
        return self._tries["operator"]

    @property
    def actions(self) -> TokenTrie:
        return self._tries["action"]

    @property
    def motions(self) -> TokenTrie:
        return self._tries["motion"]

    @property
    def forced_kinds(self) -> TokenTrie:
        return self._tries["forcedKind"]

    @property
    def text_objects(self) -> TokenTrie:
        return self._tries["textobj"]

    @property
    def frozen(self) -> bool:
        return self._frozen

    def register(self, token: Token) -> Token:
        if self._frozen:
            raise RuntimeError("TokenRegistry is frozen; build a new registry instead")
        trie = self._tries[token.kind]
        existing = trie.get(token.key)
        if existing is not None:
            raise TokenConflictError(token, existing)
        return trie.add(token)

    def register_many(self, tokens: Iterable[Token]) -> int:
        batch = tuple(tokens)
        kinds = sorted({token.kind for token in batch})
        with span(
            "grammar::register_tokens",
            logger_name=self._logger_name,
            component="grammar",
            metadata={"count": len(batch), "kinds": ",".join(kinds)},
        ):
            for token in batch:
                self.register(token)
        return len(batch)

    def freeze(self) -> "TokenRegistry":
        self._frozen = True
        return self

    def is_text_object_key(self, key: str) -> bool:
        return key in self.text_objects

    def stats(self) -> RegistryStats:
        return RegistryStats(
            operators=len(self.operators),
            actions=len(self.actions),
            motions=len(self.motions),
            forced_kinds=len(self.forced_kinds),
            text_objects=len(self.text_objects),
            frozen=self._frozen,
        )


def build_default_registry(*, logger_name: Optional[str] = None) -> TokenRegistry:
    """Return a frozen registry seeded with the standard Vim token set."""

    registry = TokenRegistry(logger_name=logger_name)
    registry.register_many(OPERATOR_TOKENS)
    registry.register_many(ACTION_TOKENS)
    registry.register_many(MOTION_TOKENS)
    registry.register_many(FORCED_KIND_TOKENS)
    registry.register_many(Token(key, "textobj") for key in TEXT_OBJECT_KEYS)
    return registry.freeze()


DEFAULT_REGISTRY = build_default_registry(logger_name="vim_grammar.grammar")

__all__ = [
    "ACTION_TOKENS",
    "DEFAULT_REGISTRY",
    "FORCED_KIND_TOKENS",
    "MOTION_TOKENS",
    "OPERATOR_TOKENS",
    "RegistryStats",
    "TEXT_OBJECT_KEYS",
    "TokenConflictError",
    "TokenRegistry",
    "build_default_registry",
]
