"""Token tries with longest-match lookup over logical keystrokes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, Literal, Optional, Sequence

from .keys import split_keys

TokenKind = Literal["operator", "motion", "action", "textobj", "forcedKind"]


@dataclass(frozen=True, slots=True)
class Token:
    """Immutable dictionary entry such as ``d``, ``gU`` or ``<C-r>``."""

    key: str
    kind: TokenKind
    expects_char_arg: bool = False
    linewise_if_doubled: bool = False
    description: str = ""

    def __post_init__(self) -> None:
        if not self.key:
            raise ValueError("token key cannot be empty")

    @property
    def strokes(self) -> tuple[str, ...]:
        return tuple(split_keys(self.key))

    @property
    def supports_doubling(self) -> bool:
        return self.linewise_if_doubled


@dataclass(slots=True)
class TrieNode:
    """Single trie node: child edges plus at most one terminal token."""

    children: Dict[str, "TrieNode"] = field(default_factory=dict)
    token: Optional[Token] = None

    def child(self, stroke: str) -> "TrieNode":
        return self.children.setdefault(stroke, TrieNode())

    def next_strokes(self) -> tuple[str, ...]:
        return tuple(sorted(self.children))


@dataclass(frozen=True, slots=True)
class TrieMatch:
    """Outcome of ``TokenTrie.match``."""

    status: Literal["complete", "partial", "none"]
    token: Optional[Token] = None
    length: int = 0

    @property
    def complete(self) -> bool:
        return self.status == "complete"

    @property
    def partial(self) -> bool:
        return self.status == "partial"


NO_MATCH = TrieMatch(status="none")
PARTIAL_MATCH = TrieMatch(status="partial")


class TokenTrie:
    """Longest-match dictionary for one token kind."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.root = TrieNode()
        self._size = 0

    def __len__(self) -> int:
        return self._size

    def __contains__(self, key: str) -> bool:
        node = self._find(tuple(split_keys(key)))
        return node is not None and node.token is not None

    def add(self, token: Token) -> Token:
        node = self.root
        for stroke in token.strokes:
            node = node.child(stroke)
        if node.token is not None:
            raise ValueError(f"Token '{token.key}' already registered in {self.name}")
        node.token = token
        self._size += 1
        return token

    def get(self, key: str) -> Optional[Token]:
        node = self._find(tuple(split_keys(key)))
        return node.token if node else None

    def match(self, keys: Sequence[str], index: int = 0) -> TrieMatch:
        """Walk ``keys`` from ``index`` and report the longest token found.

        A terminal seen anywhere on the walk wins once the walk stops. Without
        one, running out of input inside a valid prefix is ``partial`` (more
        keys may still complete a token) while a mismatching key is ``none``.
        """

        node = self.root
        last: Optional[Token] = None
        exhausted = True

        for position in range(index, len(keys)):
            nxt = node.children.get(keys[position])
            if nxt is None:
                exhausted = False
                break
            node = nxt
            if node.token is not None:
                last = node.token

        if last is not None:
            return TrieMatch(status="complete", token=last, length=len(last.strokes))
        if node is not self.root and exhausted:
            return PARTIAL_MATCH
        return NO_MATCH

    def tokens(self) -> Iterator[Token]:
        stack = [self.root]
        while stack:
            node = stack.pop()
            if node.token is not None:
                yield node.token
            stack.extend(node.children[stroke] for stroke in sorted(node.children, reverse=True))

    def _find(self, strokes: tuple[str, ...]) -> Optional[TrieNode]:
        node = self.root
        for stroke in strokes:
            child = node.children.get(stroke)
            if child is None:
                return None
            node = child
        return node


__all__ = [
    "Token",
    "TokenKind",
    "TokenTrie",
    "TrieMatch",
    "TrieNode",
    "NO_MATCH",
    "PARTIAL_MATCH",
]
