"""Tokenizer, parser, normalizer and motion classifier."""

from .ast import (
    ActionCommand,
    Command,
    MotionCommand,
    OperatorCommand,
    ParseComplete,
    ParseIncomplete,
    ParseInvalid,
    ParseNeedsChar,
    ParseResult,
    ParseStatus,
)
from .keys import CR, CTRL_R, CTRL_V, ESC, KeyStroke, split_keys
from .motion_kind import MotionInfo, motion_info, resolve_motion_info
from .normalize import NormalizedCommand, normalize
from .parser import DEFAULT_PARSER, Parser, get_command_parse_status, parse
from .tokens import DEFAULT_REGISTRY, TokenConflictError, TokenRegistry, build_default_registry
from .trie import Token, TokenTrie, TrieMatch

__all__ = [
    "ActionCommand",
    "CR",
    "CTRL_R",
    "CTRL_V",
    "Command",
    "DEFAULT_PARSER",
    "DEFAULT_REGISTRY",
    "ESC",
    "KeyStroke",
    "MotionCommand",
    "MotionInfo",
    "NormalizedCommand",
    "OperatorCommand",
    "ParseComplete",
    "ParseIncomplete",
    "ParseInvalid",
    "ParseNeedsChar",
    "ParseResult",
    "ParseStatus",
    "Parser",
    "Token",
    "TokenConflictError",
    "TokenRegistry",
    "TokenTrie",
    "TrieMatch",
    "build_default_registry",
    "get_command_parse_status",
    "motion_info",
    "normalize",
    "parse",
    "resolve_motion_info",
    "split_keys",
]
