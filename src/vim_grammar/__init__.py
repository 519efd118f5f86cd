"""Vim-style command grammar: tokenizer, streaming parser and executor."""

from .engine import Executor, FeedResult, Interpreter, InterpreterSession, Mode
from .grammar import (
    NormalizedCommand,
    ParseResult,
    get_command_parse_status,
    motion_info,
    normalize,
    parse,
    resolve_motion_info,
)

__all__ = [
    "Executor",
    "FeedResult",
    "Interpreter",
    "InterpreterSession",
    "Mode",
    "NormalizedCommand",
    "ParseResult",
    "buffer",
    "engine",
    "get_command_parse_status",
    "grammar",
    "motion_info",
    "normalize",
    "parse",
    "registry",
    "resolve_motion_info",
    "runtime",
]

__version__ = "0.1.0"
