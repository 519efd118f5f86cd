"""Execution layer: session state, executor and the interpreter facade."""

from .executor import Executor
from .interpreter import FeedResult, Interpreter
from .session import InterpreterSession, Mode, ModeBus

__all__ = [
    "Executor",
    "FeedResult",
    "Interpreter",
    "InterpreterSession",
    "Mode",
    "ModeBus",
]
