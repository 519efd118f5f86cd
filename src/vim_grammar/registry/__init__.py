"""Pluggable motion, operator, text-object and action implementations."""

from .base import (
    ActionImpl,
    CommandRegistry,
    CommandRegistryStats,
    MotionImpl,
    MotionOptions,
    OperatorImpl,
    OperatorOutcome,
    RegistryConflictError,
    TextObjectImpl,
)
from .defaults import load_default_registry
from .motions import FunctionMotion, MotionLibrary, MotionMemory

__all__ = [
    "ActionImpl",
    "CommandRegistry",
    "CommandRegistryStats",
    "FunctionMotion",
    "MotionImpl",
    "MotionLibrary",
    "MotionMemory",
    "MotionOptions",
    "OperatorImpl",
    "OperatorOutcome",
    "RegistryConflictError",
    "TextObjectImpl",
    "load_default_registry",
]
