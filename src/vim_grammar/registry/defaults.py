"""Factory for a registry populated with the standard implementations."""

from __future__ import annotations

from typing import Optional

from .actions import default_actions
from .base import CommandRegistry
from .motions import MotionLibrary, MotionMemory, default_motions
from .operators import default_operators
from .text_objects import default_text_objects


def load_default_registry(
    *,
    memory: Optional[MotionMemory] = None,
    logger_name: str | None = None,
) -> CommandRegistry:
    """Return a fresh ``CommandRegistry`` with every default implementation.

    ``memory`` lets callers share or inspect find/search/mark state.
    """

    registry = CommandRegistry(logger_name=logger_name)
    registry.register_table("motions", default_motions(MotionLibrary(memory)))
    registry.register_table("operators", default_operators())
    registry.register_table("text_objects", default_text_objects())
    registry.register_table("actions", default_actions())
    return registry


__all__ = ["load_default_registry"]
