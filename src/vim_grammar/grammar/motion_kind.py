"""Motion shape tables: characterwise, linewise or blockwise, and inclusivity."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional

from .ast import (
    CharMotion,
    ForcedKind,
    MarkMotion,
    Motion,
    SearchMotion,
    SearchRepeatMotion,
)

MotionKind = Literal["char", "line", "block"]

LINEWISE_MOTIONS = frozenset(
    "_ gg G j k { } ( ) H M L ]] [[ ][ [] ]m [m gj gk".split()
)
INCLUSIVE_MOTIONS = frozenset(
    "$ e E ge gE g_ % f t F T ; , / ? n N * #".split()
)


@dataclass(frozen=True, slots=True)
class MotionInfo:
    kind: MotionKind
    inclusive: bool

    @property
    def linewise(self) -> bool:
        return self.kind == "line"

    @property
    def blockwise(self) -> bool:
        return self.kind == "block"


CHAR_EXCLUSIVE = MotionInfo("char", False)
CHAR_INCLUSIVE = MotionInfo("char", True)
LINEWISE = MotionInfo("line", False)
BLOCKWISE = MotionInfo("block", True)


def info_for_key(key: str) -> MotionInfo:
    if key in LINEWISE_MOTIONS:
        return LINEWISE
    if key in INCLUSIVE_MOTIONS:
        return CHAR_INCLUSIVE
    return CHAR_EXCLUSIVE


def motion_info(motion: Motion) -> MotionInfo:
    if isinstance(motion, (CharMotion, SearchMotion, SearchRepeatMotion)):
        return CHAR_INCLUSIVE
    if isinstance(motion, MarkMotion):
        return LINEWISE if motion.style == "'" else CHAR_EXCLUSIVE
    return info_for_key(motion.lookup_key)


def apply_forced_kind(info: MotionInfo, forced: Optional[ForcedKind]) -> MotionInfo:
    """Override ``info`` with an explicit ``v``/``V``/``<C-V>`` modifier."""

    if forced is None:
        return info
    if forced == "line":
        return LINEWISE
    if forced == "block":
        return BLOCKWISE
    # "char": flips inclusivity on characterwise motions
    if info.kind == "char":
        return MotionInfo("char", not info.inclusive)
    return CHAR_EXCLUSIVE


def resolve_motion_info(motion: Motion, forced: Optional[ForcedKind] = None) -> MotionInfo:
    return apply_forced_kind(motion_info(motion), forced)


__all__ = [
    "BLOCKWISE",
    "CHAR_EXCLUSIVE",
    "CHAR_INCLUSIVE",
    "INCLUSIVE_MOTIONS",
    "LINEWISE",
    "LINEWISE_MOTIONS",
    "MotionInfo",
    "MotionKind",
    "apply_forced_kind",
    "info_for_key",
    "motion_info",
    "resolve_motion_info",
]
