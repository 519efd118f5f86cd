from __future__ import annotations

import pytest

from vim_grammar.grammar import ParseComplete, normalize, parse
from vim_grammar.grammar.ast import MotionTarget, OperatorCommand, SimpleMotion
from vim_grammar.grammar.motion_kind import (
    BLOCKWISE,
    CHAR_EXCLUSIVE,
    CHAR_INCLUSIVE,
    LINEWISE,
    motion_info,
    resolve_motion_info,
)
from vim_grammar.grammar.normalize import NormalizedCommand, clone


def make_normalized(keys: str) -> NormalizedCommand:
    result = parse(keys)
    assert isinstance(result, ParseComplete), result
    return normalize(result.command)


@pytest.mark.parametrize(
    "alias,expanded",
    [("D", "d$"), ("C", "c$"), ("S", "cc"), ("Y", "yy"), ("3Y", "3yy"), ('"aD', '"ad$')],
)
def test_aliases_normalize_like_their_expansion(alias: str, expanded: str) -> None:
    assert make_normalized(alias) == make_normalized(expanded)


def test_doubled_operator_targets_current_line() -> None:
    normalized = make_normalized("dd")

    assert normalized.command == OperatorCommand(
        operator="d", doubled=True, target=MotionTarget(motion=SimpleMotion("_"))
    )


def test_counts_multiply() -> None:
    assert make_normalized("2d3w").count == 6
    assert make_normalized("d2d").count == 2
    assert make_normalized("dw").count == 1
    assert make_normalized("5x").count == 5


def test_register_defaults_to_unnamed() -> None:
    assert make_normalized("yy").register == '"'
    assert make_normalized('"byy').register == "b"
    assert normalize(parse("yy").command, unnamed_register="+").register == "+"  # type: ignore[union-attr]


@pytest.mark.parametrize(
    "keys,repeatable",
    [
        ("dw", True),
        ("yy", True),
        ("x", True),
        ("p", True),
        ("rx", True),
        ("i", True),
        ("J", True),
        ("~", True),
        ("D", True),
        ("j", False),
        ("gg", False),
        ("u", False),
        ("<C-r>", False),
        (".", False),
    ],
)
def test_repeatable_flag(keys: str, repeatable: bool) -> None:
    assert make_normalized(keys).repeatable is repeatable


def test_normalize_is_idempotent() -> None:
    normalized = make_normalized("3D")

    assert normalize(normalized) is normalized


def test_clone_is_equal_but_distinct() -> None:
    normalized = make_normalized("2d3w")

    copy = clone(normalized)

    assert copy == normalized
    assert copy is not normalized
    assert copy.command is not normalized.command


@pytest.mark.parametrize(
    "keys,expected",
    [
        ("j", LINEWISE),
        ("gg", LINEWISE),
        ("G", LINEWISE),
        ("}", LINEWISE),
        ("w", CHAR_EXCLUSIVE),
        ("l", CHAR_EXCLUSIVE),
        ("0", CHAR_EXCLUSIVE),
        ("e", CHAR_INCLUSIVE),
        ("$", CHAR_INCLUSIVE),
        ("%", CHAR_INCLUSIVE),
        ("fx", CHAR_INCLUSIVE),
        ("tx", CHAR_INCLUSIVE),
        ("/x<CR>", CHAR_INCLUSIVE),
        ("n", CHAR_INCLUSIVE),
        ("'a", LINEWISE),
        ("`a", CHAR_EXCLUSIVE),
    ],
)
def test_motion_classification(keys: str, expected) -> None:
    result = parse(keys)
    assert isinstance(result, ParseComplete)

    assert motion_info(result.command.motion) == expected  # type: ignore[union-attr]


def test_forced_char_flips_inclusivity() -> None:
    assert resolve_motion_info(SimpleMotion("w"), "char") == CHAR_INCLUSIVE
    assert resolve_motion_info(SimpleMotion("e"), "char") == CHAR_EXCLUSIVE
    assert resolve_motion_info(SimpleMotion("j"), "char") == CHAR_EXCLUSIVE


def test_forced_line_and_block() -> None:
    assert resolve_motion_info(SimpleMotion("w"), "line") == LINEWISE
    info = resolve_motion_info(SimpleMotion("j"), "block")

    assert info == BLOCKWISE
    assert info.blockwise and info.inclusive
