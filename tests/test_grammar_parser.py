from __future__ import annotations

import pytest

from vim_grammar.grammar import (
    CR,
    CTRL_R,
    DEFAULT_REGISTRY,
    Parser,
    TokenConflictError,
    TokenRegistry,
    get_command_parse_status,
    parse,
)
from vim_grammar.grammar.ast import (
    ActionCommand,
    CharMotion,
    CharReplaceAction,
    MarkMotion,
    MiscAction,
    MotionCommand,
    MotionTarget,
    OperatorCommand,
    ParseComplete,
    ParseNeedsChar,
    PrefixedMotion,
    RedoAction,
    RegisterRef,
    SearchMotion,
    SearchRepeatMotion,
    SimpleMotion,
    TextObjectTarget,
)
from vim_grammar.grammar.trie import Token


def make_command(keys: str):
    result = parse(keys)
    assert isinstance(result, ParseComplete), result
    return result.command


def test_default_registry_dictionary_sizes() -> None:
    stats = DEFAULT_REGISTRY.stats()

    assert stats.operators == 12
    assert stats.actions == 22
    assert stats.motions == 55
    assert stats.forced_kinds == 3
    assert stats.text_objects == 18
    assert stats.frozen


def test_frozen_registry_rejects_registration() -> None:
    with pytest.raises(RuntimeError):
        DEFAULT_REGISTRY.register(Token("Q", "action"))


def test_duplicate_token_raises_conflict() -> None:
    registry = TokenRegistry()
    registry.register(Token("d", "operator"))

    with pytest.raises(TokenConflictError) as excinfo:
        registry.register(Token("d", "operator"))

    assert excinfo.value.existing.key == "d"


def test_operator_with_count_and_motion() -> None:
    command = make_command("3dw")

    assert command == OperatorCommand(
        operator="d",
        count_before=3,
        target=MotionTarget(motion=SimpleMotion("w")),
    )


def test_counts_on_both_sides_of_operator() -> None:
    command = make_command("2d3w")

    assert isinstance(command, OperatorCommand)
    assert command.count_before == 2
    assert command.count_after == 3


def test_doubled_operator_has_no_target() -> None:
    command = make_command("dd")

    assert command == OperatorCommand(operator="d", doubled=True)


def test_doubling_after_inner_count() -> None:
    command = make_command("d2d")

    assert isinstance(command, OperatorCommand)
    assert command.doubled
    assert command.count_after == 2


def test_two_stroke_operator_doubles() -> None:
    command = make_command("gugu")

    assert isinstance(command, OperatorCommand)
    assert command.operator == "gu"
    assert command.doubled


def test_doubling_requires_the_same_operator() -> None:
    assert get_command_parse_status("gUgu") == "invalid"
    assert make_command("gUgU") == OperatorCommand(operator="gU", doubled=True)
    assert make_command("2gq3gq") == OperatorCommand(
        operator="gq", doubled=True, count_before=2, count_after=3
    )


def test_text_object_target() -> None:
    command = make_command("ciw")

    assert isinstance(command, OperatorCommand)
    assert command.target == TextObjectTarget(mode="inner", object="w")


def test_forced_kind_is_attached_to_target() -> None:
    assert make_command("dvj") == OperatorCommand(
        operator="d", target=MotionTarget(motion=SimpleMotion("j"), forced="char")
    )
    assert make_command("d<C-V>j").target == MotionTarget(  # type: ignore[union-attr]
        motion=SimpleMotion("j"), forced="block"
    )


def test_register_prefix() -> None:
    command = make_command('"ayy')

    assert isinstance(command, OperatorCommand)
    assert command.register == RegisterRef("a")
    assert command.doubled


def test_register_before_bare_motion_is_dropped() -> None:
    assert make_command('"a3j') == MotionCommand(motion=SimpleMotion("j"), count=3)


@pytest.mark.parametrize(
    "keys",
    ["", "d", "3", "10", '"', '"a', "g", "di", "d3", "dv", "/foo", "d/x"],
)
def test_incomplete_prefixes(keys: str) -> None:
    assert get_command_parse_status(keys) == "incomplete"


@pytest.mark.parametrize("keys", ["gx", "xx", "dwx", "diq", "dd3", "zq"])
def test_invalid_sequences(keys: str) -> None:
    assert get_command_parse_status(keys) == "invalid"


def test_unknown_prefix_reason_names_the_key() -> None:
    result = parse("gx")

    assert result.status == "invalid"
    assert "'g'" in result.reason  # type: ignore[union-attr]


@pytest.mark.parametrize("keys,context", [("f", "f"), ("dt", "t"), ("r", "r"), ("3gr", "gr"), ("'", "'")])
def test_char_argument_tokens_request_one_key(keys: str, context: str) -> None:
    result = parse(keys)

    assert isinstance(result, ParseNeedsChar)
    assert result.context == context


def test_char_argument_takes_any_key_literally() -> None:
    assert make_command(["f", CR]) == MotionCommand(motion=CharMotion(key="f", char=CR))
    assert make_command("r ") == ActionCommand(action=CharReplaceAction(which="r", char=" "))


def test_prefixed_motions_resolve_whole() -> None:
    assert make_command("gg") == MotionCommand(motion=PrefixedMotion(head="g", tail="g"))
    assert make_command("]m") == MotionCommand(motion=PrefixedMotion(head="]", tail="m"))
    assert make_command("dgg").target == MotionTarget(  # type: ignore[union-attr]
        motion=PrefixedMotion(head="g", tail="g")
    )


def test_search_pattern_runs_to_enter() -> None:
    command = make_command("d/foo bar<CR>")

    assert isinstance(command, OperatorCommand)
    assert command.target == MotionTarget(
        motion=SearchMotion(direction="forward", pattern="foo bar")
    )
    assert make_command("?x<CR>") == MotionCommand(
        motion=SearchMotion(direction="backward", pattern="x")
    )


def test_search_repeat_and_mark_motions() -> None:
    assert make_command("n") == MotionCommand(motion=SearchRepeatMotion(key="n"))
    assert make_command("`a") == MotionCommand(motion=MarkMotion(style="`", mark="a"))


def test_zero_is_a_motion_not_a_count() -> None:
    assert make_command("0") == MotionCommand(motion=SimpleMotion("0"))
    assert make_command("10j") == MotionCommand(motion=SimpleMotion("j"), count=10)


def test_actions_and_aliases() -> None:
    assert make_command(CTRL_R) == ActionCommand(action=RedoAction())
    assert make_command("2D") == ActionCommand(action=MiscAction("D"), count=2)


def test_parser_is_pure_across_calls() -> None:
    parser = Parser()

    first = parser.parse("3dw")
    second = parser.parse("3dw")

    assert first == second
    assert parser.status("d") == "incomplete"
