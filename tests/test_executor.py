from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from vim_grammar.buffer import Buffer, EditorContext, Position, Range
from vim_grammar.engine import Executor, InterpreterSession, Mode
from vim_grammar.grammar import ParseComplete, parse
from vim_grammar.grammar.ast import Command
from vim_grammar.registry import (
    CommandRegistry,
    MotionOptions,
    OperatorOutcome,
    load_default_registry,
)
from vim_grammar.runtime import InterpreterSettings


class SpyMotion:
    """Records the count and options each call receives."""

    def __init__(self) -> None:
        self.calls: List[Tuple[int, MotionOptions]] = []

    def calculate(
        self, cursor: Position, lines: Sequence[str], count: int, options: MotionOptions
    ) -> Optional[Range]:
        self.calls.append((count, options))
        return Range(start=cursor, end=cursor)


class ExplodingOperator:
    def execute(self, target: Range, context: EditorContext) -> OperatorOutcome:
        context.update_content("half-applied edit")
        raise RuntimeError("operator blew up")


def make_executor(
    text: str,
    cursor: tuple[int, int] = (0, 0),
    registry: Optional[CommandRegistry] = None,
) -> tuple[Executor, Buffer]:
    buffer = Buffer.from_text(text, cursor=cursor)
    session = InterpreterSession(settings=InterpreterSettings())
    executor = Executor(session, registry or load_default_registry(), buffer)
    return executor, buffer


def make_command(keys: str) -> Command:
    result = parse(keys)
    assert isinstance(result, ParseComplete), result
    return result.command


def register_text(executor: Executor, name: str = '"') -> str:
    return executor.session.get_register_content(name).text


def test_delete_three_words() -> None:
    executor, buffer = make_executor("one two three four")

    assert executor.execute(make_command("3dw"))

    assert buffer.content == "four"
    assert register_text(executor) == "one two three "
    assert buffer.cursor == Position(0, 0, 0)


def test_counts_multiply_before_reaching_the_motion() -> None:
    spy = SpyMotion()
    registry = load_default_registry()
    registry.register_motion("w", spy, replace=True)
    executor, _ = make_executor("one two", registry=registry)

    executor.execute(make_command("2d3w"))

    assert [count for count, _ in spy.calls] == [6]
    assert spy.calls[0][1].explicit_count


def test_delete_to_end_of_line_is_inclusive() -> None:
    executor, buffer = make_executor("hello world", cursor=(0, 6))

    assert executor.execute(make_command("d$"))

    assert buffer.content == "hello "
    assert register_text(executor) == "world"
    assert buffer.cursor.column == 5


def test_delete_line_and_counted_lines() -> None:
    executor, buffer = make_executor("a\nb\nc", cursor=(1, 0))

    assert executor.execute(make_command("dd"))

    assert buffer.lines == ("a", "c")
    assert executor.session.get_register_content('"').type == "line"
    assert register_text(executor, "1") == "b"

    executor, buffer = make_executor("a\nb\nc\nd")
    assert executor.execute(make_command("d2d"))
    assert buffer.lines == ("c", "d")
    assert register_text(executor) == "a\nb"


def test_linewise_deletes_shift_numbered_registers() -> None:
    executor, buffer = make_executor("a\nb\nc")

    executor.execute(make_command("dd"))
    executor.execute(make_command("dd"))

    assert buffer.lines == ("c",)
    assert register_text(executor, "1") == "b"
    assert register_text(executor, "2") == "a"


def test_exclusive_word_motion_stops_at_line_end() -> None:
    executor, buffer = make_executor("foo bar\nbaz", cursor=(0, 4))

    assert executor.execute(make_command("dw"))

    assert buffer.lines == ("foo ", "baz")


def test_change_inner_word_enters_insert() -> None:
    executor, buffer = make_executor("foo bar baz", cursor=(0, 5))

    assert executor.execute(make_command("ciw"))

    assert buffer.content == "foo  baz"
    assert buffer.cursor == Position(0, 4, 4)
    assert executor.session.mode == Mode.INSERT
    assert register_text(executor) == "bar"
    assert executor.session.get_register_content('"').type == "char"


def test_change_word_acts_like_change_to_word_end() -> None:
    executor, buffer = make_executor("foo bar")

    assert executor.execute(make_command("cw"))

    assert buffer.content == " bar"


def test_change_word_on_last_character_of_word() -> None:
    executor, buffer = make_executor("foo bar", cursor=(0, 2))

    assert executor.execute(make_command("cw"))

    assert buffer.content == "fo bar"
    assert register_text(executor) == "o"

    executor, buffer = make_executor("foo bar", cursor=(0, 2))
    assert executor.execute(make_command("2cw"))
    assert buffer.content == "fo"


def test_change_line_keeps_indent() -> None:
    executor, buffer = make_executor("    body\nnext")

    assert executor.execute(make_command("cc"))

    assert buffer.lines == ("    ", "next")
    assert buffer.cursor == Position(0, 4, 4)


def test_forced_characterwise_on_linewise_motion() -> None:
    executor, buffer = make_executor("abc\ndef", cursor=(0, 1))

    assert executor.execute(make_command("dvj"))

    assert buffer.content == "aef"


def test_forced_linewise_on_characterwise_motion() -> None:
    executor, buffer = make_executor("foo bar\nbaz")

    assert executor.execute(make_command("dVw"))

    assert buffer.lines == ("baz",)
    assert executor.session.get_register_content('"').type == "line"


def test_blockwise_delete() -> None:
    executor, buffer = make_executor("abcd\nefgh\nijkl", cursor=(0, 1))

    assert executor.execute(make_command("d<C-V>j"))

    assert buffer.lines == ("acd", "egh", "ijkl")
    assert executor.session.get_register_content('"').type == "block"


def test_blockwise_yank_leaves_buffer() -> None:
    executor, buffer = make_executor("abcd\nefgh", cursor=(0, 1))

    assert executor.execute(make_command("y<C-V>j"))

    assert buffer.lines == ("abcd", "efgh")
    assert register_text(executor) == "b\nf"
    assert executor.session.get_register_content('"').type == "block"


def test_yank_writes_register_zero_without_editing() -> None:
    executor, buffer = make_executor("foo bar")

    assert executor.execute(make_command("yw"))

    assert buffer.content == "foo bar"
    assert register_text(executor, "0") == "foo "
    assert register_text(executor) == "foo "


def test_named_register_yank_and_put() -> None:
    executor, buffer = make_executor("one\ntwo")

    assert executor.execute(make_command('"ayy'))
    assert executor.execute(make_command('"ap'))

    assert buffer.lines == ("one", "one", "two")
    assert buffer.cursor.line == 1


def test_put_from_empty_register_fails() -> None:
    executor, buffer = make_executor("text")

    assert not executor.execute(make_command('"qp'))

    assert buffer.content == "text"


def test_characterwise_put_after_cursor() -> None:
    executor, buffer = make_executor("ac")
    executor.session.set_register_content('"', "b", kind="yank")

    assert executor.execute(make_command("p"))

    assert buffer.content == "abc"
    assert buffer.cursor.column == 1


def test_counted_put_keeps_copies_together() -> None:
    executor, buffer = make_executor("a\nb\nz")
    executor.execute(make_command("2yy"))
    executor.execute(make_command("G"))

    assert executor.execute(make_command("2p"))

    assert buffer.lines == ("a", "b", "z", "a", "b", "a", "b")
    assert buffer.cursor.line == 3

    executor, buffer = make_executor("ac")
    executor.session.set_register_content('"', "b", kind="yank")
    assert executor.execute(make_command("3p"))
    assert buffer.content == "abbbc"
    assert buffer.cursor.column == 3


def test_delete_chars_forward_and_backward() -> None:
    executor, buffer = make_executor("abcdef")
    assert executor.execute(make_command("3x"))
    assert buffer.content == "def"
    assert register_text(executor) == "abc"
    assert register_text(executor, "-") == "abc"

    executor, buffer = make_executor("abcdef", cursor=(0, 5))
    assert executor.execute(make_command("3X"))
    assert buffer.content == "abf"
    assert register_text(executor) == "cde"
    assert buffer.cursor.column == 2


def test_delete_char_on_empty_line_fails() -> None:
    executor, buffer = make_executor("")

    assert not executor.execute(make_command("x"))


def test_replace_characters() -> None:
    executor, buffer = make_executor("abc")

    assert executor.execute(make_command("2rx"))
    assert buffer.content == "xxc"
    assert buffer.cursor.column == 1

    assert not executor.execute(make_command("5ry"))
    assert buffer.content == "xxc"


def test_replace_with_enter_splits_line() -> None:
    executor, buffer = make_executor("ab cd", cursor=(0, 2))

    assert executor.execute(make_command("r<CR>"))

    assert buffer.lines == ("ab", "cd")


def test_dot_repeats_last_change() -> None:
    executor, buffer = make_executor("abcdef")

    executor.execute(make_command("x"))
    executor.execute(make_command("."))

    assert buffer.content == "cdef"
    assert register_text(executor) == "b"


def test_dot_with_count_overrides_stored_count() -> None:
    executor, buffer = make_executor("abcdef")

    executor.execute(make_command("x"))
    executor.execute(make_command("3."))

    assert buffer.content == "ef"


def test_motions_are_not_recorded_for_repeat() -> None:
    executor, buffer = make_executor("abc def")

    executor.execute(make_command("x"))
    executor.execute(make_command("w"))
    executor.execute(make_command("."))

    assert buffer.content == "bc ef"


def test_dot_without_history_fails() -> None:
    executor, _ = make_executor("abc")

    assert not executor.execute(make_command("."))


def test_stored_repeat_is_a_copy() -> None:
    executor, _ = make_executor("abcdef")
    executor.execute(make_command("dw"))

    stored = executor.session.get_last_repeatable_command()

    assert stored is not None
    assert stored.command == make_command("dw")


def test_failed_operator_leaves_buffer_untouched() -> None:
    registry = load_default_registry()
    registry.register_operator("d", ExplodingOperator(), replace=True)
    executor, buffer = make_executor("keep me", cursor=(0, 2), registry=registry)

    assert executor.execute(make_command("dw")) is False

    assert buffer.content == "keep me"
    assert buffer.cursor == Position(0, 2, 2)
    assert len(buffer.undo_timeline) == 0
    assert executor.session.get_last_repeatable_command() is None


def test_unresolved_text_object_changes_nothing() -> None:
    executor, buffer = make_executor("no brackets here")
    executor.execute(make_command("x"))

    assert executor.execute(make_command("di(")) is False

    assert buffer.content == "o brackets here"
    assert register_text(executor) == "n"
    stored = executor.session.get_last_repeatable_command()
    assert stored is not None
    assert stored.command == make_command("x")


def test_unimplemented_operator_is_rejected() -> None:
    executor, buffer = make_executor("text")

    assert not executor.execute(make_command("!w"))

    assert buffer.content == "text"


def test_motion_moves_cursor() -> None:
    executor, buffer = make_executor("abc\ndef\nghi")

    assert executor.execute(make_command("2j"))
    assert buffer.cursor.line == 2

    assert executor.execute(make_command("gg"))
    assert buffer.cursor.line == 0

    assert not executor.execute(make_command("k"))


def test_find_motion_with_operator_is_inclusive() -> None:
    executor, buffer = make_executor("hello world")

    assert executor.execute(make_command("dfo"))

    assert buffer.content == " world"


def test_search_motion_in_operator() -> None:
    executor, buffer = make_executor("alpha beta gamma")

    assert executor.execute(make_command("d/gam<CR>"))

    assert buffer.content == "amma"


def test_indent_and_case_operators() -> None:
    executor, buffer = make_executor("foo bar")

    assert executor.execute(make_command(">>"))
    assert buffer.content == "    foo bar"

    assert executor.execute(make_command("<<"))
    assert buffer.content == "foo bar"

    assert executor.execute(make_command("gUiw"))
    assert buffer.content == "FOO bar"


def test_line_transform_operators_cover_every_line() -> None:
    executor, buffer = make_executor("a\nb\nc")
    assert executor.execute(make_command(">j"))
    assert buffer.lines == ("    a", "    b", "c")

    executor, buffer = make_executor("\tfoo  ")
    assert executor.execute(make_command("=="))
    assert buffer.content == "    foo"


def test_case_operators_on_line_and_block_ranges() -> None:
    executor, buffer = make_executor("Foo")
    assert executor.execute(make_command("g~g~"))
    assert buffer.content == "fOO"

    executor, buffer = make_executor("ab\ncd\nef")
    assert executor.execute(make_command("gUj"))
    assert buffer.lines == ("AB", "CD", "ef")

    executor, buffer = make_executor("abcd\nefgh", cursor=(0, 1))
    assert executor.execute(make_command("g~<C-V>j"))
    assert buffer.lines == ("aBcd", "eFgh")


def test_join_and_toggle_case_actions() -> None:
    executor, buffer = make_executor("foo\n  bar")

    assert executor.execute(make_command("J"))
    assert buffer.content == "foo bar"

    buffer.set_cursor_position(Position(0, 0))
    assert executor.execute(make_command("~"))
    assert buffer.content == "Foo bar"


def test_aliases_match_their_expansion() -> None:
    for alias, expanded in (("D", "d$"), ("C", "c$"), ("Y", "yy"), ("S", "cc")):
        left, left_buffer = make_executor("  one two\nthree", cursor=(0, 4))
        right, right_buffer = make_executor("  one two\nthree", cursor=(0, 4))

        left.execute(make_command(alias))
        right.execute(make_command(expanded))

        assert left_buffer.content == right_buffer.content, alias
        assert register_text(left) == register_text(right), alias


def test_undo_and_redo_through_history() -> None:
    executor, buffer = make_executor("a\nb\nc")

    executor.execute(make_command("dd"))
    executor.execute(make_command("dd"))

    assert executor.execute(make_command("2u"))
    assert buffer.content == "a\nb\nc"

    assert executor.execute(make_command("<C-r>"))
    assert buffer.content == "b\nc"

    assert executor.execute(make_command("u"))
    assert not executor.execute(make_command("u"))


def test_insert_entering_actions_position_cursor() -> None:
    executor, buffer = make_executor("  foo")

    assert executor.execute(make_command("A"))
    assert buffer.cursor.column == 5
    assert executor.session.mode == Mode.INSERT

    executor.session.set_mode(Mode.NORMAL)
    assert executor.execute(make_command("o"))
    assert buffer.lines == ("  foo", "  ")
    assert buffer.cursor == Position(1, 2, 8)


def test_mode_switch_is_published_on_the_bus() -> None:
    executor, _ = make_executor("text")
    events: list[object] = []
    executor.session.bus.subscribe("mode.switch", events.append)

    executor.execute(make_command("i"))

    assert events == [{"from": Mode.NORMAL, "to": Mode.INSERT}]
