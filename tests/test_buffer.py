from __future__ import annotations

import pytest

from vim_grammar.buffer import (
    Buffer,
    BufferValidationError,
    HistoryContext,
    Position,
    Range,
    RegisterBank,
    RegisterValue,
    clamp_position,
    offset_for,
    position_from_offset,
)
from vim_grammar.runtime import InterpreterSettings


def make_buffer(text: str = "alpha\nbeta\ngamma", cursor: tuple[int, int] = (0, 0)) -> Buffer:
    return Buffer.from_text(text, cursor=cursor)


def test_offsets_count_newlines() -> None:
    lines = ["ab", "cd"]

    assert offset_for(lines, 1, 1) == 4
    assert position_from_offset(lines, 3) == Position(1, 0, 3)
    assert position_from_offset(lines, 2) == Position(0, 2, 2)


def test_clamp_position_stops_on_last_character() -> None:
    lines = ["abc", ""]

    assert clamp_position(lines, 0, 10) == Position(0, 2, 2)
    assert clamp_position(lines, 5, 3) == Position(1, 0, 4)


def test_range_ordered_swaps_backward_ranges() -> None:
    backward = Range(start=Position(1, 0, 4), end=Position(0, 1, 1), inclusive=True)

    ordered = backward.ordered()

    assert ordered.start == Position(0, 1, 1)
    assert ordered.end == Position(1, 0, 4)
    assert ordered.inclusive
    assert ordered.characterwise


def test_buffer_exposes_editor_context() -> None:
    buffer = make_buffer(cursor=(1, 2))

    assert buffer.lines == ("alpha", "beta", "gamma")
    assert buffer.cursor == Position(1, 2, 8)
    assert buffer.line() == "beta"
    assert isinstance(buffer, HistoryContext)


def test_cursor_validation_rejects_out_of_range() -> None:
    buffer = make_buffer()

    with pytest.raises(BufferValidationError) as excinfo:
        buffer.set_cursor_position(Position(7, 0))

    assert excinfo.value.position == Position(7, 0)


def test_cursor_may_sit_after_last_character() -> None:
    buffer = make_buffer()

    buffer.set_cursor_position(Position(1, 4))

    assert buffer.cursor.offset == 10


def test_update_content_records_undo_entry() -> None:
    buffer = make_buffer()

    buffer.update_content("changed")

    assert buffer.content == "changed"
    assert len(buffer.undo_timeline) == 1
    assert buffer.undo()
    assert buffer.content == "alpha\nbeta\ngamma"
    assert buffer.redo()
    assert buffer.content == "changed"
    assert not buffer.redo()


def test_transaction_groups_edits() -> None:
    buffer = make_buffer()

    with buffer.transaction("edit"):
        buffer.update_content("one")
        buffer.update_content("two")

    assert len(buffer.undo_timeline) == 1
    buffer.undo()
    assert buffer.content == "alpha\nbeta\ngamma"


def test_transaction_without_change_records_nothing() -> None:
    buffer = make_buffer()

    with buffer.transaction("noop"):
        buffer.update_content(buffer.content)

    assert len(buffer.undo_timeline) == 0
    assert not buffer.undo()


def test_failed_transaction_is_not_committed() -> None:
    buffer = make_buffer()

    with pytest.raises(RuntimeError):
        with buffer.transaction("boom"):
            buffer.update_content("broken")
            raise RuntimeError("boom")

    assert len(buffer.undo_timeline) == 0


def test_unnamed_register_mirrors_named_writes() -> None:
    bank = RegisterBank()

    bank.write("a", "hello", kind="yank")

    assert bank.get("a") == RegisterValue("hello")
    assert bank.get('"').text == "hello"


def test_yank_into_unnamed_fills_register_zero() -> None:
    bank = RegisterBank()

    bank.write('"', "word", kind="yank")

    assert bank.get("0").text == "word"
    assert bank.get("-").empty


def test_small_delete_goes_to_minus_register() -> None:
    bank = RegisterBank()

    bank.write('"', "abc")

    assert bank.get("-").text == "abc"
    assert bank.get("1").empty


def test_linewise_deletes_shift_numbered_registers() -> None:
    bank = RegisterBank()

    bank.write('"', "first", register_type="line")
    bank.write('"', "second", register_type="line")

    assert bank.get("1") == RegisterValue("second", "line")
    assert bank.get("2") == RegisterValue("first", "line")


def test_uppercase_register_appends() -> None:
    bank = RegisterBank()
    bank.write("a", "foo", kind="yank")

    bank.write("A", "bar", kind="yank")

    assert bank.get("a").text == "foobar"


def test_linewise_append_joins_with_newline() -> None:
    bank = RegisterBank()
    bank.write("a", "one", register_type="line", kind="yank")

    bank.write("A", "two", register_type="line", kind="yank")

    assert bank.get("a") == RegisterValue("one\ntwo", "line")


def test_blackhole_register_swallows_writes() -> None:
    bank = RegisterBank()
    bank.write('"', "keep", kind="yank")

    bank.write("_", "gone")

    assert bank.get('"').text == "keep"
    assert bank.get("_").empty


def test_serialize_and_load_round_trip() -> None:
    bank = RegisterBank()
    bank.write("q", "macro", kind="yank")

    other = RegisterBank()
    other.load(bank.serialize())

    assert other.get("q").text == "macro"


def test_settings_validate_values() -> None:
    with pytest.raises(ValueError):
        InterpreterSettings(tab_size=0)
    with pytest.raises(ValueError):
        InterpreterSettings(unnamed_register="ab")
    with pytest.raises(ValueError):
        InterpreterSettings(max_repeat_depth=0)


def test_settings_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("VIM_GRAMMAR_TAB_SIZE", "2")
    monkeypatch.setenv("VIM_GRAMMAR_SEARCH_WRAP", "off")

    settings = InterpreterSettings.from_env()

    assert settings.tab_size == 2
    assert settings.search_wrap is False


def test_settings_from_env_rejects_garbage(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("VIM_GRAMMAR_TAB_SIZE", "wide")

    with pytest.raises(ValueError):
        InterpreterSettings.from_env()
