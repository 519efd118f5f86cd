from __future__ import annotations

import pytest

from vim_grammar.grammar.keys import CR, CTRL_R, CTRL_V, KeyStroke, canonical, split_keys
from vim_grammar.grammar.trie import Token, TokenTrie


def make_trie(*keys: str, kind: str = "motion") -> TokenTrie:
    trie = TokenTrie("test")
    for key in keys:
        trie.add(Token(key, kind))  # type: ignore[arg-type]
    return trie


def test_split_keys_keeps_bracketed_names_whole() -> None:
    assert split_keys("d<C-v>j") == ["d", CTRL_V, "j"]
    assert split_keys("/ab<cr>") == ["/", "a", "b", CR]
    assert split_keys("<x") == ["<", "x"]


def test_keystroke_token_uses_grammar_notation() -> None:
    assert KeyStroke("r", ("Ctrl",)).token == CTRL_R
    assert KeyStroke("Enter").token == CR
    assert KeyStroke("x").token == "x"
    assert canonical("<c-v>") == CTRL_V


def test_match_returns_longest_terminal() -> None:
    trie = make_trie("g", "gg")

    match = trie.match(["g", "g"])

    assert match.complete
    assert match.token is not None and match.token.key == "gg"
    assert match.length == 2


def test_match_falls_back_to_shorter_terminal_on_mismatch() -> None:
    trie = make_trie("g", "gg")

    match = trie.match(["g", "x"])

    assert match.complete
    assert match.token is not None and match.token.key == "g"
    assert match.length == 1


def test_match_partial_when_input_runs_out_inside_prefix() -> None:
    trie = make_trie("gg", "ge")

    assert trie.match(["g"]).partial


def test_match_none_when_prefix_dead_ends() -> None:
    trie = make_trie("gr", kind="action")

    assert trie.match(["g", "g"]).status == "none"
    assert trie.match(["x"]).status == "none"


def test_match_respects_start_index() -> None:
    trie = make_trie("d", "w")

    match = trie.match(["3", "d", "w"], 2)

    assert match.token is not None and match.token.key == "w"


def test_multi_stroke_special_key_is_one_edge() -> None:
    trie = make_trie(CTRL_R, kind="action")

    match = trie.match([CTRL_R])

    assert match.complete and match.length == 1
    assert CTRL_R in trie


def test_duplicate_token_rejected() -> None:
    trie = make_trie("w")

    with pytest.raises(ValueError):
        trie.add(Token("w", "motion"))


def test_tokens_iterates_in_key_order() -> None:
    trie = make_trie("w", "b", "gg", "g_")

    assert [token.key for token in trie.tokens()] == ["b", "g_", "gg", "w"]
    assert len(trie) == 4
