"""Tests for the Tab Out jump decision."""

from __future__ import annotations

import pytest

from jump_over import (
    DEFAULT_CONFIG,
    JumpConfig,
    NullSyntaxContext,
    should_jump_over,
)


class StubContext:
    def __init__(self, delimiters="'\"", depth=0, comment=False):
        self.delimiters = delimiters
        self.depth = depth
        self.comment = comment
        self.calls = []

    def is_string_delimiter(self, ch):
        self.calls.append(("is_string_delimiter", ch))
        return ch in self.delimiters

    def string_depth(self, position):
        self.calls.append(("string_depth", position))
        return self.depth

    def in_comment(self, position):
        self.calls.append(("in_comment", position))
        return self.comment


class BrokenContext:
    def is_string_delimiter(self, ch):
        raise RuntimeError("no syntax table")

    def string_depth(self, position):
        raise RuntimeError("no syntax table")

    def in_comment(self, position):
        raise RuntimeError("no syntax table")


@pytest.mark.parametrize("ch", list("])}>:;`'"))
@pytest.mark.parametrize(
    "context",
    [None, NullSyntaxContext(), StubContext(), StubContext(depth=1), StubContext(comment=True)],
)
def test_closing_chars_always_jump(ch: str, context) -> None:
    assert should_jump_over(ch, 3, context) is True


def test_closing_chars_skip_syntax_queries() -> None:
    ctx = StubContext()
    assert should_jump_over(")", 0, ctx) is True
    assert ctx.calls == []


def test_double_quote_without_string_concept_jumps() -> None:
    assert should_jump_over('"', 0, StubContext(delimiters="")) is True
    assert should_jump_over('"', 0, NullSyntaxContext()) is True


def test_double_quote_inside_string_jumps() -> None:
    assert should_jump_over('"', 7, StubContext(depth=1)) is True


def test_opening_double_quote_does_not_jump() -> None:
    ctx = StubContext(depth=0, comment=False)

    assert should_jump_over('"', 0, ctx) is False
    assert ctx.calls == [
        ("is_string_delimiter", '"'),
        ("string_depth", 0),
        ("in_comment", 0),
    ]


def test_double_quote_in_comment_jumps() -> None:
    assert should_jump_over('"', 4, StubContext(depth=0, comment=True)) is True


@pytest.mark.parametrize("ch", ["a", " ", "\t", "\n", "(", "[", "{", "<", ",", "."])
def test_other_chars_do_not_jump(ch: str) -> None:
    assert should_jump_over(ch, 0, NullSyntaxContext()) is False


@pytest.mark.parametrize("ch", [None, ""])
def test_end_of_buffer_does_not_jump(ch) -> None:
    assert should_jump_over(ch, 10, StubContext()) is False


def test_multi_char_input_is_not_a_member() -> None:
    assert should_jump_over("])", 0, NullSyntaxContext()) is False


def test_missing_context_jumps_over_quote() -> None:
    assert should_jump_over('"', 0, None) is True


def test_failing_context_is_treated_as_plain_text() -> None:
    assert should_jump_over('"', 0, BrokenContext()) is True


def test_same_inputs_same_answer() -> None:
    ctx = StubContext()
    first = should_jump_over('"', 2, ctx)
    second = should_jump_over('"', 2, ctx)
    assert first == second is False


def test_single_quote_stays_unconditional_by_default() -> None:
    # Listed in both sets; the unconditional set wins.
    assert should_jump_over("'", 0, StubContext(depth=0, comment=False)) is True


def test_single_quote_uses_quote_logic_when_removed_from_jump_chars() -> None:
    config = JumpConfig(jump_chars="])}>:;`", quote_chars="'\"")

    assert should_jump_over("'", 0, StubContext(), config) is False
    assert should_jump_over("'", 5, StubContext(depth=1), config) is True


def test_custom_config_drives_membership() -> None:
    config = JumpConfig(jump_chars=["|", ","], quote_chars=[])

    assert should_jump_over(",", 0, None, config) is True
    assert should_jump_over(")", 0, None, config) is False
    assert should_jump_over('"', 0, None, config) is False


def test_config_keeps_order_and_drops_duplicates() -> None:
    config = JumpConfig(jump_chars=")])", quote_chars='"')
    assert config.jump_chars == (")", "]")


def test_config_rejects_multi_char_entries() -> None:
    with pytest.raises(ValueError):
        JumpConfig(jump_chars=[")", "]]"])


def test_config_from_settings_defaults() -> None:
    assert JumpConfig.from_settings({}) == DEFAULT_CONFIG
    assert JumpConfig.from_settings({"jump_chars": ")"}).jump_chars == (")",)
