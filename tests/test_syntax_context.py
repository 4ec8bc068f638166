"""Tests for the Pygments-backed syntax context."""

from __future__ import annotations

import pytest

from jump_over import NullSyntaxContext, should_jump_over
from syntax_context import (
    PygmentsSyntaxContext,
    get_lexer,
    language_for_filename,
    syntax_context_for,
)


def _split(marked: str) -> tuple[str, int]:
    pos = marked.index("|")
    return marked[:pos] + marked[pos + 1:], pos


@pytest.mark.parametrize(
    ("language", "ch", "expected"),
    [
        ("python", '"', True),
        ("python", "'", True),
        ("cpp", '"', True),
        ("cpp", "'", True),
        ("javascript", "`", True),
        ("text", '"', False),
    ],
)
def test_is_string_delimiter(language: str, ch: str, expected: bool) -> None:
    assert PygmentsSyntaxContext("", language).is_string_delimiter(ch) is expected


def test_string_depth_inside_literal() -> None:
    text, pos = _split('x = "hello|"\n')
    assert PygmentsSyntaxContext(text, "python").string_depth(pos) == 1


def test_string_depth_before_opening_quote() -> None:
    text, pos = _split('x = |"hello"\n')
    assert PygmentsSyntaxContext(text, "python").string_depth(pos) == 0


def test_string_depth_in_empty_pair() -> None:
    text, pos = _split('print("|")\n')
    assert PygmentsSyntaxContext(text, "python").string_depth(pos) == 1


def test_string_prefix_is_not_part_of_the_literal() -> None:
    text, pos = _split('x = f|"{y}"\n')
    assert PygmentsSyntaxContext(text, "python").string_depth(pos) == 0


def test_adjacent_literals_are_separate() -> None:
    text, pos = _split('x = "a"|"b"\n')
    assert PygmentsSyntaxContext(text, "python").string_depth(pos) == 0


def test_escaped_quote_does_not_close_literal() -> None:
    text, pos = _split('s = "say \\"hi\\"|"\n')
    assert PygmentsSyntaxContext(text, "python").string_depth(pos) == 1


def test_json_key_is_a_string() -> None:
    text, pos = _split('{"name|": 1}\n')
    ctx = PygmentsSyntaxContext(text, "json")
    assert ctx.is_string_delimiter('"') is True
    assert ctx.string_depth(pos) == 1


def test_in_comment_python() -> None:
    text, pos = _split('# say |"hi"\nx = 1\n')
    ctx = PygmentsSyntaxContext(text, "python")
    assert ctx.in_comment(pos) is True
    assert ctx.string_depth(pos) == 0


def test_in_comment_cpp_block() -> None:
    text, pos = _split('/* a |"quote */\nint x;\n')
    assert PygmentsSyntaxContext(text, "cpp").in_comment(pos) is True


def test_code_after_comment_is_not_comment() -> None:
    text, pos = _split('// note\nauto s = |"x";\n')
    ctx = PygmentsSyntaxContext(text, "cpp")
    assert ctx.in_comment(pos) is False
    assert ctx.string_depth(pos) == 0


def test_preprocessor_line_is_not_comment() -> None:
    text, pos = _split("#include <vector>\nint x = |'a';\n")
    ctx = PygmentsSyntaxContext(text, "cpp")
    assert ctx.in_comment(pos) is False


def test_syntax_context_for_plain_text() -> None:
    assert isinstance(syntax_context_for("abc", "text"), NullSyntaxContext)
    assert isinstance(syntax_context_for("abc", "no-such-language"), NullSyntaxContext)
    assert isinstance(syntax_context_for("abc", "python"), PygmentsSyntaxContext)


def test_get_lexer_plain_names() -> None:
    assert get_lexer("") is None
    assert get_lexer("Plain") is None
    assert get_lexer("python") is not None


@pytest.mark.parametrize(
    ("path", "language"),
    [("main.py", "python"), ("notes.txt", "text"), ("archive.zzz-unknown", "text")],
)
def test_language_for_filename(path: str, language: str) -> None:
    assert language_for_filename(path) == language


# ── Scenarios end to end ─────────────────────────────────────────────

@pytest.mark.parametrize(
    ("marked", "language", "expected"),
    [
        ("foo(bar|)\n", "python", True),
        ('|"hello"\n', "python", False),
        ('x = "hello|"\n', "python", True),
        ('x = "hello|"\n', "text", True),
        ('# it|"s quoted\n', "python", True),
        ('std::string s = "abc|";\n', "cpp", True),
        ('std::string s = |"abc";\n', "cpp", False),
        ('{"name|": 1}\n', "json", True),
        ('{|"name": 1}\n', "json", False),
        ('x = "a"|"b"\n', "python", False),
        ("value = 1|\n", "python", False),
    ],
)
def test_scenarios(marked: str, language: str, expected: bool) -> None:
    text, pos = _split(marked)
    ctx = syntax_context_for(text, language)
    assert should_jump_over(text[pos], pos, ctx) is expected
