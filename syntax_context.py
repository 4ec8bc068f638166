"""
syntax_context.py

Answers string/comment questions about a document position using Pygments.

``PygmentsSyntaxContext`` implements the ``SyntaxContext`` protocol from
``jump_over``.  Each context wraps one snapshot of a buffer; the buffer is
lexed the first time a position is queried.
"""
from __future__ import annotations

import logging
from bisect import bisect_left
from functools import lru_cache
from typing import Iterator, List, Optional, Tuple

from pygments.lexer import Lexer
from pygments.lexers import get_lexer_by_name, get_lexer_for_filename
from pygments.token import Comment, Name, String, _TokenType
from pygments.util import ClassNotFound

from jump_over import NullSyntaxContext

log = logging.getLogger("tabjump.syntax")

# Languages that have no notion of strings or comments.
PLAIN_LANGUAGES = ("", "text", "plain", "none")

QUOTES = ("\"", "'", "`")

Span = Tuple[int, int]


@lru_cache(maxsize=32)
def get_lexer(language: str) -> Optional[Lexer]:
    """Return a Pygments lexer for *language*, or None for plain text."""
    if not language or language.lower() in PLAIN_LANGUAGES:
        return None
    try:
        return get_lexer_by_name(language, stripnl=False, ensurenl=False)
    except ClassNotFound:
        log.debug("No lexer for language %r, using plain text", language)
        return None


def language_for_filename(path: str) -> str:
    """Pick a language alias for *path*, ``"text"`` when nothing matches."""
    try:
        lexer = get_lexer_for_filename(path)
    except ClassNotFound:
        return "text"
    return lexer.aliases[0] if lexer.aliases else "text"


def iter_tokens(text: str, language: str) -> Iterator[Tuple[int, _TokenType, str]]:
    """Yield ``(offset, token_type, value)`` for *text*.

    Offsets index straight into *text*; the lexer's newline/tab
    preprocessing is bypassed on purpose.
    """
    lexer = get_lexer(language)
    if lexer is None:
        return
    yield from lexer.get_tokens_unprocessed(text)


@lru_cache(maxsize=256)
def _delimits_strings(language: str, ch: str) -> bool:
    sample = f"{ch}x{ch}\n"
    for _, ttype, value in iter_tokens(sample, language):
        if ch in value and _is_string(ttype, value):
            return True
    return False


def _is_string(ttype: _TokenType, value: str) -> bool:
    if ttype in String.Affix:
        return False
    if ttype in String:
        return True
    # C/C++ `#include "header.h"` is lexed as a preprocessor token.
    if ttype in Comment.PreprocFile:
        return value.startswith('"')
    # JSON object keys come out as Name.Tag with their quotes attached.
    return ttype in Name and _is_quoted(value)


def _is_quoted(value: str) -> bool:
    return len(value) >= 2 and value[0] in QUOTES and value[0] == value[-1]


def _opener(value: str) -> Optional[str]:
    """The quote run a literal starting with *value* must end with."""
    if value[:3] in ('"""', "'''"):
        return value[:3]
    if value[0] in QUOTES:
        return value[0]
    return None


def _is_comment(ttype: _TokenType) -> bool:
    if ttype in Comment.Preproc or ttype in Comment.PreprocFile:
        return False
    return ttype in Comment


def _covering(spans: List[Span], starts: List[int], position: int) -> bool:
    # Last span starting strictly before position.
    idx = bisect_left(starts, position) - 1
    return idx >= 0 and position < spans[idx][1]


class PygmentsSyntaxContext:
    """Syntax context for one snapshot of a document."""

    def __init__(self, text: str, language: str):
        self.text = text
        self.language = language
        self._string_spans: Optional[List[Span]] = None
        self._comment_spans: List[Span] = []
        self._string_starts: List[int] = []
        self._comment_starts: List[int] = []

    def is_string_delimiter(self, ch: str) -> bool:
        return _delimits_strings(self.language, ch)

    def string_depth(self, position: int) -> int:
        self._scan()
        return 1 if _covering(self._string_spans, self._string_starts, position) else 0

    def in_comment(self, position: int) -> bool:
        self._scan()
        return _covering(self._comment_spans, self._comment_starts, position)

    def _scan(self) -> None:
        if self._string_spans is not None:
            return
        strings: List[Span] = []
        comments: List[Span] = []
        kind = None
        # Quote run that ends the literal being scanned, and whether it has.
        opener, closed = None, True
        for offset, ttype, value in iter_tokens(self.text, self.language):
            if not value:
                continue
            end = offset + len(value)
            if _is_string(ttype, value):
                if kind == "string" and strings[-1][1] == offset and not closed:
                    strings[-1] = (strings[-1][0], end)
                    closed = (opener is not None and ttype not in String.Escape
                              and value.endswith(opener))
                else:
                    strings.append((offset, end))
                    opener = _opener(value)
                    closed = (opener is not None and len(value) >= 2 * len(opener)
                              and value.endswith(opener))
                kind = "string"
            elif _is_comment(ttype):
                if kind == "comment" and comments[-1][1] == offset:
                    comments[-1] = (comments[-1][0], end)
                else:
                    comments.append((offset, end))
                kind = "comment"
            else:
                kind = None
        self._string_spans = strings
        self._comment_spans = comments
        self._string_starts = [s for s, _ in strings]
        self._comment_starts = [s for s, _ in comments]
        log.debug("Scanned %d chars of %s: %d string span(s), %d comment span(s)",
                  len(self.text), self.language, len(strings), len(comments))


def syntax_context_for(text: str, language: str):
    """Return the best available context for *language*."""
    if get_lexer(language) is None:
        return NullSyntaxContext()
    return PygmentsSyntaxContext(text, language)
