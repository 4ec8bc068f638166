"""
jump_over.py

Decides whether pressing Tab should step the cursor over the character to
its right (a closing bracket, quote or punctuation mark) instead of running
the key's ordinary action.

The decision never touches the buffer.  String/comment knowledge comes from
a ``SyntaxContext`` supplied by the caller, so the evaluator can be driven by
a live editor or by a stub in tests.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Optional, Protocol, Tuple

log = logging.getLogger("tabjump.jump")

# Closers that are always stepped over, in match order.
DEFAULT_JUMP_CHARS = "])}>:;`'"
# Quotes that only get stepped over when they look like a closing quote.
DEFAULT_QUOTE_CHARS = "'\""


class SyntaxContext(Protocol):
    """What the evaluator needs to know about the active language mode."""

    def is_string_delimiter(self, ch: str) -> bool:
        ...

    def string_depth(self, position: int) -> int:
        ...

    def in_comment(self, position: int) -> bool:
        ...


class NullSyntaxContext:
    """Context for modes without strings or comments (plain text)."""

    def is_string_delimiter(self, ch: str) -> bool:
        return False

    def string_depth(self, position: int) -> int:
        return 0

    def in_comment(self, position: int) -> bool:
        return False


def _as_chars(value: Iterable[str], field: str) -> Tuple[str, ...]:
    chars = []
    for ch in value:
        if not isinstance(ch, str) or len(ch) != 1:
            raise ValueError(f"{field} entries must be single characters, got {ch!r}")
        if ch not in chars:
            chars.append(ch)
    return tuple(chars)


class JumpConfig:
    """Ordered character sets consulted by :func:`should_jump_over`.

    ``jump_chars`` are stepped over unconditionally.  ``quote_chars`` go
    through the string/comment check first.  A character listed in both is
    treated as unconditional, because that check runs first.
    """

    def __init__(
        self,
        jump_chars: Iterable[str] = DEFAULT_JUMP_CHARS,
        quote_chars: Iterable[str] = DEFAULT_QUOTE_CHARS,
    ):
        self.jump_chars = _as_chars(jump_chars, "jump_chars")
        self.quote_chars = _as_chars(quote_chars, "quote_chars")

    @classmethod
    def from_settings(cls, settings: Dict[str, Any]) -> "JumpConfig":
        """Build a config from extension settings (strings or lists)."""
        return cls(
            settings.get("jump_chars", DEFAULT_JUMP_CHARS),
            settings.get("quote_chars", DEFAULT_QUOTE_CHARS),
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, JumpConfig):
            return NotImplemented
        return (self.jump_chars, self.quote_chars) == (other.jump_chars, other.quote_chars)

    def __repr__(self) -> str:
        return (f"JumpConfig(jump_chars={''.join(self.jump_chars)!r}, "
                f"quote_chars={''.join(self.quote_chars)!r})")


DEFAULT_CONFIG = JumpConfig()


def should_jump_over(
    ch: Optional[str],
    position: int,
    context: Optional[SyntaxContext] = None,
    config: JumpConfig = DEFAULT_CONFIG,
) -> bool:
    """Return True if Tab should move the cursor past *ch*.

    *ch* is the character right after the cursor (``None`` or ``""`` at the
    end of the buffer) and *position* is the cursor offset.  False means the
    caller should hand the key press to the next handler.
    """
    if not ch:
        return False
    if ch in config.jump_chars:
        return True
    if ch in config.quote_chars:
        return _jump_over_quote(ch, position, context)
    return False


def _jump_over_quote(ch: str, position: int, context: Optional[SyntaxContext]) -> bool:
    # Jump unless this looks like the opening quote of a new string.
    if context is None:
        return True
    try:
        if not context.is_string_delimiter(ch):
            return True
        if context.string_depth(position) > 0:
            return True
        # Opening and closing quotes can't be told apart inside comments.
        return bool(context.in_comment(position))
    except Exception:
        log.debug("Syntax context failed at %d, treating %r as plain text",
                  position, ch, exc_info=True)
        return True
