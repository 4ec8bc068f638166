"""
indentation.py

The editor's own Tab action, used when no extension claims the key.

Inside a line's leading whitespace Tab re-indents the line to match the
previous non-blank line (one level deeper after a block opener).  Anywhere
else it pads with spaces to the next tab stop.
"""
from __future__ import annotations

from typing import Iterable, Tuple

TAB_WIDTH = 4
BLOCK_OPENERS = (":", "{", "(", "[")


def indent_width(line: str, tab_width: int = TAB_WIDTH) -> int:
    """Visual width of the leading whitespace of *line*."""
    lead = line[: len(line) - len(line.lstrip(" \t"))]
    return len(lead.expandtabs(tab_width))


def next_tab_stop(column: int, tab_width: int = TAB_WIDTH) -> int:
    return (column // tab_width + 1) * tab_width


def desired_indent(previous_lines: Iterable[str], tab_width: int = TAB_WIDTH) -> int:
    """Indentation implied by the nearest non-blank line in *previous_lines*.

    *previous_lines* is read from the closest line upwards.
    """
    for line in previous_lines:
        stripped = line.rstrip()
        if not stripped:
            continue
        width = indent_width(line, tab_width)
        if stripped.endswith(BLOCK_OPENERS):
            width += tab_width
        return width
    return 0


def plan_tab(
    line: str,
    column: int,
    previous_lines: Iterable[str] = (),
    tab_width: int = TAB_WIDTH,
) -> Tuple[str, int]:
    """Work out what Tab does to *line* with the cursor at *column*.

    Returns the new line text and the new cursor column.
    """
    lead_len = len(line) - len(line.lstrip(" \t"))
    if column <= lead_len:
        current = indent_width(line, tab_width)
        wanted = desired_indent(previous_lines, tab_width)
        if current < wanted:
            return " " * wanted + line[lead_len:], wanted
        if column < lead_len:
            # Already indented enough; just move to the first non-blank.
            return line, lead_len
    visual = len(line[:column].expandtabs(tab_width))
    pad = " " * (next_tab_stop(visual, tab_width) - visual)
    return line[:column] + pad + line[column:], column + len(pad)
