"""ANSI-aware text measurement and clipping.

Escape sequences are preserved verbatim and never count toward width, so
colored gutter cells and highlighted code line up in terminal columns.
"""

from __future__ import annotations

import re
import unicodedata

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")
TAB_STOP = 8


def char_display_width(ch: str, col: int) -> int:
    """Columns taken by ``ch`` when drawn at visual column ``col``."""
    if ch == "\t":
        return TAB_STOP - (col % TAB_STOP)
    if unicodedata.combining(ch):
        return 0
    return 2 if unicodedata.east_asian_width(ch) in {"W", "F"} else 1


def _segments(text: str):
    """Yield ``(is_escape, piece)`` pairs in order."""
    pos = 0
    for match in ANSI_ESCAPE_RE.finditer(text):
        if match.start() > pos:
            yield False, text[pos : match.start()]
        yield True, match.group(0)
        pos = match.end()
    if pos < len(text):
        yield False, text[pos:]


def display_width(text: str) -> int:
    col = 0
    for is_escape, piece in _segments(text):
        if is_escape:
            continue
        for ch in piece:
            col += char_display_width(ch, col)
    return col


def clip_ansi_line(text: str, max_cols: int) -> str:
    """Keep at most ``max_cols`` columns of visible text.

    Escapes before the cut are kept so styling stays balanced; tabs become
    spaces so the cut lands on a cell boundary.
    """
    if max_cols <= 0:
        return ""
    out: list[str] = []
    col = 0
    for is_escape, piece in _segments(text):
        if is_escape:
            out.append(piece)
            continue
        for ch in piece:
            width = char_display_width(ch, col)
            if col + width > max_cols:
                return "".join(out)
            out.append(" " * width if ch == "\t" else ch)
            col += width
    return "".join(out)


def fit_ansi_line(text: str, width: int) -> str:
    """Clip or right-pad ``text`` to exactly ``width`` display columns."""
    clipped = clip_ansi_line(text, width)
    return clipped + " " * max(0, width - display_width(clipped))
