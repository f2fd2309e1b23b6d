from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass


@dataclass(frozen=True)
class SearchState:
    term: str = ""
    last_anchor: int | None = None


def find_match(lines: Sequence[str], term: str, anchor: int, reverse: bool = False) -> int | None:
    """Return the next line index containing ``term``, wrapping around.

    Scanning starts one line after (or before, when ``reverse``) ``anchor`` and
    never revisits the anchor itself, so at most ``len(lines) - 1`` lines are
    tested. Matching is a case-sensitive substring test.
    """
    line_count = len(lines)
    if not term or line_count == 0:
        return None
    step = -1 if reverse else 1
    for offset in range(1, line_count):
        candidate = (anchor + step * offset) % line_count
        if term in lines[candidate]:
            return candidate
    return None
