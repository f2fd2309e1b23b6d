"""Rendering for the blame view.

Builds fully composed ANSI frames from a ``RenderContext`` without touching
session state. ``build_frame`` is pure; ``render_frame`` writes it to stdout.
"""

from __future__ import annotations

import os
import sys
import time
from dataclasses import dataclass
from datetime import datetime, timezone

from .ansi import clip_ansi_line, fit_ansi_line
from .blame import Blame, Chunk
from .ui_theme import DEFAULT_THEME, UITheme

SUMMARY_LIMIT = 45
AGE_WIDTH = 4
NOT_COMMITTED_LABEL = "(not committed)"
DATE_FORMAT = "%Y/%m/%d %H:%M UTC"

_HOUR = 3600
_DAY = _HOUR * 24
_MONTH = _DAY * 30
_YEAR = _MONTH * 12


def first_n(text: str, n: int, ellipsis: bool = False) -> str:
    if len(text) <= n:
        return text
    if ellipsis:
        return text[: n - 3] + "..."
    return text[:n]


def relative_age(timestamp: int, now: float | None = None) -> str:
    """Coarse age label: ``< 1h``, then hours, days, months, years."""
    if now is None:
        now = time.time()
    diff = int(now) - timestamp
    if diff < _HOUR:
        return "< 1h"
    if diff < _DAY:
        return f"{diff // _HOUR}h"
    if diff < _MONTH:
        return f"{diff // _DAY}d"
    if diff < _YEAR:
        return f"{diff // _MONTH}m"
    return f"{diff // _YEAR}y"


def format_timestamp(timestamp: int) -> str:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime(DATE_FORMAT)


def format_gutter(chunk: Chunk, line_index: int, number_width: int, now: float, theme: UITheme) -> str:
    """Commit id, summary, age, and 1-based line number for one row."""
    if chunk.is_committed:
        short_id = chunk.short_id
        summary = first_n(chunk.summary, SUMMARY_LIMIT, ellipsis=True)
        age = relative_age(chunk.author_time, now)
    else:
        short_id = ""
        summary = NOT_COMMITTED_LABEL
        age = ""
    reset = theme.reset
    return (
        f"{theme.commit_id}{short_id:<7}{reset} "
        f"{theme.summary}{summary:<{SUMMARY_LIMIT}}{reset} "
        f"{theme.age}{age:>{AGE_WIDTH}}{reset} "
        f"{theme.line_number}{line_index + 1:>{number_width}}{reset}"
    )


def format_commit_details(chunk: Chunk | None) -> str:
    """Plain status text describing the selected line's commit."""
    if chunk is None:
        return ""
    if not chunk.is_committed:
        return NOT_COMMITTED_LABEL
    details = f"Date {format_timestamp(chunk.author_time)} Author {chunk.author}"
    if len(chunk.summary) > SUMMARY_LIMIT:
        details += f" Message {chunk.summary}"
    return details


def build_status_line(left_text: str, width: int, right_text: str = "") -> str:
    usable = max(1, width - 1)
    if usable <= len(right_text):
        return right_text[-usable:]
    left_limit = max(0, usable - len(right_text) - 1)
    left = left_text[:left_limit]
    gap = " " * (usable - len(left) - len(right_text))
    return f"{left}{gap}{right_text}"


def scroll_start_for_cursor(cursor: int, start: int, visible_rows: int, total: int) -> int:
    """Smallest scroll change that keeps ``cursor`` inside the viewport."""
    visible_rows = max(1, visible_rows)
    if cursor < start:
        start = cursor
    elif cursor >= start + visible_rows:
        start = cursor - visible_rows + 1
    max_start = max(0, total - visible_rows)
    return max(0, min(start, max_start))


@dataclass
class RenderContext:
    blame: Blame
    display_lines: list[str]
    cursor: int
    start: int
    width: int
    height: int
    revision_label: str = "HEAD"
    can_descend: bool = False
    can_return: bool = False
    search_term: str = ""
    status_message: str = ""
    status_is_error: bool = False
    prompt_prefix: str = ""
    prompt_text: str = ""
    theme: UITheme = DEFAULT_THEME
    now: float | None = None


def format_row(blame: Blame, index: int, text: str, now: float, theme: UITheme) -> str:
    number_width = len(str(max(1, len(blame))))
    gutter = format_gutter(blame.line_chunks[index], index, number_width, now, theme)
    return f"{gutter} {theme.divider}│{theme.reset} {text}"


def build_rows(blame: Blame, display_lines: list[str], now: float, theme: UITheme) -> list[str]:
    """One gutter-plus-code row per blamed line, without clipping."""
    return [format_row(blame, index, text, now, theme) for index, text in enumerate(display_lines)]


def _navigation_hint(ctx: RenderContext) -> str:
    back = "h" if ctx.can_descend else "-"
    forward = "l" if ctx.can_return else "-"
    hint = f"{ctx.revision_label} [{back}{forward}]"
    if ctx.search_term:
        hint += f" /{ctx.search_term}"
    return hint


def build_frame(ctx: RenderContext) -> str:
    theme = ctx.theme
    now = time.time() if ctx.now is None else ctx.now
    visible_rows = max(1, ctx.height - 1)
    out: list[str] = ["\033[H\033[J"]

    for row in range(visible_rows):
        index = ctx.start + row
        if index < len(ctx.display_lines):
            text = ctx.display_lines[index]
            if index == ctx.cursor:
                # Keep the selection style active across internal resets.
                text = theme.selected + text.replace("\033[0m", "\033[0m" + theme.selected)
            line = clip_ansi_line(format_row(ctx.blame, index, text, now, theme), ctx.width)
            out.append(line)
            out.append("\033[0m")
        out.append("\r\n")

    if ctx.prompt_prefix:
        prompt = f"{theme.prompt}{ctx.prompt_prefix}{theme.reset}{ctx.prompt_text}"
        out.append(clip_ansi_line(prompt, max(1, ctx.width - 1)))
        out.append("\033[0m")
    else:
        status = build_status_line(ctx.status_message, ctx.width, _navigation_hint(ctx))
        style = theme.status_error if ctx.status_is_error else theme.status_label
        out.append(style + fit_ansi_line(status, max(1, ctx.width - 1)) + "\033[0m")
    return "".join(out)


def render_frame(ctx: RenderContext) -> None:
    os.write(sys.stdout.fileno(), build_frame(ctx).encode("utf-8", errors="replace"))


def render_plain(blame: Blame, display_lines: list[str], theme: UITheme, now: float | None = None) -> str:
    """Whole annotated file as text, for non-interactive output."""
    if now is None:
        now = time.time()
    rows = build_rows(blame, display_lines, now, theme)
    # Highlighted code may leave a style open at the end of a row.
    return "".join(row.rstrip() + theme.reset + "\n" for row in rows)


__all__ = [
    "RenderContext",
    "build_frame",
    "build_rows",
    "build_status_line",
    "first_n",
    "format_commit_details",
    "format_gutter",
    "format_row",
    "relative_age",
    "render_frame",
    "render_plain",
    "scroll_start_for_cursor",
]
