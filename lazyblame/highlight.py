"""Source sanitization and syntax highlighting for blamed lines.

Lines are highlighted together so multi-line constructs (strings, comments)
color correctly, then split back into one rendered string per blame line.
Terminal control bytes are neutralized before anything reaches the screen.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from pathlib import PurePosixPath

from pygments import highlight as pygments_highlight
from pygments.formatters import Terminal256Formatter
from pygments.lexers import TextLexer, get_lexer_for_filename
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

from .config import DEFAULT_STYLE

_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")
TAB_REPLACEMENT = "    "

_FORMATTERS: dict[str, Terminal256Formatter] = {}


def _escape_control(match: re.Match[str]) -> str:
    return f"\\x{ord(match.group(0)):02x}"


def sanitize_terminal_text(source: str) -> str:
    """Render C0, DEL and C1 control bytes as visible ``\\xNN`` escapes.

    Tab, LF and CR are left alone; ``display_text`` handles them.
    """
    return _CONTROL_RE.sub(_escape_control, source)


def display_text(line: str) -> str:
    return sanitize_terminal_text(line.replace("\t", TAB_REPLACEMENT)).replace("\r", "")


def _formatter_for_style(style: str) -> Terminal256Formatter:
    formatter = _FORMATTERS.get(style)
    if formatter is not None:
        return formatter
    resolved = style
    try:
        get_style_by_name(style)
    except ClassNotFound:
        resolved = DEFAULT_STYLE
    formatter = Terminal256Formatter(style=resolved)
    _FORMATTERS[style] = formatter
    return formatter


def _lexer_for(filename: str, source: str):
    name = PurePosixPath(filename).name
    try:
        return get_lexer_for_filename(name, source, stripnl=False)
    except ClassNotFound:
        return TextLexer(stripnl=False)


def highlight_lines(
    lines: Sequence[str],
    filename: str,
    style: str = DEFAULT_STYLE,
    no_color: bool = False,
) -> list[str]:
    """Return display-ready lines, colorized with pygments unless ``no_color``.

    Falls back to the plain sanitized lines when highlighting would change
    the line count.
    """
    plain = [display_text(line) for line in lines]
    if no_color or not plain:
        return plain

    source = "\n".join(plain) + "\n"
    rendered = pygments_highlight(source, _lexer_for(filename, source), _formatter_for_style(style))
    rendered_lines = rendered.splitlines()
    if len(rendered_lines) != len(plain):
        return plain
    return rendered_lines
