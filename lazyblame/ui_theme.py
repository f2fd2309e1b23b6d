"""UI theme definitions and selection helpers.

Themes are UI-only ANSI palettes for the blame gutter and status bar. Syntax
highlighting style for source code remains a separate setting.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class UITheme:
    """Semantic ANSI palette used by renderers."""

    name: str
    reset: str
    commit_id: str
    summary: str
    age: str
    line_number: str
    divider: str
    selected: str
    status_label: str
    status_error: str
    prompt: str


DEFAULT_THEME = UITheme(
    name="default",
    reset="\033[0m",
    commit_id="\033[33m",
    summary="",
    age="\033[36m",
    line_number="\033[2m",
    divider="\033[2m",
    selected="\033[1;97;40m",
    status_label="\033[1;97;44m",
    status_error="\033[97;41m",
    prompt="\033[1m",
)

OCEAN_THEME = UITheme(
    name="ocean",
    reset="\033[0m",
    commit_id="\033[38;5;117m",
    summary="\033[38;5;252m",
    age="\033[38;5;73m",
    line_number="\033[2;38;5;110m",
    divider="\033[2;38;5;31m",
    selected="\033[1;38;5;231;48;5;24m",
    status_label="\033[1;38;5;231;48;5;31m",
    status_error="\033[38;5;231;48;5;124m",
    prompt="\033[1;38;5;45m",
)

PLAIN_THEME = UITheme(
    name="plain",
    reset="",
    commit_id="",
    summary="",
    age="",
    line_number="",
    divider="",
    selected="\033[7m",
    status_label="",
    status_error="\033[7m",
    prompt="",
)

_THEMES: dict[str, UITheme] = {
    DEFAULT_THEME.name: DEFAULT_THEME,
    OCEAN_THEME.name: OCEAN_THEME,
}


def available_theme_names() -> tuple[str, ...]:
    """Return selectable non-plain theme names."""
    return tuple(sorted(_THEMES.keys()))


def resolve_theme(name: str | None, *, no_color: bool = False) -> UITheme:
    """Return concrete theme for requested name and color mode.

    Unknown or empty names fall back to the default theme.
    """
    if no_color:
        return PLAIN_THEME
    candidate = (name or "").strip().lower()
    return _THEMES.get(candidate, DEFAULT_THEME)
