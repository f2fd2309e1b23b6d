"""Read-only JSON config helpers.

Holds viewer preferences: syntax style, UI theme, git binary, page size, and
an optional log file. All access is defensive: malformed or missing config
falls back to defaults. Nothing is ever written back.
"""

from __future__ import annotations

import json
from pathlib import Path

from platformdirs import user_config_dir

APP_NAME = "lazyblame"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
DEFAULT_STYLE = "monokai"
DEFAULT_PAGE_SIZE = 10


def load_config() -> dict[str, object]:
    """Load the JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def _load_nonempty_str(key: str) -> str | None:
    value = load_config().get(key)
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped if stripped else None


def load_style() -> str:
    """Pygments style name for source highlighting."""
    return _load_nonempty_str("style") or DEFAULT_STYLE


def load_theme_name() -> str | None:
    return _load_nonempty_str("theme")


def load_git_binary() -> str | None:
    return _load_nonempty_str("git_binary")


def load_log_file() -> Path | None:
    value = _load_nonempty_str("log_file")
    return Path(value).expanduser() if value else None


def load_page_size() -> int:
    """Lines moved by a page jump.

    Booleans and non-positive integers are treated as invalid.
    """
    value = load_config().get("page_size")
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        return DEFAULT_PAGE_SIZE
    return value
