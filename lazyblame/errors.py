"""Error taxonomy shared by the parser, navigator, search, and link builders.

Every error is a ``LazyBlameError`` so the session can surface any of them as
status text. Only startup failures terminate the process (see ``cli``).
"""

from __future__ import annotations


class LazyBlameError(Exception):
    """Base class for recoverable, status-bar-reportable failures."""

    def status_text(self) -> str:
        return str(self)


class InvocationError(LazyBlameError):
    """git failed to start or exited non-zero; message is its stderr."""


class ParseError(LazyBlameError):
    """Blame output violated the porcelain grammar."""

    def __init__(self, message: str, line: str | None = None) -> None:
        super().__init__(message)
        self.line = line


class NavigationRejected(LazyBlameError):
    """Descend at a root commit, or Return with no history."""

    def __init__(self, reason: str, message: str) -> None:
        super().__init__(message)
        self.reason = reason


class UnsupportedRemote(LazyBlameError):
    def __init__(self, host: str) -> None:
        super().__init__(f"Cannot construct link for remote {host}")
        self.host = host


class PatternNotFound(LazyBlameError):
    def __init__(self, term: str) -> None:
        super().__init__(f"Pattern not found: {term}")
        self.term = term


class CommandError(LazyBlameError):
    """Unknown command, or a command that cannot apply to the selected line."""
