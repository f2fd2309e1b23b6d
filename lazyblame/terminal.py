"""Terminal mode and geometry for the interactive blame view.

Rows are clipped to the screen width by the renderer, so line wrapping is
switched off while the alternate screen is active.
"""

from __future__ import annotations

import contextlib
import os
import shutil
import termios
import tty

ENTER_SCREEN = b"\x1b[?1049h\x1b[?25l\x1b[?7l"
LEAVE_SCREEN = b"\x1b[?7h\x1b[?25h\x1b[?1049l"
FALLBACK_SIZE = (80, 24)
_LFLAG = 3
_CC = 6
_DISABLED_CHAR = b"\x00"


class TerminalController:
    """Raw-mode lifecycle plus the current screen size."""

    def __init__(self, stdin_fd: int, stdout_fd: int) -> None:
        self.stdin_fd = stdin_fd
        self.stdout_fd = stdout_fd
        self._saved_tty_state = termios.tcgetattr(stdin_fd)
        self._active = False

    def screen_size(self) -> tuple[int, int]:
        """Return ``(columns, lines)`` of the controlling terminal."""
        size = shutil.get_terminal_size(FALLBACK_SIZE)
        return size.columns, size.lines

    def enter(self) -> None:
        tty.setraw(self.stdin_fd, termios.TCSAFLUSH)
        # Ctrl-C must still raise SIGINT so a running git blame can be killed.
        attrs = termios.tcgetattr(self.stdin_fd)
        attrs[_LFLAG] |= termios.ISIG
        # Only Ctrl-C signals; suspend and quit stay disabled.
        attrs[_CC][termios.VSUSP] = _DISABLED_CHAR
        attrs[_CC][termios.VQUIT] = _DISABLED_CHAR
        termios.tcsetattr(self.stdin_fd, termios.TCSANOW, attrs)
        os.write(self.stdout_fd, ENTER_SCREEN)
        self._active = True

    def leave(self) -> None:
        if not self._active:
            return
        self._active = False
        os.write(self.stdout_fd, LEAVE_SCREEN)
        termios.tcsetattr(self.stdin_fd, termios.TCSAFLUSH, self._saved_tty_state)

    @contextlib.contextmanager
    def raw_mode(self):
        try:
            self.enter()
            yield self
        finally:
            self.leave()
