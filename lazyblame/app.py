"""Runtime wiring for the interactive viewer and the non-interactive printer.

The loop is single-threaded: it renders when dirty, reads one key, and lets
the session run at most one blocking git invocation per key. SIGINT and
SIGTERM kill any in-flight git process and end the loop.
"""

from __future__ import annotations

import logging
import os
import signal
import sys
from contextlib import contextmanager

from .git import GitRunner
from .highlight import highlight_lines
from .input import read_key
from .navigation import NavigatorState
from .render import render_frame, render_plain
from .session import BlameSession
from .terminal import TerminalController
from .ui_theme import UITheme

logger = logging.getLogger(__name__)

KEY_POLL_MS = 200


@contextmanager
def _cancel_on_signals(runner: GitRunner, session: BlameSession):
    def handler(signum, _frame) -> None:
        logger.info("received signal %s, stopping", signum)
        runner.cancel()
        session.request_quit()

    previous = {sig: signal.signal(sig, handler) for sig in (signal.SIGINT, signal.SIGTERM)}
    try:
        yield
    finally:
        for sig, old_handler in previous.items():
            signal.signal(sig, old_handler)


def run_main_loop(session: BlameSession, terminal: TerminalController, stdin_fd: int) -> None:
    last_size: tuple[int, int] | None = None
    with terminal.raw_mode():
        while not session.view.quit_requested:
            size = terminal.screen_size()
            if size != last_size:
                last_size = size
                session.view.dirty = True
            if session.view.dirty:
                render_frame(session.render_context(*size))
                session.view.dirty = False

            key = read_key(stdin_fd, timeout_ms=KEY_POLL_MS)
            if not key:
                continue
            if session.handle_key(key):
                break


def run_blame_viewer(
    runner: GitRunner,
    initial: NavigatorState,
    *,
    style: str,
    no_color: bool,
    page_size: int,
    theme: UITheme,
) -> None:
    session = BlameSession(
        initial,
        runner.blame,
        runner.remote_info,
        style=style,
        no_color=no_color,
        page_size=page_size,
        theme=theme,
    )
    stdin_fd = sys.stdin.fileno()
    terminal = TerminalController(stdin_fd, sys.stdout.fileno())
    with _cancel_on_signals(runner, session):
        run_main_loop(session, terminal, stdin_fd)


def print_blame(initial: NavigatorState, *, style: str, no_color: bool, theme: UITheme) -> None:
    display_lines = highlight_lines(initial.blame.lines, initial.filename, style, no_color)
    sys.stdout.write(render_plain(initial.blame, display_lines, theme))
    sys.stdout.flush()


def stdout_is_interactive() -> bool:
    return os.isatty(sys.stdin.fileno()) and os.isatty(sys.stdout.fileno())
