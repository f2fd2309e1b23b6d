"""Interactive blame session: key dispatch over navigator transitions.

The session owns the current ``NavigatorState`` and replaces it wholesale with
each transition result. UI-only concerns (scroll offset, status text, prompt
buffer) live in ``ViewState`` and never leak into navigator state.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from . import navigation
from .blame import SHORT_ID_LENGTH
from .commands import run_command
from .config import DEFAULT_PAGE_SIZE, DEFAULT_STYLE
from .errors import LazyBlameError
from .highlight import highlight_lines
from .navigation import BlameLoader, NavigatorState, Transition
from .remote import RemoteInfo
from .render import RenderContext, format_commit_details, scroll_start_for_cursor
from .ui_theme import DEFAULT_THEME, UITheme

logger = logging.getLogger(__name__)

SEARCH_PROMPT = "/"
COMMAND_PROMPT = ":"


@dataclass
class ViewState:
    start: int = 0
    status_message: str = ""
    status_is_error: bool = False
    prompt_prefix: str = ""
    prompt_text: str = ""
    dirty: bool = True
    quit_requested: bool = False


class BlameSession:
    def __init__(
        self,
        navigator: NavigatorState,
        load_blame: BlameLoader,
        resolve_remote: Callable[[], RemoteInfo],
        *,
        style: str = DEFAULT_STYLE,
        no_color: bool = False,
        page_size: int = DEFAULT_PAGE_SIZE,
        theme: UITheme = DEFAULT_THEME,
    ) -> None:
        self.navigator = navigator
        self.view = ViewState()
        self.load_blame = load_blame
        self.resolve_remote = resolve_remote
        self.style = style
        self.no_color = no_color
        self.page_size = max(1, page_size)
        self.theme = theme
        self.display_lines = self._highlight()

    def _highlight(self) -> list[str]:
        state = self.navigator
        return highlight_lines(state.blame.lines, state.filename, self.style, self.no_color)

    @property
    def half_page(self) -> int:
        return max(1, self.page_size // 2)

    @property
    def revision_label(self) -> str:
        return self.navigator.commit_id[:SHORT_ID_LENGTH] or "latest"

    def set_message(self, message: str, *, error: bool = False) -> None:
        self.view.status_message = message
        self.view.status_is_error = error
        self.view.dirty = True

    def request_quit(self) -> None:
        self.view.quit_requested = True

    def apply(self, transition: Transition) -> bool:
        """Adopt ``transition.state`` and surface its error, if any."""
        blame_changed = transition.state.blame is not self.navigator.blame
        self.navigator = transition.state
        if blame_changed:
            self.display_lines = self._highlight()
        if transition.error is not None:
            logger.debug("transition error: %s", transition.error)
            self.set_message(transition.error.status_text(), error=True)
        else:
            self.set_message("")
        return transition.ok

    def _open_prompt(self, prefix: str) -> None:
        self.view.prompt_prefix = prefix
        self.view.prompt_text = ""
        self.view.dirty = True

    def _close_prompt(self) -> None:
        self.view.prompt_prefix = ""
        self.view.prompt_text = ""
        self.view.dirty = True

    def _submit_prompt(self) -> None:
        prefix = self.view.prompt_prefix
        text = self.view.prompt_text
        self._close_prompt()
        if not text.strip():
            return
        if prefix == SEARCH_PROMPT:
            self.apply(navigation.search(self.navigator, text))
            return
        try:
            result = run_command(text, self.navigator, self.resolve_remote)
        except LazyBlameError as exc:
            self.set_message(exc.status_text(), error=True)
            return
        self.set_message(result)

    def _handle_prompt_key(self, key: str) -> None:
        if key == "ENTER":
            self._submit_prompt()
        elif key in {"ESC", "CTRL_C"}:
            self._close_prompt()
        elif key == "BACKSPACE":
            if not self.view.prompt_text:
                self._close_prompt()
                return
            self.view.prompt_text = self.view.prompt_text[:-1]
            self.view.dirty = True
        elif len(key) == 1 and key.isprintable():
            self.view.prompt_text += key
            self.view.dirty = True

    def handle_key(self, key: str) -> bool:
        """Dispatch one key token; return True when the session should end."""
        if self.view.prompt_prefix:
            self._handle_prompt_key(key)
            return self.view.quit_requested

        state = self.navigator
        if key in {"q", "CTRL_C"}:
            self.request_quit()
        elif key in {"j", "DOWN"}:
            self.apply(navigation.move_cursor(state, 1))
        elif key in {"k", "UP"}:
            self.apply(navigation.move_cursor(state, -1))
        elif key in {"J", "PAGE_DOWN"}:
            self.apply(navigation.move_cursor(state, self.page_size))
        elif key in {"K", "PAGE_UP"}:
            self.apply(navigation.move_cursor(state, -self.page_size))
        elif key == "CTRL_D":
            self.apply(navigation.move_cursor(state, self.half_page))
        elif key == "CTRL_U":
            self.apply(navigation.move_cursor(state, -self.half_page))
        elif key in {"g", "HOME"}:
            self.apply(navigation.select(state, 0))
        elif key in {"G", "END"}:
            self.apply(navigation.select(state, state.blame.last_index))
        elif key in {"h", "LEFT"}:
            self.apply(navigation.descend(state, self.load_blame))
        elif key in {"l", "RIGHT"}:
            self.apply(navigation.return_to_newer(state, self.load_blame))
        elif key == "r":
            self.apply(navigation.reload(state, self.load_blame))
        elif key == "n":
            if state.search.term:
                self.apply(navigation.search_next(state))
        elif key == "N":
            if state.search.term:
                self.apply(navigation.search_previous(state))
        elif key == "/":
            self._open_prompt(SEARCH_PROMPT)
        elif key == ":":
            self._open_prompt(COMMAND_PROMPT)
        elif key == "CTRL_L":
            self.view.dirty = True
        return self.view.quit_requested

    def render_context(self, width: int, height: int) -> RenderContext:
        """Scroll to keep the cursor visible and snapshot everything to draw."""
        state = self.navigator
        visible_rows = max(1, height - 1)
        self.view.start = scroll_start_for_cursor(state.cursor, self.view.start, visible_rows, len(state.blame))
        status = self.view.status_message or format_commit_details(state.selected_chunk)
        return RenderContext(
            blame=state.blame,
            display_lines=self.display_lines,
            cursor=state.cursor,
            start=self.view.start,
            width=width,
            height=height,
            revision_label=self.revision_label,
            can_descend=state.can_descend,
            can_return=state.can_return,
            search_term=state.search.term,
            status_message=status,
            status_is_error=self.view.status_is_error and bool(self.view.status_message),
            prompt_prefix=self.view.prompt_prefix,
            prompt_text=self.view.prompt_text,
            theme=self.theme,
        )
