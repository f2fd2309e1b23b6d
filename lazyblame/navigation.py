"""History navigation state and its transitions.

``NavigatorState`` is an immutable value. Every operation here takes a state
and returns a ``Transition`` holding the next state plus an optional error,
so callers never observe a half-applied navigation. Re-parsing is delegated
to an injected ``BlameLoader``; this module has no UI or subprocess concerns.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace

from .blame import Blame, Chunk
from .errors import LazyBlameError, NavigationRejected, PatternNotFound
from .search import SearchState, find_match

logger = logging.getLogger(__name__)

# (commit_id, filename) -> Blame; raises InvocationError or ParseError.
BlameLoader = Callable[[str, str], Blame]


@dataclass(frozen=True)
class HistoryItem:
    commit_id: str
    cursor_position: int
    filename: str


@dataclass(frozen=True)
class NavigatorState:
    blame: Blame
    filename: str
    commit_id: str = ""
    cursor: int = 0
    history: tuple[HistoryItem, ...] = ()
    search: SearchState = field(default_factory=SearchState)

    @property
    def selected_chunk(self) -> Chunk | None:
        return self.blame.chunk_at(self.cursor)

    @property
    def can_descend(self) -> bool:
        chunk = self.selected_chunk
        return chunk is not None and not chunk.is_root

    @property
    def can_return(self) -> bool:
        return bool(self.history)


@dataclass(frozen=True)
class Transition:
    state: NavigatorState
    error: LazyBlameError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _clamp(index: int, blame: Blame) -> int:
    return max(0, min(index, blame.last_index))


def select(state: NavigatorState, index: int) -> Transition:
    return Transition(replace(state, cursor=_clamp(index, state.blame)))


def move_cursor(state: NavigatorState, delta: int) -> Transition:
    return select(state, state.cursor + delta)


def descend(state: NavigatorState, load_blame: BlameLoader) -> Transition:
    """Show the revision before the one that last touched the selected line."""
    chunk = state.selected_chunk
    if chunk is None:
        return Transition(state, NavigationRejected("no line", "There is no line to go back from."))
    if chunk.is_root:
        return Transition(
            state,
            NavigationRejected(
                "root commit",
                f"Can't go back because {chunk.short_id} is the commit that added this file.",
            ),
        )

    try:
        blame = load_blame(chunk.previous_commit_id, chunk.previous_filename)
    except LazyBlameError as exc:
        logger.info("descend to %s failed: %s", chunk.previous_commit_id, exc)
        return Transition(state, exc)

    # The chunk names the file as of its own commit; a later rename would make
    # that path unresolvable at the newer revision.
    item = HistoryItem(commit_id=state.commit_id, cursor_position=state.cursor, filename=state.filename)
    logger.debug("descend %s -> %s (%s)", state.commit_id or "HEAD", chunk.previous_commit_id, chunk.previous_filename)
    return Transition(
        replace(
            state,
            blame=blame,
            filename=chunk.previous_filename,
            commit_id=chunk.previous_commit_id,
            cursor=_clamp(state.cursor, blame),
            history=(*state.history, item),
        )
    )


def return_to_newer(state: NavigatorState, load_blame: BlameLoader) -> Transition:
    """Undo the most recent descend by re-parsing the revision it came from.

    The history item is consumed even when re-parsing fails; the rest of the
    state then stays where it last succeeded.
    """
    if not state.history:
        return Transition(
            state,
            NavigationRejected("already latest", "You are on the latest revision of this file."),
        )

    item = state.history[-1]
    popped = replace(state, history=state.history[:-1])
    try:
        blame = load_blame(item.commit_id, item.filename)
    except LazyBlameError as exc:
        logger.info("return to %s failed: %s", item.commit_id or "HEAD", exc)
        return Transition(popped, exc)

    logger.debug("return %s -> %s", state.commit_id, item.commit_id or "HEAD")
    return Transition(
        replace(
            popped,
            blame=blame,
            filename=item.filename,
            commit_id=item.commit_id,
            cursor=item.cursor_position,
        )
    )


def reload(state: NavigatorState, load_blame: BlameLoader) -> Transition:
    try:
        blame = load_blame(state.commit_id, state.filename)
    except LazyBlameError as exc:
        return Transition(state, exc)
    return Transition(replace(state, blame=blame, cursor=_clamp(state.cursor, blame)))


def _run_search(state: NavigatorState, term: str, reverse: bool) -> Transition:
    anchor = state.cursor
    searched = replace(state, search=SearchState(term=term, last_anchor=anchor))
    found = find_match(state.blame.lines, term, anchor, reverse)
    if found is None:
        return Transition(searched, PatternNotFound(term))
    return Transition(replace(searched, cursor=found))


def search(state: NavigatorState, term: str, reverse: bool = False) -> Transition:
    """Store ``term`` and jump to its next occurrence after the cursor."""
    return _run_search(state, term.strip(), reverse)


def search_next(state: NavigatorState) -> Transition:
    if not state.search.term:
        return Transition(state)
    return _run_search(state, state.search.term, reverse=False)


def search_previous(state: NavigatorState) -> Transition:
    if not state.search.term:
        return Transition(state)
    return _run_search(state, state.search.term, reverse=True)
