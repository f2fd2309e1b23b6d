"""``:`` command handling: permalinks for the selected line or its commit."""

from __future__ import annotations

from collections.abc import Callable

from .errors import CommandError
from .navigation import NavigatorState
from .remote import RemoteInfo, build_commit_link, build_line_link

LINE_LINK_COMMANDS = frozenset({"line-link", "ll"})
COMMIT_LINK_COMMANDS = frozenset({"commit-link", "cl"})


def run_command(command: str, state: NavigatorState, resolve_remote: Callable[[], RemoteInfo]) -> str:
    """Execute ``command`` against the selected line and return its output.

    ``resolve_remote`` is only called once the command and the selected
    line are known to be linkable.
    """
    name = command.strip()
    if name not in LINE_LINK_COMMANDS and name not in COMMIT_LINK_COMMANDS:
        raise CommandError(f"Unknown command: {name}")

    chunk = state.selected_chunk
    if chunk is None:
        raise CommandError("There is no line selected.")
    if not chunk.is_committed:
        raise CommandError("Cannot produce a remote link for the selected line because it's not committed")

    remote = resolve_remote()
    if name in LINE_LINK_COMMANDS:
        return build_line_link(remote, chunk.commit_id, chunk.filename, state.cursor + 1)
    return build_commit_link(remote, chunk.commit_id)
