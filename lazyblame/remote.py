"""Remote address parsing and permalink construction.

Only GitHub permalinks are supported; any other host raises
``UnsupportedRemote``. Nothing here touches git or the filesystem.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from urllib.parse import quote, urlsplit

from .errors import UnsupportedRemote

GITHUB_HOST = "github.com"

_SCP_STYLE_RE = re.compile(r"\A(?:[^@/:]+@)?([^/:]+):(.+)\Z")


@dataclass(frozen=True)
class RemoteInfo:
    host: str
    repo: str


def parse_remote_url(raw: str) -> RemoteInfo:
    """Split ``user@host:owner/repo[.git]`` or a URL into host and repo path."""
    raw = raw.strip()
    if raw.endswith(".git"):
        raw = raw[: -len(".git")]

    if "://" in raw:
        parts = urlsplit(raw)
        host = parts.hostname or ""
        repo = parts.path
    else:
        match = _SCP_STYLE_RE.match(raw)
        if match is None:
            raise UnsupportedRemote(raw or "(none)")
        host, repo = match.group(1), match.group(2)

    host = host.strip("/")
    repo = repo.strip("/")
    if not host or not repo:
        raise UnsupportedRemote(raw or "(none)")
    return RemoteInfo(host=host, repo=repo)


def _require_github(remote: RemoteInfo) -> None:
    if remote.host != GITHUB_HOST:
        raise UnsupportedRemote(remote.host)


def build_line_link(remote: RemoteInfo, commit_id: str, path: str, line_number: int) -> str:
    """Permalink to one line; ``line_number`` is 1-based."""
    _require_github(remote)
    return f"https://{GITHUB_HOST}/{remote.repo}/blob/{commit_id}/{quote(path)}#L{line_number}"


def build_commit_link(remote: RemoteInfo, commit_id: str) -> str:
    _require_github(remote)
    return f"https://{GITHUB_HOST}/{remote.repo}/commit/{commit_id}"
