"""git subprocess invocation.

``GitRunner`` runs one git command at a time against a repository root and
remembers the in-flight process so a signal handler can kill it. Blame output
is streamed straight into the porcelain parser.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path

from .blame import Blame, parse_porcelain
from .errors import InvocationError, LazyBlameError
from .remote import RemoteInfo, parse_remote_url

logger = logging.getLogger(__name__)

# Non-ASCII paths come back verbatim instead of as octal escapes.
GIT_CONFIG_ARGS = ("-c", "core.quotePath=false")


def find_git_binary(configured: str | None = None) -> str | None:
    """Resolve the git executable, preferring an explicitly configured one."""
    if configured:
        return shutil.which(configured)
    return shutil.which("git")


def _run(cmd: list[str]) -> str:
    try:
        proc = subprocess.run(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
        )
    except OSError as exc:
        raise InvocationError(f"failed to run git: {exc}") from exc
    if proc.returncode != 0:
        raise InvocationError(f"error while executing git command: {proc.stderr.strip()}")
    return proc.stdout


def resolve_repo_root(git_bin: str, path: Path) -> Path:
    """Return the top-level directory of the repository containing ``path``."""
    return Path(_run([git_bin, "-C", str(path), "rev-parse", "--show-toplevel"]).strip())


class GitRunner:
    def __init__(self, git_bin: str, repo_root: Path) -> None:
        self.git_bin = git_bin
        self.repo_root = repo_root
        self.cancelled = False
        self._active: subprocess.Popen[str] | None = None
        self._remote: RemoteInfo | None = None

    def _command(self, *args: str) -> list[str]:
        return [self.git_bin, *GIT_CONFIG_ARGS, "-C", str(self.repo_root), *args]

    def cancel(self) -> None:
        """Kill the in-flight git process, if any, and refuse further work."""
        self.cancelled = True
        proc = self._active
        if proc is not None and proc.poll() is None:
            logger.info("killing in-flight git process %s", proc.pid)
            proc.kill()

    def blame(self, commit_id: str, filename: str) -> Blame:
        """Run ``git blame --porcelain`` and parse its output.

        ``commit_id`` may be empty to blame the working tree version.
        """
        if self.cancelled:
            raise InvocationError("git blame cancelled")
        cmd = self._command("blame", "--porcelain", filename)
        if commit_id:
            cmd.append(commit_id)
        logger.debug("running %s", cmd)

        try:
            proc = subprocess.Popen(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as exc:
            raise InvocationError(f"failed to run git: {exc}") from exc

        self._active = proc
        blame: Blame | None = None
        parse_error: LazyBlameError | None = None
        killed = False
        stderr_text = ""
        try:
            assert proc.stdout is not None
            try:
                blame = parse_porcelain(proc.stdout)
            except LazyBlameError as exc:
                parse_error = exc
                if proc.poll() is None:
                    proc.kill()
                    killed = True
        finally:
            _stdout_unused, stderr_text = proc.communicate()
            self._active = None

        if self.cancelled:
            raise InvocationError("git blame cancelled")
        if proc.returncode != 0 and not killed:
            raise InvocationError(f"git blame command failed: {stderr_text.strip()}")
        if parse_error is not None:
            logger.warning("unparsable blame output for %s@%s: %s", filename, commit_id or "HEAD", parse_error)
            raise parse_error
        assert blame is not None
        return blame

    def remote_info(self) -> RemoteInfo:
        """Resolve and memoize the default remote's host and repository."""
        if self._remote is None:
            raw = _run(self._command("ls-remote", "--get-url")).strip()
            self._remote = parse_remote_url(raw)
            logger.debug("resolved remote %s", self._remote)
        return self._remote
