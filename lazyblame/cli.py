"""Command-line front door for lazyblame.

Parses CLI options, validates the target file, and locates git and the
repository. Any failure here is fatal and exits non-zero; once the initial
blame loads, control passes to the interactive runtime.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from . import __version__
from .app import print_blame, run_blame_viewer, stdout_is_interactive
from .config import load_git_binary, load_log_file, load_page_size, load_style, load_theme_name
from .errors import LazyBlameError
from .git import GitRunner, find_git_binary, resolve_repo_root
from .navigation import NavigatorState
from .ui_theme import available_theme_names, resolve_theme

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _configure_logging(log_file: Path | None) -> None:
    """Route logs to ``log_file``; stderr belongs to the terminal UI."""
    if log_file is None:
        return
    logging.basicConfig(filename=str(log_file), level=logging.DEBUG, format=LOG_FORMAT)


def _repo_relative(path: Path, repo_root: Path) -> str:
    try:
        return path.relative_to(repo_root.resolve()).as_posix()
    except ValueError:
        return str(path)


def main() -> None:
    """Parse CLI arguments and open the blame view for one file."""
    parser = argparse.ArgumentParser(
        prog="lazyblame",
        description="Browse git blame for a file and step through its history.",
    )
    parser.add_argument("path", help="File to blame.")
    parser.add_argument("--version", action="version", version=f"lazyblame {__version__}")
    parser.add_argument("--revision", default="", help="Blame the file as of this revision.")
    parser.add_argument("--style", default=None, help="Pygments style name for source highlighting.")
    parser.add_argument(
        "--theme",
        default=None,
        help=f"UI theme name ({', '.join(available_theme_names())}).",
    )
    parser.add_argument("--no-color", action="store_true", help="Disable color output.")
    parser.add_argument("--print", dest="print_only", action="store_true", help="Print the annotated file and exit.")
    parser.add_argument("--log-file", type=Path, default=None, help="Write debug logs to this file.")
    args = parser.parse_args()

    _configure_logging(args.log_file or load_log_file())

    path = Path(args.path)
    if not path.exists():
        raise SystemExit(f"lazyblame: {args.path}: no such file or directory")
    if not path.is_file():
        raise SystemExit(f"lazyblame: the given {args.path!r} path is not a file.")
    path = path.resolve()

    git_bin = find_git_binary(load_git_binary())
    if git_bin is None:
        raise SystemExit("lazyblame: git executable not found")

    try:
        repo_root = resolve_repo_root(git_bin, path.parent)
        filename = _repo_relative(path, repo_root)
        runner = GitRunner(git_bin, repo_root)
        blame = runner.blame(args.revision, filename)
    except LazyBlameError as exc:
        raise SystemExit(f"lazyblame: {exc}") from exc

    logger.info("blamed %s in %s (%d lines)", filename, repo_root, len(blame))
    initial = NavigatorState(blame=blame, filename=filename, commit_id=args.revision)
    style = args.style or load_style()
    theme = resolve_theme(args.theme or load_theme_name(), no_color=args.no_color)

    if args.print_only or not stdout_is_interactive():
        print_blame(initial, style=style, no_color=args.no_color, theme=theme)
        return

    run_blame_viewer(
        runner,
        initial,
        style=style,
        no_color=args.no_color,
        page_size=load_page_size(),
        theme=theme,
    )


if __name__ == "__main__":
    main()
