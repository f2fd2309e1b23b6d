"""Parser for ``git blame --porcelain`` output.

The stream is a sequence of groups. Each group opens with a header carrying
the commit id, original line, final line, and group size; further lines of the
group get a shorter header without the size. Commit metadata follows the first
header of the first group that mentions a commit, and every source line is
prefixed with a TAB.
"""

from __future__ import annotations

import enum
import logging
import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from ..errors import ParseError
from .types import Blame, Chunk

logger = logging.getLogger(__name__)

CHUNK_HEADER_RE = re.compile(r"\A([0-9a-f]{40})\s(\d+)\s(\d+)\s(\d+)\Z")
SECONDARY_HEADER_RE = re.compile(r"\A([0-9a-f]{40})\s(\d+)\s(\d+)\Z")
CONTENT_MARKER = "\t"

AUTHOR_KEY = "author"
AUTHOR_MAIL_KEY = "author-mail"
AUTHOR_TIME_KEY = "author-time"
PREVIOUS_KEY = "previous"
SUMMARY_KEY = "summary"
FILENAME_KEY = "filename"

# ``previous <40-hex id> <filename>``
_PREVIOUS_ID_LENGTH = 40

# Escapes git uses inside a quoted path, besides three-digit octal bytes.
_QUOTED_PATH_ESCAPES = {
    "a": 0x07,
    "b": 0x08,
    "t": 0x09,
    "n": 0x0A,
    "v": 0x0B,
    "f": 0x0C,
    "r": 0x0D,
    "\"": 0x22,
    "\\": 0x5C,
}
_OCTAL_ESCAPE_RE = re.compile(r"[0-3][0-7]{2}")


class LineKind(enum.Enum):
    CHUNK_HEADER = "chunk-header"
    SECONDARY_HEADER = "secondary-header"
    CONTENT = "content"
    METADATA = "metadata"


@dataclass(frozen=True)
class PorcelainLine:
    kind: LineKind
    raw: str
    commit_id: str = ""
    final_line: int = 0
    group_size: int = 0
    key: str = ""
    value: str = ""

    @property
    def text(self) -> str:
        """Source text of a content line, without the leading marker."""
        return self.raw[len(CONTENT_MARKER):]


def classify_line(line: str) -> PorcelainLine:
    """Tag one porcelain line with its kind and pre-split fields."""
    if line.startswith(CONTENT_MARKER):
        return PorcelainLine(LineKind.CONTENT, line)

    match = CHUNK_HEADER_RE.match(line)
    if match:
        return PorcelainLine(
            LineKind.CHUNK_HEADER,
            line,
            commit_id=match.group(1),
            final_line=int(match.group(3)),
            group_size=int(match.group(4)),
        )

    match = SECONDARY_HEADER_RE.match(line)
    if match:
        return PorcelainLine(
            LineKind.SECONDARY_HEADER,
            line,
            commit_id=match.group(1),
            final_line=int(match.group(3)),
        )

    key, _sep, value = line.partition(" ")
    return PorcelainLine(LineKind.METADATA, line, key=key, value=value)


def _iter_text_lines(stream: Iterable[str | bytes]) -> Iterator[str]:
    try:
        for raw in stream:
            if isinstance(raw, bytes):
                raw = raw.decode("utf-8", errors="replace")
            if raw.endswith("\n"):
                raw = raw[:-1]
            if raw.endswith("\r"):
                raw = raw[:-1]
            yield raw
    except (OSError, ValueError) as exc:
        raise ParseError(f"failed to read git blame output: {exc}") from exc


def unquote_path(value: str) -> str:
    """Undo git's C-style quoting of a path; unquoted values pass through.

    Quoted paths escape bytes, not characters, so octal escapes are collected
    and the whole path is decoded as UTF-8 at the end.
    """
    if len(value) < 2 or not (value.startswith('"') and value.endswith('"')):
        return value
    body = value[1:-1]
    out = bytearray()
    i = 0
    while i < len(body):
        ch = body[i]
        if ch != "\\":
            out += ch.encode("utf-8")
            i += 1
            continue
        escape = body[i + 1 : i + 2]
        if escape in _QUOTED_PATH_ESCAPES:
            out.append(_QUOTED_PATH_ESCAPES[escape])
            i += 2
        elif _OCTAL_ESCAPE_RE.fullmatch(body, i + 1, i + 4):
            out.append(int(body[i + 1 : i + 4], 8))
            i += 4
        else:
            raise ValueError(f"bad escape in quoted path {value!r}")
    return out.decode("utf-8", errors="replace")


def _path_value(parsed: PorcelainLine, value: str) -> str:
    try:
        return unquote_path(value)
    except ValueError as exc:
        raise ParseError(f"unexpected format of line {parsed.raw!r} in git blame output.", parsed.raw) from exc


def _apply_metadata(chunk: Chunk, parsed: PorcelainLine) -> None:
    key = parsed.key
    value = parsed.value
    if key == AUTHOR_KEY:
        chunk.author = value
    elif key == AUTHOR_MAIL_KEY:
        chunk.author_mail = value
    elif key == AUTHOR_TIME_KEY:
        try:
            chunk.author_time = int(value)
        except ValueError as exc:
            raise ParseError(f"invalid author-time {value!r} in git blame output.", parsed.raw) from exc
    elif key == PREVIOUS_KEY:
        if len(value) <= _PREVIOUS_ID_LENGTH:
            raise ParseError(f"unexpected format of line {parsed.raw!r} in git blame output.", parsed.raw)
        chunk.previous_commit_id = value[:_PREVIOUS_ID_LENGTH]
        chunk.previous_filename = _path_value(parsed, value[_PREVIOUS_ID_LENGTH + 1 :])
    elif key == SUMMARY_KEY:
        chunk.summary = value
    elif key == FILENAME_KEY:
        chunk.filename = _path_value(parsed, value)


def parse_porcelain(stream: Iterable[str | bytes]) -> Blame:
    """Build a ``Blame`` from porcelain lines, or raise ``ParseError``.

    ``stream`` yields text or byte lines (trailing newlines are tolerated).
    Chunks are deduplicated by commit id: a commit seen in an earlier group
    reuses its chunk, and that group's metadata lines are skipped.
    """
    lines: list[str] = []
    line_chunks: dict[int, Chunk] = {}
    id_to_chunk: dict[str, Chunk] = {}
    chunk: Chunk | None = None
    populated = False
    lines_in_group = 0
    line_number = 0

    for line in _iter_text_lines(stream):
        parsed = classify_line(line)

        if lines_in_group == 0:
            if parsed.kind is not LineKind.CHUNK_HEADER:
                raise ParseError(f"unexpected format of line {line!r} in git blame output.", line)
            existing = id_to_chunk.get(parsed.commit_id)
            if existing is not None:
                chunk = existing
                populated = True
            else:
                chunk = Chunk(commit_id=parsed.commit_id)
                id_to_chunk[parsed.commit_id] = chunk
                populated = False
            # git reports 1-based line numbers
            line_number = parsed.final_line - 1
            lines_in_group = parsed.group_size
            continue

        assert chunk is not None
        if parsed.kind is LineKind.SECONDARY_HEADER:
            line_number = parsed.final_line - 1
        elif parsed.kind is LineKind.CONTENT:
            lines.append(parsed.text)
            line_chunks[line_number] = chunk
            lines_in_group -= 1
        elif parsed.kind is LineKind.CHUNK_HEADER:
            raise ParseError(f"group header {line!r} arrived before the previous group ended.", line)
        elif not populated:
            _apply_metadata(chunk, parsed)

    if lines_in_group > 0:
        raise ParseError(f"git blame output ended with {lines_in_group} line(s) missing from the last group.")
    if any(index not in line_chunks for index in range(len(lines))) or len(line_chunks) != len(lines):
        raise ParseError("git blame output does not attribute every line exactly once.")

    logger.debug("parsed blame: %d lines, %d commits", len(lines), len(id_to_chunk))
    return Blame(lines=tuple(lines), line_chunks=line_chunks)
