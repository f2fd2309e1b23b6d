"""Blame snapshot types and the ``git blame --porcelain`` parser."""

from __future__ import annotations

from .porcelain import (
    LineKind,
    PorcelainLine,
    classify_line,
    parse_porcelain,
    unquote_path,
)
from .types import NOT_COMMITTED_ID, SHORT_ID_LENGTH, Blame, Chunk

__all__ = [
    "Blame",
    "Chunk",
    "LineKind",
    "NOT_COMMITTED_ID",
    "PorcelainLine",
    "SHORT_ID_LENGTH",
    "classify_line",
    "parse_porcelain",
    "unquote_path",
]
