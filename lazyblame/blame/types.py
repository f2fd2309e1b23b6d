from __future__ import annotations

from dataclasses import dataclass, field

NOT_COMMITTED_ID = "0" * 40
SHORT_ID_LENGTH = 7


@dataclass
class Chunk:
    """Attribution record shared by every line one commit touched."""

    commit_id: str
    previous_commit_id: str = ""
    previous_filename: str = ""
    filename: str = ""
    author: str = ""
    author_mail: str = ""
    author_time: int = 0
    summary: str = ""

    @property
    def is_committed(self) -> bool:
        return self.commit_id != NOT_COMMITTED_ID

    @property
    def is_root(self) -> bool:
        """True when this commit introduced the line (nothing earlier to show)."""
        return not self.previous_commit_id

    @property
    def short_id(self) -> str:
        return self.commit_id[:SHORT_ID_LENGTH]


@dataclass(frozen=True)
class Blame:
    """One parsed ``git blame`` snapshot: line texts plus their owning chunks."""

    lines: tuple[str, ...] = ()
    line_chunks: dict[int, Chunk] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.lines)

    @property
    def last_index(self) -> int:
        return max(0, len(self.lines) - 1)

    def chunk_at(self, index: int) -> Chunk | None:
        return self.line_chunks.get(index)
