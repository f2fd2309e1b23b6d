"""Tests for the ``git blame --porcelain`` parser.

Covers group handling, chunk sharing across groups, metadata parsing, and
the failures that must never yield a partial snapshot.
"""

from __future__ import annotations

import unittest

from lazyblame.blame import NOT_COMMITTED_ID, LineKind, classify_line, parse_porcelain, unquote_path
from lazyblame.errors import ParseError

COMMIT_A = "a" * 40
COMMIT_B = "b" * 40
COMMIT_C = "c" * 40


def _metadata(author: str, time: int, summary: str, filename: str, previous: str | None = None) -> list[str]:
    lines = [
        f"author {author}",
        f"author-mail <{author.lower()}@example.com>",
        f"author-time {time}",
        "author-tz +0000",
        f"committer {author}",
        f"committer-mail <{author.lower()}@example.com>",
        f"committer-time {time}",
        "committer-tz +0000",
        f"summary {summary}",
    ]
    if previous is not None:
        lines.append(f"previous {previous}")
    lines.append(f"filename {filename}")
    return lines


def _example_stream() -> list[str]:
    """Commit A adds lines 1-3; commit B later rewrites line 2."""
    return [
        f"{COMMIT_A} 1 1 1",
        *_metadata("Alice", 1_600_000_000, "Add demo", "demo.txt"),
        "\tline one",
        f"{COMMIT_B} 2 2 1",
        *_metadata("Bob", 1_700_000_000, "Rewrite line two", "demo.txt", previous=f"{COMMIT_A} demo.txt"),
        "\tline TWO",
        f"{COMMIT_A} 3 3 1",
        "filename demo.txt",
        "\tline three",
    ]


class ClassifyLineTests(unittest.TestCase):
    def test_chunk_header_with_group_size(self) -> None:
        parsed = classify_line(f"{COMMIT_A} 4 7 3")
        self.assertIs(parsed.kind, LineKind.CHUNK_HEADER)
        self.assertEqual(parsed.commit_id, COMMIT_A)
        self.assertEqual(parsed.final_line, 7)
        self.assertEqual(parsed.group_size, 3)

    def test_secondary_header_without_group_size(self) -> None:
        parsed = classify_line(f"{COMMIT_A} 5 8")
        self.assertIs(parsed.kind, LineKind.SECONDARY_HEADER)
        self.assertEqual(parsed.final_line, 8)

    def test_content_line_keeps_inner_tabs(self) -> None:
        parsed = classify_line("\t\tindented\tvalue")
        self.assertIs(parsed.kind, LineKind.CONTENT)
        self.assertEqual(parsed.text, "\tindented\tvalue")

    def test_metadata_splits_key_and_value_once(self) -> None:
        parsed = classify_line("summary Fix a thing in two places")
        self.assertIs(parsed.kind, LineKind.METADATA)
        self.assertEqual(parsed.key, "summary")
        self.assertEqual(parsed.value, "Fix a thing in two places")

    def test_bare_keyword_is_metadata_with_empty_value(self) -> None:
        parsed = classify_line("boundary")
        self.assertIs(parsed.kind, LineKind.METADATA)
        self.assertEqual(parsed.key, "boundary")
        self.assertEqual(parsed.value, "")


class ParsePorcelainTests(unittest.TestCase):
    def test_example_attributes_each_line_to_its_commit(self) -> None:
        blame = parse_porcelain(_example_stream())

        self.assertEqual(blame.lines, ("line one", "line TWO", "line three"))
        middle = blame.chunk_at(1)
        self.assertEqual(middle.commit_id, COMMIT_B)
        self.assertEqual(middle.previous_commit_id, COMMIT_A)
        self.assertEqual(middle.previous_filename, "demo.txt")
        for index in (0, 2):
            chunk = blame.chunk_at(index)
            self.assertEqual(chunk.commit_id, COMMIT_A)
            self.assertEqual(chunk.previous_commit_id, "")
            self.assertTrue(chunk.is_root)

    def test_repeated_commit_shares_one_chunk_instance(self) -> None:
        blame = parse_porcelain(_example_stream())

        self.assertIs(blame.chunk_at(0), blame.chunk_at(2))
        chunk = blame.chunk_at(2)
        self.assertEqual(chunk.author, "Alice")
        self.assertEqual(chunk.author_mail, "<alice@example.com>")
        self.assertEqual(chunk.author_time, 1_600_000_000)
        self.assertEqual(chunk.summary, "Add demo")
        self.assertEqual(len({id(blame.chunk_at(index)) for index in range(len(blame))}), 2)

    def test_metadata_in_already_populated_group_is_ignored(self) -> None:
        stream = _example_stream()
        stream[-2] = "summary Something else"
        blame = parse_porcelain(stream)
        self.assertEqual(blame.chunk_at(2).summary, "Add demo")

    def test_multi_line_group_uses_secondary_headers(self) -> None:
        stream = [
            f"{COMMIT_C} 1 1 3",
            *_metadata("Carol", 1_650_000_000, "Three lines", "src/app.py"),
            "\tfirst",
            f"{COMMIT_C} 2 2",
            "\tsecond",
            f"{COMMIT_C} 3 3",
            "\tthird",
        ]
        blame = parse_porcelain(stream)

        self.assertEqual(len(blame), 3)
        self.assertEqual(sorted(blame.line_chunks), [0, 1, 2])
        self.assertEqual(blame.chunk_at(1).filename, "src/app.py")

    def test_group_sizes_sum_to_emitted_line_count(self) -> None:
        stream = [
            f"{COMMIT_A} 1 1 2",
            *_metadata("Alice", 1, "one", "f"),
            "\ta",
            f"{COMMIT_A} 2 2",
            "\tb",
            f"{COMMIT_B} 3 3 1",
            *_metadata("Bob", 2, "two", "f", previous=f"{COMMIT_A} f"),
            "\tc",
            f"{COMMIT_A} 4 4 2",
            "\td",
            f"{COMMIT_A} 5 5",
            "\te",
        ]
        blame = parse_porcelain(stream)

        self.assertEqual(len(blame), 2 + 1 + 2)
        for index in range(len(blame)):
            self.assertIsNotNone(blame.chunk_at(index))

    def test_previous_filename_survives_rename(self) -> None:
        stream = [
            f"{COMMIT_B} 1 1 1",
            *_metadata("Bob", 5, "Rename", "new name.py", previous=f"{COMMIT_A} old name.py"),
            "\tx = 1",
        ]
        chunk = parse_porcelain(stream).chunk_at(0)
        self.assertEqual(chunk.filename, "new name.py")
        self.assertEqual(chunk.previous_filename, "old name.py")

    def test_quoted_paths_are_unquoted(self) -> None:
        stream = [
            f"{COMMIT_B} 1 1 1",
            *_metadata(
                "Bob",
                5,
                "Rename",
                '"caf\\303\\251 \\"v2\\".py"',
                previous=f'{COMMIT_A} "tab\\there.py"',
            ),
            "\tx = 1",
        ]
        chunk = parse_porcelain(stream).chunk_at(0)
        self.assertEqual(chunk.filename, 'café "v2".py')
        self.assertEqual(chunk.previous_filename, "tab\there.py")

    def test_unquoted_non_ascii_path_passes_through(self) -> None:
        self.assertEqual(unquote_path("café.py"), "café.py")
        self.assertEqual(unquote_path('"a\\\\b.py"'), "a\\b.py")

    def test_uncommitted_lines_use_the_zero_sentinel(self) -> None:
        stream = [
            f"{NOT_COMMITTED_ID} 1 1 1",
            "author Not Committed Yet",
            "author-time 1700000000",
            "summary Version of demo.txt from demo.txt",
            f"previous {COMMIT_A} demo.txt",
            "filename demo.txt",
            "\twork in progress",
        ]
        chunk = parse_porcelain(stream).chunk_at(0)
        self.assertFalse(chunk.is_committed)
        self.assertEqual(chunk.previous_commit_id, COMMIT_A)

    def test_accepts_bytes_with_trailing_newlines(self) -> None:
        stream = [(line + "\n").encode("utf-8") for line in _example_stream()]
        blame = parse_porcelain(stream)
        self.assertEqual(blame.lines[1], "line TWO")

    def test_carriage_return_is_stripped(self) -> None:
        stream = [line + "\r\n" for line in _example_stream()]
        self.assertEqual(parse_porcelain(stream).lines[0], "line one")

    def test_unknown_metadata_keys_are_ignored(self) -> None:
        stream = [
            f"{COMMIT_A} 1 1 1",
            "author Alice",
            "author-time 10",
            "x-custom whatever",
            "boundary",
            "summary Root",
            "filename f",
            "\tonly",
        ]
        chunk = parse_porcelain(stream).chunk_at(0)
        self.assertEqual(chunk.summary, "Root")

    def test_empty_stream_yields_empty_blame(self) -> None:
        blame = parse_porcelain([])
        self.assertEqual(len(blame), 0)
        self.assertEqual(blame.line_chunks, {})


class ParsePorcelainFailureTests(unittest.TestCase):
    def test_malformed_header_reports_offending_line(self) -> None:
        with self.assertRaises(ParseError) as ctx:
            parse_porcelain(["not a header"])
        self.assertEqual(ctx.exception.line, "not a header")

    def test_header_without_group_size_is_rejected_outside_a_group(self) -> None:
        with self.assertRaises(ParseError):
            parse_porcelain([f"{COMMIT_A} 1 1"])

    def test_unparsable_author_time_is_fatal(self) -> None:
        stream = [f"{COMMIT_A} 1 1 1", "author-time yesterday", "\tline"]
        with self.assertRaises(ParseError) as ctx:
            parse_porcelain(stream)
        self.assertEqual(ctx.exception.line, "author-time yesterday")

    def test_stream_ending_inside_a_group_is_rejected(self) -> None:
        stream = [f"{COMMIT_A} 1 1 2", "summary s", "\tonly one"]
        with self.assertRaises(ParseError):
            parse_porcelain(stream)

    def test_truncated_previous_value_is_rejected(self) -> None:
        stream = [f"{COMMIT_A} 1 1 1", "previous abc", "\tline"]
        with self.assertRaises(ParseError):
            parse_porcelain(stream)

    def test_bad_escape_in_quoted_path_is_rejected(self) -> None:
        stream = [f"{COMMIT_A} 1 1 1", 'filename "bad\\q.py"', "\tline"]
        with self.assertRaises(ParseError) as ctx:
            parse_porcelain(stream)
        self.assertEqual(ctx.exception.line, 'filename "bad\\q.py"')

    def test_read_error_becomes_parse_error(self) -> None:
        def broken_stream():
            yield f"{COMMIT_A} 1 1 1"
            raise OSError("pipe closed")

        with self.assertRaises(ParseError):
            parse_porcelain(broken_stream())

    def test_gap_in_line_numbers_is_rejected(self) -> None:
        stream = [f"{COMMIT_A} 1 5 1", "summary s", "\tline"]
        with self.assertRaises(ParseError):
            parse_porcelain(stream)


if __name__ == "__main__":
    unittest.main()
