"""Unified diff parser for token-bounded chunking.

Contains:
- parse_diff_into_files: Split a unified diff into per-file FileDiff records
- is_hunk_header: Recognize '@@ -a,b +c,d @@' hunk headers
"""

from typing import Optional

from diffnote.diff.models import FileDiff
from diffnote.tokens import TokenEstimator

NEW_FILE_PREFIX = "+++ b/"
OLD_FILE_PREFIX = "--- a/"
NULL_DEVICE_MARKER = "+++ /dev/null"

# Lines git emits between 'diff --git' and '+++'; they describe the next file
_PREAMBLE_PREFIXES = (
    "diff --git ",
    "index ",
    "new file mode ",
    "deleted file mode ",
    "old mode ",
    "new mode ",
    "similarity index ",
    "dissimilarity index ",
    "rename from ",
    "rename to ",
    "copy from ",
    "copy to ",
    "--- a/",
    "--- /dev/null",
)


class _FileBuilder:
    """Mutable accumulator sealed into a FileDiff."""

    def __init__(self, path: str, estimator: TokenEstimator):
        self.path = path
        self.lines: list[str] = []
        self.token_count = estimator.estimate_tokens(path)

    def append(self, line: str, estimator: TokenEstimator) -> None:
        self.lines.append(line + "\n")
        self.token_count += estimator.estimate_tokens(line)

    def build(self) -> FileDiff:
        return FileDiff(
            path=self.path,
            content="".join(self.lines),
            token_count=self.token_count,
        )


def _is_preamble_line(line: str) -> bool:
    return line.startswith(_PREAMBLE_PREFIXES)


def parse_diff_into_files(diff_text: str, estimator: TokenEstimator) -> list[FileDiff]:
    """Split a unified diff into ordered per-file records.

    A '+++ b/<path>' line opens a record for <path>. For deletions git writes
    '+++ /dev/null', so the path comes from the preceding '--- a/<path>'.
    Everything after the marker belongs to that record until the next marker.
    Header lines of the following file ('diff --git', 'index', '---', ...) are
    held back and dropped once its marker shows up.

    Args:
        diff_text: Raw unified diff.
        estimator: Token estimator for the running per-file counts.

    Returns:
        FileDiff records in diff order. Empty if no file markers were found.
    """
    files: list[FileDiff] = []
    current: Optional[_FileBuilder] = None
    pending: list[str] = []
    last_old_path: Optional[str] = None

    for line in diff_text.splitlines():
        new_path = None
        if line.startswith(NEW_FILE_PREFIX):
            new_path = line[len(NEW_FILE_PREFIX):]
        elif line.startswith(NULL_DEVICE_MARKER):
            # Deleted file: fall back to the old path, if one was seen
            new_path = last_old_path

        if new_path is not None:
            if current is not None:
                files.append(current.build())
            current = _FileBuilder(new_path, estimator)
            pending = []
            last_old_path = None
            continue

        if line.startswith(OLD_FILE_PREFIX):
            last_old_path = line[len(OLD_FILE_PREFIX):]

        if current is None:
            continue

        if _is_preamble_line(line):
            pending.append(line)
            continue

        if pending:
            # Not a file header after all; keep the lines in place
            for held in pending:
                current.append(held, estimator)
            pending = []
        current.append(line, estimator)

    if current is not None:
        for held in pending:
            current.append(held, estimator)
        files.append(current.build())

    return files


def _consume_digits(line: str, pos: int) -> int:
    """Return the index after a run of one or more digits, or -1."""
    start = pos
    while pos < len(line) and line[pos] in "0123456789":
        pos += 1
    return pos if pos > start else -1


def _consume_literal(line: str, pos: int, literal: str) -> int:
    if line.startswith(literal, pos):
        return pos + len(literal)
    return -1


def is_hunk_header(line: str) -> bool:
    """Check whether a line opens a hunk: '@@ -<n>,<n> +<n>,<n> @@'.

    Text after the closing '@@' (such as a function name) is allowed.
    """
    steps = (
        ("literal", "@@ -"),
        ("digits", None),
        ("literal", ","),
        ("digits", None),
        ("literal", " +"),
        ("digits", None),
        ("literal", ","),
        ("digits", None),
        ("literal", " @@"),
    )

    pos = 0
    for kind, literal in steps:
        if kind == "literal":
            pos = _consume_literal(line, pos, literal)
        else:
            pos = _consume_digits(line, pos)
        if pos < 0:
            return False
    return True
