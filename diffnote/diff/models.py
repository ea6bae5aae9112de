"""Data models for the diff chunking pipeline.

Contains:
- FileDiff: One file's section of a unified diff with its token count
- DiffChunk: Accumulator for whole files packed under a token budget
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class FileDiff:
    """Diff body for a single file."""

    path: str
    content: str  # Newline-terminated lines after the +++ marker
    token_count: int


@dataclass
class DiffChunk:
    """A group of whole files that fits (or must fit) one prompt."""

    content: str = ""
    files: list[str] = field(default_factory=list)
    token_count: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.content

    def add_file(self, file_diff: FileDiff, header_overhead: int) -> None:
        """Append a file under a synthetic 'diff --git' header."""
        if self.content:
            self.content += "\n"
        self.content += f"diff --git a/{file_diff.path}\n"
        self.content += file_diff.content
        self.files.append(file_diff.path)
        self.token_count += header_overhead + file_diff.token_count
