"""Token-bounded diff chunking.

Large diffs are reduced to something a model can take in three tiers:
1. File-level merging: greedily pack whole files until the budget is hit
2. Hunk-level splitting: a lone oversized file is cut at hunk headers
3. Line-level splitting: a hunk that is still too big is cut between lines

Tiers 2 and 3 share one accumulation loop. The result is best effort: a single
unsplittable run of text is returned as-is even when it exceeds the budget.
"""

import logging

from diffnote.diff.models import DiffChunk, FileDiff
from diffnote.diff.parser import is_hunk_header, parse_diff_into_files
from diffnote.tokens import TokenEstimator

logger = logging.getLogger(__name__)

CHUNK_MARKER = "---CHUNK"
END_CHUNK_MARKER = "---END CHUNK---"


def is_chunked(text: str) -> bool:
    """Check whether text was produced by the chunker's split paths."""
    return CHUNK_MARKER in text


def count_chunks(text: str) -> int:
    """Count chunk blocks in chunker output."""
    return text.count(CHUNK_MARKER)


def _trim_block(text: str) -> str:
    # Only surrounding newlines go; leading spaces are diff context markers
    return text.strip("\n")


def format_hunk_chunks(pieces: list[str]) -> str:
    """Wrap hunk pieces in numbered '---CHUNK i OF n---' blocks."""
    total = len(pieces)
    return "\n\n".join(
        f"{CHUNK_MARKER} {i} OF {total}---\n{_trim_block(piece)}\n{END_CHUNK_MARKER}"
        for i, piece in enumerate(pieces, start=1)
    )


def format_file_chunks(chunks: list[DiffChunk]) -> str:
    """Wrap file chunks in '---CHUNK i OF MULTIPLE FILES---' blocks."""
    return "\n\n".join(
        f"{CHUNK_MARKER} {i} OF MULTIPLE FILES---\n"
        f"Files: {', '.join(chunk.files)}\n\n"
        f"{_trim_block(chunk.content)}\n{END_CHUNK_MARKER}"
        for i, chunk in enumerate(chunks, start=1)
    )


class DiffChunker:
    """Bounds a unified diff to a token budget."""

    def __init__(self, estimator: TokenEstimator):
        self.estimator = estimator

    def header_overhead(self, path: str) -> int:
        """Token cost of the synthetic header written before each file."""
        return self.estimator.estimate_tokens(f"diff --git a/{path}")

    def merge_into_chunks(self, files: list[FileDiff], max_tokens: int) -> list[DiffChunk]:
        """Greedily pack whole files, in order, into chunks.

        A chunk is sealed as soon as the next file would push it over
        max_tokens. A file that is too large on its own still gets a chunk.
        """
        chunks: list[DiffChunk] = []
        current = DiffChunk()

        for file_diff in files:
            overhead = self.header_overhead(file_diff.path)
            would_exceed = current.token_count + overhead + file_diff.token_count > max_tokens

            if would_exceed and not current.is_empty:
                chunks.append(current)
                current = DiffChunk()

            current.add_file(file_diff, overhead)

        if not current.is_empty:
            chunks.append(current)

        return chunks

    def split_by_hunks(self, content: str, max_tokens: int) -> list[str]:
        """Cut content at hunk headers, and between lines when a hunk is too big.

        The lines before the first hunk header (the synthetic file header)
        stay in the same piece as the first hunk, so no piece is header-only
        unless the budget forces it.
        """
        pieces: list[str] = []
        current_lines: list[str] = []
        current_tokens = 0
        seen_hunk = False

        for line in content.splitlines():
            # +1 for the newline
            line_tokens = self.estimator.estimate_tokens(line) + 1
            starts_hunk = is_hunk_header(line)

            if current_lines and (
                (starts_hunk and seen_hunk) or current_tokens + line_tokens > max_tokens
            ):
                pieces.append("".join(current_lines))
                current_lines = []
                current_tokens = 0

            current_lines.append(line + "\n")
            current_tokens += line_tokens
            seen_hunk = seen_hunk or starts_hunk

        if current_lines:
            pieces.append("".join(current_lines))

        return pieces

    def chunk_diff(self, diff_text: str, max_tokens: int) -> str:
        """Bound a diff to max_tokens.

        Args:
            diff_text: The full unified diff.
            max_tokens: Token budget for the diff portion of the prompt.

        Returns:
            diff_text unchanged when it fits (or cannot be split), otherwise
            the diff re-emitted as '---CHUNK' delimited blocks.
        """
        total_tokens = self.estimator.estimate_tokens(diff_text)
        if total_tokens <= max_tokens:
            return diff_text

        files = parse_diff_into_files(diff_text, self.estimator)
        if not files:
            logger.debug("No file sections found in diff; passing it through")
            return diff_text

        chunks = self.merge_into_chunks(files, max_tokens)
        logger.debug(
            "Diff of %d tokens across %d files packed into %d chunks (budget %d)",
            total_tokens, len(files), len(chunks), max_tokens,
        )

        if len(chunks) > 1:
            return format_file_chunks(chunks)

        chunk = chunks[0]
        if chunk.token_count <= max_tokens:
            return chunk.content

        pieces = self.split_by_hunks(chunk.content, max_tokens)
        if len(pieces) > 1:
            logger.debug("Split %s into %d hunk chunks", chunk.files[0], len(pieces))
            return format_hunk_chunks(pieces)

        logger.warning(
            "Could not split %s below %d tokens; sending it unsplit",
            chunk.files[0], max_tokens,
        )
        return diff_text


def chunk_diff(diff_text: str, max_tokens: int, estimator: TokenEstimator) -> str:
    """Bound a diff to max_tokens using the given estimator."""
    return DiffChunker(estimator).chunk_diff(diff_text, max_tokens)
