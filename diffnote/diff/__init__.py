"""Diff parsing and token-bounded chunking for diffnote.

This package provides:
- models: FileDiff, DiffChunk
- parser: parse_diff_into_files, is_hunk_header
- chunker: DiffChunker, chunk_diff, is_chunked, count_chunks
"""

from diffnote.diff.models import DiffChunk, FileDiff
from diffnote.diff.parser import is_hunk_header, parse_diff_into_files
from diffnote.diff.chunker import (
    CHUNK_MARKER,
    END_CHUNK_MARKER,
    DiffChunker,
    chunk_diff,
    count_chunks,
    is_chunked,
)


__all__ = [
    "DiffChunk",
    "FileDiff",
    "is_hunk_header",
    "parse_diff_into_files",
    "CHUNK_MARKER",
    "END_CHUNK_MARKER",
    "DiffChunker",
    "chunk_diff",
    "count_chunks",
    "is_chunked",
]
