"""Collect the staged diff that the commit message will describe."""

import fnmatch
import logging
import posixpath
from typing import Iterable, Optional

from diffnote import global_config
from diffnote.git.exceptions import NoStagedChangesError
from diffnote.git.repo import list_staged_files
from diffnote.git.runner import _run_git_command

logger = logging.getLogger(__name__)

# Generated lock files: large, noisy and never what the commit is about
DEFAULT_DIFF_EXCLUDE_PATTERNS = [
    "poetry.lock",
    "package-lock.json",
    "yarn.lock",
    "pnpm-lock.yaml",
    "Cargo.lock",
    "Gemfile.lock",
    "composer.lock",
    "go.sum",
]

NOTHING_STAGED_MESSAGE = (
    "No staged changes found. Stage your changes first with: git add <files>"
)


def get_ignore_patterns() -> list[str]:
    """Built-in exclusions followed by the user's ``default_ignore`` entries."""
    patterns = list(DEFAULT_DIFF_EXCLUDE_PATTERNS)
    patterns.extend(
        p for p in global_config.get_default_ignore_patterns() if p not in patterns
    )
    return patterns


def _should_exclude_file(filename: str, patterns: Iterable[str]) -> bool:
    """True if filename matches a pattern by full path or by basename.

    Patterns are shell globs, so ``build/*`` and ``*.min.js`` both work and a
    bare ``yarn.lock`` also catches ``web/yarn.lock``.
    """
    basename = posixpath.basename(filename)
    return any(
        fnmatch.fnmatch(filename, pattern) or fnmatch.fnmatch(basename, pattern)
        for pattern in patterns
    )


def get_staged_diff(ignore_patterns: Optional[list[str]] = None) -> str:
    """Return the full staged diff for every non-excluded path.

    Size is not limited here. Bounding the diff by tokens is the chunker's
    job, so the text comes back exactly as git printed it plus a trailing
    newline.

    Raises:
        NoStagedChangesError: Nothing is staged, only excluded paths are
            staged, or git printed an empty diff.
    """
    patterns = get_ignore_patterns() if ignore_patterns is None else ignore_patterns

    staged = list_staged_files()
    if not staged:
        raise NoStagedChangesError(NOTHING_STAGED_MESSAGE)

    included = [path for path in staged if not _should_exclude_file(path, patterns)]
    skipped = len(staged) - len(included)
    if skipped:
        logger.debug("Excluded %d staged file(s) from the diff", skipped)
    if not included:
        raise NoStagedChangesError(
            "Only ignored files are staged, so there are no code changes to describe."
        )

    diff = _run_git_command(["diff", "--staged", "--", *included])
    if not diff:
        raise NoStagedChangesError(NOTHING_STAGED_MESSAGE)
    return diff + "\n"
