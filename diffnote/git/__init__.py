"""Git access for diffnote.

- runner: process wrapper, repository root and committing
- repo: branch, history and staged-status queries
- diff: staged diff collection with file exclusion
- context: the sectioned bundle handed to the LLM
"""

from diffnote.git.context import _parse_file_changes, build_context_bundle
from diffnote.git.diff import (
    DEFAULT_DIFF_EXCLUDE_PATTERNS,
    _should_exclude_file,
    get_ignore_patterns,
    get_staged_diff,
)
from diffnote.git.exceptions import GitCommandError, GitError, NoStagedChangesError
from diffnote.git.repo import (
    get_branch,
    get_last_commits,
    get_staged_status,
    list_staged_files,
)
from diffnote.git.runner import _run_git_command, commit_with_message, get_repo_root

__all__ = [
    "GitError",
    "GitCommandError",
    "NoStagedChangesError",
    "_run_git_command",
    "commit_with_message",
    "get_repo_root",
    "get_branch",
    "get_last_commits",
    "get_staged_status",
    "list_staged_files",
    "get_staged_diff",
    "get_ignore_patterns",
    "_should_exclude_file",
    "DEFAULT_DIFF_EXCLUDE_PATTERNS",
    "build_context_bundle",
    "_parse_file_changes",
]
