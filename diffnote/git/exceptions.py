"""Errors raised while talking to git."""

from typing import Sequence


class GitError(Exception):
    """A git invocation failed or the working directory is not usable."""


class GitCommandError(GitError):
    """git exited non-zero.

    Keeps the argument list and stderr so callers can tell "no commits yet"
    apart from a real failure without re-running the command.
    """

    def __init__(self, args: Sequence[str], stderr: str = ""):
        self.git_args = list(args)
        self.stderr = stderr
        detail = f"\n{stderr}" if stderr else ""
        super().__init__(f"Git command failed: git {' '.join(self.git_args)}{detail}")


class NoStagedChangesError(GitError):
    """Nothing describable is staged."""
