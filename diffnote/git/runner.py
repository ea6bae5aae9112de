"""Thin wrapper around the git executable."""

import logging
import subprocess
from pathlib import Path
from typing import Optional

from diffnote.git.exceptions import GitCommandError, GitError

logger = logging.getLogger(__name__)

GIT_BINARY = "git"


def _run_git_command(args: list[str], input_text: Optional[str] = None) -> str:
    """Run ``git <args>`` in the current directory.

    Args:
        args: Arguments after the git executable.
        input_text: Written to stdin when given.

    Returns:
        stdout with leading and trailing whitespace removed.

    Raises:
        GitCommandError: git exited non-zero.
        GitError: git could not be started at all.
    """
    command = [GIT_BINARY, *args]
    logger.debug("Running %s", " ".join(command))
    try:
        completed = subprocess.run(
            command,
            input=input_text,
            capture_output=True,
            text=True,
            check=True,
        )
    except FileNotFoundError:
        raise GitError(f"{GIT_BINARY} is not installed or not on PATH.")
    except subprocess.CalledProcessError as e:
        raise GitCommandError(args, (e.stderr or "").strip())
    return completed.stdout.strip()


def get_repo_root() -> Path:
    """Top-level directory of the enclosing repository."""
    try:
        top_level = _run_git_command(["rev-parse", "--show-toplevel"])
    except GitCommandError:
        raise GitError("Not in a git repository. Run diffnote from inside a git work tree.")
    return Path(top_level)


def commit_with_message(message: str) -> str:
    """Commit the index, feeding the message through stdin."""
    return _run_git_command(["commit", "-F", "-"], input_text=message)
