"""Read-only queries about the repository state.

Every helper here shells out through _run_git_command and returns plain
strings or lists, which keeps them trivial to fake in tests.
"""

from diffnote.git.exceptions import GitCommandError
from diffnote.git.runner import _run_git_command

DETACHED_HEAD = "HEAD (detached)"

# Porcelain v1 index column values that mean "nothing staged for this path"
_UNSTAGED_INDEX_CODES = frozenset(" ?!")


def get_branch() -> str:
    """Current branch name, or DETACHED_HEAD when HEAD is not on a branch."""
    return _run_git_command(["branch", "--show-current"]) or DETACHED_HEAD


def get_last_commits(n: int = 5) -> list[str]:
    """Subjects of the n most recent commits, newest first.

    A repository without commits makes ``git log`` fail; that reads as an
    empty history here.
    """
    try:
        log = _run_git_command(["log", f"-n{n}", "--pretty=%s"])
    except GitCommandError:
        return []
    return log.splitlines()


def _is_staged_entry(entry: str) -> bool:
    return len(entry) >= 2 and entry[0] not in _UNSTAGED_INDEX_CODES


def get_staged_status() -> str:
    """``git status --porcelain`` limited to the branch header and staged paths."""
    status = _run_git_command(["status", "--porcelain=v1", "-b"])
    kept = [
        entry
        for entry in status.splitlines()
        if entry.startswith("##") or _is_staged_entry(entry)
    ]
    return "\n".join(kept)


def list_staged_files() -> list[str]:
    """Paths with staged changes, as git reports them."""
    names = _run_git_command(["diff", "--staged", "--name-only"])
    return [name for name in names.splitlines() if name]
