"""Assemble the sectioned git context sent to the model."""

from diffnote.git.repo import get_branch, get_last_commits, get_staged_status

RECENT_COMMIT_COUNT = 5

# Porcelain index code -> (heading, marker); renames are detected by " -> "
_CHANGE_GROUPS = {
    "A": ("New files (did not exist before this commit):", "+"),
    "M": ("Modified files (already existed, now changed):", "~"),
    "D": ("Deleted files:", "-"),
    "R": ("Renamed files:", ">"),
}


def _parse_file_changes(status: str) -> str:
    """Group staged porcelain entries into new, modified, deleted and renamed.

    Only the index column is read. Codes outside _CHANGE_GROUPS (copies,
    type changes) are left out.
    """
    grouped: dict[str, list[str]] = {code: [] for code in _CHANGE_GROUPS}

    for entry in status.splitlines():
        if entry.startswith("##") or len(entry) < 3:
            continue
        path = entry[3:]
        code = "R" if " -> " in path else entry[0]
        if code in grouped:
            grouped[code].append(path)

    out = []
    for code, (heading, marker) in _CHANGE_GROUPS.items():
        if grouped[code]:
            out.append(heading)
            out.extend(f"  {marker} {path}" for path in grouped[code])
    return "\n".join(out) or "(no files)"


def _format_commit_list(subjects: list[str]) -> str:
    if not subjects:
        return "- (no commits yet)"
    return "\n".join(f"- {subject}" for subject in subjects)


def build_context_bundle(diff: str) -> str:
    """Render branch, staged file summary, recent history and the diff.

    ``diff`` is used verbatim and must already fit the token budget. Status
    is staged-only so untracked and unstaged paths never reach the prompt.

    Raises:
        GitError: A git query failed.
    """
    sections = [
        ("BRANCH", get_branch()),
        ("FILE_CHANGES", _parse_file_changes(get_staged_status())),
        (f"LAST_{RECENT_COMMIT_COUNT}_COMMITS", _format_commit_list(get_last_commits(n=RECENT_COMMIT_COUNT))),
        ("STAGED_DIFF", diff),
    ]
    return "\n\n".join(f"[{name}]\n{body}" for name, body in sections)
