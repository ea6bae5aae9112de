"""Shared test fixtures and configuration."""

import tempfile
from pathlib import Path

import pytest

from diffnote.tokens import TokenEstimator


class FakeEncoding:
    """Whitespace tokenizer: one token per word. Keeps tests offline."""

    name = "fake-words"

    def encode(self, text):
        return text.split()


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def config_dir(mocker, temp_dir):
    """Point ~/.diffnote at a temporary directory."""
    mock_dir = temp_dir / ".diffnote"
    mocker.patch("diffnote.global_config._CONFIG_DIR", mock_dir)
    return mock_dir


@pytest.fixture
def estimator():
    """Deterministic estimator counting whitespace-separated words."""
    return TokenEstimator(FakeEncoding())


@pytest.fixture
def make_file_section():
    """Build one file's section of a unified diff.

    Each body line is a single word, so with the fake estimator a hunk of n
    lines costs n tokens plus 4 for its '@@ -a,b +c,d @@' header.
    """

    def _make(path, hunks=1, lines_per_hunk=3):
        lines = [
            f"diff --git a/{path} b/{path}",
            "index 1111111..2222222 100644",
            f"--- a/{path}",
            f"+++ b/{path}",
        ]
        for h in range(hunks):
            start = h * 100 + 1
            lines.append(f"@@ -{start},{lines_per_hunk} +{start},{lines_per_hunk} @@")
            for i in range(lines_per_hunk):
                lines.append(f"+{path}-h{h}-l{i}")
        return "\n".join(lines) + "\n"

    return _make


@pytest.fixture
def sample_diff():
    """Staged diff touching a new, a modified and a deleted file."""
    return """diff --git a/new_file.py b/new_file.py
new file mode 100644
index 0000000..e69de29
--- /dev/null
+++ b/new_file.py
@@ -0,0 +1,2 @@
+def hello():
+    print("Hello, world!")
diff --git a/existing_file.py b/existing_file.py
index 1234567..abcdefg 100644
--- a/existing_file.py
+++ b/existing_file.py
@@ -1,3 +1,3 @@
 import os
-x = 1
+x = 2
diff --git a/old_file.py b/old_file.py
deleted file mode 100644
index 1234567..0000000
--- a/old_file.py
+++ /dev/null
@@ -1,1 +0,0 @@
-print("bye")
"""


@pytest.fixture
def sample_context_bundle(sample_diff):
    """Sample git context bundle for testing."""
    return f"""[BRANCH]
main

[FILE_CHANGES]
New files (did not exist before this commit):
  + new_file.py
Modified files (already existed, now changed):
  ~ existing_file.py
Deleted files:
  - old_file.py

[LAST_5_COMMITS]
- Fix bug in user authentication
- Initial commit

[STAGED_DIFF]
{sample_diff}"""


@pytest.fixture
def valid_llm_response():
    """A well-formed JSON response from an LLM."""
    return (
        '{"title": "Add hello module", '
        '"body_bullets": ["Add hello() greeting", "Bump x to 2"]}'
    )
