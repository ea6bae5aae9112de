"""Turn a raw model reply into a validated CommitMessageJSON.

Reasoning models may prefix their answer with thinking blocks and most
models occasionally wrap JSON in a markdown fence; both are tolerated.
"""

import json
import re

from pydantic import ValidationError

from diffnote.formatters import CommitMessageJSON
from diffnote.llm.exceptions import JSONParseError

# (opening, closing) pairs, matched case-insensitively
THINKING_TAGS = (
    ("<thinking>", "</thinking>"),
    ("<think>", "</think>"),
    ("[[thinking]]", "[[/thinking]]"),
    ("[thinking]", "[/thinking]"),
    ("```thinking", "```"),
    ("<!--thinking", "-->"),
)

_EXTRA_BLANK_LINES_RE = re.compile(r"\n\s*\n\s*\n+")


def _find_thinking_block(lower: str, start: int) -> tuple[int, int] | None:
    """Find the earliest complete thinking block at or after start.

    Returns:
        (block_start, block_end) offsets, or None if no closed block remains.
    """
    best = None
    for opening, closing in THINKING_TAGS:
        open_pos = lower.find(opening, start)
        if open_pos == -1:
            continue
        close_pos = lower.find(closing, open_pos + len(opening))
        if close_pos == -1:
            continue
        block = (open_pos, close_pos + len(closing))
        if best is None or block[0] < best[0]:
            best = block
    return best


def strip_thinking(text: str) -> str:
    """Remove <thinking>/<think> style reasoning blocks from a response.

    Unclosed tags are left in place. When something was removed, runs of blank
    lines are collapsed and the result is stripped.
    """
    lower = text.lower()
    parts = []
    pos = 0
    removed = False

    while True:
        block = _find_thinking_block(lower, pos)
        if block is None:
            break
        parts.append(text[pos:block[0]])
        pos = block[1]
        removed = True

    parts.append(text[pos:])
    result = "".join(parts)

    if not removed:
        return text
    return _EXTRA_BLANK_LINES_RE.sub("\n\n", result).strip()


def _strip_code_fence(text: str) -> str:
    if not text.startswith("```"):
        return text
    lines = text.splitlines()[1:]
    if lines and lines[-1].strip() == "```":
        lines.pop()
    return "\n".join(lines)


def _outermost_object(text: str) -> str:
    start, end = text.find("{"), text.rfind("}")
    if start == -1 or end <= start:
        return text
    return text[start:end + 1]


def parse_json_response(raw_response: str) -> dict:
    """Extract the JSON object from a model reply.

    Thinking blocks and a surrounding markdown fence are removed first, then
    anything before the first "{" or after the last "}" is ignored.

    Raises:
        JSONParseError: No JSON object could be decoded.
    """
    candidate = _outermost_object(_strip_code_fence(strip_thinking(raw_response).strip()))

    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError as e:
        raise JSONParseError(
            f"Failed to parse LLM response as JSON.\nError: {e}\nRaw response:\n{raw_response}"
        )
    if not isinstance(parsed, dict):
        raise JSONParseError(f"LLM response is not a JSON object.\nRaw response:\n{raw_response}")
    return parsed


def validate_commit_json(parsed: dict, raw_response: str) -> CommitMessageJSON:
    """Check parsed against CommitMessageJSON; raw_response is quoted on failure."""
    try:
        return CommitMessageJSON.model_validate(parsed)
    except ValidationError as e:
        raise JSONParseError(
            f"LLM response does not match expected schema.\nError: {e}\nRaw response:\n{raw_response}"
        )
