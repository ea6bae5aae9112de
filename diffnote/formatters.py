"""The commit message model and its plain-text rendering."""

import textwrap

from pydantic import BaseModel, field_validator

# git convention for subject and body width
WRAP_WIDTH = 72

_BULLET_MARKERS = ("- ", "* ")


class CommitMessageJSON(BaseModel):
    """What the model must return: a subject line and optional bullets.

    Leading bullet markers and blank entries in body_bullets are dropped on
    validation, so models that format their own list still render cleanly.
    """

    title: str
    body_bullets: list[str] = []

    @field_validator("title")
    @classmethod
    def strip_title(cls, value: str) -> str:
        stripped = (value or "").strip()
        if not stripped:
            raise ValueError("Title cannot be empty")
        return stripped

    @field_validator("body_bullets")
    @classmethod
    def clean_bullets(cls, value: list[str]) -> list[str]:
        cleaned = []
        for raw in value:
            text = (raw or "").strip()
            if text.startswith(_BULLET_MARKERS):
                text = text[2:].strip()
            if text:
                cleaned.append(text)
        return cleaned


def sanitize_title(title: str, max_length: int = WRAP_WIDTH) -> str:
    """First line of title, cut to max_length with a trailing "..." if longer."""
    first_line = title.strip().splitlines()[0].strip() if title.strip() else ""
    if len(first_line) <= max_length:
        return first_line
    return first_line[: max_length - 3].rstrip() + "..."


def _wrap_bullet(text: str, width: int) -> str:
    return textwrap.fill(
        text,
        width=width,
        initial_indent="- ",
        subsequent_indent="  ",
        break_long_words=False,
        break_on_hyphens=False,
    )


def render_commit_message(data: CommitMessageJSON, wrap_width: int = WRAP_WIDTH) -> str:
    """Subject, blank line, then one wrapped "- " bullet per body entry.

        Add token-bounded diff chunking

        - Split oversized diffs at file and hunk boundaries
        - Retry rate-limited provider calls with backoff
    """
    subject = sanitize_title(data.title, max_length=wrap_width)
    if not data.body_bullets:
        return subject
    body = "\n".join(_wrap_bullet(bullet, wrap_width) for bullet in data.body_bullets)
    return f"{subject}\n\n{body}"
