"""Provider base class and the prompts every provider sends."""

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import NamedTuple, Optional

import diffnote.config as _config
from diffnote.config import CommitStyle, LLMProvider, get_api_key_env_var
from diffnote.diff import count_chunks, is_chunked
from diffnote.formatters import CommitMessageJSON
from diffnote.llm.exceptions import (
    JSONParseError,
    LLMError,
    MissingAPIKeyError,
    wrap_provider_error,
)
from diffnote.llm.parsing import parse_json_response, validate_commit_json


@dataclass
class LLMResult:
    """A validated commit message plus what the call cost."""

    commit_json: CommitMessageJSON
    model: str
    input_tokens: int
    output_tokens: int
    raw_response: str = ""


class Completion(NamedTuple):
    """Raw text and token usage from one SDK call."""

    text: str
    input_tokens: int = 0
    output_tokens: int = 0


SYSTEM_PROMPT = """You are an expert software engineer writing git commit messages.
Be precise: only describe changes actually shown in the diff.
Do not include any reasoning, thinking, analysis or <thinking> tags in your response.
The [FILE_CHANGES] section tells you which files are NEW vs MODIFIED - use this to write accurate descriptions."""

USER_PROMPT_TEMPLATE = """Given the following git context, produce a JSON object with exactly these keys:
- "title": string (imperative mood, <=72 chars)
- "body_bullets": array of 1-7 strings (each concise, describe what changed and why)

Rules:
- Output ONLY valid JSON. No markdown fences. No extra keys. No commentary.
- Title in imperative mood (e.g., "Add feature" not "Added feature").
- Only describe changes shown in the diff. Do not infer or assume other changes.
- [FILE_CHANGES] shows NEW, MODIFIED, DELETED and RENAMED files.
{style_rules}{chunk_note}{author_context}
GIT CONTEXT:
{context_bundle}"""

COMMIT_STYLE_RULES = {
    CommitStyle.PLAIN: "",
    CommitStyle.CONVENTIONAL: (
        "- Title uses conventional commit format: <type>(<scope>): <description>\n"
        "- Types: feat, fix, docs, style, refactor, perf, test, build, ci, chore\n"
    ),
    CommitStyle.GITMOJI: (
        "- Title uses GitMoji format: <emoji> <type>: <description>\n"
        "- Common emojis: ✨ feat, 🐛 fix, 📝 docs, 🎨 style, ♻️ refactor, "
        "⚡️ perf, ✅ test, 📦️ build, 👷 ci, 🔧 chore\n"
    ),
}

AUTHOR_CONTEXT_LINE = "- Additional context from the author: {text}\n"

CHUNK_NOTE_MULTIPLE = (
    "- Note: This diff was split into {count} chunks due to size. "
    "Focus on the overall purpose of the changes across all chunks.\n"
)
CHUNK_NOTE_SINGLE = (
    "- Note: The diff was split into chunks due to size. "
    "Focus on the overall purpose of the changes.\n"
)


def build_chunk_note(context_bundle: str) -> str:
    """Guidance line for diffs the chunker split, or '' if it was not split."""
    if not is_chunked(context_bundle):
        return ""
    count = count_chunks(context_bundle)
    if count > 1:
        return CHUNK_NOTE_MULTIPLE.format(count=count)
    return CHUNK_NOTE_SINGLE


def build_author_context(user_context: Optional[str]) -> str:
    """Rule line carrying the author's own notes, or '' when there are none."""
    text = (user_context or "").strip()
    return AUTHOR_CONTEXT_LINE.format(text=text) if text else ""


def build_user_prompt(
    context_bundle: str,
    user_context: Optional[str] = None,
    commit_style: Optional[CommitStyle] = None,
    chunk_note: Optional[str] = None,
) -> str:
    """Fill USER_PROMPT_TEMPLATE for one request.

    Args:
        context_bundle: Output of build_context_bundle().
        user_context: Free text from ``diffnote --context``.
        commit_style: Defaults to the configured style.
        chunk_note: Defaults to the note matching the bundle's chunk markers.
    """
    style = commit_style or _config.COMMIT_STYLE
    return USER_PROMPT_TEMPLATE.format(
        style_rules=COMMIT_STYLE_RULES[style],
        chunk_note=build_chunk_note(context_bundle) if chunk_note is None else chunk_note,
        author_context=build_author_context(user_context),
        context_bundle=context_bundle,
    )


def chat_messages(user_prompt: str) -> list[dict]:
    """System plus user turn in the role/content shape most chat APIs take."""
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": user_prompt},
    ]


class BaseLLMProvider(ABC):
    """One provider, one model, one attempt per generate() call.

    Subclasses implement _complete() with their SDK. Everything around it
    (key lookup, prompt building, error wrapping, JSON validation) happens
    here. Retries belong to diffnote.llm.agenerate_commit_json, so SDK-level
    retries should be switched off where the client allows it.
    """

    #: Name used in error messages and in ``diffnote config set-key``
    display_name = "LLM"
    provider: Optional[LLMProvider] = None
    #: Model used when none is passed and this is not the configured provider
    default_model: Optional[str] = None

    def __init__(self, model: Optional[str] = None):
        self.model = model or self._fallback_model()

    def _fallback_model(self) -> str:
        # The configured model belongs to the configured provider only
        if self.provider is _config.ACTIVE_PROVIDER or not self.default_model:
            return _config.ACTIVE_MODEL
        return self.default_model

    @property
    def api_key_env_var(self) -> str:
        return get_api_key_env_var(self.provider)

    def get_api_key(self) -> str:
        """API key from the environment or ~/.diffnote/credentials.

        Raises:
            MissingAPIKeyError: Neither source has it.
        """
        return self._get_api_key_with_fallback(self.api_key_env_var, self.display_name)

    def _get_api_key_with_fallback(self, env_var_name: str, provider_name: str) -> str:
        from_env = os.getenv(env_var_name)
        if from_env:
            return from_env

        # Lazy so that building a provider never touches ~/.diffnote
        from diffnote.global_config import get_credential

        stored = get_credential(env_var_name)
        if stored:
            return stored

        raise MissingAPIKeyError(
            f"{provider_name} API key not found. Set it using:\n"
            f"  1. Environment variable: export {env_var_name}=your_key_here\n"
            f"  2. Run: diffnote config set-key {provider_name.lower()}\n"
            f"  3. Manually add to ~/.diffnote/credentials"
        )

    def build_user_prompt(self, context_bundle: str, user_context: Optional[str] = None) -> str:
        return build_user_prompt(context_bundle, user_context)

    @abstractmethod
    def _complete(self, api_key: str, user_prompt: str) -> Completion:
        """Send SYSTEM_PROMPT and user_prompt once and return the reply.

        SDK exceptions may propagate; generate() wraps them. Raise LLMError
        directly for replies that arrived but are unusable.
        """

    def generate(self, context_bundle: str, user_context: Optional[str] = None) -> LLMResult:
        """Ask the model for a commit message describing context_bundle.

        user_context is the author's free-text note, passed into the prompt.

        Raises:
            MissingAPIKeyError: No API key is available.
            JSONParseError: The reply is not the expected JSON object.
            LLMError: The call failed or the reply was empty.
        """
        api_key = self.get_api_key()
        user_prompt = self.build_user_prompt(context_bundle, user_context)
        try:
            completion = self._complete(api_key, user_prompt)
        except LLMError:
            raise
        except Exception as e:
            raise self._wrap_error(e) from e
        return self._build_result(completion.text, completion.input_tokens, completion.output_tokens)

    def _wrap_error(self, error: Exception) -> LLMError:
        return wrap_provider_error(self.display_name, error)

    def _build_result(self, raw_response: str, input_tokens: int, output_tokens: int) -> LLMResult:
        if not raw_response or not raw_response.strip():
            raise LLMError(f"{self.display_name} returned an empty response")

        commit_json = validate_commit_json(parse_json_response(raw_response), raw_response)
        return LLMResult(
            commit_json=commit_json,
            model=self.model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            raw_response=raw_response,
        )


__all__ = [
    "BaseLLMProvider",
    "Completion",
    "LLMResult",
    "LLMError",
    "MissingAPIKeyError",
    "JSONParseError",
    "SYSTEM_PROMPT",
    "USER_PROMPT_TEMPLATE",
    "COMMIT_STYLE_RULES",
    "build_author_context",
    "build_chunk_note",
    "build_user_prompt",
    "chat_messages",
]
