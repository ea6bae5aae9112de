"""Google Gemini via the google-genai SDK."""

from google import genai
from google.genai import types

import diffnote.config as _config
from diffnote.config import LLMProvider
from diffnote.llm.base import SYSTEM_PROMPT, BaseLLMProvider, Completion, LLMError

# Models that spend part of max_output_tokens on hidden reasoning
THINKING_MODELS = [
    "gemini-2.5-flash",
    "gemini-2.5-pro",
    "gemini-2.0-flash-thinking",
]

THINKING_TOKEN_MULTIPLIER = 3


class GoogleProvider(BaseLLMProvider):
    """Gemini models.

    Unlike the other SDKs, a blocked or truncated reply is not an exception
    here, so finish_reason is checked explicitly.
    """

    display_name = "Google"
    provider = LLMProvider.GOOGLE
    default_model = "gemini-2.0-flash"

    def _is_thinking_model(self) -> bool:
        name = self.model.lower()
        return any(thinking in name for thinking in THINKING_MODELS)

    def _output_token_limit(self) -> int:
        if self._is_thinking_model():
            return _config.MAX_TOKENS * THINKING_TOKEN_MULTIPLIER
        return _config.MAX_TOKENS

    def _complete(self, api_key: str, user_prompt: str) -> Completion:
        client = genai.Client(api_key=api_key)
        response = client.models.generate_content(
            model=self.model,
            contents=user_prompt,
            config=types.GenerateContentConfig(
                system_instruction=SYSTEM_PROMPT,
                max_output_tokens=self._output_token_limit(),
                temperature=_config.TEMPERATURE,
            ),
        )

        if not response.candidates:
            raise LLMError("Google Gemini returned no candidates in response")
        finish_reason = str(getattr(response.candidates[0], "finish_reason", "") or "")
        if "SAFETY" in finish_reason:
            raise LLMError(f"Google Gemini blocked response due to safety filters: {finish_reason}")
        if "MAX_TOKENS" in finish_reason:
            raise LLMError(
                "Google Gemini stopped at the output token limit. Try raising max_tokens."
            )

        usage = getattr(response, "usage_metadata", None)
        if not usage:
            return Completion(response.text or "")
        # Thinking tokens count against the output budget
        output_tokens = (usage.candidates_token_count or 0) + (
            getattr(usage, "thoughts_token_count", 0) or 0
        )
        return Completion(response.text or "", usage.prompt_token_count or 0, output_tokens)
