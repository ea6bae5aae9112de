"""OpenAI chat completions, and the base for OpenAI-compatible APIs."""

from openai import OpenAI

import diffnote.config as _config
from diffnote.config import LLMProvider
from diffnote.llm.base import BaseLLMProvider, Completion, chat_messages


class OpenAIProvider(BaseLLMProvider):
    """GPT models through ``chat.completions``.

    Subclasses point _create_client at another vendor whose SDK mirrors the
    OpenAI client, and may add request options via _extra_request_kwargs.
    """

    display_name = "OpenAI"
    provider = LLMProvider.OPENAI
    default_model = "gpt-4o-mini"

    def _create_client(self, api_key: str):
        return OpenAI(api_key=api_key, max_retries=0)

    def _extra_request_kwargs(self) -> dict:
        return {}

    def _complete(self, api_key: str, user_prompt: str) -> Completion:
        response = self._create_client(api_key).chat.completions.create(
            model=self.model,
            messages=chat_messages(user_prompt),
            max_tokens=_config.MAX_TOKENS,
            temperature=_config.TEMPERATURE,
            **self._extra_request_kwargs(),
        )
        usage = response.usage
        return Completion(
            response.choices[0].message.content or "",
            usage.prompt_tokens if usage else 0,
            usage.completion_tokens if usage else 0,
        )
