"""Anthropic Claude via the Messages API."""

from anthropic import Anthropic

import diffnote.config as _config
from diffnote.config import LLMProvider
from diffnote.llm.base import SYSTEM_PROMPT, BaseLLMProvider, Completion


class AnthropicProvider(BaseLLMProvider):
    """Claude models through the Messages API."""

    display_name = "Anthropic"
    provider = LLMProvider.ANTHROPIC
    default_model = _config.DEFAULT_MODEL

    def _complete(self, api_key: str, user_prompt: str) -> Completion:
        client = Anthropic(api_key=api_key, max_retries=0)
        message = client.messages.create(
            model=self.model,
            system=SYSTEM_PROMPT,
            messages=[{"role": "user", "content": user_prompt}],
            max_tokens=_config.MAX_TOKENS,
            temperature=_config.TEMPERATURE,
        )
        # Only text blocks carry the answer
        text = "".join(
            block.text for block in message.content if getattr(block, "type", "") == "text"
        )
        return Completion(text, message.usage.input_tokens, message.usage.output_tokens)
