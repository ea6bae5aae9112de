"""Cohere Command models via the v2 chat endpoint."""

import cohere

import diffnote.config as _config
from diffnote.config import LLMProvider
from diffnote.llm.base import BaseLLMProvider, Completion, chat_messages


class CohereProvider(BaseLLMProvider):
    display_name = "Cohere"
    provider = LLMProvider.COHERE
    default_model = "command-r-plus"

    def _complete(self, api_key: str, user_prompt: str) -> Completion:
        client = cohere.ClientV2(api_key=api_key)
        response = client.chat(
            model=self.model,
            messages=chat_messages(user_prompt),
            max_tokens=_config.MAX_TOKENS,
            temperature=_config.TEMPERATURE,
        )
        text = response.message.content[0].text

        # v2 reports billed tokens under usage.tokens, either may be missing
        tokens = response.usage.tokens if response.usage else None
        if not tokens:
            return Completion(text)
        return Completion(text, int(tokens.input_tokens or 0), int(tokens.output_tokens or 0))
