"""OpenRouter: many vendors' models behind one OpenAI-compatible endpoint."""

from openai import OpenAI

from diffnote.config import LLMProvider
from diffnote.llm.openai_provider import OpenAIProvider

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"

# Attribution headers OpenRouter shows on its usage pages
OPENROUTER_HEADERS = {
    "HTTP-Referer": "https://github.com/diffnote",
    "X-Title": "diffnote",
}


class OpenRouterProvider(OpenAIProvider):
    """Model names are ``vendor/model``, e.g. ``openai/gpt-4o``."""

    display_name = "OpenRouter"
    provider = LLMProvider.OPENROUTER
    default_model = "anthropic/claude-sonnet-4"

    def _create_client(self, api_key: str) -> OpenAI:
        return OpenAI(api_key=api_key, base_url=OPENROUTER_BASE_URL, max_retries=0)

    def _extra_request_kwargs(self) -> dict:
        return {"extra_headers": dict(OPENROUTER_HEADERS)}
