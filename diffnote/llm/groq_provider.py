"""Groq-hosted open models. The groq SDK mirrors the OpenAI client."""

from groq import Groq

from diffnote.config import LLMProvider
from diffnote.llm.openai_provider import OpenAIProvider


class GroqProvider(OpenAIProvider):
    display_name = "Groq"
    provider = LLMProvider.GROQ
    default_model = "llama-3.3-70b-versatile"

    def _create_client(self, api_key: str) -> Groq:
        return Groq(api_key=api_key, max_retries=0)
