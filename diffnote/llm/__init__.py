"""Commit message generation through pluggable LLM providers.

get_provider() picks the provider and model from diffnote.config (which
load_config() fills from ~/.diffnote/config.yaml). A provider call is a
single attempt; agenerate_commit_json() layers diffnote.retry on top.
"""

import asyncio
import importlib
from typing import Optional

from dotenv import load_dotenv

import diffnote.config as _config
from diffnote.config import LLMProvider
from diffnote.llm.base import (
    BaseLLMProvider,
    JSONParseError,
    LLMError,
    LLMResult,
    MissingAPIKeyError,
)
from diffnote.retry import RetryPolicy, retry_async

# API keys in a project .env count as environment variables
load_dotenv()

# Imported on demand so that only the chosen vendor SDK gets loaded
_PROVIDER_CLASSES = {
    LLMProvider.ANTHROPIC: ("diffnote.llm.anthropic_provider", "AnthropicProvider"),
    LLMProvider.OPENAI: ("diffnote.llm.openai_provider", "OpenAIProvider"),
    LLMProvider.GOOGLE: ("diffnote.llm.google_provider", "GoogleProvider"),
    LLMProvider.COHERE: ("diffnote.llm.cohere_provider", "CohereProvider"),
    LLMProvider.GROQ: ("diffnote.llm.groq_provider", "GroqProvider"),
    LLMProvider.OPENROUTER: ("diffnote.llm.openrouter_provider", "OpenRouterProvider"),
}


def get_provider(
    provider: Optional[LLMProvider] = None,
    model: Optional[str] = None,
) -> BaseLLMProvider:
    """Instantiate a provider; omitted arguments fall back to the active config.

    Raises:
        ValueError: provider is not one of LLMProvider.
    """
    provider = provider or _config.ACTIVE_PROVIDER
    try:
        module_name, class_name = _PROVIDER_CLASSES[provider]
    except (KeyError, TypeError):
        raise ValueError(f"Unsupported provider: {provider}")

    provider_class = getattr(importlib.import_module(module_name), class_name)
    return provider_class(model=model)


def generate_commit_json(context_bundle: str, user_context: Optional[str] = None) -> LLMResult:
    """One blocking attempt with the active provider, no retries."""
    return get_provider().generate(context_bundle, user_context=user_context)


async def agenerate_commit_json(
    context_bundle: str,
    provider: Optional[BaseLLMProvider] = None,
    policy: Optional[RetryPolicy] = None,
    cancel_event: Optional[asyncio.Event] = None,
    user_context: Optional[str] = None,
) -> LLMResult:
    """Generate a commit message, retrying rate limits and transient failures.

    Each attempt runs the blocking SDK call in a worker thread, leaving the
    event loop free to notice cancel_event while backing off.

    Args:
        context_bundle: Output of build_context_bundle().
        provider: Defaults to get_provider().
        policy: Backoff settings, RetryPolicy() when omitted.
        cancel_event: Setting it stops further attempts.
        user_context: Author's note from ``diffnote --context``.

    Raises:
        LLMError: A permanent failure, or the last transient one once the
            retry window is used up.
        RetryCancelledError: cancel_event was set.
    """
    provider = provider or get_provider()
    return await retry_async(
        lambda: asyncio.to_thread(provider.generate, context_bundle, user_context=user_context),
        policy,
        cancel_event=cancel_event,
    )


__all__ = [
    "BaseLLMProvider",
    "LLMError",
    "MissingAPIKeyError",
    "JSONParseError",
    "LLMResult",
    "get_provider",
    "generate_commit_json",
    "agenerate_commit_json",
]
