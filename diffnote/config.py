"""Configuration for diffnote LLM providers and token budgets.

Configuration is loaded from ~/.diffnote/config.yaml
Use 'diffnote config' commands to modify settings.
"""

import os
from enum import Enum


class LLMProvider(Enum):
    """Supported LLM providers."""

    ANTHROPIC = "anthropic"
    OPENAI = "openai"
    GOOGLE = "google"
    COHERE = "cohere"
    GROQ = "groq"
    OPENROUTER = "openrouter"


class CommitStyle(Enum):
    """Shape of the commit title the model is asked for."""

    PLAIN = "plain"
    CONVENTIONAL = "conventional"
    GITMOJI = "gitmoji"


# ============================================================
# DEFAULT FALLBACK VALUES
# ============================================================
# These are used only if ~/.diffnote/config.yaml doesn't exist

DEFAULT_PROVIDER = LLMProvider.ANTHROPIC
DEFAULT_MODEL = "claude-3-5-haiku-latest"
DEFAULT_MAX_TOKENS = 500
DEFAULT_TEMPERATURE = 0.3
DEFAULT_COMMIT_STYLE = CommitStyle.PLAIN

# Maximum prompt size in tokens; the diff budget is derived from this
DEFAULT_MAX_INPUT_TOKENS = 4096

# tiktoken encoding used for all budget estimates
DEFAULT_ENCODING = "cl100k_base"

# Environment override for the input token budget
MAX_INPUT_TOKENS_ENV_VAR = "DIFFNOTE_MAX_INPUT_TOKENS"


# ============================================================
# ACTIVE CONFIGURATION (loaded from global config)
# ============================================================

# Initially set to defaults - will be overridden by load_config()
ACTIVE_PROVIDER = DEFAULT_PROVIDER
ACTIVE_MODEL = DEFAULT_MODEL
MAX_TOKENS = DEFAULT_MAX_TOKENS
TEMPERATURE = DEFAULT_TEMPERATURE
MAX_INPUT_TOKENS = DEFAULT_MAX_INPUT_TOKENS
COMMIT_STYLE = DEFAULT_COMMIT_STYLE


def load_config():
    """Load configuration from the global config file and environment.

    This should be called by the CLI before using the LLM.
    """
    global ACTIVE_PROVIDER, ACTIVE_MODEL, MAX_TOKENS, TEMPERATURE, MAX_INPUT_TOKENS, COMMIT_STYLE

    # Import here to avoid circular dependency
    from diffnote import global_config

    provider = global_config.get_active_provider()
    model = global_config.get_active_model()
    max_tokens = global_config.get_max_tokens()
    temperature = global_config.get_temperature()
    max_input_tokens = global_config.get_max_input_tokens()
    commit_style = global_config.get_commit_style()

    if provider:
        ACTIVE_PROVIDER = provider
    if model:
        ACTIVE_MODEL = model
    if max_tokens is not None:
        MAX_TOKENS = max_tokens
    if temperature is not None:
        TEMPERATURE = temperature
    if max_input_tokens is not None:
        MAX_INPUT_TOKENS = max_input_tokens
    if commit_style:
        COMMIT_STYLE = commit_style

    env_value = os.getenv(MAX_INPUT_TOKENS_ENV_VAR)
    if env_value:
        try:
            MAX_INPUT_TOKENS = int(env_value)
        except ValueError:
            raise ValueError(
                f"{MAX_INPUT_TOKENS_ENV_VAR} must be an integer, got {env_value!r}"
            )


# ============================================================
# AVAILABLE MODELS PER PROVIDER
# ============================================================

AVAILABLE_MODELS = {
    LLMProvider.ANTHROPIC: [
        "claude-sonnet-4-20250514",
        "claude-3-5-sonnet-latest",
        "claude-3-5-haiku-latest",
    ],
    LLMProvider.OPENAI: [
        "gpt-4.1",
        "gpt-4.1-mini",
        "gpt-4o",
        "gpt-4o-mini",
    ],
    LLMProvider.GOOGLE: [
        "gemini-2.5-pro",
        "gemini-2.5-flash",
        "gemini-2.0-flash",
        "gemini-2.0-flash-lite",
    ],
    LLMProvider.COHERE: [
        "command-r-plus",
        "command-r",
    ],
    LLMProvider.GROQ: [
        "llama-3.3-70b-versatile",
        "llama-3.1-8b-instant",
    ],
    LLMProvider.OPENROUTER: [
        "anthropic/claude-sonnet-4",
        "openai/gpt-4o",
        "google/gemini-2.0-flash-exp",
        "meta-llama/llama-3.3-70b-instruct",
        "deepseek/deepseek-chat",
        "qwen/qwen-2.5-coder-32b-instruct",
    ],
}

# ============================================================
# API KEY ENVIRONMENT VARIABLES
# ============================================================

API_KEY_ENV_VARS = {
    LLMProvider.ANTHROPIC: "ANTHROPIC_API_KEY",
    LLMProvider.OPENAI: "OPENAI_API_KEY",
    LLMProvider.GOOGLE: "GOOGLE_API_KEY",
    LLMProvider.COHERE: "COHERE_API_KEY",
    LLMProvider.GROQ: "GROQ_API_KEY",
    LLMProvider.OPENROUTER: "OPENROUTER_API_KEY",
}


def get_api_key_env_var(provider: LLMProvider) -> str:
    """Get the environment variable name for the API key.

    Args:
        provider: The LLM provider.

    Returns:
        The environment variable name.
    """
    return API_KEY_ENV_VARS[provider]
