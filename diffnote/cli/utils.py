"""Shared utility functions for CLI commands."""

import logging

from diffnote.config import LLMProvider

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(verbose: bool = False) -> None:
    """Configure root logging for a CLI run.

    Log records go to stderr so they never mix with the commit message on
    stdout. Third-party HTTP clients stay at WARNING even in verbose mode.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)

    for noisy in ("httpx", "httpcore", "urllib3"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def valid_providers_text() -> str:
    """Comma-separated provider names for help and error messages."""
    return ", ".join(provider.value for provider in LLMProvider)
