"""Token estimation for diffs and prompts.

The estimator is built once at startup with load_estimator() and handed to the
diff parser and chunker. Construction failure raises TokenizerError; there is
no character-count fallback, since every budget decision depends on the count.
"""

import logging

import tiktoken

from diffnote.config import DEFAULT_ENCODING

logger = logging.getLogger(__name__)


class TokenizerError(Exception):
    """Raised when the tokenizer cannot be initialized."""

    pass


class TokenEstimator:
    """Deterministic token counter backed by a single tokenizer instance.

    The wrapped encoding is only read after construction, so one estimator can
    be shared between threads.
    """

    def __init__(self, encoding):
        """Wrap an encoding object exposing encode(text) -> list[int]."""
        self._encoding = encoding
        # tiktoken refuses special-token text under encode(); diffs may contain it
        self._encode = getattr(encoding, "encode_ordinary", encoding.encode)

    @property
    def name(self) -> str:
        return getattr(self._encoding, "name", type(self._encoding).__name__)

    def estimate_tokens(self, text: str) -> int:
        """Return the number of tokens in text."""
        if not text:
            return 0
        return len(self._encode(text))


def load_estimator(encoding_name: str = DEFAULT_ENCODING) -> TokenEstimator:
    """Build a TokenEstimator for a tiktoken encoding.

    Args:
        encoding_name: tiktoken encoding name (cl100k_base by default).

    Returns:
        A ready-to-use TokenEstimator.

    Raises:
        TokenizerError: If the encoding cannot be loaded.
    """
    try:
        encoding = tiktoken.get_encoding(encoding_name)
    except Exception as e:
        raise TokenizerError(f"Failed to initialize tokenizer '{encoding_name}': {e}") from e

    logger.debug("Loaded tokenizer %s", encoding_name)
    return TokenEstimator(encoding)
