"""Errors raised by the LLM layer.

Each carries what diffnote.retry.classify_error looks at first: a fixed
``error_class`` for failures that are permanent by nature, and the HTTP
``status_code`` of the failed call when the SDK exposed one.
"""

from typing import Optional

from diffnote.retry import ErrorClass


class LLMError(Exception):
    """A provider call failed or returned something unusable."""

    error_class: Optional[ErrorClass] = None

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class MissingAPIKeyError(LLMError):
    """No API key in the environment or the credentials file."""

    error_class = ErrorClass.PERMANENT


class JSONParseError(LLMError):
    """The reply is not a JSON object matching CommitMessageJSON."""

    error_class = ErrorClass.PERMANENT


def _int_status(error: Exception) -> Optional[int]:
    status = getattr(error, "status_code", None)
    if isinstance(status, bool) or not isinstance(status, int):
        return None
    return status


def wrap_provider_error(provider_name: str, error: Exception) -> LLMError:
    """LLMError for an SDK exception; LLMErrors are returned unchanged.

    The exception type goes into the message because names such as
    APITimeoutError or APIConnectionError are what the retry classifier
    recognizes when the SDK text itself is terse.
    """
    if isinstance(error, LLMError):
        return error
    return LLMError(
        f"{provider_name} API call failed ({type(error).__name__}): {error}",
        status_code=_int_status(error),
    )
