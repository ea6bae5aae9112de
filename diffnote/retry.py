"""Retry with exponential backoff for LLM provider calls.

Failures are sorted into three classes:
- RETRYABLE: rate limits, 5xx responses, timeouts and transport errors
- PERMANENT: auth failures, quota errors, bad requests, unknown models
- UNKNOWN: anything else, handled like PERMANENT

An ``error_class`` attribute on the exception decides outright. Otherwise
permanent text markers come next, so a 429 whose body says
``insufficient_quota`` is not retried. Then the HTTP ``status_code``, and
last the retryable text markers, which cover transport errors that carry no
status at all.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Iterator, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ErrorClass(Enum):
    """How a failed attempt should be treated."""

    RETRYABLE = "retryable"
    PERMANENT = "permanent"
    UNKNOWN = "unknown"


class RetryCancelledError(Exception):
    """Raised when a retry loop is cancelled through its cancel event."""

    pass


RETRYABLE_MARKERS = (
    "429",
    "rate_limit",
    "rate limit",
    "500",
    "502",
    "503",
    "504",
    "timeout",
    "connection",
    "network",
    "dns",
    "overloaded",
)

PERMANENT_MARKERS = (
    "401",
    "403",
    "invalid_api_key",
    "insufficient_quota",
    "quota exceeded",
    "invalid request",
    "model not found",
    "400",
)

_RETRYABLE_STATUS_CODES = {408, 429}
_PERMANENT_STATUS_CODES = {400, 401, 403, 404}


@dataclass(frozen=True)
class RetryPolicy:
    """Exponential backoff settings, in seconds."""

    initial_interval: float = 0.5
    max_interval: float = 30.0
    multiplier: float = 2.0
    max_elapsed_time: float = 120.0

    def intervals(self) -> Iterator[float]:
        """Yield backoff delays: non-decreasing, capped at max_interval."""
        interval = self.initial_interval
        while True:
            yield min(interval, self.max_interval)
            interval = min(interval * self.multiplier, self.max_interval)


def is_retryable_error(error: BaseException) -> bool:
    """Check the error text for transient-failure markers."""
    message = str(error).lower()
    return any(marker in message for marker in RETRYABLE_MARKERS)


def is_permanent_error(error: BaseException) -> bool:
    """Check the error text for markers of failures that will not go away."""
    message = str(error).lower()
    return any(marker in message for marker in PERMANENT_MARKERS)


def _classify_status_code(status_code: int) -> Optional[ErrorClass]:
    if status_code in _RETRYABLE_STATUS_CODES or 500 <= status_code <= 599:
        return ErrorClass.RETRYABLE
    if status_code in _PERMANENT_STATUS_CODES:
        return ErrorClass.PERMANENT
    return None


def classify_error(error: BaseException) -> ErrorClass:
    """Classify a failed attempt.

    Args:
        error: The exception raised by the attempt.

    Returns:
        The ErrorClass that decides whether to retry.
    """
    hinted = getattr(error, "error_class", None)
    if isinstance(hinted, ErrorClass):
        return hinted

    # Permanent markers win over status and retryable text, e.g. a 429
    # carrying insufficient_quota or "401 ... connection reset"
    if is_permanent_error(error):
        return ErrorClass.PERMANENT

    status_code = getattr(error, "status_code", None)
    if isinstance(status_code, int) and not isinstance(status_code, bool):
        from_status = _classify_status_code(status_code)
        if from_status is not None:
            return from_status

    if is_retryable_error(error):
        return ErrorClass.RETRYABLE
    return ErrorClass.UNKNOWN


def _now() -> float:
    return time.monotonic()


async def _backoff_sleep(delay: float, cancel_event: Optional[asyncio.Event]) -> bool:
    """Sleep for delay seconds. Returns True if cancel_event fired first."""
    if cancel_event is None:
        await asyncio.sleep(delay)
        return False

    try:
        await asyncio.wait_for(cancel_event.wait(), timeout=delay)
    except asyncio.TimeoutError:
        return False
    return True


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    policy: Optional[RetryPolicy] = None,
    *,
    cancel_event: Optional[asyncio.Event] = None,
) -> T:
    """Run an async operation, retrying transient failures with backoff.

    Attempts run strictly one after another. A permanent or unclassified
    failure is re-raised immediately. A retryable failure is retried after the
    next backoff delay until the total elapsed time would pass
    policy.max_elapsed_time, at which point the last failure is re-raised.

    Args:
        operation: Zero-argument callable returning a fresh awaitable per attempt.
        policy: Backoff settings. Defaults to RetryPolicy().
        cancel_event: Optional event that stops the loop before the next
            attempt or during a backoff sleep.

    Returns:
        The operation's result.

    Raises:
        Exception: The last failure raised by the operation.
        RetryCancelledError: If cancel_event is set.
    """
    policy = policy or RetryPolicy()
    intervals = policy.intervals()
    started = _now()
    attempt = 0

    while True:
        if cancel_event is not None and cancel_event.is_set():
            raise RetryCancelledError(f"Retry cancelled before attempt {attempt + 1}")

        attempt += 1
        try:
            result = await operation()
        except Exception as error:
            error_class = classify_error(error)
            if error_class is not ErrorClass.RETRYABLE:
                logger.debug(
                    "Attempt %d failed with %s error, not retrying: %s",
                    attempt, error_class.value, error,
                )
                raise

            delay = next(intervals)
            elapsed = _now() - started
            if elapsed + delay > policy.max_elapsed_time:
                logger.warning(
                    "Giving up after %d attempts in %.1fs: %s", attempt, elapsed, error
                )
                raise

            logger.warning(
                "Attempt %d failed with retryable error: %s. Retrying in %.1fs",
                attempt, error, delay,
            )
            if await _backoff_sleep(delay, cancel_event):
                raise RetryCancelledError(
                    f"Retry cancelled after {attempt} attempts"
                ) from error
            continue

        if attempt > 1:
            logger.debug("Attempt %d succeeded", attempt)
        return result
