"""Staged diff to commit message: budget, chunk, bundle, generate."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from diffnote.diff import chunk_diff, is_chunked
from diffnote.git import build_context_bundle, get_staged_diff
from diffnote.llm import BaseLLMProvider, LLMResult, agenerate_commit_json
from diffnote.llm.base import CHUNK_NOTE_MULTIPLE, SYSTEM_PROMPT, build_user_prompt
from diffnote.retry import RetryPolicy
from diffnote.tokens import TokenEstimator

logger = logging.getLogger(__name__)

# Room left for the [BRANCH], [FILE_CHANGES] and [LAST_5_COMMITS] sections
CONTEXT_RESERVE_TOKENS = 256

# Never hand the chunker less than this, however small max_input_tokens is
MIN_DIFF_BUDGET = 256

# Stands in for the real chunk count so the widest note is reserved
_NOTE_COUNT_PLACEHOLDER = 999


def compute_diff_budget(
    max_input_tokens: int,
    estimator: TokenEstimator,
    user_context: Optional[str] = None,
) -> int:
    """Tokens available for the staged diff inside a max_input_tokens prompt.

    Args:
        max_input_tokens: Upper bound for the whole prompt.
        estimator: Token estimator used for every budget decision.
        user_context: Author's note that will be sent with the diff.

    Returns:
        The diff budget, never below MIN_DIFF_BUDGET.
    """
    scaffolding = estimator.estimate_tokens(SYSTEM_PROMPT) + estimator.estimate_tokens(
        build_user_prompt(
            "",
            user_context,
            chunk_note=CHUNK_NOTE_MULTIPLE.format(count=_NOTE_COUNT_PLACEHOLDER),
        )
    )
    budget = max_input_tokens - scaffolding - CONTEXT_RESERVE_TOKENS
    return max(budget, MIN_DIFF_BUDGET)


@dataclass
class PreparedContext:
    """A staged diff bounded to its budget and wrapped in git context."""

    diff_tokens: int
    budget: int
    bounded_diff: str
    context_bundle: str
    user_context: Optional[str] = None

    @property
    def was_chunked(self) -> bool:
        return is_chunked(self.bounded_diff)

    @property
    def over_budget(self) -> bool:
        return self.diff_tokens > self.budget


def prepare_context(
    estimator: TokenEstimator,
    max_input_tokens: int,
    ignore_patterns: Optional[list[str]] = None,
    user_context: Optional[str] = None,
) -> PreparedContext:
    """Collect the staged diff and bound it for the prompt.

    Raises:
        NoStagedChangesError: If nothing relevant is staged.
        GitError: If a git command fails.
    """
    diff = get_staged_diff(ignore_patterns)
    diff_tokens = estimator.estimate_tokens(diff)
    budget = compute_diff_budget(max_input_tokens, estimator, user_context)

    bounded_diff = chunk_diff(diff, budget, estimator)
    logger.debug(
        "Staged diff: %d tokens, budget %d, chunked=%s",
        diff_tokens, budget, is_chunked(bounded_diff),
    )

    return PreparedContext(
        diff_tokens=diff_tokens,
        budget=budget,
        bounded_diff=bounded_diff,
        context_bundle=build_context_bundle(bounded_diff),
        user_context=user_context,
    )


async def generate_message(
    prepared: PreparedContext,
    provider: Optional[BaseLLMProvider] = None,
    policy: Optional[RetryPolicy] = None,
    cancel_event: Optional[asyncio.Event] = None,
) -> LLMResult:
    """Ask the provider for a commit message, retrying transient failures."""
    return await agenerate_commit_json(
        prepared.context_bundle,
        provider=provider,
        policy=policy,
        cancel_event=cancel_event,
        user_context=prepared.user_context,
    )
