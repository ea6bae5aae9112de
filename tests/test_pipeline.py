"""Tests for diffnote.pipeline module."""

import asyncio

from diffnote.formatters import CommitMessageJSON
from diffnote.llm import LLMResult
from diffnote.llm.base import (
    CHUNK_NOTE_MULTIPLE,
    SYSTEM_PROMPT,
    build_author_context,
    build_user_prompt,
)
from diffnote.pipeline import (
    CONTEXT_RESERVE_TOKENS,
    MIN_DIFF_BUDGET,
    PreparedContext,
    compute_diff_budget,
    generate_message,
    prepare_context,
)
from diffnote.tokens import TokenEstimator


class CharEncoding:
    """One token per character, so digit counts matter."""

    def encode(self, text):
        return list(text)


def _bundle(diff):
    return f"[BRANCH]\nmain\n\n[STAGED_DIFF]\n{diff}"


class TestComputeDiffBudget:
    """Tests for compute_diff_budget."""

    def test_scales_with_max_input_tokens(self, estimator):
        assert compute_diff_budget(10_000, estimator) - compute_diff_budget(9_000, estimator) == 1_000

    def test_leaves_room_for_prompt(self, estimator):
        assert compute_diff_budget(10_000, estimator) < 10_000

    def test_floor(self, estimator):
        assert compute_diff_budget(10, estimator) == MIN_DIFF_BUDGET

    def test_reserves_room_for_multi_digit_chunk_counts(self):
        by_char = TokenEstimator(CharEncoding())
        reserved = 10_000 - CONTEXT_RESERVE_TOKENS - compute_diff_budget(10_000, by_char)

        scaffolding = by_char.estimate_tokens(SYSTEM_PROMPT) + by_char.estimate_tokens(
            build_user_prompt("", chunk_note=CHUNK_NOTE_MULTIPLE.format(count=120))
        )

        assert scaffolding <= reserved

    def test_author_context_shrinks_budget(self, estimator):
        note = "Part of the login rework"

        with_note = compute_diff_budget(10_000, estimator, user_context=note)

        assert with_note == compute_diff_budget(10_000, estimator) - estimator.estimate_tokens(
            build_author_context(note)
        )


class TestPrepareContext:
    """Tests for prepare_context."""

    def test_small_diff_passes_through(self, mocker, estimator, sample_diff):
        mocker.patch("diffnote.pipeline.get_staged_diff", return_value=sample_diff)
        mocker.patch("diffnote.pipeline.build_context_bundle", side_effect=_bundle)

        prepared = prepare_context(estimator, 100_000)

        assert prepared.bounded_diff == sample_diff
        assert prepared.context_bundle == _bundle(sample_diff)
        assert prepared.diff_tokens == estimator.estimate_tokens(sample_diff)
        assert not prepared.was_chunked
        assert not prepared.over_budget

    def test_large_diff_is_chunked(self, mocker, estimator, make_file_section):
        diff = make_file_section("a.py", lines_per_hunk=300) + make_file_section("b.py", lines_per_hunk=300)
        mocker.patch("diffnote.pipeline.get_staged_diff", return_value=diff)
        mocker.patch("diffnote.pipeline.build_context_bundle", side_effect=_bundle)

        prepared = prepare_context(estimator, 10)

        assert prepared.budget == MIN_DIFF_BUDGET
        assert prepared.over_budget
        assert prepared.was_chunked
        assert "---CHUNK 2 OF MULTIPLE FILES---" in prepared.context_bundle

    def test_passes_ignore_patterns(self, mocker, estimator):
        get_diff = mocker.patch("diffnote.pipeline.get_staged_diff", return_value="x\n")
        mocker.patch("diffnote.pipeline.build_context_bundle", side_effect=_bundle)

        prepare_context(estimator, 4096, ignore_patterns=["*.snap"])

        get_diff.assert_called_once_with(["*.snap"])


class TestGenerateMessage:
    """Tests for generate_message."""

    def test_delegates_to_retrying_generator(self, mocker):
        result = LLMResult(
            commit_json=CommitMessageJSON(title="Add thing"),
            model="m",
            input_tokens=1,
            output_tokens=1,
        )
        agenerate = mocker.patch(
            "diffnote.pipeline.agenerate_commit_json",
            new=mocker.AsyncMock(return_value=result),
        )
        prepared = PreparedContext(diff_tokens=1, budget=10, bounded_diff="d", context_bundle="bundle")

        assert asyncio.run(generate_message(prepared)) is result
        agenerate.assert_awaited_once_with(
            "bundle", provider=None, policy=None, cancel_event=None, user_context=None
        )

    def test_forwards_author_context(self, mocker, estimator):
        mocker.patch("diffnote.pipeline.get_staged_diff", return_value="x\n")
        mocker.patch("diffnote.pipeline.build_context_bundle", side_effect=_bundle)
        agenerate = mocker.patch("diffnote.pipeline.agenerate_commit_json", new=mocker.AsyncMock())

        prepared = prepare_context(estimator, 4096, user_context="Fixes #42")
        asyncio.run(generate_message(prepared))

        assert prepared.user_context == "Fixes #42"
        assert agenerate.await_args.kwargs["user_context"] == "Fixes #42"
