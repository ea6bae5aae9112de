"""The default ``diffnote`` command: staged diff in, commit message out."""

import asyncio
import logging
from typing import NoReturn, Optional

import typer

from diffnote import config as diffnote_config
from diffnote.cli.utils import setup_logging
from diffnote.formatters import render_commit_message
from diffnote.git import GitError, commit_with_message
from diffnote.global_config import GlobalConfigError
from diffnote.llm import LLMError
from diffnote.llm.base import SYSTEM_PROMPT, build_user_prompt
from diffnote.pipeline import PreparedContext, generate_message, prepare_context
from diffnote.retry import RetryCancelledError
from diffnote.tokens import TokenizerError, load_estimator

logger = logging.getLogger(__name__)

# Failures reported as one "Error: ..." line and exit status 1
_REPORTED_ERRORS = (
    GitError,
    LLMError,
    RetryCancelledError,
    GlobalConfigError,
    TokenizerError,
)


def _exit_with_error(error: Exception) -> NoReturn:
    typer.echo(f"Error: {error}", err=True)
    raise typer.Exit(1)


def _print_prompt(prepared: PreparedContext) -> None:
    typer.echo("[SYSTEM]")
    typer.echo(SYSTEM_PROMPT)
    typer.echo()
    typer.echo("[USER]")
    typer.echo(build_user_prompt(prepared.context_bundle, prepared.user_context))


def _run(budget_tokens: int, user_context: Optional[str], show_prompt: bool, commit: bool) -> None:
    estimator = load_estimator()

    typer.echo("Collecting git context...", err=True)
    prepared = prepare_context(estimator, budget_tokens, user_context=user_context)
    if prepared.over_budget:
        typer.echo(
            f"The diff is too large ({prepared.diff_tokens} tokens). Splitting into chunks...",
            err=True,
        )

    if show_prompt:
        _print_prompt(prepared)
        return

    typer.echo("Generating commit message...", err=True)
    result = asyncio.run(generate_message(prepared))
    logger.debug(
        "Model %s used %d input and %d output tokens",
        result.model, result.input_tokens, result.output_tokens,
    )

    message = render_commit_message(result.commit_json)
    typer.echo(message)

    if commit:
        typer.echo(commit_with_message(message), err=True)


def main_command(
    ctx: typer.Context,
    max_input_tokens: Optional[int] = typer.Option(
        None,
        "--max-input-tokens",
        min=1,
        help="Maximum prompt size in tokens (overrides config and DIFFNOTE_MAX_INPUT_TOKENS)",
    ),
    context: Optional[str] = typer.Option(
        None, "--context", "-c", help="Extra notes for the LLM, e.g. why the change was made"
    ),
    show_prompt: bool = typer.Option(
        False, "--show-prompt", help="Print the prompt that would be sent to the LLM and exit"
    ),
    commit: bool = typer.Option(
        False, "--commit", help="Commit the staged changes with the generated message"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging on stderr"),
) -> None:
    """Generate a commit message for the staged changes, chunking large diffs to fit."""
    if ctx.invoked_subcommand is not None:
        return

    setup_logging(verbose)

    try:
        diffnote_config.load_config()
    except (GlobalConfigError, ValueError) as e:
        _exit_with_error(e)

    try:
        _run(max_input_tokens or diffnote_config.MAX_INPUT_TOKENS, context, show_prompt, commit)
    except _REPORTED_ERRORS as e:
        _exit_with_error(e)
