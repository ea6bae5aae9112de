"""``diffnote config ...``: inspect and edit ~/.diffnote."""

from typing import NoReturn, Optional

import typer

from diffnote import global_config
from diffnote.cli.utils import valid_providers_text
from diffnote.config import (
    API_KEY_ENV_VARS,
    AVAILABLE_MODELS,
    DEFAULT_COMMIT_STYLE,
    DEFAULT_MAX_INPUT_TOKENS,
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURE,
    CommitStyle,
    LLMProvider,
)
from diffnote.global_config import GlobalConfigError

config_app = typer.Typer(
    name="config",
    help="Manage global diffnote configuration in ~/.diffnote/",
    add_completion=False,
)


def _fail(message: str) -> NoReturn:
    typer.echo(message, err=True)
    raise typer.Exit(1)


def _parse_provider(provider: str) -> LLMProvider:
    try:
        return LLMProvider(provider.lower())
    except ValueError:
        typer.echo(f"Valid providers: {valid_providers_text()}")
        _fail(f"Invalid provider: {provider}")


def _mask_key(api_key: str) -> str:
    if len(api_key) <= 12:
        return "***"
    return f"{api_key[:8]}...{api_key[-4:]}"


def _echo_bullets(items, indent: str = "  ") -> None:
    for item in items:
        typer.echo(f"{indent}• {item}")


def _describe_api_key(provider_name: str) -> str:
    try:
        provider = LLMProvider(provider_name)
    except ValueError:
        return f"Unknown provider in config: {provider_name}"
    env_var = API_KEY_ENV_VARS[provider]
    stored = global_config.get_credential(env_var)
    return f"API Key ({env_var}): {_mask_key(stored) if stored else 'not set'}"


@config_app.command("show")
def config_show() -> None:
    """Print the stored settings with the API key masked."""
    try:
        if not global_config.is_configured():
            typer.echo("No configuration found. Run 'diffnote init' to set up.")
            return
        config = global_config.load_global_config()

        rows = [
            ("Provider", config.get("provider", "not set")),
            ("Model", config.get("model", "not set")),
            ("Max Tokens", config.get("max_tokens", DEFAULT_MAX_TOKENS)),
            ("Max Input Tokens", config.get("max_input_tokens", DEFAULT_MAX_INPUT_TOKENS)),
            ("Temperature", config.get("temperature", DEFAULT_TEMPERATURE)),
            ("Commit Style", config.get("commit_style", DEFAULT_COMMIT_STYLE.value)),
        ]
        typer.echo("Current diffnote configuration (~/.diffnote/config.yaml):\n")
        for label, value in rows:
            typer.echo(f"  {label}: {value}")

        ignore = config.get("default_ignore") or []
        if ignore:
            typer.echo("\n  Default Ignore Patterns:")
            for pattern in ignore:
                typer.echo(f"    - {pattern}")

        if config.get("provider"):
            typer.echo(f"\n  {_describe_api_key(config['provider'])}")
    except GlobalConfigError as e:
        _fail(f"Error reading configuration: {e}")


@config_app.command("set-key")
def config_set_key(
    provider: str = typer.Argument(..., help="Provider name, e.g. anthropic or openai"),
) -> None:
    """Store an API key in ~/.diffnote/credentials."""
    llm_provider = _parse_provider(provider)

    api_key = typer.prompt(f"Enter your {llm_provider.value} API key", hide_input=True)
    try:
        global_config.save_credential(API_KEY_ENV_VARS[llm_provider], api_key.strip())
    except GlobalConfigError as e:
        _fail(f"Error: {e}")

    typer.echo(f"✓ API key saved for {llm_provider.value}")


def _choose_model(provider: LLMProvider) -> str:
    models = AVAILABLE_MODELS[provider]
    typer.echo(f"Available models for {provider.value}:")
    for number, name in enumerate(models, 1):
        typer.echo(f"  {number}. {name}")

    choice = typer.prompt(f"Select a model (1-{len(models)})", type=int, default=1)
    if not 1 <= choice <= len(models):
        _fail("Invalid choice. Aborting.")
    return models[choice - 1]


@config_app.command("set-provider")
def config_set_provider(
    provider: str = typer.Argument(..., help="Provider name, e.g. anthropic or openai"),
    model: Optional[str] = typer.Option(
        None, "--model", "-m", help="Model name; prompts with the known models when omitted"
    ),
) -> None:
    """Choose the provider and model used for generation."""
    llm_provider = _parse_provider(provider)

    if not model:
        model = _choose_model(llm_provider)
    elif model not in AVAILABLE_MODELS[llm_provider]:
        typer.echo(f"Warning: {model} is not a known {llm_provider.value} model")
        if not typer.confirm("Use it anyway?", default=False):
            raise typer.Exit(0)

    try:
        global_config.set_provider_and_model(llm_provider, model)
    except GlobalConfigError as e:
        _fail(f"Error: {e}")

    typer.echo(f"✓ Provider set to: {llm_provider.value}")
    typer.echo(f"✓ Model set to: {model}")


@config_app.command("set-max-input-tokens")
def config_set_max_input_tokens(
    max_input_tokens: int = typer.Argument(..., help="Maximum prompt size in tokens"),
) -> None:
    """Set the token budget for the whole prompt."""
    try:
        global_config.set_max_input_tokens(max_input_tokens)
    except GlobalConfigError as e:
        _fail(f"Error: {e}")
    typer.echo(f"✓ Max input tokens set to: {max_input_tokens}")


@config_app.command("set-commit-style")
def config_set_commit_style(
    style: str = typer.Argument(..., help="plain, conventional or gitmoji"),
) -> None:
    """Choose the title format the LLM is asked to follow."""
    try:
        commit_style = CommitStyle(style.lower())
    except ValueError:
        _fail(f"Invalid commit style: {style}. Use one of: {', '.join(s.value for s in CommitStyle)}")

    try:
        global_config.set_commit_style(commit_style)
    except GlobalConfigError as e:
        _fail(f"Error: {e}")
    typer.echo(f"✓ Commit style set to: {commit_style.value}")


@config_app.command("list-providers")
def config_list_providers() -> None:
    """List the supported providers."""
    typer.echo("Available LLM providers:\n")
    _echo_bullets(p.value for p in LLMProvider)
    typer.echo("\nUse 'diffnote config list-models <provider>' to see available models.")


@config_app.command("list-models")
def config_list_models(
    provider: Optional[str] = typer.Argument(None, help="Limit the listing to one provider"),
) -> None:
    """List known models for one provider, or for all of them."""
    if provider:
        selected = _parse_provider(provider)
        typer.echo(f"Available models for {selected.value}:\n")
        _echo_bullets(AVAILABLE_MODELS[selected])
        return

    for llm_provider in LLMProvider:
        typer.echo(f"{llm_provider.value}:")
        _echo_bullets(AVAILABLE_MODELS[llm_provider])
        typer.echo()
