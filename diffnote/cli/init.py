"""CLI command for initializing diffnote configuration."""

import typer

from diffnote import global_config
from diffnote.global_config import GlobalConfigError


def init_config() -> None:
    """Write ~/.diffnote/config.yaml with default settings."""
    try:
        created = global_config.initialize_default_config()
    except GlobalConfigError as e:
        typer.echo(f"Error saving configuration: {e}", err=True)
        raise typer.Exit(1)

    config_file = global_config.get_config_file_path()
    if not created:
        typer.echo(f"Configuration already exists at {config_file}")
        return

    typer.echo(f"✓ Default configuration written to {config_file}")
    typer.echo()
    typer.echo("Next steps:")
    typer.echo("  diffnote config set-key <provider>       Store an API key")
    typer.echo("  diffnote config set-provider <provider>  Pick a provider and model")
