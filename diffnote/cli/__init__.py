"""The ``diffnote`` Typer application.

Running ``diffnote`` with no subcommand generates a message; ``init`` and
the ``config`` group manage ~/.diffnote.
"""

import typer

from diffnote.cli.config import config_app
from diffnote.cli.init import init_config
from diffnote.cli.main import main_command

app = typer.Typer(
    name="diffnote",
    help="diffnote: AI commit messages for diffs of any size",
    add_completion=False,
)

app.callback(invoke_without_command=True)(main_command)
app.command("init")(init_config)
app.add_typer(config_app, name="config")

__all__ = ["app", "config_app", "init_config", "main_command"]
