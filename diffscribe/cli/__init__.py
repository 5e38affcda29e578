"""CLI entry point for diffscribe.

This module provides the main CLI application that combines the generate
command and the config subcommands into a single interface.
"""

import typer

from diffscribe.cli.config import config_app
from diffscribe.cli.main import main_command

# Main application
app = typer.Typer(
    name="diffscribe",
    help="diffscribe: AI-generated commit messages from your git diff",
    add_completion=False,
)

# Add subcommand groups
app.add_typer(config_app, name="config")

# Set the main callback for default behavior
app.callback(invoke_without_command=True)(main_command)


__all__ = [
    "app",
    "config_app",
    "main_command",
]
