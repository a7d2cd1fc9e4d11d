"""
Configuration file initialization.
"""

from pathlib import Path

import click

from promptgen.config.app import default_config_path, write_default_config

from .utils import fail


@click.command("init-config")
@click.option(
    "--path",
    "config_path",
    type=click.Path(dir_okay=False),
    help="Where to write the file (default: <home>/config.yaml)",
)
@click.option("--force", is_flag=True, help="Overwrite an existing config file")
def init_config(config_path: str | None, force: bool) -> None:
    """Write a config file populated with the default settings."""
    path = Path(config_path).expanduser() if config_path else default_config_path()

    if path.exists() and not force:
        fail(f"Config file already exists: {path} (use --force to overwrite)")

    try:
        write_default_config(path)
    except OSError as e:
        fail(f"Failed to write config file: {e}")

    click.echo(f"Wrote default configuration to {path}")
