"""
promptgen CLI entry point.
"""

import click

from promptgen import __version__
from promptgen.config.app import load_config

from .completion import completion
from .init import init_config
from .templates import (
    add,
    delete,
    generate,
    history,
    list_templates,
    repair,
    review,
    update,
    versions,
    view,
)
from .utils import CLIContext, global_overrides, setup_logging


@click.group()
@click.option(
    "--config",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to custom configuration file",
)
@click.option(
    "--templates-dir",
    type=click.Path(file_okay=False),
    help="Directory holding template records (overrides config)",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.version_option(__version__, prog_name="promptgen")
@click.pass_context
def cli(ctx: click.Context, config: str | None, templates_dir: str | None, verbose: bool) -> None:
    """promptgen - versioned prompt templates with clipboard output."""
    try:
        app_config = load_config(config, cli_overrides=global_overrides(ctx.params))
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1) from e

    setup_logging(app_config.logging)
    ctx.obj = CLIContext(config=app_config)


# Register commands
cli.add_command(add)
cli.add_command(list_templates)
cli.add_command(delete)
cli.add_command(update)
cli.add_command(generate)
cli.add_command(review)
cli.add_command(versions)
cli.add_command(view)
cli.add_command(history)
cli.add_command(repair)
cli.add_command(completion)
cli.add_command(init_config)


def main() -> None:
    """Console script entry point."""
    cli(prog_name="promptgen")
