"""
Shell completion script output.
"""

import click
from click.shell_completion import get_completion_class

SUPPORTED_SHELLS = ("bash", "zsh", "fish")


@click.command("completion")
@click.argument("shell", type=click.Choice(SUPPORTED_SHELLS))
@click.pass_context
def completion(ctx: click.Context, shell: str) -> None:
    """Output shell completion script (bash, zsh or fish).

    \b
    Enable it with, for example:
        eval "$(promptgen completion bash)"
    """
    root = ctx.find_root()
    prog_name = root.info_name or "promptgen"
    complete_var = f"_{prog_name.replace('-', '_').upper()}_COMPLETE"

    comp_cls = get_completion_class(shell)
    if comp_cls is None:
        click.echo(f"Unsupported shell: {shell}", err=True)
        raise SystemExit(1)

    comp = comp_cls(root.command, {}, prog_name, complete_var)
    click.echo(comp.source())
