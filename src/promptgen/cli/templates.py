"""
Template management CLI commands.

add, list, delete, update, review, versions, view and repair operate on the
version chain; generate and history cover prompt generation.
"""

from __future__ import annotations

import json

import click

from promptgen.errors import PromptgenError, TemplateNotFoundError
from promptgen.prompts.models import validate_template_name

from .utils import complete_template_names, fail, get_cli_context, read_content


@click.command("add")
@click.argument("name", required=False)
@click.option(
    "--file",
    "-f",
    "source_file",
    type=click.Path(exists=True, dir_okay=False, allow_dash=True),
    help="Read template content from a file ('-' for stdin)",
)
@click.option("--edit", "-e", "use_editor", is_flag=True, help="Write the content in your editor")
@click.pass_context
def add(ctx: click.Context, name: str | None, source_file: str | None, use_editor: bool) -> None:
    """Add a new prompt template.

    Content is read from --file, your editor (--edit), or stdin until EOF.
    """
    cli_ctx = get_cli_context(ctx)
    if name is None:
        name = click.prompt("Template name", err=True)

    try:
        name = validate_template_name(name)
        if cli_ctx.manager.exists(name):
            fail("Template already exists. Use update command to modify it.")
        content = read_content(cli_ctx, source_file, use_editor)
        template = cli_ctx.manager.create(name, content)
    except PromptgenError as e:
        fail(f"Error: {e}")

    click.echo(f"Template saved with version {template.version}.")


@click.command("list")
@click.option("--json", "json_format", is_flag=True, help="Output as JSON")
@click.pass_context
def list_templates(ctx: click.Context, json_format: bool) -> None:
    """List all prompt templates with versions."""
    cli_ctx = get_cli_context(ctx)
    try:
        summaries = cli_ctx.manager.list_all()
    except PromptgenError as e:
        fail(f"Error listing templates: {e}")

    if json_format:
        click.echo(json.dumps([s.to_dict() for s in summaries], indent=2))
        return

    if not summaries:
        click.echo("No templates found.")
        return

    click.echo("Templates:")
    for summary in summaries:
        click.echo(f" - {summary.name} (version {summary.version})")


@click.command("delete")
@click.argument("name", shell_complete=complete_template_names)
@click.option("--json", "json_format", is_flag=True, help="Output the result as JSON")
@click.pass_context
def delete(ctx: click.Context, name: str, json_format: bool) -> None:
    """Delete a prompt template and all versions."""
    cli_ctx = get_cli_context(ctx)
    try:
        result = cli_ctx.manager.delete(name)
    except TemplateNotFoundError:
        fail(f"No such template found: {name}")
    except PromptgenError as e:
        fail(f"Error: {e}")

    if json_format:
        click.echo(json.dumps(result.to_dict(), indent=2))

    if result.partial:
        click.echo(f"Warning: {result.warning}", err=True)
        raise SystemExit(1)

    if not json_format:
        click.echo(f"Deleted template and all versions: {name}")


@click.command("update")
@click.argument("name", shell_complete=complete_template_names)
@click.option(
    "--file",
    "-f",
    "source_file",
    type=click.Path(exists=True, dir_okay=False, allow_dash=True),
    help="Read template content from a file ('-' for stdin)",
)
@click.option(
    "--edit",
    "-e",
    "use_editor",
    is_flag=True,
    help="Edit the current content in your editor",
)
@click.pass_context
def update(ctx: click.Context, name: str, source_file: str | None, use_editor: bool) -> None:
    """Update a prompt template by name (increments version)."""
    cli_ctx = get_cli_context(ctx)
    try:
        current = cli_ctx.manager.get_latest(name)
        content = read_content(cli_ctx, source_file, use_editor, seed_text=current.content)
        template = cli_ctx.manager.update(name, content)
    except TemplateNotFoundError:
        fail(f"Template not found: {name}")
    except PromptgenError as e:
        fail(f"Error: {e}")

    click.echo(f'Template "{name}" updated to version {template.version}.')


@click.command("review")
@click.argument("name", shell_complete=complete_template_names)
@click.pass_context
def review(ctx: click.Context, name: str) -> None:
    """Show latest version content of a prompt template."""
    cli_ctx = get_cli_context(ctx)
    try:
        template = cli_ctx.manager.get_latest(name)
    except TemplateNotFoundError:
        fail(f'Template "{name}" not found.')
    except PromptgenError as e:
        fail(f"Error: {e}")

    click.echo(f'Template "{name}" (version {template.version}) content:\n')
    click.echo(template.content)


@click.command("versions")
@click.argument("name", shell_complete=complete_template_names)
@click.pass_context
def versions(ctx: click.Context, name: str) -> None:
    """List all versions of a template."""
    cli_ctx = get_cli_context(ctx)
    try:
        numbers = cli_ctx.manager.list_versions(name)
    except PromptgenError as e:
        fail(f"Error listing versions: {e}")

    if not numbers:
        fail(f'No versions found for template "{name}"')

    click.echo(f'Versions for template "{name}":')
    for number in numbers:
        click.echo(f"Version {number}")


@click.command("view")
@click.argument("name", shell_complete=complete_template_names)
@click.argument("version", type=click.IntRange(min=1))
@click.pass_context
def view(ctx: click.Context, name: str, version: int) -> None:
    """View a specific version of a template."""
    cli_ctx = get_cli_context(ctx)
    try:
        template = cli_ctx.manager.get_version(name, version)
    except TemplateNotFoundError:
        fail(f'Version {version} of template "{name}" not found.')
    except PromptgenError as e:
        fail(f"Error: {e}")

    click.echo(f'Template "{name}" version {version} content:\n')
    click.echo(template.content)


@click.command("repair")
@click.argument("name", shell_complete=complete_template_names)
@click.option("--json", "json_format", is_flag=True, help="Output the result as JSON")
@click.pass_context
def repair(ctx: click.Context, name: str, json_format: bool) -> None:
    """Check a template's latest pointer against its versions and fix it."""
    cli_ctx = get_cli_context(ctx)
    try:
        result = cli_ctx.manager.reconcile(name)
    except TemplateNotFoundError:
        fail(f"Template not found: {name}")
    except PromptgenError as e:
        fail(f"Error: {e}")

    if json_format:
        click.echo(json.dumps(result.to_dict(), indent=2))
    elif not result.repaired:
        click.echo(f'Template "{name}" is consistent (version {result.version}).')
    elif result.action == "rebuilt_latest":
        click.echo(f'Rebuilt latest pointer for "{name}" from version {result.version}.')
    else:
        click.echo(f'Restored version {result.version} of "{name}" from the latest pointer.')


@click.command("generate")
@click.argument("name", shell_complete=complete_template_names)
@click.argument("text", required=False)
@click.option("--clip", "from_clipboard", is_flag=True, help="Use the clipboard as input")
@click.option("--no-copy", is_flag=True, help="Do not copy the result to the clipboard")
@click.pass_context
def generate(
    ctx: click.Context,
    name: str,
    text: str | None,
    from_clipboard: bool,
    no_copy: bool,
) -> None:
    """Generate a prompt from a template.

    TEXT replaces the template's placeholder. Without TEXT, your editor
    opens; if it is closed empty, the clipboard is used instead. --clip
    reads the clipboard directly.
    """
    cli_ctx = get_cli_context(ctx)
    generator = cli_ctx.generator
    try:
        result = generator.generate(name, inline_text=text, from_clipboard=from_clipboard)
    except TemplateNotFoundError as e:
        fail(f"Error loading template: {e}")
    except PromptgenError as e:
        fail(f"Error: {e}")

    if result.input.source != "inline":
        click.echo(f"(Using input from {result.input.describe()})", err=True)

    click.echo(
        f"\nGenerated Prompt (from template version {result.template.version}):", err=True
    )
    click.echo(result.text)

    report = generator.deliver(result, copy=not no_copy)
    for warning in report.warnings:
        click.echo(f"Warning: {warning}", err=True)
    if report.copied:
        click.echo("\nPrompt copied to clipboard!", err=True)


@click.command("history")
@click.option("--limit", "-n", type=click.IntRange(min=1), help="Show only the last N entries")
@click.option(
    "--template",
    "-t",
    "template_name",
    shell_complete=complete_template_names,
    help="Only show generations of this template",
)
@click.option("--json", "json_format", is_flag=True, help="Output as JSON")
@click.pass_context
def history(
    ctx: click.Context, limit: int | None, template_name: str | None, json_format: bool
) -> None:
    """Show prompt generation history."""
    cli_ctx = get_cli_context(ctx)
    try:
        entries = cli_ctx.history.read(limit=limit, name=template_name)
    except PromptgenError as e:
        fail(f"Error reading history: {e}")

    if json_format:
        click.echo(json.dumps([e.to_dict() for e in entries], indent=2))
        return

    if not entries:
        click.echo("No history found.")
        return

    click.echo("Prompt Generation History:\n")
    for entry in entries:
        when = entry.timestamp.strftime("%Y-%m-%d %H:%M:%S %Z").strip()
        click.echo(f"{when}  {entry.name} (version {entry.version})")
