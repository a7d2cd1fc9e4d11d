"""
Shared utilities for CLI commands.
"""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass
from functools import cached_property
from typing import Any, NoReturn, TextIO

import click
from click.shell_completion import CompletionItem

from promptgen.config.app import PromptgenConfig, load_config
from promptgen.config.logging import LoggingSettings
from promptgen.integrations.clipboard import Clipboard
from promptgen.integrations.editor import Editor
from promptgen.prompts.generator import PromptGenerator
from promptgen.prompts.manager import TemplateManager
from promptgen.prompts.renderer import PromptRenderer
from promptgen.storage.history import HistoryLog
from promptgen.storage.templates import LocalTemplateStore

logger = logging.getLogger(__name__)

LOG_TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass
class CLIContext:
    """Parsed global options and the services built from them.

    Stored on ``click.Context.obj`` by the root group and handed to every
    command through ``get_cli_context``.
    """

    config: PromptgenConfig

    @cached_property
    def store(self) -> LocalTemplateStore:
        return LocalTemplateStore(self.config.get_templates_dir())

    @cached_property
    def manager(self) -> TemplateManager:
        return TemplateManager(self.store, reconcile_on_load=self.config.reconcile_on_load)

    @cached_property
    def history(self) -> HistoryLog:
        return HistoryLog(self.config.get_history_file())

    @cached_property
    def renderer(self) -> PromptRenderer:
        return PromptRenderer(self.config.placeholder)

    @cached_property
    def clipboard(self) -> Clipboard:
        return Clipboard(self.config.clipboard)

    @cached_property
    def editor(self) -> Editor:
        return Editor(self.config.editor)

    @cached_property
    def generator(self) -> PromptGenerator:
        return PromptGenerator(
            manager=self.manager,
            renderer=self.renderer,
            history=self.history,
            clipboard=self.clipboard,
            editor=self.editor,
        )


def global_overrides(params: dict[str, Any]) -> dict[str, Any]:
    """Map root group options onto config keys for ``load_config``.

    Options left unset map to None and do not override the config file.
    """
    return {
        "templates_dir": params.get("templates_dir"),
        "logging.level": "debug" if params.get("verbose") else None,
    }


def get_cli_context(ctx: click.Context) -> CLIContext:
    """Return the CLIContext set up by the root group."""
    obj = ctx.find_object(CLIContext)
    if obj is None:
        obj = CLIContext(config=load_config())
        ctx.obj = obj
    return obj


class JsonLogFormatter(logging.Formatter):
    """Format each record as a single-line JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def setup_logging(settings: LoggingSettings, stream: TextIO | None = None) -> logging.Handler:
    """
    Configure logging for CLI.

    Replaces any handler installed by a previous call, so repeated
    invocations in one process log to the current stderr.

    Args:
        settings: Logging configuration (``--verbose`` arrives as level "debug")
        stream: Destination stream (default: sys.stderr)

    Returns:
        The installed handler
    """
    log_level = getattr(logging, settings.level.upper(), logging.WARNING)

    handler = logging.StreamHandler(stream or sys.stderr)
    if settings.format == "json":
        handler.setFormatter(JsonLogFormatter(datefmt=LOG_DATE_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(LOG_TEXT_FORMAT, datefmt=LOG_DATE_FORMAT))

    logger = logging.getLogger("promptgen")
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
    logger.addHandler(handler)
    logger.setLevel(log_level)
    return handler


def fail(message: str) -> NoReturn:
    """Print an error to stderr and exit with status 1."""
    click.echo(message, err=True)
    raise SystemExit(1)


def read_content(
    cli_ctx: CLIContext,
    source_file: str | None,
    use_editor: bool,
    seed_text: str = "",
) -> str:
    """Read template content from a file, the editor, or stdin until EOF."""
    if source_file is not None:
        try:
            with click.open_file(source_file, encoding="utf-8") as f:
                return f.read()
        except (OSError, UnicodeDecodeError) as e:
            fail(f"Error: cannot read {source_file}: {e}")

    if use_editor:
        content = cli_ctx.editor.edit(seed_text)
        if not content.strip():
            fail("Template content is empty; nothing saved.")
        return content

    stdin = click.get_text_stream("stdin")
    if stdin.isatty():
        click.echo("Enter template content (end with EOF/Ctrl+D):", err=True)
    return stdin.read()


def complete_template_names(
    ctx: click.Context, param: click.Parameter, incomplete: str
) -> list[CompletionItem]:
    """Shell completion callback listing stored template names."""
    try:
        params = ctx.find_root().params
        config = load_config(params.get("config"), cli_overrides=global_overrides(params))
        store = LocalTemplateStore(config.get_templates_dir())
        names = sorted({t.name for t in store.list_latest()})
    except Exception as e:
        # Completion must never break the shell
        logger.debug(f"Template name completion failed: {e}")
        return []
    return [CompletionItem(name) for name in names if name.startswith(incomplete)]
