"""Collect multi-line text by opening the user's editor on a scratch file."""

from __future__ import annotations

import logging
import os

import click

from promptgen.errors import EditorError

logger = logging.getLogger(__name__)

DEFAULT_EDITOR = "vim"


def resolve_editor(configured: str | None = None) -> str:
    """Pick the editor command: config, then $VISUAL, then $EDITOR, then vim."""
    for candidate in (configured, os.environ.get("VISUAL"), os.environ.get("EDITOR")):
        if candidate and candidate.strip():
            return candidate.strip()
    return DEFAULT_EDITOR


class Editor:
    """Open an external editor and return what the user saved.

    click.edit creates the scratch file and removes it afterwards whether or
    not the editor succeeded. The call blocks until the editor exits.
    """

    def __init__(self, command: str | None = None, extension: str = ".txt") -> None:
        self.command = resolve_editor(command)
        self.extension = extension

    def edit(self, seed_text: str = "") -> str:
        """Return the scratch buffer contents after the editor exits.

        Raises:
            EditorError: If the editor cannot be started or exits with an error
        """
        logger.debug(f"Opening editor: {self.command}")
        try:
            result = click.edit(
                seed_text,
                editor=self.command,
                extension=self.extension,
                require_save=False,
            )
        except click.ClickException as e:
            raise EditorError(e.format_message()) from e
        return result or ""
