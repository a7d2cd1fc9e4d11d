"""Prompt generation: load a template, resolve input, render, deliver."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Protocol

from promptgen.errors import ClipboardUnavailableError, StorageIOError
from promptgen.prompts.inputs import (
    ClipboardReader,
    ResolvedInput,
    TextEditor,
    build_sources,
    resolve_input,
)
from promptgen.prompts.manager import TemplateManager
from promptgen.prompts.models import PromptTemplate
from promptgen.prompts.renderer import PromptRenderer
from promptgen.storage.history import HistoryEntry, HistoryLog

logger = logging.getLogger(__name__)


class ClipboardDevice(ClipboardReader, Protocol):
    def write(self, text: str) -> None: ...


@dataclass
class GenerationResult:
    """A rendered prompt and what it was built from."""

    template: PromptTemplate
    input: ResolvedInput
    text: str


@dataclass
class DeliveryReport:
    """What happened after rendering: clipboard copy and history append."""

    copied: bool = False
    history_entry: HistoryEntry | None = None
    warnings: list[str] = field(default_factory=list)


class PromptGenerator:
    """Turn a stored template plus user input into a finished prompt.

    Usage:
        generator = PromptGenerator(manager, renderer, history, clipboard, editor)
        result = generator.generate("summarize", inline_text="some text")
        report = generator.deliver(result)
    """

    def __init__(
        self,
        manager: TemplateManager,
        renderer: PromptRenderer,
        history: HistoryLog,
        clipboard: ClipboardDevice,
        editor: TextEditor,
    ) -> None:
        self.manager = manager
        self.renderer = renderer
        self.history = history
        self.clipboard = clipboard
        self.editor = editor

    def generate(
        self,
        name: str,
        inline_text: str | None = None,
        from_clipboard: bool = False,
    ) -> GenerationResult:
        """Render the latest version of a template.

        The template is loaded and checked before any input source runs, so
        a missing or malformed template never opens the editor.

        Raises:
            TemplateNotFoundError: If the template does not exist
            TemplateSyntaxError: If the template content cannot be rendered
            ClipboardUnavailableError: If the clipboard was requested and failed
            InputUnavailableError: If neither the editor nor the clipboard
                produced text
        """
        template = self.manager.get_latest(name)
        self.renderer.validate(template.content, name=template.name)

        sources = build_sources(inline_text, from_clipboard, self.clipboard, self.editor)
        resolved = resolve_input(sources)
        logger.debug(f"Using input from {resolved.describe()} for '{name}'")

        text = self.renderer.render(template.content, resolved.text, name=template.name)
        return GenerationResult(template=template, input=resolved, text=text)

    def deliver(self, result: GenerationResult, copy: bool = True) -> DeliveryReport:
        """Copy the prompt to the clipboard and record it in the history.

        Neither step is fatal: the prompt has already been generated, so
        failures are returned as warnings.
        """
        report = DeliveryReport()

        if copy:
            try:
                self.clipboard.write(result.text)
                report.copied = True
            except ClipboardUnavailableError as e:
                logger.warning(f"Failed to copy prompt to clipboard: {e}")
                report.warnings.append(f"failed to copy to clipboard: {e}")

        try:
            report.history_entry = self.history.append(
                result.template.name, result.template.version
            )
        except StorageIOError as e:
            logger.warning(f"Failed to record generation history: {e}")
            report.warnings.append(f"failed to record history: {e}")

        return report
